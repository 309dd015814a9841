"""
Domain models — Pydantic types for agentconfig.

All models are re-exported here for convenient access:

    from agentconfig.core.models import StackLabel, StackResult, AgentManifest
"""

from agentconfig.core.models.agent import AgentManifest, AgentResource
from agentconfig.core.models.stack import DetectionRule, StackLabel, StackResult

__all__ = [
    # agent.py
    "AgentManifest",
    "AgentResource",
    # stack.py
    "DetectionRule",
    "StackLabel",
    "StackResult",
]
