"""agentconfig — install and update AI agent definitions per project stack."""

__version__ = "0.1.0"
