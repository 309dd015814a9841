"""
Agent model — resource identifiers and the manifest built from them.

An agent is a JSON definition file living in a bundle directory of the
central configuration repository (``agents/<bundle>/<name>.json``).
Its contents are opaque here; only the identifier matters.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AgentResource(BaseModel):
    """One agent definition to fetch or copy."""

    model_config = ConfigDict(frozen=True)

    bundle: str   # label-dir: common, laravel, nextjs, mobile
    name: str     # file stem, e.g. "code-reviewer"

    @property
    def identifier(self) -> str:
        return f"{self.bundle}/{self.name}"

    @property
    def relative_path(self) -> str:
        """Path inside the configuration repository."""
        return f"agents/{self.bundle}/{self.name}.json"


class AgentManifest(BaseModel):
    """Resources selected for a stack result, common bundle first."""

    labels: list[str] = Field(default_factory=list)
    resources: list[AgentResource] = Field(default_factory=list)

    @property
    def identifiers(self) -> list[str]:
        return [r.identifier for r in self.resources]

    @property
    def bundles(self) -> list[str]:
        """Bundle directories in first-use order."""
        return list(dict.fromkeys(r.bundle for r in self.resources))

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "bundles": self.bundles,
            "resources": self.identifiers,
        }
