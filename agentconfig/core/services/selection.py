"""
Selection service — map detected stack labels to agent resources.

The common bundle is always selected. Each stack label then adds the
bundle it routes to; several labels may share a bundle (nextjs and
nodejs, expo and reactnative), in which case it is selected once.
Labels with no bundle contribute nothing beyond the common set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from agentconfig.core.models.agent import AgentManifest, AgentResource
from agentconfig.core.models.stack import StackLabel, StackResult

logger = logging.getLogger(__name__)


# ── Bundles ─────────────────────────────────────────────────────

COMMON_BUNDLE = "common"

BUNDLES: dict[str, tuple[str, ...]] = {
    COMMON_BUNDLE: (
        "team-lead-orchestrator",
        "code-implementer",
        "code-reviewer",
        "security-auditor",
    ),
    "laravel": ("laravel-fullstack-dev", "laravel-backend-architect"),
    "nextjs": ("nextjs-fullstack-dev", "nodejs-backend-dev"),
    "mobile": ("react-native-dev", "expo-dev"),
}

# Labels absent here (django, flask, fastapi, rails, go, common)
# have no bundle of their own yet.
LABEL_BUNDLES: dict[str, str] = {
    StackLabel.LARAVEL.value: "laravel",
    StackLabel.NEXTJS.value: "nextjs",
    StackLabel.NODEJS.value: "nextjs",
    StackLabel.REACTNATIVE.value: "mobile",
    StackLabel.EXPO.value: "mobile",
}

_KNOWN_LABELS = frozenset(label.value for label in StackLabel)


def bundle_resources(bundle: str) -> list[AgentResource]:
    """Resources of one bundle, in their fixed order."""
    return [AgentResource(bundle=bundle, name=name) for name in BUNDLES.get(bundle, ())]


def bundle_for(label: str) -> str | None:
    """The bundle a label routes to, or None."""
    return LABEL_BUNDLES.get(str(label))


def select_agents(labels: StackResult | Iterable[str]) -> AgentManifest:
    """Expand stack labels into an ordered agent manifest.

    Args:
        labels: A detector result, or any iterable of label strings.
            Unknown labels are ignored.

    Returns:
        AgentManifest with common resources first, then per-label
        resources in label order, duplicates collapsed.
    """
    label_list = labels.labels if isinstance(labels, StackResult) else list(labels)
    names = [str(label) for label in label_list]

    resources: list[AgentResource] = bundle_resources(COMMON_BUNDLE)
    for name in names:
        bundle = bundle_for(name)
        if bundle is None:
            if name not in _KNOWN_LABELS:
                logger.debug("Unknown stack label '%s' — no agents selected", name)
            continue
        resources.extend(bundle_resources(bundle))

    manifest = AgentManifest(
        labels=names,
        resources=list(dict.fromkeys(resources)),
    )
    logger.debug("Selected %d agents: %s", len(manifest.resources), manifest.identifiers)
    return manifest
