"""
Install use case — first-time setup of AI agents in a repository.

Ties together detection, selection, the fetch layer and the
workspace operations:

    git check → detect → select → download → structure → agents
    → workflows → update script → .gitignore
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from agentconfig.core.config.loader import Settings
from agentconfig.core.models.agent import AgentManifest
from agentconfig.core.models.stack import StackResult
from agentconfig.core.services import agent_fetch, workspace_ops
from agentconfig.core.services.detection import build_rules, detect_stack
from agentconfig.core.services.git_ops import is_git_repo
from agentconfig.core.services.selection import select_agents

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of the install use case."""

    project_root: Path | None = None
    stack: StackResult | None = None
    manifest: AgentManifest | None = None
    installed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    workflows_created: list[str] = field(default_factory=list)
    workflows_skipped: list[str] = field(default_factory=list)
    update_script: str = ""
    gitignore_updated: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["project_root"] = str(self.project_root)
        result["stack"] = self.stack.as_csv() if self.stack else ""
        result["manifest"] = self.manifest.to_dict() if self.manifest else {}
        result["installed"] = self.installed
        result["missing"] = self.missing
        result["workflows"] = {
            "created": self.workflows_created,
            "skipped": self.workflows_skipped,
        }
        result["update_script"] = self.update_script
        result["gitignore_updated"] = self.gitignore_updated
        return result


def detect_and_select(project_root: Path, settings: Settings) -> tuple[StackResult, AgentManifest]:
    """Run the detector with the configured policy and expand its labels."""
    rules = build_rules(composer_implies_laravel=settings.composer_implies_laravel)
    stack = detect_stack(project_root, rules)
    return stack, select_agents(stack)


def run_install(
    project_root: Path,
    settings: Settings | None = None,
    *,
    require_git: bool = True,
) -> InstallResult:
    """Install AI agents into a project.

    Args:
        project_root: Repository to install into.
        settings: Installer settings (defaults if None).
        require_git: Refuse to run outside a git repository.

    Returns:
        InstallResult describing what was written.
    """
    settings = settings or Settings()
    root = project_root.resolve()
    result = InstallResult(project_root=root)

    if require_git and not is_git_repo(root):
        result.error = (
            "This directory is not a git repository. "
            "Please run from within a git repository."
        )
        return result

    logger.info("Detecting project tech stack...")
    result.stack, result.manifest = detect_and_select(root, settings)

    with tempfile.TemporaryDirectory(prefix="agentconfig-") as tmp:
        source_root: Path | None = None
        if not settings.raw_base_url:
            try:
                source_root = agent_fetch.download_archive(
                    settings.config_repo,
                    settings.config_branch,
                    Path(tmp),
                    timeout=settings.timeout,
                )
            except agent_fetch.FetchError as e:
                result.error = str(e)
                return result

        agents = workspace_ops.create_structure(root, settings.config_dir)

        try:
            outcome = agent_fetch.materialize(
                result.manifest,
                agents,
                source_root=source_root,
                base_url=settings.raw_base_url,
                timeout=settings.timeout,
            )
        except agent_fetch.FetchError as e:
            result.error = str(e)
            return result

        result.installed = outcome["installed"]
        result.missing = outcome["missing"]

        workflows = workspace_ops.setup_workflows(root, source_root, settings.workflows_dir)
        result.workflows_created = workflows["created"]
        result.workflows_skipped = workflows["skipped"]

    result.update_script = workspace_ops.write_update_script(root).name
    result.gitignore_updated = workspace_ops.ensure_gitignore(root)
    return result
