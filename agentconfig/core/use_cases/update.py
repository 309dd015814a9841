"""
Update use case — refresh installed agents from the central repository.

Every run re-detects the stack from scratch. Existing configuration is
backed up before the agents directory is replaced; workflows are only
added when missing. ``dry_run`` reports what would change and writes
nothing.
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
from agentconfig.core.services.git_ops import has_uncommitted_changes, is_git_repo
from agentconfig.core.use_cases.install import detect_and_select

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Result of the update use case."""

    project_root: Path | None = None
    dry_run: bool = False
    stack: StackResult | None = None
    manifest: AgentManifest | None = None
    available: list[str] = field(default_factory=list)
    previously_installed: list[str] = field(default_factory=list)
    installed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    backup_path: str = ""
    workflows_created: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["project_root"] = str(self.project_root)
        result["dry_run"] = self.dry_run
        result["stack"] = self.stack.as_csv() if self.stack else ""
        result["manifest"] = self.manifest.to_dict() if self.manifest else {}
        if self.dry_run:
            result["available"] = self.available
        result["previously_installed"] = self.previously_installed
        result["installed"] = self.installed
        result["missing"] = self.missing
        result["backup_path"] = self.backup_path
        result["workflows_created"] = self.workflows_created
        return result


def run_update(
    project_root: Path,
    settings: Settings | None = None,
    *,
    dry_run: bool = False,
    force: bool = False,
    require_git: bool = True,
) -> UpdateResult:
    """Update installed AI agents.

    Args:
        project_root: Repository to update.
        settings: Installer settings (defaults if None).
        dry_run: Report planned changes without writing.
        force: Proceed even with uncommitted changes.
        require_git: Refuse to run outside a git repository.

    Returns:
        UpdateResult describing what changed (or would change).
    """
    settings = settings or Settings()
    root = project_root.resolve()
    result = UpdateResult(project_root=root, dry_run=dry_run)

    if require_git:
        if not is_git_repo(root):
            result.error = "This directory is not a git repository."
            return result
        if not force and has_uncommitted_changes(root):
            result.error = (
                "You have uncommitted changes. Please commit or stash them "
                "before updating, or use --force to proceed."
            )
            return result

    logger.info("Detecting project tech stack...")
    result.stack, result.manifest = detect_and_select(root, settings)

    agents = workspace_ops.agents_dir(root, settings.config_dir)
    result.previously_installed = agent_fetch.list_agents(agents)

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

        if dry_run:
            if source_root is not None:
                result.available = agent_fetch.list_agents(source_root / "agents")
            backup = workspace_ops.backup_config_dir(root, settings.config_dir, dry_run=True)
            result.backup_path = backup.name if backup else ""
            logger.warning("[DRY RUN] Would update agents in: %s", agents)
            workflows = workspace_ops.setup_workflows(
                root, source_root, settings.workflows_dir, dry_run=True
            )
            result.workflows_created = workflows["created"]
            return result

        backup = workspace_ops.backup_config_dir(root, settings.config_dir)
        result.backup_path = backup.name if backup else ""

        workspace_ops.reset_agents_dir(root, settings.config_dir)
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
            if result.backup_path:
                result.error += f" (previous configuration kept in {result.backup_path})"
            return result

        result.installed = outcome["installed"]
        result.missing = outcome["missing"]

        workflows = workspace_ops.setup_workflows(root, source_root, settings.workflows_dir)
        result.workflows_created = workflows["created"]

    workspace_ops.write_update_script(root)
    return result
