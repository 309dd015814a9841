"""
Workspace operations — everything the installer writes into a client
project besides the agent files themselves.

Non-destructive by default: workflows are only created when absent,
the ``.gitignore`` marker is only appended once, and an update backs
up the existing configuration directory before replacing agents.
"""

from __future__ import annotations

import logging
import shutil
import stat
from datetime import datetime
from pathlib import Path

from agentconfig.core.observability.logging_config import success

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Constants
# ═══════════════════════════════════════════════════════════════════

WORKFLOW_FILES = ("ai-agent.yml", "security-audit.yml")

UPDATE_SCRIPT = "update-ai-agents.sh"

GITIGNORE_MARKER = "# AI Agent Config"
GITIGNORE_BLOCK = "\n# AI Agent Config (managed centrally)\n"

_UPDATE_SCRIPT_BODY = """\
#!/bin/bash
#
# Update AI agents from the central configuration repository.
#
# Usage: ./update-ai-agents.sh [--repo REPO] [--branch BRANCH] [--dry-run] [--force]

set -e

cd "$( cd "$( dirname "${BASH_SOURCE[0]}" )" && pwd )"
exec agentconfig agents update "$@"
"""

_BACKUP_STAMP = "%Y%m%d_%H%M%S"


# ═══════════════════════════════════════════════════════════════════
#  Structure
# ═══════════════════════════════════════════════════════════════════


def agents_dir(root: Path, config_dir: str) -> Path:
    return root / config_dir / "agents"


def create_structure(root: Path, config_dir: str) -> Path:
    """Create ``<config_dir>/agents`` and return it."""
    target = agents_dir(root, config_dir)
    target.mkdir(parents=True, exist_ok=True)
    success(logger, "Created %s directory", config_dir)
    return target


def reset_agents_dir(root: Path, config_dir: str) -> Path:
    """Remove all installed agents and recreate an empty agents dir."""
    target = agents_dir(root, config_dir)
    if target.exists():
        shutil.rmtree(target)
    target.mkdir(parents=True)
    return target


def backup_config_dir(
    root: Path,
    config_dir: str,
    *,
    dry_run: bool = False,
    now: datetime | None = None,
) -> Path | None:
    """Copy the configuration dir to ``<config_dir>.backup.<stamp>``.

    Returns:
        The backup path (planned path on dry-run), or None when there
        is nothing to back up.
    """
    source = root / config_dir
    if not source.is_dir():
        return None

    stamp = (now or datetime.now()).strftime(_BACKUP_STAMP)
    backup = root / f"{config_dir}.backup.{stamp}"
    n = 1
    while backup.exists():
        backup = root / f"{config_dir}.backup.{stamp}_{n}"
        n += 1
    logger.info("Backing up existing configs to: %s", backup.name)

    if not dry_run:
        shutil.copytree(source, backup)
        success(logger, "Backup created")
    return backup


# ═══════════════════════════════════════════════════════════════════
#  Workflows
# ═══════════════════════════════════════════════════════════════════


def setup_workflows(
    root: Path,
    source_root: Path | None,
    workflows_dir: str,
    *,
    dry_run: bool = False,
) -> dict[str, list[str]]:
    """Copy the GitHub workflows that the project doesn't have yet.

    Existing workflow files are never overwritten. Without a source
    (raw-URL mode), nothing is created.

    Returns:
        ``{"created": [...], "skipped": [...]}`` of workflow file names.
        On dry-run, ``created`` lists what would be created.
    """
    target_dir = root / workflows_dir
    created: list[str] = []
    skipped: list[str] = []

    for name in WORKFLOW_FILES:
        target = target_dir / name
        if target.exists():
            logger.info("%s already exists, skipping...", name)
            skipped.append(name)
            continue

        source = source_root / "workflows" / name if source_root else None
        if source is None or not source.is_file():
            logger.debug("Workflow %s not available in source", name)
            continue

        if dry_run:
            logger.warning("[DRY RUN] Would create: %s/%s", workflows_dir, name)
        else:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            success(logger, "Created %s workflow", name)
        created.append(name)

    return {"created": created, "skipped": skipped}


# ═══════════════════════════════════════════════════════════════════
#  Update script + .gitignore
# ═══════════════════════════════════════════════════════════════════


def write_update_script(root: Path) -> Path:
    """Write the executable ``update-ai-agents.sh`` wrapper."""
    script = root / UPDATE_SCRIPT
    script.write_text(_UPDATE_SCRIPT_BODY, encoding="utf-8")
    mode = script.stat().st_mode
    script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    success(logger, "Created %s script", UPDATE_SCRIPT)
    return script


def ensure_gitignore(root: Path) -> bool:
    """Append the AI agent marker block to ``.gitignore`` once.

    Returns:
        True if the file was changed.
    """
    path = root / ".gitignore"
    content = path.read_text(encoding="utf-8", errors="replace") if path.is_file() else ""

    if any(line.startswith(GITIGNORE_MARKER) for line in content.splitlines()):
        logger.info(".gitignore already configured")
        return False

    with open(path, "a", encoding="utf-8") as f:
        f.write(GITIGNORE_BLOCK)
    success(logger, "Updated .gitignore")
    return True
