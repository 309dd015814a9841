"""
Git checks for the install and update flows.

Agents are only installed into git repositories, and updates refuse
to run over uncommitted changes unless forced.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_git(
    *args: str,
    cwd: Path,
    timeout: int = 15,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result."""
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


def is_git_repo(root: Path) -> bool:
    """True if ``root`` is inside a git work tree."""
    try:
        result = run_git("rev-parse", "--git-dir", cwd=root)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("git rev-parse failed in %s: %s", root, e)
        return False
    return result.returncode == 0


def has_uncommitted_changes(root: Path) -> bool:
    """True if tracked files differ from HEAD.

    A repository without commits, or one where git can't run, is
    reported as clean.
    """
    try:
        result = run_git("diff-index", "--quiet", "HEAD", "--", cwd=root)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("git diff-index failed in %s: %s", root, e)
        return False
    # 1 = differences; 128 = no HEAD yet
    return result.returncode == 1
