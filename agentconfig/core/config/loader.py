"""
Configuration loader — reads installer settings into a Settings model.

Settings come from, in increasing precedence:
    built-in defaults  <  .agentconfig.yml in the project root
    <  environment (CONFIG_REPO, CONFIG_BRANCH, AGENTCONFIG_RAW_BASE_URL)
    <  explicit overrides (CLI flags)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Optional per-project settings file
SETTINGS_FILE = ".agentconfig.yml"

DEFAULT_CONFIG_REPO = "company/ai-agent-config"
DEFAULT_CONFIG_BRANCH = "main"
DEFAULT_CONFIG_DIR = ".claude-agents"
DEFAULT_WORKFLOWS_DIR = ".github/workflows"

_ENV_OVERRIDES = {
    "CONFIG_REPO": "config_repo",
    "CONFIG_BRANCH": "config_branch",
    "AGENTCONFIG_RAW_BASE_URL": "raw_base_url",
}


class ConfigError(Exception):
    """Raised when installer settings are invalid."""


class Settings(BaseModel):
    """Where agents come from and where they are installed."""

    config_repo: str = DEFAULT_CONFIG_REPO       # owner/repo on GitHub
    config_branch: str = DEFAULT_CONFIG_BRANCH
    config_dir: str = DEFAULT_CONFIG_DIR         # relative to project root
    workflows_dir: str = DEFAULT_WORKFLOWS_DIR
    raw_base_url: str = ""                       # per-file fetch instead of archive
    timeout: float = 30.0
    composer_implies_laravel: bool = False


def load_settings(
    project_root: Path | None = None,
    path: Path | None = None,
    **overrides: object,
) -> Settings:
    """Load installer settings.

    Args:
        project_root: Directory holding an optional ``.agentconfig.yml``.
        path: Explicit settings file; must exist if given.
        **overrides: Highest-precedence values. ``None`` values are ignored.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the settings file is unreadable or invalid.
    """
    data: dict = {}

    if path is None and project_root is not None:
        candidate = project_root / SETTINGS_FILE
        if candidate.is_file():
            path = candidate
    elif path is not None and not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    if path is not None:
        data.update(_read_yaml(path))

    for env_var, key in _ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            data[key] = value

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.debug(
        "Settings: repo=%s branch=%s dir=%s",
        settings.config_repo, settings.config_branch, settings.config_dir,
    )
    return settings


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data
