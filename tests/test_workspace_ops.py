"""
Tests for workspace operations — structure, workflows, backup,
update script, .gitignore.
"""

import os
from datetime import datetime
from pathlib import Path

from agentconfig.core.services.workspace_ops import (
    GITIGNORE_MARKER,
    UPDATE_SCRIPT,
    backup_config_dir,
    create_structure,
    ensure_gitignore,
    reset_agents_dir,
    setup_workflows,
    write_update_script,
)

from tests.conftest import write_files


class TestStructure:
    def test_create_structure(self, project: Path):
        agents = create_structure(project, ".claude-agents")
        assert agents == project / ".claude-agents" / "agents"
        assert agents.is_dir()

    def test_create_structure_idempotent(self, project: Path):
        create_structure(project, ".claude-agents")
        create_structure(project, ".claude-agents")
        assert (project / ".claude-agents" / "agents").is_dir()

    def test_reset_agents_dir(self, project: Path):
        write_files(project, {
            ".claude-agents/agents/common/old.json": "{}",
            ".claude-agents/settings.json": "{}",
        })
        agents = reset_agents_dir(project, ".claude-agents")
        assert list(agents.iterdir()) == []
        assert (project / ".claude-agents" / "settings.json").is_file()


class TestBackup:
    NOW = datetime(2024, 3, 5, 14, 7, 9)

    def test_backup_copies(self, project: Path):
        write_files(project, {".claude-agents/agents/common/a.json": "{}"})
        backup = backup_config_dir(project, ".claude-agents", now=self.NOW)
        assert backup == project / ".claude-agents.backup.20240305_140709"
        assert (backup / "agents" / "common" / "a.json").is_file()

    def test_nothing_to_back_up(self, project: Path):
        assert backup_config_dir(project, ".claude-agents") is None

    def test_dry_run_writes_nothing(self, project: Path):
        write_files(project, {".claude-agents/agents/common/a.json": "{}"})
        backup = backup_config_dir(project, ".claude-agents", dry_run=True, now=self.NOW)
        assert backup is not None
        assert not backup.exists()


class TestWorkflows:
    def test_creates_missing(self, project: Path, config_repo: Path):
        result = setup_workflows(project, config_repo, ".github/workflows")
        assert result == {"created": ["ai-agent.yml", "security-audit.yml"], "skipped": []}
        assert (project / ".github/workflows/ai-agent.yml").read_text() == "name: AI Agent\n"

    def test_never_overwrites(self, project: Path, config_repo: Path):
        write_files(project, {".github/workflows/ai-agent.yml": "custom\n"})
        result = setup_workflows(project, config_repo, ".github/workflows")
        assert result == {"created": ["security-audit.yml"], "skipped": ["ai-agent.yml"]}
        assert (project / ".github/workflows/ai-agent.yml").read_text() == "custom\n"

    def test_dry_run(self, project: Path, config_repo: Path):
        result = setup_workflows(project, config_repo, ".github/workflows", dry_run=True)
        assert result["created"] == ["ai-agent.yml", "security-audit.yml"]
        assert not (project / ".github").exists()

    def test_missing_in_source(self, project: Path, config_repo: Path):
        (config_repo / "workflows" / "security-audit.yml").unlink()
        result = setup_workflows(project, config_repo, ".github/workflows")
        assert result["created"] == ["ai-agent.yml"]

    def test_no_source(self, project: Path):
        assert setup_workflows(project, None, ".github/workflows") == {
            "created": [], "skipped": [],
        }


class TestUpdateScript:
    def test_written_and_executable(self, project: Path):
        script = write_update_script(project)
        assert script.name == UPDATE_SCRIPT
        assert os.access(script, os.X_OK)
        body = script.read_text()
        assert body.startswith("#!/bin/bash")
        assert "agentconfig agents update" in body


class TestGitignore:
    def test_creates_file(self, project: Path):
        assert ensure_gitignore(project) is True
        assert GITIGNORE_MARKER in (project / ".gitignore").read_text()

    def test_appends_once(self, project: Path):
        (project / ".gitignore").write_text("node_modules/\n")
        assert ensure_gitignore(project) is True
        assert ensure_gitignore(project) is False
        content = (project / ".gitignore").read_text()
        assert content.startswith("node_modules/\n")
        assert content.count(GITIGNORE_MARKER) == 1

    def test_marker_must_start_line(self, project: Path):
        (project / ".gitignore").write_text("foo  # AI Agent Config\n")
        assert ensure_gitignore(project) is True

    def test_non_utf8_gitignore(self, project: Path):
        (project / ".gitignore").write_bytes(b"caf\xe9/\n")
        assert ensure_gitignore(project) is True
        assert ensure_gitignore(project) is False
        raw = (project / ".gitignore").read_bytes()
        assert raw.startswith(b"caf\xe9/\n")
        assert raw.count(GITIGNORE_MARKER.encode()) == 1
