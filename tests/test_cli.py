"""
Tests for CLI commands — detect, manifest, agents install/update/list.
"""

import json
from pathlib import Path

from click.testing import CliRunner

from agentconfig.main import cli, detect_stack_cli

from tests.conftest import write_files


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "agentconfig" in result.output
        assert "detect" in result.output
        assert "agents" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestDetectCommand:
    def test_byte_exact_output(self, project: Path):
        write_files(project, {"composer.json": '"laravel"', "next.config.js": ""})
        result = CliRunner().invoke(cli, ["detect", str(project)])
        assert result.exit_code == 0
        assert result.stdout == "laravel,nextjs\n"

    def test_common(self, project: Path):
        result = CliRunner().invoke(cli, ["detect", str(project)])
        assert result.stdout == "common\n"

    def test_defaults_to_cwd(self, project: Path, monkeypatch):
        write_files(project, {"go.mod": ""})
        monkeypatch.chdir(project)
        result = CliRunner().invoke(cli, ["detect"])
        assert result.stdout == "go\n"

    def test_verbose_logs_stay_off_stdout(self, project: Path):
        write_files(project, {"go.mod": ""})
        result = CliRunner().invoke(cli, ["--debug", "detect", str(project)])
        assert result.exit_code == 0
        assert result.stdout == "go\n"

    def test_json(self, project: Path):
        write_files(project, {"app.json": '{"expo": {}}', "android/": ""})
        result = CliRunner().invoke(cli, ["detect", str(project), "--json"])
        assert json.loads(result.stdout) == {"labels": ["expo"]}

    def test_settings_policy_applies(self, project: Path):
        write_files(project, {
            "composer.json": "{}",
            ".agentconfig.yml": "composer_implies_laravel: true\n",
        })
        result = CliRunner().invoke(cli, ["detect", str(project)])
        assert result.stdout == "laravel\n"

    def test_bad_settings(self, project: Path):
        write_files(project, {".agentconfig.yml": "- a list\n"})
        result = CliRunner().invoke(cli, ["detect", str(project)])
        assert result.exit_code == 1


class TestDetectStackScript:
    def test_drop_in_output(self, project: Path):
        write_files(project, {"requirements.txt": '"flask"', "Gemfile": "gem 'rails'"})
        result = CliRunner().invoke(detect_stack_cli, [str(project)])
        assert result.exit_code == 0
        assert result.stdout == "flask,rails\n"


class TestManifestCommand:
    def test_lists_identifiers(self, project: Path):
        write_files(project, {"ios/": ""})
        result = CliRunner().invoke(cli, ["manifest", str(project)])
        assert result.exit_code == 0
        assert "common/code-reviewer" in result.stdout
        assert "mobile/react-native-dev" in result.stdout

    def test_json(self, project: Path):
        write_files(project, {"package.json": '{"dependencies": {"koa": "2"}}'})
        result = CliRunner().invoke(cli, ["manifest", str(project), "--json"])
        data = json.loads(result.stdout)
        assert data["labels"] == ["nodejs"]
        assert data["resources"][-2:] == [
            "nextjs/nextjs-fullstack-dev",
            "nextjs/nodejs-backend-dev",
        ]


class TestAgentsCommands:
    def test_install(self, served_archive, project: Path):
        write_files(project, {"go.mod": ""})
        result = CliRunner().invoke(cli, ["agents", "install", str(project), "--no-git-check"])
        assert result.exit_code == 0, result.output
        assert "Installation Complete" in result.stdout
        assert "code-reviewer" in result.stdout
        assert (project / ".claude-agents/agents/common/code-reviewer.json").is_file()

    def test_install_json(self, served_archive, project: Path):
        result = CliRunner().invoke(
            cli, ["agents", "install", str(project), "--no-git-check", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["stack"] == "common"
        assert len(data["installed"]) == 4

    def test_install_download_error(self, remote, project: Path):
        result = CliRunner().invoke(cli, ["agents", "install", str(project), "--no-git-check"])
        assert result.exit_code == 1
        assert "Download failed" in result.stderr
        assert result.stdout == ""

    def test_install_repo_flag(self, remote, project: Path):
        CliRunner().invoke(
            cli,
            ["agents", "install", str(project), "--no-git-check",
             "--repo", "acme/agents", "--branch", "develop"],
        )
        assert remote.requests == ["https://github.com/acme/agents/archive/develop.tar.gz"]

    def test_update_dry_run(self, served_archive, project: Path):
        runner = CliRunner()
        runner.invoke(cli, ["agents", "install", str(project), "--no-git-check"])
        result = runner.invoke(
            cli, ["agents", "update", str(project), "--no-git-check", "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert "Available agents in repository" in result.stdout
        assert "[DRY RUN] No changes were made." in result.stdout

    def test_update(self, served_archive, project: Path):
        result = CliRunner().invoke(cli, ["agents", "update", str(project), "--no-git-check"])
        assert result.exit_code == 0, result.output
        assert "Update Complete" in result.stdout

    def test_list(self, project: Path):
        write_files(project, {
            ".claude-agents/agents/common/code-reviewer.json": "{}",
            ".claude-agents/agents/mobile/expo-dev.json": "{}",
        })
        result = CliRunner().invoke(cli, ["agents", "list", str(project), "--json"])
        assert json.loads(result.stdout) == {"agents": ["code-reviewer", "expo-dev"]}

    def test_list_empty(self, project: Path):
        result = CliRunner().invoke(cli, ["agents", "list", str(project)])
        assert result.exit_code == 0
        assert "No agents installed" in result.stdout
