"""
CLI commands for installing and updating agents.

Thin wrappers over ``agentconfig.core.use_cases``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

_path_argument = click.argument(
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    required=False,
)


def _settings(root: Path, as_json: bool, **overrides: object):
    from agentconfig.core.config.loader import ConfigError, load_settings

    try:
        return load_settings(root, **overrides)
    except ConfigError as e:
        _fail(str(e), as_json)


def _fail(message: str, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps({"error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def _echo_numbered(names: list[str]) -> None:
    for i, name in enumerate(names, 1):
        click.echo(f"   {i:>3}  {name}")


@click.group()
def agents() -> None:
    """Agents — install, update, and list AI agent definitions."""


@agents.command()
@_path_argument
@click.option("--repo", "-r", default=None, help="Config repository (owner/name).")
@click.option("--branch", "-b", default=None, help="Config repository branch.")
@click.option("--no-git-check", is_flag=True, help="Install outside a git repository.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def install(
    path: Path,
    repo: str | None,
    branch: str | None,
    no_git_check: bool,
    as_json: bool,
) -> None:
    """Install AI agents into PATH (default: current directory).

    Examples:

        agentconfig agents install

        agentconfig agents install --repo mycompany/ai-config --branch develop
    """
    from agentconfig.core.use_cases.install import run_install

    settings = _settings(path, as_json, config_repo=repo, config_branch=branch)
    result = run_install(path, settings, require_git=not no_git_check)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        _fail(result.error, as_json)

    click.echo()
    click.secho("✅ AI Agent Installation Complete!", fg="green", bold=True)
    click.echo(f"   Tech stack: {result.stack.as_csv() if result.stack else '?'}")
    click.echo(f"   Configuration directory: {settings.config_dir}")
    click.echo(f"   GitHub workflows: {settings.workflows_dir}")
    click.echo()
    click.secho("   Installed agents:", fg="white", bold=True)
    _echo_numbered([i.rsplit("/", 1)[-1] for i in result.installed])

    if result.missing:
        click.echo()
        click.secho("   ⚠️  Not found in source:", fg="yellow")
        for identifier in result.missing:
            click.echo(f"     • {identifier}")

    click.echo()
    click.echo(f"   To update agents in the future, run: ./{result.update_script}")
    click.echo()


@agents.command()
@_path_argument
@click.option("--repo", "-r", default=None, help="Config repository (owner/name).")
@click.option("--branch", "-b", default=None, help="Config repository branch.")
@click.option("--dry-run", is_flag=True, help="Show what would be updated without changes.")
@click.option("--force", is_flag=True, help="Update even with uncommitted changes.")
@click.option("--no-git-check", is_flag=True, help="Update outside a git repository.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def update(
    path: Path,
    repo: str | None,
    branch: str | None,
    dry_run: bool,
    force: bool,
    no_git_check: bool,
    as_json: bool,
) -> None:
    """Update installed AI agents from the central repository.

    Examples:

        agentconfig agents update

        agentconfig agents update --dry-run
    """
    from agentconfig.core.use_cases.update import run_update

    settings = _settings(path, as_json, config_repo=repo, config_branch=branch)
    result = run_update(
        path,
        settings,
        dry_run=dry_run,
        force=force,
        require_git=not no_git_check,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        _fail(result.error, as_json)

    click.echo()
    if dry_run:
        click.secho("Available agents in repository:", fg="cyan", bold=True)
        for name in result.available:
            click.echo(f"   {name}")
        click.echo()
        click.secho("Currently installed agents:", fg="cyan", bold=True)
        for name in result.previously_installed or ["(none)"]:
            click.echo(f"   {name}")
        click.echo()
        click.secho("[DRY RUN] No changes were made.", fg="yellow")
        click.echo()
        return

    click.secho("✅ AI Agent Update Complete!", fg="green", bold=True)
    click.echo(f"   Tech stack: {result.stack.as_csv() if result.stack else '?'}")
    if result.backup_path:
        click.echo(f"   Backup: {result.backup_path}")
    click.echo()
    click.secho("   Installed agents:", fg="white", bold=True)
    _echo_numbered([i.rsplit("/", 1)[-1] for i in result.installed])
    click.echo()


@agents.command("list")
@_path_argument
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_cmd(path: Path, as_json: bool) -> None:
    """List agents installed in PATH."""
    from agentconfig.core.services.agent_fetch import list_agents
    from agentconfig.core.services.workspace_ops import agents_dir

    settings = _settings(path, as_json)
    names = list_agents(agents_dir(path, settings.config_dir))

    if as_json:
        click.echo(json.dumps({"agents": names}, indent=2))
        return

    if not names:
        click.secho(f"No agents installed in {settings.config_dir}/agents", fg="yellow")
        return

    click.secho(f"📋 Installed agents ({len(names)}):", fg="cyan", bold=True)
    _echo_numbered(names)
