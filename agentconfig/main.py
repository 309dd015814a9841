"""
agentconfig — CLI entrypoint.

Usage:
    agentconfig --help
    agentconfig detect [PATH]
    agentconfig manifest [PATH]
    agentconfig agents install
    agentconfig agents update --dry-run
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from agentconfig import __version__
from agentconfig.core.observability.logging_config import setup_logging


def _configure_logging(verbose: bool, quiet: bool, debug: bool) -> None:
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("AGENTCONFIG_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("AGENTCONFIG_LOG_FILE"),
        log_file_level=os.environ.get("AGENTCONFIG_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


def _load_settings_or_exit(project_root: Path, as_json: bool = False):
    from agentconfig.core.config.loader import ConfigError, load_settings

    try:
        return load_settings(project_root)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _stack_for(project_root: Path, as_json: bool = False):
    from agentconfig.core.services.detection import build_rules, detect_stack

    settings = _load_settings_or_exit(project_root, as_json)
    rules = build_rules(composer_implies_laravel=settings.composer_implies_laravel)
    return detect_stack(project_root, rules)


_path_argument = click.argument(
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    required=False,
)


@click.group()
@click.version_option(version=__version__, prog_name="agentconfig")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """agentconfig — install AI agent configurations matched to your stack."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    _configure_logging(verbose, quiet, debug)


@cli.command()
@_path_argument
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect(path: Path, as_json: bool) -> None:
    """Detect the tech stack of PATH (default: current directory).

    Prints a comma-separated list of stack labels, e.g. ``laravel,nextjs``,
    or ``common`` when nothing is recognised.
    """
    result = _stack_for(path, as_json)

    if as_json:
        click.echo(json.dumps({"labels": [str(label) for label in result.labels]}, indent=2))
        return

    click.echo(result.as_csv())


@cli.command()
@_path_argument
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def manifest(ctx: click.Context, path: Path, as_json: bool) -> None:
    """Show the agents that would be installed for PATH."""
    from agentconfig.core.services.selection import select_agents

    stack = _stack_for(path, as_json)
    selected = select_agents(stack)

    if as_json:
        click.echo(json.dumps(selected.to_dict(), indent=2))
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"\n🔍 Stack: {stack.as_csv()}", fg="cyan", bold=True)
        click.echo(f"   Agents: {len(selected.resources)}")
        click.echo()

    for identifier in selected.identifiers:
        click.echo(f"   • {identifier}")

    if not ctx.obj.get("quiet"):
        click.echo()


@click.command("detect-stack")
@_path_argument
def detect_stack_cli(path: Path) -> None:
    """Print the detected stack of PATH as comma-separated labels."""
    _configure_logging(False, False, False)
    click.echo(_stack_for(path).as_csv())


# ── Sub-command groups ─────────────────────────────────────────

from agentconfig.ui.cli.agents import agents  # noqa: E402

cli.add_command(agents)


if __name__ == "__main__":
    cli()
