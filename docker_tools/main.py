"""
docker-tools — CLI entrypoint.

Usage:
    docker-tools                      interactive menu
    docker-tools install compose --method binary
    docker-tools uninstall engine --yes
    docker-tools status --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from docker_tools import __version__
from docker_tools.core.observability.logging_config import setup_logging
from docker_tools.ui.cli.common import get_toolbox, require_root


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="docker-tools")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to docker-tools.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """docker-tools — install and manage Docker, Compose and Buildx."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("DOCKER_TOOLS_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("DOCKER_TOOLS_LOG_FILE"),
        log_file_level=os.environ.get("DOCKER_TOOLS_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


@cli.command()
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Interactive numbered menu (the default)."""
    from docker_tools.ui.cli.menu import run_menu

    require_root()
    sys.exit(run_menu(get_toolbox(ctx)))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show what is installed and what the engine holds."""
    from docker_tools.core.services.status import full_status
    from docker_tools.ui.cli.menu import render_status

    toolbox = get_toolbox(ctx)
    report = full_status(toolbox.settings, toolbox.runner)

    if as_json:
        click.echo(json.dumps(report.model_dump(), indent=2))
        return

    render_status(report)


@cli.command("registry-mirror")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every confirmation.")
@click.pass_context
def registry_mirror(ctx: click.Context, yes: bool) -> None:
    """Replace daemon.json with the published registry mirrors."""
    from docker_tools.core.services.registry_mirror import update_registry_mirrors

    require_root()
    toolbox = get_toolbox(ctx)
    if yes:
        toolbox = toolbox.assuming_yes()

    receipt = update_registry_mirrors(
        toolbox.settings, toolbox.runner, toolbox.http, toolbox.reporter, toolbox.confirm,
    )
    sys.exit(1 if receipt.failed else 0)


@cli.command("self-update")
@click.pass_context
def self_update_cmd(ctx: click.Context) -> None:
    """Fetch the latest docker-tools; exits 3 so the caller relaunches it."""
    from docker_tools.core.services.self_update import RELAUNCH_EXIT_CODE, self_update

    toolbox = get_toolbox(ctx)
    receipt = self_update(toolbox.settings, toolbox.http, toolbox.reporter)
    sys.exit(RELAUNCH_EXIT_CODE if receipt.ok else 1)


@cli.group()
def config() -> None:
    """docker-tools configuration commands."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration as YAML."""
    from docker_tools.core.config.loader import dump_settings

    click.echo(dump_settings(get_toolbox(ctx).settings), nl=False)


# ── Register sub-commands from docker_tools/ui/cli/ ─────────────────

from docker_tools.ui.cli.engine import container, image, network, volume  # noqa: E402
from docker_tools.ui.cli.targets import detect, install, uninstall, versions  # noqa: E402

cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(versions)
cli.add_command(detect)
cli.add_command(container)
cli.add_command(image)
cli.add_command(network)
cli.add_command(volume)


if __name__ == "__main__":
    cli()
