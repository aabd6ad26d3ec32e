"""
CLI commands for installing and removing the engine, compose and buildx.

Thin wrappers over ``docker_tools.core.services.installer``.
"""

from __future__ import annotations

import json
import sys

import click

from docker_tools.core.errors import DownloadFailed, NoMirrorAvailable
from docker_tools.core.models.install import InstallMethod
from docker_tools.core.services.versions import format_columns
from docker_tools.ui.cli.common import (
    get_toolbox,
    parse_target,
    report_outcome,
    require_root,
)


@click.command()
@click.argument("target")
@click.option("--version", "version", default=None, help="Install this version instead of the latest.")
@click.option(
    "--method",
    type=click.Choice([str(InstallMethod.PACKAGE), str(InstallMethod.BINARY)]),
    default=None,
    help="Install method (compose only offers both).",
)
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every confirmation except a checksum mismatch.")
@click.option("--ignore-checksum", is_flag=True, help="Install even when the download fails its checksum.")
@click.pass_context
def install(
    ctx: click.Context,
    target: str,
    version: str | None,
    method: str | None,
    yes: bool,
    ignore_checksum: bool,
) -> None:
    """Install TARGET (engine, compose or buildx)."""
    name = parse_target(target)
    require_root()

    toolbox = get_toolbox(ctx)
    if yes:
        toolbox = toolbox.assuming_yes()
    if ignore_checksum:
        toolbox = toolbox.ignoring_checksum()

    machine = toolbox.installer(name)
    try:
        outcome = machine.install(version, method=InstallMethod(method) if method else None)
    except ValueError as e:
        raise click.UsageError(str(e)) from None

    if outcome.error_kind == "corrupt" and yes and not ignore_checksum:
        click.secho("   --yes does not accept a checksum mismatch; use --ignore-checksum to override", fg="yellow", err=True)
    sys.exit(report_outcome(outcome))


@click.command()
@click.argument("target")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every confirmation.")
@click.pass_context
def uninstall(ctx: click.Context, target: str, yes: bool) -> None:
    """Uninstall TARGET the way it was installed."""
    name = parse_target(target)
    require_root()

    toolbox = get_toolbox(ctx)
    if yes:
        toolbox = toolbox.assuming_yes()

    outcome = toolbox.installer(name).uninstall()
    sys.exit(report_outcome(outcome))


@click.command()
@click.argument("target")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def versions(ctx: click.Context, target: str, as_json: bool) -> None:
    """List every installable version of TARGET, newest first."""
    name = parse_target(target)
    toolbox = get_toolbox(ctx)

    try:
        catalog = toolbox.strategy(name).catalog()
    except (NoMirrorAvailable, DownloadFailed) as e:
        click.secho(f"❌ Could not list versions: {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(catalog.model_dump(), indent=2))
        return

    click.secho(f"📦 {len(catalog.versions)} versions (from {catalog.source})", fg="cyan", bold=True)
    click.echo(format_columns(catalog.versions))


@click.command()
@click.argument("target")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, target: str, as_json: bool) -> None:
    """Probe the host for TARGET and show the evidence found."""
    name = parse_target(target)
    strategy = get_toolbox(ctx).strategy(name)
    record = strategy.detect()

    if as_json:
        click.echo(json.dumps(record.model_dump(), indent=2))
        return

    if not record.installed:
        click.secho(f"❌ {strategy.display_name} is not installed", fg="yellow")
        return

    click.secho(f"✅ {strategy.display_name} {record.version or '(version unknown)'}", fg="green")
    for evidence in record.evidence:
        click.echo(f"   {evidence.kind:<13} {evidence.location}")
