"""
CLI commands for engine resources — containers, images, networks, volumes.

Thin wrappers over ``docker_tools.core.services.engine_ops``.
"""

from __future__ import annotations

import sys

import click

from docker_tools.core.models.receipt import Receipt
from docker_tools.ui.cli.common import get_toolbox


def _finish(receipt: Receipt) -> None:
    if receipt.status == "skipped":
        click.secho(f"⏭️  {receipt.output or 'Nothing to do'}", fg="yellow")
        return
    if receipt.output:
        click.echo(receipt.output)
    if receipt.failed:
        click.secho(f"❌ {receipt.error}", fg="red", err=True)
        sys.exit(1)


def _confirm_all(ctx: click.Context, what: str, yes: bool) -> bool:
    if yes:
        return True
    return get_toolbox(ctx).confirm(f"Delete ALL {what}?", True)


def print_network_table(rows: list[tuple[str, str, str]]) -> None:
    click.echo(f"{'CONTAINER':<25} {'NETWORK':<25} {'IP ADDRESS':<25}")
    for container, network, ip in rows:
        click.echo(f"{container:<25} {network:<25} {ip:<25}")


# ── Containers ──────────────────────────────────────────────────


@click.group()
def container() -> None:
    """Containers — list, start, stop, remove, restart, logs, exec."""


@container.command("ls")
@click.pass_context
def container_ls(ctx: click.Context) -> None:
    """List all containers."""
    _finish(get_toolbox(ctx).engine_ops().list_containers())


@container.command("start")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every container.")
@click.pass_context
def container_start(ctx: click.Context, names: tuple[str, ...], all_: bool) -> None:
    """Start containers."""
    ops = get_toolbox(ctx).engine_ops()
    _finish(ops.start_all() if all_ else ops.start(list(names)))


@container.command("stop")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every running container.")
@click.pass_context
def container_stop(ctx: click.Context, names: tuple[str, ...], all_: bool) -> None:
    """Stop containers."""
    ops = get_toolbox(ctx).engine_ops()
    _finish(ops.stop_all() if all_ else ops.stop(list(names)))


@container.command("restart")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every running container.")
@click.pass_context
def container_restart(ctx: click.Context, names: tuple[str, ...], all_: bool) -> None:
    """Restart containers."""
    ops = get_toolbox(ctx).engine_ops()
    _finish(ops.restart_all() if all_ else ops.restart(list(names)))


@container.command("rm")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every container.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation for --all.")
@click.pass_context
def container_rm(ctx: click.Context, names: tuple[str, ...], all_: bool, yes: bool) -> None:
    """Force-remove containers."""
    ops = get_toolbox(ctx).engine_ops()
    if all_:
        if not _confirm_all(ctx, "containers", yes):
            return
        _finish(ops.remove_all())
        return
    _finish(ops.remove(list(names)))


@container.command("logs")
@click.argument("name")
@click.pass_context
def container_logs(ctx: click.Context, name: str) -> None:
    """Show a container's logs."""
    _finish(get_toolbox(ctx).engine_ops().logs(name))


@container.command("exec")
@click.argument("name")
@click.pass_context
def container_exec(ctx: click.Context, name: str) -> None:
    """Open /bin/sh inside a container."""
    _finish(get_toolbox(ctx).engine_ops().shell(name))


@container.command("stats")
@click.pass_context
def container_stats(ctx: click.Context) -> None:
    """One snapshot of container resource usage."""
    _finish(get_toolbox(ctx).engine_ops().stats())


@container.command("networks")
@click.pass_context
def container_networks(ctx: click.Context) -> None:
    """Network and IP address of every running container."""
    print_network_table(get_toolbox(ctx).engine_ops().container_networks())


# ── Images ──────────────────────────────────────────────────────


@click.group()
def image() -> None:
    """Images — list, pull, remove."""


@image.command("ls")
@click.pass_context
def image_ls(ctx: click.Context) -> None:
    """List images."""
    _finish(get_toolbox(ctx).engine_ops().list_images())


@image.command("pull")
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def image_pull(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Pull (or update) images."""
    _finish(get_toolbox(ctx).engine_ops().pull(list(names)))


@image.command("rm")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every image.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation for --all.")
@click.pass_context
def image_rm(ctx: click.Context, names: tuple[str, ...], all_: bool, yes: bool) -> None:
    """Force-remove images."""
    ops = get_toolbox(ctx).engine_ops()
    if all_:
        if not _confirm_all(ctx, "images", yes):
            return
        _finish(ops.remove_all_images())
        return
    _finish(ops.remove_images(list(names)))


# ── Networks ────────────────────────────────────────────────────


@click.group()
def network() -> None:
    """Networks — list, create, connect, disconnect, remove."""


@network.command("ls")
@click.pass_context
def network_ls(ctx: click.Context) -> None:
    """List networks."""
    _finish(get_toolbox(ctx).engine_ops().list_networks())


@network.command("create")
@click.argument("name")
@click.pass_context
def network_create(ctx: click.Context, name: str) -> None:
    """Create a network."""
    _finish(get_toolbox(ctx).engine_ops().create_network(name))


@network.command("connect")
@click.argument("name")
@click.argument("containers", nargs=-1, required=True)
@click.pass_context
def network_connect(ctx: click.Context, name: str, containers: tuple[str, ...]) -> None:
    """Attach containers to a network."""
    _finish(get_toolbox(ctx).engine_ops().connect(name, list(containers)))


@network.command("disconnect")
@click.argument("name")
@click.argument("containers", nargs=-1, required=True)
@click.pass_context
def network_disconnect(ctx: click.Context, name: str, containers: tuple[str, ...]) -> None:
    """Detach containers from a network."""
    _finish(get_toolbox(ctx).engine_ops().disconnect(name, list(containers)))


@network.command("rm")
@click.argument("name")
@click.pass_context
def network_rm(ctx: click.Context, name: str) -> None:
    """Remove a network."""
    _finish(get_toolbox(ctx).engine_ops().remove_network(name))


# ── Volumes ─────────────────────────────────────────────────────


@click.group()
def volume() -> None:
    """Volumes — list, create, remove."""


@volume.command("ls")
@click.pass_context
def volume_ls(ctx: click.Context) -> None:
    """List volumes."""
    _finish(get_toolbox(ctx).engine_ops().list_volumes())


@volume.command("create")
@click.argument("name")
@click.pass_context
def volume_create(ctx: click.Context, name: str) -> None:
    """Create a volume."""
    _finish(get_toolbox(ctx).engine_ops().create_volume(name))


@volume.command("rm")
@click.argument("names", nargs=-1)
@click.option("--all", "all_", is_flag=True, help="Every volume.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation for --all.")
@click.pass_context
def volume_rm(ctx: click.Context, names: tuple[str, ...], all_: bool, yes: bool) -> None:
    """Remove volumes."""
    ops = get_toolbox(ctx).engine_ops()
    if all_:
        if not _confirm_all(ctx, "volumes", yes):
            return
        _finish(ops.remove_all_volumes())
        return
    _finish(ops.remove_volumes(list(names)))
