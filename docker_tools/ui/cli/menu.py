"""
Interactive menu — the numbered action loop.

    1-3   engine: install latest, uninstall, install a chosen version
    4-6   compose: install, uninstall, install a chosen version
    7     full status
    8-11  container / image / network / volume management
    12    registry mirror update
    13-14 buildx: install, uninstall
    00    self-update
    0     exit

Every action returns to the loop; a failed action never ends it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import click

from docker_tools.core.errors import DockerToolsError, InvalidSelection
from docker_tools.core.models.receipt import Receipt
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.registry_mirror import update_registry_mirrors
from docker_tools.core.services.self_update import RELAUNCH_EXIT_CODE, self_update
from docker_tools.core.services.status import StatusReport, brief_status, full_status
from docker_tools.core.services.versions import format_columns, select_version
from docker_tools.ui.cli.common import Toolbox
from docker_tools.ui.cli.engine import print_network_table

logger = logging.getLogger(__name__)

RULE = "=" * 56

MENU_ITEMS: list[tuple[str, str]] = [
    ("1", "Install Docker"),
    ("2", "Uninstall Docker"),
    ("3", "Install a specific Docker version"),
    ("4", "Install Docker Compose"),
    ("5", "Uninstall Docker Compose"),
    ("6", "Install a specific Docker Compose version"),
    ("7", "Docker status overview ★"),
    ("8", "Container management"),
    ("9", "Image management"),
    ("10", "Network management"),
    ("11", "Volume management"),
    ("12", "Update registry mirrors"),
    ("13", "Install Docker Buildx"),
    ("14", "Uninstall Docker Buildx"),
]


def render_menu(toolbox: Toolbox) -> None:
    click.secho(RULE, fg="green")
    click.secho("                 Docker Toolbox", fg="yellow", bold=True)
    click.secho(RULE, fg="green")

    counts = brief_status(toolbox.settings, toolbox.runner)
    if counts is None:
        click.secho(" Docker not detected, skipping status", fg="yellow")
    else:
        click.echo(" Docker: ", nl=False)
        click.secho(
            f"containers:{counts.containers}  images:{counts.images}  "
            f"networks:{counts.networks}  volumes:{counts.volumes}",
            fg="yellow",
        )

    for key, label in MENU_ITEMS:
        click.secho(f"{key:>2}. {label}", fg="green")
    click.secho("-" * 56, fg="green")
    click.secho("00. Fetch the latest docker-tools and restart", fg="green")
    click.secho(" 0. Exit", fg="green")
    click.secho(RULE, fg="green")


def render_status(report: StatusReport) -> None:
    """Print a ``full_status`` report."""
    if not report.engine_installed:
        click.secho("❌ Docker is not installed", fg="red")
        return

    click.secho(f"{'=' * 21} Docker status {'=' * 20}", fg="green")
    for name, title in (
        (TargetName.ENGINE, "Docker"),
        (TargetName.COMPOSE, "Compose"),
        (TargetName.BUILDX, "Docker Buildx"),
    ):
        record = report.targets.get(str(name))
        click.secho(f"[{title} version]", fg="yellow")
        if record is None or not record.installed:
            click.echo("not installed")
        else:
            click.echo(record.version or "version unavailable")

    click.secho("\n[Registry mirror config]", fg="yellow")
    if report.daemon_json is None:
        click.echo(f"no registry mirror config ({report.daemon_json_path} does not exist)")
    else:
        click.echo(f"file: {report.daemon_json_path}")
        click.echo(report.daemon_json.rstrip())

    for key, title, empty in (
        ("images", "Images", "no images"),
        ("containers", "Containers", "no containers"),
        ("volumes", "Volumes", "no volumes"),
        ("networks", "Networks", "no networks"),
    ):
        click.secho(f"\n[{title}]", fg="yellow")
        click.echo(report.listings.get(key) or empty)

    click.secho(RULE, fg="green")


def install_pinned(toolbox: Toolbox, name: TargetName) -> None:
    """Enumerate the catalog, let the operator pick, install that version."""
    strategy = toolbox.strategy(name)
    try:
        catalog = strategy.catalog()
    except DockerToolsError as e:
        click.secho(f"❌ Could not list versions, check the network ({e})", fg="red")
        return

    click.secho("Available versions:", fg="green")
    click.echo(format_columns(catalog.versions))
    raw = toolbox.ask("Enter the number of the version to install")
    try:
        version = select_version(catalog.versions, raw)
    except InvalidSelection as e:
        click.secho(f"❌ {e}", fg="red")
        return

    toolbox.installer(name).install(version)


# ── Resource sub-menus ──────────────────────────────────────────


def _names(toolbox: Toolbox, prompt: str) -> list[str]:
    return toolbox.ask(prompt).split()


def _show(receipt: Receipt) -> None:
    if receipt.output:
        click.echo(receipt.output)
    if receipt.failed:
        click.secho(f"❌ {receipt.error}", fg="red")


def _submenu(
    toolbox: Toolbox,
    title: str,
    listing: Callable[[], None],
    options: list[tuple[str, str, Callable[[], None]]],
) -> None:
    actions = {key: action for key, _, action in options}
    while True:
        listing()
        click.secho(f"\n{title}", fg="green")
        click.echo("-" * 24)
        for key, label, _ in options:
            click.echo(f"{key:>2}. {label}")
        click.echo("-" * 24)
        click.echo(" 0. Back")
        choice = toolbox.ask("Enter your choice").strip()
        if choice == "0":
            return
        action = actions.get(choice)
        if action is None:
            click.secho("Invalid option, try again", fg="red")
            continue
        action()


def container_menu(toolbox: Toolbox) -> None:
    ops = toolbox.engine_ops()
    prompt = "Container names/IDs (space separated)"

    def remove_all() -> None:
        if toolbox.confirm("Delete ALL containers?", True):
            _show(ops.remove_all())

    _submenu(
        toolbox,
        "Container actions",
        lambda: _show(ops.list_containers()),
        [
            ("1", "Create a container", lambda: _show(ops.run_container(toolbox.ask("docker run command")))),
            ("2", "Start containers", lambda: _show(ops.start(_names(toolbox, prompt)))),
            ("3", "Stop containers", lambda: _show(ops.stop(_names(toolbox, prompt)))),
            ("4", "Remove containers", lambda: _show(ops.remove(_names(toolbox, prompt)))),
            ("5", "Restart containers", lambda: _show(ops.restart(_names(toolbox, prompt)))),
            ("6", "Start all containers", lambda: _show(ops.start_all())),
            ("7", "Stop all containers", lambda: _show(ops.stop_all())),
            ("8", "Remove all containers", remove_all),
            ("9", "Restart all containers", lambda: _show(ops.restart_all())),
            ("11", "Open a shell in a container", lambda: _show(ops.shell(toolbox.ask("Container name/ID")))),
            ("12", "Container logs", lambda: _show(ops.logs(toolbox.ask("Container name/ID")))),
            ("13", "Container networks", lambda: print_network_table(ops.container_networks())),
            ("14", "Container resource usage", lambda: _show(ops.stats())),
        ],
    )


def image_menu(toolbox: Toolbox) -> None:
    ops = toolbox.engine_ops()
    prompt = "Image names (space separated)"

    def remove_all() -> None:
        if toolbox.confirm("Delete ALL images?", True):
            _show(ops.remove_all_images())

    _submenu(
        toolbox,
        "Image actions",
        lambda: _show(ops.list_images()),
        [
            ("1", "Pull images", lambda: _show(ops.pull(_names(toolbox, prompt)))),
            ("2", "Update images", lambda: _show(ops.pull(_names(toolbox, prompt)))),
            ("3", "Remove images", lambda: _show(ops.remove_images(_names(toolbox, prompt)))),
            ("4", "Remove all images", remove_all),
        ],
    )


def network_menu(toolbox: Toolbox) -> None:
    ops = toolbox.engine_ops()
    prompt = "Container names/IDs (space separated)"

    def listing() -> None:
        _show(ops.list_networks())
        print_network_table(ops.container_networks())

    _submenu(
        toolbox,
        "Network actions",
        listing,
        [
            ("1", "Create a network", lambda: _show(ops.create_network(toolbox.ask("New network name")))),
            ("2", "Join a network", lambda: _show(
                ops.connect(toolbox.ask("Network to join"), _names(toolbox, prompt))
            )),
            ("3", "Leave a network", lambda: _show(
                ops.disconnect(toolbox.ask("Network to leave"), _names(toolbox, prompt))
            )),
            ("4", "Remove a network", lambda: _show(ops.remove_network(toolbox.ask("Network to remove")))),
        ],
    )


def volume_menu(toolbox: Toolbox) -> None:
    ops = toolbox.engine_ops()

    def remove_all() -> None:
        if toolbox.confirm("Delete ALL volumes?", True):
            _show(ops.remove_all_volumes())

    _submenu(
        toolbox,
        "Volume actions",
        lambda: _show(ops.list_volumes()),
        [
            ("1", "Create a volume", lambda: _show(ops.create_volume(toolbox.ask("New volume name")))),
            ("2", "Remove volumes", lambda: _show(
                ops.remove_volumes(_names(toolbox, "Volume names (space separated)"))
            )),
            ("3", "Remove all volumes", remove_all),
        ],
    )


# ── Main loop ───────────────────────────────────────────────────


def run_menu(toolbox: Toolbox) -> int:
    """Loop until the operator exits.  Returns the process exit code."""
    settings = toolbox.settings

    def install(name: TargetName) -> Callable[[], None]:
        return lambda: toolbox.installer(name).install()

    def uninstall(name: TargetName) -> Callable[[], None]:
        return lambda: toolbox.installer(name).uninstall()

    actions: dict[str, Callable[[], None]] = {
        "1": install(TargetName.ENGINE),
        "2": uninstall(TargetName.ENGINE),
        "3": lambda: install_pinned(toolbox, TargetName.ENGINE),
        "4": install(TargetName.COMPOSE),
        "5": uninstall(TargetName.COMPOSE),
        "6": lambda: install_pinned(toolbox, TargetName.COMPOSE),
        "7": lambda: render_status(full_status(settings, toolbox.runner)),
        "8": lambda: container_menu(toolbox),
        "9": lambda: image_menu(toolbox),
        "10": lambda: network_menu(toolbox),
        "11": lambda: volume_menu(toolbox),
        "12": lambda: update_registry_mirrors(
            settings, toolbox.runner, toolbox.http, toolbox.reporter, toolbox.confirm,
        ),
        "13": install(TargetName.BUILDX),
        "14": uninstall(TargetName.BUILDX),
    }

    while True:
        render_menu(toolbox)
        choice = toolbox.ask("Enter an option (0-14|00)").strip()

        if choice == "0":
            click.secho("Bye.", fg="green")
            return 0
        if choice == "00":
            receipt = self_update(settings, toolbox.http, toolbox.reporter)
            if receipt.ok:
                return RELAUNCH_EXIT_CODE
            continue

        action = actions.get(choice)
        if action is None:
            click.secho("Invalid option, try again!", fg="red")
            continue

        logger.info("Menu action %s", choice)
        try:
            action()
        except (DockerToolsError, OSError) as e:
            logger.warning("Menu action %s failed: %s", choice, e)
            click.secho(f"❌ {e}", fg="red")
