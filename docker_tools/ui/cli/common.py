"""
Shared CLI plumbing — the collaborators every command needs.

``get_toolbox`` builds the real adapters once per invocation and keeps
them on the click context.  Tests pre-seed ``ctx.obj["toolbox"]`` with
mock adapters through ``CliRunner.invoke(..., obj=...)``.
"""

from __future__ import annotations

import dataclasses
import os
import sys
from dataclasses import dataclass

import click

from docker_tools.adapters.base import CommandRunner, HttpClient
from docker_tools.core.errors import ConfigError
from docker_tools.core.models.install import OperationOutcome
from docker_tools.core.models.settings import Settings
from docker_tools.core.models.target import TargetName
from docker_tools.core.prompts import Ask, Confirm, assume_yes, click_ask, click_confirm, decline
from docker_tools.core.reporting import ConsoleReporter, Reporter
from docker_tools.core.services.engine_ops import EngineOps
from docker_tools.core.services.installer import InstallMachine
from docker_tools.core.services.targets import TargetStrategy, strategy_for


@dataclass
class Toolbox:
    """Settings plus the host, network and operator capabilities."""

    settings: Settings
    runner: CommandRunner
    http: HttpClient
    reporter: Reporter
    confirm: Confirm
    ask: Ask
    machine_arch: str | None = None
    corrupt_confirm: Confirm | None = None

    def assuming_yes(self) -> Toolbox:
        """Answer yes everywhere except to installing a corrupt download."""
        return dataclasses.replace(
            self, confirm=assume_yes, corrupt_confirm=self.corrupt_confirm or decline,
        )

    def ignoring_checksum(self) -> Toolbox:
        return dataclasses.replace(self, corrupt_confirm=assume_yes)

    def strategy(self, name: TargetName) -> TargetStrategy:
        return strategy_for(
            name,
            self.settings,
            self.runner,
            self.http,
            self.reporter,
            self.confirm,
            machine=self.machine_arch,
        )

    def installer(self, name: TargetName) -> InstallMachine:
        return InstallMachine(
            self.strategy(name),
            confirm=self.confirm,
            reporter=self.reporter,
            ask=self.ask,
            corrupt_confirm=self.corrupt_confirm,
        )

    def engine_ops(self) -> EngineOps:
        return EngineOps(self.runner, timeout=self.settings.timeouts.command)


def get_toolbox(ctx: click.Context) -> Toolbox:
    """Return the invocation's toolbox, building the real one on first use."""
    obj = ctx.ensure_object(dict)
    toolbox = obj.get("toolbox")
    if toolbox is None:
        from docker_tools.adapters.http import UrllibClient
        from docker_tools.adapters.shell.command import SubprocessRunner
        from docker_tools.core.config.loader import load_settings

        try:
            settings = load_settings(obj.get("config_path"))
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

        toolbox = Toolbox(
            settings=settings,
            runner=SubprocessRunner(),
            http=UrllibClient(),
            reporter=ConsoleReporter(),
            confirm=click_confirm,
            ask=click_ask,
        )
        obj["toolbox"] = toolbox
    return toolbox


def require_root() -> None:
    """Exit 1 unless running with elevated privileges."""
    if os.geteuid() != 0:
        click.secho("❌ Please run docker-tools as root (sudo docker-tools)", fg="red", err=True)
        sys.exit(1)


def parse_target(value: str) -> TargetName:
    try:
        return TargetName.parse(value)
    except ValueError as e:
        raise click.BadParameter(
            f"{e}. Choose one of: engine, compose, buildx", param_hint="TARGET",
        ) from None


def report_outcome(outcome: OperationOutcome) -> int:
    """Exit status of an install / uninstall: 1 on failure, 0 otherwise."""
    if outcome.failed:
        click.secho(
            f"❌ {outcome.operation} {outcome.target} failed ({outcome.error_kind})",
            fg="red",
            err=True,
        )
        return 1
    return 0
