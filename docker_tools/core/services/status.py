"""
Status — what is installed, and what the engine is holding.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from docker_tools.adapters.base import CommandRunner
from docker_tools.core.models.install import InstallationRecord
from docker_tools.core.models.settings import Settings
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.detection import detect_all

logger = logging.getLogger(__name__)

# resource -> command listing one id per line
_COUNT_COMMANDS: dict[str, list[str]] = {
    "containers": ["docker", "ps", "-aq"],
    "images": ["docker", "images", "-q"],
    "networks": ["docker", "network", "ls", "-q"],
    "volumes": ["docker", "volume", "ls", "-q"],
}

_LISTING_COMMANDS: dict[str, list[str]] = {
    "images": ["docker", "images"],
    "containers": ["docker", "ps", "-a"],
    "volumes": ["docker", "volume", "ls"],
    "networks": ["docker", "network", "ls"],
}


class ResourceCounts(BaseModel):
    containers: int = 0
    images: int = 0
    networks: int = 0
    volumes: int = 0


class StatusReport(BaseModel):
    """Full status snapshot."""

    targets: dict[str, InstallationRecord] = Field(default_factory=dict)
    counts: ResourceCounts | None = None
    daemon_json_path: str = ""
    daemon_json: str | None = None
    listings: dict[str, str] = Field(default_factory=dict)

    @property
    def engine_installed(self) -> bool:
        record = self.targets.get(str(TargetName.ENGINE))
        return bool(record and record.installed)


def resource_counts(runner: CommandRunner, timeout: int = 30) -> ResourceCounts:
    """Count containers, images, networks and volumes.  Failed queries count 0."""
    counts: dict[str, int] = {}
    for resource, cmd in _COUNT_COMMANDS.items():
        result = runner.run(cmd, timeout=timeout)
        counts[resource] = len(result.stdout.split()) if result.ok else 0
    return ResourceCounts(**counts)


def brief_status(settings: Settings, runner: CommandRunner) -> ResourceCounts | None:
    """Counts for the menu header; None when the engine is not installed."""
    records = detect_all(settings.paths, runner, with_version=False)
    if not records[TargetName.ENGINE].installed:
        return None
    return resource_counts(runner, timeout=settings.timeouts.probe)


def full_status(settings: Settings, runner: CommandRunner) -> StatusReport:
    records = detect_all(settings.paths, runner)
    report = StatusReport(
        targets={str(name): record for name, record in records.items()},
        daemon_json_path=str(settings.paths.daemon_json),
    )

    daemon_json = settings.paths.daemon_json
    if daemon_json.is_file():
        report.daemon_json = daemon_json.read_text(encoding="utf-8", errors="replace")

    if report.engine_installed:
        report.counts = resource_counts(runner, timeout=settings.timeouts.probe)
        for resource, cmd in _LISTING_COMMANDS.items():
            result = runner.run(cmd, timeout=settings.timeouts.probe)
            report.listings[resource] = result.stdout.rstrip() if result.ok else ""

    logger.debug("Status: %s", {k: v.installed for k, v in records.items()})
    return report
