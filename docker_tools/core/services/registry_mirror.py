"""
Registry mirror update — replace the engine's ``daemon.json``.

The current file is backed up to ``daemon.json.backup.<timestamp>``
before the published one is downloaded over it.  If the download fails
the operator can write a built-in ``registry-mirrors`` list instead.
The engine is restarted afterwards so the new mirrors take effect.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

from docker_tools.adapters.base import CommandRunner, HttpClient
from docker_tools.core.errors import DownloadFailed
from docker_tools.core.models.receipt import Receipt
from docker_tools.core.models.settings import Settings
from docker_tools.core.models.target import TargetName, build_profile
from docker_tools.core.prompts import Confirm
from docker_tools.core.reporting import Reporter
from docker_tools.core.services.detection import detect
from docker_tools.core.services.service_manager import ServiceManager

logger = logging.getLogger(__name__)

TASK = "registry-mirror"
BACKUP_FORMAT = "%Y%m%d%H%M%S"


def render_daemon_json(mirrors: list[str]) -> str:
    return json.dumps({"registry-mirrors": list(mirrors)}, indent=2) + "\n"


def backup_daemon_json(path: Path, now: datetime | None = None) -> Path | None:
    """Copy ``path`` aside with a timestamp suffix.  None if there was nothing to back up."""
    if not path.is_file():
        return None
    stamp = (now or datetime.now()).strftime(BACKUP_FORMAT)
    backup = path.with_name(f"{path.name}.backup.{stamp}")
    shutil.copy2(path, backup)
    logger.info("Backed up %s to %s", path, backup)
    return backup


def _download_config(http: HttpClient, url: str, dest: Path, timeout: int) -> None:
    """Download ``url`` to ``dest``; raise ``DownloadFailed`` unless it is a JSON object."""
    http.download(url, dest, timeout=timeout)
    try:
        data = json.loads(dest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DownloadFailed(url, f"not a valid daemon.json: {e}") from e
    if not isinstance(data, dict):
        raise DownloadFailed(url, "not a valid daemon.json: expected a JSON object")


def update_registry_mirrors(
    settings: Settings,
    runner: CommandRunner,
    http: HttpClient,
    reporter: Reporter,
    confirm: Confirm,
    *,
    now: datetime | None = None,
) -> Receipt:
    """Install the published registry-mirror config and restart the engine."""
    paths = settings.paths
    engine = detect(build_profile(TargetName.ENGINE, paths), runner, with_version=False)
    if not engine.installed:
        reporter.error("Docker is not installed, install Docker first")
        return Receipt.failure(TASK, "Docker is not installed")

    daemon_json = paths.daemon_json
    daemon_json.parent.mkdir(parents=True, exist_ok=True)

    backup = backup_daemon_json(daemon_json, now)
    if backup:
        reporter.success(f"Existing config backed up to {backup.name}")

    source = "download"
    reporter.step("Downloading registry mirror config...")
    try:
        _download_config(
            http, settings.registry_mirror.source_url, daemon_json, settings.timeouts.download,
        )
        reporter.success("Registry mirror config downloaded")
    except DownloadFailed as e:
        logger.warning("Registry mirror download failed: %s", e)
        reporter.error("Config download failed, check the network connection")
        # put back whatever was there before
        if backup:
            shutil.copy2(backup, daemon_json)
        else:
            daemon_json.unlink(missing_ok=True)
        if not confirm("Write a basic registry mirror config instead?", True):
            reporter.warn("Cancelled")
            return Receipt.skip(TASK, "operator declined the fallback config", error=str(e))
        daemon_json.write_text(
            render_daemon_json(settings.registry_mirror.fallback_mirrors), encoding="utf-8",
        )
        source = "fallback"
        reporter.success("Basic registry mirror config written")

    reporter.step("Reloading systemd and restarting Docker...")
    services = ServiceManager(runner, timeout=settings.timeouts.command)
    reload_result = services.daemon_reload()
    restart_result = services.restart() if reload_result.ok else reload_result
    if not restart_result.ok:
        reporter.error("Docker failed to restart, check the config")
        return Receipt.failure(
            TASK,
            restart_result.error or restart_result.stderr.strip() or "restart failed",
            metadata={"source": source, "backup": str(backup) if backup else None},
        )

    content = daemon_json.read_text(encoding="utf-8")
    reporter.success("Docker restarted, registry mirrors updated")
    reporter.plain(content)
    return Receipt.success(
        TASK,
        content,
        metadata={"source": source, "backup": str(backup) if backup else None},
    )
