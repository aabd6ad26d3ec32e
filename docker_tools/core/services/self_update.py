"""
Self-update — fetch a fresh copy of docker-tools.

Sources are tried in order until one yields a non-empty file.  The
running process is never replaced in place: the caller exits with
``RELAUNCH_EXIT_CODE`` and whoever launched it starts the new copy.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from docker_tools.adapters.base import HttpClient
from docker_tools.core.errors import DownloadFailed
from docker_tools.core.models.receipt import Receipt
from docker_tools.core.models.settings import Settings
from docker_tools.core.reporting import Reporter

logger = logging.getLogger(__name__)

TASK = "self-update"
RELAUNCH_EXIT_CODE = 3


def update_destination(settings: Settings, argv0: str | None = None) -> Path:
    """Replace the running zipapp when that is what we are, else use the download dir."""
    filename = settings.self_update.filename
    running = Path(argv0 if argv0 is not None else sys.argv[0])
    if running.name == filename and running.parent.is_dir():
        return running
    return settings.download_path / filename


def self_update(
    settings: Settings,
    http: HttpClient,
    reporter: Reporter,
    *,
    dest: Path | None = None,
) -> Receipt:
    """Download the tool from the first source that serves a non-empty file."""
    sources = settings.self_update.sources
    if not sources:
        reporter.error("No self-update sources configured (self_update.sources)")
        return Receipt.failure(TASK, "no sources configured")

    dest = dest or update_destination(settings)
    reporter.step("Fetching the latest docker-tools...")

    errors: list[str] = []
    for url in sources:
        try:
            path = http.download(url, dest, timeout=settings.timeouts.download)
        except DownloadFailed as e:
            logger.info("Self-update source failed: %s", e)
            errors.append(str(e))
            continue
        if path.stat().st_size == 0:
            errors.append(f"{url}: empty file")
            continue

        path.chmod(0o755)
        reporter.success(f"Fetched {path}, restart docker-tools to use it")
        return Receipt.success(TASK, str(path), metadata={"source": url})

    reporter.error("No source is reachable, check the network")
    return Receipt.failure(TASK, "; ".join(errors), metadata={"sources": list(sources)})
