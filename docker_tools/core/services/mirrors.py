"""
Mirror selector — pick the first usable source from an ordered list.

Two modes:

``select_latest``
    Fetch each mirror's listing in order, extract every version token,
    and stop at the first mirror that lists anything.  The newest
    version on *that* mirror wins.  Later mirrors are never contacted.

``select_pinned``
    If the exact artifact file is already in the local download dir,
    return it without touching the network.  Otherwise HEAD-probe each
    mirror for the exact filename and stop at the first hit.

A failing mirror is recorded as a ``MirrorAttempt`` and skipped; only
exhausting the list raises ``NoMirrorAvailable``.  Probes run one at a
time, each bounded by ``timeout``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from docker_tools.adapters.base import HttpClient
from docker_tools.core.errors import NoMirrorAvailable
from docker_tools.core.models.install import MirrorAttempt, MirrorSelection
from docker_tools.core.services.versions import ENGINE_PACKAGE_PATTERN, extract_versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorLayout:
    """URL templates relative to a mirror base.

    Placeholders: ``{base}``, ``{arch}``, ``{version}``, ``{filename}``.
    ``listing`` is only needed for latest-from-listing mode; ``digest``
    is None when the source publishes no reference digest.
    """

    artifact: str
    listing: str | None = None
    digest: str | None = None

    def listing_url(self, base: str, arch: str) -> str:
        if not self.listing:
            raise ValueError("layout has no listing template")
        return self.listing.format(base=base.rstrip("/"), arch=arch)

    def artifact_url(self, base: str, arch: str, version: str, filename: str) -> str:
        return self.artifact.format(
            base=base.rstrip("/"), arch=arch, version=version, filename=filename,
        )

    def digest_url(self, base: str, arch: str, version: str, filename: str) -> str | None:
        if not self.digest:
            return None
        return self.digest.format(
            base=base.rstrip("/"), arch=arch, version=version, filename=filename,
        )


def select_latest(
    client: HttpClient,
    mirrors: list[str],
    layout: MirrorLayout,
    arch: str,
    filename_for: Callable[[str], str],
    *,
    pattern: str = ENGINE_PACKAGE_PATTERN,
    timeout: int = 10,
) -> MirrorSelection:
    """Resolve the newest version from the first mirror that lists any."""
    attempts: list[MirrorAttempt] = []

    for mirror in mirrors:
        url = layout.listing_url(mirror, arch)
        logger.info("Fetching version listing from %s", url)
        start = time.monotonic()
        body = client.fetch_text(url, timeout=timeout)
        elapsed = int((time.monotonic() - start) * 1000)

        versions = extract_versions(body, pattern) if body else []
        if not versions:
            attempts.append(
                MirrorAttempt(
                    mirror=mirror,
                    url=url,
                    error="unreachable" if body is None else "no versions listed",
                    elapsed_ms=elapsed,
                )
            )
            continue

        version = versions[0]
        filename = filename_for(version)
        attempts.append(MirrorAttempt(mirror=mirror, url=url, ok=True, elapsed_ms=elapsed))
        logger.info("Newest version on %s: %s", mirror, version)
        return MirrorSelection(
            filename=filename,
            version=version,
            mirror=mirror,
            url=layout.artifact_url(mirror, arch, version, filename),
            attempts=attempts,
        )

    raise NoMirrorAvailable("No mirror listed any version", attempts)


def select_pinned(
    client: HttpClient,
    mirrors: list[str],
    layout: MirrorLayout,
    arch: str,
    version: str,
    filename: str,
    *,
    cache_dir: Path | None = None,
    timeout: int = 10,
) -> MirrorSelection:
    """Locate ``filename`` for ``version``: local cache first, then mirrors."""
    if cache_dir is not None:
        local = cache_dir / filename
        if local.is_file():
            logger.info("Using local artifact %s, skipping mirror probes", local)
            return MirrorSelection(filename=filename, version=version, local_path=str(local))

    attempts: list[MirrorAttempt] = []

    for mirror in mirrors:
        url = layout.artifact_url(mirror, arch, version, filename)
        logger.info("Probing %s", url)
        start = time.monotonic()
        found = client.exists(url, timeout=timeout)
        elapsed = int((time.monotonic() - start) * 1000)

        if not found:
            attempts.append(
                MirrorAttempt(mirror=mirror, url=url, error="not found or timed out", elapsed_ms=elapsed)
            )
            continue

        attempts.append(MirrorAttempt(mirror=mirror, url=url, ok=True, elapsed_ms=elapsed))
        return MirrorSelection(
            filename=filename, version=version, mirror=mirror, url=url, attempts=attempts,
        )

    raise NoMirrorAvailable(f"No mirror serves {filename}", attempts)
