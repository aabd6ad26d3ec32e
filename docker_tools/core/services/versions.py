"""
Version resolver — pinned, latest, or picked from an enumerated catalog.

Catalog sources:
    - a mirror's directory listing (engine static bundles), or
    - the GitHub releases API (compose, buildx).

Ordering is semantic (``2.10.0`` > ``2.9.1``), never lexical, and a
pre-release sorts below its release.  Every catalog this module returns
is de-duplicated and strictly descending.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable, Iterable

from pydantic import BaseModel, Field

from docker_tools.adapters.base import HttpClient
from docker_tools.core.errors import DownloadFailed, InvalidSelection, NoMirrorAvailable
from docker_tools.core.models.install import MirrorAttempt

logger = logging.getLogger(__name__)

ENGINE_PACKAGE_PATTERN = r"docker-(\d+\.\d+\.\d+)\.tgz"

_SEMVER_RE = re.compile(r"^v?(\d+(?:\.\d+)*)(?:[-+.]?(.*))?$")


class VersionCatalog(BaseModel):
    """An enumerated, sorted list of versions and where it came from."""

    versions: list[str] = Field(default_factory=list)
    source: str = ""
    attempts: list[MirrorAttempt] = Field(default_factory=list)

    @property
    def latest(self) -> str | None:
        return self.versions[0] if self.versions else None


def version_key(version: str) -> tuple:
    """Sort key implementing semantic-version ordering.

    ``v2.24.0`` and ``2.24.0`` compare equal; ``2.24.0-rc.1`` sorts
    below ``2.24.0``.  Unparseable strings sort below everything.
    """
    m = _SEMVER_RE.match(version.strip())
    if not m:
        return ((), 0, version)
    numbers = tuple(int(p) for p in m.group(1).split("."))
    # pad so 2.24 == 2.24.0
    numbers = numbers + (0,) * max(0, 3 - len(numbers))
    suffix = m.group(2) or ""
    return (numbers, 0 if suffix else 1, suffix)


def sort_versions(versions: Iterable[str]) -> list[str]:
    """De-duplicate and sort descending."""
    unique = {v.strip() for v in versions if v and v.strip()}
    return sorted(unique, key=version_key, reverse=True)


def latest_version(versions: Iterable[str]) -> str | None:
    """Maximum by version ordering (not the first listed)."""
    candidates = [v for v in versions if v]
    if not candidates:
        return None
    return max(candidates, key=version_key)


def extract_versions(text: str, pattern: str = ENGINE_PACKAGE_PATTERN) -> list[str]:
    """Pull every version token out of a listing page.

    ``pattern`` must have one capture group holding the version.
    """
    return sort_versions(re.findall(pattern, text or ""))


# ── Release metadata (GitHub API) ──────────────────────────────


def fetch_latest_release(
    client: HttpClient,
    repo: str,
    *,
    api_base: str = "https://api.github.com",
    timeout: int = 10,
) -> str:
    """Return the tag of the latest release of ``repo`` (``owner/name``).

    Raises:
        DownloadFailed: metadata unreachable or without a ``tag_name``.
    """
    url = f"{api_base.rstrip('/')}/repos/{repo}/releases/latest"
    body = client.fetch_text(url, timeout=timeout)
    if not body:
        raise DownloadFailed(url, "release metadata unreachable")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise DownloadFailed(url, f"invalid release metadata: {e}") from e

    tag = data.get("tag_name", "") if isinstance(data, dict) else ""
    if not tag:
        raise DownloadFailed(url, "no tag_name in release metadata")

    logger.info("Latest %s release: %s", repo, tag)
    return tag


def fetch_release_catalog(
    client: HttpClient,
    repo: str,
    *,
    api_base: str = "https://api.github.com",
    timeout: int = 10,
) -> VersionCatalog:
    """Enumerate every published release tag of ``repo``.

    Drafts are skipped.  Raises ``DownloadFailed`` when the list cannot
    be fetched or is empty.
    """
    url = f"{api_base.rstrip('/')}/repos/{repo}/releases?per_page=100"
    body = client.fetch_text(url, timeout=timeout)
    if not body:
        raise DownloadFailed(url, "release list unreachable")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise DownloadFailed(url, f"invalid release list: {e}") from e

    if not isinstance(data, list):
        raise DownloadFailed(url, "unexpected release list format")

    tags = [
        r.get("tag_name", "")
        for r in data
        if isinstance(r, dict) and not r.get("draft", False)
    ]
    versions = sort_versions(tags)
    if not versions:
        raise DownloadFailed(url, "no releases found")

    return VersionCatalog(versions=versions, source=url)


# ── Mirror listings ────────────────────────────────────────────


def catalog_from_mirrors(
    client: HttpClient,
    mirrors: list[str],
    listing_url: Callable[[str], str],
    *,
    pattern: str = ENGINE_PACKAGE_PATTERN,
    timeout: int = 10,
) -> VersionCatalog:
    """Enumerate versions from the first mirror whose listing has any.

    Mirrors are tried strictly in order; a failing or empty listing is
    recorded and the next mirror is tried.

    Raises:
        NoMirrorAvailable: every mirror failed or listed nothing.
    """
    attempts: list[MirrorAttempt] = []

    for mirror in mirrors:
        url = listing_url(mirror)
        start = time.monotonic()
        body = client.fetch_text(url, timeout=timeout)
        elapsed = int((time.monotonic() - start) * 1000)

        if body is None:
            attempts.append(MirrorAttempt(mirror=mirror, url=url, error="unreachable", elapsed_ms=elapsed))
            logger.info("Mirror %s unreachable, trying next", url)
            continue

        versions = extract_versions(body, pattern)
        if not versions:
            attempts.append(MirrorAttempt(mirror=mirror, url=url, error="no versions listed", elapsed_ms=elapsed))
            logger.info("Mirror %s lists no versions, trying next", url)
            continue

        attempts.append(MirrorAttempt(mirror=mirror, url=url, ok=True, elapsed_ms=elapsed))
        return VersionCatalog(versions=versions, source=url, attempts=attempts)

    raise NoMirrorAvailable("No mirror returned a version catalog", attempts)


# ── Operator selection ─────────────────────────────────────────


def format_columns(versions: list[str], columns: int = 5, width: int = 15) -> str:
    """Render a numbered, column-major menu of ``versions``.

    Numbering is 1-based and runs down each column first.
    """
    total = len(versions)
    if total == 0:
        return ""
    rows = (total + columns - 1) // columns
    lines: list[str] = []
    for i in range(rows):
        cells = []
        for j in range(i, total, rows):
            cells.append(f"{j + 1}) {versions[j]}".ljust(width))
        lines.append("".join(cells).rstrip())
    return "\n".join(lines)


def select_version(versions: list[str], raw: str) -> str:
    """Map a 1-based selection back to its version string.

    Raises:
        InvalidSelection: non-numeric or out of range.
    """
    choice = (raw or "").strip()
    if not choice.isdigit():
        raise InvalidSelection(choice, len(versions))
    index = int(choice)
    if index < 1 or index > len(versions):
        raise InvalidSelection(choice, len(versions))
    return versions[index - 1]
