"""
HTTP adapter — mirror listings, release metadata, artifact downloads.

Built on ``urllib.request``.  Every call carries an explicit timeout so
a dead mirror cannot stall mirror resolution.
"""

from __future__ import annotations

import logging
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from docker_tools import __version__
from docker_tools.adapters.base import HttpClient
from docker_tools.core.errors import DownloadFailed

logger = logging.getLogger(__name__)

_USER_AGENT = f"docker-tools/{__version__}"


class UrllibClient(HttpClient):
    """Real HTTP client."""

    def _request(self, url: str, method: str = "GET") -> urllib.request.Request:
        return urllib.request.Request(
            url,
            method=method,
            headers={"User-Agent": _USER_AGENT},
        )

    def fetch_text(self, url: str, *, timeout: int = 10) -> str | None:
        try:
            with urllib.request.urlopen(self._request(url), timeout=timeout) as resp:
                body = resp.read()
        except Exception as exc:
            logger.debug("GET %s failed: %s", url, exc)
            return None
        return body.decode("utf-8", errors="replace")

    def exists(self, url: str, *, timeout: int = 10) -> bool:
        try:
            with urllib.request.urlopen(self._request(url, "HEAD"), timeout=timeout) as resp:
                status = resp.getcode()
        except Exception as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return False
        return 200 <= status < 400

    def download(self, url: str, dest: Path, *, timeout: int = 300) -> Path:
        dest.parent.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".part")
        logger.info("Downloading %s → %s", url, dest)
        try:
            with urllib.request.urlopen(self._request(url), timeout=timeout) as resp:
                if resp.getcode() >= 400:
                    raise DownloadFailed(url, f"HTTP {resp.getcode()}")
                with open(partial, "wb") as out:
                    shutil.copyfileobj(resp, out, length=64 * 1024)
        except DownloadFailed:
            partial.unlink(missing_ok=True)
            raise
        except (urllib.error.URLError, OSError, ValueError) as exc:
            partial.unlink(missing_ok=True)
            raise DownloadFailed(url, str(exc)) from exc

        if partial.stat().st_size == 0:
            partial.unlink(missing_ok=True)
            raise DownloadFailed(url, "empty response")

        partial.replace(dest)
        return dest
