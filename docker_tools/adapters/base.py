"""
Adapter base — the contract between the core and the host.

The core never calls ``subprocess`` or ``urllib`` directly.  It talks
to a ``CommandRunner`` (engine CLI, service manager, package manager)
and an ``HttpClient`` (mirror listings, release metadata, downloads).
Swapping both for the doubles in ``adapters.mock`` makes every core
decision testable without a network or a real host.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Result of a host command.

    Runners NEVER raise for a failing command: a non-zero exit, a
    timeout or a missing executable all land here with ``ok=False``.
    """

    cmd: list[str] = Field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.error is None

    @property
    def output(self) -> str:
        """stdout and stderr together (some tools print versions on stderr)."""
        return f"{self.stdout}{self.stderr}".strip()


class CommandRunner(ABC):
    """Runs host commands and resolves executables on PATH."""

    @abstractmethod
    def run(
        self,
        cmd: list[str],
        *,
        timeout: int = 120,
        cwd: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        """Run ``cmd`` and return its result.  MUST NOT raise.

        ``capture=False`` lets the command talk to the terminal directly
        (interactive shells, pagers, progress output).
        """

    @abstractmethod
    def which(self, name: str) -> str | None:
        """Return the resolved path of ``name`` on PATH, or None."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class HttpClient(ABC):
    """Minimal HTTP surface used by the acquisition pipeline.

    ``fetch_text`` and ``exists`` are probes: they return None / False on
    any failure.  ``download`` is an explicit transfer and raises
    ``DownloadFailed``.
    """

    @abstractmethod
    def fetch_text(self, url: str, *, timeout: int = 10) -> str | None:
        """GET ``url`` and return the decoded body, or None on any failure."""

    @abstractmethod
    def exists(self, url: str, *, timeout: int = 10) -> bool:
        """Lightweight existence probe (HEAD) for ``url``."""

    @abstractmethod
    def download(self, url: str, dest: Path, *, timeout: int = 300) -> Path:
        """Stream ``url`` into ``dest``.  Raises ``DownloadFailed``."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
