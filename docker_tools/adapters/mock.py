"""
Mock adapters — scripted stand-ins for the host and the network.

Used by the test-suite and by ``--dry-run`` style experiments to drive
the core without touching external tools.  Both doubles record every
call so tests can assert on probe order.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from docker_tools.adapters.base import CommandResult, CommandRunner, HttpClient
from docker_tools.core.errors import DownloadFailed

Responder = Callable[[list[str]], CommandResult]


class MockRunner(CommandRunner):
    """Scripted command runner.

    By default every command succeeds with empty output.  Responses are
    matched by command prefix; the longest matching prefix wins.
    ``which`` answers from ``on_path`` first, then from files present in
    the ``search_path`` directories.
    """

    def __init__(
        self,
        on_path: dict[str, str] | None = None,
        default_ok: bool = True,
        search_path: list[Path] | None = None,
    ):
        self._on_path: dict[str, str] = dict(on_path or {})
        self._search_path = list(search_path or [])
        self._default_ok = default_ok
        self._responses: dict[tuple[str, ...], CommandResult | Responder] = {}
        self._call_log: list[list[str]] = []

    @property
    def call_log(self) -> list[list[str]]:
        """Every command this mock has received, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def add_command(self, name: str, path: str | None = None) -> None:
        """Make ``name`` resolvable on PATH."""
        self._on_path[name] = path or f"/usr/bin/{name}"

    def remove_command(self, name: str) -> None:
        self._on_path.pop(name, None)

    def set_response(self, prefix: list[str], response: CommandResult | Responder) -> None:
        """Answer commands starting with ``prefix`` with a result or a callable."""
        self._responses[tuple(prefix)] = response

    def set_output(self, prefix: list[str], stdout: str) -> None:
        self._responses[tuple(prefix)] = CommandResult(cmd=list(prefix), stdout=stdout)

    def set_failure(self, prefix: list[str], error: str = "Mock failure", returncode: int = 1) -> None:
        self._responses[tuple(prefix)] = CommandResult(
            cmd=list(prefix), returncode=returncode, stderr=error,
        )

    def calls_matching(self, prefix: list[str]) -> list[list[str]]:
        n = len(prefix)
        return [c for c in self._call_log if c[:n] == prefix]

    def which(self, name: str) -> str | None:
        if name in self._on_path:
            return self._on_path[name]
        # files placed under a fake bin dir resolve like a real PATH lookup
        for directory in self._search_path:
            candidate = directory / name
            if candidate.is_file():
                return str(candidate)
        return None

    def run(
        self,
        cmd: list[str],
        *,
        timeout: int = 120,
        cwd: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        self._call_log.append(list(cmd))

        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if tuple(cmd[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix

        if best is not None:
            response = self._responses[best]
            if callable(response):
                return response(list(cmd))
            return response.model_copy(update={"cmd": list(cmd)})

        return CommandResult(cmd=list(cmd), returncode=0 if self._default_ok else 1)

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()


class MockHttpClient(HttpClient):
    """In-memory web: pages for listings / metadata, files for downloads."""

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}
        self.files: dict[str, bytes] = {}
        self._call_log: list[tuple[str, str]] = []

    @property
    def call_log(self) -> list[tuple[str, str]]:
        """``(method, url)`` for every request, in order."""
        return self._call_log

    def requested(self, method: str | None = None) -> list[str]:
        return [url for m, url in self._call_log if method is None or m == method]

    def add_page(self, url: str, text: str) -> None:
        self.pages[url] = text

    def add_file(self, url: str, data: bytes) -> None:
        self.files[url] = data

    def fetch_text(self, url: str, *, timeout: int = 10) -> str | None:
        self._call_log.append(("GET", url))
        if url in self.pages:
            return self.pages[url]
        if url in self.files:
            return self.files[url].decode("utf-8", errors="replace")
        return None

    def exists(self, url: str, *, timeout: int = 10) -> bool:
        self._call_log.append(("HEAD", url))
        return url in self.files or url in self.pages

    def download(self, url: str, dest: Path, *, timeout: int = 300) -> Path:
        self._call_log.append(("DOWNLOAD", url))
        data = self.files.get(url)
        if data is None:
            raise DownloadFailed(url, "HTTP 404")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        return dest
