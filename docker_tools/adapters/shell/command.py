"""
Shell command adapter — the single place ``subprocess.run`` is called.

Engine CLI queries, systemctl, package managers and tar all go through
``SubprocessRunner``.  Logging, timeouts and error capture are
centralised here.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from docker_tools.adapters.base import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 4000


class SubprocessRunner(CommandRunner):
    """Run real host commands."""

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def run(
        self,
        cmd: list[str],
        *,
        timeout: int = 120,
        cwd: str | None = None,
        capture: bool = True,
    ) -> CommandResult:
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=capture,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                cmd=cmd,
                returncode=-1,
                error=f"Command timed out after {timeout}s",
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )
        except FileNotFoundError:
            return CommandResult(cmd=cmd, returncode=127, error=f"Command not found: {cmd[0]}")
        except OSError as e:
            logger.exception("Subprocess error: %s", cmd)
            return CommandResult(cmd=cmd, returncode=-1, error=str(e))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = (result.stdout or "")[-_OUTPUT_TAIL:]
        stderr = (result.stderr or "")[-_OUTPUT_TAIL:]

        if result.returncode != 0:
            logger.debug("Command exited %d: %s", result.returncode, stderr.strip())

        return CommandResult(
            cmd=cmd,
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed_ms,
        )
