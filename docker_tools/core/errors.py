"""
Error taxonomy — every failure the acquisition pipeline can report.

Services raise these.  The installation state machine catches them at
its boundary and turns them into an ``OperationOutcome``, so nothing
here ever reaches the menu loop as an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from docker_tools.core.models.install import MirrorAttempt


class DockerToolsError(Exception):
    """Base class for every error raised by docker-tools."""

    kind = "error"


class ConfigError(DockerToolsError):
    """Raised when the configuration file is invalid."""

    kind = "config_error"


class UnsupportedArchitecture(DockerToolsError):
    """The host CPU architecture has no mapping for the requested target."""

    kind = "unsupported_architecture"

    def __init__(self, machine: str, target: str | None = None):
        self.machine = machine
        self.target = target
        where = f" for {target}" if target else ""
        super().__init__(f"Unsupported architecture{where}: {machine or '<empty>'}")


class NoMirrorAvailable(DockerToolsError):
    """Every mirror in the list was probed and none was usable."""

    kind = "no_mirror_available"

    def __init__(self, message: str, attempts: list[MirrorAttempt] | None = None):
        self.attempts = list(attempts or [])
        super().__init__(message)


class DownloadFailed(DockerToolsError):
    """An artifact or metadata download did not complete."""

    kind = "download_failed"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Download failed for {url}{detail}")


class IntegrityError(DockerToolsError):
    """Base for recoverable verification outcomes the operator may override."""

    kind = "integrity_error"

    def __init__(self, message: str, artifact: Path | None = None):
        self.artifact = artifact
        super().__init__(message)


class CorruptArtifact(IntegrityError):
    """The artifact digest does not match its published reference."""

    kind = "corrupt"


class UnverifiedArtifact(IntegrityError):
    """No reference digest was available to check the artifact against."""

    kind = "unverified"


class InvalidSelection(DockerToolsError):
    """A catalog selection was non-numeric or out of range."""

    kind = "invalid_selection"

    def __init__(self, raw: str, size: int):
        self.raw = raw
        self.size = size
        super().__init__(f"Invalid selection {raw!r}: expected a number from 1 to {size}")


class UninstallIncomplete(DockerToolsError):
    """Install evidence was still detected after an uninstall step."""

    kind = "uninstall_incomplete"

    def __init__(self, target: str, residue: list[str]):
        self.target = target
        self.residue = list(residue)
        super().__init__(
            f"{target} is still detected after uninstall: {', '.join(residue) or 'unknown'}"
        )


class UnknownInstallMethod(DockerToolsError):
    """The install evidence does not match any removal procedure we own."""

    kind = "unknown_install_method"


class PackageManagerError(DockerToolsError):
    """No supported package manager, or the package manager command failed."""

    kind = "package_manager_error"


class ServiceActivationFailed(DockerToolsError):
    """Files were placed but the tool did not come up or answer its version query."""

    kind = "service_activation_failed"


class HostFilesystemError(DockerToolsError):
    """A file or directory on the host could not be created, moved or removed."""

    kind = "host_filesystem_error"

    def __init__(self, action: str, error: OSError):
        self.action = action
        self.path = error.filename
        super().__init__(f"Cannot {action}: {error.strerror or error}")
