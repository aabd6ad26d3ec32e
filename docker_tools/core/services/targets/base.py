"""
Target strategy — the per-target half of install / uninstall.

The state machine in ``installer.py`` owns the order of operations and
the confirmations.  A strategy owns what differs between targets:

    acquire   resolve version + mirror, download artifact and digest
    place     move verified files into their live location
    activate  bring up a service (engine only)
    verify_installed  ask the placed tool for its version
    before_remove / after_remove  target-specific uninstall steps
"""

from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from docker_tools.adapters.base import CommandRunner, HttpClient
from docker_tools.core.errors import (
    DownloadFailed,
    HostFilesystemError,
    NoMirrorAvailable,
    ServiceActivationFailed,
)
from docker_tools.core.models.install import (
    Artifact,
    InstallationRecord,
    InstallMethod,
    MirrorSelection,
    VerificationResult,
)
from docker_tools.core.models.settings import Settings
from docker_tools.core.models.target import TargetName, TargetProfile, build_profile
from docker_tools.core.prompts import Confirm
from docker_tools.core.reporting import Reporter
from docker_tools.core.services.detection import detect, query_version
from docker_tools.core.services.integrity import verify_artifact
from docker_tools.core.services.mirrors import MirrorLayout, select_pinned
from docker_tools.core.services.versions import VersionCatalog

logger = logging.getLogger(__name__)


class TargetStrategy(ABC):
    """Acquisition and placement rules of one target."""

    name: TargetName
    install_methods: tuple[InstallMethod, ...] = (InstallMethod.BINARY,)

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner,
        http: HttpClient,
        reporter: Reporter,
        confirm: Confirm,
        *,
        machine: str | None = None,
    ):
        self.settings = settings
        self.runner = runner
        self.http = http
        self.reporter = reporter
        self.confirm = confirm
        self.machine = machine  # overrides platform.machine() when set

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} target={self.name!s}>"

    # ── Detection ──────────────────────────────────────────────

    @property
    def profile(self) -> TargetProfile:
        return build_profile(self.name, self.settings.paths)

    @property
    def display_name(self) -> str:
        return self.profile.display_name

    def detect(self, *, with_version: bool = True) -> InstallationRecord:
        """Fresh host probe; never cached."""
        return detect(
            self.profile,
            self.runner,
            with_version=with_version,
            timeout=self.settings.timeouts.probe,
        )

    # ── Install ────────────────────────────────────────────────

    @abstractmethod
    def catalog(self) -> VersionCatalog:
        """Every installable version, newest first."""

    @abstractmethod
    def acquire(self, version: str | None = None) -> Artifact:
        """Resolve, locate and download the artifact for ``version`` (None = latest)."""

    def verify(self, artifact: Artifact) -> VerificationResult:
        reference = Path(artifact.digest_path) if artifact.digest_path else None
        return verify_artifact(Path(artifact.path), reference)

    @abstractmethod
    def place(self, artifact: Artifact) -> list[str]:
        """Move the artifact's payload into place.  Returns the placed paths."""

    def install_package(self) -> list[str]:
        raise NotImplementedError(f"{self.display_name} has no package-manager install")

    def activate(self) -> None:
        """Start whatever needs starting after placement."""

    def verify_installed(self) -> str:
        """Return the installed version or raise ``ServiceActivationFailed``."""
        version = query_version(self.profile, self.runner, timeout=self.settings.timeouts.probe)
        if not version:
            raise ServiceActivationFailed(
                f"{self.display_name} was placed but '{' '.join(self.profile.version_command)}' failed"
            )
        return version

    def on_verify_failed(self, placed: list[str]) -> None:
        """Hook for cleaning up after a failed post-install verification."""

    def after_install(self) -> None:
        """Advisory steps after a verified install."""

    def leftovers(self, artifact: Artifact) -> list[Path]:
        """Local files still present after placement (offered for deletion)."""
        candidates = [Path(artifact.path)]
        if artifact.digest_path:
            candidates.append(Path(artifact.digest_path))
        return [p for p in candidates if p.exists()]

    # ── Uninstall ──────────────────────────────────────────────

    def uninstall_steps(self) -> list[str]:
        return [f"Remove the {self.display_name} executable"]

    def before_remove(self, record: InstallationRecord) -> None:
        """Runs after the removal plan is chosen, before anything is removed."""

    def after_remove(self) -> None:
        """Runs after the reconciler removed the install."""

    # ── Helpers shared by binary targets ───────────────────────

    @property
    def download_dir(self) -> Path:
        return self.settings.download_path

    def report_attempts(self, selection: MirrorSelection) -> None:
        for attempt in selection.failed_attempts:
            self.reporter.warn(f"Mirror unavailable: {attempt.url} ({attempt.error}), tried next")

    def fetch_binary(
        self,
        mirrors: list[str],
        layout: MirrorLayout,
        arch: str,
        version: str,
        filename: str,
        *,
        digest_name: str | None = None,
    ) -> Artifact:
        """Local file, else first mirror serving ``filename``; then its digest.

        A local artifact is paired with a local ``<filename>.sha256`` if
        one exists.  A downloaded artifact is paired with the digest the
        same mirror publishes; a failed digest download leaves it unpaired.
        """
        selection = select_pinned(
            self.http,
            mirrors,
            layout,
            arch,
            version,
            filename,
            cache_dir=self.download_dir,
            timeout=self.settings.timeouts.probe,
        )
        self.report_attempts(selection)

        if selection.is_local:
            self.reporter.info(f"Using local file {selection.local_path}")
            local_digest = self.download_dir / f"{filename}.sha256"
            return Artifact(
                target=self.name,
                version=version,
                arch=arch,
                path=str(selection.local_path),
                digest_path=str(local_digest) if local_digest.is_file() else None,
                downloaded=False,
            )

        if selection.url is None or selection.mirror is None:
            raise NoMirrorAvailable(f"No mirror serves {filename}", selection.attempts)
        self.reporter.success(f"Using mirror {selection.mirror}")
        dest = self.download(selection.url, self.download_dir / filename)

        digest_path = None
        digest_url = layout.digest_url(selection.mirror, arch, version, filename)
        if digest_url:
            target = self.download_dir / (digest_name or f"{filename}.sha256")
            self.reporter.step("Downloading checksum file...")
            try:
                digest_path = str(
                    self.http.download(digest_url, target, timeout=self.settings.timeouts.probe)
                )
            except DownloadFailed as e:
                logger.info("Digest download failed: %s", e)
                self.reporter.warn("Checksum file download failed")

        return Artifact(
            target=self.name,
            version=version,
            arch=arch,
            path=str(dest),
            digest_path=digest_path,
            source_url=selection.url,
            downloaded=True,
        )

    def download(self, url: str, dest: Path) -> Path:
        self.reporter.step(f"Downloading {dest.name}...")
        path = self.http.download(url, dest, timeout=self.settings.timeouts.download)
        self.reporter.success(f"Downloaded {dest.name}")
        return path

    def install_binary(self, source: Path, dest: Path) -> Path:
        """Move ``source`` to ``dest`` and make it executable.

        Raises:
            HostFilesystemError: ``dest`` or its directory cannot be written.
        """
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(dest))
            dest.chmod(0o755)
        except OSError as e:
            raise HostFilesystemError(f"install {dest}", e) from e
        logger.info("Installed %s", dest)
        return dest

    def bin_on_path(self, directory: str) -> bool:
        entries = os.environ.get("PATH", "").split(os.pathsep)
        return directory.rstrip("/") in {e.rstrip("/") for e in entries if e}
