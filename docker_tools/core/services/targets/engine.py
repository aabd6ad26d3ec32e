"""
Engine target — static ``docker-X.Y.Z.tgz`` bundles from the CE mirrors.

Latest mode reads each mirror's ``{base}/{arch}/`` directory listing.
Pinned mode uses a local ``docker-X.Y.Z.tgz`` when present, otherwise
HEAD-probes each mirror.  The bundle's ``docker/*`` binaries go to the
system bin dir and the engine runs under a systemd unit.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

from docker_tools.core.errors import (
    DownloadFailed,
    HostFilesystemError,
    NoMirrorAvailable,
    ServiceActivationFailed,
)
from docker_tools.core.models.install import Artifact, InstallationRecord
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.arch import target_arch
from docker_tools.core.services.mirrors import MirrorLayout, select_latest
from docker_tools.core.services.service_manager import ServiceManager, write_unit
from docker_tools.core.services.targets.base import TargetStrategy
from docker_tools.core.services.versions import (
    ENGINE_PACKAGE_PATTERN,
    VersionCatalog,
    catalog_from_mirrors,
)

logger = logging.getLogger(__name__)

ENGINE_LAYOUT = MirrorLayout(
    listing="{base}/{arch}/",
    artifact="{base}/{arch}/{filename}",
)


def bundle_filename(version: str) -> str:
    return f"docker-{version.lstrip('v')}.tgz"


class EngineStrategy(TargetStrategy):
    """Docker engine from static bundles."""

    name = TargetName.ENGINE

    @property
    def services(self) -> ServiceManager:
        return ServiceManager(self.runner, timeout=self.settings.timeouts.command)

    @property
    def arch(self) -> str:
        return target_arch(self.name, self.machine)

    def catalog(self) -> VersionCatalog:
        arch = self.arch
        return catalog_from_mirrors(
            self.http,
            self.settings.mirrors.engine,
            lambda base: ENGINE_LAYOUT.listing_url(base, arch),
            pattern=ENGINE_PACKAGE_PATTERN,
            timeout=self.settings.timeouts.probe,
        )

    def acquire(self, version: str | None = None) -> Artifact:
        arch = self.arch
        self.reporter.info(f"Detected architecture: {arch}")

        if version:
            return self.fetch_binary(
                self.settings.mirrors.engine,
                ENGINE_LAYOUT,
                arch,
                version.lstrip("v"),
                bundle_filename(version),
            )

        selection = select_latest(
            self.http,
            self.settings.mirrors.engine,
            ENGINE_LAYOUT,
            arch,
            bundle_filename,
            pattern=ENGINE_PACKAGE_PATTERN,
            timeout=self.settings.timeouts.probe,
        )
        self.report_attempts(selection)
        if selection.version is None or selection.url is None:
            raise NoMirrorAvailable("No mirror listed a usable engine bundle", selection.attempts)
        self.reporter.success(f"Latest version: {selection.filename}")

        # a bundle already in the download dir is reused
        dest = self.download_dir / selection.filename
        downloaded = False
        if dest.is_file():
            self.reporter.info(f"Using local file {dest}")
        else:
            self.download(selection.url, dest)
            downloaded = True

        local_digest = self.download_dir / f"{selection.filename}.sha256"
        return Artifact(
            target=self.name,
            version=selection.version,
            arch=arch,
            path=str(dest),
            digest_path=str(local_digest) if local_digest.is_file() else None,
            source_url=selection.url,
            downloaded=downloaded,
        )

    def place(self, artifact: Artifact) -> list[str]:
        """Copy ``docker/*`` from the bundle into the system bin dir."""
        system_bin = self.settings.paths.path(self.settings.paths.system_bin)
        placed: list[str] = []

        self.reporter.step("Unpacking bundle and copying binaries...")
        try:
            system_bin.mkdir(parents=True, exist_ok=True)
            with tarfile.open(artifact.path, "r:gz") as tar:
                for member in tar.getmembers():
                    parts = Path(member.name).parts
                    if not member.isfile() or len(parts) != 2 or parts[0] != "docker":
                        continue
                    src = tar.extractfile(member)
                    if src is None:
                        continue
                    dest = system_bin / parts[1]
                    with src, open(dest, "wb") as out:
                        shutil.copyfileobj(src, out)
                    dest.chmod(0o755)
                    placed.append(str(dest))
        except tarfile.TarError as e:
            raise DownloadFailed(artifact.path, f"cannot unpack bundle: {e}") from e
        except OSError as e:
            raise HostFilesystemError(f"copy engine binaries into {system_bin}", e) from e

        if not placed:
            raise DownloadFailed(artifact.path, "bundle contains no docker/ binaries")

        logger.info("Placed %d engine binaries in %s", len(placed), system_bin)
        return placed

    def activate(self) -> None:
        paths = self.settings.paths
        dockerd = paths.path(paths.system_bin) / "dockerd"
        self.reporter.step("Creating service unit...")
        try:
            write_unit(paths.unit_file, str(dockerd))
        except OSError as e:
            raise HostFilesystemError(f"write {paths.unit_file}", e) from e

        services = self.services
        for label, step in (
            ("daemon-reload", services.daemon_reload),
            ("start docker", services.start),
            ("enable docker", services.enable),
        ):
            result = step()
            if not result.ok:
                raise ServiceActivationFailed(
                    f"systemctl {label} failed: {result.error or result.stderr.strip()}"
                )
        self.reporter.success("Docker service started and enabled")

    # ── Uninstall ──────────────────────────────────────────────

    def uninstall_steps(self) -> list[str]:
        return [
            "Stop the Docker service",
            "Disable Docker start on boot",
            "Delete Docker executables",
            f"Delete the Docker config dir ({self.settings.paths.docker_config_dir})",
            "Delete the Docker systemd unit files",
        ]

    def before_remove(self, record: InstallationRecord) -> None:
        services = self.services
        if services.is_active():
            self.reporter.step("Stopping Docker service...")
            services.stop()
        if services.is_enabled():
            self.reporter.step("Disabling Docker start on boot...")
            services.disable()

    def after_remove(self) -> None:
        paths = self.settings.paths
        for unit_dir in paths.unit_dirs:
            unit = paths.path(unit_dir) / "docker.service"
            if unit.is_file():
                self.reporter.step(f"Removing service unit {unit}")
                unit.unlink()

        config_dir = paths.path(paths.docker_config_dir)
        if config_dir.is_dir():
            self.reporter.step(f"Removing {config_dir}")
            shutil.rmtree(config_dir)

        self.services.daemon_reload()

        data_dir = paths.path(paths.docker_data_dir)
        if data_dir.exists() and self.confirm(
            f"Delete the Docker data dir ({data_dir})? All images, containers and volumes will be lost",
            True,
        ):
            self.reporter.step(f"Removing {data_dir}")
            shutil.rmtree(data_dir)
        elif data_dir.exists():
            self.reporter.success(f"Kept Docker data dir ({data_dir})")
