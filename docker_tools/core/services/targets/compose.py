"""
Compose target — standalone ``docker-compose`` binary or distro package.

Binary installs take the ``docker-compose-linux-<arch>`` release asset
from the first GitHub proxy that serves it, checked against the
``.sha256`` file published next to it, and put it in the local bin dir.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docker_tools.core.errors import PackageManagerError
from docker_tools.core.models.install import Artifact, InstallMethod
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.arch import target_arch
from docker_tools.core.services.mirrors import MirrorLayout
from docker_tools.core.services.package_manager import detect_package_manager, install_package
from docker_tools.core.services.targets.base import TargetStrategy
from docker_tools.core.services.versions import (
    VersionCatalog,
    fetch_latest_release,
    fetch_release_catalog,
)

logger = logging.getLogger(__name__)

COMPOSE_LAYOUT = MirrorLayout(
    artifact="{base}/{version}/{filename}",
    digest="{base}/{version}/{filename}.sha256",
)

COMPOSE_PACKAGE = "docker-compose"


def release_tag(version: str) -> str:
    """Release tags carry a ``v`` prefix; accept the version with or without it."""
    version = version.strip()
    return version if version.startswith("v") else f"v{version}"


class ComposeStrategy(TargetStrategy):
    """Docker Compose v2 standalone binary."""

    name = TargetName.COMPOSE
    install_methods = (InstallMethod.PACKAGE, InstallMethod.BINARY)

    @property
    def binary_path(self) -> Path:
        paths = self.settings.paths
        return paths.path(paths.local_bin) / "docker-compose"

    def catalog(self) -> VersionCatalog:
        return fetch_release_catalog(
            self.http,
            self.settings.compose_repo,
            api_base=self.settings.github_api,
            timeout=self.settings.timeouts.probe,
        )

    def acquire(self, version: str | None = None) -> Artifact:
        arch = target_arch(self.name, self.machine)
        self.reporter.info(f"Detected architecture: {arch}")

        if version:
            tag = release_tag(version)
        else:
            self.reporter.step("Looking up the latest Docker Compose release...")
            tag = fetch_latest_release(
                self.http,
                self.settings.compose_repo,
                api_base=self.settings.github_api,
                timeout=self.settings.timeouts.probe,
            )
            self.reporter.success(f"Latest version: {tag}")

        artifact = self.fetch_binary(
            self.settings.mirrors.compose,
            COMPOSE_LAYOUT,
            arch,
            tag,
            f"docker-compose-linux-{arch}",
        )
        if not artifact.downloaded:
            # the asset name carries no version; show what the local file is
            self._report_local_version(Path(artifact.path), tag)
        return artifact

    def _report_local_version(self, path: Path, tag: str) -> None:
        result = self.runner.run([str(path), "version", "--short"], timeout=self.settings.timeouts.probe)
        reported = result.stdout.strip() if result.ok else ""
        if reported:
            self.reporter.info(f"Local file reports Docker Compose {reported}")
        else:
            self.reporter.warn(f"Could not read the version of {path.name}; it may not be {tag}")

    def place(self, artifact: Artifact) -> list[str]:
        self.reporter.step(f"Installing to {self.binary_path}...")
        dest = self.install_binary(Path(artifact.path), self.binary_path)
        return [str(dest)]

    def install_package(self) -> list[str]:
        pm = detect_package_manager(self.runner)
        if pm is None:
            raise PackageManagerError(
                "No supported package manager found (apt, yum, dnf, zypper, pacman)"
            )
        self.reporter.step(f"Installing {COMPOSE_PACKAGE} with {pm.name}...")
        install_package(
            pm, self.runner, COMPOSE_PACKAGE, self.reporter,
            timeout=self.settings.timeouts.download,
        )
        resolved = self.runner.which("docker-compose")
        return [resolved] if resolved else []

    def after_install(self) -> None:
        local_bin = self.settings.paths.local_bin
        if self.binary_path.is_file() and not self.bin_on_path(local_bin):
            self.reporter.warn(f"{local_bin} is not on your PATH")
            self.reporter.plain(
                f"Add it with: echo 'export PATH=$PATH:{local_bin}' >> ~/.bashrc && source ~/.bashrc"
            )

    def uninstall_steps(self) -> list[str]:
        return [
            "Remove the Docker Compose package, or",
            f"delete {self.binary_path} for a binary install",
        ]
