"""
Buildx target — the ``docker-buildx`` CLI plugin.

The release asset ``buildx-vX.Y.Z.linux-<arch>`` is checked against
the release's ``checksums.txt`` and installed into the user's CLI
plugin dir.  A plugin that ``docker buildx version`` cannot run is
removed again, with some host facts printed for diagnosis.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docker_tools.core.models.install import Artifact
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.arch import target_arch
from docker_tools.core.services.mirrors import MirrorLayout
from docker_tools.core.services.targets.base import TargetStrategy
from docker_tools.core.services.targets.compose import release_tag
from docker_tools.core.services.versions import (
    VersionCatalog,
    fetch_latest_release,
    fetch_release_catalog,
)

logger = logging.getLogger(__name__)

BUILDX_LAYOUT = MirrorLayout(
    artifact="{base}/{version}/{filename}",
    digest="{base}/{version}/checksums.txt",
)

_DIAGNOSTICS = (
    ("System", ["uname", "-s"]),
    ("Architecture", ["uname", "-m"]),
    ("Libc", ["ldd", "--version"]),
)


def plugin_filename(tag: str, arch: str) -> str:
    return f"buildx-{tag}.linux-{arch}"


class BuildxStrategy(TargetStrategy):
    """Docker Buildx CLI plugin."""

    name = TargetName.BUILDX

    @property
    def plugin_path(self) -> Path:
        paths = self.settings.paths
        return paths.path(paths.user_plugin_dir) / "docker-buildx"

    def catalog(self) -> VersionCatalog:
        return fetch_release_catalog(
            self.http,
            self.settings.buildx_repo,
            api_base=self.settings.github_api,
            timeout=self.settings.timeouts.probe,
        )

    def acquire(self, version: str | None = None) -> Artifact:
        arch = target_arch(self.name, self.machine)
        self.reporter.info(f"Detected architecture: {self.machine or 'host'} -> buildx {arch}")

        if version:
            tag = release_tag(version)
        else:
            self.reporter.step("Looking up the latest Docker Buildx release...")
            tag = fetch_latest_release(
                self.http,
                self.settings.buildx_repo,
                api_base=self.settings.github_api,
                timeout=self.settings.timeouts.probe,
            )
            self.reporter.success(f"Latest version: {tag}")

        filename = plugin_filename(tag, arch)
        return self.fetch_binary(
            self.settings.mirrors.buildx,
            BUILDX_LAYOUT,
            arch,
            tag,
            filename,
            digest_name=f"buildx-{tag}.checksums.txt",
        )

    def place(self, artifact: Artifact) -> list[str]:
        self.reporter.step(f"Installing plugin to {self.plugin_path}...")
        dest = self.install_binary(Path(artifact.path), self.plugin_path)
        return [str(dest)]

    def on_verify_failed(self, placed: list[str]) -> None:
        self.reporter.error("Docker Buildx could not run; the binary may not suit this system")
        self.reporter.warn("Diagnostics:")
        for label, cmd in _DIAGNOSTICS:
            result = self.runner.run(cmd, timeout=self.settings.timeouts.probe)
            first = result.output.splitlines()[0] if result.ok and result.output else "unknown"
            self.reporter.plain(f"  {label}: {first}")

        for path in placed:
            Path(path).unlink(missing_ok=True)
            logger.info("Removed unusable plugin %s", path)

    def uninstall_steps(self) -> list[str]:
        return [f"Delete the Docker Buildx plugin ({self.plugin_path}) or its package"]
