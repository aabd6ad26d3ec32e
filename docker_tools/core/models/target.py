"""
Target model — the engine and its companion tools.

A ``TargetProfile`` lists every place an install of the target can
leave evidence, split by how it got there.  It carries no state: the
installed / not-installed answer is always re-derived from the host by
``detection.detect()``.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from docker_tools.core.models.settings import HostPaths


class TargetName(StrEnum):
    """Installable targets."""

    ENGINE = "docker"
    COMPOSE = "docker-compose"
    BUILDX = "docker-buildx"

    @classmethod
    def parse(cls, value: str) -> TargetName:
        """Accept the canonical name or a short alias (engine, compose, buildx)."""
        aliases = {
            "engine": cls.ENGINE,
            "docker": cls.ENGINE,
            "compose": cls.COMPOSE,
            "docker-compose": cls.COMPOSE,
            "buildx": cls.BUILDX,
            "docker-buildx": cls.BUILDX,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown target: {value}") from None


class TargetProfile(BaseModel):
    """Where a target lives on the host and how to ask it for its version."""

    name: TargetName
    display_name: str
    commands: list[str] = Field(default_factory=list)
    package_paths: list[str] = Field(default_factory=list)
    manual_paths: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    bundle_files: list[str] = Field(default_factory=list)
    version_command: list[str] = Field(default_factory=list)
    version_pattern: str = r"(\d+\.\d+\.\d+)"


ENGINE_BUNDLE_BINARIES = (
    "containerd",
    "containerd-shim",
    "containerd-shim-runc-v2",
    "ctr",
    "runc",
    "docker",
    "dockerd",
    "docker-init",
    "docker-proxy",
)


def build_profile(name: TargetName, paths: HostPaths) -> TargetProfile:
    """Build the detection profile of ``name`` for a host layout."""
    system_bin = paths.path(paths.system_bin)
    local_bin = paths.path(paths.local_bin)

    if name is TargetName.ENGINE:
        return TargetProfile(
            name=name,
            display_name="Docker",
            commands=["docker"],
            package_paths=[str(system_bin / "docker")],
            manual_paths=[str(local_bin / "docker"), str(local_bin / "dockerd")],
            packages=["docker-ce", "docker.io", "docker"],
            bundle_files=[str(system_bin / b) for b in ENGINE_BUNDLE_BINARIES],
            version_command=["docker", "--version"],
            version_pattern=r"Docker version\s+v?(\d+\.\d+\.\d+)",
        )

    if name is TargetName.COMPOSE:
        return TargetProfile(
            name=name,
            display_name="Docker Compose",
            commands=["docker-compose"],
            package_paths=[str(system_bin / "docker-compose")],
            manual_paths=[str(local_bin / "docker-compose")],
            packages=["docker-compose", "docker-compose-plugin"],
            version_command=["docker-compose", "--version"],
            version_pattern=r"v?(\d+\.\d+\.\d+)",
        )

    return TargetProfile(
        name=name,
        display_name="Docker Buildx",
        commands=["docker-buildx"],
        package_paths=[
            str(paths.path(d) / "docker-buildx") for d in paths.system_plugin_dirs
        ],
        manual_paths=[str(paths.path(paths.user_plugin_dir) / "docker-buildx")],
        packages=["docker-buildx-plugin"],
        version_command=["docker", "buildx", "version"],
        version_pattern=r"v?(\d+\.\d+\.\d+)",
    )
