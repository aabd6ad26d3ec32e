"""
Host package manager — family detection and install / remove / query.

Families are probed in a fixed order (apt, yum, dnf, zypper, pacman);
the first one whose binary is on PATH is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from docker_tools.adapters.base import CommandRunner
from docker_tools.core.errors import PackageManagerError
from docker_tools.core.reporting import Reporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManager:
    """Command templates of one package-manager family.  ``{pkg}`` is substituted."""

    name: str
    binary: str
    query: list[str]
    install: list[str]
    remove: list[str]
    prepare: list[list[str]] = field(default_factory=list)
    optional_prepare: list[list[str]] = field(default_factory=list)
    query_marker: str | None = None

    def render(self, template: list[str], pkg: str) -> list[str]:
        return [part.replace("{pkg}", pkg) for part in template]


FAMILIES: tuple[PackageManager, ...] = (
    PackageManager(
        name="apt",
        binary="apt-get",
        query=["dpkg-query", "-W", "-f=${Status}", "{pkg}"],
        query_marker="install ok installed",
        prepare=[["apt-get", "update"]],
        install=["apt-get", "install", "-y", "{pkg}"],
        remove=["apt-get", "remove", "-y", "{pkg}"],
    ),
    PackageManager(
        name="yum",
        binary="yum",
        query=["rpm", "-q", "{pkg}"],
        optional_prepare=[["yum", "install", "-y", "epel-release"]],
        install=["yum", "install", "-y", "{pkg}"],
        remove=["yum", "remove", "-y", "{pkg}"],
    ),
    PackageManager(
        name="dnf",
        binary="dnf",
        query=["rpm", "-q", "{pkg}"],
        optional_prepare=[["dnf", "install", "-y", "epel-release"]],
        install=["dnf", "install", "-y", "{pkg}"],
        remove=["dnf", "remove", "-y", "{pkg}"],
    ),
    PackageManager(
        name="zypper",
        binary="zypper",
        query=["rpm", "-q", "{pkg}"],
        prepare=[["zypper", "refresh"]],
        install=["zypper", "install", "-y", "{pkg}"],
        remove=["zypper", "remove", "-y", "{pkg}"],
    ),
    PackageManager(
        name="pacman",
        binary="pacman",
        query=["pacman", "-Q", "{pkg}"],
        install=["pacman", "-Sy", "--noconfirm", "{pkg}"],
        remove=["pacman", "-R", "--noconfirm", "{pkg}"],
    ),
)


def detect_package_manager(runner: CommandRunner) -> PackageManager | None:
    """Return the first supported family found on PATH."""
    for family in FAMILIES:
        if runner.which(family.binary):
            logger.debug("Package manager: %s", family.name)
            return family
    return None


def is_package_installed(pm: PackageManager, runner: CommandRunner, pkg: str) -> bool:
    result = runner.run(pm.render(pm.query, pkg), timeout=30)
    if not result.ok:
        return False
    if pm.query_marker:
        return pm.query_marker in result.stdout
    return True


def installed_packages(pm: PackageManager, runner: CommandRunner, names: list[str]) -> list[str]:
    """Subset of ``names`` the package manager reports as installed."""
    return [pkg for pkg in names if is_package_installed(pm, runner, pkg)]


def install_package(
    pm: PackageManager,
    runner: CommandRunner,
    pkg: str,
    reporter: Reporter,
    *,
    timeout: int = 600,
) -> None:
    """Install ``pkg``.  Raises ``PackageManagerError`` on failure."""
    reporter.info(f"Using the {pm.name} package manager")

    for cmd in pm.optional_prepare:
        result = runner.run(cmd, timeout=timeout)
        if not result.ok:
            logger.info("Optional step failed (%s): %s", " ".join(cmd), result.error or result.stderr)

    for cmd in pm.prepare:
        result = runner.run(cmd, timeout=timeout)
        if not result.ok:
            raise PackageManagerError(
                f"{' '.join(cmd)} failed: {result.error or result.stderr.strip()}"
            )

    result = runner.run(pm.render(pm.install, pkg), timeout=timeout)
    if not result.ok:
        raise PackageManagerError(
            f"{pm.name} could not install {pkg}: {result.error or result.stderr.strip()}"
        )


def remove_package(
    pm: PackageManager,
    runner: CommandRunner,
    pkg: str,
    *,
    timeout: int = 600,
) -> None:
    """Remove ``pkg``.  Raises ``PackageManagerError`` on failure."""
    result = runner.run(pm.render(pm.remove, pkg), timeout=timeout)
    if not result.ok:
        raise PackageManagerError(
            f"{pm.name} could not remove {pkg}: {result.error or result.stderr.strip()}"
        )
