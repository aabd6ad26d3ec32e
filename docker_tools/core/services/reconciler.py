"""
Existing-install reconciler — decide HOW a detected install is removed.

Precedence when evidence disagrees:

1. A binary in the system bin / system plugin dir (package path).
   - owned by a package the host package manager knows → PACKAGE
   - not owned, but the target ships a static bundle (engine) → BUNDLE
   - otherwise → ``UnknownInstallMethod``.  Running a package remove
     against a copied file would be a silent no-op.
2. A binary in the local bin / user plugin dir (manual path) → BINARY.
3. Only a command on PATH in some other place → ``UnknownInstallMethod``.

When package and manual evidence are both present the package path
wins and the conflict is reported; the manual copy is left for the
post-uninstall re-probe to surface.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, Field

from docker_tools.adapters.base import CommandRunner
from docker_tools.core.errors import HostFilesystemError, UnknownInstallMethod
from docker_tools.core.models.install import InstallationRecord, InstallMethod
from docker_tools.core.models.target import TargetName, TargetProfile
from docker_tools.core.reporting import Reporter
from docker_tools.core.services.package_manager import (
    PackageManager,
    detect_package_manager,
    installed_packages,
    remove_package,
)

logger = logging.getLogger(__name__)


class RemovalPlan(BaseModel):
    """What will be removed, and by which procedure."""

    target: TargetName
    method: InstallMethod
    paths: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    package_manager: str | None = None
    conflicting: list[str] = Field(default_factory=list)


class Reconciler:
    """Map install evidence to the matching removal procedure."""

    def __init__(self, runner: CommandRunner, reporter: Reporter):
        self.runner = runner
        self.reporter = reporter

    def plan(self, profile: TargetProfile, record: InstallationRecord) -> RemovalPlan:
        """Choose the removal procedure for ``record``.

        Raises:
            UnknownInstallMethod: no procedure matches the evidence.
        """
        if record.package_paths:
            conflicting = record.manual_paths
            if conflicting:
                logger.warning(
                    "%s found in both package and manual locations: %s / %s",
                    profile.name, record.package_paths, conflicting,
                )
                self.reporter.warn(
                    f"{profile.display_name} is present in both "
                    f"{', '.join(record.package_paths)} and {', '.join(conflicting)}; "
                    "removing the system install first"
                )

            pm = detect_package_manager(self.runner)
            owned = installed_packages(pm, self.runner, profile.packages) if pm else []
            if pm and owned:
                self.reporter.info(
                    f"{profile.display_name} was installed by the {pm.name} package manager"
                )
                return RemovalPlan(
                    target=profile.name,
                    method=InstallMethod.PACKAGE,
                    paths=record.package_paths,
                    packages=owned,
                    package_manager=pm.name,
                    conflicting=conflicting,
                )

            if profile.bundle_files:
                paths = [p for p in profile.bundle_files if Path(p).is_file()]
                self.reporter.info(
                    f"{profile.display_name} was installed from a static bundle"
                )
                return RemovalPlan(
                    target=profile.name,
                    method=InstallMethod.BUNDLE,
                    paths=paths,
                    conflicting=conflicting,
                )

            raise UnknownInstallMethod(
                f"{', '.join(record.package_paths)} is not owned by any known package "
                f"({', '.join(profile.packages)}); refusing to guess how "
                f"{profile.display_name} was installed"
            )

        if record.manual_paths:
            self.reporter.info(f"{profile.display_name} was installed as a standalone binary")
            return RemovalPlan(
                target=profile.name,
                method=InstallMethod.BINARY,
                paths=record.manual_paths,
            )

        raise UnknownInstallMethod(
            f"{profile.display_name} resolves to {', '.join(record.residue) or 'nothing'}, "
            "which is not a location docker-tools manages"
        )

    def execute(self, plan: RemovalPlan) -> None:
        """Carry out ``plan``.  Package-manager failures propagate.

        Raises:
            UnknownInstallMethod: the package manager reported success but a
                path it should own is still there.
            HostFilesystemError: a manually placed file cannot be removed.
        """
        if plan.method is InstallMethod.PACKAGE:
            pm = self._package_manager(plan.package_manager)
            for pkg in plan.packages:
                self.reporter.step(f"Removing package {pkg} with {pm.name}...")
                remove_package(pm, self.runner, pkg)

            untouched = [p for p in plan.paths if Path(p).exists()]
            if untouched:
                raise UnknownInstallMethod(
                    f"{pm.name} removed {', '.join(plan.packages)} but {', '.join(untouched)} "
                    "is still there; it was not installed by that package"
                )
            return

        for path in plan.paths:
            target = Path(path)
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                elif target.exists() or target.is_symlink():
                    self.reporter.step(f"Removing {path}")
                    target.unlink()
            except OSError as e:
                raise HostFilesystemError(f"remove {path}", e) from e

    def _package_manager(self, name: str | None) -> PackageManager:
        pm = detect_package_manager(self.runner)
        if pm is None or (name and pm.name != name):
            raise UnknownInstallMethod(f"Package manager {name or '?'} is no longer available")
        return pm
