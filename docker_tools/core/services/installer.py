"""
Installation state machine.

    NOT_INSTALLED ──install──▶ INSTALLING ──▶ INSTALLED
    INSTALLED ──uninstall──▶ UNINSTALLING ──▶ NOT_INSTALLED
    INSTALLED ──reinstall──▶ UNINSTALLING ──▶ NOT_INSTALLED ──▶ INSTALLING ──▶ INSTALLED

Every decision reads a fresh ``detect()``.  After any removal the host
is re-probed; leftover evidence fails the operation with
``UninstallIncomplete`` and nothing is installed on top of it.

Public methods never raise ``DockerToolsError`` or ``OSError``: the
failure is folded into the returned ``OperationOutcome`` so the menu
loop keeps running.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docker_tools.core.errors import (
    DockerToolsError,
    HostFilesystemError,
    IntegrityError,
    ServiceActivationFailed,
    UninstallIncomplete,
)
from docker_tools.core.models.install import (
    Artifact,
    InstallationRecord,
    InstallMethod,
    InstallState,
    OperationOutcome,
)
from docker_tools.core.prompts import Ask, Confirm
from docker_tools.core.reporting import Reporter
from docker_tools.core.services.integrity import require_override
from docker_tools.core.services.reconciler import Reconciler
from docker_tools.core.services.targets.base import TargetStrategy

logger = logging.getLogger(__name__)


class InstallMachine:
    """Drives one target through install / uninstall."""

    def __init__(
        self,
        strategy: TargetStrategy,
        *,
        confirm: Confirm,
        reporter: Reporter,
        reconciler: Reconciler | None = None,
        ask: Ask | None = None,
        corrupt_confirm: Confirm | None = None,
    ):
        self.strategy = strategy
        self.confirm = confirm
        self.corrupt_confirm = corrupt_confirm
        self.reporter = reporter
        self.reconciler = reconciler or Reconciler(strategy.runner, reporter)
        self.ask = ask
        self.state = InstallState.NOT_INSTALLED
        self.transitions: list[InstallState] = []

    @property
    def name(self) -> str:
        return self.strategy.display_name

    def _enter(self, state: InstallState) -> None:
        logger.info("%s: %s -> %s", self.strategy.name, self.state, state)
        self.state = state
        self.transitions.append(state)

    def _sync(self, record: InstallationRecord) -> None:
        """Start from what the host says, not from the previous run."""
        self.state = InstallState.INSTALLED if record.installed else InstallState.NOT_INSTALLED
        self.transitions = [self.state]

    def _outcome(self, operation: str, **kwargs) -> OperationOutcome:
        return OperationOutcome(
            target=self.strategy.name,
            operation=operation,
            state=self.state,
            transitions=list(self.transitions),
            **kwargs,
        )

    def _settle(self) -> None:
        """After a failure the state is whatever the host now shows."""
        installed = self.strategy.detect(with_version=False).installed
        self.state = InstallState.INSTALLED if installed else InstallState.NOT_INSTALLED

    def _failure(self, operation: str, error: DockerToolsError, **kwargs) -> OperationOutcome:
        logger.warning("%s %s failed: %s", self.strategy.name, operation, error)
        self.reporter.error(str(error))
        self._settle()
        return self._outcome(
            operation,
            ok=False,
            error=str(error),
            error_kind=error.kind,
            **kwargs,
        )

    # ── Install ────────────────────────────────────────────────

    def install(
        self,
        version: str | None = None,
        *,
        method: InstallMethod | None = None,
    ) -> OperationOutcome:
        """Install the target, replacing an existing install if confirmed.

        ``version=None`` installs the newest available version.  A
        pinned version always installs from the release binary.

        Raises:
            ValueError: ``method`` is not one the target supports.
        """
        if method is not None and method not in self.strategy.install_methods:
            raise ValueError(f"{self.name} cannot be installed with method '{method}'")

        record = self.strategy.detect()
        self._sync(record)
        placed = False

        try:
            if record.installed:
                self.reporter.warn(f"{self.name} is already installed")
                if record.version:
                    self.reporter.plain(f"Installed version: {record.version}")
                if not self.confirm(f"Uninstall the existing {self.name} and reinstall?", True):
                    self.reporter.success(f"Keeping the existing {self.name} install")
                    return self._outcome("install", aborted=True, version=record.version)

                self._remove(record)
                self.reporter.success(f"Existing {self.name} removed")
                if not self.confirm(f"Continue installing {self.name}?", True):
                    self.reporter.success("Installation skipped")
                    return self._outcome("install", aborted=True)
            else:
                self.reporter.info(f"{self.name} is not installed")
                if not self.confirm(f"Install {self.name}?", True):
                    self.reporter.success("Installation skipped")
                    return self._outcome("install", aborted=True)

            self._enter(InstallState.INSTALLING)
            chosen = self._choose_method(version, method)

            if chosen is InstallMethod.PACKAGE:
                placed_paths = self.strategy.install_package()
                placed = True
            else:
                artifact = self.strategy.acquire(version)
                result = self.strategy.verify(artifact)
                require_override(
                    result,
                    self.confirm,
                    self.reporter,
                    discard_unverified=artifact.downloaded,
                    corrupt_confirm=self.corrupt_confirm,
                )
                placed_paths = self.strategy.place(artifact)
                placed = True
                self.strategy.activate()

            try:
                installed_version = self.strategy.verify_installed()
            except ServiceActivationFailed:
                self.strategy.on_verify_failed(placed_paths)
                raise

            self.reporter.success(f"{self.name} {installed_version} installed")
            self.strategy.after_install()

            if chosen is not InstallMethod.PACKAGE:
                self._offer_cleanup(artifact)

            # the host, not this process, decides whether it worked
            if not self.strategy.detect(with_version=False).installed:
                raise ServiceActivationFailed(
                    f"{self.name} was placed but is not detectable on the host"
                )
            self._enter(InstallState.INSTALLED)
            return self._outcome(
                "install",
                placed=placed,
                version=installed_version,
                metadata={"method": str(chosen), "paths": placed_paths},
            )

        except IntegrityError as e:
            self.reporter.warn("Installation aborted before anything was placed")
            return self._failure("install", e, aborted=True)
        except (DockerToolsError, OSError) as e:
            error = e if isinstance(e, DockerToolsError) else HostFilesystemError(f"install {self.name}", e)
            if placed:
                self.reporter.warn(f"{self.name} files were placed, but the install did not complete")
            return self._failure("install", error, placed=placed)

    def _choose_method(
        self, version: str | None, method: InstallMethod | None,
    ) -> InstallMethod:
        available = self.strategy.install_methods
        if method is not None:
            return method
        if version or len(available) == 1:
            return InstallMethod.BINARY
        if self.ask is None:
            return available[0]

        self.reporter.plain("Choose an install method:")
        for i, m in enumerate(available, 1):
            suffix = " (default)" if i == 1 else ""
            self.reporter.plain(f"  {i}) {m}{suffix}")
        while True:
            answer = self.ask("Enter a choice").strip()
            if not answer:
                return available[0]
            if answer.isdigit() and 1 <= int(answer) <= len(available):
                return available[int(answer) - 1]
            self.reporter.warn(f"Invalid choice '{answer}', enter 1-{len(available)}")

    def _offer_cleanup(self, artifact: Artifact) -> None:
        leftovers = self.strategy.leftovers(artifact)
        if not leftovers:
            return
        names = ", ".join(p.name for p in leftovers)
        if self.confirm(f"Delete the downloaded files ({names})?", True):
            for path in leftovers:
                Path(path).unlink(missing_ok=True)
            self.reporter.success("Downloaded files deleted")
        else:
            self.reporter.info("Downloaded files kept")

    # ── Uninstall ──────────────────────────────────────────────

    def uninstall(self) -> OperationOutcome:
        """Remove the target the way it was installed."""
        record = self.strategy.detect()
        self._sync(record)

        if not record.installed:
            self.reporter.warn(f"{self.name} is not installed, nothing to uninstall")
            return self._outcome("uninstall", aborted=True)

        self.reporter.warn(f"{self.name} uninstall will:")
        for step in self.strategy.uninstall_steps():
            self.reporter.plain(f"  - {step}")
        if record.version:
            self.reporter.info(f"Installed version: {record.version}")

        if not self.confirm(f"Uninstall {self.name}?", True):
            self.reporter.success("Uninstall cancelled")
            return self._outcome("uninstall", aborted=True, version=record.version)

        try:
            self._remove(record)
        except DockerToolsError as e:
            return self._failure("uninstall", e)
        except OSError as e:
            return self._failure("uninstall", HostFilesystemError(f"remove {self.name}", e))

        self.reporter.success(f"{self.name} uninstalled")
        return self._outcome("uninstall", version=record.version)

    def _remove(self, record: InstallationRecord) -> None:
        """INSTALLED → UNINSTALLING → NOT_INSTALLED, verified by re-probe."""
        plan = self.reconciler.plan(self.strategy.profile, record)
        self._enter(InstallState.UNINSTALLING)
        self.strategy.before_remove(record)
        self.reconciler.execute(plan)
        self.strategy.after_remove()

        after = self.strategy.detect(with_version=False)
        if after.installed:
            raise UninstallIncomplete(str(self.strategy.name), after.residue)
        self._enter(InstallState.NOT_INSTALLED)
