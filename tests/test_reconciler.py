"""
Tests for the existing-install reconciler.
"""

from pathlib import Path

import pytest

from conftest import place_file

from docker_tools.adapters.base import CommandResult
from docker_tools.core.errors import HostFilesystemError, PackageManagerError, UnknownInstallMethod
from docker_tools.core.models.install import InstallMethod
from docker_tools.core.models.target import TargetName, build_profile
from docker_tools.core.services.detection import detect
from docker_tools.core.services.reconciler import Reconciler

INSTALLED = "install ok installed"


@pytest.fixture
def reconciler(runner, reporter):
    return Reconciler(runner, reporter)


def _plan(reconciler, name, paths, runner):
    profile = build_profile(name, paths)
    return reconciler.plan(profile, detect(profile, runner, with_version=False))


class TestPlan:
    def test_package_owned(self, reconciler, paths, runner):
        binary = place_file(Path(paths.system_bin) / "docker")
        runner.add_command("apt-get")
        runner.set_output(["dpkg-query", "-W", "-f=${Status}", "docker-ce"], INSTALLED)

        plan = _plan(reconciler, TargetName.ENGINE, paths, runner)

        assert plan.method is InstallMethod.PACKAGE
        assert plan.packages == ["docker-ce"]
        assert plan.package_manager == "apt"

        def apt_remove(cmd):
            binary.unlink()
            return CommandResult(cmd=cmd)

        runner.set_response(["apt-get", "remove"], apt_remove)
        reconciler.execute(plan)

        assert runner.calls_matching(["apt-get", "remove"]) == [["apt-get", "remove", "-y", "docker-ce"]]
        assert not binary.exists()

    def test_engine_bundle_without_owner(self, reconciler, paths, runner):
        for name in ("docker", "dockerd", "runc"):
            place_file(Path(paths.system_bin) / name)

        plan = _plan(reconciler, TargetName.ENGINE, paths, runner)

        assert plan.method is InstallMethod.BUNDLE
        assert sorted(Path(p).name for p in plan.paths) == ["docker", "dockerd", "runc"]

        reconciler.execute(plan)

        assert not (Path(paths.system_bin) / "dockerd").exists()

    def test_compose_system_path_without_package_manager(self, reconciler, paths, runner):
        place_file(Path(paths.system_bin) / "docker-compose")
        with pytest.raises(UnknownInstallMethod, match="not owned"):
            _plan(reconciler, TargetName.COMPOSE, paths, runner)

    def test_compose_system_path_not_owned(self, reconciler, paths, runner):
        place_file(Path(paths.system_bin) / "docker-compose")
        runner.add_command("yum")
        runner.set_failure(["rpm", "-q"])
        with pytest.raises(UnknownInstallMethod):
            _plan(reconciler, TargetName.COMPOSE, paths, runner)

    def test_manual_binary_never_touches_package_manager(self, reconciler, paths, runner):
        binary = place_file(Path(paths.local_bin) / "docker-compose")
        runner.add_command("apt-get")

        plan = _plan(reconciler, TargetName.COMPOSE, paths, runner)
        reconciler.execute(plan)

        assert plan.method is InstallMethod.BINARY
        assert runner.call_log == []
        assert not binary.exists()

    def test_command_outside_managed_locations(self, reconciler, paths, runner):
        runner.add_command("docker-compose", "/opt/compose/docker-compose")
        with pytest.raises(UnknownInstallMethod, match="/opt/compose"):
            _plan(reconciler, TargetName.COMPOSE, paths, runner)

    def test_conflict_prefers_package_path(self, reconciler, paths, runner, reporter):
        place_file(Path(paths.system_bin) / "docker")
        place_file(Path(paths.local_bin) / "docker")

        plan = _plan(reconciler, TargetName.ENGINE, paths, runner)

        assert plan.method is InstallMethod.BUNDLE
        assert plan.conflicting == [str(Path(paths.local_bin) / "docker")]
        assert any("both" in m for m in reporter.by_level("warn"))


class TestExecute:
    def test_package_manager_failure_propagates(self, reconciler, paths, runner):
        place_file(Path(paths.system_bin) / "docker")
        runner.add_command("apt-get")
        runner.set_output(["dpkg-query", "-W", "-f=${Status}", "docker.io"], INSTALLED)
        runner.set_failure(["apt-get", "remove"], "dpkg lock held")

        plan = _plan(reconciler, TargetName.ENGINE, paths, runner)

        with pytest.raises(PackageManagerError, match="dpkg lock"):
            reconciler.execute(plan)

    def test_package_manager_gone(self, reconciler, paths, runner):
        place_file(Path(paths.system_bin) / "docker")
        runner.add_command("apt-get")
        runner.set_output(["dpkg-query", "-W", "-f=${Status}", "docker-ce"], INSTALLED)
        plan = _plan(reconciler, TargetName.ENGINE, paths, runner)

        runner.remove_command("apt-get")

        with pytest.raises(UnknownInstallMethod):
            reconciler.execute(plan)

    def test_package_remove_that_leaves_the_binary(self, reconciler, paths, runner):
        binary = place_file(Path(paths.system_bin) / "docker-compose")
        runner.add_command("apt-get")
        runner.set_output(["dpkg-query", "-W", "-f=${Status}", "docker-compose"], INSTALLED)
        plan = _plan(reconciler, TargetName.COMPOSE, paths, runner)
        assert plan.method is InstallMethod.PACKAGE

        with pytest.raises(UnknownInstallMethod, match="still there"):
            reconciler.execute(plan)

        assert runner.calls_matching(["apt-get", "remove"]) == [["apt-get", "remove", "-y", "docker-compose"]]
        assert binary.exists()

    def test_unremovable_manual_binary(self, reconciler, paths, runner, monkeypatch):
        place_file(Path(paths.local_bin) / "docker-compose")
        plan = _plan(reconciler, TargetName.COMPOSE, paths, runner)

        def refuse(self, missing_ok=False):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "unlink", refuse)

        with pytest.raises(HostFilesystemError, match="Permission denied"):
            reconciler.execute(plan)
