"""
Tests for install detection.
"""

from pathlib import Path

from conftest import place_file

from docker_tools.core.models.install import EvidenceKind
from docker_tools.core.models.target import TargetName, build_profile
from docker_tools.core.services.detection import detect, detect_all, query_version


def _engine(paths):
    return build_profile(TargetName.ENGINE, paths)


class TestDetect:
    def test_nothing_installed(self, paths, runner):
        record = detect(_engine(paths), runner)
        assert not record.installed
        assert record.version is None
        # no version query for an absent target
        assert runner.call_log == []

    def test_package_path_counts(self, paths, runner):
        place_file(Path(paths.system_bin) / "docker")
        runner.set_output(["docker", "--version"], "Docker version 24.0.7, build afdd53b")

        record = detect(_engine(paths), runner)

        assert record.installed
        assert record.version == "24.0.7"
        assert record.package_paths == [str(Path(paths.system_bin) / "docker")]
        assert record.locations(EvidenceKind.COMMAND)

    def test_manual_path_alone_counts(self, paths, runner):
        place_file(Path(paths.local_bin) / "dockerd")
        record = detect(_engine(paths), runner, with_version=False)
        assert record.installed
        assert record.manual_paths == [str(Path(paths.local_bin) / "dockerd")]
        assert record.locations(EvidenceKind.COMMAND) == []

    def test_command_elsewhere_counts(self, paths, runner):
        runner.add_command("docker-compose", "/opt/compose/docker-compose")
        record = detect(build_profile(TargetName.COMPOSE, paths), runner, with_version=False)
        assert record.installed
        assert record.residue == ["command:/opt/compose/docker-compose"]

    def test_removed_by_hand_is_noticed(self, paths, runner):
        binary = place_file(Path(paths.local_bin) / "docker-compose")
        profile = build_profile(TargetName.COMPOSE, paths)
        assert detect(profile, runner, with_version=False).installed

        binary.unlink()

        assert not detect(profile, runner, with_version=False).installed

    def test_buildx_user_plugin(self, paths, runner):
        place_file(Path(paths.user_plugin_dir) / "docker-buildx")
        runner.set_output(["docker", "buildx", "version"], "github.com/docker/buildx v0.12.0 542e5d8")

        record = detect(build_profile(TargetName.BUILDX, paths), runner)

        assert record.manual_paths
        assert record.version == "0.12.0"


class TestQueryVersion:
    def test_failing_query(self, paths, runner):
        runner.set_failure(["docker", "--version"], "exec format error")
        assert query_version(_engine(paths), runner) is None

    def test_empty_output(self, paths, runner):
        assert query_version(_engine(paths), runner) is None

    def test_unparsed_output_falls_back_to_first_line(self, paths, runner):
        runner.set_output(["docker", "--version"], "Docker nightly\nbuild xyz")
        assert query_version(_engine(paths), runner) == "Docker nightly"


class TestDetectAll:
    def test_every_target(self, paths, runner):
        place_file(Path(paths.local_bin) / "docker-compose")
        records = detect_all(paths, runner, with_version=False)
        assert set(records) == set(TargetName)
        assert records[TargetName.COMPOSE].installed
        assert not records[TargetName.ENGINE].installed
        assert not records[TargetName.BUILDX].installed
