"""
Tests for status reporting.
"""

from pathlib import Path

from conftest import place_file

from docker_tools.core.services.status import brief_status, full_status, resource_counts


def _script_engine(runner):
    runner.set_output(["docker", "ps", "-aq"], "c1\nc2\n")
    runner.set_output(["docker", "images", "-q"], "i1\n")
    runner.set_output(["docker", "network", "ls", "-q"], "n1\nn2\nn3\n")
    runner.set_output(["docker", "images"], "REPOSITORY   TAG\nnginx        latest\n")
    runner.set_output(["docker", "--version"], "Docker version 24.0.7, build afdd53b")


class TestCounts:
    def test_counts(self, runner):
        _script_engine(runner)
        counts = resource_counts(runner)
        assert (counts.containers, counts.images, counts.networks, counts.volumes) == (2, 1, 3, 0)

    def test_failed_query_counts_zero(self, runner):
        runner.set_failure(["docker", "ps"], "Cannot connect to the Docker daemon")
        assert resource_counts(runner).containers == 0


class TestBrief:
    def test_engine_missing(self, settings, runner):
        assert brief_status(settings, runner) is None
        assert runner.call_log == []

    def test_engine_present(self, settings, runner, paths):
        place_file(Path(paths.system_bin) / "docker")
        _script_engine(runner)
        assert brief_status(settings, runner).containers == 2


class TestFull:
    def test_nothing_installed(self, settings, runner):
        report = full_status(settings, runner)
        assert not report.engine_installed
        assert report.counts is None
        assert report.listings == {}
        assert report.daemon_json is None
        assert set(report.targets) == {"docker", "docker-compose", "docker-buildx"}

    def test_engine_installed(self, settings, runner, paths):
        place_file(Path(paths.system_bin) / "docker")
        place_file(paths.daemon_json, '{"registry-mirrors": []}')
        _script_engine(runner)

        report = full_status(settings, runner)

        assert report.engine_installed
        assert report.targets["docker"].version == "24.0.7"
        assert report.counts.networks == 3
        assert report.daemon_json == '{"registry-mirrors": []}'
        assert "nginx" in report.listings["images"]
        assert report.listings["volumes"] == ""
