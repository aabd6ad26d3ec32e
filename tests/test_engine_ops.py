"""
Tests for the docker CLI pass-through.
"""

import pytest

from docker_tools.core.services.engine_ops import CONTAINER_TABLE, EngineOps


@pytest.fixture
def ops(runner):
    return EngineOps(runner, timeout=30)


class TestContainers:
    def test_list(self, ops, runner):
        runner.set_output(["docker", "ps"], "CONTAINER ID   NAMES\nabc   web\n")
        receipt = ops.list_containers()
        assert receipt.ok
        assert "web" in receipt.output
        assert runner.call_log == [["docker", "ps", "-a", "--format", CONTAINER_TABLE]]

    def test_run(self, ops, runner):
        receipt = ops.run_container("docker run -d --name web -e 'GREETING=hello world' nginx")
        assert receipt.ok
        assert runner.call_log == [
            ["docker", "run", "-d", "--name", "web", "-e", "GREETING=hello world", "nginx"],
        ]

    @pytest.mark.parametrize("line", ["ls -la", "docker ps", "", "docker run 'unterminated"])
    def test_run_rejects(self, ops, runner, line):
        assert ops.run_container(line).failed
        assert runner.call_log == []

    def test_start_all(self, ops, runner):
        runner.set_output(["docker", "ps", "-aq"], "c1\nc2\n")
        receipt = ops.start_all()
        assert receipt.ok
        assert runner.calls_matching(["docker", "start"]) == [
            ["docker", "start", "c1"],
            ["docker", "start", "c2"],
        ]

    def test_stop_all_with_nothing_running(self, ops):
        assert ops.stop_all().status == "skipped"

    def test_partial_failure(self, ops, runner):
        runner.set_failure(["docker", "rm", "-f", "c2"], "No such container: c2")
        receipt = ops.remove(["c1", "c2", "c3"])
        assert receipt.failed
        assert receipt.error == "c2: No such container: c2"
        assert len(runner.calls_matching(["docker", "rm"])) == 3

    def test_networks(self, ops, runner):
        runner.set_output(["docker", "ps", "-q"], "abc\n")
        runner.set_output(["docker", "inspect"], "/web bridge 172.17.0.2 appnet 10.0.0.5\n")
        assert ops.container_networks() == [
            ("web", "bridge", "172.17.0.2"),
            ("web", "appnet", "10.0.0.5"),
        ]

    def test_failure_reports_exit_code(self, ops, runner):
        runner.set_failure(["docker", "logs"], error="", returncode=125)
        receipt = ops.logs("web")
        assert receipt.error == "exit code 125"


class TestImagesNetworksVolumes:
    def test_remove_all_images(self, ops, runner):
        runner.set_output(["docker", "images", "-q"], "i1\ni2\n")
        assert ops.remove_all_images().ok
        assert runner.calls_matching(["docker", "rmi"]) == [
            ["docker", "rmi", "-f", "i1"],
            ["docker", "rmi", "-f", "i2"],
        ]

    def test_pull(self, ops, runner):
        ops.pull(["nginx:latest", "redis"])
        assert runner.calls_matching(["docker", "pull"]) == [
            ["docker", "pull", "nginx:latest"],
            ["docker", "pull", "redis"],
        ]

    def test_network_lifecycle(self, ops, runner):
        ops.create_network("appnet")
        ops.connect("appnet", ["web", "db"])
        ops.disconnect("appnet", ["db"])
        ops.remove_network("appnet")
        assert runner.call_log == [
            ["docker", "network", "create", "appnet"],
            ["docker", "network", "connect", "appnet", "web"],
            ["docker", "network", "connect", "appnet", "db"],
            ["docker", "network", "disconnect", "appnet", "db"],
            ["docker", "network", "rm", "appnet"],
        ]

    def test_volumes(self, ops, runner):
        runner.set_output(["docker", "volume", "ls", "-q"], "v1\n")
        ops.create_volume("data")
        assert ops.remove_all_volumes().ok
        assert runner.calls_matching(["docker", "volume", "rm"]) == [["docker", "volume", "rm", "v1"]]
