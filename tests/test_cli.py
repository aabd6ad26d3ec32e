"""
Tests for CLI commands — global options, install / uninstall, engine
pass-through, and the interactive menu.
"""

import dataclasses
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import ENGINE_MIRROR, RELEASES, place_file, sha256_hex

from docker_tools.core.prompts import ScriptedAsk, ScriptedConfirm
from docker_tools.main import cli


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr("docker_tools.ui.cli.common.os.geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr("docker_tools.ui.cli.common.os.geteuid", lambda: 1000)


def invoke(toolbox, args):
    return CliRunner().invoke(cli, args, obj={"toolbox": toolbox})


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("install", "uninstall", "versions", "status", "registry-mirror", "container"):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_bad_config(self, tmp_path):
        bad = tmp_path / "docker-tools.yml"
        bad.write_text("timeouts: [1, 2]\n")
        result = CliRunner().invoke(cli, ["--config", str(bad), "config", "show"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_config_show(self, toolbox):
        result = invoke(toolbox, ["config", "show"])
        assert result.exit_code == 0
        assert "github_api: https://api.example" in result.output


@pytest.mark.usefixtures("as_root")
class TestInstallCommands:
    def test_install_compose(self, toolbox, http, runner, paths):
        url = f"{RELEASES}/compose-a/v2.24.0/docker-compose-linux-x86_64"
        http.add_file(url, b"compose")
        http.add_file(f"{url}.sha256", sha256_hex(b"compose").encode())
        runner.set_output(["docker-compose", "--version"], "Docker Compose version v2.24.0")

        result = invoke(toolbox, ["install", "compose", "--version", "2.24.0", "--yes"])

        assert result.exit_code == 0
        assert (Path(paths.local_bin) / "docker-compose").is_file()

    def test_yes_does_not_accept_corrupt_download(self, toolbox, http, paths, settings):
        url = f"{RELEASES}/compose-a/v2.24.0/docker-compose-linux-x86_64"
        http.add_file(url, b"compose")
        http.add_file(f"{url}.sha256", b"f" * 64)

        result = invoke(toolbox, ["install", "compose", "--version", "2.24.0", "--yes"])

        assert result.exit_code == 1
        assert "--ignore-checksum" in result.output
        assert not (Path(paths.local_bin) / "docker-compose").exists()
        assert list(settings.download_path.iterdir()) == []

    def test_ignore_checksum(self, toolbox, http, runner, paths):
        url = f"{RELEASES}/compose-a/v2.24.0/docker-compose-linux-x86_64"
        http.add_file(url, b"compose")
        http.add_file(f"{url}.sha256", b"f" * 64)
        runner.set_output(["docker-compose", "--version"], "Docker Compose version v2.24.0")

        result = invoke(toolbox, ["install", "compose", "--version", "2.24.0", "--yes", "--ignore-checksum"])

        assert result.exit_code == 0
        assert (Path(paths.local_bin) / "docker-compose").read_bytes() == b"compose"

    def test_install_failure_exits_1(self, toolbox):
        result = invoke(toolbox, ["install", "engine", "--yes"])
        assert result.exit_code == 1
        assert "no_mirror_available" in result.output

    def test_unknown_target(self, toolbox):
        result = invoke(toolbox, ["install", "podman"])
        assert result.exit_code == 2
        assert "Unknown target" in result.output

    def test_unsupported_method(self, toolbox):
        result = invoke(toolbox, ["install", "buildx", "--method", "package"])
        assert result.exit_code == 2
        assert "cannot be installed with method" in result.output

    def test_uninstall_absent_is_not_an_error(self, toolbox):
        result = invoke(toolbox, ["uninstall", "buildx", "--yes"])
        assert result.exit_code == 0

    def test_uninstall_declined(self, toolbox, paths):
        binary = place_file(Path(paths.local_bin) / "docker-compose")
        declining = dataclasses.replace(toolbox, confirm=ScriptedConfirm([False]))
        result = invoke(declining, ["uninstall", "compose"])
        assert result.exit_code == 0
        assert binary.exists()


@pytest.mark.usefixtures("as_user")
class TestRootRequired:
    @pytest.mark.parametrize(
        "args",
        [["install", "engine"], ["uninstall", "compose"], ["registry-mirror"], ["menu"], []],
    )
    def test_refused(self, toolbox, http, args):
        result = invoke(toolbox, args)
        assert result.exit_code == 1
        assert "root" in result.output
        assert http.call_log == []


class TestQueries:
    def test_detect_json(self, toolbox, paths, runner):
        place_file(Path(paths.local_bin) / "docker-compose")
        runner.set_output(["docker-compose", "--version"], "Docker Compose version v2.24.0")

        result = invoke(toolbox, ["detect", "compose", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["target"] == "docker-compose"
        assert data["version"] == "2.24.0"
        assert {e["kind"] for e in data["evidence"]} == {"command", "manual_path"}

    def test_detect_absent(self, toolbox):
        result = invoke(toolbox, ["detect", "engine"])
        assert result.exit_code == 0
        assert "not installed" in result.output

    def test_versions_json(self, toolbox, http):
        http.add_page(f"{ENGINE_MIRROR}/x86_64/", "docker-24.0.6.tgz docker-24.0.7.tgz")
        result = invoke(toolbox, ["versions", "engine", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["versions"] == ["24.0.7", "24.0.6"]

    def test_versions_unreachable(self, toolbox):
        result = invoke(toolbox, ["versions", "engine"])
        assert result.exit_code == 1
        assert "Could not list versions" in result.output

    def test_status_json(self, toolbox):
        result = invoke(toolbox, ["status", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["targets"]["docker"]["evidence"] == []
        assert data["counts"] is None

    def test_status_text_without_engine(self, toolbox):
        result = invoke(toolbox, ["status"])
        assert result.exit_code == 0
        assert "Docker is not installed" in result.output


class TestMaintenance:
    def test_self_update_exits_for_relaunch(self, toolbox, http):
        http.add_file("https://a.example/docker-tools.pyz", b"PK build")
        result = invoke(toolbox, ["self-update"])
        assert result.exit_code == 3

    def test_self_update_failure(self, toolbox):
        result = invoke(toolbox, ["self-update"])
        assert result.exit_code == 1

    def test_registry_mirror_without_engine(self, toolbox, as_root):
        result = invoke(toolbox, ["registry-mirror", "--yes"])
        assert result.exit_code == 1


class TestEngineCommands:
    def test_container_ls(self, toolbox, runner):
        runner.set_output(["docker", "ps"], "CONTAINER ID   NAMES\nabc   web\n")
        result = invoke(toolbox, ["container", "ls"])
        assert result.exit_code == 0
        assert "web" in result.output

    def test_stop_all_with_nothing_running(self, toolbox):
        result = invoke(toolbox, ["container", "stop", "--all"])
        assert result.exit_code == 0
        assert "nothing to do" in result.output

    def test_rm_all_declined(self, toolbox, runner):
        declining = dataclasses.replace(toolbox, confirm=ScriptedConfirm([False]))
        result = invoke(declining, ["container", "rm", "--all"])
        assert result.exit_code == 0
        assert runner.call_log == []

    def test_failure_exits_1(self, toolbox, runner):
        runner.set_failure(["docker", "network", "rm"], "network appnet has active endpoints")
        result = invoke(toolbox, ["network", "rm", "appnet"])
        assert result.exit_code == 1
        assert "active endpoints" in result.output

    def test_volume_rm(self, toolbox, runner):
        result = invoke(toolbox, ["volume", "rm", "data", "cache"])
        assert result.exit_code == 0
        assert runner.calls_matching(["docker", "volume", "rm"]) == [
            ["docker", "volume", "rm", "data"],
            ["docker", "volume", "rm", "cache"],
        ]

    def test_container_networks(self, toolbox, runner):
        runner.set_output(["docker", "ps", "-q"], "abc\n")
        runner.set_output(["docker", "inspect"], "/web bridge 172.17.0.2\n")
        result = invoke(toolbox, ["container", "networks"])
        assert result.exit_code == 0
        assert "172.17.0.2" in result.output


@pytest.mark.usefixtures("as_root")
class TestMenu:
    def _menu(self, toolbox, answers):
        return dataclasses.replace(toolbox, ask=ScriptedAsk(answers))

    def test_exit(self, toolbox):
        result = invoke(self._menu(toolbox, ["0"]), [])
        assert result.exit_code == 0
        assert "Docker not detected" in result.output
        assert "14. Uninstall Docker Buildx" in result.output

    def test_invalid_choice_reprompts(self, toolbox):
        result = invoke(self._menu(toolbox, ["99", "0"]), ["menu"])
        assert result.exit_code == 0
        assert "Invalid option" in result.output

    def test_failed_action_returns_to_menu(self, toolbox, reporter):
        # install engine with no reachable mirror, then exit
        result = invoke(self._menu(toolbox, ["1", "0"]), ["menu"])
        assert result.exit_code == 0
        assert reporter.by_level("error")

    def test_self_update_relaunch(self, toolbox, http):
        http.add_file("https://a.example/docker-tools.pyz", b"PK build")
        result = invoke(self._menu(toolbox, ["00"]), ["menu"])
        assert result.exit_code == 3

    def test_status_counts_in_header(self, toolbox, paths, runner):
        place_file(Path(paths.system_bin) / "docker")
        runner.set_output(["docker", "ps", "-aq"], "c1\n")
        result = invoke(self._menu(toolbox, ["7", "0"]), ["menu"])
        assert result.exit_code == 0
        assert "containers:1" in result.output
        assert "[Registry mirror config]" in result.output

    def test_pinned_install_invalid_selection(self, toolbox, http):
        http.add_page(f"{ENGINE_MIRROR}/x86_64/", "docker-24.0.6.tgz docker-24.0.7.tgz")
        result = invoke(self._menu(toolbox, ["3", "7", "0"]), ["menu"])
        assert result.exit_code == 0
        assert "1) 24.0.7" in result.output
        assert "Invalid selection '7'" in result.output
        assert not http.requested("HEAD")

    def test_container_submenu(self, toolbox, runner):
        result = invoke(self._menu(toolbox, ["8", "2", "web db", "0", "0"]), ["menu"])
        assert result.exit_code == 0
        assert runner.calls_matching(["docker", "start"]) == [
            ["docker", "start", "web"],
            ["docker", "start", "db"],
        ]
