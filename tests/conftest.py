"""
Shared test fixtures and configuration.

Every test runs against a host layout rooted in ``tmp_path``: commands
go through ``MockRunner``, HTTP through ``MockHttpClient`` and operator
answers through ``ScriptedConfirm``.
"""

import hashlib
import io
import tarfile
from pathlib import Path

import pytest

from docker_tools.adapters.mock import MockHttpClient, MockRunner
from docker_tools.core.models.settings import HostPaths, Settings
from docker_tools.core.prompts import ScriptedAsk, ScriptedConfirm
from docker_tools.core.reporting import RecordingReporter
from docker_tools.ui.cli.common import Toolbox

ENGINE_MIRROR = "https://mirror-a.example/docker-ce/linux/static/stable"
ENGINE_MIRROR_B = "https://mirror-b.example/docker-ce/linux/static/stable"
ENGINE_MIRROR_C = "https://mirror-c.example/docker-ce/linux/static/stable"
RELEASES = "https://releases.example/download"
GITHUB_API = "https://api.example"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_engine_bundle(names: tuple[str, ...] = ("docker", "dockerd", "containerd", "runc")) -> bytes:
    """A docker-X.Y.Z.tgz lookalike: ``docker/<name>`` entries plus a stray dir."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        folder = tarfile.TarInfo("docker")
        folder.type = tarfile.DIRTYPE
        folder.mode = 0o755
        tar.addfile(folder)
        for name in names:
            payload = f"#!/bin/sh\necho {name}\n".encode()
            info = tarfile.TarInfo(f"docker/{name}")
            info.size = len(payload)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path: Path, host_root: Path) -> Settings:
    downloads = tmp_path / "downloads"
    downloads.mkdir()
    return Settings(
        mirrors={
            "engine": [ENGINE_MIRROR, ENGINE_MIRROR_B, ENGINE_MIRROR_C],
            "compose": [f"{RELEASES}/compose-a", f"{RELEASES}/compose-b"],
            "buildx": [f"{RELEASES}/buildx-a", f"{RELEASES}/buildx-b"],
        },
        github_api=GITHUB_API,
        paths=HostPaths().rooted(host_root),
        download_dir=str(downloads),
        registry_mirror={"source_url": "https://config.example/daemon.json"},
        self_update={"sources": ["https://a.example/docker-tools.pyz", "https://b.example/docker-tools.pyz"]},
    )


@pytest.fixture
def paths(settings: Settings) -> HostPaths:
    return settings.paths


@pytest.fixture
def runner(paths: HostPaths) -> MockRunner:
    """Commands resolve on PATH only when their file exists in the fake bin dirs."""
    return MockRunner(search_path=[paths.path(paths.system_bin), paths.path(paths.local_bin)])


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def toolbox(settings, runner, http, reporter) -> Toolbox:
    return Toolbox(
        settings=settings,
        runner=runner,
        http=http,
        reporter=reporter,
        confirm=ScriptedConfirm(),
        ask=ScriptedAsk(),
        machine_arch="x86_64",
    )


def place_file(path: Path, content: str = "binary") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path
