"""
Settings model — everything the tool reads from docker-tools.yml.

Every field is defaulted, so an empty (or missing) config file yields
a working setup that talks to the public mirrors and touches the usual
host locations.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

ENGINE_MIRRORS = [
    "https://mirrors.aliyun.com/docker-ce/linux/static/stable",
    "https://mirrors.tencent.com/docker-ce/linux/static/stable",
    "https://mirrors.tuna.tsinghua.edu.cn/docker-ce/linux/static/stable",
    "https://mirrors.ustc.edu.cn/docker-ce/linux/static/stable",
    "https://download.docker.com/linux/static/stable",
    "https://mirrors.pku.edu.cn/docker-ce/linux/static/stable",
]

COMPOSE_MIRRORS = [
    "https://gh-proxy.com/https://github.com/docker/compose/releases/download",
    "https://ghproxy.net/https://github.com/docker/compose/releases/download",
    "https://github.com/docker/compose/releases/download",
]

BUILDX_MIRRORS = [
    "https://gh-proxy.com/https://github.com/docker/buildx/releases/download",
    "https://ghproxy.net/https://github.com/docker/buildx/releases/download",
    "https://github.com/docker/buildx/releases/download",
]

FALLBACK_REGISTRY_MIRRORS = [
    "https://registry.hub.docker.com",
    "https://docker.itelyou.cf",
    "https://abc.itelyou.cf",
    "https://docker.ywsj.tk",
    "https://docker.xuanyuan.me",
    "http://image.cloudlayer.icu",
    "http://docker-0.unsee.tech",
    "https://dockerpull.pw",
    "https://docker.hlmirror.com",
]


class MirrorLists(BaseModel):
    """Ordered mirror bases per target.  List order is probe priority."""

    engine: list[str] = Field(default_factory=lambda: list(ENGINE_MIRRORS))
    compose: list[str] = Field(default_factory=lambda: list(COMPOSE_MIRRORS))
    buildx: list[str] = Field(default_factory=lambda: list(BUILDX_MIRRORS))


class Timeouts(BaseModel):
    """Per-call timeouts in seconds."""

    probe: int = 10
    download: int = 300
    command: int = 120


class HostPaths(BaseModel):
    """Host locations read or written by install / uninstall."""

    system_bin: str = "/usr/bin"
    local_bin: str = "/usr/local/bin"
    unit_dirs: list[str] = Field(
        default_factory=lambda: [
            "/etc/systemd/system",
            "/lib/systemd/system",
            "/usr/lib/systemd/system",
        ]
    )
    docker_config_dir: str = "/etc/docker"
    docker_data_dir: str = "/var/lib/docker"
    user_plugin_dir: str = "~/.docker/cli-plugins"
    system_plugin_dirs: list[str] = Field(
        default_factory=lambda: [
            "/usr/libexec/docker/cli-plugins",
            "/usr/local/lib/docker/cli-plugins",
        ]
    )

    def path(self, value: str) -> Path:
        """Expand ``~`` and return a Path."""
        return Path(value).expanduser()

    @property
    def unit_file(self) -> Path:
        """Where the engine service unit is written."""
        return self.path(self.unit_dirs[0]) / "docker.service"

    @property
    def daemon_json(self) -> Path:
        return self.path(self.docker_config_dir) / "daemon.json"

    def rooted(self, root: Path, home: Path | None = None) -> HostPaths:
        """Return a copy with every location moved under ``root``.

        ``~`` is resolved against ``home`` (default ``root/home``).  Used
        by tests and for operating on a mounted image.
        """
        home = home or (root / "home")

        def _move(value: str) -> str:
            if value.startswith("~"):
                return str(home / value.lstrip("~").lstrip("/"))
            return str(root / value.lstrip("/"))

        return HostPaths(
            system_bin=_move(self.system_bin),
            local_bin=_move(self.local_bin),
            unit_dirs=[_move(d) for d in self.unit_dirs],
            docker_config_dir=_move(self.docker_config_dir),
            docker_data_dir=_move(self.docker_data_dir),
            user_plugin_dir=_move(self.user_plugin_dir),
            system_plugin_dirs=[_move(d) for d in self.system_plugin_dirs],
        )


class RegistryMirrorSettings(BaseModel):
    """Source of the engine's registry-mirror configuration (daemon.json)."""

    source_url: str = "https://gitee.com/stu2116Edward/docker-images/raw/master/daemon.json"
    fallback_mirrors: list[str] = Field(
        default_factory=lambda: list(FALLBACK_REGISTRY_MIRRORS)
    )


class SelfUpdateSettings(BaseModel):
    """Where a fresh copy of docker-tools is fetched from, in order."""

    sources: list[str] = Field(default_factory=list)
    filename: str = "docker-tools.pyz"


class Settings(BaseModel):
    """Root configuration model."""

    mirrors: MirrorLists = Field(default_factory=MirrorLists)
    github_api: str = "https://api.github.com"
    compose_repo: str = "docker/compose"
    buildx_repo: str = "docker/buildx"
    timeouts: Timeouts = Field(default_factory=Timeouts)
    paths: HostPaths = Field(default_factory=HostPaths)
    download_dir: str = "."
    registry_mirror: RegistryMirrorSettings = Field(default_factory=RegistryMirrorSettings)
    self_update: SelfUpdateSettings = Field(default_factory=SelfUpdateSettings)

    @property
    def download_path(self) -> Path:
        return Path(self.download_dir).expanduser()
