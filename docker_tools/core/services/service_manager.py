"""
Service manager — engine unit file and systemctl calls.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docker_tools.adapters.base import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

SERVICE_NAME = "docker"

UNIT_TEMPLATE = """\
[Unit]
Description=Docker Application Container Engine
Documentation=https://docs.docker.com
After=network-online.target firewalld.service
Wants=network-online.target

[Service]
Type=notify
ExecStart={dockerd}
ExecReload=/bin/kill -s HUP $MAINPID
LimitNOFILE=infinity
LimitNPROC=infinity
LimitCORE=infinity
Delegate=yes
KillMode=process
Restart=on-failure
StartLimitBurst=3
StartLimitInterval=60s

[Install]
WantedBy=multi-user.target
"""


def render_unit(dockerd: str = "/usr/bin/dockerd") -> str:
    return UNIT_TEMPLATE.format(dockerd=dockerd)


def write_unit(path: Path, dockerd: str = "/usr/bin/dockerd") -> Path:
    """Write the engine unit to ``path`` (replacing any existing file)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_unit(dockerd), encoding="utf-8")
    path.chmod(0o644)
    logger.info("Wrote service unit %s", path)
    return path


class ServiceManager:
    """Thin ``systemctl`` wrapper; every call returns the raw CommandResult."""

    def __init__(self, runner: CommandRunner, timeout: int = 120):
        self.runner = runner
        self.timeout = timeout

    def _systemctl(self, *args: str) -> CommandResult:
        return self.runner.run(["systemctl", *args], timeout=self.timeout)

    def daemon_reload(self) -> CommandResult:
        return self._systemctl("daemon-reload")

    def start(self, name: str = SERVICE_NAME) -> CommandResult:
        return self._systemctl("start", name)

    def stop(self, name: str = SERVICE_NAME) -> CommandResult:
        return self._systemctl("stop", name)

    def restart(self, name: str = SERVICE_NAME) -> CommandResult:
        return self._systemctl("restart", name)

    def enable(self, name: str = SERVICE_NAME) -> CommandResult:
        return self._systemctl("enable", name)

    def disable(self, name: str = SERVICE_NAME) -> CommandResult:
        return self._systemctl("disable", name)

    def is_active(self, name: str = SERVICE_NAME) -> bool:
        return self._systemctl("is-active", "--quiet", name).ok

    def is_enabled(self, name: str = SERVICE_NAME) -> bool:
        return self._systemctl("is-enabled", "--quiet", name).ok
