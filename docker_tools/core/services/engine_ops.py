"""
Engine pass-through — container, image, network and volume housekeeping.

Thin wrappers over the ``docker`` CLI.  Each call returns a ``Receipt``;
commands that hand the terminal to the engine (exec, logs, stats, run)
are not captured.
"""

from __future__ import annotations

import logging
import shlex

from docker_tools.adapters.base import CommandResult, CommandRunner
from docker_tools.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

CONTAINER_TABLE = "table {{.ID}}\t{{.Names}}\t{{.Status}}\t{{.Ports}}"
NETWORK_FORMAT = "{{.Name}}{{range $k,$v := .NetworkSettings.Networks}} {{$k}} {{$v.IPAddress}}{{end}}"


class EngineOps:
    """``docker`` CLI wrapper for day-to-day resource management."""

    def __init__(self, runner: CommandRunner, timeout: int = 120):
        self.runner = runner
        self.timeout = timeout

    def _docker(self, task: str, *args: str, capture: bool = True) -> Receipt:
        result = self.runner.run(["docker", *args], timeout=self.timeout, capture=capture)
        return self._receipt(task, result)

    def _receipt(self, task: str, result: CommandResult) -> Receipt:
        if result.ok:
            return Receipt.success(task, result.stdout.rstrip())
        error = result.error or result.stderr.strip() or f"exit code {result.returncode}"
        logger.info("%s failed: %s", task, error)
        return Receipt.failure(task, error, output=result.stdout.rstrip())

    def _ids(self, *args: str) -> list[str]:
        result = self.runner.run(["docker", *args], timeout=self.timeout)
        return result.stdout.split() if result.ok else []

    def _each(self, task: str, names: list[str], *args: str) -> Receipt:
        """Run ``docker <args> <name>`` for every name, collecting failures."""
        if not names:
            return Receipt.skip(task, "nothing to do")
        failures: list[str] = []
        outputs: list[str] = []
        for name in names:
            receipt = self._docker(task, *args, name)
            outputs.append(receipt.output)
            if receipt.failed:
                failures.append(f"{name}: {receipt.error}")
        if failures:
            return Receipt.failure(task, "; ".join(failures), output="\n".join(outputs))
        return Receipt.success(task, "\n".join(o for o in outputs if o))

    # ── Containers ─────────────────────────────────────────────

    def list_containers(self) -> Receipt:
        return self._docker("container.list", "ps", "-a", "--format", CONTAINER_TABLE)

    def run_container(self, command: str) -> Receipt:
        """Run a ``docker run ...`` line typed by the operator."""
        try:
            args = shlex.split(command)
        except ValueError as e:
            return Receipt.failure("container.run", f"cannot parse command: {e}")
        if args[:1] == ["docker"]:
            args = args[1:]
        if args[:1] != ["run"]:
            return Receipt.failure("container.run", "expected a 'docker run' command")
        return self._docker("container.run", *args, capture=False)

    def start(self, names: list[str]) -> Receipt:
        return self._each("container.start", names, "start")

    def stop(self, names: list[str]) -> Receipt:
        return self._each("container.stop", names, "stop")

    def remove(self, names: list[str]) -> Receipt:
        return self._each("container.remove", names, "rm", "-f")

    def restart(self, names: list[str]) -> Receipt:
        return self._each("container.restart", names, "restart")

    def start_all(self) -> Receipt:
        return self.start(self._ids("ps", "-aq"))

    def stop_all(self) -> Receipt:
        return self.stop(self._ids("ps", "-q"))

    def remove_all(self) -> Receipt:
        return self.remove(self._ids("ps", "-aq"))

    def restart_all(self) -> Receipt:
        return self.restart(self._ids("ps", "-q"))

    def shell(self, name: str) -> Receipt:
        return self._docker("container.exec", "exec", "-it", name, "/bin/sh", capture=False)

    def logs(self, name: str) -> Receipt:
        return self._docker("container.logs", "logs", name, capture=False)

    def stats(self) -> Receipt:
        return self._docker("container.stats", "stats", "--no-stream", capture=False)

    def container_networks(self) -> list[tuple[str, str, str]]:
        """``(container, network, ip)`` for every running container."""
        rows: list[tuple[str, str, str]] = []
        for cid in self._ids("ps", "-q"):
            result = self.runner.run(
                ["docker", "inspect", "--format", NETWORK_FORMAT, cid], timeout=self.timeout,
            )
            if not result.ok:
                continue
            parts = result.stdout.split()
            if not parts:
                continue
            name = parts[0].lstrip("/")
            pairs = parts[1:]
            for i in range(0, len(pairs) - 1, 2):
                rows.append((name, pairs[i], pairs[i + 1]))
        return rows

    # ── Images ─────────────────────────────────────────────────

    def list_images(self) -> Receipt:
        return self._docker("image.list", "image", "ls")

    def pull(self, names: list[str]) -> Receipt:
        return self._each("image.pull", names, "pull")

    def remove_images(self, names: list[str]) -> Receipt:
        return self._each("image.remove", names, "rmi", "-f")

    def remove_all_images(self) -> Receipt:
        return self.remove_images(self._ids("images", "-q"))

    # ── Networks ───────────────────────────────────────────────

    def list_networks(self) -> Receipt:
        return self._docker("network.list", "network", "ls")

    def create_network(self, name: str) -> Receipt:
        return self._docker("network.create", "network", "create", name)

    def connect(self, network: str, containers: list[str]) -> Receipt:
        return self._each("network.connect", containers, "network", "connect", network)

    def disconnect(self, network: str, containers: list[str]) -> Receipt:
        return self._each("network.disconnect", containers, "network", "disconnect", network)

    def remove_network(self, name: str) -> Receipt:
        return self._docker("network.remove", "network", "rm", name)

    # ── Volumes ────────────────────────────────────────────────

    def list_volumes(self) -> Receipt:
        return self._docker("volume.list", "volume", "ls")

    def create_volume(self, name: str) -> Receipt:
        return self._docker("volume.create", "volume", "create", name)

    def remove_volumes(self, names: list[str]) -> Receipt:
        return self._each("volume.remove", names, "volume", "rm")

    def remove_all_volumes(self) -> Receipt:
        return self.remove_volumes(self._ids("volume", "ls", "-q"))
