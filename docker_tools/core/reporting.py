"""
Reporter — the narrow interface for operator-facing text.

Core services describe what they detected and what they did through a
``Reporter``; they never branch on it.  The CLI supplies the colored
``ConsoleReporter``; tests supply ``RecordingReporter`` and assert on
the messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import click


class Reporter(ABC):
    """Operator-facing message sink."""

    @abstractmethod
    def emit(self, level: str, message: str) -> None:
        """Write ``message`` at ``level`` (info, step, success, warn, error, plain)."""

    def info(self, message: str) -> None:
        self.emit("info", message)

    def step(self, message: str) -> None:
        self.emit("step", message)

    def success(self, message: str) -> None:
        self.emit("success", message)

    def warn(self, message: str) -> None:
        self.emit("warn", message)

    def error(self, message: str) -> None:
        self.emit("error", message)

    def plain(self, message: str) -> None:
        self.emit("plain", message)


_COLORS = {
    "info": "blue",
    "step": "yellow",
    "success": "green",
    "warn": "yellow",
    "error": "red",
}


class ConsoleReporter(Reporter):
    """Colored terminal output via click."""

    def emit(self, level: str, message: str) -> None:
        fg = _COLORS.get(level)
        click.secho(message, fg=fg, err=(level == "error"))


class RecordingReporter(Reporter):
    """Keeps every message in memory."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def emit(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def by_level(self, level: str) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]

    @property
    def text(self) -> str:
        return "\n".join(m for _, m in self.messages)
