"""
Operator prompts as injectable capabilities.

``Confirm(prompt, default) -> bool`` and ``Ask(prompt) -> str`` are
passed into the state machine instead of reading stdin directly.  The
CLI wires them to click; tests wire them to scripted answers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import click

Confirm = Callable[[str, bool], bool]
Ask = Callable[[str], str]


def click_confirm(prompt: str, default: bool = True) -> bool:
    """Blocking yes/no prompt; bare input takes ``default``."""
    return click.confirm(prompt, default=default)


def click_ask(prompt: str) -> str:
    """Blocking free-text prompt; bare input returns an empty string."""
    return click.prompt(prompt, default="", show_default=False)


def assume_yes(prompt: str, default: bool = True) -> bool:
    """Non-interactive confirm used by ``--yes``."""
    return True


def decline(prompt: str, default: bool = True) -> bool:
    """Non-interactive confirm that refuses; ``--yes`` uses it for corrupt files."""
    return False


class ScriptedConfirm:
    """Answers confirmations from a fixed script.

    When the script runs out, the prompt's default is used, the same as
    an operator pressing enter.
    """

    def __init__(self, answers: Iterable[bool] = ()):
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str, default: bool = True) -> bool:
        self.prompts.append(prompt)
        if self._answers:
            return self._answers.pop(0)
        return default

    @property
    def remaining(self) -> int:
        return len(self._answers)


class ScriptedAsk:
    """Answers free-text prompts from a fixed script."""

    def __init__(self, answers: Iterable[str] = ()):
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._answers.pop(0) if self._answers else ""
