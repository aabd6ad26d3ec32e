"""
Receipt model — outcome of a one-shot maintenance task.

Install and uninstall report through ``OperationOutcome``.  The smaller
tasks (registry-mirror update, self-update, engine pass-through
commands) return a ``Receipt`` instead.  They never raise past their
entry point; failures are captured here.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one task."""

    task: str
    status: Literal["ok", "skipped", "failed"] = "ok"
    finished_at: str = Field(default_factory=_now_iso)
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the task succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, task: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(task=task, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, task: str, error: str, **kwargs: Any) -> Receipt:
        return cls(task=task, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, task: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Operator declined, or nothing to do."""
        return cls(task=task, status="skipped", output=reason, **kwargs)
