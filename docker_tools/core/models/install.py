"""
Install models — install evidence, mirror probes, artifacts, outcomes.

``InstallationRecord`` is never persisted.  It is the result of one
``detect()`` call and is discarded after the decision it informed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from docker_tools.core.models.target import TargetName


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallState(StrEnum):
    """States of the installation state machine."""

    NOT_INSTALLED = "not_installed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    UNINSTALLING = "uninstalling"


class InstallMethod(StrEnum):
    """How a detected install got onto the host."""

    PACKAGE = "package"    # owned by the host package manager
    BINARY = "binary"      # single binary copied into a local/user dir
    BUNDLE = "bundle"      # static engine bundle unpacked into the system bin dir


class EvidenceKind(StrEnum):
    COMMAND = "command"
    PACKAGE_PATH = "package_path"
    MANUAL_PATH = "manual_path"


class Evidence(BaseModel):
    """One positive install probe."""

    kind: EvidenceKind
    location: str


class InstallationRecord(BaseModel):
    """What ``detect()`` saw on the host for one target."""

    target: TargetName
    evidence: list[Evidence] = Field(default_factory=list)
    version: str | None = None
    probed_at: str = Field(default_factory=_now_iso)

    @property
    def installed(self) -> bool:
        """True if ANY probe resolved."""
        return bool(self.evidence)

    def locations(self, kind: EvidenceKind) -> list[str]:
        return [e.location for e in self.evidence if e.kind == kind]

    @property
    def package_paths(self) -> list[str]:
        return self.locations(EvidenceKind.PACKAGE_PATH)

    @property
    def manual_paths(self) -> list[str]:
        return self.locations(EvidenceKind.MANUAL_PATH)

    @property
    def residue(self) -> list[str]:
        """Human-readable list of everything that still counts as installed."""
        return [f"{e.kind}:{e.location}" for e in self.evidence]


class MirrorAttempt(BaseModel):
    """One probe of one mirror."""

    mirror: str
    url: str
    ok: bool = False
    error: str = ""
    elapsed_ms: int = 0


class MirrorSelection(BaseModel):
    """The mirror (or local file) an artifact will be taken from."""

    filename: str
    version: str | None = None
    mirror: str | None = None
    url: str | None = None
    local_path: str | None = None
    attempts: list[MirrorAttempt] = Field(default_factory=list)

    @property
    def is_local(self) -> bool:
        return self.local_path is not None

    @property
    def failed_attempts(self) -> list[MirrorAttempt]:
        return [a for a in self.attempts if not a.ok]


class Artifact(BaseModel):
    """A file on disk bound to (target, version, architecture)."""

    target: TargetName
    version: str
    arch: str
    path: str
    digest_path: str | None = None
    source_url: str | None = None
    downloaded: bool = False   # False when it was already cached locally


class VerificationStatus(StrEnum):
    VERIFIED = "verified"
    CORRUPT = "corrupt"
    UNVERIFIED = "unverified"


class VerificationResult(BaseModel):
    """Outcome of checking an artifact against its reference digest."""

    status: VerificationStatus
    artifact: str
    reference: str | None = None
    expected: str | None = None
    actual: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == VerificationStatus.VERIFIED


class OperationOutcome(BaseModel):
    """Result of an install or uninstall operation.

    The state machine never raises past its public methods: every
    failure lands here with ``ok=False`` and the error kind set.
    An operator decline is ``ok=True, aborted=True`` with the state
    left as it was.
    """

    target: TargetName
    operation: str
    ok: bool = True
    aborted: bool = False
    state: InstallState = InstallState.NOT_INSTALLED
    placed: bool = False
    version: str | None = None
    error: str | None = None
    error_kind: str | None = None
    transitions: list[InstallState] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return not self.ok
