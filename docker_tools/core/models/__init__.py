"""
Domain models — Pydantic types for docker-tools.

All models are re-exported here for convenient access:

    from docker_tools.core.models import Settings, TargetName, InstallationRecord
"""

from docker_tools.core.models.install import (
    Artifact,
    Evidence,
    EvidenceKind,
    InstallationRecord,
    InstallMethod,
    InstallState,
    MirrorAttempt,
    MirrorSelection,
    OperationOutcome,
    VerificationResult,
    VerificationStatus,
)
from docker_tools.core.models.receipt import Receipt
from docker_tools.core.models.settings import (
    HostPaths,
    MirrorLists,
    RegistryMirrorSettings,
    SelfUpdateSettings,
    Settings,
    Timeouts,
)
from docker_tools.core.models.target import TargetName, TargetProfile, build_profile

__all__ = [
    # install.py
    "Artifact",
    "Evidence",
    "EvidenceKind",
    "InstallMethod",
    "InstallState",
    "InstallationRecord",
    "MirrorAttempt",
    "MirrorSelection",
    "OperationOutcome",
    "VerificationResult",
    "VerificationStatus",
    # receipt.py
    "Receipt",
    # settings.py
    "HostPaths",
    "MirrorLists",
    "RegistryMirrorSettings",
    "SelfUpdateSettings",
    "Settings",
    "Timeouts",
    # target.py
    "TargetName",
    "TargetProfile",
    "build_profile",
]
