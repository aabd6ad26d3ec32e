"""
Integrity verifier — SHA-256 of an artifact against its published digest.

Outcomes:
    VERIFIED    reference present, digests match
    CORRUPT     reference present, digests differ
    UNVERIFIED  no reference available

Anything but VERIFIED needs an explicit operator override before the
artifact may be installed (``require_override``).  Verification is
never skipped silently.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from docker_tools.core.errors import CorruptArtifact, UnverifiedArtifact
from docker_tools.core.models.install import VerificationResult, VerificationStatus
from docker_tools.core.prompts import Confirm
from docker_tools.core.reporting import Reporter

logger = logging.getLogger(__name__)

_HEX64 = re.compile(r"^[0-9a-fA-F]{64}$")


def sha256_file(path: Path) -> str:
    """Hex SHA-256 of the file at ``path``, read in chunks."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_reference(text: str, filename: str) -> str | None:
    """Find the digest for ``filename`` in a ``sha256sum``-style file.

    Accepts a per-file ``.sha256`` (``<hex>  <name>`` or a bare hex) and
    a multi-entry ``checksums.txt``.  Returns the lowercase hex digest,
    or None when no usable entry exists.
    """
    entries: list[tuple[str, str]] = []
    for line in (text or "").splitlines():
        parts = line.strip().split()
        if not parts or not _HEX64.match(parts[0]):
            continue
        name = parts[1].lstrip("*") if len(parts) > 1 else ""
        entries.append((parts[0].lower(), Path(name).name if name else ""))

    for digest, name in entries:
        if name == filename:
            return digest

    # single-entry file: the digest belongs to the artifact it ships with
    if len(entries) == 1 and entries[0][1] in ("", filename):
        return entries[0][0]

    return None


def verify_artifact(artifact: Path, reference: Path | None = None) -> VerificationResult:
    """Compare ``artifact`` against the digest file ``reference``."""
    actual = sha256_file(artifact)

    if reference is None or not reference.is_file():
        logger.info("No reference digest for %s", artifact.name)
        return VerificationResult(
            status=VerificationStatus.UNVERIFIED, artifact=str(artifact), actual=actual,
        )

    expected = parse_reference(reference.read_text(encoding="utf-8", errors="replace"), artifact.name)
    if expected is None:
        logger.warning("Reference %s has no entry for %s", reference, artifact.name)
        return VerificationResult(
            status=VerificationStatus.UNVERIFIED,
            artifact=str(artifact),
            reference=str(reference),
            actual=actual,
        )

    status = VerificationStatus.VERIFIED if actual == expected else VerificationStatus.CORRUPT
    logger.info("Digest check %s: %s", artifact.name, status)
    return VerificationResult(
        status=status,
        artifact=str(artifact),
        reference=str(reference),
        expected=expected,
        actual=actual,
    )


def require_override(
    result: VerificationResult,
    confirm: Confirm,
    reporter: Reporter,
    *,
    discard_unverified: bool = False,
    corrupt_confirm: Confirm | None = None,
) -> None:
    """Gate installation on a verification result.

    Returns when installation may proceed.  A CORRUPT result is put to
    ``corrupt_confirm`` when given, so a blanket yes never covers it.
    On an operator decline:

    - CORRUPT: the artifact and its reference file are deleted and
      ``CorruptArtifact`` is raised.
    - UNVERIFIED: ``UnverifiedArtifact`` is raised; the artifact is
      deleted only when ``discard_unverified`` (a fresh download).
    """
    artifact = Path(result.artifact)

    if result.status is VerificationStatus.VERIFIED:
        reporter.success("File integrity verified")
        return

    if result.status is VerificationStatus.CORRUPT:
        reporter.error("File integrity check failed")
        reporter.warn(f"Expected SHA256: {result.expected}")
        reporter.warn(f"Computed SHA256: {result.actual}")
        if (corrupt_confirm or confirm)("The file may be corrupt. Continue installing anyway?", True):
            reporter.warn("Proceeding with an artifact that failed verification")
            return
        artifact.unlink(missing_ok=True)
        if result.reference:
            Path(result.reference).unlink(missing_ok=True)
        reporter.info(f"Deleted {artifact.name} and its digest file")
        raise CorruptArtifact(f"{artifact.name} failed digest verification", artifact)

    reporter.warn(f"No digest available for {artifact.name}, integrity cannot be verified")
    if confirm("Continue installing without integrity verification?", True):
        reporter.warn("Proceeding without integrity verification")
        return
    if discard_unverified:
        artifact.unlink(missing_ok=True)
    raise UnverifiedArtifact(f"{artifact.name} could not be verified", artifact)
