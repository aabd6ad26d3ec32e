"""
Tests for the integrity verifier and the override gate.
"""

from pathlib import Path

import pytest

from conftest import sha256_hex

from docker_tools.core.errors import CorruptArtifact, UnverifiedArtifact
from docker_tools.core.models.install import VerificationStatus
from docker_tools.core.prompts import ScriptedConfirm
from docker_tools.core.reporting import RecordingReporter
from docker_tools.core.services.integrity import (
    parse_reference,
    require_override,
    sha256_file,
    verify_artifact,
)

DATA = b"docker-compose binary payload" * 100


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "docker-compose-linux-x86_64"
    path.write_bytes(DATA)
    return path


@pytest.fixture
def reference(tmp_path: Path, artifact: Path) -> Path:
    path = tmp_path / "docker-compose-linux-x86_64.sha256"
    path.write_text(f"{sha256_hex(DATA)} *docker-compose-linux-x86_64\n")
    return path


class TestDigest:
    def test_deterministic(self, artifact):
        assert sha256_file(artifact) == sha256_file(artifact) == sha256_hex(DATA)

    def test_single_byte_flip_changes_outcome(self, artifact, reference):
        assert verify_artifact(artifact, reference).status is VerificationStatus.VERIFIED

        mutated = bytearray(DATA)
        mutated[len(mutated) // 2] ^= 0x01
        artifact.write_bytes(bytes(mutated))

        result = verify_artifact(artifact, reference)
        assert result.status is VerificationStatus.CORRUPT
        assert result.expected == sha256_hex(DATA)
        assert result.actual != result.expected


class TestParseReference:
    DIGEST_A = "a" * 64
    DIGEST_B = "B" * 64

    def test_sha256sum_line(self):
        assert parse_reference(f"{self.DIGEST_A}  tool\n", "tool") == self.DIGEST_A

    def test_bare_digest(self):
        assert parse_reference(self.DIGEST_A, "tool") == self.DIGEST_A

    def test_checksums_file_picks_entry(self):
        text = f"{self.DIGEST_A} *buildx-v0.12.0.linux-amd64\n{self.DIGEST_B} *buildx-v0.12.0.linux-arm64\n"
        assert parse_reference(text, "buildx-v0.12.0.linux-arm64") == "b" * 64

    def test_checksums_file_without_entry(self):
        text = f"{self.DIGEST_A} *one\n{self.DIGEST_B} *two\n"
        assert parse_reference(text, "three") is None

    def test_single_entry_for_another_file(self):
        assert parse_reference(f"{self.DIGEST_A}  other\n", "tool") is None

    def test_garbage(self):
        assert parse_reference("<html>404</html>", "tool") is None


class TestVerify:
    def test_verified(self, artifact, reference):
        result = verify_artifact(artifact, reference)
        assert result.ok
        assert result.reference == str(reference)

    def test_no_reference(self, artifact):
        result = verify_artifact(artifact, None)
        assert result.status is VerificationStatus.UNVERIFIED
        assert result.actual == sha256_hex(DATA)

    def test_missing_reference_file(self, artifact, tmp_path):
        assert verify_artifact(artifact, tmp_path / "nope").status is VerificationStatus.UNVERIFIED

    def test_reference_without_matching_entry(self, artifact, tmp_path):
        ref = tmp_path / "checksums.txt"
        ref.write_text(f"{'c' * 64} *x\n{'d' * 64} *y\n")
        assert verify_artifact(artifact, ref).status is VerificationStatus.UNVERIFIED


class TestRequireOverride:
    def test_verified_passes_without_prompt(self, artifact, reference):
        confirm = ScriptedConfirm()
        require_override(verify_artifact(artifact, reference), confirm, RecordingReporter())
        assert confirm.prompts == []

    def test_corrupt_override_accepted(self, artifact, reference):
        reference.write_text("0" * 64)
        reporter = RecordingReporter()
        require_override(verify_artifact(artifact, reference), ScriptedConfirm([True]), reporter)
        assert artifact.exists()
        assert reporter.by_level("warn")

    def test_corrupt_declined_deletes_both_files(self, artifact, reference):
        reference.write_text("0" * 64)
        with pytest.raises(CorruptArtifact):
            require_override(verify_artifact(artifact, reference), ScriptedConfirm([False]), RecordingReporter())
        assert not artifact.exists()
        assert not reference.exists()

    def test_unverified_declined_keeps_cached_file(self, artifact):
        with pytest.raises(UnverifiedArtifact):
            require_override(verify_artifact(artifact), ScriptedConfirm([False]), RecordingReporter())
        assert artifact.exists()

    def test_unverified_declined_discards_download(self, artifact):
        with pytest.raises(UnverifiedArtifact):
            require_override(
                verify_artifact(artifact), ScriptedConfirm([False]), RecordingReporter(),
                discard_unverified=True,
            )
        assert not artifact.exists()

    def test_unverified_bare_enter_proceeds(self, artifact):
        confirm = ScriptedConfirm()
        require_override(verify_artifact(artifact), confirm, RecordingReporter())
        assert len(confirm.prompts) == 1

    def test_corrupt_goes_to_its_own_confirm(self, artifact, reference):
        reference.write_text("0" * 64)
        general = ScriptedConfirm([True])
        with pytest.raises(CorruptArtifact):
            require_override(
                verify_artifact(artifact, reference), general, RecordingReporter(),
                corrupt_confirm=ScriptedConfirm([False]),
            )
        assert general.prompts == []
        assert not artifact.exists()
