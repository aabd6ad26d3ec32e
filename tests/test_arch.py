"""
Tests for the architecture resolver.
"""

import pytest

from docker_tools.core.errors import UnsupportedArchitecture
from docker_tools.core.models.target import TargetName
from docker_tools.core.services.arch import (
    SUPPORTED_ARCHES,
    TARGET_ARCH_REMAP,
    machine_arch,
    remap,
    target_arch,
)


class TestMachineArch:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("x86_64", "x86_64"),
            ("amd64", "x86_64"),
            ("aarch64", "aarch64"),
            ("arm64", "aarch64"),
            ("armv7l", "armhf"),
            ("armv6l", "armel"),
            ("s390x", "s390x"),
            ("ppc64le", "ppc64le"),
            ("  X86_64 \n", "x86_64"),
        ],
    )
    def test_known_machines(self, raw, expected):
        assert machine_arch(raw) == expected

    @pytest.mark.parametrize("raw", ["i386", "mips64", "riscv64", "", "   "])
    def test_unknown_machine_raises(self, raw):
        with pytest.raises(UnsupportedArchitecture):
            machine_arch(raw)

    def test_every_token_is_supported(self):
        for raw in ("x86_64", "aarch64", "armv7l", "armv6l", "s390x", "ppc64le"):
            assert machine_arch(raw) in SUPPORTED_ARCHES

    def test_defaults_to_platform(self, monkeypatch):
        monkeypatch.setattr("platform.machine", lambda: "aarch64")
        assert machine_arch() == "aarch64"


class TestTargetArch:
    def test_engine_uses_host_token(self):
        assert target_arch(TargetName.ENGINE, "armv7l") == "armhf"

    @pytest.mark.parametrize(
        "raw, expected",
        [("x86_64", "amd64"), ("aarch64", "arm64"), ("armv7l", "arm-v7"), ("armv6l", "arm-v6"), ("s390x", "s390x")],
    )
    def test_buildx_naming(self, raw, expected):
        assert target_arch(TargetName.BUILDX, raw) == expected

    def test_compose_naming(self):
        assert target_arch(TargetName.COMPOSE, "x86_64") == "x86_64"
        assert target_arch(TargetName.COMPOSE, "armv7l") == "armv7"

    def test_unsupported_names_target(self):
        with pytest.raises(UnsupportedArchitecture) as exc:
            target_arch(TargetName.BUILDX, "sparc")
        assert exc.value.target == "docker-buildx"
        assert "sparc" in str(exc.value)

    def test_remap_passes_unknown_tokens_through(self):
        assert remap("s390x", TARGET_ARCH_REMAP[TargetName.BUILDX]) == "s390x"

    def test_every_supported_token_maps_for_every_target(self):
        for target in TargetName:
            for token in SUPPORTED_ARCHES:
                assert remap(token, TARGET_ARCH_REMAP[target])
