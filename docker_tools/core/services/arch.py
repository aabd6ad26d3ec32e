"""
Architecture resolver — host CPU name → per-target download token.

Two layers:

1. ``machine_arch`` maps the raw ``uname -m`` string to the host token
   used by the static engine bundles (``x86_64``, ``aarch64``,
   ``armhf``, ``armel``, ``s390x``, ``ppc64le``).
2. ``TARGET_ARCH_REMAP`` renames a host token for targets that publish
   under their own naming (buildx: ``aarch64`` → ``arm64``).

Unknown inputs always raise ``UnsupportedArchitecture``; an empty or
partial token is never returned.
"""

from __future__ import annotations

import platform
from collections.abc import Mapping

from docker_tools.core.errors import UnsupportedArchitecture
from docker_tools.core.models.target import TargetName

_MACHINE_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "armv7l": "armhf",
    "armv7": "armhf",
    "armhf": "armhf",
    "armv6l": "armel",
    "armel": "armel",
    "s390x": "s390x",
    "ppc64le": "ppc64le",
}

SUPPORTED_ARCHES: tuple[str, ...] = ("x86_64", "aarch64", "armhf", "armel", "s390x", "ppc64le")

TARGET_ARCH_REMAP: dict[TargetName, dict[str, str]] = {
    TargetName.ENGINE: {},
    # compose release assets: docker-compose-linux-{x86_64,aarch64,armv7,armv6,s390x,ppc64le}
    TargetName.COMPOSE: {
        "armhf": "armv7",
        "armel": "armv6",
    },
    # buildx release assets: buildx-vX.Y.Z.linux-{amd64,arm64,arm-v7,arm-v6,s390x,ppc64le}
    TargetName.BUILDX: {
        "x86_64": "amd64",
        "aarch64": "arm64",
        "armhf": "arm-v7",
        "armel": "arm-v6",
    },
}


def machine_arch(raw: str | None = None) -> str:
    """Return the host token for ``raw`` (default: ``platform.machine()``).

    Raises:
        UnsupportedArchitecture: ``raw`` has no mapping.
    """
    machine = (platform.machine() if raw is None else raw).strip().lower()
    token = _MACHINE_MAP.get(machine)
    if not token:
        raise UnsupportedArchitecture(machine)
    return token


def remap(token: str, table: Mapping[str, str]) -> str:
    """Apply one renaming layer; tokens missing from ``table`` pass through."""
    return table.get(token, token)


def target_arch(target: TargetName, raw: str | None = None) -> str:
    """Resolve the download token ``target`` uses on this host."""
    try:
        token = machine_arch(raw)
    except UnsupportedArchitecture as e:
        raise UnsupportedArchitecture(e.machine, str(target)) from None
    return remap(token, TARGET_ARCH_REMAP.get(target, {}))
