"""
Install detection — derive an ``InstallationRecord`` from the host.

``detect()`` composes independent existence checks (command on PATH,
package-owned path, manually placed path) and is called fresh at every
decision point.  Nothing is cached, so a binary removed by hand
mid-session is noticed on the next probe.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from docker_tools.adapters.base import CommandRunner
from docker_tools.core.models.install import Evidence, EvidenceKind, InstallationRecord
from docker_tools.core.models.settings import HostPaths
from docker_tools.core.models.target import TargetName, TargetProfile, build_profile

logger = logging.getLogger(__name__)


def detect(
    profile: TargetProfile,
    runner: CommandRunner,
    *,
    with_version: bool = True,
    timeout: int = 10,
) -> InstallationRecord:
    """Probe every known install location of ``profile``.

    The target counts as installed if ANY probe resolves.
    """
    evidence: list[Evidence] = []

    for command in profile.commands:
        resolved = runner.which(command)
        if resolved:
            evidence.append(Evidence(kind=EvidenceKind.COMMAND, location=resolved))

    for path in profile.package_paths:
        if Path(path).is_file():
            evidence.append(Evidence(kind=EvidenceKind.PACKAGE_PATH, location=path))

    for path in profile.manual_paths:
        if Path(path).is_file():
            evidence.append(Evidence(kind=EvidenceKind.MANUAL_PATH, location=path))

    version = None
    if with_version and evidence:
        version = query_version(profile, runner, timeout=timeout)

    record = InstallationRecord(target=profile.name, evidence=evidence, version=version)
    logger.debug(
        "detect(%s): installed=%s evidence=%s", profile.name, record.installed, record.residue,
    )
    return record


def query_version(
    profile: TargetProfile,
    runner: CommandRunner,
    *,
    timeout: int = 10,
) -> str | None:
    """Run the target's version query and return the parsed version.

    Returns None when the query fails, so a placed-but-broken binary
    is distinguishable from a working one.
    """
    if not profile.version_command:
        return None

    result = runner.run(profile.version_command, timeout=timeout)
    if not result.ok:
        return None

    match = re.search(profile.version_pattern, result.output)
    if match:
        return match.group(1)
    first_line = result.output.splitlines()[0] if result.output else ""
    return first_line or None


def detect_all(
    paths: HostPaths,
    runner: CommandRunner,
    *,
    with_version: bool = True,
) -> dict[TargetName, InstallationRecord]:
    """Detect every target."""
    return {
        name: detect(build_profile(name, paths), runner, with_version=with_version)
        for name in TargetName
    }
