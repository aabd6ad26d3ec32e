"""Adapters — host and network bindings.

Public re-exports for convenient access.
"""

from docker_tools.adapters.base import CommandResult, CommandRunner, HttpClient
from docker_tools.adapters.http import UrllibClient
from docker_tools.adapters.mock import MockHttpClient, MockRunner
from docker_tools.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "HttpClient",
    "MockHttpClient",
    "MockRunner",
    "SubprocessRunner",
    "UrllibClient",
]
