"""
Configuration loader — reads docker-tools.yml into the Settings model.

Reads YAML, validates against the Pydantic schema, and returns a
typed ``Settings``.  A missing file is not an error: every setting has
a default.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from docker_tools.core.errors import ConfigError
from docker_tools.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_FILE = "docker-tools.yml"
SYSTEM_CONFIG = Path("/etc/docker-tools/config.yml")
CONFIG_ENV = "DOCKER_TOOLS_CONFIG"

__all__ = ["CONFIG_FILE", "ConfigError", "dump_settings", "find_config_file", "load_settings"]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Locate the config file.

    Order: ``$DOCKER_TOOLS_CONFIG`` → ``docker-tools.yml`` in the start
    directory or any parent → ``/etc/docker-tools/config.yml``.

    Returns:
        Path to the config file, or None if not found.
    """
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()

    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    if SYSTEM_CONFIG.is_file():
        return SYSTEM_CONFIG
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate configuration.

    Args:
        path: Explicit path to the config file.  If None, searches with
            ``find_config_file``; built-in defaults are used when nothing
            is found.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using built-in defaults", CONFIG_FILE)
        return Settings()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return Settings()

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "docker_tools" key or be flat
    data = data.get("docker_tools", data)

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Loaded config from %s (%d engine mirrors)", path, len(settings.mirrors.engine)
    )
    return settings


def dump_settings(settings: Settings) -> str:
    """Render settings back to YAML (``config show``)."""
    return yaml.safe_dump(
        settings.model_dump(mode="json"), sort_keys=False, default_flow_style=False,
    )
