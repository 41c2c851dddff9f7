"""
Configuration loader — reads vmidctl.yml into a Settings model.

The settings file is optional. Lookup order:

    --config flag  >  VMIDCTL_CONFIG env var  >  /etc/vmidctl/vmidctl.yml  >  defaults

VMIDCTL_LOG_FILE overrides ``log_file`` regardless of where the
rest of the settings came from.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from vmidctl.core.models.settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_FILE = Path("/etc/vmidctl/vmidctl.yml")
CONFIG_ENV_VAR = "VMIDCTL_CONFIG"
LOG_FILE_ENV_VAR = "VMIDCTL_LOG_FILE"


class ConfigError(Exception):
    """Raised when the settings file is unreadable or invalid."""


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Resolve which settings file to load, if any.

    An explicit path (flag or env var) is returned even when it does
    not exist, so that load_settings() can report it.
    """
    if explicit is not None:
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    if SYSTEM_CONFIG_FILE.is_file():
        return SYSTEM_CONFIG_FILE

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit settings file. If None, uses find_config_file().

    Returns:
        Validated Settings (defaults when no file is configured).

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    path = find_config_file(path)

    if path is None:
        logger.debug("No settings file, using defaults")
        data: dict = {}
    else:
        data = _read_yaml(path)

    env_log_file = os.environ.get(LOG_FILE_ENV_VAR)
    if env_log_file:
        data["log_file"] = env_log_file

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path or 'environment'}: {e}") from e

    logger.debug(
        "Settings: log_file=%s stop_failure=%s timeout=%ss",
        settings.log_file,
        settings.stop_failure,
        settings.command_timeout,
    )
    return settings


def _read_yaml(path: Path) -> dict:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Allow everything to sit under a top-level "vmidctl" key
    if "vmidctl" in data and isinstance(data["vmidctl"], dict):
        data = dict(data["vmidctl"])

    return data
