"""
Configuration loader — reads preflight.yml into PreflightSettings.

Search order: explicit path (--config), $HPF_CONFIG, then
~/.config/hostpreflight/preflight.yml. A missing default file means
default settings; a missing explicit file is an error.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from hostpreflight.core.models.settings import PreflightSettings

logger = logging.getLogger(__name__)

SETTINGS_FILE = "preflight.yml"
CONFIG_ENV_VAR = "HPF_CONFIG"


class ConfigError(Exception):
    """Raised when the settings file is invalid or missing."""


def default_settings_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "hostpreflight" / SETTINGS_FILE


def find_settings_file(path: Path | None = None) -> Path | None:
    """Resolve the settings file to read.

    Returns:
        Explicit or $HPF_CONFIG path (even if missing), the default path
        if it exists, or None.
    """
    if path is not None:
        return path
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    candidate = default_settings_path()
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None) -> PreflightSettings:
    """Load and validate preflight settings.

    Args:
        path: Explicit settings file. If None, the search order applies.

    Returns:
        Validated PreflightSettings (defaults when no file is found).

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = find_settings_file(path)
    if path is None:
        logger.debug("No %s found, using default settings", SETTINGS_FILE)
        return PreflightSettings()

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
        return PreflightSettings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = PreflightSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e

    logger.info("Loaded settings from %s (%d skipped, %d warn-only)", path, len(settings.skip), len(settings.warn))
    return settings
