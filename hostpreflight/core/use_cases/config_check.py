"""
Config check use case — validate preflight.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from hostpreflight.core.config.loader import ConfigError, find_settings_file, load_settings
from hostpreflight.core.models.settings import PreflightSettings
from hostpreflight.core.preflight.network import all_network_checks


@dataclass
class ConfigCheckResult:
    """Result of settings validation."""

    valid: bool = False
    settings: PreflightSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "skip": self.settings.skip if self.settings else [],
            "warn": self.settings.warn if self.settings else [],
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate preflight settings against the known checks.

    Args:
        config_path: Optional explicit path to preflight.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()
    result.config_path = find_settings_file(config_path)

    try:
        settings = load_settings(result.config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.settings = settings

    if result.config_path is None:
        result.warnings.append("No preflight.yml found, using defaults.")

    known = {c.config_key_suffix for c in all_network_checks()}
    for setting, ids in (("skip", settings.skip), ("warn", settings.warn)):
        for check_id in ids:
            if check_id not in known:
                result.warnings.append(f"Unknown check in '{setting}': {check_id}")

    both = sorted(set(settings.skip) & set(settings.warn))
    if both:
        result.errors.append(f"Checks both skipped and warn-only: {', '.join(both)}")

    for setting, ids in (("skip", settings.skip), ("warn", settings.warn)):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            result.warnings.append(f"Duplicate entries in '{setting}': {', '.join(dupes)}")

    result.valid = len(result.errors) == 0
    return result
