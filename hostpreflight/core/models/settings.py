"""
Preflight settings — which checks to skip or downgrade to warnings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class PreflightSettings(BaseModel):
    """User settings read from preflight.yml.

    Both list form and flat ``skip-<id>: true`` keys are accepted:

        skip: [check-network-manager-running]
        warn-check-systemd-networkd-running: true

    Flat keys are validated as booleans, so ``"false"`` turns a check
    back on and ``"maybe"`` is rejected.
    """

    skip: list[str] = Field(default_factory=list)
    warn: list[str] = Field(default_factory=list)
    audit: bool = True
    audit_file: str | None = None

    skip_keys: dict[str, bool] = Field(default_factory=dict, exclude=True)
    warn_keys: dict[str, bool] = Field(default_factory=dict, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _collect_flat_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        flat: dict[str, dict[Any, Any]] = {"skip": {}, "warn": {}}
        for key in list(data):
            if not isinstance(key, str):
                continue
            for prefix in flat:
                if key.startswith(f"{prefix}-"):
                    flat[prefix][key[len(prefix) + 1:]] = data.pop(key)
        data["skip_keys"] = flat["skip"]
        data["warn_keys"] = flat["warn"]
        return data

    @model_validator(mode="after")
    def _merge_flat_keys(self) -> PreflightSettings:
        self.skip.extend(k for k, on in self.skip_keys.items() if on and k not in self.skip)
        self.warn.extend(k for k, on in self.warn_keys.items() if on and k not in self.warn)
        return self

    def should_skip(self, check_id: str) -> bool:
        return check_id in self.skip

    def should_warn(self, check_id: str) -> bool:
        return check_id in self.warn
