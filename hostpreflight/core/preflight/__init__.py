"""Preflight checks — patterns, concrete registries, and their errors."""

from hostpreflight.core.preflight.errors import (
    DetectionFailed,
    FixNotAvailable,
    PreconditionUnavailable,
    PreflightError,
    RemediationFailed,
    UndoFailed,
)

__all__ = [
    "DetectionFailed",
    "FixNotAvailable",
    "PreconditionUnavailable",
    "PreflightError",
    "RemediationFailed",
    "UndoFailed",
]
