"""
Preflight error taxonomy.

Checks raise these; the runner records them. Messages always carry the
resource (path or service name) and the underlying cause, since they are
read directly by an operator deciding what to do by hand.
"""

from __future__ import annotations


class PreflightError(Exception):
    """Base class for check failures."""


class DetectionFailed(PreflightError):
    """Host state does not (yet) have the checked property.

    ``reason`` is a short diagnostic tag (e.g. "absent", "content differs");
    the runner treats every reason the same way.
    """

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class RemediationFailed(PreflightError):
    """A fix did not complete: a write, removal or reload failed."""


class UndoFailed(PreflightError):
    """A cleanup did not complete."""


class PreconditionUnavailable(PreflightError):
    """The subsystem a cleanup depends on is not installed.

    Only used to turn a cleanup into a no-op.
    """


class FixNotAvailable(PreflightError):
    """The check cannot be fixed automatically; the message says what to do."""
