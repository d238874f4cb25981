"""
Service state model — the service manager's view of a unit.
"""

from __future__ import annotations

from enum import Enum


class ServiceState(str, Enum):
    """Coarse run state of a host service."""

    RUNNING = "running"
    STARTING = "starting"
    STOPPED = "stopped"
    FAILED = "failed"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"

    @classmethod
    def from_systemd(cls, load_state: str, active_state: str) -> ServiceState:
        """Map systemd LoadState/ActiveState properties to a ServiceState."""
        if load_state == "not-found":
            return cls.NOT_FOUND
        return _ACTIVE_STATES.get(active_state, cls.UNKNOWN)


_ACTIVE_STATES = {
    "active": ServiceState.RUNNING,
    "reloading": ServiceState.RUNNING,
    "activating": ServiceState.STARTING,
    "inactive": ServiceState.STOPPED,
    "deactivating": ServiceState.STOPPED,
    "failed": ServiceState.FAILED,
}
