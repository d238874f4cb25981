"""
Domain models for host preflight.

All models are re-exported here for convenient access:

    from hostpreflight.core.models import Check, CheckFlags, Action, Receipt
"""

from hostpreflight.core.models.action import Action, Receipt
from hostpreflight.core.models.check import Check, CheckFlags, CheckRegistry, validate_registry
from hostpreflight.core.models.service import ServiceState
from hostpreflight.core.models.settings import PreflightSettings

__all__ = [
    # action.py
    "Action",
    # check.py
    "Check",
    "CheckFlags",
    "CheckRegistry",
    # settings.py
    "PreflightSettings",
    "Receipt",
    # service.py
    "ServiceState",
    "validate_registry",
]
