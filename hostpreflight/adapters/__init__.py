"""Adapters — bindings for privileged OS primitives and the service manager.

Public re-exports for convenient access.
"""

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.adapters.mock import MockAdapter
from hostpreflight.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
