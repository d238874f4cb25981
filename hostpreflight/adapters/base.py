"""
Adapter protocol — how the Host facade reaches the operating system.

Checks call the Host; the Host builds Actions; adapters carry them out
against the real system (or a relocated tree) and answer with Receipts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from hostpreflight.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action.

    ``root`` relocates every absolute host path below a directory,
    so the same checks can run against a scratch tree.
    """

    action: Action
    root: str | None = None
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    def host_path(self, raw: str) -> Path:
        """Resolve a host path, honouring the relocation root."""
        path = Path(raw)
        if self.root is None:
            return path
        return Path(self.root) / path.relative_to(path.anchor)


class Adapter(ABC):
    """One family of host primitives (files, services, commands, PATH).

    ``execute`` reports problems in the Receipt and does not raise; the
    registry still guards against adapters that do.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, also the prefix of the action ids it serves."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backing tool (systemctl, sudo, ...) is present."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before anything runs; returns (ok, reason)."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
