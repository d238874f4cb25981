"""
Action and Receipt — what the Host facade asks for, and what it gets back.

Adapters report every outcome as a Receipt; failures never travel as
exceptions across this boundary. The Host turns failed receipts into
``HostOperationError`` for the checks.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One host primitive call, routed by ``adapter``."""

    id: str                         # e.g. "filesystem.write:/etc/foo.conf"
    name: str = ""                  # shown in dry-run and debug logs
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)
    mutating: bool = False          # not executed in dry-run


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for an action that was deliberately not run; ``reason`` goes in ``output``."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
