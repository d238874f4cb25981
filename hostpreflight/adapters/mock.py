"""
Mock adapter — stands in for systemd, PATH lookup or the shell in tests.

Each instance takes the name of the adapter it replaces, so the Host's
action ids ("systemd.status:NetworkManager.service", "path.lookup:nmcli")
can be scripted one by one. Unscripted actions succeed.
"""

from __future__ import annotations

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.core.models.action import Receipt


class MockAdapter(Adapter):
    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._scripted: dict[str, Receipt] = {}
        self._calls: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def called_ids(self) -> list[str]:
        """Action ids received, in call order."""
        return [ctx.action.id for ctx in self._calls]

    def is_available(self) -> bool:
        return self._available

    def set_output(self, action_id: str, output: str, **metadata) -> None:
        """Make ``action_id`` succeed with ``output`` (a service state, a path, stdout)."""
        self._scripted[action_id] = Receipt.success(self._name, action_id, output=output, metadata=metadata)

    def set_failure(self, action_id: str, error: str = "Mock failure", **metadata) -> None:
        self._scripted[action_id] = Receipt.failure(self._name, action_id, error, metadata=metadata)

    def reset(self) -> None:
        self._calls.clear()
        self._scripted.clear()

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._calls.append(context)
        scripted = self._scripted.get(context.action.id)
        if scripted is not None:
            return scripted.model_copy(deep=True)
        return Receipt.success(
            self._name, context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )
