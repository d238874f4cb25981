"""
Executable lookup adapter — resolve a command name on PATH.
"""

from __future__ import annotations

import shutil

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.core.models.action import Receipt


class ExecutableLookupAdapter(Adapter):
    """Resolve executables the way the shell would.

    Action params:
        executable (str): Command name to look up.
        search_path (str): Optional PATH override.
    """

    @property
    def name(self) -> str:
        return "path"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.params.get("executable"):
            return False, "Missing required param: 'executable'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        executable = context.action.params["executable"]
        found = shutil.which(executable, path=context.action.params.get("search_path"))
        if found is None:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{executable}: executable file not found in $PATH",
                metadata={"executable": executable},
            )
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=found,
            metadata={"executable": executable},
        )
