"""
Adapter registry — routes host actions to the adapter that owns them.

The Host facade builds one Action per primitive and hands it here; only
the registry touches adapter instances. Dispatch always yields a Receipt.
"""

from __future__ import annotations

import logging
import time

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the dispatch rules shared by every action.

    In mock mode every action goes to one stand-in adapter (or succeeds
    with a canned receipt when none is given), whatever its ``adapter``
    field says. In dry-run, mutating actions stop after validation while
    reads still run, so detection stays accurate.
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter '%s'", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def _resolve(self, action: Action) -> Adapter | None:
        if self._mock_mode:
            return self._mock_adapter
        return self._adapters.get(action.adapter)

    def execute_action(
        self,
        action: Action,
        root: str | None = None,
        dry_run: bool = False,
    ) -> Receipt:
        """Validate and run one action.

        Args:
            action: What to do and which adapter does it.
            root: Directory that absolute host paths are relocated under.
            dry_run: Skip mutating actions once they validate.

        Returns:
            The adapter's receipt, timed. Unknown adapters, validation
            errors and adapter exceptions all come back as failures.
        """
        start = time.monotonic()

        if self._mock_mode and self._mock_adapter is None:
            return Receipt.success(
                action.adapter, action.id,
                output=f"[mock] {action.id} executed",
                metadata={"mock": True, "dry_run": dry_run},
            )

        adapter = self._resolve(action)
        if adapter is None:
            return Receipt.failure(action.adapter, action.id, f"No adapter registered for '{action.adapter}'")

        context = ExecutionContext(action=action, root=root, dry_run=dry_run, params=action.params)

        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(action.adapter, action.id, f"Validation error: {e}")
        if not valid:
            return Receipt.failure(action.adapter, action.id, f"Validation failed: {reason}")

        if dry_run and action.mutating:
            logger.info("[dry-run] Would %s", action.name or action.id)
            return Receipt.skip(
                action.adapter, action.id,
                reason=f"[dry-run] Would execute {action.id}",
                metadata={"dry_run": True},
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(action.adapter, action.id, f"Unexpected error: {e}")

        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt
