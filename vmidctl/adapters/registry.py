"""
Adapter registry — central dispatch for all adapter operations.

The engine never talks to adapters directly. It asks the registry
to execute an Action; the registry resolves the adapter, validates,
honours dry-run, executes, and always hands back a Receipt.
"""

from __future__ import annotations

import logging
import time
from vmidctl.adapters.base import Adapter, ExecutionContext
from vmidctl.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry and dispatcher for adapters."""

    def __init__(self, timeout: int = 300):
        self._adapters: dict[str, Adapter] = {}
        self._timeout = timeout

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def execute_action(self, action: Action, dry_run: bool = False) -> Receipt:
        """Execute an action through the appropriate adapter.

        1. Resolves the adapter
        2. Builds the execution context
        3. Validates the action
        4. Executes (or dry-runs)
        5. Returns a Receipt (never raises)
        """
        start_time = time.monotonic()

        context = ExecutionContext(
            action=action,
            dry_run=dry_run,
            timeout=self._timeout,
            params=action.params,
        )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        # Validate
        try:
            is_valid, error_msg = adapter.validate(context)
            if not is_valid:
                return Receipt.failure(
                    adapter=action.adapter,
                    action_id=action.id,
                    error=f"Validation failed: {error_msg}",
                )
        except Exception as e:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation error: {e}",
            )

        # Dry run — validated but not executed
        if dry_run:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would execute {action.adapter}:{context.operation}",
                metadata={"dry_run": True},
            )

        # Execute
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            # Adapters should never raise, but defense in depth
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt
