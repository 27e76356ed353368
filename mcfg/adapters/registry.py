"""
Adapter registry — central dispatch for every side effect.

The executor never calls an adapter directly: it hands Actions to
the registry, which picks the adapter, validates, honours dry-run
and always answers with a Receipt. Receipts leave here stamped with
where the step came from (group, package set, package, installer).
"""

from __future__ import annotations

import logging
import time
from typing import Any

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

_PROVENANCE = ("group", "package_set", "package", "installer")


class AdapterRegistry:
    """Adapters by name, plus the dispatch rules.

    Dry-run validates and reports what would run without executing.
    """

    def __init__(self):
        self._adapters: dict[str, Adapter] = {}

    # ── Registration ────────────────────────────────────────────

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Adapter '%s' registered twice; keeping the newer one", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Which registered tools exist on this machine (for ``mcfg config``)."""
        return {
            name: {
                "name": name,
                "available": _available(adapter),
                "type": type(adapter).__name__,
            }
            for name, adapter in self._adapters.items()
        }

    # ── Dispatch ────────────────────────────────────────────────

    def execute_action(
        self,
        action: Action,
        working_dir: str = ".",
        env: dict[str, str] | None = None,
        dry_run: bool = False,
    ) -> Receipt:
        """Run one action and return its receipt. Never raises."""
        started = time.monotonic()
        context = ExecutionContext(
            action=action,
            working_dir=working_dir,
            dry_run=dry_run,
            env=env or {},
        )
        label = action.params.get("display") or action.name or action.id

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return _stamp(Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            ), action)

        problem = _validation_problem(adapter, context)
        if problem:
            return _stamp(Receipt.failure(
                adapter=action.adapter, action_id=action.id, error=problem
            ), action)

        if dry_run:
            return _stamp(Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] {label}",
                metadata={"dry_run": True},
            ), action)

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter '%s' raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return _stamp(receipt, action)


def _available(adapter: Adapter) -> bool:
    try:
        return adapter.is_available()
    except Exception as e:
        logger.debug("Availability check of '%s' failed: %s", adapter.name, e)
        return False


def _validation_problem(adapter: Adapter, context: ExecutionContext) -> str:
    """Empty when the action is valid, else the message for the receipt."""
    try:
        is_valid, message = adapter.validate(context)
    except Exception as e:
        return f"Validation error: {e}"
    return "" if is_valid else f"Validation failed: {message}"


def _stamp(receipt: Receipt, action: Action) -> Receipt:
    for key in _PROVENANCE:
        value = getattr(action, key)
        if value is not None:
            receipt.metadata.setdefault(key, value)
    return receipt
