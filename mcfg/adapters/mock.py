"""
Mock adapter — stands in for shell, git or filesystem in tests.

Nothing is executed. Every context is kept in ``call_log``; the answer
is a success unless a receipt was scripted for that action id.
"""

from __future__ import annotations

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.core.models.action import Receipt


class MockAdapter(Adapter):
    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._scripted: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def commands(self) -> list[list[str]]:
        """Every installer or script argv received, in order."""
        return [
            context.params["argv"] for context in self.call_log if "argv" in context.params
        ]

    def is_available(self) -> bool:
        return self._available

    # ── Scripting ───────────────────────────────────────────────

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_failure(
        self,
        action_id: str,
        error: str = "Mock failure",
        return_code: int | None = 1,
    ) -> None:
        self.set_response(
            action_id,
            Receipt.failure(
                adapter=self._name, action_id=action_id, error=error, return_code=return_code
            ),
        )

    def reset(self) -> None:
        self.call_log.clear()
        self._scripted.clear()

    # ── Adapter ─────────────────────────────────────────────────

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        scripted = self._scripted.get(context.action.id)
        if scripted is not None:
            return scripted
        runs_process = "argv" in context.params
        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output="[mock] " + " ".join(context.params["argv"]) if runs_process else "[mock]",
            return_code=0 if runs_process else None,
            metadata={"mock": True},
        )
