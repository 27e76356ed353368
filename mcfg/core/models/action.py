"""
Action and Receipt — what the executor asks for and what comes back.

Installer commands, link files and repository pulls all become an
Action handed to the adapter registry. The registry always answers
with a Receipt; a failed package is a failed receipt, not an
exception, so the rest of the run carries on.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    id: str                          # e.g. "tools:ripgrep:install"
    name: str = ""                   # label for logs and dry-run output
    adapter: str                     # shell | filesystem | git
    params: dict[str, Any] = Field(default_factory=dict)

    # provenance, stamped onto the receipt by the registry
    group: str | None = None
    package_set: str | None = None
    package: str | None = None
    installer: str | None = None


class Receipt(BaseModel):
    """Outcome of one Action.

    ``output`` holds captured stdout, or the reason for a skip.
    ``return_code`` is set only when a process ran.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    return_code: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
