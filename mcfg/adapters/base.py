"""
Adapter base — how mcfg touches the machine.

Running an installer, linking a dotfile and pulling the package
repository each live behind an adapter. The executor turns package
sets into Actions and only ever looks at the Receipts that come back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from mcfg.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    action: Action
    working_dir: str = "."
    dry_run: bool = False
    env: dict[str, str] = Field(default_factory=dict)   # MCFG_* variables, PATH

    @property
    def params(self) -> dict[str, Any]:
        return self.action.params


class Adapter(ABC):
    """One kind of side effect (``shell``, ``filesystem``, ``git``).

    Subclasses report problems through the Receipt; the registry
    still guards against an adapter that raises.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Key the executor uses in ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """True when the backing tool is installed."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """``(True, "")`` or ``(False, reason)``; runs before dry-run is honoured."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
