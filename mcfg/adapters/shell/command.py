"""
Shell command adapter — runs installer commands and package-set scripts.

There is no timeout: an installer may prompt, download for minutes or
ask for a sudo password. The child shares the terminal unless the
adapter was built with ``capture_output=True``, in which case stdout
and stderr end up on the receipt.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """Params: ``argv`` (rendered and split), ``display`` (what the user
    sees) and ``cwd`` (defaults to the context's working directory)."""

    def __init__(self, capture_output: bool = False):
        self._capture = capture_output

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.params.get("argv")
        if not isinstance(argv, list) or not argv:
            return False, "Missing required param: 'argv'"
        cwd = self._cwd(context)
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv: list[str] = context.params["argv"]
        shown = context.params.get("display") or " ".join(argv)
        cwd = self._cwd(context)
        logger.debug("→ %s (in %s)", shown, cwd)

        began = time.monotonic()
        try:
            proc = subprocess.run(
                argv,
                cwd=cwd,
                env={**os.environ, **context.env},
                capture_output=self._capture,
                text=True,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": shown},
            )
        took = int((time.monotonic() - began) * 1000)

        stdout = (proc.stdout or "").strip()
        stderr = (proc.stderr or "").strip()
        common = {
            "adapter": self.name,
            "action_id": context.action.id,
            "duration_ms": took,
            "return_code": proc.returncode,
            "output": stdout,
        }
        if proc.returncode:
            return Receipt(
                status="failed",
                error=stderr or f"Command exited with code {proc.returncode}",
                metadata={"command": shown},
                **common,
            )
        return Receipt(metadata={"command": shown, "stderr": stderr}, **common)

    @staticmethod
    def _cwd(context: ExecutionContext) -> str:
        return context.params.get("cwd", context.working_dir)
