"""
Git adapter — keeps the package repository under version control.

Only what mcfg needs: create the repository (init or clone) and
bring it up to date (pull). Uses the git CLI, never a library.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {"init", "clone", "pull"}


class GitAdapter(Adapter):
    """Git repository operations.

    Action params:
        operation (str): One of 'init', 'clone', 'pull'.
        url (str): Remote to clone (for 'clone').
        path (str): Repository directory (default: context.working_dir).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"
        if operation == "clone" and not context.params.get("url"):
            return False, "Missing required param: 'url' for clone operation"
        if operation == "pull" and not (self._path(context) / ".git").exists():
            return False, f"Not a git repository: {self._path(context)}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.params["operation"]
        path = self._path(context)
        start = time.monotonic()
        try:
            if operation == "init":
                path.mkdir(parents=True, exist_ok=True)
                output = self._git(["init"], path)
            elif operation == "clone":
                path.parent.mkdir(parents=True, exist_ok=True)
                output = self._git(["clone", context.params["url"], str(path)], path.parent)
            else:
                output = self._git(["pull", "--ff-only"], path)
        except (OSError, RuntimeError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Git error: {e}",
                metadata={"operation": operation, "path": str(path)},
            )

        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=output.strip(),
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"operation": operation, "path": str(path)},
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _path(self, ctx: ExecutionContext) -> Path:
        return Path(ctx.params.get("path") or ctx.working_dir)

    def _git(self, args: list[str], cwd: Path) -> str:
        """Run a git command and return stdout."""
        logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise RuntimeError(result.stderr.strip() or f"git {args[0]} failed")
        return result.stdout
