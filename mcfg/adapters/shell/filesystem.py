"""
Filesystem adapter — link files, env files and the local layout.

``link-files`` actions, the env-file copy and the directories made by
``mcfg init`` all pass through here so they dry-run and mock like
installer commands do. Existing user files are never replaced unless
the action says ``overwrite``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.core.models.action import Receipt

logger = logging.getLogger(__name__)

# operation -> params it needs besides 'path'
_REQUIRED = {
    "mkdir": (),
    "link": ("source",),
    "unlink": (),
    "write": ("content",),
}


class FilesystemAdapter(Adapter):
    """Params: ``operation``, ``path`` and, per operation, ``source``
    (link target), ``content`` and ``overwrite`` (write)."""

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.params
        operation = params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in _REQUIRED:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_REQUIRED))}"
        if not params.get("path"):
            return False, "Missing required param: 'path'"
        for key in _REQUIRED[operation]:
            if key not in params or (key == "source" and not params[key]):
                return False, f"Missing required param: '{key}' for {operation} operation"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.params["operation"]
        target = Path(context.params["path"]).expanduser()
        if not target.is_absolute():
            target = Path(context.working_dir) / target

        handler = getattr(self, f"_{operation}")
        try:
            return handler(context, target)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    # ── Operations ──────────────────────────────────────────────

    def _mkdir(self, context: ExecutionContext, target: Path) -> Receipt:
        target.mkdir(parents=True, exist_ok=True)
        return self._done(context, f"Directory ready: {target}", path=str(target))

    def _link(self, context: ExecutionContext, target: Path) -> Receipt:
        source = Path(context.params["source"]).expanduser()
        meta = {"path": str(target), "source": str(source)}

        if target.is_symlink():
            current = Path(target.readlink())
            if current == source:
                return self._skipped(context, f"Already linked: {target}", **meta)
            return self._refused(context, f"{target} already links to {current}", **meta)
        if target.exists():
            return self._refused(context, f"{target} exists and is not a link", **meta)

        if not source.exists():
            logger.warning("Linking %s to missing %s", target, source)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.symlink_to(source)
        logger.debug("Linked %s → %s", target, source)
        return self._done(context, f"Linked {target} → {source}", **meta)

    def _unlink(self, context: ExecutionContext, target: Path) -> Receipt:
        # Only links mcfg could have made; regular files stay.
        if not target.is_symlink():
            return self._skipped(context, f"Not a link: {target}", path=str(target))
        target.unlink()
        return self._done(context, f"Removed link {target}", path=str(target))

    def _write(self, context: ExecutionContext, target: Path) -> Receipt:
        content = context.params["content"]
        if target.exists() and not context.params.get("overwrite", False):
            return self._skipped(context, f"Already exists: {target}", path=str(target))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return self._done(
            context, f"Wrote {target} ({len(content)} bytes)", path=str(target), size=len(content)
        )

    # ── Receipts ────────────────────────────────────────────────

    def _done(self, context: ExecutionContext, output: str, **meta: Any) -> Receipt:
        return Receipt.success(
            adapter=self.name, action_id=context.action.id, output=output, metadata=meta
        )

    def _skipped(self, context: ExecutionContext, reason: str, **meta: Any) -> Receipt:
        return Receipt.skip(
            adapter=self.name, action_id=context.action.id, reason=reason, metadata=meta
        )

    def _refused(self, context: ExecutionContext, error: str, **meta: Any) -> Receipt:
        return Receipt.failure(
            adapter=self.name, action_id=context.action.id, error=error, metadata=meta
        )
