"""
Refresh use case — pull the latest repository from its remote.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mcfg.adapters import default_registry
from mcfg.adapters.registry import AdapterRegistry
from mcfg.core.config.environment import Environment
from mcfg.core.errors import McfgError
from mcfg.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    receipt: Receipt | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.receipt is not None
        return {"status": self.receipt.status, "output": self.receipt.output}


def refresh_repository(
    environment: Environment,
    adapters: AdapterRegistry | None = None,
) -> RefreshResult:
    """``git pull`` in the repository; a non-git repository is an error."""
    result = RefreshResult()
    try:
        environment.require_initialized()
    except McfgError as e:
        result.error = str(e)
        return result

    repo = environment.repository_path.resolve()
    receipt = (adapters or default_registry()).execute_action(
        Action(
            id="refresh",
            name="git pull",
            adapter="git",
            params={"operation": "pull", "path": str(repo)},
        )
    )
    result.receipt = receipt
    if receipt.failed:
        result.error = receipt.error
    else:
        logger.info("Refreshed repository %s", repo)
    return result
