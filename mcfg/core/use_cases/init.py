"""
Init use case — create the local environment.

    1. repository directory (or --local-dir, linked into place)
    2. git init, or git clone --repository-url, unless already a repo
    3. config directory with the default installers.yml
    4. an empty install log

Every step is idempotent: re-running init on a set-up machine only
fills in whatever is missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mcfg.adapters import default_registry
from mcfg.adapters.registry import AdapterRegistry
from mcfg.core.config.environment import Environment
from mcfg.core.data import default_installers_text
from mcfg.core.errors import ExecutionError
from mcfg.core.models.action import Action, Receipt
from mcfg.core.persistence.install_log import InstallLog

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    """Result of initializing the environment."""

    environment: Environment | None = None
    receipts: list[Receipt] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.environment:
            result["paths"] = self.environment.to_dict()
        result["steps"] = [
            {"step": r.action_id, "status": r.status, "detail": r.error or r.output}
            for r in self.receipts
        ]
        return result


def _step(adapters: AdapterRegistry, result: InitResult, action: Action) -> Receipt:
    receipt = adapters.execute_action(action)
    result.receipts.append(receipt)
    if receipt.failed:
        raise ExecutionError(action.id, receipt.return_code, receipt.error or "")
    return receipt


def init_environment(
    environment: Environment,
    local_dir: Path | None = None,
    repository_url: str | None = None,
    adapters: AdapterRegistry | None = None,
) -> InitResult:
    """Set up config, repository and install log.

    Args:
        environment: Local mcfg paths.
        local_dir: Keep the repository here and link it into place.
        repository_url: Clone this remote instead of ``git init``.
        adapters: Optional pre-configured adapter registry.
    """
    adapters = adapters or default_registry()
    result = InitResult(environment=environment)
    repo_dir = local_dir.resolve() if local_dir else environment.repository_path

    try:
        if not (repo_dir / ".git").is_dir():
            if repository_url:
                _step(adapters, result, Action(
                    id="clone",
                    name=f"git clone {repository_url}",
                    adapter="git",
                    params={"operation": "clone", "url": repository_url, "path": str(repo_dir)},
                ))
            else:
                _step(adapters, result, Action(
                    id="git-init",
                    name=f"git init {repo_dir}",
                    adapter="git",
                    params={"operation": "init", "path": str(repo_dir)},
                ))
        else:
            logger.info("Repository %s already exists, skipping init/clone", repo_dir)

        if local_dir:
            _step(adapters, result, Action(
                id="link-repository",
                adapter="filesystem",
                params={
                    "operation": "link",
                    "path": str(environment.repository_path),
                    "source": str(repo_dir),
                },
            ))

        _step(adapters, result, Action(
            id="config-dir",
            adapter="filesystem",
            params={"operation": "mkdir", "path": str(environment.config_dir)},
        ))
        _step(adapters, result, Action(
            id="installers",
            adapter="filesystem",
            params={
                "operation": "write",
                "path": str(environment.installer_file_path),
                "content": default_installers_text(),
            },
        ))
    except ExecutionError as e:
        result.error = str(e)
        return result

    InstallLog(environment.log_file_path).create()
    logger.info("Initialized mcfg in %s", environment.data_dir)
    return result
