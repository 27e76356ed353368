"""
Run use case — install / update / uninstall / link-files, and update-self.

The full vertical slice from CLI intent to logged execution: check
the environment, load the installer registry and the repository,
select package sets, execute, return a report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mcfg.adapters import default_registry
from mcfg.adapters.registry import AdapterRegistry
from mcfg.core.config.environment import Environment
from mcfg.core.config.loader import load_installers
from mcfg.core.config.repository_loader import load_repository
from mcfg.core.engine.executor import ActionExecutor, ExecutionReport, RunPolicy
from mcfg.core.engine.registry import InstallerRegistry
from mcfg.core.engine.selection import select_package_sets
from mcfg.core.engine.variables import system_vars
from mcfg.core.errors import McfgError
from mcfg.core.models.installer import ActionKind, Platform
from mcfg.core.persistence.install_log import InstallLog

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running one action across the repository."""

    action: str = ""
    report: ExecutionReport | None = None
    package_sets: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.report is None or self.report.all_ok)

    def to_dict(self) -> dict:
        result: dict = {"action": self.action}
        if self.error:
            result["error"] = self.error
            return result
        result["package_sets"] = self.package_sets
        if self.warnings:
            result["warnings"] = self.warnings
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def _executor(
    environment: Environment,
    adapters: AdapterRegistry | None,
    host: Platform | None,
    policy: RunPolicy | None,
    dry_run: bool,
) -> ActionExecutor:
    installers = InstallerRegistry(load_installers(environment.installer_file_path))
    return ActionExecutor(
        installers=installers,
        adapters=adapters or default_registry(),
        system=system_vars(environment, host),
        host=host,
        repo_config_path=environment.repo_config_path,
        install_log=InstallLog(environment.log_file_path),
        policy=policy,
        dry_run=dry_run,
    )


def run_action(
    environment: Environment,
    action: ActionKind,
    group: str | None = None,
    package_set: str | None = None,
    policy: RunPolicy | None = None,
    dry_run: bool = False,
    adapters: AdapterRegistry | None = None,
    host: Platform | None = None,
) -> RunResult:
    """Perform an action on the selected package sets.

    Args:
        environment: Local mcfg paths.
        action: install, update, uninstall or link-files.
        group: Optional group filter.
        package_set: Optional package-set filter (requires ``group``).
        policy: Default kind and failure scope.
        dry_run: Render and validate only.
        adapters: Optional pre-configured adapter registry.
        host: Host platform override (default: the running platform).

    Returns:
        RunResult with the execution report, or an error.
    """
    result = RunResult(action=action.value)
    host = host if host is not None else Platform.current()

    try:
        environment.require_initialized()
        executor = _executor(environment, adapters, host, policy, dry_run)
        repository, load_errors = load_repository(environment.repository_path)
        selection = select_package_sets(repository, host, group=group, package_set=package_set)
    except McfgError as e:
        result.error = str(e)
        return result

    result.warnings = [str(e) for e in load_errors]
    result.package_sets = [f"{g.name}/{ps.name}" for g, ps in selection]

    if not selection:
        logger.info("No package sets selected")

    result.report = executor.run(selection, action)
    return result


def run_update_self(
    environment: Environment,
    dry_run: bool = False,
    adapters: AdapterRegistry | None = None,
    host: Platform | None = None,
) -> RunResult:
    """Ask every installer that supports it to update itself."""
    result = RunResult(action="update-self")
    host = host if host is not None else Platform.current()

    try:
        environment.require_initialized()
        executor = _executor(environment, adapters, host, None, dry_run)
    except McfgError as e:
        result.error = str(e)
        return result

    result.report = executor.update_self()
    return result
