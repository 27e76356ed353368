"""
Action executor — runs one action across the selected package sets.

Per package set, in order:

    run-before → packages (or the script for this action) → env-file
    → link-files → run-after

Every step becomes an Action dispatched through the adapter registry
and yields a Receipt. A failing step is recorded and the run moves on;
``RunPolicy.stop_on_error`` instead abandons the rest of that set.

Flow:
    selection → render per step → adapters → receipts → install log
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from mcfg.adapters.registry import AdapterRegistry
from mcfg.core.engine.registry import InstallerRegistry
from mcfg.core.engine.selection import Selection
from mcfg.core.engine.template import Command, prepare, render
from mcfg.core.engine.variables import (
    action_vars,
    package_context,
    package_set_context,
    to_env_vars,
)
from mcfg.core.errors import NoInstallerFound, TemplateError
from mcfg.core.models.action import Action, Receipt
from mcfg.core.models.installer import (
    DEFAULT_KIND,
    ActionKind,
    PackageKind,
    Platform,
    platform_matches,
)
from mcfg.core.models.package import Group, PackageEntry, PackageSet
from mcfg.core.persistence.install_log import InstallLog, InstallLogEntry

logger = logging.getLogger(__name__)

# Link-files and the env file are created on these, removed on uninstall
_LINKING_ACTIONS = (ActionKind.INSTALL, ActionKind.LINK_FILES)


@dataclass(frozen=True)
class RunPolicy:
    """Knobs for behaviour the package-set files do not decide.

    default_kind:   kind assumed for package entries without one
    stop_on_error:  abandon the rest of a package set after a failure
    """

    default_kind: PackageKind = DEFAULT_KIND
    stop_on_error: bool = False


@dataclass
class ExecutionReport:
    """Result of running one action."""

    operation_id: str = ""
    action: str = ""
    dry_run: bool = False
    receipts: list[Receipt] = field(default_factory=list)
    set_receipts: dict[str, list[Receipt]] = field(default_factory=dict)
    logged: int = 0

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def add(self, set_key: str, receipt: Receipt) -> Receipt:
        self.receipts.append(receipt)
        self.set_receipts.setdefault(set_key, []).append(receipt)
        return receipt

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "action": self.action,
            "dry_run": self.dry_run,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "logged": self.logged,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class _Abort(Exception):
    """Internal: stop_on_error tripped inside a package set."""


class ActionExecutor:
    """Renders and runs the steps of one action.

    Args:
        installers: The loaded installer registry.
        adapters: Dispatch for shell / filesystem steps.
        system: System-layer variables (see ``variables.system_vars``).
        host: Host platform.
        repo_config_path: Where env files are linked to.
        install_log: Receives a row per successful install; None disables.
        policy: Default kind and failure scope.
        dry_run: Render and validate, execute nothing, log nothing.
    """

    def __init__(
        self,
        installers: InstallerRegistry,
        adapters: AdapterRegistry,
        system: Mapping[str, str],
        host: Platform | None,
        repo_config_path: Path,
        install_log: InstallLog | None = None,
        policy: RunPolicy | None = None,
        dry_run: bool = False,
    ):
        self._installers = installers
        self._adapters = adapters
        self._system = dict(system)
        self._host = host
        self._repo_config_path = repo_config_path
        self._install_log = install_log
        self._policy = policy or RunPolicy()
        self._dry_run = dry_run

    # ── Entry points ────────────────────────────────────────────

    def run(
        self,
        selection: Selection,
        action: ActionKind,
        operation_id: str | None = None,
    ) -> ExecutionReport:
        report = ExecutionReport(
            operation_id=operation_id or generate_operation_id(),
            action=action.value,
            dry_run=self._dry_run,
        )
        for group, package_set in selection:
            logger.info(
                "Performing %s on package set '%s' (group '%s')",
                action,
                package_set.name,
                group.name,
            )
            try:
                self.run_package_set(group, package_set, action, report)
            except _Abort:
                logger.warning(
                    "Stopped package set '%s' after a failure", package_set.name
                )
        return report

    def update_self(self, operation_id: str | None = None) -> ExecutionReport:
        """Run every available installer's ``update-self`` command."""
        report = ExecutionReport(
            operation_id=operation_id or generate_operation_id(),
            action="update-self",
            dry_run=self._dry_run,
        )
        variables = action_vars(self._system, ActionKind.UPDATE)
        for descriptor in self._installers.update_self_candidates(self._host):
            assert descriptor.update_self is not None
            self._run_template(
                report,
                key=descriptor.name,
                action_id=f"{descriptor.name}:update-self",
                template=descriptor.update_self,
                variables=variables,
                installer=descriptor.name,
            )
        return report

    # ── Package sets ────────────────────────────────────────────

    def run_package_set(
        self,
        group: Group,
        package_set: PackageSet,
        action: ActionKind,
        report: ExecutionReport,
    ) -> None:
        key = f"{group.name}/{package_set.name}"
        set_vars = package_set_context(self._system, action, package_set)
        cwd = str(package_set.directory) if package_set.directory else "."
        meta = {"group": group.name, "package_set": package_set.name}

        if package_set.run_before:
            self._check(self._run_template(
                report, key, f"{key}:run-before", package_set.run_before, set_vars, cwd, **meta
            ))

        if package_set.is_script:
            template = package_set.actions.for_action(action)
            if template:
                self._check(self._run_template(
                    report, key, f"{key}:{action}", template, set_vars, cwd, **meta
                ))
        else:
            for entry in package_set.packages:
                self._check(self._run_package(report, key, group, package_set, entry, action, cwd))

        if package_set.env_file and package_set.directory:
            source = package_set.directory / package_set.env_file
            link = self._repo_config_path / package_set.name / Path(package_set.env_file).name
            self._check(self._link(report, key, f"{key}:env-file", source, link, action, meta))

        for source_name, destination in package_set.link_files.items():
            step = f"{key}:link:{source_name}"
            try:
                link = Path(render(destination, set_vars)).expanduser()
            except TemplateError as e:
                self._check(report.add(key, Receipt.failure(
                    adapter="template", action_id=step, error=str(e), metadata=meta
                )))
                continue
            source = (package_set.directory or Path(".")) / source_name
            self._check(self._link(report, key, step, source, link, action, meta))

        if package_set.run_after:
            self._check(self._run_template(
                report, key, f"{key}:run-after", package_set.run_after, set_vars, cwd, **meta
            ))

    def _check(self, receipt: Receipt) -> None:
        if receipt.failed and self._policy.stop_on_error:
            raise _Abort()

    # ── Packages ────────────────────────────────────────────────

    def _run_package(
        self,
        report: ExecutionReport,
        key: str,
        group: Group,
        package_set: PackageSet,
        entry: PackageEntry,
        action: ActionKind,
        cwd: str,
    ) -> Receipt:
        step = f"{key}:{entry.name}:{action}"
        meta = {"group": group.name, "package_set": package_set.name, "package": entry.name}

        if not platform_matches(entry.platform, self._host):
            logger.info("Skipping '%s': %s only", entry.name, entry.platform)
            return report.add(key, Receipt.skip(
                adapter="executor",
                action_id=step,
                reason=f"{entry.name}: platform {entry.platform} only",
                metadata=meta,
            ))

        try:
            installer = self._installers.resolve(
                entry, self._host, default_kind=self._policy.default_kind
            )
        except NoInstallerFound as e:
            logger.error("%s", e)
            return report.add(key, Receipt.failure(
                adapter="executor", action_id=step, error=str(e), metadata=meta
            ))

        template = installer.command_for(action)
        if not template:
            logger.debug("Installer '%s' has no %s command", installer.name, action)
            return report.add(key, Receipt.skip(
                adapter="executor",
                action_id=step,
                reason=f"{installer.name} has no {action} command",
                metadata={**meta, "installer": installer.name},
            ))

        variables = package_context(self._system, action, package_set, entry)
        receipt = self._run_template(
            report, key, step, template, variables, cwd, installer=installer.name, **meta
        )

        if receipt.ok and action == ActionKind.INSTALL and not self._dry_run:
            self._log_install(report, group, package_set, entry, installer.name)
        return receipt

    def _log_install(
        self,
        report: ExecutionReport,
        group: Group,
        package_set: PackageSet,
        entry: PackageEntry,
        installer: str,
    ) -> None:
        if self._install_log is None:
            return
        self._install_log.append(
            InstallLogEntry(
                group=group.name,
                package_set=package_set.name,
                package=entry.name,
                installer=installer,
            )
        )
        report.logged += 1

    # ── Steps ───────────────────────────────────────────────────

    def _run_template(
        self,
        report: ExecutionReport,
        key: str,
        action_id: str,
        template: str,
        variables: Mapping[str, str],
        cwd: str = ".",
        **meta: str,
    ) -> Receipt:
        """Render a template and run it through the shell adapter."""
        try:
            command: Command = prepare(template, variables)
        except TemplateError as e:
            logger.error("%s: %s", action_id, e)
            return report.add(key, Receipt.failure(
                adapter="template", action_id=action_id, error=str(e), metadata=dict(meta)
            ))

        action = Action(
            id=action_id,
            name=command.display,
            adapter="shell",
            params={"argv": command.argv, "display": command.display},
            group=meta.get("group"),
            package_set=meta.get("package_set"),
            package=meta.get("package"),
            installer=meta.get("installer"),
        )
        logger.info("→ %s", command.display)
        receipt = self._adapters.execute_action(
            action,
            working_dir=cwd,
            env=to_env_vars(variables),
            dry_run=self._dry_run,
        )
        receipt.metadata.update({**meta, "command": command.display, "shell": command.shell})
        _log_receipt(receipt)
        return report.add(key, receipt)

    def _link(
        self,
        report: ExecutionReport,
        key: str,
        action_id: str,
        source: Path,
        link: Path,
        action: ActionKind,
        meta: dict[str, str],
    ) -> Receipt:
        if action in _LINKING_ACTIONS:
            params = {"operation": "link", "path": str(link), "source": str(source)}
            name = f"link {link} → {source}"
        elif action == ActionKind.UNINSTALL:
            params = {"operation": "unlink", "path": str(link)}
            name = f"unlink {link}"
        else:
            return report.add(key, Receipt.skip(
                adapter="filesystem",
                action_id=action_id,
                reason=f"Links are left alone on {action}",
                metadata=dict(meta),
            ))

        receipt = self._adapters.execute_action(
            Action(
                id=action_id,
                name=name,
                adapter="filesystem",
                params=params,
                group=meta.get("group"),
                package_set=meta.get("package_set"),
            ),
            dry_run=self._dry_run,
        )
        receipt.metadata.update(meta)
        _log_receipt(receipt)
        return report.add(key, receipt)


def _log_receipt(receipt: Receipt) -> None:
    status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
    if receipt.failed:
        logger.warning("%s %s: %s", status_marker, receipt.action_id, receipt.error)
    else:
        logger.info("%s %s → %s", status_marker, receipt.action_id, receipt.status)


def generate_operation_id() -> str:
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"op-{now}-{uuid.uuid4().hex[:6]}"
