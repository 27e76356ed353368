"""
CLI commands for package-set actions.

Thin wrappers over ``mcfg.core.use_cases.run``: install, update,
uninstall, link-files and update-self.
"""

from __future__ import annotations

import json
import sys

import click

from mcfg.core.engine.executor import RunPolicy
from mcfg.core.models.installer import ActionKind, PackageKind


def _parse_kind(value: str) -> PackageKind:
    """``default``, ``application``, ``script`` or ``language:<name>``."""
    if value.startswith("language:"):
        return PackageKind.for_language(value.split(":", 1)[1])
    try:
        return PackageKind.of(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _selection_options(func):
    func = click.option(
        "--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."
    )(func)
    func = click.option(
        "--default-kind",
        default="default",
        show_default=True,
        help="Kind for packages that declare none (or language:<name>).",
    )(func)
    func = click.option(
        "--stop-on-error", is_flag=True, help="Abandon a package set after its first failure."
    )(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Show the commands without running them."
    )(func)
    func = click.option(
        "--package-set", "-p", default=None, help="Only this package set (needs --group)."
    )(func)
    func = click.option("--group", "-g", default=None, help="Only this group.")(func)
    return func


def _run(
    ctx: click.Context,
    action: ActionKind,
    group: str | None,
    package_set: str | None,
    dry_run: bool,
    stop_on_error: bool,
    default_kind: str,
    as_json: bool,
) -> None:
    from mcfg.core.use_cases.run import run_action

    if package_set and not group:
        raise click.UsageError("--package-set requires --group")

    policy = RunPolicy(default_kind=_parse_kind(default_kind), stop_on_error=stop_on_error)
    result = run_action(
        ctx.obj["environment"],
        action,
        group=group,
        package_set=package_set,
        policy=policy,
        dry_run=dry_run,
    )
    _report(ctx, result, as_json)


def _report(ctx: click.Context, result, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    for warning in result.warnings:
        click.secho(f"⚠️  {warning}", fg="yellow")

    report = result.report
    assert report is not None
    quiet = ctx.obj.get("quiet", False)

    if not report.receipts:
        click.secho("Nothing to do", fg="yellow")
        return

    if not quiet:
        for key, receipts in report.set_receipts.items():
            click.secho(f"📦 {key}", fg="cyan", bold=True)
            for r in receipts:
                if r.ok:
                    click.echo(f"   ✅ {r.metadata.get('command') or r.output or r.action_id}")
                elif r.failed:
                    click.secho(f"   ❌ {r.action_id}: {r.error}", fg="red")
                else:
                    click.echo(f"   ⊘  {r.output or r.action_id}")

    color = {"ok": "green", "partial": "yellow", "failed": "red"}[report.status]
    prefix = "[dry-run] " if report.dry_run else ""
    click.secho(
        f"{prefix}{report.action}: {report.succeeded} ok, {report.failed} failed, "
        f"{report.skipped} skipped",
        fg=color,
        bold=True,
    )
    if not report.all_ok:
        sys.exit(1)


@click.command()
@_selection_options
@click.pass_context
def install(ctx: click.Context, **options) -> None:
    """Install the selected package sets."""
    _run(ctx, ActionKind.INSTALL, **options)


@click.command()
@_selection_options
@click.pass_context
def update(ctx: click.Context, **options) -> None:
    """Update the selected package sets."""
    _run(ctx, ActionKind.UPDATE, **options)


@click.command()
@_selection_options
@click.pass_context
def uninstall(ctx: click.Context, **options) -> None:
    """Uninstall the selected package sets."""
    _run(ctx, ActionKind.UNINSTALL, **options)


@click.command("link-files")
@_selection_options
@click.pass_context
def link_files(ctx: click.Context, **options) -> None:
    """(Re)create the links declared by the selected package sets."""
    _run(ctx, ActionKind.LINK_FILES, **options)


@click.command("update-self")
@click.option("--dry-run", is_flag=True, help="Show the commands without running them.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def update_self(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Update the installers themselves (brew update, ...)."""
    from mcfg.core.use_cases.run import run_update_self

    result = run_update_self(ctx.obj["environment"], dry_run=dry_run)
    _report(ctx, result, as_json)
