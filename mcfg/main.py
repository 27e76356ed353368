"""
mcfg — CLI entrypoint.

Usage:
    mcfg --help
    mcfg init --repository-url https://example.com/me/machine.git
    mcfg install --group productivity
    mcfg history --limit 10
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
import yaml

from mcfg import __version__
from mcfg.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="mcfg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    envvar="MCFG_CONFIG_DIR",
    default=None,
    help="Directory holding installers.yml (default: platform config dir).",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    envvar="MCFG_DATA_DIR",
    default=None,
    help="Directory holding the package repository (default: platform data dir).",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    envvar="MCFG_LOG_DIR",
    default=None,
    help="Directory holding the install log (default: platform log dir).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_dir: str | None,
    data_dir: str | None,
    log_dir: str | None,
) -> None:
    """mcfg — configure this machine from a package repository."""
    from mcfg.core.config.environment import Environment

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ.get("MCFG_LOG_LEVEL")),
        log_file=os.environ.get("MCFG_LOG_FILE"),
        log_file_level=os.environ.get("MCFG_LOG_FILE_LEVEL"),
    )

    ctx.obj["environment"] = Environment.with_roots(
        config_dir=config_dir, log_dir=log_dir, data_dir=data_dir
    )


@cli.command()
@click.option(
    "--local-dir",
    "-l",
    type=click.Path(file_okay=False),
    default=None,
    help="Keep the repository here and link it into place.",
)
@click.option("--repository-url", "-r", default=None, help="Clone this git remote.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def init(
    ctx: click.Context,
    local_dir: str | None,
    repository_url: str | None,
    as_json: bool,
) -> None:
    """Create the config directory, repository and install log."""
    from mcfg.core.use_cases.init import init_environment

    result = init_environment(
        ctx.obj["environment"],
        local_dir=Path(local_dir) if local_dir else None,
        repository_url=repository_url,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    for receipt in result.receipts:
        marker = "✅" if receipt.ok else "⊘ " if receipt.skipped else "❌"
        click.echo(f"   {marker} {receipt.action_id}: {receipt.error or receipt.output}")

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho("✅ mcfg initialized", fg="green", bold=True)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def refresh(ctx: click.Context, as_json: bool) -> None:
    """Pull the latest package repository."""
    from mcfg.core.use_cases.refresh import refresh_repository

    result = refresh_repository(ctx.obj["environment"])

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.receipt is not None
    click.secho("✅ Repository refreshed", fg="green")
    if result.receipt.output and not ctx.obj.get("quiet"):
        click.echo(f"   {result.receipt.output}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def paths(ctx: click.Context, as_json: bool) -> None:
    """Show where mcfg keeps its files."""
    environment = ctx.obj["environment"]

    if as_json:
        click.echo(json.dumps(environment.to_dict(), indent=2))
        return

    for label, value in environment.to_dict().items():
        exists = Path(value).exists()
        marker = "✓" if exists else "✗"
        click.echo(f"   {marker} {label:<12} {value}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config(ctx: click.Context, as_json: bool) -> None:
    """Show resolved paths and the installer registry."""
    from mcfg.core.use_cases.config_show import show_config

    result = show_config(ctx.obj["environment"])

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    combined = {
        "paths": result.to_dict()["paths"],
        "platform": result.host.value if result.host else None,
        "installers": result.registry_dump(),
    }
    click.echo(yaml.safe_dump(combined, sort_keys=False), nl=False)
    if not ctx.obj.get("quiet"):
        click.secho(f"\n# usable here: {', '.join(result.usable) or 'none'}", fg="cyan")


@cli.command()
@click.option("--limit", "-l", type=click.IntRange(min=0), default=None, help="Rows to show (default: all).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int | None, as_json: bool) -> None:
    """Show the install log, most recent first."""
    from mcfg.core.use_cases.history import get_history

    result = get_history(ctx.obj["environment"], limit=limit)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not result.entries:
        click.secho("No installs recorded yet", fg="yellow")
        return

    header = f"{'Date':<20} {'Group':<16} {'Set':<16} {'Package':<20} Installer"
    click.secho(header, bold=True)
    for entry in result.entries:
        when = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        click.echo(
            f"{when:<20} {entry.group:<16} {entry.package_set:<16} "
            f"{entry.package:<20} {entry.installer}"
        )


@cli.command("list")
@click.option("--group", "-g", default=None, help="Only this group.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, group: str | None, as_json: bool) -> None:
    """List groups and package sets in the repository."""
    from mcfg.core.use_cases.listing import list_repository

    result = list_repository(ctx.obj["environment"], group=group)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not any(g.package_sets for g in result.groups):
        click.secho("No package sets found in repository", fg="yellow")

    for g in result.groups:
        click.secho(f"📦 {g.name}", fg="cyan", bold=True)
        for ps in g.package_sets:
            label = f"{ps.name}: {ps.description}" if ps.description else ps.name
            tags = []
            if ps.optional:
                tags.append("optional")
            if ps.platform:
                tags.append(ps.platform.value)
            suffix = f" ({', '.join(tags)})" if tags else ""
            click.echo(f"   • {label}{suffix}")

    for warning in result.warnings:
        click.secho(f"⚠️  {warning}", fg="yellow")


@cli.command()
@click.pass_context
def installers(ctx: click.Context) -> None:
    """Edit the installer registry in $VISUAL / $EDITOR."""
    from mcfg.core.config.loader import load_installers
    from mcfg.core.errors import McfgError

    environment = ctx.obj["environment"]
    try:
        environment.require_initialized()
    except McfgError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    click.edit(filename=str(environment.installer_file_path))

    try:
        loaded = load_installers(environment.installer_file_path)
    except McfgError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    click.secho(f"✅ {len(loaded)} installers", fg="green")


# ── Register sub-command modules ─────────────────────────────────

from mcfg.ui.cli.packages import install, link_files, uninstall, update, update_self  # noqa: E402
from mcfg.ui.cli.repository import add, edit, remove  # noqa: E402

cli.add_command(install)
cli.add_command(update)
cli.add_command(uninstall)
cli.add_command(link_files)
cli.add_command(update_self)
cli.add_command(add)
cli.add_command(edit)
cli.add_command(remove)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
