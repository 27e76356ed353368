"""
CLI commands for editing the package repository.

Thin wrappers over ``mcfg.core.use_cases.manage``; editing opens
$VISUAL / $EDITOR through click.
"""

from __future__ import annotations

import sys

import click

from mcfg.core.config.repository_loader import load_package_set
from mcfg.core.errors import ConfigParseError


def _edit_and_check(path) -> None:
    click.edit(filename=str(path))
    try:
        package_set = load_package_set(path)
    except ConfigParseError as e:
        click.secho(f"⚠️  {e}", fg="yellow")
        return
    click.secho(f"✅ {package_set.name} → {path}", fg="green")


@click.command()
@click.argument("group")
@click.argument("package_set")
@click.option("--as-file", is_flag=True, help="Create <group>/<set>.yml instead of a directory.")
@click.option("--no-edit", is_flag=True, help="Create the file without opening an editor.")
@click.pass_context
def add(ctx: click.Context, group: str, package_set: str, as_file: bool, no_edit: bool) -> None:
    """Add a new package set to GROUP and open it in the editor."""
    from mcfg.core.use_cases.manage import add_package_set

    result = add_package_set(ctx.obj["environment"], group, package_set, as_file=as_file)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.path is not None
    if no_edit:
        click.secho(f"✅ Created {result.path}", fg="green")
        return
    _edit_and_check(result.path)


@click.command()
@click.argument("group")
@click.argument("package_set")
@click.pass_context
def edit(ctx: click.Context, group: str, package_set: str) -> None:
    """Open an existing package set in the editor."""
    from mcfg.core.use_cases.manage import locate_package_set

    result = locate_package_set(ctx.obj["environment"], group, package_set)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.path is not None
    _edit_and_check(result.path)


@click.command()
@click.argument("group")
@click.argument("package_set")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def remove(ctx: click.Context, group: str, package_set: str, yes: bool) -> None:
    """Remove a package set from the repository."""
    from mcfg.core.use_cases.manage import locate_package_set, remove_package_set

    environment = ctx.obj["environment"]
    if not yes:
        found = locate_package_set(environment, group, package_set)
        if found.error:
            click.secho(f"❌ {found.error}", fg="red")
            sys.exit(1)
        click.confirm(f"Remove {found.path}?", abort=True)

    result = remove_package_set(environment, group, package_set)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"🗑️  Removed {result.path}", fg="green")
