"""
Manage use case — add, locate and remove package-set files.

A package set lives either directly in its group directory
(``<group>/<set>.yml``) or in its own directory
(``<group>/<set>/package-set.yml``) next to the files it links.
Opening the editor is left to the CLI.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from mcfg.core.config.environment import Environment
from mcfg.core.config.repository_loader import PACKAGE_SET_FILE
from mcfg.core.errors import McfgError, SelectionError
from mcfg.core.models.package import split_group_dir

logger = logging.getLogger(__name__)

EMPTY_PACKAGE_SET = """\
---
name: {name}
description: my new {name} package set.
actions:
  - name: {name}
"""


@dataclass
class ManageResult:
    path: Path | None = None
    created: bool = False
    removed: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "path": str(self.path) if self.path else None,
            "created": self.created,
            "removed": self.removed,
        }


def _group_dir(environment: Environment, group: str) -> Path:
    """An existing group directory matching ``group``, else a new one."""
    repo = environment.repository_path
    if repo.is_dir():
        for child in sorted(repo.iterdir()):
            if child.is_dir() and group in (child.name, split_group_dir(child.name)[1]):
                return child
    return repo / group


def candidate_paths(environment: Environment, group: str, package_set: str) -> tuple[Path, Path]:
    """(file form, directory form) locations for a package set."""
    group_dir = _group_dir(environment, group)
    return group_dir / f"{package_set}.yml", group_dir / package_set / PACKAGE_SET_FILE


def add_package_set(
    environment: Environment,
    group: str,
    package_set: str,
    as_file: bool = False,
) -> ManageResult:
    """Create a package set from the starter template."""
    result = ManageResult()
    try:
        environment.require_initialized()
    except McfgError as e:
        result.error = str(e)
        return result

    file_path, dir_path = candidate_paths(environment, group, package_set)
    if file_path.exists() or dir_path.exists():
        result.error = f"A package set already exists at {file_path} or {dir_path}"
        return result

    path = file_path if as_file else dir_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(EMPTY_PACKAGE_SET.format(name=package_set), encoding="utf-8")
    logger.info("Created package set %s", path)
    result.path = path
    result.created = True
    return result


def locate_package_set(environment: Environment, group: str, package_set: str) -> ManageResult:
    """Find the one file backing a package set."""
    result = ManageResult()
    try:
        environment.require_initialized()
        file_path, dir_path = candidate_paths(environment, group, package_set)
        if file_path.exists() and dir_path.exists():
            raise SelectionError(
                f"Both {file_path} and {dir_path} exist; remove one of them first"
            )
        if not file_path.exists() and not dir_path.exists():
            raise SelectionError(f"No package set '{package_set}' in group '{group}'")
    except McfgError as e:
        result.error = str(e)
        return result

    result.path = file_path if file_path.exists() else dir_path
    return result


def remove_package_set(environment: Environment, group: str, package_set: str) -> ManageResult:
    """Delete a package set; the directory form goes with its files."""
    result = locate_package_set(environment, group, package_set)
    if result.error or result.path is None:
        return result

    _, dir_path = candidate_paths(environment, group, package_set)
    if result.path == dir_path:
        shutil.rmtree(dir_path.parent)
    else:
        result.path.unlink()
    logger.info("Removed package set %s", result.path)
    result.removed = True
    return result
