"""
Repository loader — walks the package repository into groups.

Expected structure::

    repository/
        .git/                     # ignored, as is every hidden dir
        10-productivity/          # group "productivity", order 10
            tools.yml             # package set
            editors/
                package-set.yml   # package set with its own files
        languages/                # group "languages", unordered

Package-set files are re-read on every invocation. A set that fails
to parse is reported and skipped; the rest of the repository loads.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from mcfg.core.errors import ConfigParseError
from mcfg.core.models.package import Group, PackageRepository, PackageSet

logger = logging.getLogger(__name__)

PACKAGE_SET_FILE = "package-set.yml"
_SET_SUFFIXES = (".yml", ".yaml")


def load_package_set(path: Path) -> PackageSet:
    """Load one package-set file.

    Raises:
        ConfigParseError: If the file is not valid YAML or not a valid set.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigParseError(f"Cannot read: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Expected a YAML mapping, got {type(data).__name__}", path=str(path)
        )

    try:
        package_set = PackageSet.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid package set: {e}", path=str(path)) from e

    package_set.path = path
    logger.debug("Loaded package set '%s' from %s", package_set.name, path)
    return package_set


def _package_set_files(group_dir: Path) -> list[Path]:
    files: list[Path] = []
    for child in sorted(group_dir.iterdir()):
        if child.name.startswith("."):
            continue
        if child.is_file() and child.suffix in _SET_SUFFIXES:
            files.append(child)
        elif child.is_dir() and (child / PACKAGE_SET_FILE).is_file():
            files.append(child / PACKAGE_SET_FILE)
    return files


def load_group(group_dir: Path) -> tuple[Group, list[ConfigParseError]]:
    """Load every package set in a group directory.

    Returns:
        (group, errors) where errors are the sets that failed to parse.
    """
    package_sets: list[PackageSet] = []
    errors: list[ConfigParseError] = []

    for path in _package_set_files(group_dir):
        try:
            package_sets.append(load_package_set(path))
        except ConfigParseError as e:
            logger.warning("Skipping package set: %s", e)
            errors.append(e)

    package_sets.sort(key=lambda ps: ps.name)
    return Group(dir_name=group_dir.name, path=group_dir, package_sets=package_sets), errors


def load_repository(
    path: Path,
) -> tuple[PackageRepository, list[ConfigParseError]]:
    """Discover all groups and package sets under the repository root.

    Groups are ordered by numeric prefix (unprefixed last), then name.
    """
    if not path.is_dir():
        raise ConfigParseError("Repository directory not found; run 'mcfg init'", path=str(path))

    groups: list[Group] = []
    errors: list[ConfigParseError] = []

    for child in sorted(path.iterdir()):
        if not child.is_dir() or child.name.startswith("."):
            continue
        group, group_errors = load_group(child)
        groups.append(group)
        errors.extend(group_errors)

    groups.sort(key=lambda g: g.sort_key)
    repository = PackageRepository(path=path, groups=groups)
    logger.info(
        "Discovered %d groups, %d package sets in %s",
        len(groups),
        repository.package_set_count,
        path,
    )
    return repository, errors
