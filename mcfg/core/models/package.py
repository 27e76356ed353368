"""
Package models — entries, package sets, groups and the repository.

A package set is the unit of management: a named bundle of packages
(delegated to installers) or of raw scripts, with shared lifecycle
actions. Package sets live in group directories of the repository.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mcfg.core.models.installer import (
    NAME_PATTERN,
    ActionKind,
    PackageKind,
    Platform,
)

# Group directories may carry an ordering prefix, e.g. "10-productivity"
_GROUP_PREFIX = re.compile(r"^(\d+)-(.+)$")

# Groups without a numeric prefix sort after all prefixed ones
UNORDERED = 1_000_000


def _env_value(key: Any, value: Any) -> str:
    """env-vars values as scripts see them; YAML null is empty, booleans stay lower case."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"env-vars '{key}' must be a plain value, got {type(value).__name__}")


class PackageEntry(BaseModel):
    """One requested package inside a package set."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(pattern=NAME_PATTERN)
    platform: Platform | None = None
    kind: PackageKind | None = None   # None = the run's default kind


class PackageActions(BaseModel):
    """``actions`` variant: a list of packages resolved through installers."""

    packages: list[PackageEntry] = Field(default_factory=list)


class ScriptActions(BaseModel):
    """``actions`` variant: script templates keyed by action."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    install: str | None = None
    uninstall: str | None = None
    update: str | None = None
    link_files: str | None = Field(default=None, alias="link-files")

    def for_action(self, action: ActionKind) -> str | None:
        return {
            ActionKind.INSTALL: self.install,
            ActionKind.UNINSTALL: self.uninstall,
            ActionKind.UPDATE: self.update,
            ActionKind.LINK_FILES: self.link_files,
        }[action]


class PackageSet(BaseModel):
    """A named bundle of packages or scripts, read from one YAML file.

    ``actions`` is either a list of package entries or a map of
    scripts. The legacy top-level ``packages`` list is accepted as
    the package variant.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(pattern=NAME_PATTERN)
    description: str | None = None
    platform: Platform | None = None
    optional: bool = False
    env_vars: dict[str, str] = Field(default_factory=dict, alias="env-vars")
    run_before: str | None = Field(default=None, alias="run-before")
    run_after: str | None = Field(default=None, alias="run-after")
    link_files: dict[str, str] = Field(default_factory=dict, alias="link-files")
    env_file: str | None = Field(default=None, alias="env-file")
    actions: PackageActions | ScriptActions = Field(default_factory=PackageActions)

    # Set by the loader, never part of the file
    path: Path | None = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def decode_actions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        legacy = data.pop("packages", None)
        if legacy is not None:
            if "actions" in data:
                raise ValueError("Use only one of 'actions' / 'packages'")
            data["actions"] = legacy

        actions = data.get("actions")
        if actions is None:
            data.pop("actions", None)
        elif isinstance(actions, list):
            data["actions"] = PackageActions(
                packages=[PackageEntry.model_validate(p) for p in actions]
            )
        elif isinstance(actions, dict):
            data["actions"] = ScriptActions.model_validate(actions)
        elif not isinstance(actions, (PackageActions, ScriptActions)):
            raise ValueError(
                "'actions' must be a list of packages or a map of scripts, "
                f"got {type(actions).__name__}"
            )
        # Normalize so the file form and python keyword form both work
        for key in ("env_vars", "env-vars"):
            if isinstance(data.get(key), dict):
                data[key] = {str(k): _env_value(k, v) for k, v in data[key].items()}
        return data

    @property
    def is_script(self) -> bool:
        return isinstance(self.actions, ScriptActions)

    @property
    def packages(self) -> list[PackageEntry]:
        if isinstance(self.actions, PackageActions):
            return self.actions.packages
        return []

    @property
    def directory(self) -> Path | None:
        return self.path.parent if self.path else None

    @property
    def file_name(self) -> str:
        return self.path.name if self.path else ""


def split_group_dir(dir_name: str) -> tuple[int | None, str]:
    """Split ``"10-productivity"`` into ``(10, "productivity")``."""
    match = _GROUP_PREFIX.match(dir_name)
    if match:
        return int(match.group(1)), match.group(2)
    return None, dir_name


class Group(BaseModel):
    """A repository directory holding related package sets."""

    dir_name: str
    path: Path
    package_sets: list[PackageSet] = Field(default_factory=list)

    @property
    def order(self) -> int | None:
        return split_group_dir(self.dir_name)[0]

    @property
    def name(self) -> str:
        return split_group_dir(self.dir_name)[1]

    @property
    def sort_key(self) -> tuple[int, str]:
        order = self.order
        return (UNORDERED if order is None else order, self.name)

    def matches(self, name: str) -> bool:
        """Match a CLI filter against the display or directory name."""
        return name in (self.name, self.dir_name)

    def get_package_set(self, name: str) -> PackageSet | None:
        for package_set in self.package_sets:
            if package_set.name == name:
                return package_set
        return None


class PackageRepository(BaseModel):
    """The local package repository: ordered groups of package sets."""

    path: Path
    groups: list[Group] = Field(default_factory=list)

    def get_group(self, name: str) -> Group | None:
        for group in self.groups:
            if group.matches(name):
                return group
        return None

    @property
    def package_set_count(self) -> int:
        return sum(len(g.package_sets) for g in self.groups)
