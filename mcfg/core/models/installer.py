"""
Installer models — platforms, package kinds and installer descriptors.

An installer descriptor maps abstract actions (install, update,
uninstall, link-files) for one class of packages onto concrete
command templates for one underlying package manager.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)

# Installer, package-set and package names
NAME_PATTERN = r"^[A-Za-z0-9\-+.@_/]+$"


class Platform(str, Enum):
    """Host platform. ``None`` wherever a platform is optional means "all"."""

    LINUX = "linux"
    MACOS = "macos"

    @classmethod
    def current(cls) -> Platform | None:
        """Platform of the running interpreter, or None if unsupported."""
        if sys.platform.startswith("linux"):
            return cls.LINUX
        if sys.platform == "darwin":
            return cls.MACOS
        return None

    def __str__(self) -> str:
        return self.value


def platform_matches(restriction: Platform | None, host: Platform | None) -> bool:
    """True when an optional platform restriction admits the host."""
    return restriction is None or restriction == host


class ActionKind(str, Enum):
    """The lifecycle actions a package set can perform."""

    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPDATE = "update"
    LINK_FILES = "link-files"

    def __str__(self) -> str:
        return self.value


KindName = Literal["application", "default", "language", "script"]
_KIND_NAMES = ("application", "default", "language", "script")


class PackageKind(BaseModel):
    """The class of package an installer handles.

    Decoded from either a bare string (``default``, ``application``,
    ``language``, ``script``) or an object ``{language: <name>}``.
    Two kinds match only when they are equal: a ``Language("rust")``
    never matches ``Language("python")`` nor the generic ``language``.
    """

    model_config = ConfigDict(frozen=True)

    variant: KindName = "default"
    language: str | None = None

    @model_validator(mode="before")
    @classmethod
    def decode_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            name = value.strip().lower()
            if name not in _KIND_NAMES:
                raise ValueError(
                    f"Unknown package kind '{value}'. Valid: {', '.join(_KIND_NAMES)}"
                )
            return {"variant": name}
        if isinstance(value, dict) and "variant" not in value:
            if set(value) != {"language"} or not value["language"]:
                raise ValueError(
                    f"Expected a kind name or {{language: <name>}}, got {value!r}"
                )
            return {"variant": "language", "language": str(value["language"])}
        return value

    @model_serializer
    def encode_kind(self) -> str | dict[str, str]:
        if self.variant == "language" and self.language:
            return {"language": self.language}
        return self.variant

    @classmethod
    def of(cls, name: str) -> PackageKind:
        return cls.model_validate(name)

    @classmethod
    def for_language(cls, language: str) -> PackageKind:
        return cls(variant="language", language=language)

    def __str__(self) -> str:
        if self.variant == "language" and self.language:
            return f"language:{self.language}"
        return self.variant


DEFAULT_KIND = PackageKind(variant="default")


class InstallerCommands(BaseModel):
    """Command templates keyed by action."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    install: str | None = None
    uninstall: str | None = None
    update: str | None = None
    link_files: str | None = Field(default=None, alias="link-files")

    def for_action(self, action: ActionKind) -> str | None:
        """The template for an action, or None if the installer lacks one."""
        return {
            ActionKind.INSTALL: self.install,
            ActionKind.UNINSTALL: self.uninstall,
            ActionKind.UPDATE: self.update,
            ActionKind.LINK_FILES: self.link_files,
        }[action]

    @property
    def supported(self) -> list[str]:
        return [a.value for a in ActionKind if self.for_action(a)]


class InstallerDescriptor(BaseModel):
    """One installable tool, as declared in ``installers.yml``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(pattern=NAME_PATTERN)
    platform: Platform | None = None
    kind: PackageKind
    if_exists: str | None = None
    commands: InstallerCommands = Field(default_factory=InstallerCommands)
    update_self: str | None = Field(default=None, alias="update-self")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Both spellings appear in the wild
        if "if_exist" in data:
            if "if_exists" in data:
                raise ValueError("Use only one of 'if_exists' / 'if_exist'")
            data["if_exists"] = data.pop("if_exist")
        commands = data.get("commands")
        if isinstance(commands, dict) and "update-self" in commands:
            commands = dict(commands)
            nested = commands.pop("update-self")
            data.setdefault("update-self", nested)
            data["commands"] = commands
        return data

    @field_validator("if_exists")
    @classmethod
    def check_probe(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("if_exists must be a non-empty path")
        return value

    def command_for(self, action: ActionKind) -> str | None:
        return self.commands.for_action(action)

    def summary(self) -> dict[str, Any]:
        """Compact JSON-friendly view for listings."""
        return {
            "name": self.name,
            "platform": self.platform.value if self.platform else None,
            "kind": str(self.kind),
            "if_exists": self.if_exists,
            "actions": self.commands.supported,
            "update_self": self.update_self is not None,
        }
