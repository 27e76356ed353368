"""
Error hierarchy — every failure mcfg reports deliberately.

Loaders and the engine raise these; use cases catch them and turn
them into ``error`` fields on their result objects. Adapters never
raise at all: they return failed receipts instead.
"""

from __future__ import annotations


class McfgError(Exception):
    """Base class for all mcfg errors."""


class ConfigParseError(McfgError):
    """An installer registry or package-set file is malformed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class NotInitializedError(McfgError):
    """The local environment has not been set up with ``mcfg init``."""


class SelectionError(McfgError):
    """A group / package-set filter names nothing, or is malformed."""


class NoInstallerFound(McfgError):
    """No installer descriptor survives the resolution filters."""

    def __init__(self, package: str, kind: str, platform: str | None):
        super().__init__(
            f"No installer found for package '{package}' "
            f"(kind={kind}, platform={platform or 'unknown'})"
        )
        self.package = package
        self.kind = kind
        self.platform = platform


class TemplateError(McfgError):
    """A script template could not be turned into a runnable command."""


class UnknownVariable(TemplateError):
    """A ``{{name}}`` reference has no value in the variable context."""

    def __init__(self, name: str):
        super().__init__(f"Unknown variable '{{{{{name}}}}}' in script template")
        self.name = name


class ExecutionError(McfgError):
    """A command exited with a non-zero status."""

    def __init__(self, command: str, return_code: int | None, message: str = ""):
        detail = f" ({message})" if message else ""
        super().__init__(f"Command '{command}' exited with {return_code}{detail}")
        self.command = command
        self.return_code = return_code
