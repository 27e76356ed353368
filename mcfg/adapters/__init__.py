"""Adapters — bindings for processes, the filesystem and git.

Public re-exports for convenient access.
"""

from mcfg.adapters.base import Adapter, ExecutionContext
from mcfg.adapters.mock import MockAdapter
from mcfg.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]


def default_registry() -> AdapterRegistry:
    """A registry with every real adapter registered."""
    from mcfg.adapters.shell.command import ShellCommandAdapter
    from mcfg.adapters.shell.filesystem import FilesystemAdapter
    from mcfg.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    registry.register(GitAdapter())
    return registry
