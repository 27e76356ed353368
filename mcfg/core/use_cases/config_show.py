"""
Config use case — the resolved paths and the loaded installer registry.

Also reports, per installer, whether it is usable on this host, so
``mcfg config`` doubles as a "which installer would win" check, and
whether the tools mcfg shells out to (sh, git) are on the PATH.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mcfg.adapters import default_registry
from mcfg.core.config.environment import Environment
from mcfg.core.config.loader import load_installers
from mcfg.core.engine.registry import InstallerRegistry
from mcfg.core.errors import McfgError
from mcfg.core.models.installer import InstallerDescriptor, Platform, platform_matches


@dataclass
class ConfigResult:
    environment: Environment | None = None
    host: Platform | None = None
    installers: list[InstallerDescriptor] = field(default_factory=list)
    usable: list[str] = field(default_factory=list)
    adapters: dict[str, dict] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.environment:
            result["paths"] = self.environment.to_dict()
        result["platform"] = self.host.value if self.host else None
        if self.adapters:
            result["adapters"] = self.adapters
        if self.error:
            result["error"] = self.error
            return result
        result["installers"] = [
            {**d.summary(), "usable": d.name in self.usable} for d in self.installers
        ]
        return result

    def registry_dump(self) -> list[dict]:
        """The installers in their file form."""
        return [
            d.model_dump(mode="json", by_alias=True, exclude_none=True)
            for d in self.installers
        ]


def show_config(environment: Environment, host: Platform | None = None) -> ConfigResult:
    host = host if host is not None else Platform.current()
    result = ConfigResult(environment=environment, host=host)
    result.adapters = default_registry().adapter_status()
    try:
        environment.require_initialized()
        descriptors = load_installers(environment.installer_file_path)
    except McfgError as e:
        result.error = str(e)
        return result

    registry = InstallerRegistry(descriptors)
    result.installers = descriptors
    result.usable = [
        d.name for d in registry if platform_matches(d.platform, host) and registry.is_present(d)
    ]
    return result
