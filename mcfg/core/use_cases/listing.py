"""
List use case — the groups and package sets in the repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mcfg.core.config.environment import Environment
from mcfg.core.config.repository_loader import load_repository
from mcfg.core.errors import McfgError, SelectionError
from mcfg.core.models.package import Group


@dataclass
class ListResult:
    groups: list[Group] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "groups": [
                {
                    "name": g.name,
                    "order": g.order,
                    "path": str(g.path),
                    "package_sets": [
                        {
                            "name": ps.name,
                            "description": ps.description,
                            "optional": ps.optional,
                            "platform": ps.platform.value if ps.platform else None,
                            "scripted": ps.is_script,
                            "packages": [p.name for p in ps.packages],
                        }
                        for ps in g.package_sets
                    ],
                }
                for g in self.groups
            ],
            "warnings": self.warnings,
        }


def list_repository(environment: Environment, group: str | None = None) -> ListResult:
    """All groups, or just the named one."""
    result = ListResult()
    try:
        environment.require_initialized()
        repository, errors = load_repository(environment.repository_path)
        if group:
            found = repository.get_group(group)
            if found is None:
                raise SelectionError(f"No group named '{group}' in the repository")
            result.groups = [found]
        else:
            result.groups = repository.groups
    except McfgError as e:
        result.error = str(e)
        return result

    result.warnings = [str(e) for e in errors]
    return result
