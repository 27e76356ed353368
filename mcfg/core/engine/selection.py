"""
Package-set selection — which sets an action runs against.

    no filter           every non-optional set in every group
    --group G           every non-optional set in G
    --group G --set S   exactly S in G, optional or not
    --set S alone       usage error

Sets restricted to another platform are dropped silently.
"""

from __future__ import annotations

import logging

from mcfg.core.errors import SelectionError
from mcfg.core.models.installer import Platform, platform_matches
from mcfg.core.models.package import Group, PackageRepository, PackageSet

logger = logging.getLogger(__name__)

Selection = list[tuple[Group, PackageSet]]


def select_package_sets(
    repository: PackageRepository,
    host: Platform | None,
    group: str | None = None,
    package_set: str | None = None,
) -> Selection:
    """Resolve CLI filters to an ordered list of (group, package set).

    Raises:
        SelectionError: If the filters are malformed or name nothing.
    """
    if package_set and not group:
        raise SelectionError("A package set can only be selected together with its group")

    if group:
        found = repository.get_group(group)
        if found is None:
            raise SelectionError(f"No group named '{group}' in the repository")
        groups = [found]
    else:
        groups = repository.groups

    selected: Selection = []
    for g in groups:
        if package_set:
            ps = g.get_package_set(package_set)
            if ps is None:
                raise SelectionError(f"No package set named '{package_set}' in group '{g.name}'")
            candidates = [ps]
        else:
            candidates = [ps for ps in g.package_sets if not ps.optional]

        for ps in candidates:
            if not platform_matches(ps.platform, host):
                logger.info(
                    "Skipping package set '%s': platform %s only", ps.name, ps.platform
                )
                continue
            selected.append((g, ps))

    logger.debug("Selected %d package sets", len(selected))
    return selected
