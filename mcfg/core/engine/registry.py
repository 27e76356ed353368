"""
Installer registry — picks the one installer responsible for a package.

Resolution walks the descriptors in declaration order:

    1. drop descriptors restricted to another platform
    2. drop descriptors whose kind differs from the entry's kind
    3. drop descriptors whose ``if_exists`` path is absent
    4. the first survivor wins

No survivor raises ``NoInstallerFound``. The result depends only on
the registry, the entry, the host platform and the filesystem probe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from mcfg.core.errors import NoInstallerFound
from mcfg.core.models.installer import (
    DEFAULT_KIND,
    InstallerDescriptor,
    PackageKind,
    Platform,
    platform_matches,
)
from mcfg.core.models.package import PackageEntry

logger = logging.getLogger(__name__)

PathProbe = Callable[[str], bool]


def path_exists(path: str) -> bool:
    """Filesystem probe; any error reading the path counts as absent."""
    try:
        return Path(path).expanduser().exists()
    except (OSError, ValueError) as e:
        logger.debug("Probe of %s failed: %s", path, e)
        return False


class InstallerRegistry:
    """Ordered installer descriptors plus the resolution rules.

    ``probe`` is injectable so resolution can be tested without
    touching the real filesystem.
    """

    def __init__(
        self,
        descriptors: Iterable[InstallerDescriptor] = (),
        probe: PathProbe = path_exists,
    ):
        self._descriptors: list[InstallerDescriptor] = list(descriptors)
        self._probe = probe
        names = [d.name for d in self._descriptors]
        for name in sorted({n for n in names if names.count(n) > 1}):
            logger.warning("Installer '%s' is declared more than once", name)

    def __iter__(self) -> Iterator[InstallerDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def get(self, name: str) -> InstallerDescriptor | None:
        """Look up by name; a later duplicate shadows earlier ones."""
        for descriptor in reversed(self._descriptors):
            if descriptor.name == name:
                return descriptor
        return None

    def is_present(self, descriptor: InstallerDescriptor) -> bool:
        return descriptor.if_exists is None or self._probe(descriptor.if_exists)

    def resolve(
        self,
        entry: PackageEntry,
        host: Platform | None,
        default_kind: PackageKind = DEFAULT_KIND,
    ) -> InstallerDescriptor:
        """Select the installer for a package entry.

        Raises:
            NoInstallerFound: If no descriptor survives the filters.
        """
        kind = entry.kind or default_kind
        for descriptor in self._descriptors:
            if not platform_matches(descriptor.platform, host):
                continue
            if descriptor.kind != kind:
                continue
            if not self.is_present(descriptor):
                logger.debug(
                    "Installer '%s' skipped: %s not found",
                    descriptor.name,
                    descriptor.if_exists,
                )
                continue
            logger.debug("Package '%s' → installer '%s'", entry.name, descriptor.name)
            return descriptor

        raise NoInstallerFound(
            package=entry.name,
            kind=str(kind),
            platform=host.value if host else None,
        )

    def update_self_candidates(self, host: Platform | None) -> list[InstallerDescriptor]:
        """Installers on this host that know how to update themselves."""
        return [
            d
            for d in self._descriptors
            if d.update_self and platform_matches(d.platform, host) and self.is_present(d)
        ]
