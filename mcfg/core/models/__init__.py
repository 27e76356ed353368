"""
Domain models — Pydantic types for mcfg.

All models are re-exported here for convenient access:

    from mcfg.core.models import InstallerDescriptor, PackageSet, Receipt
"""

from mcfg.core.models.action import Action, Receipt
from mcfg.core.models.installer import (
    DEFAULT_KIND,
    ActionKind,
    InstallerCommands,
    InstallerDescriptor,
    PackageKind,
    Platform,
    platform_matches,
)
from mcfg.core.models.package import (
    Group,
    PackageActions,
    PackageEntry,
    PackageRepository,
    PackageSet,
    ScriptActions,
)

__all__ = [
    "DEFAULT_KIND",
    # action.py
    "Action",
    "ActionKind",
    # package.py
    "Group",
    # installer.py
    "InstallerCommands",
    "InstallerDescriptor",
    "PackageActions",
    "PackageEntry",
    "PackageKind",
    "PackageRepository",
    "PackageSet",
    "Platform",
    "Receipt",
    "ScriptActions",
    "platform_matches",
]
