"""
Static data shipped with mcfg.

``default_installers.yml`` is the installer registry written to
``<config>/installers.yml`` by ``mcfg init``. It is read-only package
data: the user edits their own copy, never this one.

Usage::

    from mcfg.core.data import default_installers_text, default_installers

    text = default_installers_text()        # str, as shipped
    descriptors = default_installers()      # tuple[InstallerDescriptor, ...]
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from mcfg.core.models.installer import InstallerDescriptor

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent

DEFAULT_INSTALLERS_FILE = "default_installers.yml"


@lru_cache(maxsize=1)
def default_installers_text() -> str:
    return (_DATA_DIR / DEFAULT_INSTALLERS_FILE).read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def default_installers() -> tuple[InstallerDescriptor, ...]:
    """The shipped installer descriptors, in declaration order."""
    data = yaml.safe_load(default_installers_text())
    result = tuple(InstallerDescriptor.model_validate(item) for item in data)
    logger.debug("Loaded %d default installers", len(result))
    return result
