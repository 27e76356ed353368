"""
Installer registry loader — reads installers.yml into descriptors.

The registry file is an ordered YAML list; declaration order is part
of its meaning (first surviving descriptor wins during resolution).
A malformed registry is fatal: nothing runs without one.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from mcfg.core.errors import ConfigParseError
from mcfg.core.models.installer import InstallerDescriptor

logger = logging.getLogger(__name__)


def parse_installers(raw: str, source: str | None = None) -> list[InstallerDescriptor]:
    """Parse registry YAML text.

    Raises:
        ConfigParseError: If the text is not a list of valid descriptors.
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML: {e}", path=source) from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigParseError(
            f"Expected a YAML list of installers, got {type(data).__name__}",
            path=source,
        )

    descriptors: list[InstallerDescriptor] = []
    for index, item in enumerate(data):
        try:
            descriptors.append(InstallerDescriptor.model_validate(item))
        except ValidationError as e:
            raise ConfigParseError(f"Invalid installer #{index + 1}: {e}", path=source) from e
    return descriptors


def load_installers(path: Path) -> list[InstallerDescriptor]:
    """Load the installer registry file.

    Raises:
        ConfigParseError: If the file is missing, unreadable or invalid.
    """
    if not path.is_file():
        raise ConfigParseError("Installer registry not found; run 'mcfg init'", path=str(path))

    logger.debug("Loading installer registry from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(f"Cannot read: {e}", path=str(path)) from e

    descriptors = parse_installers(raw, source=str(path))
    logger.info("Loaded %d installers from %s", len(descriptors), path)
    return descriptors
