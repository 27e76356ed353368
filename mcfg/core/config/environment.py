"""
Local environment — where mcfg keeps its config, log and repository.

Defaults follow the platform's per-user directory conventions:

    Linux:  $XDG_CONFIG_HOME/mcfg, $XDG_STATE_HOME/mcfg/log, $XDG_DATA_HOME/mcfg
    macOS:  ~/Library/Application Support/mcfg, ~/Library/Logs/mcfg

Each root can be overridden (``--config-dir`` / ``MCFG_CONFIG_DIR`` etc).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel

from mcfg.core.errors import NotInitializedError
from mcfg.core.models.installer import Platform

logger = logging.getLogger(__name__)

APP_NAME = "mcfg"

INSTALLER_CONFIG_FILE = "installers.yml"
INSTALL_LOG_FILE = "install-log.sql"
REPOSITORY_DIR = "repository"

# Inside the repository, never treated as groups
REPO_CONFIG_DIR = ".config"
REPO_LOCAL_DIR = ".local"


# ── Platform user directories ───────────────────────────────────


def _xdg(var: str, fallback: str) -> Path:
    value = os.environ.get(var)
    if value and Path(value).is_absolute():
        return Path(value)
    return Path.home() / fallback


def user_config_dir(app: str) -> Path:
    if Platform.current() == Platform.MACOS:
        return Path.home() / "Library" / "Application Support" / app
    return _xdg("XDG_CONFIG_HOME", ".config") / app


def user_data_dir(app: str) -> Path:
    if Platform.current() == Platform.MACOS:
        return Path.home() / "Library" / "Application Support" / app
    return _xdg("XDG_DATA_HOME", ".local/share") / app


def user_log_dir(app: str) -> Path:
    if Platform.current() == Platform.MACOS:
        return Path.home() / "Library" / "Logs" / app
    return _xdg("XDG_STATE_HOME", ".local/state") / app / "log"


def user_download_dir() -> Path | None:
    """The user's download directory, if one exists."""
    value = os.environ.get("XDG_DOWNLOAD_DIR")
    candidate = Path(value) if value else Path.home() / "Downloads"
    return candidate if candidate.is_dir() else None


# ── Environment ─────────────────────────────────────────────────


class Environment(BaseModel):
    """Resolved locations of everything mcfg reads and writes."""

    config_dir: Path
    log_dir: Path
    data_dir: Path

    @classmethod
    def with_roots(
        cls,
        config_dir: Path | str | None = None,
        log_dir: Path | str | None = None,
        data_dir: Path | str | None = None,
    ) -> Environment:
        """Build an environment, falling back to platform defaults per root."""
        env = cls(
            config_dir=Path(config_dir).resolve() if config_dir else user_config_dir(APP_NAME),
            log_dir=Path(log_dir).resolve() if log_dir else user_log_dir(APP_NAME),
            data_dir=Path(data_dir).resolve() if data_dir else user_data_dir(APP_NAME),
        )
        logger.debug(
            "Environment: config=%s log=%s data=%s",
            env.config_dir,
            env.log_dir,
            env.data_dir,
        )
        return env

    @property
    def repository_path(self) -> Path:
        return self.data_dir / REPOSITORY_DIR

    @property
    def installer_file_path(self) -> Path:
        return self.config_dir / INSTALLER_CONFIG_FILE

    @property
    def log_file_path(self) -> Path:
        return self.log_dir / INSTALL_LOG_FILE

    @property
    def repo_config_path(self) -> Path:
        return self.repository_path / REPO_CONFIG_DIR

    @property
    def repo_local_path(self) -> Path:
        return self.repository_path / REPO_LOCAL_DIR

    @property
    def has_installer_file(self) -> bool:
        return self.installer_file_path.is_file()

    @property
    def has_log_file(self) -> bool:
        return self.log_file_path.is_file()

    @property
    def is_initialized(self) -> bool:
        return self.config_dir.is_dir() and self.repository_path.is_dir()

    def require_initialized(self) -> None:
        """Raise NotInitializedError unless ``mcfg init`` has run."""
        if not self.is_initialized:
            raise NotInitializedError(
                f"mcfg is not initialized (expected {self.config_dir} and "
                f"{self.repository_path}); run 'mcfg init' first"
            )

    def to_dict(self) -> dict[str, str]:
        return {
            "config_dir": str(self.config_dir),
            "log_dir": str(self.log_dir),
            "data_dir": str(self.data_dir),
            "repository": str(self.repository_path),
            "installers": str(self.installer_file_path),
            "install_log": str(self.log_file_path),
            "repo_config": str(self.repo_config_path),
            "repo_local": str(self.repo_local_path),
        }
