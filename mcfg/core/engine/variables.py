"""
Variable context — the named values available to script templates.

Layers, lowest precedence first:

    system       home, shell, platform* (incl. distro id on Linux),
                 local_download_path, repo_*_path
    action       command_action, command_log_level
    package set  package_set_name, package_set_file, package_set_path
    package      package_name, package_config_path, package_data_local_path,
                 package_log_path
    user         the package set's env-vars (may reference lower layers)

Every builder returns a new dict and leaves its input alone. Nothing
here fails: unknown references inside env-vars are kept verbatim.
"""

from __future__ import annotations

import logging
import os
import platform as _platform
from collections.abc import Mapping
from pathlib import Path

import distro

from mcfg.core.config.environment import (
    Environment,
    user_config_dir,
    user_data_dir,
    user_download_dir,
    user_log_dir,
)
from mcfg.core.engine.template import DEFAULT_SHELL, render_lenient
from mcfg.core.models.installer import ActionKind, Platform
from mcfg.core.models.package import PackageEntry, PackageSet

logger = logging.getLogger(__name__)

ENV_PREFIX = "MCFG"

Variables = dict[str, str]


def _platform_os() -> str:
    name = _platform.system().lower()
    return "macos" if name == "darwin" else name


def _platform_distro(host: Platform | None) -> str:
    """Linux distribution id (``ubuntu``, ``fedora``); empty elsewhere."""
    return distro.id() if host == Platform.LINUX else ""


def system_vars(environment: Environment, host: Platform | None) -> Variables:
    """Values computed once per run."""
    download = user_download_dir()
    shell = os.environ.get("SHELL") or DEFAULT_SHELL
    variables = {
        "home": str(Path.home()),
        "shell": shell,
        "command_shell": shell,
        "platform": host.value if host else "",
        "platform_family": "unix" if os.name == "posix" else "windows",
        "platform_os": _platform_os(),
        "platform_arch": _platform.machine(),
        "platform_distro": _platform_distro(host),
        "local_download_path": str(download) if download else "",
        "repo_config_path": str(environment.repo_config_path),
        "repo_local_path": str(environment.repo_local_path),
    }
    logger.debug("system vars: %s", variables)
    return variables


def action_vars(base: Mapping[str, str], action: ActionKind) -> Variables:
    level = logging.getLogger().getEffectiveLevel()
    return {
        **base,
        "command_action": action.value,
        "command_log_level": logging.getLevelName(level).lower(),
    }


def package_set_vars(base: Mapping[str, str], package_set: PackageSet) -> Variables:
    return {
        **base,
        "package_set_name": package_set.name,
        "package_set_file": package_set.file_name,
        "package_set_path": str(package_set.directory) if package_set.directory else "",
    }


def package_vars(base: Mapping[str, str], entry: PackageEntry) -> Variables:
    return {
        **base,
        "package_name": entry.name,
        "package_config_path": str(user_config_dir(entry.name)),
        "package_data_local_path": str(user_data_dir(entry.name)),
        "package_log_path": str(user_log_dir(entry.name)),
    }


def user_vars(base: Mapping[str, str], env_vars: Mapping[str, str]) -> Variables:
    """Overlay user-defined values; keys and values may use ``{{refs}}``."""
    variables = dict(base)
    for key, value in env_vars.items():
        variables[render_lenient(key, variables)] = render_lenient(value, variables)
    return variables


def package_set_context(
    system: Mapping[str, str],
    action: ActionKind,
    package_set: PackageSet,
) -> Variables:
    """Context for run-before/run-after, script actions and link files."""
    variables = package_set_vars(action_vars(system, action), package_set)
    return user_vars(variables, package_set.env_vars)


def package_context(
    system: Mapping[str, str],
    action: ActionKind,
    package_set: PackageSet,
    entry: PackageEntry,
) -> Variables:
    """Context for one package; user env-vars still win over everything."""
    variables = package_set_vars(action_vars(system, action), package_set)
    variables = package_vars(variables, entry)
    return user_vars(variables, package_set.env_vars)


def to_env_vars(
    variables: Mapping[str, str],
    prefix: str = ENV_PREFIX,
    path: str | None = None,
) -> dict[str, str]:
    """Expose a context as process environment entries.

    ``package_set_name`` becomes ``MCFG_PACKAGE_SET_NAME``. When the
    context has ``repo_local_path``, its ``bin`` directory is appended
    to ``PATH``.
    """
    env = {
        f"{prefix}_{key.upper().replace('-', '_').replace('.', '_').replace(':', '_')}": value
        for key, value in variables.items()
    }
    current = path if path is not None else os.environ.get("PATH", "")
    local = variables.get("repo_local_path")
    if local:
        local_bin = str(Path(local) / "bin")
        env["PATH"] = f"{current}{os.pathsep}{local_bin}" if current else local_bin
    return env
