"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from mcfg.core.config.environment import Environment

INSTALLERS_YML = textwrap.dedent("""\
    - name: apt
      platform: linux
      kind: default
      if_exists: /usr/bin/apt-get
      commands:
        install: "apt-get install {{package_name}}"
        uninstall: "apt-get remove {{package_name}}"
    - name: homebrew
      platform: macos
      kind: default
      commands:
        install: "brew install {{package_name}}"
        update: "brew upgrade {{package_name}}"
      update-self: "brew update && brew cleanup"
    - name: everywhere
      kind: default
      commands:
        install: "pkg install {{package_name}}"
        uninstall: "pkg remove {{package_name}}"
    - name: cargo
      kind:
        language: rust
      commands:
        install: "cargo install {{package_name}}"
""")


@pytest.fixture
def mcfg_env(tmp_path: Path) -> Environment:
    """An initialized environment under tmp_path, without git."""
    env = Environment.with_roots(
        config_dir=tmp_path / "config",
        log_dir=tmp_path / "log",
        data_dir=tmp_path / "data",
    )
    env.config_dir.mkdir(parents=True)
    env.repository_path.mkdir(parents=True)
    env.installer_file_path.write_text(INSTALLERS_YML)
    return env


@pytest.fixture
def write_set(mcfg_env: Environment):
    """Write a package-set file: write_set("10-tools", "cli.yml", yaml_text)."""

    def _write(group: str, relative: str, content: str) -> Path:
        path = mcfg_env.repository_path / group / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
        return path

    return _write
