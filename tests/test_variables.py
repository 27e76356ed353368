"""
Tests for the template variable context and its environment export.
"""

import os
from pathlib import Path

from mcfg.core.engine.variables import (
    action_vars,
    package_context,
    package_set_context,
    system_vars,
    to_env_vars,
    user_vars,
)
from mcfg.core.models import ActionKind, PackageEntry, PackageSet, Platform


def _package_set(path: Path | None = None, **data) -> PackageSet:
    ps = PackageSet.model_validate({"name": "tools", **data})
    ps.path = path
    return ps


class TestSystemVars:
    def test_keys(self, mcfg_env, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")
        variables = system_vars(mcfg_env, Platform.LINUX)

        assert variables["home"] == str(Path.home())
        assert variables["shell"] == "/bin/zsh"
        assert variables["command_shell"] == "/bin/zsh"
        assert variables["platform"] == "linux"
        assert variables["repo_config_path"] == str(mcfg_env.repo_config_path)
        assert variables["repo_local_path"] == str(mcfg_env.repo_local_path)
        assert {
            "platform_family", "platform_os", "platform_arch", "platform_distro", "local_download_path"
        } <= set(variables)

    def test_shell_fallback(self, mcfg_env, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)
        assert system_vars(mcfg_env, None)["shell"] == "/bin/sh"

    def test_distro_only_on_linux(self, mcfg_env, monkeypatch):
        monkeypatch.setattr("distro.id", lambda: "ubuntu")
        assert system_vars(mcfg_env, Platform.LINUX)["platform_distro"] == "ubuntu"
        assert system_vars(mcfg_env, Platform.MACOS)["platform_distro"] == ""


class TestLayers:
    def test_action_layer(self):
        variables = action_vars({"home": "/h"}, ActionKind.LINK_FILES)
        assert variables["command_action"] == "link-files"
        assert variables["home"] == "/h"
        assert "command_log_level" in variables

    def test_package_set_layer(self, tmp_path: Path):
        ps = _package_set(path=tmp_path / "tools" / "package-set.yml")
        variables = package_set_context({}, ActionKind.INSTALL, ps)

        assert variables["package_set_name"] == "tools"
        assert variables["package_set_file"] == "package-set.yml"
        assert variables["package_set_path"] == str(tmp_path / "tools")

    def test_package_layer(self):
        variables = package_context(
            {}, ActionKind.INSTALL, _package_set(), PackageEntry(name="ripgrep")
        )
        assert variables["package_name"] == "ripgrep"
        assert variables["package_config_path"].endswith("ripgrep")
        assert "package_data_local_path" in variables
        assert "package_log_path" in variables

    def test_user_vars_override_and_reference(self):
        ps = _package_set(**{"env-vars": {"package_name": "rg", "target": "{{home}}/bin"}})
        variables = package_context(
            {"home": "/h"}, ActionKind.INSTALL, ps, PackageEntry(name="ripgrep")
        )
        assert variables["package_name"] == "rg"
        assert variables["target"] == "/h/bin"

    def test_user_vars_keep_unknown_reference(self):
        assert user_vars({}, {"x": "{{nope}}"}) == {"x": "{{nope}}"}

    def test_inputs_not_mutated(self):
        base = {"home": "/h"}
        action_vars(base, ActionKind.INSTALL)
        user_vars(base, {"a": "b"})
        assert base == {"home": "/h"}


class TestToEnvVars:
    def test_prefixed_upper_case(self):
        env = to_env_vars({"package_set_name": "tools", "link-files.x": "1"}, path="")
        assert env["MCFG_PACKAGE_SET_NAME"] == "tools"
        assert env["MCFG_LINK_FILES_X"] == "1"
        assert "PATH" not in env

    def test_local_bin_appended_to_path(self):
        env = to_env_vars({"repo_local_path": "/repo/.local"}, path="/usr/bin")
        assert env["PATH"] == f"/usr/bin{os.pathsep}/repo/.local/bin"
        assert env["MCFG_REPO_LOCAL_PATH"] == "/repo/.local"
