"""
Tests for configuration — environment paths, installer and repository loading.
"""

import textwrap
from pathlib import Path

import pytest

from mcfg.core.config.environment import Environment, user_config_dir
from mcfg.core.config.loader import load_installers, parse_installers
from mcfg.core.config.repository_loader import load_package_set, load_repository
from mcfg.core.data import default_installers, default_installers_text
from mcfg.core.errors import ConfigParseError, NotInitializedError
from mcfg.core.models import PackageKind, Platform


# ── Environment Tests ───────────────────────────────────────────


class TestEnvironment:
    def test_derived_paths(self, tmp_path: Path):
        env = Environment.with_roots(
            config_dir=tmp_path / "c", log_dir=tmp_path / "l", data_dir=tmp_path / "d"
        )
        assert env.installer_file_path == tmp_path / "c" / "installers.yml"
        assert env.log_file_path == tmp_path / "l" / "install-log.sql"
        assert env.repository_path == tmp_path / "d" / "repository"
        assert env.repo_config_path == tmp_path / "d" / "repository" / ".config"
        assert env.repo_local_path == tmp_path / "d" / "repository" / ".local"

    def test_not_initialized(self, tmp_path: Path):
        env = Environment.with_roots(
            config_dir=tmp_path / "c", log_dir=tmp_path / "l", data_dir=tmp_path / "d"
        )
        assert not env.is_initialized
        with pytest.raises(NotInitializedError):
            env.require_initialized()

    def test_initialized(self, mcfg_env: Environment):
        assert mcfg_env.is_initialized
        assert mcfg_env.has_installer_file
        assert not mcfg_env.has_log_file
        mcfg_env.require_initialized()

    def test_xdg_config_home(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(Platform, "current", classmethod(lambda cls: Platform.LINUX))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert user_config_dir("mcfg") == tmp_path / "mcfg"

    def test_relative_xdg_ignored(self, monkeypatch):
        monkeypatch.setattr(Platform, "current", classmethod(lambda cls: Platform.LINUX))
        monkeypatch.setenv("XDG_CONFIG_HOME", "relative/dir")
        assert user_config_dir("mcfg") == Path.home() / ".config" / "mcfg"

    def test_to_dict_keys(self, mcfg_env: Environment):
        assert set(mcfg_env.to_dict()) == {
            "config_dir", "log_dir", "data_dir", "repository",
            "installers", "install_log", "repo_config", "repo_local",
        }


# ── Installer Registry Loader Tests ─────────────────────────────


class TestLoadInstallers:
    def test_order_preserved(self, mcfg_env: Environment):
        descriptors = load_installers(mcfg_env.installer_file_path)
        assert [d.name for d in descriptors] == ["apt", "homebrew", "everywhere", "cargo"]
        assert descriptors[3].kind == PackageKind.for_language("rust")
        assert descriptors[1].update_self == "brew update && brew cleanup"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigParseError) as exc:
            load_installers(tmp_path / "installers.yml")
        assert exc.value.path == str(tmp_path / "installers.yml")

    def test_empty_file(self):
        assert parse_installers("") == []

    def test_not_a_list(self):
        with pytest.raises(ConfigParseError, match="YAML list"):
            parse_installers("name: apt\n")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigParseError, match="Invalid YAML"):
            parse_installers("- name: [unclosed\n")

    def test_invalid_item_is_fatal(self):
        raw = textwrap.dedent("""\
            - name: good
              kind: default
            - name: bad
              kind: nonsense
        """)
        with pytest.raises(ConfigParseError, match="#2"):
            parse_installers(raw, source="installers.yml")

    def test_shipped_defaults_parse(self):
        descriptors = default_installers()
        names = [d.name for d in descriptors]
        assert "apt" in names
        assert "homebrew" in names
        assert "cargo" in names
        assert parse_installers(default_installers_text()) == list(descriptors)


# ── Repository Loader Tests ─────────────────────────────────────


class TestLoadRepository:
    def test_groups_ordered(self, mcfg_env: Environment, write_set):
        write_set("languages", "rust.yml", "name: rust\n")
        write_set("20-dev", "git.yml", "name: git\n")
        write_set("10-productivity", "tools.yml", "name: tools\n")

        repository, errors = load_repository(mcfg_env.repository_path)

        assert errors == []
        assert [g.name for g in repository.groups] == ["productivity", "dev", "languages"]
        assert repository.package_set_count == 3

    def test_hidden_dirs_ignored(self, mcfg_env: Environment, write_set):
        write_set(".git", "config.yml", "name: nope\n")
        write_set(".config", "tools", "x\n")
        write_set("10-tools", "cli.yml", "name: cli\n")

        repository, _ = load_repository(mcfg_env.repository_path)

        assert [g.dir_name for g in repository.groups] == ["10-tools"]

    def test_directory_form(self, mcfg_env: Environment, write_set):
        path = write_set("10-shell", "zsh/package-set.yml", """\
            name: zsh
            link-files:
              zshrc: "{{home}}/.zshrc"
        """)
        write_set("10-shell", "zsh/zshrc", "export X=1\n")

        repository, _ = load_repository(mcfg_env.repository_path)

        ps = repository.get_group("shell").get_package_set("zsh")
        assert ps.path == path
        assert ps.directory == path.parent
        assert ps.file_name == "package-set.yml"

    def test_broken_set_is_skipped(self, mcfg_env: Environment, write_set):
        write_set("10-tools", "good.yml", "name: good\n")
        write_set("10-tools", "bad.yml", "name: [broken\n")
        write_set("10-tools", "worse.yml", "- just\n- a list\n")

        repository, errors = load_repository(mcfg_env.repository_path)

        assert [ps.name for ps in repository.groups[0].package_sets] == ["good"]
        assert len(errors) == 2

    def test_sets_sorted_by_name(self, mcfg_env: Environment, write_set):
        write_set("10-tools", "a.yml", "name: zeta\n")
        write_set("10-tools", "b.yml", "name: alpha\n")

        repository, _ = load_repository(mcfg_env.repository_path)

        assert [ps.name for ps in repository.groups[0].package_sets] == ["alpha", "zeta"]

    def test_missing_repository(self, tmp_path: Path):
        with pytest.raises(ConfigParseError):
            load_repository(tmp_path / "nowhere")

    def test_load_package_set_invalid(self, tmp_path: Path):
        path = tmp_path / "set.yml"
        path.write_text("name: x\nactions: 42\n")
        with pytest.raises(ConfigParseError) as exc:
            load_package_set(path)
        assert exc.value.path == str(path)

    def test_env_vars_yaml_scalars(self, tmp_path: Path):
        path = tmp_path / "set.yml"
        path.write_text("name: x\nenv-vars:\n  EMPTY:\n  FLAG: true\n  COUNT: 2\n")
        assert load_package_set(path).env_vars == {"EMPTY": "", "FLAG": "true", "COUNT": "2"}

    def test_env_vars_list_value_invalid(self, tmp_path: Path):
        path = tmp_path / "set.yml"
        path.write_text("name: x\nenv-vars:\n  PATHS: [a, b]\n")
        with pytest.raises(ConfigParseError, match="env-vars"):
            load_package_set(path)
