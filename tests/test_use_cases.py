"""
Tests for use cases — init, run, list, history, config and package-set management.
"""

from pathlib import Path

import pytest

from mcfg.adapters import AdapterRegistry, MockAdapter
from mcfg.adapters.shell.filesystem import FilesystemAdapter
from mcfg.adapters.vcs.git import GitAdapter
from mcfg.core.config.environment import Environment
from mcfg.core.config.repository_loader import load_package_set
from mcfg.core.engine.executor import RunPolicy
from mcfg.core.models import ActionKind, Platform
from mcfg.core.persistence.install_log import InstallLog, InstallLogEntry
from mcfg.core.use_cases.config_show import show_config
from mcfg.core.use_cases.history import get_history
from mcfg.core.use_cases.init import init_environment
from mcfg.core.use_cases.listing import list_repository
from mcfg.core.use_cases.manage import (
    add_package_set,
    locate_package_set,
    remove_package_set,
)
from mcfg.core.use_cases.refresh import refresh_repository
from mcfg.core.use_cases.run import run_action, run_update_self


@pytest.fixture
def fresh_env(tmp_path: Path) -> Environment:
    return Environment.with_roots(
        config_dir=tmp_path / "config", log_dir=tmp_path / "log", data_dir=tmp_path / "data"
    )


@pytest.fixture
def mocked():
    """Registry with a mock shell and git, real filesystem."""
    registry = AdapterRegistry()
    registry.register(MockAdapter("shell"))
    registry.register(MockAdapter("git"))
    registry.register(FilesystemAdapter())
    return registry


# ── Init Tests ──────────────────────────────────────────────────


class TestInit:
    def test_creates_environment(self, fresh_env, mocked):
        fresh_env.repository_path.mkdir(parents=True)

        result = init_environment(fresh_env, adapters=mocked)

        assert result.error is None
        assert [r.action_id for r in result.receipts] == ["git-init", "config-dir", "installers"]
        assert fresh_env.has_installer_file
        assert fresh_env.has_log_file
        assert fresh_env.is_initialized

    def test_existing_git_repository_kept(self, fresh_env, mocked):
        (fresh_env.repository_path / ".git").mkdir(parents=True)

        result = init_environment(fresh_env, adapters=mocked)

        assert "git-init" not in [r.action_id for r in result.receipts]
        assert mocked.get("git").call_count == 0

    def test_clone_when_url_given(self, fresh_env, mocked):
        fresh_env.repository_path.mkdir(parents=True)

        init_environment(fresh_env, repository_url="https://example.com/me/machine.git", adapters=mocked)

        git = mocked.get("git")
        assert git.call_log[0].params["operation"] == "clone"
        assert git.call_log[0].params["url"] == "https://example.com/me/machine.git"

    def test_installers_not_overwritten(self, mcfg_env, mocked):
        before = mcfg_env.installer_file_path.read_text()
        (mcfg_env.repository_path / ".git").mkdir()

        result = init_environment(mcfg_env, adapters=mocked)

        assert result.error is None
        assert mcfg_env.installer_file_path.read_text() == before
        assert result.receipts[-1].skipped

    def test_local_dir_linked(self, fresh_env, mocked, tmp_path: Path):
        local = tmp_path / "my-machine"
        (local / ".git").mkdir(parents=True)

        result = init_environment(fresh_env, local_dir=local, adapters=mocked)

        assert result.error is None
        assert fresh_env.repository_path.is_symlink()
        assert fresh_env.repository_path.resolve() == local.resolve()

    def test_failed_step_reported(self, fresh_env, mocked):
        mocked.get("git").set_failure("git-init", error="git missing")

        result = init_environment(fresh_env, adapters=mocked)

        assert "git missing" in result.error
        assert not fresh_env.has_log_file


# ── Run Tests ───────────────────────────────────────────────────


class TestRun:
    def test_not_initialized(self, fresh_env, mocked):
        result = run_action(fresh_env, ActionKind.INSTALL, adapters=mocked)
        assert not result.ok
        assert "mcfg init" in result.error

    def test_install_and_history(self, mcfg_env, write_set, mocked):
        write_set("10-productivity", "tools.yml", "name: tools\nactions:\n  - name: wget\n")

        result = run_action(mcfg_env, ActionKind.INSTALL, adapters=mocked, host=Platform.MACOS)

        assert result.ok
        assert result.package_sets == ["productivity/tools"]
        assert mocked.get("shell").commands == [["brew", "install", "wget"]]
        history = get_history(mcfg_env, limit=1)
        assert [(e.package, e.installer) for e in history.entries] == [("wget", "homebrew")]

    def test_selection_error(self, mcfg_env, mocked):
        result = run_action(mcfg_env, ActionKind.INSTALL, group="nope", adapters=mocked)
        assert "No group" in result.error
        assert result.to_dict()["error"] == result.error

    def test_broken_set_is_a_warning(self, mcfg_env, write_set, mocked):
        write_set("10-x", "bad.yml", "name: [\n")
        write_set("10-x", "good.yml", "name: good\nactions:\n  install: echo ok\n")

        result = run_action(mcfg_env, ActionKind.INSTALL, adapters=mocked, host=Platform.LINUX)

        assert result.ok
        assert len(result.warnings) == 1
        assert result.package_sets == ["x/good"]

    def test_broken_registry_is_fatal(self, mcfg_env, write_set, mocked):
        mcfg_env.installer_file_path.write_text("- name: x\n  kind: bogus\n")
        write_set("10-x", "good.yml", "name: good\nactions:\n  install: echo ok\n")

        result = run_action(mcfg_env, ActionKind.INSTALL, adapters=mocked)

        assert result.error
        assert mocked.get("shell").call_count == 0

    def test_policy_passed_through(self, mcfg_env, write_set, mocked):
        write_set("10-x", "a.yml", "name: a\nrun-after: echo after\nactions:\n  - name: nope\n    kind: script\n")

        result = run_action(
            mcfg_env,
            ActionKind.INSTALL,
            adapters=mocked,
            host=Platform.LINUX,
            policy=RunPolicy(stop_on_error=True),
        )

        assert not result.ok
        assert mocked.get("shell").call_count == 0

    def test_update_self(self, mcfg_env, mocked):
        result = run_update_self(mcfg_env, adapters=mocked, host=Platform.MACOS)
        assert result.ok
        assert mocked.get("shell").call_log[0].params["argv"][-1] == "brew update && brew cleanup"


# ── Listing / History / Config Tests ────────────────────────────


class TestListing:
    def test_list_groups(self, mcfg_env, write_set):
        write_set("20-dev", "git.yml", "name: git\n")
        write_set("10-base", "core.yml", "name: core\noptional: true\n")

        result = list_repository(mcfg_env)

        assert [g.name for g in result.groups] == ["base", "dev"]
        data = result.to_dict()
        assert data["groups"][0]["package_sets"][0]["optional"] is True

    def test_list_unknown_group(self, mcfg_env):
        assert "No group" in list_repository(mcfg_env, group="nope").error

    def test_history_empty(self, mcfg_env):
        assert get_history(mcfg_env).entries == []

    def test_history_not_initialized(self, fresh_env):
        assert get_history(fresh_env).error

    def test_history_limit(self, mcfg_env):
        log = InstallLog(mcfg_env.log_file_path)
        for name in ("a", "b", "c"):
            log.append(InstallLogEntry(group="g", package_set="s", package=name, installer="i"))

        assert len(get_history(mcfg_env, limit=2).entries) == 2
        assert len(get_history(mcfg_env).entries) == 3

    def test_config_usable(self, mcfg_env):
        result = show_config(mcfg_env, host=Platform.MACOS)

        assert result.error is None
        assert [d.name for d in result.installers] == ["apt", "homebrew", "everywhere", "cargo"]
        assert "apt" not in result.usable
        assert "homebrew" in result.usable
        dumped = result.registry_dump()
        assert dumped[3]["kind"] == {"language": "rust"}
        assert dumped[1]["update-self"] == "brew update && brew cleanup"
        assert set(result.to_dict()["adapters"]) == {"shell", "filesystem", "git"}

    def test_refresh_without_git(self, mcfg_env):
        registry = AdapterRegistry()
        registry.register(GitAdapter())
        result = refresh_repository(mcfg_env, adapters=registry)

        assert "Not a git repository" in result.error


# ── Manage Tests ────────────────────────────────────────────────


class TestManage:
    def test_add_directory_form(self, mcfg_env):
        result = add_package_set(mcfg_env, "tools", "cli")

        assert result.created
        assert result.path == mcfg_env.repository_path / "tools" / "cli" / "package-set.yml"
        assert "name: cli" in result.path.read_text()

    def test_add_uses_existing_prefixed_group(self, mcfg_env, write_set):
        write_set("10-tools", "other.yml", "name: other\n")

        result = add_package_set(mcfg_env, "tools", "cli", as_file=True)

        assert result.path == mcfg_env.repository_path / "10-tools" / "cli.yml"

    def test_add_existing_fails(self, mcfg_env, write_set):
        write_set("10-tools", "cli.yml", "name: cli\n")
        assert add_package_set(mcfg_env, "tools", "cli").error

    def test_created_set_loads(self, mcfg_env):
        result = add_package_set(mcfg_env, "tools", "cli")
        package_set = load_package_set(result.path)

        assert package_set.name == "cli"
        assert [p.name for p in package_set.packages] == ["cli"]

    def test_locate_missing(self, mcfg_env):
        assert "No package set" in locate_package_set(mcfg_env, "tools", "cli").error

    def test_remove_file_form(self, mcfg_env, write_set):
        path = write_set("10-tools", "cli.yml", "name: cli\n")

        result = remove_package_set(mcfg_env, "tools", "cli")

        assert result.removed
        assert not path.exists()
        assert path.parent.is_dir()

    def test_remove_directory_form(self, mcfg_env, write_set):
        path = write_set("10-tools", "cli/package-set.yml", "name: cli\n")
        write_set("10-tools", "cli/config", "x\n")

        remove_package_set(mcfg_env, "tools", "cli")

        assert not path.parent.exists()
        assert path.parent.parent.is_dir()
