"""
Tests for configuration loading — vmidctl.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from vmidctl.core.config import loader
from vmidctl.core.config.loader import ConfigError, find_config_file, load_settings


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path: Path):
    """No ambient config from the machine running the tests."""
    monkeypatch.delenv("VMIDCTL_CONFIG", raising=False)
    monkeypatch.delenv("VMIDCTL_LOG_FILE", raising=False)
    monkeypatch.setattr(loader, "SYSTEM_CONFIG_FILE", tmp_path / "absent.yml")


@pytest.fixture
def settings_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        log_file: /tmp/vmid.log
        command_timeout: 60
        stop_failure: abort
        vm:
          command: qm
          config_dir: /srv/pve/qemu-server
          storage_root: /srv/images
        ct:
          command: pct
          config_dir: /srv/pve/lxc
          storage_root: /srv/lxc
    """)
    path = tmp_path / "vmidctl.yml"
    path.write_text(content)
    return path


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("VMIDCTL_CONFIG", "/from/env.yml")
        explicit = tmp_path / "x.yml"
        assert find_config_file(explicit) == explicit

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("VMIDCTL_CONFIG", "/from/env.yml")
        assert find_config_file() == Path("/from/env.yml")

    def test_system_file(self, tmp_path: Path, monkeypatch):
        system = tmp_path / "etc.yml"
        system.write_text("command_timeout: 10\n")
        monkeypatch.setattr(loader, "SYSTEM_CONFIG_FILE", system)
        assert find_config_file() == system

    def test_none(self):
        assert find_config_file() is None


class TestLoadSettings:
    def test_defaults_without_file(self):
        s = load_settings()
        assert s.vm.config_dir == "/etc/pve/qemu-server"
        assert s.command_timeout == 300

    def test_full_file(self, settings_yml: Path):
        s = load_settings(settings_yml)
        assert s.log_file == "/tmp/vmid.log"
        assert s.command_timeout == 60
        assert s.stop_failure == "abort"
        assert s.vm.config_dir == "/srv/pve/qemu-server"
        assert s.ct.storage_root == "/srv/lxc"

    def test_wrapped_under_key(self, tmp_path: Path):
        path = tmp_path / "wrapped.yml"
        path.write_text("vmidctl:\n  stop_failure: abort\n")
        assert load_settings(path).stop_failure == "abort"

    def test_partial_kind_block_keeps_other_defaults(self, tmp_path: Path):
        path = tmp_path / "partial.yml"
        path.write_text("command_timeout: 30\n")
        s = load_settings(path)
        assert s.command_timeout == 30
        assert s.ct.command == "pct"

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_settings(path).stop_failure == "warn"

    def test_env_log_file_override(self, settings_yml: Path, monkeypatch):
        monkeypatch.setenv("VMIDCTL_LOG_FILE", "/elsewhere.log")
        assert load_settings(settings_yml).log_file == "/elsewhere.log"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("log_file: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(path)

    def test_schema_error(self, tmp_path: Path):
        path = tmp_path / "schema.yml"
        path.write_text("stop_failure: sometimes\n")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(path)
