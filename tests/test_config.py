"""Tests for configuration loading."""

import pytest

from taemno_os.config.loader import find_config_file, load_config
from taemno_os.constants import DEFAULT_ENV_PREFIX, DEFAULT_ENV_SUFFIX
from taemno_os.errors import ConfigurationError


class TestLoadConfig:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        cfg = load_config(environ={})
        assert cfg.env_prefix == DEFAULT_ENV_PREFIX
        assert cfg.env_suffix == DEFAULT_ENV_SUFFIX
        assert cfg.provider == "auto"
        assert cfg.log_level == "WARNING"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("env_prefix: '$(os://'\nprovider: keyring\ncommand_timeout: 2.5\n")
        cfg = load_config(str(path), environ={})
        assert cfg.env_prefix == "$(os://"
        assert cfg.provider == "keyring"
        assert cfg.command_timeout == 2.5

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(str(path), environ={}).provider == "auto"

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("provider: keychain\n")
        cfg = load_config(
            str(path), environ={"TAEMNO_PROVIDER": "keyring", "TAEMNO_ENV_SUFFIX": "]"}
        )
        assert cfg.provider == "keyring"
        assert cfg.env_suffix == "]"

    def test_explicit_overrides_win(self, tmp_path):
        cfg = load_config(
            environ={"TAEMNO_ENV_PREFIX": "[["}, env_prefix="{{", env_suffix=None
        )
        assert cfg.env_prefix == "{{"
        assert cfg.env_suffix == DEFAULT_ENV_SUFFIX

    def test_config_env_var(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("log_level: debug\n")
        cfg = load_config(environ={"TAEMNO_CONFIG": str(path)})
        assert cfg.log_level == "DEBUG"

    def test_bad_extension(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        with pytest.raises(ConfigurationError, match="Unsupported config file extension"):
            load_config(str(path), environ={})

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(path), environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Error reading"):
            load_config(str(tmp_path / "absent.yaml"), environ={})

    def test_validation_errors(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("env_prefix: ''\nprovider: vault\nunknown: 1\n")
        with pytest.raises(ConfigurationError, match=r"3 error\(s\)"):
            load_config(str(path), environ={})

    def test_bad_log_level(self):
        with pytest.raises(ConfigurationError, match="log_level"):
            load_config(environ={}, log_level="loud")


class TestFindConfigFile:
    def test_explicit_path_wins(self):
        assert find_config_file("a.yaml", {"TAEMNO_CONFIG": "b.yaml"}) == "a.yaml"

    def test_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert find_config_file(None, {}) is None
        cfg_dir = tmp_path / ".config" / "taemno-os"
        cfg_dir.mkdir(parents=True)
        (cfg_dir / "config.yaml").write_text("provider: auto\n")
        assert find_config_file(None, {}) == str(cfg_dir / "config.yaml")
