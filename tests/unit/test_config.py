"""Unit tests for configuration loading and parsing"""

from pathlib import Path

import pytest

from neondocker.common.config import (
    DEFAULT_LOG_FORMAT,
    Config,
    ConfigLoader,
)
from neondocker.common.errors import ConfigurationError


class TestConfigLoaderYAMLLoading:
    """Test YAML file loading"""

    def test_yaml_load_valid_file(self, tmp_path):
        """Test loading valid YAML file"""
        config_file = tmp_path / "test.yml"
        config_file.write_text(
            """
image:
  namespace: "kdeneon"
  default_edition: "user"
"""
        )

        data = ConfigLoader.yaml_load(config_file)
        assert data["image"]["default_edition"] == "user"

    def test_yaml_load_empty_file(self, tmp_path):
        """Test an empty file loads as an empty mapping"""
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert ConfigLoader.yaml_load(config_file) == {}

    def test_yaml_load_missing_file_raises(self):
        """Test loading non-existent file raises FileNotFoundError"""
        with pytest.raises(FileNotFoundError):
            ConfigLoader.yaml_load(Path("/nonexistent/config.yml"))

    def test_yaml_load_non_dict_raises(self, tmp_path):
        """Test loading YAML that isn't a dict raises ValueError"""
        config_file = tmp_path / "list.yml"
        config_file.write_text("- item1\n- item2")

        with pytest.raises(ValueError, match="must contain a YAML dictionary"):
            ConfigLoader.yaml_load(config_file)


class TestConfigLoaderParsing:
    """Test configuration dictionary parsing"""

    def test_config_parse_empty_uses_defaults(self):
        """Test every value has a default"""
        config = ConfigLoader.config_parse({})

        assert isinstance(config, Config)
        assert config.image.namespace == "kdeneon"
        assert config.image.default_edition == "dev-unstable"
        assert config.display.socket_dir == "/tmp/.X11-unix"
        assert config.display.screen == "1024x768"
        assert config.container.poll_interval_seconds == 1.0
        assert config.container.standalone_display == ":0"
        assert config.container.wayland_command == ["startplasma-wayland"]
        assert config.container.device_globs == ["/dev/dri/*", "/dev/video*"]
        assert config.logging.level == "INFO"
        assert config.logging.file is None
        assert config.logging.format == DEFAULT_LOG_FORMAT
        assert config.logging.quiet_loggers == ["urllib3", "docker"]

    def test_config_parse_values(self):
        """Test explicit values override defaults"""
        data = {
            "image": {"namespace": "mirror", "default_edition": "testing"},
            "display": {"max_display": 16, "screen": "1920x1080"},
            "container": {
                "poll_interval_seconds": 2,
                "wayland_command": ["dbus-run-session", "startplasma-wayland"],
            },
            "logging": {
                "level": "DEBUG",
                "file": "/tmp/neondocker.log",
                "quiet_loggers": ["urllib3"],
            },
        }

        config = ConfigLoader.config_parse(data)

        assert config.image.namespace == "mirror"
        assert config.image.default_edition == "testing"
        assert config.display.max_display == 16
        assert config.display.screen == "1920x1080"
        assert config.container.poll_interval_seconds == 2.0
        assert config.container.wayland_command[0] == "dbus-run-session"
        assert config.logging.level == "DEBUG"
        assert config.logging.file == "/tmp/neondocker.log"
        assert config.logging.quiet_loggers == ["urllib3"]

    def test_config_parse_null_section(self):
        """Test a section present but empty falls back to defaults"""
        config = ConfigLoader.config_parse({"display": None})
        assert config.display.max_display == 1024


class TestConfigLoaderFileFinding:
    """Test config file discovery"""

    def test_configFile_find_current_directory(self, tmp_path, monkeypatch):
        """Test finding config.yml in current directory"""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "config.yml"
        config_file.write_text("image: {}")

        assert ConfigLoader.configFile_find() == config_file.resolve()

    def test_configFile_find_returns_none_when_not_found(self, tmp_path, monkeypatch):
        """Test returns None when no config file found"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(ConfigLoader, "DEFAULT_CONFIG_PATHS", ["config.yml"])
        assert ConfigLoader.configFile_find() is None


class TestConfigLoaderFullLoad:
    """Test complete config loading"""

    def test_config_load_explicit_path(self, tmp_path):
        """Test loading config from explicit path"""
        config_file = tmp_path / "myconfig.yml"
        config_file.write_text(
            """
display:
  screen: "800x600"
logging:
  level: "WARNING"
"""
        )

        config = ConfigLoader.config_load(config_file)
        assert config.display.screen == "800x600"
        assert config.logging.level == "WARNING"

    def test_config_load_without_file_uses_defaults(self, tmp_path, monkeypatch):
        """Test auto-discovery falls back to built-in defaults"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(ConfigLoader, "DEFAULT_CONFIG_PATHS", ["config.yml"])

        config = ConfigLoader.config_load()
        assert config == Config()

    def test_config_load_missing_explicit_path_raises(self, tmp_path):
        """Test an explicit path that does not exist is a configuration error"""
        with pytest.raises(ConfigurationError, match="Config file not found"):
            ConfigLoader.config_load(tmp_path / "absent.yml")

    def test_config_load_invalid_yaml_raises(self, tmp_path):
        """Test broken YAML is a configuration error"""
        config_file = tmp_path / "invalid.yml"
        config_file.write_text("invalid: yaml: content: [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid config file"):
            ConfigLoader.config_load(config_file)


class TestConfigLoaderOverrides:
    """Test config loading with overrides"""

    def test_configWithOverrides_load_log_level(self, tmp_path):
        """Test CLI log level replaces the configured one"""
        config_file = tmp_path / "config.yml"
        config_file.write_text("logging:\n  level: INFO\n")

        config = ConfigLoader.configWithOverrides_load(config_file, log_level="DEBUG")
        assert config.logging.level == "DEBUG"

    def test_configWithOverrides_load_none_ignored(self, tmp_path):
        """Test None overrides leave config values alone"""
        config_file = tmp_path / "config.yml"
        config_file.write_text("image:\n  namespace: mirror\n")

        config = ConfigLoader.configWithOverrides_load(config_file, log_level=None)
        assert config.image.namespace == "mirror"
        assert config.logging.level == "INFO"
