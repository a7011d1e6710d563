"""Configuration file loading and management"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from neondocker.common.errors import ConfigurationError
from neondocker.common.types import Edition

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class ImageConfig:
    """Docker image naming settings"""
    namespace: str = "kdeneon"
    default_edition: str = Edition.DEV_UNSTABLE.value


@dataclass
class DisplayConfig:
    """Nested X server settings"""
    socket_dir: str = "/tmp/.X11-unix"
    max_display: int = 1024
    screen: str = "1024x768"
    ready_timeout_seconds: float = 5.0


@dataclass
class ContainerConfig:
    """Container creation and polling settings"""
    poll_interval_seconds: float = 1.0
    standalone_display: str = ":0"
    wayland_command: list[str] = field(default_factory=lambda: ["startplasma-wayland"])
    device_globs: list[str] = field(default_factory=lambda: ["/dev/dri/*", "/dev/video*"])
    x11_bind: str = "/tmp/.X11-unix:/tmp/.X11-unix"


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = DEFAULT_LOG_FORMAT
    quiet_loggers: list[str] = field(default_factory=lambda: ["urllib3", "docker"])


@dataclass
class Config:
    """Complete application configuration"""
    image: ImageConfig = field(default_factory=ImageConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    container: ContainerConfig = field(default_factory=ContainerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/neondocker/config.yml",
        "/etc/neondocker/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
            ValueError: If the document is not a mapping
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        # An empty file is a valid "use all defaults" config
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Every section and key is optional; missing values fall back to the
        dataclass defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object
        """
        image_data = data.get("image") or {}
        image_defaults = ImageConfig()
        image = ImageConfig(
            namespace=image_data.get("namespace", image_defaults.namespace),
            default_edition=str(
                image_data.get("default_edition", image_defaults.default_edition)
            ),
        )

        display_data = data.get("display") or {}
        display_defaults = DisplayConfig()
        display = DisplayConfig(
            socket_dir=display_data.get("socket_dir", display_defaults.socket_dir),
            max_display=int(display_data.get("max_display", display_defaults.max_display)),
            screen=display_data.get("screen", display_defaults.screen),
            ready_timeout_seconds=float(
                display_data.get("ready_timeout_seconds", display_defaults.ready_timeout_seconds)
            ),
        )

        container_data = data.get("container") or {}
        container_defaults = ContainerConfig()
        container = ContainerConfig(
            poll_interval_seconds=float(
                container_data.get(
                    "poll_interval_seconds", container_defaults.poll_interval_seconds
                )
            ),
            standalone_display=container_data.get(
                "standalone_display", container_defaults.standalone_display
            ),
            wayland_command=list(
                container_data.get("wayland_command", container_defaults.wayland_command)
            ),
            device_globs=list(
                container_data.get("device_globs", container_defaults.device_globs)
            ),
            x11_bind=container_data.get("x11_bind", container_defaults.x11_bind),
        )

        logging_data = data.get("logging") or {}
        logging = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            file=logging_data.get("file"),
            format=logging_data.get("format", DEFAULT_LOG_FORMAT),
            quiet_loggers=list(
                logging_data.get("quiet_loggers", LoggingConfig().quiet_loggers)
            ),
        )

        return Config(
            image=image,
            display=display,
            container=container,
            logging=logging,
        )

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults.

        Returns:
            Parsed Config object

        Raises:
            ConfigurationError: If an explicit file is missing or invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()

        try:
            data = ConfigLoader.yaml_load(file_path)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {file_path}") from e
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(f"Invalid config file {file_path}: {e}") from e

        return ConfigLoader.config_parse(data)

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> Config:
        """
        Load configuration and apply command-line overrides

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values

        Returns:
            Config object with overrides applied

        Example:
            config = ConfigLoader.configWithOverrides_load(
                log_level="DEBUG",
            )
        """
        config = ConfigLoader.config_load(file_path)

        if overrides.get("log_level") is not None:
            config.logging.level = overrides["log_level"]

        return config
