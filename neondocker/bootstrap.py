"""Bootstrap helpers for config, logging, host dependencies and engine wiring."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

import docker
from docker.errors import DockerException

from neondocker import __version__
from neondocker.common.config import Config, ConfigLoader, LoggingConfig
from neondocker.common.errors import EngineUnavailableError
from neondocker.host.dependencies import DependencyJiggler
from neondocker.host.os_release import OSRelease

logger = logging.getLogger(__name__)

ENGINE_UNAVAILABLE_MESSAGE = (
    "Could not connect to Docker, check it is installed, running and "
    "your user is in the right group for access"
)


def configWithOverrides_load(args: argparse.Namespace) -> Config:
    """
    Load config and apply the CLI log level.

    Args:
        args: Parsed CLI args.

    Returns:
        Loaded config.

    Raises:
        ConfigurationError: If an explicit config file is missing or invalid
    """
    config_path: Path | None = Path(args.config) if getattr(args, "config", None) else None
    return ConfigLoader.configWithOverrides_load(
        file_path=config_path, log_level=getattr(args, "log_level", None)
    )


def loggingWithConfig_setup(logging_config: LoggingConfig) -> None:
    """
    Configure root logging from config (CLI level override already applied).

    Records carry the neondocker version after the timestamp. Docker SDK
    transport loggers named in `quiet_loggers` never go below INFO, their
    DEBUG output is one line per HTTP request while polling.

    Args:
        logging_config: Logging section of the loaded config.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logging_config.file:
        handlers.append(logging.FileHandler(logging_config.file))

    level: int = getattr(logging, logging_config.level.upper())
    logging.basicConfig(
        level=level,
        format=logging_config.format.replace("%(asctime)s", f"%(asctime)s [v{__version__}]"),
        handlers=handlers,
    )
    for name in logging_config.quiet_loggers:
        logging.getLogger(name).setLevel(max(logging.INFO, level))


def dependencies_ensure(
    os_release: Optional[OSRelease] = None,
    jiggler: Optional[DependencyJiggler] = None,
) -> bool:
    """
    Run first-run dependency setup on Ubuntu-like hosts.

    Args:
        os_release: os-release view, the system one by default.
        jiggler: Dependency runner.

    Returns:
        True if dependency setup ran.
    """
    os_release = os_release or OSRelease()
    if not os_release.ubuntuLike_check():
        logger.debug("Not an Ubuntu-like host, skipping dependency setup")
        return False
    (jiggler or DependencyJiggler()).run()
    return True


def engine_connect(
    client_factory: Callable[[], docker.DockerClient] = docker.from_env,
) -> docker.DockerClient:
    """
    Connect to the Docker engine and verify it answers.

    Args:
        client_factory: Builds the client, docker.from_env by default.

    Returns:
        Connected client.

    Raises:
        EngineUnavailableError: If the engine cannot be reached
    """
    try:
        client = client_factory()
        version = client.version()
    except DockerException as e:
        logger.debug(f"Docker connection failed: {e}")
        raise EngineUnavailableError(ENGINE_UNAVAILABLE_MESSAGE) from e
    logger.debug(f"Connected to Docker {version.get('Version', '?')}")
    return client
