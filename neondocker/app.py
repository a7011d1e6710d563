"""neondocker run flow: options to tag, image, display session, container"""

from __future__ import annotations

import argparse
import logging
import threading
from typing import Callable, Optional

import docker

from neondocker import __version__
from neondocker.bootstrap import (
    configWithOverrides_load,
    dependencies_ensure,
    engine_connect,
    loggingWithConfig_setup,
)
from neondocker.common.config import Config
from neondocker.common.errors import NeonDockerError
from neondocker.common.types import Options
from neondocker.display.session import DisplaySession, HostAccessSession, NestedXServerSession
from neondocker.engine.runner import ContainerRunner
from neondocker.image.selector import imageTag_select

logger = logging.getLogger(__name__)


def displaySession_create(options: Options, config: Config) -> DisplaySession:
    """
    Pick the display session for the options.

    Standalone commands and Wayland sessions draw on the host display, full
    X11 sessions get their own Xephyr window.

    Args:
        options: Parsed options.
        config: Loaded config.

    Returns:
        Unstarted display session.
    """
    if options.hostDisplay_isUsed:
        return HostAccessSession(display_name=config.container.standalone_display)
    return NestedXServerSession(config.display)


def session_run(
    options: Options,
    config: Config,
    client: docker.DockerClient,
    session: Optional[DisplaySession] = None,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """
    Pull if needed, then run the container inside a display session.

    Args:
        options: Parsed options.
        config: Loaded config.
        client: Connected Docker client.
        session: Display session override, chosen from options when None.
        stop_event: Cancels container polling when set.

    Raises:
        NeonDockerError: If no container could be obtained
    """
    tag = imageTag_select(options, config.image.namespace)
    runner = ContainerRunner(client, tag, options, config.container, stop_event=stop_event)

    runner.image_ensure(force_pull=options.pull)

    session = session or displaySession_create(options, config)
    container = session.run(lambda: runner.run(session.display_name))
    if container is None:
        raise NeonDockerError(f"No container could be started from {tag}")


def app_run(
    args: argparse.Namespace,
    options_build_func: Callable[[argparse.Namespace, Config], Options],
    engine_connect_func: Optional[Callable[[], docker.DockerClient]] = None,
) -> None:
    """
    Run neondocker for parsed CLI args.

    Options are validated before any host setup or engine contact.

    Args:
        args: Parsed CLI args.
        options_build_func: Turns args into validated Options.
        engine_connect_func: Returns a connected Docker client, engine_connect by default.
    """
    config = configWithOverrides_load(args)
    loggingWithConfig_setup(config.logging)
    options = options_build_func(args, config)

    logger.debug(f"neondocker v{__version__}")
    if not getattr(args, "skip_dependencies", False):
        dependencies_ensure()

    client = (engine_connect_func or engine_connect)()
    session_run(options, config, client)
