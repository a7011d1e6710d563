"""
Container lifecycle for a single neondocker run.

The runner makes sure the image is present, obtains a container according to
the option strategy, starts it, polls until it stops and removes it unless
it should be kept.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional

import docker
from docker.errors import ImageNotFound, NotFound
from docker.models.containers import Container
from docker.models.images import Image

from neondocker.common.config import ContainerConfig
from neondocker.common.types import ContainerStrategy, Options
from neondocker.engine.devices import deviceMappings_build, devicePaths_find

logger = logging.getLogger(__name__)

__all__ = ["ContainerRunner", "imageTag_contains"]


def imageTag_contains(images: Iterable[Image], tag: str) -> bool:
    """
    Check whether any image lists tag among its RepoTags.

    Images without a RepoTags field (dangling layers) never match.

    Args:
        images: Local images.
        tag: Full image tag, e.g. `kdeneon/plasma:user`.

    Returns:
        True if some image carries the tag.
    """
    for image in images:
        repo_tags = image.attrs.get("RepoTags") or []
        if tag in repo_tags:
            return True
    return False


class ContainerRunner:
    """Runs one container from tag and waits for it to stop"""

    def __init__(
        self,
        client: docker.DockerClient,
        tag: str,
        options: Options,
        config: Optional[ContainerConfig] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Initialize runner.

        Args:
            client: Connected Docker client.
            tag: Image tag to run.
            options: Parsed options.
            config: Container settings, defaults when None.
            stop_event: Set to abandon polling early; cleanup still runs.
        """
        self._client = client
        self._tag: str = tag
        self._options: Options = options
        self._config: ContainerConfig = config or ContainerConfig()
        self._stop_event: threading.Event = stop_event or threading.Event()

    # =========================================================================
    # Image
    # =========================================================================

    def image_exists(self) -> bool:
        """Has the image already been downloaded to the local engine?"""
        return imageTag_contains(self._client.images.list(), self._tag)

    def image_pull(self) -> Image:
        """
        Pull the image; engine errors propagate to the caller.

        Returns:
            Pulled image.
        """
        logger.info(f"Downloading image {self._tag}")
        return self._client.images.pull(self._tag)

    def image_ensure(self, force_pull: bool = False) -> bool:
        """
        Pull the image when forced or not yet present.

        Args:
            force_pull: Pull even if the image exists locally.

        Returns:
            True if a pull happened.
        """
        if not force_pull and self.image_exists():
            logger.debug(f"Image {self._tag} present locally")
            return False
        self.image_pull()
        return True

    # =========================================================================
    # Container
    # =========================================================================

    def containerKwargs_build(
        self, display_name: str, command: Optional[list[str]] = None
    ) -> dict[str, Any]:
        """
        Arguments for containers.create shared by every strategy.

        Args:
            display_name: X11 display the container draws on.
            command: Optional command replacing the image default.

        Returns:
            Keyword arguments for `containers.create`.
        """
        devices = deviceMappings_build(devicePaths_find(self._config.device_globs))
        kwargs: dict[str, Any] = {
            "image": self._tag,
            "environment": [f"DISPLAY={display_name}"],
            "volumes": [self._config.x11_bind],
            "devices": devices,
            "privileged": True,
        }
        if command:
            kwargs["command"] = command
        return kwargs

    def containerDisplay_get(self, display_name: str) -> str:
        """Display a container created for these options draws on"""
        if self._options.hostDisplay_isUsed:
            return self._config.standalone_display
        return display_name

    def containerExisting_find(self, display_name: str) -> Optional[Container]:
        """
        Find a container, running or stopped, created from the image tag
        for the same display. Only the image and the DISPLAY entry of the
        container environment are compared.

        Args:
            display_name: Display chosen by the display session.

        Returns:
            Matching container or None.
        """
        wanted = f"DISPLAY={self.containerDisplay_get(display_name)}"
        for container in self._client.containers.list(all=True):
            container_config = container.attrs.get("Config") or {}
            image = container_config.get("Image") or container.attrs.get("Image")
            if image != self._tag:
                continue
            if wanted in (container_config.get("Env") or []):
                return container
            logger.debug(f"Container {container.short_id} uses another display, not reusing it")
        return None

    def containerFresh_create(self, display_name: str) -> Container:
        """
        Create a new container for the non-reattach strategy of the options.

        Args:
            display_name: X11 display the container draws on.

        Returns:
            Created container.
        """
        display_name = self.containerDisplay_get(display_name)
        if self._options.command:
            kwargs = self.containerKwargs_build(display_name, list(self._options.command))
        elif self._options.wayland:
            kwargs = self.containerKwargs_build(display_name, list(self._config.wayland_command))
        else:
            kwargs = self.containerKwargs_build(display_name)
        return self._client.containers.create(**kwargs)

    def container_obtain(self, display_name: str) -> Optional[Container]:
        """
        Obtain the container for this run.

        Args:
            display_name: Display chosen by the display session.

        Returns:
            Container, or None when reattach could not create one because
            the image is unknown to the engine.
        """
        if self._options.strategy is not ContainerStrategy.REATTACH:
            return self.containerFresh_create(display_name)

        existing = self.containerExisting_find(display_name)
        if existing is not None:
            logger.info(f"Reattaching to container {existing.short_id}")
            return existing
        try:
            return self.containerFresh_create(display_name)
        except ImageNotFound:
            logger.error(f"Could not find an image with tag {self._tag}")
            return None

    def container_wait(self, container: Container) -> str:
        """
        Poll the container state until it is no longer running.

        Unbounded; only the container stopping or the stop event
        ends the wait.

        Args:
            container: Started container.

        Returns:
            Last observed status.
        """
        interval = self._config.poll_interval_seconds
        while True:
            container.reload()
            status = container.status
            if status != "running":
                logger.debug(f"Container {container.short_id} is {status}")
                return status
            if self._stop_event.wait(interval):
                logger.info("Stop requested, no longer waiting for container")
                return status

    def container_cleanup(self, container: Container) -> None:
        """Remove the container unless options ask to keep it"""
        if not self._options.container_shouldDelete:
            logger.info(f"Keeping container {container.short_id}")
            return
        logger.info(f"Removing container {container.short_id}")
        try:
            container.remove(force=True)
        except NotFound:
            logger.debug(f"Container {container.short_id} already gone")

    def run(self, display_name: str) -> Optional[Container]:
        """
        Obtain, start and wait for the container, then clean up.

        Cleanup also runs when polling is interrupted. A reused container
        that is already running is only waited on, never started or removed.

        Args:
            display_name: Display chosen by the display session.

        Returns:
            The container that ran, or None if none could be obtained.
        """
        container = self.container_obtain(display_name)
        if container is None:
            return None

        # A reused container that is already running belongs to another run
        already_running = container.status == "running"
        try:
            if already_running:
                logger.info(f"Container {container.short_id} is already running, waiting on it")
            else:
                logger.info(f"Starting container {container.short_id} from {self._tag}")
                container.start()
            status = self.container_wait(container)
            logger.info(f"Container {container.short_id} finished ({status})")
        finally:
            if already_running:
                logger.info(f"Leaving container {container.short_id} to the run that started it")
            else:
                self.container_cleanup(container)
        return container
