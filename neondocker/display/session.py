"""
Display sessions wrapping a container run.

Two modes exist. Host access mode opens the host X server with xhost for the
duration of the run. Nested mode starts Xephyr on the first free display
number and kills it afterwards.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, TypeVar

from neondocker.common.config import DisplayConfig
from neondocker.common.errors import ConfigurationError, ToolMissingError
from neondocker.display.readiness import displayReady_wait
from neondocker.host.executable import installed

logger = logging.getLogger(__name__)

__all__ = [
    "DisplaySession",
    "HostAccessSession",
    "NestedXServerSession",
    "xdisplay_find",
]

T = TypeVar("T")

XEPHYR_HINT = "apt install xserver-xephyr or similar"
XHOST_HINT = "apt install x11-xserver-utils or similar"


def xdisplay_find(socket_dir: str = "/tmp/.X11-unix", max_display: int = 1024) -> int:
    """
    Lowest display number without an X socket.

    Args:
        socket_dir: Directory holding X<n> sockets.
        max_display: Highest display number considered.

    Returns:
        Free display number.

    Raises:
        ConfigurationError: If every number up to max_display is taken
    """
    sockets = Path(socket_dir)
    for number in range(max_display + 1):
        if not (sockets / f"X{number}").exists():
            return number
    raise ConfigurationError(f"No free X display in {socket_dir} up to :{max_display}")


class DisplaySession:
    """Base class; subclasses set up a display around a callback"""

    display_name: Optional[str] = None

    def __enter__(self) -> "DisplaySession":
        self.session_start()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.session_stop()

    def session_start(self) -> None:
        raise NotImplementedError

    def session_stop(self) -> None:
        raise NotImplementedError

    def run(self, callback: Callable[[], T]) -> T:
        """
        Invoke callback with the display up, tearing it down afterwards.

        Args:
            callback: Work to run while the display is available.

        Returns:
            Callback result.
        """
        with self:
            return callback()


class HostAccessSession(DisplaySession):
    """Opens host X access control with xhost while the callback runs"""

    def __init__(
        self,
        run_func: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        display_name: str = ":0",
    ) -> None:
        """
        Initialize host access session.

        Args:
            run_func: subprocess.run compatible callable.
            display_name: Display the container connects to.
        """
        self._run = run_func
        self._xhost: Optional[str] = None
        self.display_name = display_name

    def session_start(self) -> None:
        """
        Disable host access control.

        Raises:
            ToolMissingError: If xhost is not installed
        """
        self._xhost = installed("xhost")
        if not self._xhost:
            raise ToolMissingError("xhost", XHOST_HINT)
        logger.debug("Opening host X server access")
        self._run([self._xhost, "+"])

    def session_stop(self) -> None:
        """Re-enable host access control"""
        if self._xhost is None:
            return
        logger.debug("Restoring host X server access control")
        self._run([self._xhost, "-"])
        self._xhost = None


class NestedXServerSession(DisplaySession):
    """Runs Xephyr on a free display while the callback runs"""

    def __init__(
        self,
        config: Optional[DisplayConfig] = None,
        popen_func: Callable[..., subprocess.Popen] = subprocess.Popen,
        ready_func: Callable[..., bool] = displayReady_wait,
    ) -> None:
        """
        Initialize nested server session.

        Args:
            config: Display settings, defaults when None.
            popen_func: subprocess.Popen compatible callable.
            ready_func: Readiness wait, see displayReady_wait.
        """
        self._config: DisplayConfig = config or DisplayConfig()
        self._popen = popen_func
        self._ready = ready_func
        self._process: Optional[subprocess.Popen] = None
        self._number: Optional[int] = None

    @property
    def display_number(self) -> int:
        """Display number chosen for Xephyr, picked once per session"""
        if self._number is None:
            self._number = xdisplay_find(self._config.socket_dir, self._config.max_display)
        return self._number

    @property
    def display_name(self) -> str:  # type: ignore[override]
        return f":{self.display_number}"

    def session_start(self) -> None:
        """
        Spawn Xephyr and wait for it to accept connections.

        Raises:
            ToolMissingError: If Xephyr is not installed
        """
        xephyr = installed("Xephyr")
        if not xephyr:
            raise ToolMissingError("Xephyr", XEPHYR_HINT)

        display_name = self.display_name
        logger.info(f"Starting Xephyr on display {display_name}")
        self._process = self._popen([xephyr, "-screen", self._config.screen, display_name])

        process = self._process
        # __exit__ does not run when __enter__ raises, so kill Xephyr here
        try:
            ready = self._ready(
                display_name,
                self._config.ready_timeout_seconds,
                alive_func=lambda: process.poll() is None,
            )
        except BaseException:
            self.session_stop()
            raise
        if not ready:
            logger.warning(f"Xephyr on {display_name} not accepting connections yet, continuing")

    def session_stop(self) -> None:
        """Kill Xephyr immediately, no graceful shutdown"""
        if self._process is None:
            return
        logger.debug(f"Killing Xephyr (pid {self._process.pid})")
        self._process.kill()
        self._process.wait()
        self._process = None
