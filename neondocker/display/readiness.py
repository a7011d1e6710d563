"""Waiting for an X11 display to accept client connections"""

from __future__ import annotations

import logging
import time
from typing import Callable

from Xlib import display as xdisplay
from Xlib.error import DisplayError

logger = logging.getLogger(__name__)

__all__ = ["displayReady_wait"]


def displayReady_wait(
    display_name: str,
    timeout: float,
    interval: float = 0.1,
    alive_func: Callable[[], bool] = lambda: True,
) -> bool:
    """
    Wait until an X server accepts client connections on display_name.

    Args:
        display_name: X11 display name (e.g., ':1').
        timeout: Maximum seconds to wait.
        interval: Delay between connection attempts.
        alive_func: Returns False once the server process died, ending the wait.

    Returns:
        True if a connection succeeded within the timeout.
    """
    deadline = time.monotonic() + timeout
    while True:
        try:
            connection = xdisplay.Display(display_name)
        except (DisplayError, OSError) as e:
            logger.debug(f"Display {display_name} not ready: {e}")
        else:
            connection.close()
            logger.debug(f"Display {display_name} accepts connections")
            return True

        if not alive_func() or time.monotonic() >= deadline:
            return False
        time.sleep(interval)
