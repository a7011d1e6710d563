"""Display sessions hosting the containerized desktop."""

from neondocker.display.session import (
    DisplaySession,
    HostAccessSession,
    NestedXServerSession,
    xdisplay_find,
)

__all__ = [
    "DisplaySession",
    "HostAccessSession",
    "NestedXServerSession",
    "xdisplay_find",
]
