"""Common types and data structures for neondocker"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Edition(Enum):
    """KDE neon editions published as Docker image tags"""
    USER_LTS = "user-lts"
    USER = "user"
    TESTING = "testing"
    DEV_STABLE = "dev-stable"
    DEV_UNSTABLE = "dev-unstable"

    @classmethod
    def names_list(cls) -> list[str]:
        """Edition tag strings in declaration order"""
        return [edition.value for edition in cls]


class ContainerStrategy(Enum):
    """How the container for a run is obtained"""
    REATTACH = "reattach"      # Reuse a container built from the same image
    STANDALONE = "standalone"  # Single application on the host display
    WAYLAND = "wayland"        # Plasma Wayland session on the host display
    SESSION = "session"        # Full Plasma X11 session inside Xephyr


@dataclass(frozen=True)
class Options:
    """Parsed command-line options, immutable for the whole run"""
    edition: Edition
    pull: bool = False
    all: bool = False
    keep_alive: bool = False
    reattach: bool = False
    always_new: bool = False
    wayland: bool = False
    command: tuple[str, ...] = field(default_factory=tuple)

    @property
    def strategy(self) -> ContainerStrategy:
        """
        Select container strategy from the option combination.

        A standalone command always gets a fresh container, so it takes
        precedence over reattach.

        Returns:
            Strategy used to obtain the container.
        """
        if self.command:
            return ContainerStrategy.STANDALONE
        if self.reattach and not self.always_new:
            return ContainerStrategy.REATTACH
        if self.wayland:
            return ContainerStrategy.WAYLAND
        return ContainerStrategy.SESSION

    @property
    def hostDisplay_isUsed(self) -> bool:
        """True when the container draws on the host display instead of Xephyr"""
        return bool(self.command) or self.wayland

    @property
    def container_shouldDelete(self) -> bool:
        """Reattach always cleans up to avoid piling up duplicate containers"""
        return self.reattach or not self.keep_alive
