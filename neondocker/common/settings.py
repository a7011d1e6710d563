"""Application settings singleton - fixed constants shared across modules

Runtime configuration lives in the Config object returned by ConfigLoader and
is passed explicitly to the code that needs it. This module only holds values
that never change between runs (edition list, docker group, os-release
locations).

Usage:
    from neondocker.common.settings import settings

    if group_name == settings.DOCKER_GROUP:
        ...
"""

from __future__ import annotations

from typing import Optional

from neondocker.common.types import Edition


class Settings:
    """Singleton holding fixed constants"""

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    # =========================================================================
    # Image Constants
    # =========================================================================

    EDITIONS: tuple[str, ...] = tuple(Edition.names_list())
    """Valid values for --edition, in the order shown to the user"""

    IMAGE_FAMILY_ALL: str = "all"
    """Image family carrying every KDE application"""

    IMAGE_FAMILY_PLASMA: str = "plasma"
    """Minimal image family with just the Plasma desktop"""

    # =========================================================================
    # Host Constants
    # =========================================================================

    DOCKER_GROUP: str = "docker"
    """Group granting access to the Docker socket"""

    DOCKER_SOCKET: str = "/var/run/docker.sock"
    """Socket whose absence means the engine package is not installed"""

    OS_RELEASE_PATHS: tuple[str, ...] = ("/etc/os-release", "/usr/lib/os-release")
    """os-release locations in lookup order"""

    REEXEC_ENV: str = "NEONDOCKER_REEXEC"
    """Set when the tool re-executes itself after dependency setup"""


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from neondocker.common.settings import settings
"""
