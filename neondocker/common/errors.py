"""Error taxonomy surfaced to the user"""

from __future__ import annotations

__all__ = [
    "NeonDockerError",
    "ConfigurationError",
    "EngineUnavailableError",
    "ToolMissingError",
    "DependencyError",
]


class NeonDockerError(Exception):
    """Base class for failures that end the run with exit code 1"""


class ConfigurationError(NeonDockerError):
    """Invalid options or configuration file"""


class EngineUnavailableError(NeonDockerError):
    """Docker engine could not be reached"""


class ToolMissingError(NeonDockerError):
    """A required host executable is not installed"""

    def __init__(self, tool: str, hint: str) -> None:
        """
        Initialize missing tool error.

        Args:
            tool: Executable name that could not be resolved.
            hint: Install suggestion shown to the user.
        """
        super().__init__(f"{tool} is not installed, {hint}")
        self.tool: str = tool
        self.hint: str = hint


class DependencyError(NeonDockerError):
    """First-run dependency setup failed or was declined"""
