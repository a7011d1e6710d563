"""Linux os-release file parsing

See https://www.freedesktop.org/software/systemd/man/os-release.html
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any, Optional, Sequence

from neondocker.common.settings import settings

__all__ = ["OSRelease", "OSReleaseNotFoundError"]


class OSReleaseNotFoundError(Exception):
    """No os-release file exists in the default locations"""


class OSRelease:
    """Key/value view of an os-release file.

    Values are shell-unescaped. ID_LIKE is returned as a list of strings.
    When running on systems that may lack the file check available()
    before reading values, otherwise OSReleaseNotFoundError is raised.
    """

    STRING_LISTS = ("ID_LIKE",)

    DEFAULTS = {
        "ID": "linux",
        "NAME": "Linux",
        "PRETTY_NAME": "Linux",
    }

    def __init__(self, paths: Optional[Sequence[str]] = None) -> None:
        """
        Initialize parser.

        Args:
            paths: Candidate files in lookup order, the standard locations by default.
        """
        self._paths: tuple[str, ...] = tuple(paths) if paths else settings.OS_RELEASE_PATHS
        self._data: Optional[dict[str, Any]] = None

    def available(self) -> bool:
        """True when an os-release file exists in one of the lookup paths"""
        try:
            self.defaultPath_get()
        except OSReleaseNotFoundError:
            return False
        return True

    def variable(self, key: str) -> bool:
        """True when key is defined (including os-release defaults)"""
        return key in self.data

    def value(self, key: str, default: Any = None) -> Any:
        """Value of key, or default"""
        return self.data.get(key, default)

    @property
    def data(self) -> dict[str, Any]:
        """Parsed variables, loaded on first access"""
        if self._data is None:
            self._data = self.load()
        return self._data

    def load(self, path: Optional[Path] = None) -> dict[str, Any]:
        """
        Parse an os-release file.

        Args:
            path: File to read, the first existing default path otherwise.

        Returns:
            Mapping of variable name to value.
        """
        if path is None:
            path = self.defaultPath_get()

        data: dict[str, Any] = dict(self.DEFAULTS)
        for line in Path(path).read_text().splitlines():
            # Drops leading and (non-standard) trailing comments
            line = line.split("#", 1)[0].strip()
            if not line or "=" not in line:
                continue
            key, value = self.line_parse(line)
            data[key] = value
        self._data = data
        return data

    def reset(self) -> None:
        """Forget parsed data so the next access re-reads the file"""
        self._data = None

    def line_parse(self, line: str) -> tuple[str, Any]:
        """
        Split a KEY=value line and unescape the value.

        Args:
            line: Non-empty, comment-free line.

        Returns:
            Tuple of (key, value).
        """
        key, raw = line.split("=", 1)
        if key in self.STRING_LISTS:
            # ID_LIKE is restricted to plain words, so unquoting once and
            # splitting again yields the list
            if raw.startswith('"'):
                raw = " ".join(shlex.split(raw))
            return key, shlex.split(raw)
        words = shlex.split(raw)
        return key, words[0] if words else ""

    def defaultPath_get(self) -> Path:
        """
        First existing file among the lookup paths.

        Raises:
            OSReleaseNotFoundError: If none exists
        """
        for candidate in self._paths:
            path = Path(candidate)
            if path.exists():
                return path
        raise OSReleaseNotFoundError(
            f"Could not find os-release file in default locations: {list(self._paths)}"
        )

    def ubuntuLike_check(self) -> bool:
        """True for Ubuntu and distributions derived from it"""
        if not self.available():
            return False
        return self.value("ID") == "ubuntu" or "ubuntu" in (self.value("ID_LIKE") or [])
