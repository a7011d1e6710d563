"""PATH based executable lookup"""

from __future__ import annotations

import os
import stat
import sys
from typing import Mapping, Optional

__all__ = ["Executable", "installed"]

FORCE_WINDOWS_ENV = "NEONDOCKER_FORCE_WINDOWS"


class Executable:
    """Finds an executable by scanning PATH.

    Honors PATHEXT, so find() for 'gpg2' resolves gpg2 on POSIX and
    gpg2.exe on Windows. Shared with the releaseme tooling; keep both
    copies in sync.
    """

    def __init__(self, bin: str, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Initialize executable lookup.

        Args:
            bin: Command name without extension.
            environ: Environment to read PATH/PATHEXT from, os.environ by default.
        """
        self.bin: str = bin
        self._environ: Mapping[str, str] = os.environ if environ is None else environ

    def find(self) -> Optional[str]:
        """
        Resolve the command to an absolute path.

        Every PATH entry is joined with the command name plus each PATHEXT
        suffix in order before moving on to the next entry.

        Returns:
            Path of the first existing executable file, or None.
        """
        exts = [ext for ext in self._environ.get("PATHEXT", "").split(";") if ext]
        # The bare name is always the last candidate
        exts.append("")

        for path in self._environ.get("PATH", "").split(os.pathsep):
            path = self.path_unescape(path)
            for ext in exts:
                file = os.path.join(path, self.bin + ext)
                if self.executable_check(file):
                    return file

        return None

    def windows_check(self) -> bool:
        """True on Windows, or when forced through NEONDOCKER_FORCE_WINDOWS"""
        if self._environ.get(FORCE_WINDOWS_ENV):
            return True
        return sys.platform in ("win32", "cygwin", "msys")

    @staticmethod
    def executable_check(path: str) -> bool:
        """
        Check that path is a regular file the current user may execute.

        Args:
            path: Candidate file path.

        Returns:
            True if stat succeeds, the file is regular and executable.
        """
        try:
            st = os.stat(path)
        except OSError:
            return False
        return stat.S_ISREG(st.st_mode) and os.access(path, os.X_OK)

    def path_unescape(self, path: str) -> str:
        """
        Strip one layer of surrounding double quotes on Windows.

        POSIX defines no quoting for PATH, so quotes there are part of the
        directory name and must be kept.

        Args:
            path: Raw PATH entry.

        Returns:
            Directory to search.
        """
        if self.windows_check() and len(path) >= 2 and path[0] == '"' and path[-1] == '"':
            return path[1:-1]
        return path


def installed(command: str) -> Optional[str]:
    """Path of command if it is installed, else None"""
    return Executable(command).find()
