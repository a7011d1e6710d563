"""
First-run dependency setup for Debian/Ubuntu hosts.

Installs missing system packages and grants the user Docker socket access,
re-executing the tool inside the docker group when needed.
"""

from __future__ import annotations

import getpass
import grp
import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from neondocker.common.errors import DependencyError
from neondocker.common.settings import settings
from neondocker.host.executable import Executable, installed

__all__ = ["DebDependencies", "GroupDependencies", "DependencyJiggler"]

logger = logging.getLogger(__name__)


class DebDependencies:
    """Installs docker.io and xserver-xephyr through PackageKit"""

    def __init__(
        self,
        run_func: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        socket_path: Optional[str] = None,
    ) -> None:
        """
        Initialize package installer.

        Args:
            run_func: subprocess.run compatible callable.
            socket_path: Docker socket location, the standard one by default.
        """
        self._run = run_func
        self._socket_path: str = socket_path or settings.DOCKER_SOCKET

    def packages_missing(self) -> list[str]:
        """Debian packages that still need installing"""
        packages: list[str] = []
        if not Path(self._socket_path).exists():
            packages.append("docker.io")
        if not installed("Xephyr"):
            packages.append("xserver-xephyr")
        return packages

    def run(self) -> None:
        """
        Install missing packages.

        Raises:
            DependencyError: If pkcon fails
        """
        packages = self.packages_missing()
        if not packages:
            return

        logger.warning("Some packages need installing to use neondocker...")
        result = self._run(["pkcon", "install", *packages])
        if result.returncode != 0:
            raise DependencyError(f"Installing {', '.join(packages)} failed")


class GroupDependencies:
    """Puts the user into the docker group and re-executes under it"""

    def __init__(
        self,
        argv: Optional[Sequence[str]] = None,
        run_func: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        exec_func: Callable[[str, list[str]], None] = os.execvp,
        input_func: Callable[[str], str] = input,
    ) -> None:
        """
        Initialize group helper.

        Args:
            argv: Command line to re-execute, sys.argv by default.
            run_func: subprocess.run compatible callable.
            exec_func: os.execvp compatible callable.
            input_func: Prompt reader.
        """
        self._argv: list[str] = list(argv) if argv is not None else list(sys.argv)
        self._run = run_func
        self._exec = exec_func
        self._input = input_func

    def run(self) -> None:
        """
        Ensure docker socket access, re-executing when group membership changed.

        Raises:
            DependencyError: If the user declines or adduser fails
        """
        # root always has access
        if os.getuid() == 0:
            return
        gid = self.dockerGid_get()
        if gid is not None and gid in os.getgroups():
            return

        if not self.userInGroup_check():
            self.adduser_confirm()
            result = self._run(["pkexec", "adduser", self.login_get(), settings.DOCKER_GROUP])
            if result.returncode != 0:
                raise DependencyError(f"Adding user to group {settings.DOCKER_GROUP} failed")

        print("...reexecuting with docker access...")
        command = shlex.join(self.reexecCommand_build())
        self._exec("sg", ["sg", settings.DOCKER_GROUP, "-c", command])

    def reexecCommand_build(self) -> list[str]:
        """
        Command line that starts this run again.

        argv[0] is the installed script for normal launches. Under
        `python -m neondocker.cli` it is the path of cli.py, which is not
        executable, so the current interpreter runs the module instead.

        Returns:
            Argument list for the re-executed process.
        """
        program = self._argv[0] if self._argv else ""
        if program and Executable.executable_check(program):
            return list(self._argv)
        return [sys.executable, "-m", "neondocker.cli", *self._argv[1:]]

    @staticmethod
    def login_get() -> str:
        """Name of the user running the tool"""
        try:
            return os.getlogin()
        except OSError:
            return getpass.getuser()

    def userInGroup_check(self) -> bool:
        """True when the login user is listed as a docker group member"""
        try:
            group = grp.getgrnam(settings.DOCKER_GROUP)
        except KeyError:
            return False
        return self.login_get() in group.gr_mem

    @staticmethod
    def dockerGid_get() -> Optional[int]:
        """Numeric id of the docker group, None if it does not exist"""
        try:
            return grp.getgrnam(settings.DOCKER_GROUP).gr_gid
        except KeyError:
            return None

    def adduser_confirm(self) -> None:
        """
        Ask whether the user should be given socket access.

        Raises:
            DependencyError: If the user answers no
        """
        while True:
            answer = self._input(
                "You currently do not have access to the docker socket. Do you want to\n"
                "give this user access? [Y/n] "
            ).strip().lower()
            if answer == "n":
                raise DependencyError(
                    "Without socket access you need to use pkexec or sudo to run neondocker"
                )
            if answer in ("y", ""):
                return


class DependencyJiggler:
    """Jiggles dependencies into place"""

    def __init__(
        self,
        deb: Optional[DebDependencies] = None,
        group: Optional[GroupDependencies] = None,
    ) -> None:
        self._steps = [deb or DebDependencies(), group or GroupDependencies()]

    def run(self) -> None:
        """Run every dependency step in order"""
        if os.environ.get(settings.REEXEC_ENV):
            logger.debug("Re-executed run, skipping dependency setup")
            return
        os.environ[settings.REEXEC_ENV] = "1"
        for step in self._steps:
            step.run()
