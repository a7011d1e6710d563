"""Unit tests for display sessions"""

import pytest

from fakes import FakeProcess, FakeRun
from neondocker.common.config import DisplayConfig
from neondocker.common.errors import ConfigurationError, ToolMissingError
from neondocker.display import session as session_module
from neondocker.display.session import HostAccessSession, NestedXServerSession, xdisplay_find


@pytest.fixture
def tools_installed(monkeypatch):
    """Resolve every tool to /usr/bin/<name>"""
    monkeypatch.setattr(session_module, "installed", lambda name: f"/usr/bin/{name}")


@pytest.fixture
def tools_missing(monkeypatch):
    """Resolve no tool at all"""
    monkeypatch.setattr(session_module, "installed", lambda name: None)


class TestXDisplayFind:
    """Test free display number scan"""

    def test_empty_directory(self, tmp_path):
        """Test display 0 is free when no sockets exist"""
        assert xdisplay_find(str(tmp_path)) == 0

    def test_missing_directory(self, tmp_path):
        """Test a missing socket directory means every display is free"""
        assert xdisplay_find(str(tmp_path / "absent")) == 0

    def test_skips_taken_numbers(self, tmp_path):
        """Test the first number without a socket is chosen"""
        for number in (0, 1, 3):
            (tmp_path / f"X{number}").touch()
        assert xdisplay_find(str(tmp_path)) == 2

    def test_all_taken_raises(self, tmp_path):
        """Test exhausting the range is a configuration error"""
        for number in range(3):
            (tmp_path / f"X{number}").touch()
        with pytest.raises(ConfigurationError, match="No free X display"):
            xdisplay_find(str(tmp_path), max_display=2)


class TestHostAccessSession:
    """Test xhost toggling around the callback"""

    def test_toggles_around_callback(self, tools_installed):
        """Test access is opened before and closed after the callback"""
        run = FakeRun()
        seen = []
        session = HostAccessSession(run_func=run)

        result = session.run(lambda: seen.append(list(run.calls)) or "done")

        assert result == "done"
        assert seen == [[["/usr/bin/xhost", "+"]]]
        assert run.calls == [["/usr/bin/xhost", "+"], ["/usr/bin/xhost", "-"]]

    def test_restores_access_when_callback_raises(self, tools_installed):
        """Test access control is restored even if the callback fails"""
        run = FakeRun()
        session = HostAccessSession(run_func=run)

        def failing():
            raise RuntimeError("container exploded")

        with pytest.raises(RuntimeError, match="container exploded"):
            session.run(failing)

        assert run.calls[-1] == ["/usr/bin/xhost", "-"]

    def test_missing_xhost_raises(self, tools_missing):
        """Test missing xhost fails before the callback runs"""
        run = FakeRun()
        called = []
        session = HostAccessSession(run_func=run)

        with pytest.raises(ToolMissingError, match="xhost is not installed"):
            session.run(lambda: called.append(True))

        assert called == []
        assert run.calls == []

    def test_display_name(self):
        """Test the host display name is exposed to the container"""
        assert HostAccessSession(display_name=":1").display_name == ":1"


class TestNestedXServerSession:
    """Test Xephyr lifecycle around the callback"""

    def _session(self, tmp_path, processes, ready_calls, ready=True):
        def popen(args):
            process = FakeProcess(args)
            processes.append(process)
            return process

        def ready_func(display_name, timeout, alive_func):
            ready_calls.append((display_name, timeout, alive_func()))
            return ready

        config = DisplayConfig(socket_dir=str(tmp_path), ready_timeout_seconds=0.5)
        return NestedXServerSession(config, popen_func=popen, ready_func=ready_func)

    def test_spawns_on_free_display_and_kills(self, tmp_path, tools_installed):
        """Test Xephyr runs on the first free display and is killed afterwards"""
        (tmp_path / "X0").touch()
        processes, ready_calls = [], []
        session = self._session(tmp_path, processes, ready_calls)

        result = session.run(lambda: session.display_name)

        assert result == ":1"
        assert processes[0].args == ["/usr/bin/Xephyr", "-screen", "1024x768", ":1"]
        assert ready_calls == [(":1", 0.5, True)]
        assert processes[0].killed == 1
        assert processes[0].waited == 1

    def test_kills_when_callback_raises(self, tmp_path, tools_installed):
        """Test the nested server never outlives a failing callback"""
        processes, ready_calls = [], []
        session = self._session(tmp_path, processes, ready_calls)

        def failing():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            session.run(failing)

        assert processes[0].killed == 1

    def test_kills_when_readiness_wait_raises(self, tmp_path, tools_installed):
        """Test Ctrl+C while waiting for Xephyr still kills and reaps it"""
        processes = []

        def popen(args):
            process = FakeProcess(args)
            processes.append(process)
            return process

        def ready_func(display_name, timeout, alive_func):
            raise KeyboardInterrupt

        called = []
        config = DisplayConfig(socket_dir=str(tmp_path))
        session = NestedXServerSession(config, popen_func=popen, ready_func=ready_func)

        with pytest.raises(KeyboardInterrupt):
            session.run(lambda: called.append(True))

        assert called == []
        assert processes[0].killed == 1
        assert processes[0].waited == 1

    def test_not_ready_continues(self, tmp_path, tools_installed, caplog):
        """Test a slow Xephyr only produces a warning"""
        processes, ready_calls = [], []
        session = self._session(tmp_path, processes, ready_calls, ready=False)

        assert session.run(lambda: "ran") == "ran"
        assert "not accepting connections" in caplog.text

    def test_missing_xephyr_raises(self, tmp_path, tools_missing):
        """Test missing Xephyr fails before spawning anything"""
        processes, ready_calls = [], []
        session = self._session(tmp_path, processes, ready_calls)

        with pytest.raises(ToolMissingError, match="Xephyr is not installed"):
            session.run(lambda: None)

        assert processes == []

    def test_display_number_is_stable(self, tmp_path):
        """Test the display number is chosen once per session"""
        session = NestedXServerSession(DisplayConfig(socket_dir=str(tmp_path)))
        first = session.display_name
        (tmp_path / "X0").touch()
        assert session.display_name == first == ":0"
