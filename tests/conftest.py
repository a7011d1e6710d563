"""Pytest configuration and shared fixtures for neondocker tests

This module provides common fixtures and fakes used across the unit tests.
None of them talk to a real Docker engine or X server.
"""

import logging
import os
from pathlib import Path

import pytest

from neondocker.common.config import Config


@pytest.fixture
def sample_config(tmp_path) -> Config:
    """Default config with sockets and devices redirected into tmp_path

    Returns:
        Config object with test values
    """
    config = Config()
    config.display.socket_dir = str(tmp_path / "x11")
    config.display.ready_timeout_seconds = 0.0
    config.container.poll_interval_seconds = 0.0
    config.container.device_globs = [str(tmp_path / "dev" / "dri" / "*")]
    (tmp_path / "x11").mkdir()
    return config


@pytest.fixture
def executable_factory(tmp_path):
    """Create files in tmp_path directories, executable unless told otherwise"""

    def _create(directory: str, name: str, executable: bool = True) -> Path:
        path = tmp_path / directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n")
        os.chmod(path, 0o755 if executable else 0o644)
        return path

    return _create


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)


# Markers for test organization
def pytest_configure(config) -> None:
    """Register custom pytest markers used by this test suite."""
    config.addinivalue_line("markers", "requires_docker: mark test as requiring a Docker engine")
