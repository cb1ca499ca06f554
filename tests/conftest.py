"""Shared test fixtures."""

from __future__ import annotations

import sys

import pytest

from mosh_launcher.config import AppConfig, ClientConfig, LoggingConfig, SessionConfig, SshConfig


@pytest.fixture
def app_config(tmp_path):
    """Create a test configuration."""
    return AppConfig(
        client=ClientConfig(path=""),
        ssh=SshConfig(command="ssh", server="mosh-server"),
        session=SessionConfig(port_range="60000:61000", predict="", no_init=False),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "test.log")),
    )


@pytest.fixture
def python_cmd():
    """sys.executable quoted for use as a command string."""
    return f'"{sys.executable}"'
