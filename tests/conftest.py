"""Shared fixtures."""

import asyncio

import pytest

from vantageconnect.config import ControllerConfig
from vantageconnect.transport.mock import MockTransport


@pytest.fixture
def config(tmp_path):
    """Configuration with fast timers and the backup copy under tmp_path."""
    return ControllerConfig(
        host="192.168.1.100",
        reconnect_delay=0.01,
        discovery_timeout=1.0,
        response_timeout=1.0,
        backup_path=tmp_path / "vantage_backup.xml",
    )


@pytest.fixture
def auth_config(tmp_path):
    """Configuration with login credentials."""
    return ControllerConfig(
        host="192.168.1.100",
        username="admin",
        password="secret",
        reconnect_delay=0.01,
        discovery_timeout=1.0,
        response_timeout=1.0,
        backup_path=tmp_path / "vantage_backup.xml",
    )


@pytest.fixture
def mock_transport():
    """Create a MockTransport instance."""
    return MockTransport()


@pytest.fixture
def wait_until():
    """Poll a condition until it holds or the timeout expires."""

    async def _wait_until(condition, timeout=2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not condition():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.005)

    return _wait_until
