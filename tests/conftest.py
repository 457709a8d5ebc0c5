"""Pytest fixtures for service-requester tests."""

import pytest
from helpers import RecordingLogger, RecordingTransport

from core.config import Config, LoggingSettings


@pytest.fixture
def config(tmp_path):
    """Config that logs under tmp_path and keeps the console quiet."""
    return Config(logging=LoggingSettings(log_root=tmp_path / "logs", console=False))


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def client(transport):
    with transport.client() as client:
        yield client
