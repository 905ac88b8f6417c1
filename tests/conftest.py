"""Common test fixtures and configuration."""

import os

import pytest

from eventmanager import EventManager, EventManagerSettings

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"


@pytest.fixture
def settings():
    """Default settings independent of the host environment."""
    return EventManagerSettings()


@pytest.fixture
def manager(settings):
    """Fresh event manager per test."""
    return EventManager(settings)


@pytest.fixture
def calls():
    """Shared list handlers append to, in invocation order."""
    return []
