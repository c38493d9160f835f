"""
Shared pytest fixtures for procwrap tests.

Settings and the shared bottleneck are process-wide caches; they are reset
around every test so environment tweaks (capacity, service name) don't leak.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from procwrap.resilience.bottleneck import shared_bottleneck
from procwrap.settings import get_settings


@pytest.fixture(autouse=True)
def reset_process_caches():
    get_settings.cache_clear()
    shared_bottleneck.cache_clear()
    yield
    get_settings.cache_clear()
    shared_bottleneck.cache_clear()


@pytest.fixture
def mock_log():
    """Logger double exposing the structured log methods."""
    return Mock(spec=["debug", "info", "warning", "error"])


@pytest.fixture
def log_context(mock_log):
    return SimpleNamespace(log=mock_log)


@pytest.fixture
def release():
    """Event a blocked procedure waits on; set it to let the procedure finish."""
    return asyncio.Event()
