"""
Pytest Configuration for collector_context
==========================================

Root conftest.py - automatic markers and shared fixtures that keep the
thread-bound context and the class-level default settings clean between
tests.
"""

import logging

import pytest

from collector_context import (CollectorContext, CollectorSettings,
                               LoggingSettings, ThreadInfo)
from collector_context import logger as collector_logger
from collector_context.logger import PACKAGE_LOGGER


def pytest_collection_modifyitems(config, items):
    """Automatically add markers based on test location."""
    for item in items:
        if "/unit/" in item.nodeid:
            item.add_marker(pytest.mark.unit)
            item.add_marker(pytest.mark.fast)  # Unit tests are fast by default

        if "thread" in item.nodeid.lower():
            item.add_marker(pytest.mark.threading)
        if "config" in item.nodeid.lower():
            item.add_marker(pytest.mark.config)


@pytest.fixture(autouse=True)
def clean_thread_state(monkeypatch):
    """Drop the thread-bound context and restore default settings around each test."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    ThreadInfo.clear()
    CollectorContext.configure_defaults(CollectorSettings())
    monkeypatch.setattr(collector_logger, "_default_settings", LoggingSettings())
    yield
    ThreadInfo.clear()
    CollectorContext.configure_defaults(CollectorSettings())
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def context():
    """Provide a fresh, explicitly constructed context."""
    return CollectorContext()


@pytest.fixture
def strict_context():
    """Provide a context with strict mode enabled."""
    return CollectorContext(CollectorSettings(strict=True))
