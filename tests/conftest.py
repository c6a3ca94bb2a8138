"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from database.uow import matching_uow
from tests import make_session_factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def session_factory():
    """Sessionmaker bound to a fresh in-memory SQLite database."""
    return make_session_factory()


@pytest.fixture
def uow(session_factory):
    """``matching_uow`` bound to the test database."""
    def factory():
        return matching_uow(session_factory)
    return factory
