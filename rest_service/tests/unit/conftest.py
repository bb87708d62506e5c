# rest_service/tests/unit/conftest.py
"""Unit test fixtures - no database, no external services."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_session():
    """Create mock async database session bound to a SQLite dialect."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.get_bind = MagicMock()
    session.get_bind.return_value.dialect.name = "sqlite"
    return session
