"""Configuration for pytest."""
import random
import sys
import os

# Make the package importable without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from unittest.mock import Mock, MagicMock

from soapbox_bible.config import Settings
from soapbox_bible.seed import get_default_seed
from soapbox_bible.services.verse_text_provider import VerseTextProvider


@pytest.fixture
def settings():
    """Settings with defaults only, independent of the environment."""
    return Settings(
        database_url="",
        db_name="test_db",
        db_user="test_user",
        db_password="test_password",
        cache_enabled=False,
        population_batch_size=500,
        random_verse_min_popularity=7,
        default_translation="NIV",
        search_max_limit=100,
    )


@pytest.fixture
def provider():
    """Text provider with a seeded RNG so placeholder text is repeatable."""
    return VerseTextProvider(get_default_seed(), rng=random.Random(1234))


@pytest.fixture
def mock_database():
    """A Database stand-in whose connection() yields a mock connection.

    The cursor is reachable as ``mock_database.cursor`` and the connection as
    ``mock_database.conn``.
    """
    cursor = MagicMock()
    cursor.__enter__ = Mock(return_value=cursor)
    cursor.__exit__ = Mock(return_value=None)

    conn = MagicMock()
    conn.cursor.return_value = cursor

    database = MagicMock()
    database.connection.return_value.__enter__.return_value = conn
    database.connection.return_value.__exit__.return_value = None
    database.cursor = cursor
    database.conn = conn
    return database


def _make_row(**overrides):
    row = {
        "reference": "John 3:16",
        "book": "John",
        "chapter": 3,
        "verse": "16",
        "text": "For God so loved the world that he gave his one and only Son, ...",
        "translation": "NIV",
        "category": "Gospels",
        "topic_tags": ["love", "salvation"],
        "is_active": True,
        "popularity_score": 10,
        "is_authentic": True,
        "created_at": None,
        "updated_at": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_row():
    """Factory for database rows shaped like RealDictCursor results."""
    return _make_row
