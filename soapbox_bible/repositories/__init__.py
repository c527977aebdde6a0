"""Repository modules for database operations.

All repository classes are re-exported here for convenient imports.
"""
from soapbox_bible.repositories.verse import VerseRepository

__all__ = [
    "VerseRepository",
]
