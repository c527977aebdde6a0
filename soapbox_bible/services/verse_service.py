"""Service for verse lookups, search and random selection."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

import psycopg2
from fastapi import Depends, Request

from soapbox_bible.canon import (
    format_reference,
    normalize_book_name,
    parse_reference,
    validate_chapter,
    validate_verse,
)
from soapbox_bible.config import Settings, get_settings
from soapbox_bible.database import Database
from soapbox_bible.models.schemas import VerseRecord
from soapbox_bible.repositories.verse import VerseRepository
from soapbox_bible.services.cache_service import CacheService
from soapbox_bible.services.verse_text_provider import VerseTextProvider
from soapbox_bible.translations import normalize_translation
from soapbox_bible.utils.exceptions import DatabaseError, ValidationError

LOGGER = logging.getLogger(__name__)

FALLBACK_REFERENCE = ("John", 3, "16")
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_TOPIC_LIMIT = 10


def normalize_topics(topics: Union[str, Sequence[str], None]) -> List[str]:
    """Lower-case, de-duplicated topic tags; at least one is required."""
    if isinstance(topics, str):
        topics = [topics]
    normalized: List[str] = []
    for topic in topics or []:
        tag = (topic or "").strip().lower()
        if tag and tag not in normalized:
            normalized.append(tag)
    if not normalized:
        raise ValidationError("At least one topic is required")
    return normalized


class VerseService:
    """Service class that encapsulates verse retrieval logic."""

    def __init__(
        self,
        repository: VerseRepository,
        provider: Optional[VerseTextProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.provider = provider or VerseTextProvider()
        self.settings = settings or get_settings()

    def resolve_translation(self, translation: Optional[str]) -> str:
        return normalize_translation(translation or self.settings.default_translation)

    def _clamp_limit(self, limit) -> int:
        try:
            limit = int(limit)
        except (TypeError, ValueError) as exc:
            raise ValidationError("limit must be an integer.") from exc
        return max(1, min(limit, self.settings.search_max_limit))

    def get_verse_instant(self, book: str, chapter, verse, translation: Optional[str] = None) -> VerseRecord:
        """Return the stored record, creating it on first lookup.

        A miss synthesizes the record, upserts it and returns what was stored,
        so this call writes to the database for keys not seen before.
        """
        book = normalize_book_name(book)
        chapter = validate_chapter(book, chapter)
        verse = validate_verse(book, chapter, verse)
        translation = self.resolve_translation(translation)
        reference = format_reference(book, chapter, verse)

        cached = CacheService.get_verse(reference, translation)
        if cached is not None:
            return VerseRecord(**cached)

        try:
            record = self.repository.get(reference, translation)
            if record is None:
                LOGGER.info("Verse %s (%s) not stored yet; creating it", reference, translation)
                record = self.repository.upsert(self.provider.build_record(book, chapter, verse, translation))
        except psycopg2.Error as exc:
            LOGGER.error("Database error retrieving verse '%s' (%s): %s", reference, translation, exc)
            raise DatabaseError("Failed to retrieve verse from database") from exc

        if record.is_authentic:
            CacheService.set_verse(reference, translation, record.model_dump())

        return record

    def get_verse_by_reference(self, reference: str, translation: Optional[str] = None) -> VerseRecord:
        book, chapter, verse = parse_reference(reference)
        return self.get_verse_instant(book, chapter, verse, translation)

    def search_verses(
        self,
        query: str,
        translation: Optional[str] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> List[VerseRecord]:
        """Case-insensitive substring search over text, reference and book."""
        if not query or not query.strip():
            raise ValidationError("Search query cannot be empty")

        query = query.strip()
        translation = self.resolve_translation(translation)
        limit = self._clamp_limit(limit)

        cached = CacheService.get_search(query, translation, limit)
        if cached is not None:
            return [VerseRecord(**item) for item in cached]

        try:
            results = self.repository.search(query, translation, limit)
        except psycopg2.Error as exc:
            LOGGER.error("Database error searching verses for '%s' (%s): %s", query, translation, exc)
            raise DatabaseError("Failed to search verses") from exc

        if results and all(record.is_authentic for record in results):
            CacheService.set_search(query, translation, limit, [record.model_dump() for record in results])

        return results

    def search_by_topic(
        self,
        topics: Union[str, Sequence[str]],
        translation: Optional[str] = None,
        limit: int = DEFAULT_TOPIC_LIMIT,
    ) -> List[VerseRecord]:
        """Verses tagged with any of ``topics``, most popular first."""
        normalized = normalize_topics(topics)
        translation = self.resolve_translation(translation)
        limit = self._clamp_limit(limit)
        try:
            return self.repository.by_topic(normalized, translation, limit)
        except psycopg2.Error as exc:
            LOGGER.error("Database error looking up topics %s (%s): %s", normalized, translation, exc)
            raise DatabaseError("Failed to look up verses by topic") from exc

    def get_random_verse(self, translation: Optional[str] = None) -> VerseRecord:
        translation = self.resolve_translation(translation)
        try:
            record = self.repository.random(translation, self.settings.random_verse_min_popularity)
        except psycopg2.Error as exc:
            LOGGER.error("Database error selecting random verse (%s): %s", translation, exc)
            raise DatabaseError("Failed to retrieve random verse") from exc

        if record is not None:
            return record

        LOGGER.info("No popular verses stored for %s; falling back to %s %s:%s", translation, *FALLBACK_REFERENCE)
        return self.get_verse_instant(*FALLBACK_REFERENCE, translation)

    def get_stats(self) -> dict:
        try:
            return {
                "total_verses": self.repository.count(),
                "placeholder_verses": self.repository.count_placeholders(),
                "by_translation": self.repository.count_by_translation(),
            }
        except psycopg2.Error as exc:
            LOGGER.error("Database error collecting verse statistics: %s", exc)
            raise DatabaseError("Failed to collect verse statistics") from exc


def get_database(request: Request) -> Database:
    """Dependency returning the storage handle opened at startup."""
    return request.app.state.database


def get_verse_service(database: Database = Depends(get_database)) -> VerseService:
    """Dependency injector for verse service."""
    return VerseService(VerseRepository(database))
