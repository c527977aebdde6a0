"""Loader for the authored verse texts shipped with the package.

The asset is a single versioned JSON document::

    {
      "version": 1,
      "verses": {
        "John 3:16": {"popularity_score": 10, "topic_tags": [...], "texts": {"KJV": "...", ...}}
      },
      "high_priority_references": {"Romans 5:8": 9, ...}
    }

Every reference and translation code is validated when the file is loaded so
a bad edit fails fast instead of surfacing as a half-populated table.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from fastapi import HTTPException

from soapbox_bible.canon import format_reference, parse_reference, sort_key
from soapbox_bible.translations import TRANSLATION_LOOKUP
from soapbox_bible.utils.exceptions import SeedDataError

logger = logging.getLogger(__name__)

SUPPORTED_SEED_VERSIONS = (1,)
DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "data" / "authentic_verses.json"


@dataclass(frozen=True)
class SeedVerse:
    reference: str
    book: str
    chapter: int
    verse: str
    popularity_score: int
    topic_tags: Tuple[str, ...]
    texts: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthenticSeed:
    version: int
    verses: Dict[str, SeedVerse]
    high_priority: Dict[str, int]

    def get(self, reference: str) -> Optional[SeedVerse]:
        return self.verses.get(reference)

    def text_for(self, reference: str, translation: str) -> Optional[str]:
        entry = self.verses.get(reference)
        if entry is None:
            return None
        return entry.texts.get(translation)

    def popularity_for(self, reference: str) -> Optional[int]:
        entry = self.verses.get(reference)
        if entry is not None:
            return entry.popularity_score
        return self.high_priority.get(reference)

    def high_priority_keys(self) -> List[Tuple[str, int, str]]:
        """Authored references plus the curated list, in canonical order."""
        keys = {}
        for entry in self.verses.values():
            keys[entry.reference] = (entry.book, entry.chapter, entry.verse)
        for reference in self.high_priority:
            if reference not in keys:
                keys[reference] = parse_reference(reference)
        return sorted(keys.values(), key=lambda key: sort_key(*key))

    @property
    def text_count(self) -> int:
        return sum(len(entry.texts) for entry in self.verses.values())


def _canonical_reference(raw: str) -> Tuple[str, int, str]:
    try:
        book, chapter, verse = parse_reference(raw)
    except HTTPException as exc:
        raise SeedDataError(f"Invalid seed reference '{raw}': {exc.detail}") from exc

    canonical = format_reference(book, chapter, verse)
    if canonical != raw:
        raise SeedDataError(f"Seed reference '{raw}' must be written as '{canonical}'")
    return book, chapter, verse


def parse_seed(document: dict) -> AuthenticSeed:
    """Validate a decoded seed document and build an :class:`AuthenticSeed`."""
    if not isinstance(document, dict):
        raise SeedDataError("Seed document must be a JSON object")

    version = document.get("version")
    if version not in SUPPORTED_SEED_VERSIONS:
        raise SeedDataError(f"Unsupported seed version: {version!r}")

    verses: Dict[str, SeedVerse] = {}
    for reference, payload in (document.get("verses") or {}).items():
        book, chapter, verse = _canonical_reference(reference)

        texts = payload.get("texts") or {}
        if not texts:
            raise SeedDataError(f"Seed entry '{reference}' has no texts")
        for code, text in texts.items():
            if code not in TRANSLATION_LOOKUP:
                raise SeedDataError(f"Seed entry '{reference}' uses unknown translation '{code}'")
            if not isinstance(text, str) or not text.strip():
                raise SeedDataError(f"Seed entry '{reference}' has empty {code} text")

        score = payload.get("popularity_score", 5)
        if not isinstance(score, int):
            raise SeedDataError(f"Seed entry '{reference}' has a non-integer popularity_score")

        verses[reference] = SeedVerse(
            reference=reference,
            book=book,
            chapter=chapter,
            verse=verse,
            popularity_score=score,
            topic_tags=tuple(tag.lower() for tag in payload.get("topic_tags") or []),
            texts={code: text.strip() for code, text in texts.items()},
        )

    high_priority: Dict[str, int] = {}
    for reference, score in (document.get("high_priority_references") or {}).items():
        _canonical_reference(reference)
        if not isinstance(score, int):
            raise SeedDataError(f"High-priority reference '{reference}' has a non-integer score")
        high_priority[reference] = score

    return AuthenticSeed(version=version, verses=verses, high_priority=high_priority)


def load_seed(path: Optional[Union[str, Path]] = None) -> AuthenticSeed:
    """Read and validate the seed file at ``path`` (defaults to the packaged asset)."""
    seed_path = Path(path) if path else DEFAULT_SEED_PATH
    try:
        with open(seed_path, "r", encoding="utf-8") as handle:
            document = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SeedDataError(f"Seed file {seed_path} is not valid JSON: {exc}") from exc

    seed = parse_seed(document)
    logger.info(
        "Loaded authentic seed v%s: %s references, %s texts, %s high-priority references",
        seed.version,
        len(seed.verses),
        seed.text_count,
        len(seed.high_priority),
    )
    return seed


@lru_cache(maxsize=1)
def get_default_seed() -> AuthenticSeed:
    return load_seed()
