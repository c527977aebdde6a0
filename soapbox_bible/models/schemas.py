"""Pydantic models for verse records and API responses."""
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict


class VerseRecord(BaseModel):
    """One verse of one translation, as stored in ``bible_verses``."""
    reference: str = Field(..., description="Full verse reference, e.g. 'John 3:16'")
    book: str = Field(..., description="Canonical book name")
    chapter: int = Field(..., ge=1, description="Chapter number")
    verse: str = Field(..., min_length=1, description="Verse number or range, e.g. '16' or '6-7'")
    text: str = Field(..., min_length=1, description="Verse text")
    translation: str = Field(..., description="Translation code, e.g. 'NIV'")
    category: str = Field(..., description="Coarse theme label of the book")
    topic_tags: List[str] = Field(default_factory=list, description="Lowercase topic tags")
    is_active: bool = True
    popularity_score: int = Field(default=5, description="Ranking weight for search and random selection")
    is_authentic: bool = Field(default=False, description="False marks a synthesized placeholder text")

    @field_validator("topic_tags")
    @classmethod
    def _normalize_tags(cls, value: List[str]) -> List[str]:
        seen = []
        for tag in value or []:
            cleaned = tag.strip().lower()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        return seen

    @classmethod
    def from_row(cls, row: dict) -> "VerseRecord":
        return cls(
            reference=row["reference"],
            book=row["book"],
            chapter=row["chapter"],
            verse=str(row["verse"]),
            text=row["text"],
            translation=row["translation"],
            category=row["category"],
            topic_tags=list(row.get("topic_tags") or []),
            is_active=row.get("is_active", True),
            popularity_score=row.get("popularity_score", 5),
            is_authentic=row.get("is_authentic", False),
        )


class VerseResponse(VerseRecord):
    """Response model for single verse lookups."""


class SearchResponse(BaseModel):
    """Response model for verse search."""
    query: str
    translation: str
    count: int
    results: List[VerseRecord]


class TopicSearchResponse(BaseModel):
    """Response model for topic lookups."""
    topics: List[str]
    translation: str
    count: int
    results: List[VerseRecord]


class TranslationInfo(BaseModel):
    code: str
    name: str
    year: int
    style: str


class BookInfo(BaseModel):
    name: str
    testament: str
    category: str
    chapters: int
    total_verses: int
    exact_verse_counts: bool = Field(..., description="Whether per-chapter verse counts are exact")


class StatsResponse(BaseModel):
    """Row counts for the verse store."""
    total_verses: int
    placeholder_verses: int
    by_translation: Dict[str, int]


class HealthCheck(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    database: Optional[str] = None
    version: str = "1.0.0"
