"""API routes for Bible verse retrieval."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from soapbox_bible.canon import BIBLE_BOOKS, VERSE_COUNTS
from soapbox_bible.models.schemas import (
    BookInfo,
    SearchResponse,
    StatsResponse,
    TopicSearchResponse,
    TranslationInfo,
    VerseResponse,
)
from soapbox_bible.services.verse_service import VerseService, get_verse_service, normalize_topics
from soapbox_bible.translations import TRANSLATIONS

router = APIRouter(prefix="/api/bible", tags=["bible"])


@router.get("/verse", response_model=VerseResponse)
async def fetch_verse(
    ref: str = Query(..., description="Scripture reference, e.g. 'John 3:16'"),
    translation: Optional[str] = Query(None, description="Translation code, e.g. 'NIV'"),
    service: VerseService = Depends(get_verse_service),
):
    """Fetch a verse, creating a placeholder record if none is stored yet."""
    return service.get_verse_by_reference(ref, translation)


@router.get("/search", response_model=SearchResponse)
async def search_verses(
    q: str = Query(..., min_length=1, description="Text to look for in verse text, reference or book"),
    translation: Optional[str] = Query(None),
    limit: int = Query(20, description="Maximum number of results (clamped to 1..100)"),
    service: VerseService = Depends(get_verse_service),
):
    results = service.search_verses(q, translation, limit)
    return SearchResponse(
        query=q.strip(),
        translation=results[0].translation if results else service.resolve_translation(translation),
        count=len(results),
        results=results,
    )


@router.get("/topics", response_model=TopicSearchResponse)
async def verses_by_topic(
    topic: List[str] = Query(..., description="Topic tag; repeat to match any of several"),
    translation: Optional[str] = Query(None),
    limit: int = Query(10, description="Maximum number of results (clamped to 1..100)"),
    service: VerseService = Depends(get_verse_service),
):
    results = service.search_by_topic(topic, translation, limit)
    return TopicSearchResponse(
        topics=normalize_topics(topic),
        translation=results[0].translation if results else service.resolve_translation(translation),
        count=len(results),
        results=results,
    )


@router.get("/random", response_model=VerseResponse)
async def random_verse(
    translation: Optional[str] = Query(None),
    service: VerseService = Depends(get_verse_service),
):
    return service.get_random_verse(translation)


@router.get("/translations", response_model=List[TranslationInfo])
async def list_translations():
    return [
        TranslationInfo(code=t.code, name=t.name, year=t.year, style=t.style)
        for t in sorted(TRANSLATIONS, key=lambda t: t.sort_order)
    ]


@router.get("/books", response_model=List[BookInfo])
async def list_books():
    return [
        BookInfo(
            name=book.name,
            testament=book.testament,
            category=book.category,
            chapters=book.chapters,
            total_verses=book.total_verses,
            exact_verse_counts=book.name in VERSE_COUNTS,
        )
        for book in BIBLE_BOOKS
    ]


@router.get("/stats", response_model=StatsResponse)
async def verse_stats(service: VerseService = Depends(get_verse_service)):
    return service.get_stats()
