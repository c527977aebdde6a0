"""Persistence for verse records in the ``bible_verses`` table."""
import logging
from typing import Dict, Iterable, List, Optional

from psycopg2.extras import execute_values

from soapbox_bible.canon import BOOK_NAMES
from soapbox_bible.database import Database
from soapbox_bible.models.schemas import VerseRecord

logger = logging.getLogger(__name__)

COLUMNS = (
    "reference",
    "book",
    "chapter",
    "verse",
    "text",
    "translation",
    "category",
    "topic_tags",
    "is_active",
    "popularity_score",
    "is_authentic",
)

_INSERT_COLUMNS = ", ".join(COLUMNS)
_VALUES_TEMPLATE = "(%s, %s, %s, %s, %s, %s, %s, %s::text[], %s, %s, %s)"

# Authentic rows are never overwritten by placeholders.
_UPSERT_TAIL = """
    ON CONFLICT (reference, translation) DO UPDATE SET
        book = EXCLUDED.book,
        chapter = EXCLUDED.chapter,
        verse = EXCLUDED.verse,
        text = EXCLUDED.text,
        category = EXCLUDED.category,
        topic_tags = EXCLUDED.topic_tags,
        is_active = EXCLUDED.is_active,
        popularity_score = EXCLUDED.popularity_score,
        is_authentic = EXCLUDED.is_authentic,
        updated_at = NOW()
    WHERE bible_verses.is_authentic = FALSE OR EXCLUDED.is_authentic = TRUE
"""

_SELECT_COLUMNS = f"{_INSERT_COLUMNS}, created_at, updated_at"

# Takes the canonical book list as its one parameter.
_CANONICAL_ORDER = """
    ORDER BY popularity_score DESC,
             array_position(%s::text[], book),
             chapter,
             split_part(verse, '-', 1)::int
"""


def _row_values(record: VerseRecord) -> tuple:
    return (
        record.reference,
        record.book,
        record.chapter,
        record.verse,
        record.text,
        record.translation,
        record.category,
        list(record.topic_tags),
        record.is_active,
        record.popularity_score,
        record.is_authentic,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class VerseRepository:
    """Reads and idempotent writes keyed on ``(reference, translation)``."""

    def __init__(self, database: Database):
        self.database = database

    def get(self, reference: str, translation: str) -> Optional[VerseRecord]:
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM bible_verses
                    WHERE reference = %s AND translation = %s
                    LIMIT 1
                    """,
                    (reference, translation),
                )
                row = cur.fetchone()
        return VerseRecord.from_row(row) if row else None

    def upsert(self, record: VerseRecord) -> VerseRecord:
        """Insert or update one record and return what is stored afterwards."""
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO bible_verses ({_INSERT_COLUMNS})
                    VALUES {_VALUES_TEMPLATE}
                    {_UPSERT_TAIL}
                    RETURNING {_SELECT_COLUMNS}
                    """,
                    _row_values(record),
                )
                row = cur.fetchone()
                if row is None:
                    # Update skipped: an authentic row already holds this key.
                    cur.execute(
                        f"""
                        SELECT {_SELECT_COLUMNS}
                        FROM bible_verses
                        WHERE reference = %s AND translation = %s
                        """,
                        (record.reference, record.translation),
                    )
                    row = cur.fetchone()
            conn.commit()
        return VerseRecord.from_row(row)

    def upsert_many(self, records: Iterable[VerseRecord], page_size: int = 500) -> int:
        """Upsert a batch in one transaction. Returns the number of rows sent."""
        # ON CONFLICT cannot touch the same row twice in one statement.
        unique: Dict[tuple, VerseRecord] = {}
        for record in records:
            unique[(record.reference, record.translation)] = record
        if not unique:
            return 0

        with self.database.connection() as conn:
            with conn.cursor() as cur:
                execute_values(
                    cur,
                    f"INSERT INTO bible_verses ({_INSERT_COLUMNS}) VALUES %s {_UPSERT_TAIL}",
                    [_row_values(record) for record in unique.values()],
                    template=_VALUES_TEMPLATE,
                    page_size=page_size,
                )
            conn.commit()
        return len(unique)

    def search(self, query: str, translation: str, limit: int) -> List[VerseRecord]:
        pattern = f"%{_escape_like(query)}%"
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM bible_verses
                    WHERE translation = %s
                      AND is_active = TRUE
                      AND (text ILIKE %s OR reference ILIKE %s OR book ILIKE %s)
                    {_CANONICAL_ORDER}
                    LIMIT %s
                    """,
                    (translation, pattern, pattern, pattern, BOOK_NAMES, limit),
                )
                rows = cur.fetchall()
        return [VerseRecord.from_row(row) for row in rows]

    def by_topic(self, topics: List[str], translation: str, limit: int) -> List[VerseRecord]:
        """Rows tagged with any of ``topics`` (lower-case tags)."""
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM bible_verses
                    WHERE translation = %s
                      AND is_active = TRUE
                      AND topic_tags && %s::text[]
                    {_CANONICAL_ORDER}
                    LIMIT %s
                    """,
                    (translation, list(topics), BOOK_NAMES, limit),
                )
                rows = cur.fetchall()
        return [VerseRecord.from_row(row) for row in rows]

    def random(self, translation: str, min_popularity: int) -> Optional[VerseRecord]:
        """Pick a popular verse, preferring authored text over placeholders."""
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM bible_verses
                    WHERE translation = %s
                      AND is_active = TRUE
                      AND popularity_score > %s
                    ORDER BY is_authentic DESC, random()
                    LIMIT 1
                    """,
                    (translation, min_popularity),
                )
                row = cur.fetchone()
        return VerseRecord.from_row(row) if row else None

    def count(self, translation: Optional[str] = None) -> int:
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                if translation:
                    cur.execute(
                        "SELECT COUNT(*) AS total FROM bible_verses WHERE translation = %s",
                        (translation,),
                    )
                else:
                    cur.execute("SELECT COUNT(*) AS total FROM bible_verses")
                row = cur.fetchone()
        return int(row["total"]) if row else 0

    def count_by_translation(self) -> Dict[str, int]:
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT translation, COUNT(*) AS total
                    FROM bible_verses
                    GROUP BY translation
                    ORDER BY translation
                    """
                )
                rows = cur.fetchall()
        return {row["translation"]: int(row["total"]) for row in rows}

    def count_placeholders(self, references: Optional[List[str]] = None) -> int:
        """Count synthesized rows, optionally restricted to ``references``."""
        with self.database.connection() as conn:
            with conn.cursor() as cur:
                if references is not None:
                    cur.execute(
                        """
                        SELECT COUNT(*) AS total
                        FROM bible_verses
                        WHERE is_authentic = FALSE AND reference = ANY(%s)
                        """,
                        (list(references),),
                    )
                else:
                    cur.execute("SELECT COUNT(*) AS total FROM bible_verses WHERE is_authentic = FALSE")
                row = cur.fetchone()
        return int(row["total"]) if row else 0
