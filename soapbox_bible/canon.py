"""Canonical structure of the 66-book Protestant canon.

Chapter counts are exact for every book. Verse counts per chapter are only
known exactly for a subset of books; for the rest a per-book estimate
(total verses divided by chapters, rounded up) is used, and a global default
backs that up. Callers that enumerate verses for a book without exact data
should treat the result as approximate.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from soapbox_bible.utils.exceptions import ValidationError

OLD_TESTAMENT = "OT"
NEW_TESTAMENT = "NT"

CATEGORY_LAW = "Law"
CATEGORY_HISTORY = "History"
CATEGORY_WISDOM = "Wisdom"
CATEGORY_PROPHECY = "Prophecy"
CATEGORY_GOSPELS = "Gospels"
CATEGORY_ACTS = "Acts"
CATEGORY_EPISTLES = "Epistles"
CATEGORY_REVELATION = "Revelation"

DEFAULT_VERSES_PER_CHAPTER = 25

REFERENCE_PATTERN = re.compile(
    r"^\s*(?P<book>(?:[1-3]\s*)?[A-Za-z][A-Za-z\s]+?)\s+(?P<chapter>\d{1,3}):(?P<verse>\d{1,3}(?:\s*-\s*\d{1,3})?)\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Book:
    name: str
    chapters: int
    total_verses: int
    testament: str
    category: str

    @property
    def estimated_verses_per_chapter(self) -> int:
        """Average verses per chapter, or the global default when the total is unknown (0)."""
        if self.total_verses <= 0:
            return DEFAULT_VERSES_PER_CHAPTER
        return max(1, math.ceil(self.total_verses / self.chapters))


BIBLE_BOOKS: List[Book] = [
    Book("Genesis", 50, 1533, OLD_TESTAMENT, CATEGORY_LAW),
    Book("Exodus", 40, 1213, OLD_TESTAMENT, CATEGORY_LAW),
    Book("Leviticus", 27, 859, OLD_TESTAMENT, CATEGORY_LAW),
    Book("Numbers", 36, 1288, OLD_TESTAMENT, CATEGORY_LAW),
    Book("Deuteronomy", 34, 959, OLD_TESTAMENT, CATEGORY_LAW),
    Book("Joshua", 24, 658, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Judges", 21, 618, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Ruth", 4, 85, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("1 Samuel", 31, 810, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("2 Samuel", 24, 695, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("1 Kings", 22, 816, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("2 Kings", 25, 719, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("1 Chronicles", 29, 942, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("2 Chronicles", 36, 822, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Ezra", 10, 280, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Nehemiah", 13, 406, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Esther", 10, 167, OLD_TESTAMENT, CATEGORY_HISTORY),
    Book("Job", 42, 1070, OLD_TESTAMENT, CATEGORY_WISDOM),
    Book("Psalm", 150, 2461, OLD_TESTAMENT, CATEGORY_WISDOM),
    Book("Proverbs", 31, 915, OLD_TESTAMENT, CATEGORY_WISDOM),
    Book("Ecclesiastes", 12, 222, OLD_TESTAMENT, CATEGORY_WISDOM),
    Book("Song of Solomon", 8, 117, OLD_TESTAMENT, CATEGORY_WISDOM),
    Book("Isaiah", 66, 1292, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Jeremiah", 52, 1364, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Lamentations", 5, 154, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Ezekiel", 48, 1273, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Daniel", 12, 357, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Hosea", 14, 197, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Joel", 3, 73, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Amos", 9, 146, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Obadiah", 1, 21, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Jonah", 4, 48, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Micah", 7, 105, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Nahum", 3, 47, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Habakkuk", 3, 56, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Zephaniah", 3, 53, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Haggai", 2, 38, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Zechariah", 14, 211, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Malachi", 4, 55, OLD_TESTAMENT, CATEGORY_PROPHECY),
    Book("Matthew", 28, 1071, NEW_TESTAMENT, CATEGORY_GOSPELS),
    Book("Mark", 16, 678, NEW_TESTAMENT, CATEGORY_GOSPELS),
    Book("Luke", 24, 1151, NEW_TESTAMENT, CATEGORY_GOSPELS),
    Book("John", 21, 879, NEW_TESTAMENT, CATEGORY_GOSPELS),
    Book("Acts", 28, 1007, NEW_TESTAMENT, CATEGORY_ACTS),
    Book("Romans", 16, 433, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("1 Corinthians", 16, 437, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("2 Corinthians", 13, 257, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Galatians", 6, 149, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Ephesians", 6, 155, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Philippians", 4, 104, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Colossians", 4, 95, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("1 Thessalonians", 5, 89, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("2 Thessalonians", 3, 47, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("1 Timothy", 6, 113, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("2 Timothy", 4, 83, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Titus", 3, 46, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Philemon", 1, 25, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Hebrews", 13, 303, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("James", 5, 108, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("1 Peter", 5, 105, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("2 Peter", 3, 61, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("1 John", 5, 105, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("2 John", 1, 13, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("3 John", 1, 14, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Jude", 1, 25, NEW_TESTAMENT, CATEGORY_EPISTLES),
    Book("Revelation", 22, 404, NEW_TESTAMENT, CATEGORY_REVELATION),
]

# Exact verse counts per chapter (index 0 is chapter 1).
VERSE_COUNTS: Dict[str, List[int]] = {
    "Genesis": [31, 25, 24, 26, 32, 22, 24, 22, 29, 32, 32, 20, 18, 24, 21, 16, 27, 33, 38, 18, 34, 24, 20, 67, 34,
                35, 46, 22, 35, 43, 55, 32, 20, 31, 29, 43, 36, 30, 23, 23, 57, 38, 34, 34, 28, 34, 31, 22, 33, 26],
    "Ruth": [22, 23, 18, 22],
    "Psalm": [6, 12, 8, 8, 12, 10, 17, 9, 20, 18, 7, 8, 6, 7, 5, 11, 15, 50, 14, 9, 13, 31, 6, 10, 22, 12, 14, 9,
              11, 12, 24, 11, 22, 22, 28, 12, 40, 22, 13, 17, 13, 11, 5, 26, 17, 11, 9, 14, 20, 23, 19, 9, 6, 7, 23,
              13, 11, 11, 17, 12, 8, 12, 11, 10, 13, 20, 7, 35, 36, 5, 24, 20, 28, 23, 10, 12, 20, 72, 13, 19, 16,
              8, 18, 12, 13, 17, 7, 18, 52, 17, 16, 15, 5, 23, 11, 13, 12, 9, 9, 5, 8, 28, 22, 35, 45, 48, 43, 13,
              31, 7, 10, 10, 9, 8, 18, 19, 2, 29, 176, 7, 8, 9, 4, 8, 5, 6, 5, 6, 8, 8, 3, 18, 3, 3, 21, 26, 9, 8,
              24, 13, 10, 7, 12, 15, 21, 10, 20, 14, 9, 6],
    "Obadiah": [21],
    "Jonah": [17, 10, 10, 11],
    "Matthew": [25, 23, 17, 25, 48, 34, 29, 34, 38, 42, 30, 50, 58, 36, 39, 28, 27, 35, 30, 34, 46, 46, 39, 51, 46,
                75, 66, 20],
    "Mark": [45, 28, 35, 41, 43, 56, 37, 38, 50, 52, 33, 44, 37, 72, 47, 20],
    "John": [51, 25, 36, 54, 47, 71, 53, 59, 41, 42, 57, 50, 38, 31, 27, 33, 26, 40, 42, 31, 25],
    "Romans": [32, 29, 31, 25, 21, 23, 25, 39, 33, 21, 36, 21, 14, 23, 33, 27],
    "Galatians": [24, 21, 29, 31, 26, 18],
    "Ephesians": [23, 22, 21, 32, 33, 24],
    "Philippians": [30, 30, 21, 23],
    "Colossians": [29, 23, 25, 18],
    "Philemon": [25],
    "James": [27, 26, 18, 17, 20],
    "1 Peter": [25, 25, 22, 19, 14],
    "1 John": [10, 29, 24, 21, 21],
    "2 John": [13],
    "3 John": [14],
    "Jude": [25],
    "Revelation": [20, 29, 22, 11, 14, 17, 17, 13, 21, 11, 19, 17, 18, 20, 8, 21, 18, 24, 21, 15, 27, 21],
}

BOOK_LOOKUP: Dict[str, Book] = {book.name.lower(): book for book in BIBLE_BOOKS}
BOOK_NAMES: List[str] = [book.name for book in BIBLE_BOOKS]
BOOK_SORT_INDEX: Dict[str, int] = {book.name: idx for idx, book in enumerate(BIBLE_BOOKS)}

BOOK_ALIASES = {
    "psalms": "Psalm",
    "psalm": "Psalm",
    "song of songs": "Song of Solomon",
    "songs of solomon": "Song of Solomon",
    "canticles": "Song of Solomon",
    "revelations": "Revelation",
    "apocalypse": "Revelation",
}


def normalize_book_name(book: str) -> str:
    if not book or not book.strip():
        raise ValidationError("Book name cannot be empty")

    normalized = re.sub(r"\s+", " ", book.strip())
    # "1John" -> "1 John"
    normalized = re.sub(r"^([1-3])(?=[A-Za-z])", r"\1 ", normalized)
    normalized_key = normalized.lower()

    if normalized_key in BOOK_ALIASES:
        normalized_key = BOOK_ALIASES[normalized_key].lower()

    canonical = BOOK_LOOKUP.get(normalized_key)
    if not canonical:
        raise ValidationError(f"Unknown book name '{normalized}'.")

    return canonical.name


def get_book(book: str) -> Book:
    return BOOK_LOOKUP[normalize_book_name(book).lower()]


def chapter_count(book: str) -> int:
    return get_book(book).chapters


def book_category(book: str) -> str:
    return get_book(book).category


def validate_chapter(book: str, chapter) -> int:
    info = get_book(book)
    try:
        chapter_num = int(chapter)
    except (TypeError, ValueError) as exc:
        raise ValidationError("chapter must be an integer.") from exc

    if chapter_num < 1 or chapter_num > info.chapters:
        raise ValidationError(f"{info.name} has {info.chapters} chapters; chapter {chapter_num} is out of range.")
    return chapter_num


def has_exact_counts(book: str, chapter: int) -> bool:
    counts = VERSE_COUNTS.get(normalize_book_name(book))
    return counts is not None and 1 <= chapter <= len(counts)


def verse_count(book: str, chapter: int) -> int:
    """Return the number of verses in a chapter, exact where known.

    Otherwise returns :attr:`Book.estimated_verses_per_chapter`; the result
    is always >= 1.
    """
    info = get_book(book)
    chapter_num = validate_chapter(info.name, chapter)

    counts = VERSE_COUNTS.get(info.name)
    if counts is not None and chapter_num <= len(counts):
        return counts[chapter_num - 1]

    return info.estimated_verses_per_chapter


def first_verse_number(verse: str) -> int:
    """Leading verse number of a verse string such as ``"16"`` or ``"6-7"``."""
    head = str(verse).split("-", 1)[0].strip()
    try:
        return int(head)
    except ValueError as exc:
        raise ValidationError(f"Invalid verse '{verse}'.") from exc


def normalize_verse(verse) -> str:
    """Canonical verse string: ``16`` -> ``"16"``, ``"6 - 7"`` -> ``"6-7"``."""
    raw = re.sub(r"\s+", "", str(verse))
    parts = raw.split("-")
    if len(parts) > 2 or not all(part.isdigit() for part in parts):
        raise ValidationError(f"Invalid verse '{verse}'.")

    numbers = [int(part) for part in parts]
    if numbers[0] < 1:
        raise ValidationError("verse must be >= 1.")
    if len(numbers) == 2:
        if numbers[1] < numbers[0]:
            raise ValidationError("end verse must be greater than or equal to start verse.")
        if numbers[1] == numbers[0]:
            return str(numbers[0])
        return f"{numbers[0]}-{numbers[1]}"
    return str(numbers[0])


def validate_verse(book: str, chapter: int, verse) -> str:
    """Validate a verse against the canonical structure.

    The upper bound is enforced only where the chapter's verse count is
    exact; estimated counts are not trusted to reject a verse.
    """
    verse_str = normalize_verse(verse)
    if has_exact_counts(book, chapter):
        limit = verse_count(book, chapter)
        last = int(verse_str.split("-")[-1])
        if last > limit:
            raise ValidationError(f"{normalize_book_name(book)} {chapter} has {limit} verses; verse {last} is out of range.")
    return verse_str


def format_reference(book: str, chapter: int, verse) -> str:
    return f"{book} {chapter}:{verse}"


def parse_reference(reference: str) -> Tuple[str, int, str]:
    """Split ``"John 3:16"`` into ``("John", 3, "16")`` with validation."""
    if not reference or not reference.strip():
        raise ValidationError("Reference cannot be empty")

    match = REFERENCE_PATTERN.match(reference)
    if not match:
        raise ValidationError("Invalid reference format. Use 'Book Chapter:Verse'.")

    book = normalize_book_name(match.group("book"))
    chapter = validate_chapter(book, match.group("chapter"))
    verse = validate_verse(book, chapter, match.group("verse"))
    return book, chapter, verse


def sort_key(book: str, chapter: int, verse) -> Tuple[int, int, int]:
    return (
        BOOK_SORT_INDEX.get(book, len(BOOK_SORT_INDEX)),
        int(chapter),
        first_verse_number(verse),
    )


def iter_verse_keys(books: Optional[Iterable[str]] = None) -> Iterator[Tuple[str, int, str]]:
    """Yield every ``(book, chapter, verse)`` in canonical order."""
    if books is None:
        selected = BIBLE_BOOKS
    else:
        wanted = {normalize_book_name(name) for name in books}
        selected = [book for book in BIBLE_BOOKS if book.name in wanted]

    for book in selected:
        for chapter in range(1, book.chapters + 1):
            for verse in range(1, verse_count(book.name, chapter) + 1):
                yield book.name, chapter, str(verse)


def estimated_verse_total(books: Optional[Iterable[str]] = None) -> int:
    """Number of keys :func:`iter_verse_keys` will produce."""
    if books is None:
        selected = BIBLE_BOOKS
    else:
        wanted = {normalize_book_name(name) for name in books}
        selected = [book for book in BIBLE_BOOKS if book.name in wanted]
    return sum(verse_count(book.name, chapter) for book in selected for chapter in range(1, book.chapters + 1))
