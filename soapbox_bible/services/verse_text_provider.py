"""Verse text lookup with placeholder synthesis for uncovered references."""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from soapbox_bible.canon import (
    CATEGORY_ACTS,
    CATEGORY_EPISTLES,
    CATEGORY_GOSPELS,
    CATEGORY_HISTORY,
    CATEGORY_LAW,
    CATEGORY_PROPHECY,
    CATEGORY_REVELATION,
    CATEGORY_WISDOM,
    book_category,
    format_reference,
    normalize_book_name,
    validate_chapter,
    validate_verse,
)
from soapbox_bible.models.schemas import VerseRecord
from soapbox_bible.seed import AuthenticSeed, get_default_seed
from soapbox_bible.translations import (
    STYLE_AMPLIFIED,
    STYLE_CONTEMPORARY,
    STYLE_DYNAMIC,
    STYLE_FORMAL,
    STYLE_PARAPHRASE,
    normalize_translation,
    translation_style,
)

logger = logging.getLogger(__name__)

DEFAULT_POPULARITY = 5

# Opening sentences per category; "{theme}" is filled with a phrase below.
TEMPLATES: Dict[str, List[str]] = {
    CATEGORY_LAW: [
        "And the Lord spoke to Moses, saying, {theme}.",
        "These are the statutes which you shall observe to do in the land: {theme}.",
        "According to all that the Lord commanded Moses, {theme}.",
        "And the children of Israel heard the word of the Lord, that {theme}.",
    ],
    CATEGORY_HISTORY: [
        "And it came to pass in those days that {theme}.",
        "Then the king commanded his servants, and {theme}.",
        "So all the work was finished as the Lord commanded, and {theme}.",
        "And they dwelt in the land which the Lord had given them, for {theme}.",
    ],
    CATEGORY_WISDOM: [
        "The fear of the Lord is the beginning of wisdom, and {theme}.",
        "Trust in the Lord with all your heart, for {theme}.",
        "Blessed is the man who walks in the way of the Lord, because {theme}.",
        "A wise heart knows that {theme}.",
    ],
    CATEGORY_PROPHECY: [
        "Thus says the Lord of hosts: {theme}.",
        "The word of the Lord came to me, saying, {theme}.",
        "Hear the word of the Lord, O house of Israel: {theme}.",
        "Behold, the days are coming, says the Lord, when {theme}.",
    ],
    CATEGORY_GOSPELS: [
        "And Jesus said to his disciples, {theme}.",
        "And it came to pass, as he was teaching, that {theme}.",
        "Verily, verily, I say unto you, {theme}.",
        "Then answered Jesus and said, {theme}.",
    ],
    CATEGORY_ACTS: [
        "And the apostles gave witness with great power, that {theme}.",
        "And it came to pass, as they went on their way, that {theme}.",
        "Then Peter stood up with the eleven and said, {theme}.",
        "And the word of God increased, for {theme}.",
    ],
    CATEGORY_EPISTLES: [
        "Grace to you and peace from God our Father, for {theme}.",
        "I thank my God always concerning you, because {theme}.",
        "Be it known unto you therefore, brethren, that {theme}.",
        "Finally, brethren, remember that {theme}.",
    ],
    CATEGORY_REVELATION: [
        "And I saw, and behold, {theme}.",
        "He that has an ear, let him hear: {theme}.",
        "And I heard a great voice out of heaven saying, {theme}.",
        "Behold, I come quickly, and {theme}.",
    ],
}

THEMES: Dict[str, List[str]] = {
    CATEGORY_LAW: [
        "you shall keep my commandments and live",
        "you shall be holy, for the Lord your God is holy",
        "you shall love the Lord your God with all your heart",
        "you shall remember the covenant of the Lord",
    ],
    CATEGORY_HISTORY: [
        "the people returned to the Lord their God",
        "the hand of the Lord was upon them for good",
        "the Lord gave them rest round about",
        "the people rejoiced with great joy",
    ],
    CATEGORY_WISDOM: [
        "the righteous shall flourish like the palm tree",
        "his mercy endures forever",
        "the path of the just is as the shining light",
        "a soft answer turns away wrath",
    ],
    CATEGORY_PROPHECY: [
        "I will restore your fortunes and heal your wounds",
        "justice shall roll down like waters",
        "I will put my law within you and write it on your hearts",
        "you shall return to me with all your heart",
    ],
    CATEGORY_GOSPELS: [
        "the kingdom of God is at hand",
        "whoever follows me shall not walk in darkness",
        "your faith has made you whole",
        "you shall love your neighbor as yourself",
    ],
    CATEGORY_ACTS: [
        "the Lord added to the church daily",
        "the Spirit was poured out upon all flesh",
        "you shall be witnesses to the ends of the earth",
        "there is salvation in no other name",
    ],
    CATEGORY_EPISTLES: [
        "you are saved by grace through faith",
        "nothing shall separate you from the love of God",
        "you should walk worthy of your calling",
        "love is patient and kind",
    ],
    CATEGORY_REVELATION: [
        "a new heaven and a new earth",
        "the Lamb shall overcome",
        "God shall wipe away every tear from your eyes",
        "the throne of God shall be among his people",
    ],
}

AMPLIFICATIONS = [
    "[that is, faithfully and without fail]",
    "[to be understood, heeded, and obeyed]",
    "[in the fullness of His purpose and plan]",
    "[with confident hope and expectation]",
]

_FORMAL_WORDS = [
    (re.compile(r"\byou\b"), "ye"),
    (re.compile(r"\byour\b"), "thy"),
    (re.compile(r"\bsays\b"), "saith"),
]
_DYNAMIC_PHRASES = [
    (re.compile(r"And it came to pass,?[^.]*? that "), "Then "),
    (re.compile(r"\bbehold,?\s*", re.IGNORECASE), ""),
]
_CONTEMPORARY_PHRASES = [
    (re.compile(r"And it came to pass", re.IGNORECASE), "It happened"),
    (re.compile(r"\bverily\b", re.IGNORECASE), "Truly"),
    (re.compile(r"\bunto\b"), "to"),
    (re.compile(r"\bbrethren\b"), "friends"),
]
_PARAPHRASE_PHRASES = [
    (re.compile(r"Thus says the Lord( of hosts)?"), "God says"),
    (re.compile(r"\bBehold\b"), "Look"),
    (re.compile(r"\bVerily, verily, I say unto you\b"), "Listen carefully"),
    (re.compile(r"\bbrethren\b"), "friends"),
]


@dataclass(frozen=True)
class VerseText:
    text: str
    is_authentic: bool


def _apply(pairs, text: str) -> str:
    for pattern, replacement in pairs:
        text = pattern.sub(replacement, text)
    return text


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


class VerseTextProvider:
    """Return authored text where known, otherwise a flagged placeholder."""

    def __init__(self, seed: Optional[AuthenticSeed] = None, rng: Optional[random.Random] = None):
        self.seed = seed or get_default_seed()
        self.rng = rng or random.Random()

    def get_text(self, book: str, chapter: int, verse, translation: str) -> VerseText:
        book = normalize_book_name(book)
        chapter = validate_chapter(book, chapter)
        verse = validate_verse(book, chapter, verse)
        translation = normalize_translation(translation)
        reference = format_reference(book, chapter, verse)

        authored = self.seed.text_for(reference, translation)
        if authored is not None:
            return VerseText(authored, is_authentic=True)

        logger.debug("No authored text for %s (%s); synthesizing placeholder", reference, translation)
        return VerseText(self._synthesize(book, chapter, verse, translation), is_authentic=False)

    def _synthesize(self, book: str, chapter: int, verse: str, translation: str) -> str:
        category = book_category(book)
        template = self.rng.choice(TEMPLATES[category])
        theme = self.rng.choice(THEMES[category])
        text = template.format(theme=theme)

        style = translation_style(translation)
        if style == STYLE_FORMAL:
            text = _apply(_FORMAL_WORDS, text)
        elif style == STYLE_DYNAMIC:
            text = _apply(_DYNAMIC_PHRASES, text)
        elif style == STYLE_CONTEMPORARY:
            text = _apply(_CONTEMPORARY_PHRASES, text)
        elif style == STYLE_PARAPHRASE:
            text = _apply(_PARAPHRASE_PHRASES, text)
        elif style == STYLE_AMPLIFIED:
            text = f"{text[:-1]} {self.rng.choice(AMPLIFICATIONS)}."

        return f"{_capitalize(text.strip())} ({format_reference(book, chapter, verse)})"

    def popularity_for(self, reference: str) -> int:
        score = self.seed.popularity_for(reference)
        return DEFAULT_POPULARITY if score is None else score

    def build_record(self, book: str, chapter: int, verse, translation: str) -> VerseRecord:
        """Build the full stored record for one key."""
        book = normalize_book_name(book)
        chapter = validate_chapter(book, chapter)
        verse = validate_verse(book, chapter, verse)
        translation = normalize_translation(translation)
        reference = format_reference(book, chapter, verse)
        category = book_category(book)

        verse_text = self.get_text(book, chapter, verse, translation)
        seed_entry = self.seed.get(reference)
        tags = list(seed_entry.topic_tags) if seed_entry else [category.lower()]

        return VerseRecord(
            reference=reference,
            book=book,
            chapter=chapter,
            verse=verse,
            text=verse_text.text,
            translation=translation,
            category=category,
            topic_tags=tags,
            is_active=True,
            popularity_score=self.popularity_for(reference),
            is_authentic=verse_text.is_authentic,
        )
