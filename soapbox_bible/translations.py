"""Supported Bible translations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from soapbox_bible.utils.exceptions import ValidationError

STYLE_FORMAL = "formal"
STYLE_BALANCED = "balanced"
STYLE_DYNAMIC = "dynamic"
STYLE_PARAPHRASE = "paraphrase"
STYLE_AMPLIFIED = "amplified"
STYLE_CONTEMPORARY = "contemporary"


@dataclass(frozen=True)
class Translation:
    code: str
    name: str
    year: int
    style: str
    sort_order: int

    @property
    def display_name(self) -> str:
        return f"{self.code} - {self.name}"


TRANSLATIONS: List[Translation] = [
    Translation("KJV", "King James Version", 1611, STYLE_FORMAL, 1),
    Translation("NIV", "New International Version", 1978, STYLE_BALANCED, 2),
    Translation("NLT", "New Living Translation", 1996, STYLE_DYNAMIC, 3),
    Translation("ESV", "English Standard Version", 2001, STYLE_FORMAL, 4),
    Translation("NASB", "New American Standard Bible", 1971, STYLE_FORMAL, 5),
    Translation("CSB", "Christian Standard Bible", 2017, STYLE_BALANCED, 6),
    Translation("MSG", "The Message", 2002, STYLE_PARAPHRASE, 7),
    Translation("AMP", "Amplified Bible", 2015, STYLE_AMPLIFIED, 8),
    Translation("CEV", "Contemporary English Version", 1995, STYLE_CONTEMPORARY, 9),
    Translation("NET", "New English Translation", 2005, STYLE_BALANCED, 10),
    Translation("CEB", "Common English Bible", 2011, STYLE_DYNAMIC, 11),
    Translation("GNT", "Good News Translation", 1976, STYLE_CONTEMPORARY, 12),
    Translation("NKJV", "New King James Version", 1982, STYLE_FORMAL, 13),
    Translation("RSV", "Revised Standard Version", 1952, STYLE_FORMAL, 14),
    Translation("NRSV", "New Revised Standard Version", 1989, STYLE_FORMAL, 15),
    Translation("HCSB", "Holman Christian Standard Bible", 2004, STYLE_BALANCED, 16),
    Translation("NCV", "New Century Version", 1987, STYLE_CONTEMPORARY, 17),
]

TRANSLATION_CODES: List[str] = [t.code for t in TRANSLATIONS]
TRANSLATION_LOOKUP: Dict[str, Translation] = {t.code: t for t in TRANSLATIONS}


def normalize_translation(code: str) -> str:
    """Return the canonical upper-case code or raise ValidationError."""
    if not code or not code.strip():
        raise ValidationError("Translation cannot be empty")

    normalized = code.strip().upper()
    if normalized not in TRANSLATION_LOOKUP:
        raise ValidationError(
            f"Unsupported translation '{code.strip()}'. Use one of: {', '.join(TRANSLATION_CODES)}."
        )
    return normalized


def translation_style(code: str) -> str:
    return TRANSLATION_LOOKUP[normalize_translation(code)].style
