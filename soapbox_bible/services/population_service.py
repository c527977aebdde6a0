"""Bulk population of the verse store."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import psycopg2

from soapbox_bible.canon import estimated_verse_total, iter_verse_keys, normalize_book_name
from soapbox_bible.config import Settings, get_settings
from soapbox_bible.models.schemas import VerseRecord
from soapbox_bible.repositories.verse import VerseRepository
from soapbox_bible.services.verse_text_provider import VerseTextProvider
from soapbox_bible.translations import TRANSLATION_CODES, normalize_translation

logger = logging.getLogger(__name__)

MIN_BATCH_SIZE = 20
MAX_BATCH_SIZE = 1000
PROGRESS_EVERY = 1000

# Errors meaning the database itself is unusable; these abort the run.
CONNECTION_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)


def clamp_batch_size(batch_size: int) -> int:
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, int(batch_size)))


@dataclass
class PopulationReport:
    attempted: int = 0
    written: int = 0
    failed: List[Tuple[str, str]] = field(default_factory=list)
    batches: int = 0
    fallback_batches: int = 0
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class FixReport:
    references: int = 0
    placeholders_before: int = 0
    placeholders_after: int = 0
    written: int = 0
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def replaced(self) -> int:
        return self.placeholders_before - self.placeholders_after


def _batched(items: Iterable[VerseRecord], size: int) -> Iterator[List[VerseRecord]]:
    batch: List[VerseRecord] = []
    for item in items:
        batch.append(item)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


class PopulationDriver:
    """Enumerate verse keys, build records and upsert them in batches.

    A failing batch is retried record by record so one bad row is logged and
    skipped instead of aborting the run. Connection failures propagate.
    """

    def __init__(
        self,
        repository: VerseRepository,
        provider: Optional[VerseTextProvider] = None,
        batch_size: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.repository = repository
        self.provider = provider or VerseTextProvider()
        self.batch_size = clamp_batch_size(batch_size or settings.population_batch_size)

    def _keys(
        self,
        books: Optional[Sequence[str]],
        high_priority_only: bool,
    ) -> Iterator[Tuple[str, int, str]]:
        if high_priority_only:
            wanted = {normalize_book_name(book) for book in books} if books else None
            for key in self.provider.seed.high_priority_keys():
                if wanted is None or key[0] in wanted:
                    yield key
        else:
            yield from iter_verse_keys(books)

    def _records(
        self,
        keys: Iterable[Tuple[str, int, str]],
        translations: Sequence[str],
    ) -> Iterator[VerseRecord]:
        for book, chapter, verse in keys:
            for translation in translations:
                yield self.provider.build_record(book, chapter, verse, translation)

    def planned_records(
        self,
        translations: Optional[Sequence[str]] = None,
        books: Optional[Sequence[str]] = None,
        high_priority_only: bool = False,
    ) -> int:
        """Number of records :meth:`run` would write, without touching storage."""
        codes = [normalize_translation(code) for code in translations] if translations else TRANSLATION_CODES
        if high_priority_only:
            keys = sum(1 for _ in self._keys(books, True))
        else:
            keys = estimated_verse_total(books)
        return keys * len(codes)

    def run(
        self,
        translations: Optional[Sequence[str]] = None,
        books: Optional[Sequence[str]] = None,
        high_priority_only: bool = False,
    ) -> PopulationReport:
        """Populate every selected key for every selected translation."""
        codes = [normalize_translation(code) for code in translations] if translations else list(TRANSLATION_CODES)
        report = PopulationReport()
        started = time.monotonic()

        if high_priority_only:
            logger.info("Populating high-priority verses for %s translation(s)", len(codes))
        else:
            logger.info(
                "Populating ~%s verses x %s translation(s) in batches of %s",
                estimated_verse_total(books),
                len(codes),
                self.batch_size,
            )

        records = self._records(self._keys(books, high_priority_only), codes)
        next_progress = PROGRESS_EVERY
        for batch in _batched(records, self.batch_size):
            self._write_batch(batch, report)
            if report.attempted >= next_progress:
                logger.info(
                    "Progress: %s records attempted, %s written, %s failed",
                    report.attempted,
                    report.written,
                    len(report.failed),
                )
                next_progress = (report.attempted // PROGRESS_EVERY + 1) * PROGRESS_EVERY

        report.elapsed_seconds = time.monotonic() - started
        logger.info(
            "Population finished: %s written, %s failed, %s batches (%s fell back) in %.1fs",
            report.written,
            len(report.failed),
            report.batches,
            report.fallback_batches,
            report.elapsed_seconds,
        )
        return report

    def _write_batch(self, batch: List[VerseRecord], report: PopulationReport) -> None:
        report.batches += 1
        report.attempted += len(batch)
        try:
            report.written += self.repository.upsert_many(batch, page_size=self.batch_size)
            return
        except CONNECTION_ERRORS:
            raise
        except psycopg2.Error as exc:
            logger.warning(
                "Batch %s failed (%s); retrying %s records individually",
                report.batches,
                exc,
                len(batch),
            )

        report.fallback_batches += 1
        for record in batch:
            try:
                self.repository.upsert(record)
                report.written += 1
            except CONNECTION_ERRORS:
                raise
            except psycopg2.Error as exc:
                logger.error(
                    "Failed to write %s (%s): %s",
                    record.reference,
                    record.translation,
                    exc,
                )
                report.failed.append((record.reference, record.translation))

    def fix_authentic_verses(self) -> FixReport:
        """Overwrite stored placeholders with authored text for every seeded reference."""
        seed = self.provider.seed
        references = sorted(seed.verses)
        report = FixReport(references=len(references))
        report.placeholders_before = self.repository.count_placeholders(references)

        records = []
        for reference in references:
            entry = seed.verses[reference]
            for translation in entry.texts:
                records.append(self.provider.build_record(entry.book, entry.chapter, entry.verse, translation))

        population = PopulationReport()
        for batch in _batched(records, self.batch_size):
            self._write_batch(batch, population)
        report.written = population.written
        report.failed = population.failed

        report.placeholders_after = self.repository.count_placeholders(references)
        logger.info(
            "Authentic fix: %s texts written across %s references, %s placeholders replaced",
            report.written,
            report.references,
            report.replaced,
        )
        return report
