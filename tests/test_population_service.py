"""Tests for the bulk population driver."""
from unittest.mock import MagicMock

import psycopg2
import pytest

from soapbox_bible.canon import estimated_verse_total
from soapbox_bible.models.schemas import VerseRecord
from soapbox_bible.services.population_service import (
    MAX_BATCH_SIZE,
    MIN_BATCH_SIZE,
    PopulationDriver,
    clamp_batch_size,
)
from soapbox_bible.utils.exceptions import ValidationError


class InMemoryRepository:
    """Dict-backed stand-in honoring the upsert rules of the real table."""

    def __init__(self):
        self.rows = {}
        self.batches = []

    def _store(self, record: VerseRecord) -> VerseRecord:
        key = (record.reference, record.translation)
        existing = self.rows.get(key)
        if existing is not None and existing.is_authentic and not record.is_authentic:
            return existing
        self.rows[key] = record
        return record

    def upsert(self, record):
        return self._store(record)

    def upsert_many(self, records, page_size=500):
        records = list(records)
        self.batches.append(len(records))
        for record in records:
            self._store(record)
        return len(records)

    def count_placeholders(self, references=None):
        return sum(
            1
            for (reference, _), record in self.rows.items()
            if not record.is_authentic and (references is None or reference in references)
        )


@pytest.fixture
def repo():
    return InMemoryRepository()


def test_clamp_batch_size():
    assert clamp_batch_size(1) == MIN_BATCH_SIZE
    assert clamp_batch_size(500) == 500
    assert clamp_batch_size(50000) == MAX_BATCH_SIZE


def test_batch_size_defaults_to_settings(repo, provider, settings):
    settings.population_batch_size = 250
    driver = PopulationDriver(repo, provider, settings=settings)
    assert driver.batch_size == 250


def test_run_populates_every_key_for_selected_translations(repo, provider, settings):
    driver = PopulationDriver(repo, provider, batch_size=20, settings=settings)

    report = driver.run(translations=["KJV", "msg"], books=["Jude"])

    assert report.attempted == 50
    assert report.written == 50
    assert report.ok
    assert report.batches == 3
    assert repo.batches == [20, 20, 10]
    assert len(repo.rows) == 50
    assert ("Jude 1:25", "MSG") in repo.rows


def test_rerun_keeps_row_count_stable(repo, provider, settings):
    driver = PopulationDriver(repo, provider, batch_size=20, settings=settings)

    driver.run(translations=["NIV"], books=["Ruth"])
    first = len(repo.rows)
    driver.run(translations=["NIV"], books=["Ruth"])

    assert first == estimated_verse_total(["Ruth"]) == 85
    assert len(repo.rows) == first


def test_run_never_downgrades_authentic_rows(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)
    authentic = provider.build_record("Romans", 5, 8, "NIV").model_copy(
        update={"text": "But God demonstrates his own love for us", "is_authentic": True}
    )
    repo.upsert(authentic)

    driver.run(translations=["NIV"], books=["Romans"])

    assert repo.rows[("Romans 5:8", "NIV")].text == "But God demonstrates his own love for us"


def test_high_priority_only_uses_curated_list(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)
    expected_refs = {f"{b} {c}:{v}" for b, c, v in provider.seed.high_priority_keys()}

    report = driver.run(translations=["NIV"], high_priority_only=True)

    assert report.written == len(expected_refs)
    assert {reference for reference, _ in repo.rows} == expected_refs
    assert repo.rows[("John 3:16", "NIV")].is_authentic is True


def test_high_priority_respects_book_filter(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)

    driver.run(translations=["KJV"], books=["John"], high_priority_only=True)

    assert repo.rows
    assert all(record.book == "John" for record in repo.rows.values())


def test_failed_batch_falls_back_to_single_records(provider, settings):
    repository = MagicMock()
    repository.upsert_many.side_effect = psycopg2.Error("value too long for type character varying(20)")
    bad_reference = "Jude 1:3"

    def upsert(record):
        if record.reference == bad_reference:
            raise psycopg2.DataError("bad row")
        return record

    repository.upsert.side_effect = upsert
    driver = PopulationDriver(repository, provider, batch_size=20, settings=settings)

    report = driver.run(translations=["KJV"], books=["Jude"])

    assert report.attempted == 25
    assert report.written == 24
    assert report.failed == [("Jude 1:3", "KJV")]
    assert report.fallback_batches == 2
    assert not report.ok


def test_connection_errors_abort_the_run(provider, settings):
    repository = MagicMock()
    repository.upsert_many.side_effect = psycopg2.OperationalError("could not connect to server")
    driver = PopulationDriver(repository, provider, settings=settings)

    with pytest.raises(psycopg2.OperationalError):
        driver.run(translations=["KJV"], books=["Jude"])

    repository.upsert.assert_not_called()


def test_invalid_translation_rejected_before_writing(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)

    with pytest.raises(ValidationError):
        driver.run(translations=["XYZ"], books=["Jude"])

    assert repo.rows == {}


def test_planned_records(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)

    assert driver.planned_records(["KJV", "NIV"], ["Jude"]) == 50
    assert driver.planned_records(["KJV"], high_priority_only=True) == len(provider.seed.high_priority_keys())
    assert driver.planned_records(books=["Obadiah"]) == 21 * 17


def test_fix_authentic_verses_replaces_placeholders(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)
    placeholder = provider.build_record("Psalm", 23, 1, "KJV").model_copy(
        update={"text": "placeholder (Psalm 23:1)", "is_authentic": False}
    )
    repo.rows[("Psalm 23:1", "KJV")] = placeholder

    report = driver.fix_authentic_verses()

    assert report.placeholders_before == 1
    assert report.placeholders_after == 0
    assert report.replaced == 1
    assert report.written == provider.seed.text_count
    stored = repo.rows[("Psalm 23:1", "KJV")]
    assert stored.is_authentic is True
    assert stored.text == "The LORD is my shepherd; I shall not want."


def test_fix_authentic_verses_is_idempotent(repo, provider, settings):
    driver = PopulationDriver(repo, provider, settings=settings)

    driver.fix_authentic_verses()
    count = len(repo.rows)
    report = driver.fix_authentic_verses()

    assert len(repo.rows) == count
    assert report.replaced == 0
