"""Unit tests for VerseRepository with a mocked connection."""
from unittest.mock import patch

import psycopg2
import pytest

from soapbox_bible.canon import BOOK_NAMES
from soapbox_bible.repositories import VerseRepository


def _sql(cursor):
    return " ".join(cursor.execute.call_args[0][0].split())


class TestVerseRepositoryReads:

    def test_get_returns_record(self, mock_database, make_row):
        mock_database.cursor.fetchone.return_value = make_row()
        repo = VerseRepository(mock_database)

        record = repo.get("John 3:16", "NIV")

        assert record.reference == "John 3:16"
        assert record.is_authentic is True
        assert mock_database.cursor.execute.call_args[0][1] == ("John 3:16", "NIV")

    def test_get_missing_returns_none(self, mock_database):
        mock_database.cursor.fetchone.return_value = None

        assert VerseRepository(mock_database).get("John 3:17", "NIV") is None

    def test_search_orders_by_popularity_then_canon(self, mock_database, make_row):
        mock_database.cursor.fetchall.return_value = [make_row(), make_row(reference="1 John 4:8", book="1 John")]
        repo = VerseRepository(mock_database)

        results = repo.search("love", "NIV", 5)

        assert [r.reference for r in results] == ["John 3:16", "1 John 4:8"]
        sql = _sql(mock_database.cursor)
        assert "ILIKE" in sql
        assert "ORDER BY popularity_score DESC, array_position(%s::text[], book), chapter" in sql
        params = mock_database.cursor.execute.call_args[0][1]
        assert params == ("NIV", "%love%", "%love%", "%love%", BOOK_NAMES, 5)

    def test_search_escapes_like_wildcards(self, mock_database):
        mock_database.cursor.fetchall.return_value = []

        VerseRepository(mock_database).search("100%_sure", "NIV", 5)

        params = mock_database.cursor.execute.call_args[0][1]
        assert params[1] == "%100\\%\\_sure%"

    def test_random_filters_on_popularity(self, mock_database, make_row):
        mock_database.cursor.fetchone.return_value = make_row(popularity_score=9)

        record = VerseRepository(mock_database).random("NIV", 7)

        assert record.popularity_score == 9
        assert "popularity_score > %s" in _sql(mock_database.cursor)
        assert mock_database.cursor.execute.call_args[0][1] == ("NIV", 7)

    def test_random_prefers_authentic_rows(self, mock_database, make_row):
        mock_database.cursor.fetchone.return_value = make_row()

        VerseRepository(mock_database).random("NIV", 7)

        assert "ORDER BY is_authentic DESC, random()" in _sql(mock_database.cursor)

    def test_by_topic_matches_any_tag(self, mock_database, make_row):
        mock_database.cursor.fetchall.return_value = [make_row(topic_tags=["love", "salvation"])]

        results = VerseRepository(mock_database).by_topic(["love", "peace"], "NIV", 10)

        assert results[0].topic_tags == ["love", "salvation"]
        sql = _sql(mock_database.cursor)
        assert "topic_tags && %s::text[]" in sql
        assert "ORDER BY popularity_score DESC, array_position(%s::text[], book), chapter" in sql
        params = mock_database.cursor.execute.call_args[0][1]
        assert params == ("NIV", ["love", "peace"], BOOK_NAMES, 10)

    def test_counts(self, mock_database):
        cursor = mock_database.cursor
        repo = VerseRepository(mock_database)

        cursor.fetchone.return_value = {"total": 42}
        assert repo.count() == 42
        assert repo.count("KJV") == 42
        assert repo.count_placeholders() == 42
        assert repo.count_placeholders(["John 3:16"]) == 42
        assert cursor.execute.call_args[0][1] == (["John 3:16"],)

        cursor.fetchall.return_value = [{"translation": "KJV", "total": 3}, {"translation": "NIV", "total": 5}]
        assert repo.count_by_translation() == {"KJV": 3, "NIV": 5}


class TestVerseRepositoryWrites:

    def test_upsert_returns_stored_row_and_commits(self, mock_database, make_row, provider):
        record = provider.build_record("John", 3, 16, "NIV")
        mock_database.cursor.fetchone.return_value = make_row(text=record.text)

        stored = VerseRepository(mock_database).upsert(record)

        assert stored.text == record.text
        sql = _sql(mock_database.cursor)
        assert "ON CONFLICT (reference, translation) DO UPDATE" in sql
        assert "WHERE bible_verses.is_authentic = FALSE OR EXCLUDED.is_authentic = TRUE" in sql
        mock_database.conn.commit.assert_called_once()

    def test_upsert_reselects_when_authentic_row_is_kept(self, mock_database, make_row, provider):
        placeholder = provider.build_record("Romans", 5, 8, "NIV")
        authentic = make_row(reference="Romans 5:8", book="Romans", chapter=5, verse="8", text="But God demonstrates")
        mock_database.cursor.fetchone.side_effect = [None, authentic]

        stored = VerseRepository(mock_database).upsert(placeholder)

        assert stored.is_authentic is True
        assert stored.text == "But God demonstrates"
        assert mock_database.cursor.execute.call_count == 2

    @patch("soapbox_bible.repositories.verse.execute_values")
    def test_upsert_many_uses_execute_values(self, mock_execute_values, mock_database, provider):
        records = [provider.build_record("Jude", 1, verse, "KJV") for verse in range(1, 6)]

        written = VerseRepository(mock_database).upsert_many(records, page_size=100)

        assert written == 5
        args, kwargs = mock_execute_values.call_args
        assert len(args[2]) == 5
        assert kwargs["page_size"] == 100
        assert "%s::text[]" in kwargs["template"]
        mock_database.conn.commit.assert_called_once()

    @patch("soapbox_bible.repositories.verse.execute_values")
    def test_upsert_many_collapses_duplicate_keys(self, mock_execute_values, mock_database, provider):
        first = provider.build_record("Jude", 1, 1, "KJV")
        second = first.model_copy(update={"text": "replacement text"})

        written = VerseRepository(mock_database).upsert_many([first, second])

        assert written == 1
        rows = mock_execute_values.call_args[0][2]
        assert rows[0][4] == "replacement text"

    @patch("soapbox_bible.repositories.verse.execute_values")
    def test_upsert_many_empty_is_noop(self, mock_execute_values, mock_database):
        assert VerseRepository(mock_database).upsert_many([]) == 0
        mock_execute_values.assert_not_called()
        mock_database.connection.assert_not_called()

    @patch("soapbox_bible.repositories.verse.execute_values")
    def test_upsert_many_propagates_database_errors(self, mock_execute_values, mock_database, provider):
        mock_execute_values.side_effect = psycopg2.Error("value too long")

        with pytest.raises(psycopg2.Error):
            VerseRepository(mock_database).upsert_many([provider.build_record("Jude", 1, 1, "KJV")])

        mock_database.conn.commit.assert_not_called()
