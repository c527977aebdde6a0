"""Unit tests for the Database storage handle."""
import pytest
from unittest.mock import Mock, patch
import psycopg2

from soapbox_bible.database import Database

DB_CONFIG = {"dbname": "test_db", "user": "u", "password": "p", "host": "localhost", "port": 5432}


class TestDatabase:

    @patch("soapbox_bible.database.pool.ThreadedConnectionPool")
    def test_open_creates_pool(self, mock_pool_cls):
        database = Database(DB_CONFIG, minconn=2, maxconn=5)

        database.open()

        assert database.is_open
        args, kwargs = mock_pool_cls.call_args
        assert args == (2, 5)
        assert kwargs["dbname"] == "test_db"

    @patch("soapbox_bible.database.pool.ThreadedConnectionPool")
    def test_open_twice_keeps_first_pool(self, mock_pool_cls):
        database = Database(DB_CONFIG)

        database.open()
        database.open()

        mock_pool_cls.assert_called_once()

    @patch("soapbox_bible.database.pool.ThreadedConnectionPool")
    def test_open_failure_propagates(self, mock_pool_cls):
        mock_pool_cls.side_effect = psycopg2.OperationalError("could not connect")
        database = Database(DB_CONFIG)

        with pytest.raises(psycopg2.OperationalError):
            database.open()

        assert not database.is_open

    def test_connection_requires_open(self):
        with pytest.raises(RuntimeError):
            with Database(DB_CONFIG).connection():
                pass

    @patch("soapbox_bible.database.pool.ThreadedConnectionPool")
    def test_connection_is_returned_to_pool(self, mock_pool_cls):
        mock_conn = Mock()
        mock_pool_cls.return_value.getconn.return_value = mock_conn

        with Database(DB_CONFIG) as database:
            with database.connection() as conn:
                assert conn is mock_conn

        mock_pool_cls.return_value.putconn.assert_called_once_with(mock_conn)
        mock_pool_cls.return_value.closeall.assert_called_once()
        assert not database.is_open

    @patch("soapbox_bible.database.pool.ThreadedConnectionPool")
    def test_database_error_rolls_back(self, mock_pool_cls):
        mock_conn = Mock()
        mock_pool_cls.return_value.getconn.return_value = mock_conn
        database = Database(DB_CONFIG)
        database.open()

        with pytest.raises(psycopg2.Error):
            with database.connection():
                raise psycopg2.Error("Test database error")

        mock_conn.rollback.assert_called_once()
        mock_pool_cls.return_value.putconn.assert_called_once_with(mock_conn)

    def test_from_settings(self, settings):
        settings.db_pool_min = 3
        settings.db_pool_max = 7

        database = Database.from_settings(settings)

        assert database._minconn == 3
        assert database._maxconn == 7
        assert database._db_config["dbname"] == "test_db"
