"""Database connection handling."""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from soapbox_bible.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Database:
    """Storage handle owning a psycopg2 connection pool.

    The handle is created explicitly by whoever owns the process lifecycle
    (the FastAPI startup hook or a population script) and passed to the
    repositories that need it. Connections are borrowed per operation via
    :meth:`connection` and always returned to the pool.
    """

    def __init__(self, db_config: dict, minconn: int = 1, maxconn: int = 10):
        self._db_config = db_config
        self._minconn = minconn
        self._maxconn = maxconn
        self._pool: Optional[pool.ThreadedConnectionPool] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        settings = settings or get_settings()
        return cls(settings.db_config, minconn=settings.db_pool_min, maxconn=settings.db_pool_max)

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            logger.warning("Connection pool already initialized")
            return

        try:
            self._pool = pool.ThreadedConnectionPool(
                self._minconn,
                self._maxconn,
                cursor_factory=RealDictCursor,
                **self._db_config
            )
            logger.info(f"Database connection pool initialized (min={self._minconn}, max={self._maxconn})")
        except psycopg2.Error as e:
            logger.error(f"Failed to initialize connection pool: {e}")
            raise

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed")

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def connection(self) -> Iterator["psycopg2.extensions.connection"]:
        """Borrow a connection from the pool.

        The transaction is rolled back if the block raises a database error.
        """
        if self._pool is None:
            raise RuntimeError("Database is not open; call open() first")

        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
        except psycopg2.Error as e:
            logger.error(f"Database error: {e}")
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                self._pool.putconn(conn)
