"""
Postgres access for the recipe library.

One shared connection serves the recipe, favorite and profile tables. Every
``get_cursor`` block is its own transaction.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

import psycopg2
import psycopg2.extras

from ..config import get_database_url


logger = logging.getLogger(__name__)


class DatabasePool:
    """Single reusable psycopg2 connection, reopened when it goes stale."""

    def __init__(self):
        self._conn: Optional[psycopg2.extensions.connection] = None

    @property
    def connected(self) -> bool:
        return self._conn is not None and not self._conn.closed

    def initialize(self) -> None:
        """Open the connection at startup. Raises ValueError if no URL is configured."""
        self._open()

    def _open(self) -> None:
        self.close()
        db_url = get_database_url()
        if not db_url:
            raise ValueError("DATABASE_URL (or SUPABASE_DB_URL) is not set; add it to backend/.env")
        self._conn = psycopg2.connect(db_url)
        self._conn.autocommit = False

    def _alive_connection(self) -> psycopg2.extensions.connection:
        if not self.connected:
            self._open()
            return self._conn

        try:
            with self._conn.cursor() as cursor:
                cursor.execute("SELECT 1")
        except (psycopg2.OperationalError, psycopg2.InterfaceError):
            logger.warning("Database connection lost, reconnecting")
            self._open()
        return self._conn

    @contextmanager
    def get_cursor(
        self,
        cursor_factory=psycopg2.extras.RealDictCursor,
    ) -> Generator[psycopg2.extensions.cursor, None, None]:
        """
        Cursor yielding dict rows; commits on success, rolls back on error.

        Example:
            with db_pool.get_cursor() as cursor:
                cursor.execute("SELECT title FROM recipes")
        """
        conn = self._alive_connection()
        cursor = conn.cursor(cursor_factory=cursor_factory)
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def ping(self) -> str:
        """Connection status for the health endpoint."""
        try:
            with self.get_cursor() as cursor:
                cursor.execute("SELECT 1")
        except (ValueError, psycopg2.Error) as e:
            return f"error: {e}"
        return "connected"

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except psycopg2.Error as e:
            logger.debug("Ignoring error while closing connection: %s", e)
        self._conn = None


db_pool = DatabasePool()


def get_db():
    """FastAPI dependency: the pool's cursor factory, handed to RecipeStore."""
    return db_pool.get_cursor
