import logging
import os
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

from app.settings import settings


DB_VERSION = 1

LOGGER = logging.getLogger("kudos.db")


class DatabaseNotInitializedError(Exception):
    """Raised when database operations are attempted before initialization"""
    pass


def register_schema_sql(func: Callable[[], str]) -> Callable[[], str]:
    """Decorator registering the DDL returned by `func` for `Database.setup()`

    The function is called at import time; statements run in registration
    order, so tables referenced by foreign keys must be registered first.
    """
    Database._schema_registry.append(func())
    return func


class Database:
    """SQLite store for the kudos board. Every call opens (and closes) its own connection."""

    _schema_registry: list[str] = []

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path if db_path is not None else settings.db_path
        self._initialized = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that is committed on success, rolled back on error, then closed"""
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn

    def setup(self) -> None:
        """Create the parent directory, drop a stale schema version and create all tables"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        stored_version = self._stored_version()
        if stored_version is not None and stored_version != DB_VERSION:
            LOGGER.warning(
                "Database schema is outdated (stored version: %s, current version: %s)",
                stored_version,
                DB_VERSION,
            )
            self._discard_outdated_file()

        with self.connect() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER NOT NULL)")
            conn.execute("DELETE FROM db_version")
            conn.execute("INSERT INTO db_version (version) VALUES (?)", (DB_VERSION,))
            for sql in self._schema_registry:
                conn.execute(sql)

        self._initialized = True
        LOGGER.info("Database ready at %s (schema version %d)", self.db_path, DB_VERSION)

    def _stored_version(self) -> int | None:
        """Schema version of an existing file; 0 when the file predates versioning"""
        if not os.path.exists(self.db_path):
            return None

        with self.connect() as conn:
            has_table = conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'db_version'"
            ).fetchone()
            if has_table is None:
                return 0
            row = conn.execute("SELECT version FROM db_version LIMIT 1").fetchone()
            return row["version"] if row else 0

    def _discard_outdated_file(self) -> None:
        if settings.preserve_old_db:
            backup_path = self.db_path.replace(".db", f"-{datetime.now():%Y%m%d%H%M%S}.db")
            os.replace(self.db_path, backup_path)
            LOGGER.warning("Outdated database moved to %s", backup_path)
        else:
            os.remove(self.db_path)
            LOGGER.warning("Outdated database removed: %s", self.db_path)

    def _require_setup(self) -> None:
        if not self._initialized:
            raise DatabaseNotInitializedError("Database has not been initialized. Call setup() first.")

    def execute_query(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Run a SELECT and return all rows"""
        self._require_setup()
        with self.connect() as conn:
            return conn.execute(query, params).fetchall()

    def execute_update(self, query: str, params: tuple[Any, ...] = ()) -> int:
        """Run an INSERT/UPDATE/DELETE and return the number of affected rows"""
        self._require_setup()
        with self.connect() as conn:
            return conn.execute(query, params).rowcount
