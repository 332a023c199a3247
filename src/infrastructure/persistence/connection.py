"""
infrastructure.persistence.connection - Async SQLite connection manager.

Wraps aiosqlite with a context manager: one connection per unit of work,
commit on success, rollback on failure. Driver errors surface as
RepositoryError so callers never see sqlite internals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

import aiosqlite

from domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class AsyncSQLiteConnection:
    """Async SQLite connection provider with auto-commit/rollback."""

    def __init__(self, db_path: str, timeout: float = 30.0):
        self._db_path = db_path
        self._timeout = timeout

    @property
    def db_path(self) -> str:
        return self._db_path

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield an async SQLite connection with FK support.

        Commits on success, rolls back on exception.
        """
        try:
            async with aiosqlite.connect(self._db_path, timeout=self._timeout) as conn:
                await conn.execute("PRAGMA foreign_keys = ON")
                conn.row_factory = aiosqlite.Row
                try:
                    yield conn
                    await conn.commit()
                except Exception:
                    await conn.rollback()
                    logger.exception("Database operation failed, transaction rolled back.")
                    raise
        except aiosqlite.Error as exc:
            raise RepositoryError("Database operation failed.") from exc


def now_iso() -> str:
    return datetime.now().isoformat()


def to_iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
