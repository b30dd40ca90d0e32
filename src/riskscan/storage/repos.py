"""Durable key-value repository on top of SQLite."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)


class StateRepo:
    """Process-wide JSON values keyed by name; survives restarts."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get(self, key: str) -> Any | None:
        cursor = await self._db.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except ValueError:
            logger.warning("Stored value for %r is not valid JSON, ignored", key)
            return None

    async def set(self, key: str, value: Any) -> None:
        await self.set_many({key: value})

    async def set_many(self, values: dict[str, Any]) -> None:
        """Write several keys in one transaction."""
        now = time.time()
        await self._db.executemany(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) "
            "VALUES (?, ?, ?)",
            [(key, json.dumps(value), now) for key, value in values.items()],
        )
        await self._db.commit()
