"""Async SQLite key/value persistence for local session state."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from autodeploy.db.migrations import apply_migrations
from autodeploy.models.project import SavedProjectRecord
from autodeploy.models.session import Credentials

CONFIG_KEY = "autodeploy_config"
HISTORY_KEY = "autodeploy_history"


class SQLiteStore:
    """Get/set store for JSON blobs keyed by fixed names."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await aiosqlite.connect(self._db_path)
        conn.row_factory = aiosqlite.Row
        try:
            await apply_migrations(conn)
            yield conn
        finally:
            await conn.close()

    async def get(self, key: str) -> Any | None:
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(str(row["value"]))

    async def set(self, key: str, value: Any) -> None:
        async with self.connection() as conn:
            await conn.execute(
                """
                INSERT INTO kv_store(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                (key, json.dumps(value), datetime.now(UTC).isoformat()),
            )
            await conn.commit()

    async def delete(self, key: str) -> None:
        async with self.connection() as conn:
            await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await conn.commit()

    async def load_credentials(self) -> Credentials:
        raw = await self.get(CONFIG_KEY)
        if not isinstance(raw, dict):
            return Credentials()
        return Credentials.model_validate(raw)

    async def save_credentials(self, credentials: Credentials) -> None:
        await self.set(CONFIG_KEY, credentials.model_dump(mode="json"))

    async def load_history(self) -> list[SavedProjectRecord]:
        raw = await self.get(HISTORY_KEY)
        if not isinstance(raw, list):
            return []
        return [SavedProjectRecord.model_validate(item) for item in raw]

    async def save_history(self, history: list[SavedProjectRecord]) -> None:
        await self.set(HISTORY_KEY, [record.model_dump(mode="json") for record in history])
