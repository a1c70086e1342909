"""Saved project history and its reconciliation with the remote copy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from autodeploy.adapters.base import RemoteHistoryStore
from autodeploy.core.errors import AuthError, ServiceError
from autodeploy.db.store import SQLiteStore
from autodeploy.logging_config import get_logger
from autodeploy.models.project import SavedProjectRecord

logger = get_logger(__name__)


def merge_histories(
    local: Sequence[SavedProjectRecord],
    remote: Sequence[SavedProjectRecord],
) -> list[SavedProjectRecord]:
    """Remote records plus local records with unknown ids, newest first.

    Records are only deduplicated by id.
    """
    combined = list(remote)
    known = {record.id for record in combined}
    for record in local:
        if record.id not in known:
            combined.append(record)
            known.add(record.id)
    combined.sort(key=lambda record: record.timestamp, reverse=True)
    return combined


def is_duplicate(history: Sequence[SavedProjectRecord], record: SavedProjectRecord) -> bool:
    return any(
        existing.project.name == record.project.name and existing.prompt == record.prompt
        for existing in history
    )


def prepend_record(
    history: Sequence[SavedProjectRecord], record: SavedProjectRecord
) -> list[SavedProjectRecord]:
    if is_duplicate(history, record):
        return list(history)
    return [record, *history]


def remove_record(history: Sequence[SavedProjectRecord], record_id: str) -> list[SavedProjectRecord]:
    return [record for record in history if record.id != record_id]


@dataclass(slots=True)
class CreateOutcome:
    """Result of recording a new project."""

    history: list[SavedProjectRecord]
    duplicate: bool


class SyncStatus(StrEnum):
    """How a sync with the remote copy ended."""

    MERGED = "merged"
    ABSENT = "absent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class SyncOutcome:
    history: list[SavedProjectRecord]
    status: SyncStatus
    error: str | None = None


class HistoryReconciler:
    """Own the in-memory history and write it through on every mutation.

    Local persistence always happens; the remote push is best-effort and only
    attempted with a source-control token. Concurrent writers to the remote
    copy are not coordinated, the last push wins.
    """

    def __init__(self, store: SQLiteStore, remote: RemoteHistoryStore | None = None) -> None:
        self._store = store
        self._remote = remote
        self._history: list[SavedProjectRecord] = []

    @property
    def history(self) -> list[SavedProjectRecord]:
        return list(self._history)

    def get(self, record_id: str) -> SavedProjectRecord | None:
        return next((record for record in self._history if record.id == record_id), None)

    async def load(self) -> list[SavedProjectRecord]:
        """Load the local copy, defaulting to an empty history."""
        self._history = await self._store.load_history()
        return self.history

    async def record_create(self, record: SavedProjectRecord, token: str = "") -> CreateOutcome:
        if is_duplicate(self._history, record):
            return CreateOutcome(history=self.history, duplicate=True)
        await self._commit(prepend_record(self._history, record), token)
        return CreateOutcome(history=self.history, duplicate=False)

    async def record_delete(self, record_id: str, token: str = "") -> list[SavedProjectRecord]:
        await self._commit(remove_record(self._history, record_id), token)
        return self.history

    async def sync(self, token: str) -> SyncOutcome:
        """Merge the remote history into the local one when it exists.

        A failed or missing remote copy leaves the local history untouched.
        """
        if self._remote is None or not token:
            return SyncOutcome(history=self.history, status=SyncStatus.SKIPPED)
        try:
            remote = await self._remote.load(token)
        except (AuthError, ServiceError) as exc:
            logger.warning("history_fetch_failed", error=str(exc))
            return SyncOutcome(history=self.history, status=SyncStatus.FAILED, error=str(exc))
        if remote is None:
            return SyncOutcome(history=self.history, status=SyncStatus.ABSENT)
        self._history = merge_histories(self._history, remote)
        await self._store.save_history(self._history)
        logger.info("history_synced", records=len(self._history))
        return SyncOutcome(history=self.history, status=SyncStatus.MERGED)

    async def _commit(self, history: list[SavedProjectRecord], token: str) -> None:
        self._history = history
        await self._store.save_history(history)
        if self._remote is None or not token:
            return
        try:
            await self._remote.save(token, history)
        except (AuthError, ServiceError) as exc:
            logger.warning("history_push_failed", records=len(history), error=str(exc))
