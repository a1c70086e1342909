from __future__ import annotations

from pathlib import Path

import pytest

from autodeploy.core.history import (
    HistoryReconciler,
    SyncStatus,
    merge_histories,
    prepend_record,
    remove_record,
)
from autodeploy.db.store import SQLiteStore
from tests.support.fakes import FakeRemoteHistory, make_record


def test_merge_scenario_orders_newest_first() -> None:
    local = [make_record("a", 5)]
    remote = [make_record("a", 5), make_record("b", 9)]

    merged = merge_histories(local, remote)

    assert [(record.id, record.timestamp) for record in merged] == [("b", 9), ("a", 5)]


def test_merge_keeps_remote_version_for_shared_id() -> None:
    local = [make_record("a", 5, prompt="local prompt")]
    remote = [make_record("a", 5, prompt="remote prompt")]

    merged = merge_histories(local, remote)

    assert len(merged) == 1
    assert merged[0].prompt == "remote prompt"


def test_merge_keeps_identical_content_with_different_ids() -> None:
    local = [make_record("a", 1, prompt="same", name="same")]
    remote = [make_record("b", 2, prompt="same", name="same")]

    assert [record.id for record in merge_histories(local, remote)] == ["b", "a"]


def test_prepend_skips_same_name_and_prompt() -> None:
    history = [make_record("a", 1, prompt="todo", name="todo-app")]
    duplicate = make_record("b", 2, prompt="todo", name="todo-app")

    assert prepend_record(history, duplicate) == history
    fresh = make_record("c", 3, prompt="other", name="todo-app")
    assert [record.id for record in prepend_record(history, fresh)] == ["c", "a"]


def test_remove_absent_id_is_identity() -> None:
    history = [make_record("a", 2), make_record("b", 1)]

    assert remove_record(history, "missing") == history
    assert [record.id for record in remove_record(history, "a")] == ["b"]


@pytest.mark.asyncio
async def test_record_create_persists_and_pushes(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "autodeploy.db")
    remote = FakeRemoteHistory()
    reconciler = HistoryReconciler(store, remote)

    outcome = await reconciler.record_create(make_record("a", 1), token="good-token")

    assert outcome.duplicate is False
    assert [record.id for record in await store.load_history()] == ["a"]
    assert [[record.id for record in pushed] for pushed in remote.saved] == [["a"]]


@pytest.mark.asyncio
async def test_record_create_duplicate_reports_and_keeps_length(tmp_path: Path) -> None:
    reconciler = HistoryReconciler(SQLiteStore(tmp_path / "autodeploy.db"))
    await reconciler.record_create(make_record("a", 1, prompt="p", name="n"))

    outcome = await reconciler.record_create(make_record("b", 2, prompt="p", name="n"))

    assert outcome.duplicate is True
    assert len(outcome.history) == 1


@pytest.mark.asyncio
async def test_record_create_without_token_skips_remote(tmp_path: Path) -> None:
    remote = FakeRemoteHistory()
    reconciler = HistoryReconciler(SQLiteStore(tmp_path / "autodeploy.db"), remote)

    await reconciler.record_create(make_record("a", 1))

    assert remote.saved == []


@pytest.mark.asyncio
async def test_remote_push_failure_is_swallowed(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "autodeploy.db")
    reconciler = HistoryReconciler(store, FakeRemoteHistory(fail_save=True))

    await reconciler.record_create(make_record("a", 1), token="good-token")
    history = await reconciler.record_delete("a", token="good-token")

    assert history == []
    assert await store.load_history() == []


@pytest.mark.asyncio
async def test_record_delete_propagates_to_remote(tmp_path: Path) -> None:
    remote = FakeRemoteHistory()
    reconciler = HistoryReconciler(SQLiteStore(tmp_path / "autodeploy.db"), remote)
    await reconciler.record_create(make_record("a", 1), token="good-token")
    await reconciler.record_create(make_record("b", 2), token="good-token")

    await reconciler.record_delete("a", token="good-token")

    assert [record.id for record in remote.saved[-1]] == ["b"]


@pytest.mark.asyncio
async def test_sync_merges_and_persists_remote_history(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "autodeploy.db")
    await store.save_history([make_record("a", 5)])
    reconciler = HistoryReconciler(
        store, FakeRemoteHistory([make_record("a", 5), make_record("b", 9)])
    )
    await reconciler.load()

    outcome = await reconciler.sync("good-token")

    assert outcome.status is SyncStatus.MERGED
    assert [record.id for record in outcome.history] == ["b", "a"]
    assert [record.id for record in await store.load_history()] == ["b", "a"]


@pytest.mark.asyncio
async def test_sync_without_remote_record_returns_local(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "autodeploy.db")
    await store.save_history([make_record("a", 5)])
    reconciler = HistoryReconciler(store, FakeRemoteHistory(None))
    await reconciler.load()

    outcome = await reconciler.sync("good-token")

    assert outcome.status is SyncStatus.ABSENT
    assert [record.id for record in outcome.history] == ["a"]


@pytest.mark.asyncio
async def test_sync_remote_failure_keeps_local_history(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "autodeploy.db")
    await store.save_history([make_record("a", 5)])
    reconciler = HistoryReconciler(store, FakeRemoteHistory([make_record("b", 9)], fail_load=True))
    await reconciler.load()

    outcome = await reconciler.sync("good-token")

    assert outcome.status is SyncStatus.FAILED
    assert outcome.error is not None
    assert [record.id for record in outcome.history] == ["a"]
    assert [record.id for record in await store.load_history()] == ["a"]


@pytest.mark.asyncio
async def test_sync_without_token_is_skipped(tmp_path: Path) -> None:
    reconciler = HistoryReconciler(SQLiteStore(tmp_path / "autodeploy.db"), FakeRemoteHistory())

    outcome = await reconciler.sync("")

    assert outcome.status is SyncStatus.SKIPPED
