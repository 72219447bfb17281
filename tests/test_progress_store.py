from __future__ import annotations

import pytest

from streamvault.domain import DisplayMetadata, MediaRef, WatchProgressRecord
from streamvault.repositories.sqlite_repository import SqliteRepository
from streamvault.services.progress import WatchProgressStore


def record(ref: MediaRef, watched: float, total: float = 1000.0, at: int = 100) -> WatchProgressRecord:
    return WatchProgressRecord(ref, DisplayMetadata(title="Title"), watched, total, at)


def test_upsert_same_series_keeps_one_record_with_latest_values(repository) -> None:
    store = WatchProgressStore(repository)
    ref = MediaRef("movie", 550)
    store.upsert(record(ref, 10, at=100))
    store.upsert(record(ref, 20, at=101))
    records = store.list_all()
    assert len(records) == 1
    assert records[0].watched_seconds == 20
    assert records[0].last_watched_at == 101


def test_new_episode_supersedes_previous_episode(repository) -> None:
    store = WatchProgressStore(repository)
    store.upsert(record(MediaRef("tv", 1399, 1, 3), 500))
    store.upsert(record(MediaRef("tv", 1399, 1, 4), 0))
    records = store.list_all()
    assert [r.media_ref for r in records] == [MediaRef("tv", 1399, 1, 4)]


def test_movie_and_show_with_same_id_are_distinct(repository) -> None:
    store = WatchProgressStore(repository)
    store.upsert(record(MediaRef("movie", 1), 10))
    store.upsert(record(MediaRef("tv", 1, 1, 1), 10))
    assert len(store.list_all()) == 2


def test_list_all_is_most_recent_first(repository) -> None:
    store = WatchProgressStore(repository)
    store.upsert(record(MediaRef("movie", 1), 10, at=100))
    store.upsert(record(MediaRef("movie", 2), 10, at=300))
    store.upsert(record(MediaRef("movie", 3), 10, at=200))
    assert [r.media_ref.media_id for r in store.list_all()] == [2, 3, 1]


def test_remove_and_get(repository) -> None:
    store = WatchProgressStore(repository)
    store.upsert(record(MediaRef("movie", 1), 10))
    assert store.get("movie", 1) is not None
    store.remove(1)
    assert store.get("movie", 1) is None
    assert store.list_all() == []


def test_records_survive_reopening_the_database(tmp_path) -> None:
    path = tmp_path / "streamvault.db"
    WatchProgressStore(SqliteRepository(path)).upsert(record(MediaRef("tv", 5, 2, 7), 300, 1200))
    reopened = WatchProgressStore(SqliteRepository(path)).list_all()
    assert reopened[0].media_ref == MediaRef("tv", 5, 2, 7)
    assert reopened[0].progress_percent == pytest.approx(25.0)


def test_unavailable_storage_degrades_to_no_op(tmp_path) -> None:
    # A directory cannot be opened as a database file
    store = WatchProgressStore(SqliteRepository(tmp_path))
    assert store.upsert(record(MediaRef("movie", 1), 10)) is False
    assert store.list_all() == []
    store.remove(1)


@pytest.mark.parametrize("watched,total,expected", [
    (50, 200, 25.0),
    (0, 0, 0.0),
    (30, 0, 0.0),
    (500, 200, 100.0),
])
def test_progress_percent(watched, total, expected) -> None:
    assert record(MediaRef("movie", 1), watched, total).progress_percent == pytest.approx(expected)


def test_negative_values_are_clamped() -> None:
    r = record(MediaRef("movie", 1), -5, -10)
    assert (r.watched_seconds, r.total_seconds) == (0.0, 0.0)
