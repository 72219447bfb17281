from __future__ import annotations

import json

import pytest

from streamvault.config import DEFAULT_ACCENT_COLOR
from streamvault.domain import MediaRef, WatchProgressRecord
from streamvault.repositories.sqlite_repository import LIKES, WATCHLIST
from streamvault.services.library import LibraryService

FIGHT_CLUB = {"id": 550, "title": "Fight Club", "poster_path": "/fc.jpg", "vote_average": 8.4,
              "release_date": "1999-10-15"}
THRONES = {"id": 1399, "name": "Game of Thrones", "first_air_date": "2011-04-17"}


@pytest.fixture
def library(repository, tmp_path) -> LibraryService:
    return LibraryService(repository, settings_path=tmp_path / "settings.json")


def test_toggle_adds_then_removes(library) -> None:
    assert library.toggle(WATCHLIST, FIGHT_CLUB, "movie") is True
    assert library.contains(WATCHLIST, "movie", 550)
    assert library.watchlist()[0].title == "Fight Club"
    assert library.toggle(WATCHLIST, FIGHT_CLUB, "movie") is False
    assert library.watchlist() == []


def test_lists_are_independent(library) -> None:
    library.add(LIKES, THRONES, "tv")
    assert library.liked()[0].title == "Game of Thrones"
    assert library.watchlist() == []
    assert not library.contains(LIKES, "movie", 1399)


def test_adding_twice_keeps_one_entry(library) -> None:
    library.add(WATCHLIST, FIGHT_CLUB, "movie")
    library.add(WATCHLIST, FIGHT_CLUB, "movie")
    assert len(library.watchlist()) == 1


def test_continue_watching_and_dismiss(library) -> None:
    for media_id in (1, 2, 3):
        library.progress_store.upsert(WatchProgressRecord(MediaRef("movie", media_id), last_watched_at=media_id))
    assert [r.media_ref.media_id for r in library.continue_watching(limit=2)] == [3, 2]
    library.dismiss(3)
    assert [r.media_ref.media_id for r in library.continue_watching()] == [2, 1]


def test_clear_all_data(library) -> None:
    library.add(WATCHLIST, FIGHT_CLUB, "movie")
    library.progress_store.upsert(WatchProgressRecord(MediaRef("movie", 550)))
    library.clear_all_data()
    assert library.watchlist() == []
    assert library.continue_watching() == []


def test_accent_color_is_validated_and_persisted(library, tmp_path) -> None:
    assert library.accent_color == DEFAULT_ACCENT_COLOR
    library.set_accent_color("#1DB954")
    assert library.accent_color == "#1DB954"
    stored = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert stored["accent_color"] == "#1DB954"
    with pytest.raises(ValueError):
        library.set_accent_color("green")


def test_invalid_stored_accent_falls_back_to_default(repository) -> None:
    library = LibraryService(repository, settings={"accent_color": "not-a-color"})
    assert library.accent_color == DEFAULT_ACCENT_COLOR


def test_unavailable_storage_lists_nothing(tmp_path) -> None:
    from streamvault.repositories.sqlite_repository import SqliteRepository

    library = LibraryService(SqliteRepository(tmp_path), settings={})
    assert library.add(WATCHLIST, FIGHT_CLUB, "movie") is False
    assert library.watchlist() == []
    assert library.continue_watching() == []


def test_movie_and_show_sharing_an_id_are_separate_entries(library) -> None:
    show_550 = {"id": 550, "name": "Some Show", "first_air_date": "2020-01-01"}
    assert library.toggle(WATCHLIST, FIGHT_CLUB, "movie") is True
    assert library.toggle(WATCHLIST, show_550, "tv") is True
    assert library.contains(WATCHLIST, "movie", 550)
    assert library.contains(WATCHLIST, "tv", 550)
    assert len(library.watchlist()) == 2

    assert library.toggle(WATCHLIST, show_550, "tv") is False
    assert not library.contains(WATCHLIST, "tv", 550)
    assert [(i.media_type, i.title) for i in library.watchlist()] == [("movie", "Fight Club")]


def test_old_id_only_library_table_is_migrated(tmp_path) -> None:
    import sqlite3

    from streamvault.repositories.sqlite_repository import SqliteRepository

    path = tmp_path / "streamvault.db"
    conn = sqlite3.connect(path)
    conn.executescript("""
        CREATE TABLE library_items (
            list_name TEXT NOT NULL,
            media_id INTEGER NOT NULL,
            media_type TEXT NOT NULL,
            title TEXT NOT NULL DEFAULT '',
            poster_path TEXT,
            vote_average REAL DEFAULT 0,
            release_date TEXT,
            added_at INTEGER NOT NULL,
            PRIMARY KEY (list_name, media_id)
        );
        CREATE INDEX idx_library_items_list ON library_items(list_name, added_at);
        INSERT INTO library_items (list_name, media_id, media_type, title, added_at)
        VALUES ('watchlist', 550, 'movie', 'Fight Club', 1);
    """)
    conn.commit()
    conn.close()

    library = LibraryService(SqliteRepository(path), settings={})
    assert library.contains(WATCHLIST, "movie", 550)
    assert library.add(WATCHLIST, {"id": 550, "name": "Some Show"}, "tv") is True
    assert {i.media_type for i in library.watchlist()} == {"movie", "tv"}


def test_dismiss_only_removes_the_matching_type(library) -> None:
    library.progress_store.upsert(WatchProgressRecord(MediaRef("movie", 550), last_watched_at=1))
    library.progress_store.upsert(WatchProgressRecord(MediaRef("tv", 550, 1, 1), last_watched_at=2))
    library.dismiss(550, "tv")
    assert [r.media_ref.media_type for r in library.continue_watching()] == ["movie"]
