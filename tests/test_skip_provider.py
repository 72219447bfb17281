from __future__ import annotations

import json

import pytest

from streamvault.domain import MediaRef, SkipInterval
from streamvault.providers.skip_provider import JsonSkipProvider

DATA = {
    "tv:1399": {
        "intro_start": 0,
        "intro_end": 62,
        "episodes": {
            "S01E02": {"intro_start": 5, "intro_end": 70, "outro_start": 3300, "outro_end": 3420},
        },
    },
    "movie:550": {"outro_start": 8100, "outro_end": 8340},
    "movie:13": {"intro_start": 50, "intro_end": 40},
}


def test_title_level_intervals() -> None:
    provider = JsonSkipProvider(data=DATA)
    assert provider.resolve(MediaRef("tv", 1399, 1, 1)) == [SkipInterval("intro", 0, 62)]


def test_episode_entry_overrides_title_values() -> None:
    provider = JsonSkipProvider(data=DATA)
    assert provider.resolve(MediaRef("tv", 1399, 1, 2)) == [
        SkipInterval("intro", 5, 70),
        SkipInterval("outro", 3300, 3420),
    ]


def test_missing_and_invalid_entries_resolve_empty() -> None:
    provider = JsonSkipProvider(data=DATA)
    assert provider.resolve(MediaRef("movie", 999)) == []
    assert provider.resolve(MediaRef("movie", 13)) == []


def test_resolve_is_idempotent() -> None:
    provider = JsonSkipProvider(data=DATA)
    ref = MediaRef("movie", 550)
    assert provider.resolve(ref) == provider.resolve(ref) == [SkipInterval("outro", 8100, 8340)]


def test_loads_from_file(tmp_path) -> None:
    path = tmp_path / "skips.json"
    path.write_text(json.dumps(DATA), encoding="utf-8")
    assert JsonSkipProvider(path).resolve(MediaRef("movie", 550))[0].end == 8340


def test_unreadable_file_resolves_empty(tmp_path) -> None:
    path = tmp_path / "skips.json"
    path.write_text("{broken", encoding="utf-8")
    assert JsonSkipProvider(path).resolve(MediaRef("movie", 550)) == []
    assert JsonSkipProvider(tmp_path / "absent.json").resolve(MediaRef("movie", 550)) == []


def test_interval_requires_start_before_end() -> None:
    with pytest.raises(ValueError):
        SkipInterval("intro", 10, 10)
    with pytest.raises(ValueError):
        SkipInterval("credits", 0, 10)
    interval = SkipInterval("intro", 0, 90)
    assert interval.contains(0) and interval.contains(89.9) and not interval.contains(90)
