from __future__ import annotations

from typing import List

import pytest

from conftest import FakeCatalog
from streamvault.domain import MediaRef, SkipInterval
from streamvault.providers.skip_provider import ISkipProvider
from streamvault.services.playback import (
    PlaybackSessionController,
    SessionState,
    next_episode_ref,
    parse_player_message,
)
from streamvault.errors import MalformedMessage

MOVIE = MediaRef("movie", 550)
SHOW = MediaRef("tv", 1399, 1, 1)
SHOW_DETAILS = {
    "id": 1399,
    "name": "Game of Thrones",
    "poster_path": "/got.jpg",
    "vote_average": 8.4,
    "first_air_date": "2011-04-17",
    "seasons": [
        {"season_number": 0, "episode_count": 3},
        {"season_number": 1, "episode_count": 10},
        {"season_number": 2, "episode_count": 0},
        {"season_number": 3, "episode_count": 10},
    ],
}


class StaticSkips(ISkipProvider):
    def __init__(self, intervals: List[SkipInterval]) -> None:
        self.intervals = intervals

    def resolve(self, media_ref: MediaRef) -> List[SkipInterval]:
        return list(self.intervals)


def make_controller(store, player, clock, media_ref=MOVIE, intervals=None, catalog=None, on_change=None):
    navigated: List[str] = []
    controller = PlaybackSessionController(
        media_ref,
        catalog=catalog or FakeCatalog(SHOW_DETAILS if media_ref.is_tv else {"id": 550, "title": "Fight Club"}),
        skip_provider=StaticSkips(intervals or []),
        progress_store=store,
        player=player,
        navigate=navigated.append,
        clock=clock,
        on_change=on_change,
    )
    controller.start()
    return controller, navigated


def position(t: float, duration: float = 3000.0) -> dict:
    return {"currentTime": t, "duration": duration}


# === Lifecycle ===

def test_start_seeds_zero_progress_record(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    assert controller.state is SessionState.ACTIVE
    records = store.list_all()
    assert len(records) == 1
    assert records[0].media_ref == MOVIE
    assert records[0].watched_seconds == 0
    assert records[0].display.title == "Fight Club"
    assert player.listeners == [controller.handle_message]


def test_metadata_failure_does_not_block_playback(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock, catalog=FakeCatalog(fail=True))
    assert controller.state is SessionState.ACTIVE
    player.emit(position(42))
    assert controller.session.current_time == 42
    assert store.list_all()[0].watched_seconds == 42


def test_stop_detaches_and_stops_writing(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    writes = len(store.writes)
    controller.stop()
    assert controller.state is SessionState.TERMINATED
    assert player.listeners == []
    controller.handle_message(position(100))
    assert len(store.writes) == writes
    controller.stop()


# === Skip intervals ===

def test_exact_intro_interval_drives_skip_affordance(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock, intervals=[SkipInterval("intro", 0, 90)])
    seen = {}
    for t in (0, 30, 91, 300):
        player.emit(position(t))
        seen[t] = (controller.show_skip_intro, controller.session.manual_intro_active)
    assert seen[0] == (True, False)
    assert seen[30] == (True, False)
    assert seen[91] == (False, False)
    assert seen[300] == (False, False)


def test_manual_intro_fallback_without_intro_data(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    states = []
    for t in (0, 100, 301):
        player.emit(position(t))
        states.append(controller.session.manual_intro_active)
    assert states == [True, True, False]


def test_skip_intro_lands_on_interval_end(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock, intervals=[SkipInterval("intro", 40, 120)])
    player.emit(position(60))
    assert controller.handle_skip_intro() == 60
    assert {"action": "seek", "time": 120.0} in player.sent
    assert {"event": "command", "func": "seek", "args": [120.0]} in player.sent
    assert controller.session.current_time == 120
    assert controller.session.active_interval is None


def test_skip_intro_without_interval_jumps_fixed_amount(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    player.emit(position(10))
    assert controller.handle_skip_intro() == 85
    assert player.sent[0] == {"action": "seek", "time": 95.0}


def test_seek_is_clamped_to_duration(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    player.emit(position(2990))
    assert controller.seek(30) == 3000
    assert controller.seek(-5000) == 0


def test_changes_are_edge_triggered(store, player, clock) -> None:
    changes = []
    make_controller(store, player, clock, intervals=[SkipInterval("intro", 0, 90)],
                    on_change=lambda name, value: changes.append(name))
    for t in (10, 11, 12, 95, 96):
        player.emit(position(t))
    assert changes.count("active_interval") == 2


# === Next episode ===

def test_next_episode_affordance_from_outro(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock, media_ref=SHOW,
                                    intervals=[SkipInterval("outro", 2800, 2950)])
    player.emit(position(2700))
    assert not controller.show_next_episode
    player.emit(position(2850))
    assert controller.show_next_episode
    # An exact outro exists, so the end-of-file window does not apply
    player.emit(position(2960))
    assert not controller.show_next_episode


def test_next_episode_affordance_near_end_without_outro(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock, media_ref=SHOW)
    player.emit(position(2870))
    assert not controller.show_next_episode
    player.emit(position(2890))
    assert controller.show_next_episode


def test_movies_never_offer_next_episode(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    player.emit(position(2990))
    assert not controller.show_next_episode


def test_handle_next_episode_within_season(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock, media_ref=MediaRef("tv", 1399, 1, 3))
    assert controller.handle_next_episode() == MediaRef("tv", 1399, 1, 4)
    assert navigated[-1] == "/watch/tv/1399/1/4"
    assert controller.surface_ref == MediaRef("tv", 1399, 1, 4)
    assert controller.state is SessionState.ACTIVE


def test_handle_next_episode_skips_empty_seasons(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock, media_ref=MediaRef("tv", 1399, 1, 10))
    assert controller.handle_next_episode() == MediaRef("tv", 1399, 3, 1)
    assert navigated[-1] == "/watch/tv/1399/3/1"


def test_handle_next_episode_after_last_goes_to_details(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock, media_ref=MediaRef("tv", 1399, 3, 10))
    assert controller.handle_next_episode() is None
    assert navigated == ["/details/tv/1399"]
    assert controller.state is SessionState.TERMINATED


def test_next_episode_ref_without_metadata() -> None:
    assert next_episode_ref(None, SHOW) is None
    assert next_episode_ref({"seasons": "bogus"}, SHOW) is None


# === In-player navigation ===

def test_in_player_episode_change_navigates_without_reload(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock, media_ref=SHOW)
    player.emit({"season": 1, "episode": 2, "currentTime": 5, "duration": 3000})
    assert controller.media_ref == MediaRef("tv", 1399, 1, 2)
    assert controller.surface_ref == SHOW
    assert navigated == ["/watch/tv/1399/1/2"]
    assert controller.state is SessionState.ACTIVE
    records = store.list_all()
    assert len(records) == 1
    assert records[0].media_ref.episode == 2


def test_episode_fields_are_ignored_for_movies(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock)
    player.emit({"season": 2, "episode": 5, "currentTime": 5, "duration": 3000})
    assert controller.media_ref == MOVIE
    assert navigated == []


# === Persistence ===

def test_events_one_second_apart_write_at_most_once(store, player, clock) -> None:
    make_controller(store, player, clock)
    seeded = len(store.writes)
    player.emit(position(100))
    clock.advance(1)
    player.emit(position(101))
    assert len(store.writes) - seeded <= 1


def test_events_six_seconds_apart_write_twice(store, player, clock) -> None:
    make_controller(store, player, clock)
    seeded = len(store.writes)
    player.emit(position(100))
    clock.advance(6)
    player.emit(position(106))
    assert len(store.writes) - seeded == 2
    record = store.list_all()[0]
    assert record.watched_seconds == 106
    assert record.progress_percent == pytest.approx(100 * 106 / 3000)


def test_restart_keeps_progress_of_same_episode(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    player.emit(position(1200))
    controller.stop()
    make_controller(store, player, clock)
    assert store.list_all()[0].watched_seconds == 1200


# === Untrusted messages ===

@pytest.mark.parametrize("raw", [
    "not json",
    b"\xff\xfe",
    42,
    None,
    ["currentTime", 5],
    {"type": "ready"},
    '{"currentTime": "abc", "duration": null}',
    {"currentTime": float("nan"), "duration": 100},
    {"currentTime": True, "duration": 100},
    '{"currentTime": 1' + "0" * 400 + ', "duration": null}',
    {"currentTime": 10 ** 400},
])
def test_malformed_messages_are_ignored(store, player, clock, raw) -> None:
    controller, _ = make_controller(store, player, clock)
    writes = len(store.writes)
    player.emit(raw)
    assert controller.session.current_time == 0
    assert len(store.writes) == writes
    assert controller.state is SessionState.ACTIVE


def test_json_string_with_nested_data_is_accepted(store, player, clock) -> None:
    controller, _ = make_controller(store, player, clock)
    player.emit('{"type": "timeupdate", "data": {"time": "50", "videoLength": 1000}}')
    assert controller.session.current_time == 50
    assert controller.session.duration == 1000


def test_parse_player_message_alternate_keys() -> None:
    message = parse_player_message({"position": 12.5, "total": 600, "season": "2", "episode": 3})
    assert (message.current_time, message.duration, message.season, message.episode) == (12.5, 600, 2, 3)
    with pytest.raises(MalformedMessage):
        parse_player_message({"data": "nope"})


def test_oversized_episode_numbers_are_ignored(store, player, clock) -> None:
    controller, navigated = make_controller(store, player, clock, media_ref=SHOW)
    player.emit({"season": 10 ** 400, "episode": 2, "currentTime": 5, "duration": 3000})
    assert navigated == ["/watch/tv/1399/1/2"]
    player.emit({"season": 1, "episode": 10 ** 400, "currentTime": 6, "duration": 3000})
    assert controller.media_ref == MediaRef("tv", 1399, 1, 2)
    assert controller.session.current_time == 6
