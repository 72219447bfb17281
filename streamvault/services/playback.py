import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from streamvault.config import (
    DEFAULT_ACCENT_COLOR,
    MANUAL_INTRO_JUMP_SECONDS,
    MANUAL_INTRO_WINDOW_SECONDS,
    NEXT_EPISODE_WINDOW_SECONDS,
    PROGRESS_PERSIST_INTERVAL_SECONDS,
)
from streamvault.domain import DisplayMetadata, MediaRef, PlaybackSession, SkipInterval, WatchProgressRecord
from streamvault.errors import FetchError, MalformedMessage
from streamvault.interfaces import IPlayerDriver
from streamvault.providers.skip_provider import ISkipProvider
from streamvault.routes import details_route, watch_route
from streamvault.services.catalog import CatalogService
from streamvault.services.progress import WatchProgressStore
from streamvault.utils import coerce_int, coerce_seconds

TIME_KEYS = ("currentTime", "time", "position")
DURATION_KEYS = ("duration", "total", "length", "videoLength")


class SessionState(Enum):
    INITIALIZING = "initializing"
    ACTIVE = "active"
    NAVIGATING = "navigating"
    TERMINATED = "terminated"


@dataclass
class PlayerMessage:
    """The fields of a player message this client understands."""
    current_time: Optional[float] = None
    duration: Optional[float] = None
    season: Optional[int] = None
    episode: Optional[int] = None


def _first_value(payload: Mapping, keys, coerce) -> Any:
    for key in keys:
        value = coerce(payload.get(key))
        if value is not None:
            return value
    return None


def _extract(payload: Mapping) -> PlayerMessage:
    return PlayerMessage(
        current_time=_first_value(payload, TIME_KEYS, coerce_seconds),
        duration=_first_value(payload, DURATION_KEYS, coerce_seconds),
        season=coerce_int(payload.get("season")),
        episode=coerce_int(payload.get("episode")),
    )


def _decode(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage("undecodable bytes") from e
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError as e:
            raise MalformedMessage("not JSON") from e
    return raw


def parse_player_message(raw: Any) -> PlayerMessage:
    """
    Reads an untrusted player message: a mapping, or JSON text of one.
    Fields may sit at the top level or under a nested "data" object.

    Raises:
        MalformedMessage: nothing usable could be read
    """
    payload = _decode(raw)
    if not isinstance(payload, Mapping):
        raise MalformedMessage("not an object")

    message = _extract(payload)
    if message == PlayerMessage() and "data" in payload:
        nested = _decode(payload["data"])
        if isinstance(nested, Mapping):
            message = _extract(nested)

    if message == PlayerMessage():
        raise MalformedMessage("no playback fields")
    return message


def next_episode_ref(details: Optional[Dict[str, Any]], media_ref: MediaRef) -> Optional[MediaRef]:
    """
    The episode after media_ref according to the show's season list:
    the next episode of the season, else episode 1 of the next season
    that has episodes. None when there is nothing after it.
    """
    if not details:
        return None
    episode_counts: Dict[int, int] = {}
    for season in details.get("seasons") or []:
        if not isinstance(season, Mapping):
            continue
        number = coerce_int(season.get("season_number"))
        count = coerce_int(season.get("episode_count"))
        if number is not None and count is not None:
            episode_counts[number] = count

    season = media_ref.season or 1
    episode = media_ref.episode or 1
    if episode < episode_counts.get(season, 0):
        return media_ref.with_episode(season, episode + 1)
    later_seasons = sorted(n for n, count in episode_counts.items() if n > season and count > 0)
    if later_seasons:
        return media_ref.with_episode(later_seasons[0], 1)
    return None


class PlaybackSessionController:
    """
    Drives one watch session: tracks the player's position, decides when
    skip and next-episode affordances are shown, follows in-player episode
    changes, and writes throttled progress to the continue-watching store.

    All state lives on the session object and is read and written within a
    single handler call, so messages are handled strictly in arrival order.
    """

    def __init__(self,
                 media_ref: MediaRef,
                 catalog: CatalogService,
                 skip_provider: ISkipProvider,
                 progress_store: WatchProgressStore,
                 player: IPlayerDriver,
                 navigate: Callable[[str], None],
                 clock: Callable[[], float] = time.time,
                 on_change: Optional[Callable[[str, Any], None]] = None,
                 accent_color: str = DEFAULT_ACCENT_COLOR):
        self.catalog = catalog
        self.skip_provider = skip_provider
        self.progress_store = progress_store
        self.player = player
        self.navigate = navigate
        self.clock = clock
        self.on_change = on_change
        self.accent_color = accent_color

        self.session = PlaybackSession(media_ref=media_ref)
        self.state = SessionState.INITIALIZING
        # The episode the player was loaded with; in-player navigation does not change it
        self.surface_ref = media_ref
        self._details: Optional[Dict[str, Any]] = None

    # === Lifecycle ===

    def start(self) -> None:
        """Enters the active state and starts listening to the player."""
        if self.state is not SessionState.INITIALIZING:
            return
        self._activate(self.session.media_ref)
        self.player.add_listener(self.handle_message)

    def stop(self) -> None:
        """Tears the session down. Nothing is written after this."""
        if self.state is SessionState.TERMINATED:
            return
        self.player.remove_listener(self.handle_message)
        self._set_state(SessionState.TERMINATED)

    @property
    def media_ref(self) -> MediaRef:
        return self.session.media_ref

    @property
    def embed_url(self) -> str:
        return self.player.embed_url(self.surface_ref, self.accent_color)

    @property
    def show_skip_intro(self) -> bool:
        active = self.session.active_interval
        return (active is not None and active.type == "intro") or self.session.manual_intro_active

    @property
    def show_next_episode(self) -> bool:
        return self.session.next_episode_active

    def _activate(self, media_ref: MediaRef) -> None:
        self.session.media_ref = media_ref
        self._load_display_metadata()
        self._resolve_intervals()
        self._seed_progress()
        self._set_state(SessionState.ACTIVE)

    def _load_display_metadata(self) -> None:
        details = self._get_details()
        if details:
            self.session.display = DisplayMetadata.from_details(details)

    def _get_details(self) -> Optional[Dict[str, Any]]:
        if self._details is None:
            ref = self.session.media_ref
            try:
                self._details = self.catalog.get_details(ref.media_type, ref.media_id)
            except FetchError as e:
                print(f"DEBUG PlaybackSessionController: metadata unavailable for {ref.media_type}/{ref.media_id}: {e}")
        return self._details

    def _resolve_intervals(self) -> None:
        intervals: List[SkipInterval] = []
        try:
            intervals = list(self.skip_provider.resolve(self.session.media_ref))
        except Exception as e:
            print(f"DEBUG PlaybackSessionController: skip intervals unavailable: {e}")
        self.session.intervals = intervals
        self._update("active_interval", None)
        self._update("manual_intro_active", False)
        self._update("next_episode_active", False)

    def _seed_progress(self) -> None:
        """Registers the session in Continue Watching before the first position event."""
        ref = self.session.media_ref
        existing = self.progress_store.get(ref.media_type, ref.media_id)
        watched, total = 0.0, 0.0
        if existing is not None:
            if existing.media_ref == ref:
                watched, total = existing.watched_seconds, existing.total_seconds
            if not self.session.display.title:
                self.session.display = existing.display
        self.progress_store.upsert(WatchProgressRecord(
            media_ref=ref,
            display=self.session.display,
            watched_seconds=watched,
            total_seconds=total,
            last_watched_at=int(self.clock()),
        ))

    # === Player events ===

    def handle_message(self, raw: Any) -> None:
        """
        Handles one message from the player. Messages that are not
        playback updates are ignored; nothing here raises.
        """
        if self.state is SessionState.TERMINATED:
            return
        try:
            message = parse_player_message(raw)
        except MalformedMessage:
            return
        try:
            self._apply(message)
        except Exception as e:
            print(f"Error handling player message: {e}")

    def _apply(self, message: PlayerMessage) -> None:
        ref = self.session.media_ref
        if ref.is_tv and (message.season is not None or message.episode is not None):
            season = message.season if message.season is not None else ref.season
            episode = message.episode if message.episode is not None else ref.episode
            if (season, episode) != (ref.season, ref.episode) and season is not None and season >= 0 \
                    and episode is not None and episode >= 1:
                self._navigate_to(ref.with_episode(season, episode), reload_surface=False)

        if message.duration is not None and message.duration > 0:
            self.session.duration = message.duration
        if message.current_time is None:
            return
        self.session.current_time = max(0.0, message.current_time)
        if self.session.duration <= 0:
            return

        self._classify()
        self._persist_if_due()

    def _classify(self) -> None:
        session = self.session
        position = session.current_time

        # Intervals are expected not to overlap; the first match wins if they do
        active = next((i for i in session.intervals if i.contains(position)), None)
        self._update("active_interval", active)

        has_intro = any(i.type == "intro" for i in session.intervals)
        self._update("manual_intro_active",
                     not has_intro and active is None and position < MANUAL_INTRO_WINDOW_SECONDS)

        next_episode = False
        if session.media_ref.is_tv:
            has_outro = any(i.type == "outro" for i in session.intervals)
            next_episode = (active is not None and active.type == "outro") or \
                (not has_outro and session.duration - position < NEXT_EPISODE_WINDOW_SECONDS)
        self._update("next_episode_active", next_episode)

    def _persist_if_due(self) -> None:
        now = self.clock()
        last = self.session.last_persist_at
        if last is not None and now - last < PROGRESS_PERSIST_INTERVAL_SECONDS:
            return
        self.session.last_persist_at = now
        self.progress_store.upsert(WatchProgressRecord(
            media_ref=self.session.media_ref,
            display=self.session.display,
            watched_seconds=self.session.current_time,
            total_seconds=self.session.duration,
            last_watched_at=int(now),
        ))

    # === User actions ===

    def seek(self, delta_seconds: float) -> float:
        """
        Asks the player to jump by delta_seconds and moves the tracked time
        right away. The command is sent in both message shapes players use.

        Returns:
            The target position in seconds.
        """
        session = self.session
        target = max(0.0, session.current_time + delta_seconds)
        if session.duration > 0:
            target = min(target, session.duration)
        if self.state is SessionState.TERMINATED:
            return target

        for command in ({"action": "seek", "time": target},
                        {"event": "command", "func": "seek", "args": [target]}):
            try:
                self.player.post_message(command)
            except Exception as e:
                print(f"Could not send seek command to player: {e}")

        session.current_time = target
        if session.duration > 0:
            self._classify()
        return target

    def handle_skip_intro(self) -> float:
        """Skips to the end of the active interval, or by a fixed jump without one."""
        active = self.session.active_interval
        if active is not None:
            delta = active.end - self.session.current_time
        else:
            delta = MANUAL_INTRO_JUMP_SECONDS
        self.seek(delta)
        return delta

    def handle_next_episode(self) -> Optional[MediaRef]:
        """
        Moves to the next episode, or to the first episode of the next season.
        After the last known episode the title's details page is opened instead.

        Returns:
            The new MediaRef, or None when the session left for the details page.
        """
        ref = self.session.media_ref
        next_ref = next_episode_ref(self._get_details(), ref) if ref.is_tv else None
        if next_ref is None:
            self.navigate(details_route(ref.media_type, ref.media_id))
            self.stop()
            return None
        self._navigate_to(next_ref, reload_surface=True)
        return next_ref

    def _navigate_to(self, media_ref: MediaRef, reload_surface: bool) -> None:
        self._set_state(SessionState.NAVIGATING)
        session = self.session
        session.media_ref = media_ref
        session.current_time = 0.0
        session.duration = 0.0
        session.last_persist_at = None
        if reload_surface:
            self.surface_ref = media_ref
            self._emit("surface_ref", media_ref)
        self.navigate(watch_route(media_ref))
        self._activate(media_ref)
        self._emit("media_ref", media_ref)

    # === Change notification ===

    def _update(self, field_name: str, value: Any) -> None:
        """Sets a session flag, notifying only when the value actually changes."""
        if getattr(self.session, field_name) == value:
            return
        setattr(self.session, field_name, value)
        self._emit(field_name, value)

    def _set_state(self, state: SessionState) -> None:
        if self.state is state:
            return
        self.state = state
        self._emit("state", state)

    def _emit(self, field_name: str, value: Any) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(field_name, value)
        except Exception as e:
            print(f"Error in playback change callback: {e}")
