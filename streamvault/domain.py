import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

MEDIA_TYPES = ("movie", "tv")
SKIP_TYPES = ("intro", "outro")


@dataclass(frozen=True)
class MediaRef:
    """Identifies a playable unit: a movie, or one episode of a TV show."""
    media_type: str
    media_id: int
    season: Optional[int] = None
    episode: Optional[int] = None

    def __post_init__(self):
        if self.media_type not in MEDIA_TYPES:
            raise ValueError(f"Unsupported media type: {self.media_type!r}")

    @property
    def is_tv(self) -> bool:
        return self.media_type == "tv"

    @property
    def series_key(self) -> Tuple[str, int]:
        """Identity shared by every episode of the same title."""
        return (self.media_type, self.media_id)

    def with_episode(self, season: int, episode: int) -> "MediaRef":
        return replace(self, season=season, episode=episode)


@dataclass
class DisplayMetadata:
    """Denormalized copy of catalog fields needed to render a card."""
    title: str = ""
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None

    @classmethod
    def from_details(cls, details: Dict[str, Any]) -> "DisplayMetadata":
        return cls(
            title=details.get("title") or details.get("name") or "",
            poster_path=details.get("poster_path"),
            vote_average=float(details.get("vote_average") or 0.0),
            release_date=details.get("release_date") or details.get("first_air_date"),
        )


@dataclass
class WatchProgressRecord:
    """Playback position of the most recently watched unit of a title."""
    media_ref: MediaRef
    display: DisplayMetadata = field(default_factory=DisplayMetadata)
    watched_seconds: float = 0.0
    total_seconds: float = 0.0
    last_watched_at: int = field(default_factory=lambda: int(time.time()))

    def __post_init__(self):
        self.watched_seconds = max(0.0, float(self.watched_seconds))
        self.total_seconds = max(0.0, float(self.total_seconds))
        if self.total_seconds > 0:
            self.watched_seconds = min(self.watched_seconds, self.total_seconds)

    @property
    def progress_percent(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return 100.0 * self.watched_seconds / self.total_seconds


@dataclass(frozen=True)
class SkipInterval:
    """A named window (intro/outro) eligible for a one-tap skip."""
    type: str
    start: float
    end: float

    def __post_init__(self):
        if self.type not in SKIP_TYPES:
            raise ValueError(f"Unsupported skip interval type: {self.type!r}")
        if not self.start < self.end:
            raise ValueError(f"Skip interval must start before it ends ({self.start} >= {self.end})")

    def contains(self, seconds: float) -> bool:
        return self.start <= seconds < self.end


@dataclass
class PlaybackSession:
    """Mutable state of one mounted watch view."""
    media_ref: MediaRef
    current_time: float = 0.0
    duration: float = 0.0
    intervals: List[SkipInterval] = field(default_factory=list)
    active_interval: Optional[SkipInterval] = None
    manual_intro_active: bool = False
    next_episode_active: bool = False
    last_persist_at: Optional[float] = None  # wall clock of the last throttled write
    display: DisplayMetadata = field(default_factory=DisplayMetadata)


@dataclass
class MetadataCacheEntry:
    """A cached catalog response. List endpoints also track paging."""
    data: Any = None
    items: List[Dict[str, Any]] = field(default_factory=list)
    page: int = 0
    exhausted: bool = False


@dataclass
class LibraryItem:
    """An entry of the watchlist or the liked titles."""
    media_id: int
    media_type: str
    title: str
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None
    added_at: int = field(default_factory=lambda: int(time.time()))
