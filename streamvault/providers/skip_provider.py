"""Skip interval provider interface and a JSON timestamps implementation."""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from streamvault.domain import MediaRef, SkipInterval
from streamvault.utils import coerce_seconds


class ISkipProvider(ABC):
    """Abstract interface for skip interval sources."""

    @abstractmethod
    def resolve(self, media_ref: MediaRef) -> List[SkipInterval]:
        """
        Look up the intro/outro intervals of a movie or episode.

        Returns:
            A possibly empty list, in source order. Calling it again for the
            same MediaRef returns the same intervals.
        """
        pass


class JsonSkipProvider(ISkipProvider):
    """
    Reads skip timestamps from a JSON file of the form::

        {
          "tv:1399": {
            "intro_start": 0, "intro_end": 62,
            "episodes": {"S01E01": {"intro_start": 5, "intro_end": 70,
                                    "outro_start": 3300, "outro_end": 3420}}
          },
          "movie:550": {"outro_start": 8100, "outro_end": 8340}
        }

    Episode entries override the title-level values they define.
    """

    def __init__(self, path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        self.path = Path(path) if path else None
        self._data: Optional[Dict[str, Any]] = data

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data
        self._data = {}
        if self.path and self.path.exists():
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    self._data = raw
            except (json.JSONDecodeError, OSError) as e:
                print(f"DEBUG JsonSkipProvider: could not read {self.path}: {e}")
        return self._data

    def resolve(self, media_ref: MediaRef) -> List[SkipInterval]:
        entry = self._load().get(f"{media_ref.media_type}:{media_ref.media_id}")
        if not isinstance(entry, dict):
            return []

        segments = {k: v for k, v in entry.items() if k != "episodes"}
        if media_ref.is_tv and media_ref.season is not None and media_ref.episode is not None:
            episodes = entry.get("episodes")
            if isinstance(episodes, dict):
                episode_entry = episodes.get(f"S{media_ref.season:02d}E{media_ref.episode:02d}")
                if isinstance(episode_entry, dict):
                    segments.update(episode_entry)

        intervals = []
        for kind in ("intro", "outro"):
            start = coerce_seconds(segments.get(f"{kind}_start", 0 if f"{kind}_end" in segments else None))
            end = coerce_seconds(segments.get(f"{kind}_end"))
            if start is None or end is None or start < 0 or end <= start:
                continue
            intervals.append(SkipInterval(type=kind, start=start, end=end))
        return intervals
