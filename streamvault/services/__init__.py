from .catalog import CatalogService
from .library import LibraryService
from .playback import PlaybackSessionController, SessionState
from .progress import WatchProgressStore

__all__ = [
    "CatalogService",
    "LibraryService",
    "PlaybackSessionController",
    "SessionState",
    "WatchProgressStore",
]
