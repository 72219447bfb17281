from typing import Any, Dict, List, Optional

from streamvault.config import DEFAULT_ACCENT_COLOR
from streamvault.domain import LibraryItem, WatchProgressRecord
from streamvault.errors import PersistenceUnavailable
from streamvault.interfaces import IRepository
from streamvault.repositories.sqlite_repository import LIKES, WATCHLIST
from streamvault.services.progress import WatchProgressStore
from streamvault.settings import load_settings, save_settings

HEX_DIGITS = set("0123456789abcdefABCDEF")


def is_valid_accent(color: str) -> bool:
    return isinstance(color, str) and len(color) == 7 and color.startswith("#") and set(color[1:]) <= HEX_DIGITS


class LibraryService:
    """
    The user's own data: watchlist, liked titles, continue watching and
    the accent color. Storage failures degrade to empty lists.
    """

    def __init__(self, repository: IRepository, progress_store: Optional[WatchProgressStore] = None,
                 settings: Optional[Dict[str, Any]] = None, settings_path=None):
        self.repository = repository
        self.progress_store = progress_store or WatchProgressStore(repository)
        self.settings_path = settings_path
        self.settings = settings if settings is not None else load_settings(settings_path)

    # === Lists ===

    def list_items(self, list_name: str) -> List[LibraryItem]:
        try:
            return self.repository.list_library_items(list_name)
        except PersistenceUnavailable as e:
            print(f"DEBUG LibraryService.list_items: storage unavailable ({e})")
            return []

    def contains(self, list_name: str, media_type: str, media_id: int) -> bool:
        return any(item.media_id == media_id and item.media_type == media_type
                   for item in self.list_items(list_name))

    def add(self, list_name: str, details: Dict[str, Any], media_type: str) -> bool:
        item = LibraryItem(
            media_id=int(details["id"]),
            media_type=media_type,
            title=details.get("title") or details.get("name") or "",
            poster_path=details.get("poster_path"),
            vote_average=float(details.get("vote_average") or 0.0),
            release_date=details.get("release_date") or details.get("first_air_date"),
        )
        try:
            self.repository.add_library_item(list_name, item)
            return True
        except PersistenceUnavailable as e:
            print(f"DEBUG LibraryService.add: {item.title} not saved ({e})")
            return False

    def remove(self, list_name: str, media_type: str, media_id: int) -> None:
        try:
            self.repository.remove_library_item(list_name, media_type, media_id)
        except PersistenceUnavailable as e:
            print(f"DEBUG LibraryService.remove: could not remove {media_id} ({e})")

    def toggle(self, list_name: str, details: Dict[str, Any], media_type: str) -> bool:
        """Adds or removes a title. Returns True when the title is now in the list."""
        media_id = int(details["id"])
        if self.contains(list_name, media_type, media_id):
            self.remove(list_name, media_type, media_id)
            return False
        return self.add(list_name, details, media_type)

    def watchlist(self) -> List[LibraryItem]:
        return self.list_items(WATCHLIST)

    def liked(self) -> List[LibraryItem]:
        return self.list_items(LIKES)

    # === Continue watching ===

    def continue_watching(self, limit: Optional[int] = None) -> List[WatchProgressRecord]:
        records = self.progress_store.list_all()
        return records[:limit] if limit else records

    def dismiss(self, media_id: int, media_type: Optional[str] = None) -> None:
        self.progress_store.remove(media_id, media_type)

    def clear_all_data(self) -> None:
        """Removes progress and both lists."""
        try:
            self.repository.clear_all()
        except PersistenceUnavailable as e:
            print(f"DEBUG LibraryService.clear_all_data: storage unavailable ({e})")

    # === Settings ===

    @property
    def accent_color(self) -> str:
        color = self.settings.get("accent_color")
        return color if is_valid_accent(color) else DEFAULT_ACCENT_COLOR

    def set_accent_color(self, color: str) -> None:
        if not is_valid_accent(color):
            raise ValueError(f"Not a #RRGGBB color: {color!r}")
        self.settings["accent_color"] = color
        save_settings(self.settings, self.settings_path)
