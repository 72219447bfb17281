from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from streamvault.domain import LibraryItem, MediaRef, WatchProgressRecord

MessageListener = Callable[[Any], None]


class IPlayerDriver(ABC):
    """A playback surface reachable only through untyped messages."""

    @abstractmethod
    def embed_url(self, media_ref: MediaRef, accent_color: str) -> str:
        """Builds the URL the surface is loaded from."""
        pass

    @abstractmethod
    def post_message(self, message: dict) -> None:
        """Sends a best-effort command to the surface."""
        pass

    @abstractmethod
    def add_listener(self, listener: MessageListener) -> None:
        pass

    @abstractmethod
    def remove_listener(self, listener: MessageListener) -> None:
        pass


class IRepository(ABC):
    """Durable store for continue-watching progress and the user's lists."""

    @abstractmethod
    def upsert_progress(self, record: WatchProgressRecord) -> None:
        pass

    @abstractmethod
    def remove_progress(self, media_id: int, media_type: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def list_progress(self) -> List[WatchProgressRecord]:
        """Returns records ordered most-recently-watched first."""
        pass

    @abstractmethod
    def add_library_item(self, list_name: str, item: LibraryItem) -> None:
        pass

    @abstractmethod
    def remove_library_item(self, list_name: str, media_type: str, media_id: int) -> None:
        pass

    @abstractmethod
    def list_library_items(self, list_name: str) -> List[LibraryItem]:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        pass
