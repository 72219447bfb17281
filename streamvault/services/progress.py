from typing import List, Optional

from streamvault.domain import WatchProgressRecord
from streamvault.errors import PersistenceUnavailable
from streamvault.interfaces import IRepository


class WatchProgressStore:
    """
    Continue-watching store used by the playback controller and list views.
    Storage failures are logged and dropped so playback never stalls on them.
    """

    def __init__(self, repository: IRepository):
        self.repository = repository

    def upsert(self, record: WatchProgressRecord) -> bool:
        """Saves the record for its title. Returns False if it could not be persisted."""
        try:
            self.repository.upsert_progress(record)
            return True
        except PersistenceUnavailable as e:
            print(f"DEBUG WatchProgressStore.upsert: progress not saved ({e})")
            return False

    def remove(self, media_id: int, media_type: Optional[str] = None) -> None:
        """Removes the record for media_id; media_type narrows it when a movie and a show share the id."""
        try:
            self.repository.remove_progress(media_id, media_type)
        except PersistenceUnavailable as e:
            print(f"DEBUG WatchProgressStore.remove: could not remove {media_id} ({e})")

    def list_all(self) -> List[WatchProgressRecord]:
        """Records ordered most-recently-watched first; empty if storage is unavailable."""
        try:
            return self.repository.list_progress()
        except PersistenceUnavailable as e:
            print(f"DEBUG WatchProgressStore.list_all: storage unavailable ({e})")
            return []

    def get(self, media_type: str, media_id: int):
        """Returns the record of a title, if any."""
        for record in self.list_all():
            if record.media_ref.series_key == (media_type, media_id):
                return record
        return None
