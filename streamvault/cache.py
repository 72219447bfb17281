"""In-memory cache of catalog responses for the lifetime of the browsing session."""
from typing import Any, Dict, List, Optional

from streamvault.domain import MetadataCacheEntry


def make_cache_key(endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Derives a stable key from an endpoint and its normalized params."""
    normalized = sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None)
    if not normalized:
        return endpoint
    return endpoint + "?" + "&".join(f"{k}={v}" for k, v in normalized)


class MetadataCache:
    """
    Keyed store of list pages and detail payloads.
    There is no eviction: entries are small and live as long as the process.
    """

    def __init__(self):
        self._entries: Dict[str, MetadataCacheEntry] = {}

    def get(self, key: str) -> Optional[MetadataCacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, entry: MetadataCacheEntry) -> None:
        """Stores an entry, replacing whatever was cached under the key."""
        self._entries[key] = entry

    def append_page(self, key: str, items: List[Dict[str, Any]], next_page: int, exhausted: bool) -> MetadataCacheEntry:
        """
        Appends a freshly fetched page after the items already cached.
        Items are kept exactly as fetched, duplicates included.
        """
        previous = self._entries.get(key)
        entry = MetadataCacheEntry(
            data=previous.data if previous else None,
            items=(list(previous.items) if previous else []) + list(items),
            page=next_page,
            exhausted=exhausted,
        )
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
