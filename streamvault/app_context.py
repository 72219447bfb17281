from pathlib import Path
from typing import Any, Callable, Dict, Optional

from streamvault.cache import MetadataCache
from streamvault.domain import MediaRef
from streamvault.drivers.embed_driver import EmbedPlayerDriver
from streamvault.fetch import ResilientFetcher
from streamvault.providers.metadata_provider import TMDBProvider
from streamvault.providers.skip_provider import JsonSkipProvider
from streamvault.repositories.sqlite_repository import SqliteRepository
from streamvault.services.catalog import CatalogService
from streamvault.services.library import LibraryService
from streamvault.services.playback import PlaybackSessionController
from streamvault.services.progress import WatchProgressStore
from streamvault.settings import DATABASE_PATH, load_settings


class AppContext:
    """
    Centralized container for application services and state.
    Everything is built on first use; one instance lives per UI process.
    """

    def __init__(self, database_path: Path = DATABASE_PATH, settings: Optional[Dict[str, Any]] = None):
        self.database_path = database_path
        self._settings = settings
        self._repository: Optional[SqliteRepository] = None
        self._cache: Optional[MetadataCache] = None
        self._catalog: Optional[CatalogService] = None
        self._skip_provider: Optional[JsonSkipProvider] = None
        self._progress_store: Optional[WatchProgressStore] = None
        self._library: Optional[LibraryService] = None

    @property
    def settings(self) -> Dict[str, Any]:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    @property
    def repository(self) -> SqliteRepository:
        if self._repository is None:
            self._repository = SqliteRepository(self.database_path)
        return self._repository

    @property
    def cache(self) -> MetadataCache:
        if self._cache is None:
            self._cache = MetadataCache()
        return self._cache

    @property
    def catalog(self) -> CatalogService:
        if self._catalog is None:
            self._catalog = CatalogService(TMDBProvider(ResilientFetcher()), self.cache)
        return self._catalog

    @property
    def skip_provider(self) -> JsonSkipProvider:
        if self._skip_provider is None:
            self._skip_provider = JsonSkipProvider(self.settings.get("skip_data_path"))
        return self._skip_provider

    @property
    def progress_store(self) -> WatchProgressStore:
        if self._progress_store is None:
            self._progress_store = WatchProgressStore(self.repository)
        return self._progress_store

    @property
    def library(self) -> LibraryService:
        if self._library is None:
            self._library = LibraryService(self.repository, self.progress_store, self.settings)
        return self._library

    def create_session(self, media_ref: MediaRef, navigate: Callable[[str], None],
                       on_change: Optional[Callable[[str, Any], None]] = None) -> PlaybackSessionController:
        """Builds a controller bound to a fresh player driver."""
        return PlaybackSessionController(
            media_ref,
            catalog=self.catalog,
            skip_provider=self.skip_provider,
            progress_store=self.progress_store,
            player=EmbedPlayerDriver(),
            navigate=navigate,
            on_change=on_change,
            accent_color=self.library.accent_color,
        )

    def reload_settings(self):
        """Forces a reload of settings and dependent services."""
        self._settings = load_settings()
        self._skip_provider = None
        self._library = None
