from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamvault.domain import MediaRef  # noqa: E402
from streamvault.errors import AllStrategiesFailed  # noqa: E402
from streamvault.interfaces import IPlayerDriver  # noqa: E402
from streamvault.providers.skip_provider import JsonSkipProvider  # noqa: E402
from streamvault.repositories.sqlite_repository import SqliteRepository  # noqa: E402
from streamvault.services.progress import WatchProgressStore  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePlayer(IPlayerDriver):
    def __init__(self) -> None:
        self.sent: List[dict] = []
        self.listeners: List[Any] = []

    def embed_url(self, media_ref: MediaRef, accent_color: str) -> str:
        return f"https://player.test/{media_ref.media_type}/{media_ref.media_id}"

    def post_message(self, message: dict) -> None:
        self.sent.append(message)

    def add_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener) -> None:
        self.listeners.remove(listener)

    def emit(self, raw: Any) -> None:
        for listener in list(self.listeners):
            listener(raw)


class FakeCatalog:
    def __init__(self, details: Optional[Dict[str, Any]] = None, fail: bool = False) -> None:
        self.details = details or {}
        self.fail = fail
        self.calls = 0

    def get_details(self, media_type: str, media_id: int, refresh: bool = False) -> Dict[str, Any]:
        self.calls += 1
        if self.fail:
            raise AllStrategiesFailed("offline")
        return self.details


class CountingStore(WatchProgressStore):
    def __init__(self, repository) -> None:
        super().__init__(repository)
        self.writes: List[Any] = []

    def upsert(self, record) -> bool:
        self.writes.append(record)
        return super().upsert(record)


@pytest.fixture
def repository(tmp_path: Path) -> SqliteRepository:
    return SqliteRepository(tmp_path / "streamvault.db")


@pytest.fixture
def store(repository: SqliteRepository) -> CountingStore:
    return CountingStore(repository)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def no_skip_data() -> JsonSkipProvider:
    return JsonSkipProvider(data={})
