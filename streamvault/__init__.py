"""Core package for StreamVault."""

from streamvault.domain import MediaRef, PlaybackSession, SkipInterval, WatchProgressRecord
from streamvault.interfaces import IPlayerDriver, IRepository

__all__ = [
    "MediaRef",
    "PlaybackSession",
    "SkipInterval",
    "WatchProgressRecord",
    "IPlayerDriver",
    "IRepository"
]
