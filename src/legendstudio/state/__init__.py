"""State management module for Legend Studio."""

from .history import HISTORY_LIMIT, HistoryStore, PreferencesStore, enrich
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "HISTORY_LIMIT",
    "HistoryStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PreferencesStore",
    "enrich",
]
