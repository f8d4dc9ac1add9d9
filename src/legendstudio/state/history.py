"""Capped, persisted image history and the preference record."""

import json
import logging
from collections.abc import Sequence
from typing import Literal

from pydantic import TypeAdapter, ValidationError

from legendstudio.core.toasts import ToastCenter
from legendstudio.errors import StorageError, StorageQuotaError
from legendstudio.models.images import GeneratedImage, HistoryItem
from legendstudio.utils.imaging import (
    ImageDecodeError,
    aspect_ratio_from_dimensions,
    estimate_size_from_base64,
    get_image_dimensions,
)

from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 25
HISTORY_KEY = "image-gen-history"
THEME_KEY = "app-theme"

QUOTA_WARNING = (
    "Storage is full: history could not be saved automatically. "
    "Delete some history entries to free space."
)

Theme = Literal["cyberpunk", "classic"]

_history_adapter = TypeAdapter(list[HistoryItem])


def enrich(image: GeneratedImage) -> HistoryItem:
    """Turn a generated image into a history record with metadata filled in.

    Existing width/height/size are trusted; otherwise they are decoded from
    the image bytes. A decode failure keeps the record with the metadata left
    unset.
    """
    data = image.model_dump(exclude={"analysis"})
    if image.width and image.height and image.size:
        item = HistoryItem(**data)
        if not item.aspect_ratio:
            item.aspect_ratio = aspect_ratio_from_dimensions(item.width, item.height)
        return item

    try:
        width, height = get_image_dimensions(image.src)
    except ImageDecodeError as exc:
        logger.error("Could not get image metadata for %s: %s", image.id, exc)
        data.update(width=None, height=None, size=None)
        return HistoryItem(**data)

    data.update(
        width=width,
        height=height,
        size=estimate_size_from_base64(image.src),
        aspect_ratio=image.aspect_ratio or aspect_ratio_from_dimensions(width, height),
    )
    return HistoryItem(**data)


class HistoryStore:
    """Newest-first list of history records, capped at ``limit`` on every write.

    Every mutation persists the whole list. A full store leaves the in-memory
    list exactly as computed and only raises a warning toast; the operation
    that produced the record still succeeds.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        toasts: ToastCenter | None = None,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self.storage = storage
        self.toasts = toasts
        self.limit = limit
        self._items: list[HistoryItem] = []

    @property
    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def load(self) -> list[HistoryItem]:
        """Load the persisted list verbatim (the cap is only applied on write)."""
        try:
            raw = self.storage.get(HISTORY_KEY)
        except StorageError as exc:
            logger.error("Failed to load history: %s", exc)
            raw = None
        if raw:
            try:
                self._items = _history_adapter.validate_json(raw)
            except ValidationError as exc:
                logger.error("Discarding unreadable history record: %s", exc)
                self._items = []
        else:
            self._items = []
        logger.debug("Loaded %d history items", len(self._items))
        return self.items

    def persist(self) -> bool:
        """Write the list to storage; returns False when the write was rejected."""
        payload = _history_adapter.dump_json(self._items[: self.limit]).decode("utf-8")
        try:
            self.storage.set(HISTORY_KEY, payload)
        except StorageQuotaError as exc:
            logger.error("Failed to save history: %s", exc)
            if self.toasts is not None:
                self.toasts.warning(QUOTA_WARNING)
            return False
        except StorageError as exc:
            logger.error("Failed to save history: %s", exc)
            return False
        return True

    def commit(self, images: Sequence[GeneratedImage]) -> list[HistoryItem]:
        """Enrich, prepend (keeping the given order), trim and persist."""
        new_items = [enrich(image) for image in images]
        self._items = (new_items + self._items)[: self.limit]
        self.persist()
        return new_items

    def get(self, item_id: str) -> HistoryItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def set_analysis(self, item_id: str, analysis: str) -> HistoryItem | None:
        """Attach an analysis once; an existing analysis is never replaced."""
        item = self.get(item_id)
        if item is None or item.analysis is not None:
            return item
        item.analysis = analysis
        self.persist()
        return item

    def delete(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        if len(self._items) == before:
            return False
        self.persist()
        return True

    def clear(self) -> None:
        self._items = []
        self.persist()


class PreferencesStore:
    """Theme preference, stored independently of the history record."""

    DEFAULT_THEME: Theme = "cyberpunk"

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def load_theme(self) -> Theme:
        try:
            raw = self.storage.get(THEME_KEY)
            value = json.loads(raw) if raw else None
        except (StorageError, ValueError) as exc:
            logger.error("Failed to load theme: %s", exc)
            return self.DEFAULT_THEME
        if value in ("cyberpunk", "classic"):
            return value
        return self.DEFAULT_THEME

    def save_theme(self, theme: Theme) -> None:
        try:
            self.storage.set(THEME_KEY, json.dumps(theme))
        except StorageError as exc:
            logger.error("Failed to save theme: %s", exc)
