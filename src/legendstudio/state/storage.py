"""Keyed durable storage for persisted records.

Each key maps to one JSON document. ``JsonFileStorage`` keeps one file per
key under a directory and enforces a per-record byte quota, rejecting
oversize writes with ``StorageQuotaError`` the way a browser rejects a full
local store.
"""

import errno
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from legendstudio.errors import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStorage(Protocol):
    """Minimal string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage with the same quota behaviour as the file store."""

    def __init__(self, quota_bytes: int = 0) -> None:
        self.quota_bytes = quota_bytes
        self.records: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.records.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        self.records[key] = value

    def delete(self, key: str) -> None:
        self.records.pop(key, None)


class JsonFileStorage:
    """One ``<key>.json`` file per record inside ``storage_dir``.

    Args:
        storage_dir: Directory for the record files (created on demand).
        quota_bytes: Maximum encoded size of one record; 0 disables the check.
    """

    def __init__(self, storage_dir: str | Path, quota_bytes: int = 0) -> None:
        self.storage_dir = Path(storage_dir)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read record {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            if exc.errno in (errno.ENOSPC, errno.EDQUOT):
                raise StorageQuotaError(f"No space left to store {key!r}") from exc
            raise StorageError(f"Could not write record {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def _check_quota(key: str, value: str, quota_bytes: int) -> None:
    size = len(value.encode("utf-8"))
    if quota_bytes and size > quota_bytes:
        logger.debug("Record %r is %d bytes, quota is %d", key, size, quota_bytes)
        raise StorageQuotaError(
            f"Record {key!r} needs {size} bytes but the storage quota is {quota_bytes}"
        )
