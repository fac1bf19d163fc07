"""Lazy in-memory cache for skin asset files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Callable

logger = logging.getLogger(__name__)

MAX_ASSET_BYTES = 8 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class CachedAsset:
    path: Path
    mtime_ns: int
    size: int
    data: bytes


class AssetCache:
    """Caches asset bytes per path and file fingerprint.

    Entries are loaded on first access and dropped by ``invalidate``; a
    dropped entry is read again only when next requested. ``on_missing`` is
    called with the path and a reason the first time an asset cannot be
    read; later failures for the same path stay silent until the path is
    invalidated, cleared or loads successfully.
    """

    def __init__(
        self,
        on_missing: Callable[[Path, str], None] | None = None,
        *,
        max_bytes: int = MAX_ASSET_BYTES,
    ) -> None:
        self._on_missing = on_missing
        self._max_bytes = max_bytes
        self._entries: dict[Path, CachedAsset] = {}
        self._missing: set[Path] = set()
        self._lock = Lock()

    def get(self, path: Path) -> bytes | None:
        """Return the asset bytes, reading the file when not cached."""
        key = self._normalize_path(path)
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached.data

        entry = self._load(key)
        if entry is None:
            return None
        with self._lock:
            self._entries[key] = entry
            self._missing.discard(key)
        return entry.data

    def invalidate(self, path: Path) -> None:
        key = self._normalize_path(path)
        with self._lock:
            removed = self._entries.pop(key, None)
            self._missing.discard(key)
        if removed is not None:
            logger.debug("Invalidated asset %s", key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._missing.clear()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path):
            return False
        with self._lock:
            return self._normalize_path(path) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _load(self, path: Path) -> CachedAsset | None:
        try:
            stat = path.stat()
        except OSError as exc:
            self._report_missing(path, exc.strerror or "not found")
            return None
        if stat.st_size > self._max_bytes:
            self._report_missing(path, f"file exceeds max size ({self._max_bytes} bytes)")
            return None
        try:
            data = path.read_bytes()
        except OSError as exc:
            self._report_missing(path, str(exc))
            return None
        return CachedAsset(path=path, mtime_ns=stat.st_mtime_ns, size=stat.st_size, data=data)

    def _report_missing(self, path: Path, reason: str) -> None:
        with self._lock:
            if path in self._missing:
                return
            self._missing.add(path)
        logger.warning("Asset unavailable %s: %s", path, reason)
        if self._on_missing is not None:
            self._on_missing(path, reason)

    @staticmethod
    def _normalize_path(path: Path) -> Path:
        try:
            return path.resolve()
        except OSError:
            return path
