"""Process-wide accumulator of skin diagnostics."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock
from typing import Iterable

from nowplaying.errors import ErrorCode, SkinError
from nowplaying.skins.models import SkinWarning, WarningStage

logger = logging.getLogger(__name__)


class WarningSink:
    """Collects warnings during a single build invocation."""

    def __init__(self, stage: WarningStage, path: Path | None = None) -> None:
        self._stage = stage
        self._path = path
        self._items: list[SkinWarning] = []

    @property
    def items(self) -> list[SkinWarning]:
        return list(self._items)

    def add(self, code: ErrorCode, message: str, *, path: Path | None = None) -> None:
        self._items.append(SkinWarning(self._stage, code, message, path or self._path))

    def add_error(self, error: SkinError, *, context: str = "") -> None:
        message = f"{context}: {error.message}" if context else error.message
        self.add(error.code, message, path=error.path)

    def extend(self, warnings: Iterable[SkinWarning]) -> None:
        self._items.extend(warnings)

    def __len__(self) -> int:
        return len(self._items)


class WarningsCollector:
    """Ordered warnings list with a replace-or-append lifecycle.

    A successful full reload replaces the list wholesale; failures found
    later (missing assets, failed reloads) are appended. Readers get an
    immutable tuple snapshot.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._items: tuple[SkinWarning, ...] = ()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Counter bumped on every change, for cheap change detection."""
        return self._generation

    def snapshot(self) -> tuple[SkinWarning, ...]:
        return self._items

    def replace(self, warnings: Iterable[SkinWarning]) -> None:
        items = tuple(warnings)
        with self._lock:
            self._items = items
            self._generation += 1
        for warning in items:
            logger.warning("skin warning: %s", warning)

    def append(self, warning: SkinWarning) -> None:
        with self._lock:
            self._items = self._items + (warning,)
            self._generation += 1
        logger.warning("skin warning: %s", warning)

    def clear(self) -> None:
        with self._lock:
            self._items = ()
            self._generation += 1

    def __len__(self) -> int:
        return len(self._items)
