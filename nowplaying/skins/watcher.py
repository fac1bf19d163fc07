"""Polling file watcher that drives skin reloads."""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Callable

from nowplaying.skins.constants import ASSETS_DIRNAME, LAYOUT_FILENAME, THEME_FILENAME

logger = logging.getLogger(__name__)

Fingerprint = tuple[int, int]

DEFAULT_POLL_INTERVAL = 0.5


@dataclass(frozen=True, slots=True)
class ReloadRequest:
    """Documents whose change triggered a reload."""

    paths: tuple[Path, ...]


def scan_fingerprints(skin_dir: Path) -> dict[Path, Fingerprint]:
    """Return (mtime_ns, size) for the skin documents and every asset file."""
    fingerprints: dict[Path, Fingerprint] = {}
    candidates = [skin_dir / THEME_FILENAME, skin_dir / LAYOUT_FILENAME]
    assets_dir = skin_dir / ASSETS_DIRNAME
    if assets_dir.is_dir():
        try:
            candidates.extend(path for path in assets_dir.rglob("*") if path.is_file())
        except OSError as exc:
            logger.warning("Failed to list assets in %s: %s", assets_dir, exc)
    for path in candidates:
        try:
            stat = path.stat()
        except OSError:
            continue
        fingerprints[path] = (stat.st_mtime_ns, stat.st_size)
    return fingerprints


class HotReloadWatcher:
    """Watches one skin directory and serializes reloads for it.

    ``poll`` compares fingerprints against the last scan. Document changes
    become reload requests on a single-consumer queue; asset changes only
    invalidate the asset through ``invalidate_asset``. ``process_pending``
    drains every queued request into one reload, and never runs two reloads
    for this directory at once.
    """

    def __init__(
        self,
        skin_dir: Path,
        reload: Callable[[], object],
        invalidate_asset: Callable[[Path], None] | None = None,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._skin_dir = skin_dir
        self._reload = reload
        self._invalidate_asset = invalidate_asset
        self._interval = interval
        self._fingerprints = scan_fingerprints(skin_dir)
        self._requests: queue.Queue[ReloadRequest] = queue.Queue()
        self._reload_lock = Lock()
        self._stop_event = Event()
        self._threads: list[Thread] = []
        self._reload_count = 0

    @property
    def skin_dir(self) -> Path:
        return self._skin_dir

    @property
    def reload_count(self) -> int:
        return self._reload_count

    @property
    def pending(self) -> int:
        return self._requests.qsize()

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def poll(self) -> int:
        """Scan once; return the number of changed files."""
        current = scan_fingerprints(self._skin_dir)
        previous = self._fingerprints
        self._fingerprints = current
        changed = sorted(
            path
            for path in current.keys() | previous.keys()
            if current.get(path) != previous.get(path)
        )
        if not changed:
            return 0

        documents: list[Path] = []
        for path in changed:
            if path.parent == self._skin_dir and path.name in (THEME_FILENAME, LAYOUT_FILENAME):
                documents.append(path)
            elif self._invalidate_asset is not None:
                self._invalidate_asset(path)
        if documents:
            logger.debug("Skin documents changed: %s", ", ".join(p.name for p in documents))
            self._requests.put(ReloadRequest(tuple(documents)))
        return len(changed)

    def process_pending(self) -> bool:
        """Run one reload for everything queued so far; False when idle."""
        with self._reload_lock:
            requests = self._drain()
            if not requests:
                return False
            self._run_reload(requests)
            return True

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        name = self._skin_dir.name or "skin"
        self._threads = [
            Thread(target=self._poll_loop, name=f"skin-watch-{name}", daemon=True),
            Thread(target=self._consume_loop, name=f"skin-reload-{name}", daemon=True),
        ]
        for thread in self._threads:
            thread.start()
        logger.info("Watching skin directory %s", self._skin_dir)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []

    def _drain(self) -> list[ReloadRequest]:
        requests: list[ReloadRequest] = []
        while True:
            try:
                requests.append(self._requests.get_nowait())
            except queue.Empty:
                return requests

    def _run_reload(self, requests: list[ReloadRequest]) -> None:
        paths = sorted({path for request in requests for path in request.paths})
        logger.info(
            "Reloading skin %s (%d request(s): %s)",
            self._skin_dir,
            len(requests),
            ", ".join(path.name for path in paths),
        )
        self._reload_count += 1
        self._reload()

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.poll()
            except Exception:
                logger.exception("Skin watcher poll failed for %s", self._skin_dir)

    def _consume_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                first = self._requests.get(timeout=self._interval)
            except queue.Empty:
                continue
            with self._reload_lock:
                requests = [first, *self._drain()]
                try:
                    self._run_reload(requests)
                except Exception:
                    logger.exception("Skin reload failed for %s", self._skin_dir)
