"""Active skin bundle: publication, hot reload and dynamic gradients."""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from pathlib import Path
from threading import Lock
from typing import Callable

from PySide6.QtCore import QObject, QThread, Signal

from nowplaying.config.settings import VinylOptions
from nowplaying.core.asset_cache import AssetCache
from nowplaying.core.gradient import artwork_key as compute_artwork_key
from nowplaying.errors import ErrorCode, SkinBuildError
from nowplaying.skins.constants import DEFAULT_SKIN_ID
from nowplaying.skins.loader import SkinBuild, build_skin
from nowplaying.skins.models import (
    GradientSpec,
    SkinBundle,
    SkinSummary,
    SkinWarning,
    Variant,
    WarningStage,
    background_direction,
)
from nowplaying.skins.registry import SkinRegistry
from nowplaying.skins.warnings import WarningsCollector
from nowplaying.skins.watcher import DEFAULT_POLL_INTERVAL, HotReloadWatcher
from nowplaying.workers.gradient_worker import GradientResult, GradientWorker

logger = logging.getLogger(__name__)

GradientPair = tuple[GradientSpec | None, GradientSpec | None]


class SkinService(QObject):
    """Owns the active SkinBundle and the warnings feed.

    Readers take ``bundle`` without locking; every change publishes a new
    bundle in a single reference swap. No method raises for skin problems:
    failures keep the previous bundle and record a warning.
    """

    bundle_changed = Signal(object)     # SkinBundle
    warnings_changed = Signal(object)   # tuple[SkinWarning, ...]
    reload_failed = Signal(str)

    def __init__(
        self,
        settings,
        registry: SkinRegistry,
        *,
        warnings: WarningsCollector | None = None,
        run_gradient: Callable[[GradientWorker], None] | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._registry = registry
        self._warnings = warnings if warnings is not None else WarningsCollector()
        self._run_gradient = run_gradient
        self._lock = Lock()
        self._generation = 0            # bumped on every skin switch
        self._assets = AssetCache(on_missing=self._record_missing_asset)
        self._watcher: HotReloadWatcher | None = None
        self._watch_interval = DEFAULT_POLL_INTERVAL
        self._artwork_key: str | None = None
        self._gradient: GradientPair | None = None
        self._gradient_jobs: dict[GradientWorker, QThread] = {}

        defaults = build_skin(None)
        self._bundle = self._bundle_from_build(defaults, DEFAULT_SKIN_ID, None)

    # -- readers --

    @property
    def bundle(self) -> SkinBundle:
        return self._bundle

    @property
    def active_skin_id(self) -> str:
        return self._bundle.skin_id

    @property
    def warnings(self) -> tuple[SkinWarning, ...]:
        return self._warnings.snapshot()

    @property
    def warnings_collector(self) -> WarningsCollector:
        return self._warnings

    @property
    def user_skins_dir(self) -> Path:
        return self._registry.user_root

    def set_user_skins_dir(self, path: Path) -> None:
        self._registry.set_user_root(path)

    def reload_skins(self) -> list[str]:
        self._registry.reload()
        return self._registry.load_errors()

    def available_skins(self) -> list[SkinSummary]:
        return self._registry.list_skins()

    def available_variants(self) -> list[Variant]:
        return list(self._bundle.layout.variants)

    def vinyl_options(self) -> VinylOptions:
        return self._settings.vinyl_options(
            disabled_by_skin=self._bundle.theme.meta.disable_vinyl_thumbnail,
        )

    # -- skin selection --

    def apply_skin(self, skin_id: str, *, persist: bool = True) -> tuple[bool, str]:
        summary = self._registry.get_skin(skin_id)
        if summary is None:
            return False, f"Skin not found: {skin_id}"
        previous = self._settings.layout_id or self._bundle.active_variant_id
        try:
            build = build_skin(summary.source_dir, previous_variant_id=previous)
        except Exception as exc:
            logger.exception("Could not load skin %s", skin_id)
            return False, f"Could not load skin {skin_id}: {exc}"

        watching = self._watcher is not None
        self.disable_hot_reload()
        self._publish_build(build, summary.skin_id, summary.source_dir)
        self._warnings.replace(build.warnings)
        self.warnings_changed.emit(self._warnings.snapshot())
        self._assets.clear()
        if persist:
            self._settings.skin_id = skin_id
        self._settings.skin_last_known_good_id = skin_id
        if watching:
            self.enable_hot_reload(self._watch_interval)
        return True, f"Applied skin: {summary.display_name}"

    def apply_startup_skin(self) -> tuple[bool, str]:
        requested = self._settings.skin_id
        fallback = self._settings.skin_last_known_good_id
        candidates = [requested, fallback, DEFAULT_SKIN_ID]
        seen: set[str] = set()

        for candidate in candidates:
            if not candidate or candidate in seen:
                continue
            seen.add(candidate)
            ok, message = self.apply_skin(candidate, persist=True)
            if ok:
                return True, message

        build = build_skin(None, previous_variant_id=self._settings.layout_id)
        self._publish_build(build, DEFAULT_SKIN_ID, None)
        self._warnings.replace(build.warnings)
        self.warnings_changed.emit(self._warnings.snapshot())
        self._settings.skin_id = DEFAULT_SKIN_ID
        self._settings.skin_last_known_good_id = DEFAULT_SKIN_ID
        return False, "No skin directory found; using the built-in default skin."

    def set_layout(self, variant_id: str, *, persist: bool = True) -> bool:
        with self._lock:
            current = self._bundle
            if current.layout.get(variant_id) is None:
                return False
            published = current.with_variant(variant_id)
            self._bundle = published
        if persist:
            self._settings.layout_id = variant_id
        self.bundle_changed.emit(published)
        return True

    # -- hot reload --

    def reload_active(self) -> bool:
        """Rebuild the active skin from disk; keep the current bundle on failure.

        A reload that finishes after another skin was applied is dropped.
        """
        with self._lock:
            current = self._bundle
            generation = self._generation
        if current.source_dir is None:
            return False
        try:
            build = build_skin(
                current.source_dir,
                previous_variant_id=current.active_variant_id,
                strict=True,
            )
        except SkinBuildError as exc:
            if generation != self._generation:
                logger.debug("Ignoring failed reload of replaced skin %s", current.skin_id)
                return False
            failing = exc.path.name if exc.path is not None else current.source_dir.name
            warning = SkinWarning(
                stage=WarningStage.RELOAD,
                code=ErrorCode.RELOAD_FAILED,
                message=f"Reload of {failing} failed: {exc.message}; keeping previous skin",
                path=exc.path,
            )
            self._warnings.append(warning)
            self.reload_failed.emit(str(warning))
            self.warnings_changed.emit(self._warnings.snapshot())
            return False

        if not self._publish_build(
            build,
            current.skin_id,
            current.source_dir,
            generation=generation,
        ):
            logger.debug("Dropping reload of replaced skin %s", current.skin_id)
            return False
        self._warnings.replace(build.warnings)
        self.warnings_changed.emit(self._warnings.snapshot())
        logger.info("Reloaded skin %s", current.skin_id)
        return True

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None

    def enable_hot_reload(self, interval: float = DEFAULT_POLL_INTERVAL) -> HotReloadWatcher | None:
        self.disable_hot_reload()
        self._watch_interval = interval
        source_dir = self._bundle.source_dir
        if source_dir is None:
            return None
        watcher = HotReloadWatcher(
            source_dir,
            self.reload_active,
            self._assets.invalidate,
            interval=interval,
        )
        watcher.start()
        self._watcher = watcher
        return watcher

    def disable_hot_reload(self) -> None:
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    # -- assets --

    def load_asset(self, path: Path) -> bytes | None:
        return self._assets.get(path)

    def invalidate_asset(self, path: Path) -> None:
        self._assets.invalidate(path)

    def _record_missing_asset(self, path: Path, reason: str) -> None:
        self._warnings.append(
            SkinWarning(
                stage=WarningStage.ASSET,
                code=ErrorCode.MISSING_ASSET,
                message=f"Asset {path.name} unavailable: {reason}",
                path=path,
            )
        )
        self.warnings_changed.emit(self._warnings.snapshot())

    # -- dynamic gradient --

    @property
    def artwork_key(self) -> str | None:
        return self._artwork_key

    def set_artwork(self, data: bytes | None) -> str | None:
        """Note a new artwork bitmap and start clustering it when enabled.

        Static backgrounds stay published until the result arrives. Returns
        the artwork key, or None when artwork was cleared.
        """
        if not data:
            self._artwork_key = None
            self._gradient = None
            self._cancel_gradient_jobs()
            self._publish(lambda bundle: bundle.without_gradient())
            return None

        key = compute_artwork_key(data)
        if key == self._artwork_key:
            return key
        self._artwork_key = key
        self._gradient = None
        self._cancel_gradient_jobs()
        self._publish(lambda bundle: bundle.without_gradient())
        if not self._bundle.static_theme.use_gradient:
            return key

        components = self._bundle.static_theme.components
        worker = GradientWorker(
            artwork_key=key,
            data=data,
            root_direction=background_direction(components.root.background),
            panel_direction=background_direction(components.panel.background),
        )
        if self._run_gradient is not None:
            worker.finished.connect(self._on_gradient_done)
            self._run_gradient(worker)
        else:
            self._start_gradient_thread(worker)
        return key

    def apply_gradient(
        self,
        artwork_key: str,
        root: GradientSpec | None,
        panel: GradientSpec | None,
    ) -> bool:
        """Merge a finished gradient unless the artwork changed meanwhile."""
        if artwork_key != self._artwork_key:
            logger.debug("Discarding stale gradient for %s", artwork_key[:12])
            return False
        self._gradient = (root, panel)
        self._publish(self._with_current_gradient)
        return True

    def _with_current_gradient(self, bundle: SkinBundle) -> SkinBundle:
        if (
            self._artwork_key is None
            or self._gradient is None
            or not bundle.static_theme.use_gradient
            or self._gradient == (None, None)
        ):
            return bundle.without_gradient()
        root, panel = self._gradient
        components = bundle.static_theme.components
        if root is not None:
            root = replace(root, direction=background_direction(components.root.background))
        if panel is not None:
            panel = replace(panel, direction=background_direction(components.panel.background))
        return bundle.with_gradient(self._artwork_key, root, panel)

    def _start_gradient_thread(self, worker: GradientWorker) -> None:
        thread = QThread()
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self._on_gradient_done)
        worker.error.connect(self._on_gradient_error)
        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        worker.cancelled.connect(thread.quit)
        thread.finished.connect(partial(self._cleanup_gradient, worker, thread))
        self._gradient_jobs[worker] = thread
        thread.start()

    def _on_gradient_done(self, payload: object) -> None:
        if not isinstance(payload, dict):
            return
        result: GradientResult = payload  # type: ignore[assignment]
        if result["root"] is None and result["panel"] is None:
            logger.debug("Gradient unavailable: %s", result["message"])
        self.apply_gradient(result["artwork_key"], result["root"], result["panel"])

    def _on_gradient_error(self, message: str) -> None:
        logger.warning("Gradient extraction failed: %s", message)

    def _cancel_gradient_jobs(self) -> None:
        for worker in self._gradient_jobs:
            worker.cancel()

    def _cleanup_gradient(self, worker: GradientWorker, thread: QThread) -> None:
        self._gradient_jobs.pop(worker, None)
        worker.deleteLater()
        thread.deleteLater()

    def shutdown(self) -> None:
        self.disable_hot_reload()
        for worker, thread in list(self._gradient_jobs.items()):
            worker.cancel()
            if thread.isRunning():
                thread.quit()
                thread.wait()

    # -- publication --

    def _bundle_from_build(
        self,
        build: SkinBuild,
        skin_id: str,
        source_dir: Path | None,
    ) -> SkinBundle:
        return SkinBundle(
            skin_id=skin_id,
            source_dir=source_dir,
            theme=build.theme,
            static_theme=build.theme,
            layout=build.layout,
            active_variant_id=build.variant.id,
            mtimes=dict(build.mtimes),
        )

    def _publish_build(
        self,
        build: SkinBuild,
        skin_id: str,
        source_dir: Path | None,
        *,
        generation: int | None = None,
    ) -> bool:
        """Swap in a freshly built bundle.

        Without ``generation`` this is a skin switch and starts a new
        generation. With it, the build is a reload and is dropped unless no
        switch happened since ``generation`` was read.
        """
        fresh = self._bundle_from_build(build, skin_id, source_dir)
        with self._lock:
            if generation is None:
                self._generation += 1
            elif generation != self._generation:
                return False
            published = self._with_current_gradient(fresh)
            self._bundle = published
        self.bundle_changed.emit(published)
        return True

    def _publish(self, transform: Callable[[SkinBundle], SkinBundle]) -> SkinBundle:
        with self._lock:
            published = transform(self._bundle)
            self._bundle = published
        self.bundle_changed.emit(published)
        return published
