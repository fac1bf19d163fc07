"""Engine bootstrap for the host application."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from nowplaying.config.settings import AppSettings
from nowplaying.runtime_paths import builtin_skins_root, is_frozen, package_root
from nowplaying.skins.registry import SkinRegistry
from nowplaying.skins.service import SkinService


def configure_logging(settings: AppSettings, *, level: int = logging.INFO) -> logging.Logger:
    """Attach a rotating file handler to the package logger once."""
    logger = logging.getLogger("nowplaying")
    if logger.handlers:
        return logger

    logger.setLevel(level)
    log_dir = settings.app_data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "skins.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def create_skin_service(settings: AppSettings | None = None) -> SkinService:
    """Build the skin service, apply the startup skin and start watching."""
    settings = settings if settings is not None else AppSettings()
    logger = configure_logging(settings)
    logger.info("startup mode frozen=%s package_root=%s", is_frozen(), package_root())

    builtin_skins = builtin_skins_root()
    if not builtin_skins.exists():
        logger.warning("builtin skin root missing at %s", builtin_skins)

    registry = SkinRegistry(builtin_root=builtin_skins, user_root=settings.skins_dir)
    service = SkinService(settings, registry)
    errors = service.reload_skins()
    if errors:
        logger.warning("skin load warnings: %s", " | ".join(errors[:6]))

    ok, message = service.apply_startup_skin()
    if not ok:
        logger.warning(message)
    if settings.watch_skins:
        service.enable_hot_reload()
    return service
