"""Runtime path helpers for source and frozen executable modes."""

from __future__ import annotations

from pathlib import Path
import sys


def is_frozen() -> bool:
    """Return True when running from a PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False))


def package_root() -> Path:
    """Directory holding the `nowplaying` package data in either mode."""
    if not is_frozen():
        return Path(__file__).resolve().parent
    meipass = getattr(sys, "_MEIPASS", None)
    root = Path(meipass) if meipass else Path(sys.executable).resolve().parent
    candidate = root / "nowplaying"
    return candidate if candidate.exists() else root


def builtin_skins_root() -> Path:
    """Resolve the built-in skin directory across source/frozen layouts."""
    return package_root() / "skins" / "builtin"


def builtin_skin_dir(skin_id: str) -> Path | None:
    path = builtin_skins_root() / skin_id
    return path if path.is_dir() else None
