"""Application settings via QSettings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

from nowplaying.skins.constants import DEFAULT_SKIN_ID

VINYL_SWIRL_RANGE = (0.0, 10.0)
VINYL_LABEL_RATIO_RANGE = (0.1, 0.6)
DEFAULT_VINYL_SWIRL = 2.0
DEFAULT_VINYL_LABEL_RATIO = 0.35


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(high, max(low, value))


@dataclass(frozen=True, slots=True)
class VinylOptions:
    """Vinyl thumbnail tuning passed to the renderer as plain values."""

    enabled: bool = False
    swirl_strength: float = DEFAULT_VINYL_SWIRL
    label_ratio: float = DEFAULT_VINYL_LABEL_RATIO


class AppSettings:
    """Wraps QSettings for persistent app configuration."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings("NowPlaying", "NowPlaying")

    # -- skin --

    @property
    def skin_id(self) -> str:
        raw = self._qs.value("skin/skin_id", DEFAULT_SKIN_ID, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_SKIN_ID

    @skin_id.setter
    def skin_id(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_SKIN_ID
        self._qs.setValue("skin/skin_id", cleaned)

    @property
    def skin_last_known_good_id(self) -> str:
        raw = self._qs.value("skin/last_known_good_id", DEFAULT_SKIN_ID, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_SKIN_ID

    @skin_last_known_good_id.setter
    def skin_last_known_good_id(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_SKIN_ID
        self._qs.setValue("skin/last_known_good_id", cleaned)

    @property
    def layout_id(self) -> str:
        raw = self._qs.value("skin/layout_id", "", type=str)
        return (raw or "").strip()

    @layout_id.setter
    def layout_id(self, value: str) -> None:
        self._qs.setValue("skin/layout_id", (value or "").strip())

    @property
    def watch_skins(self) -> bool:
        return self._qs.value("skin/watch", True, type=bool)

    @watch_skins.setter
    def watch_skins(self, value: bool) -> None:
        self._qs.setValue("skin/watch", bool(value))

    # -- vinyl thumbnail --

    @property
    def vinyl_enabled(self) -> bool:
        return self._qs.value("vinyl/enabled", False, type=bool)

    @vinyl_enabled.setter
    def vinyl_enabled(self, value: bool) -> None:
        self._qs.setValue("vinyl/enabled", bool(value))

    @property
    def vinyl_swirl_strength(self) -> float:
        raw = self._qs.value("vinyl/swirl_strength", DEFAULT_VINYL_SWIRL, type=float)
        return _clamp(float(raw), VINYL_SWIRL_RANGE)

    @vinyl_swirl_strength.setter
    def vinyl_swirl_strength(self, value: float) -> None:
        self._qs.setValue("vinyl/swirl_strength", _clamp(float(value), VINYL_SWIRL_RANGE))

    @property
    def vinyl_label_ratio(self) -> float:
        raw = self._qs.value("vinyl/label_ratio", DEFAULT_VINYL_LABEL_RATIO, type=float)
        return _clamp(float(raw), VINYL_LABEL_RATIO_RANGE)

    @vinyl_label_ratio.setter
    def vinyl_label_ratio(self, value: float) -> None:
        self._qs.setValue("vinyl/label_ratio", _clamp(float(value), VINYL_LABEL_RATIO_RANGE))

    def vinyl_options(self, *, disabled_by_skin: bool = False) -> VinylOptions:
        return VinylOptions(
            enabled=self.vinyl_enabled and not disabled_by_skin,
            swirl_strength=self.vinyl_swirl_strength,
            label_ratio=self.vinyl_label_ratio,
        )

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def skins_dir(self) -> Path:
        raw = self._qs.value("skin/skins_dir", "", type=str)
        path = Path(raw) if raw else self.app_data_dir / "skins"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @skins_dir.setter
    def skins_dir(self, value: Path | str) -> None:
        self._qs.setValue("skin/skins_dir", str(value))

    @staticmethod
    def _app_data_dir() -> Path:
        base = Path(os.environ.get("APPDATA", Path.home() / ".config"))
        return base / "nowplaying"
