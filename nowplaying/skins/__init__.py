"""Skin engine exports."""

from nowplaying.skins.constants import DEFAULT_SKIN_ID, ComponentId
from nowplaying.skins.models import (
    LayoutModel,
    SkinBundle,
    SkinSummary,
    SkinWarning,
    ThemeModel,
    Variant,
)
from nowplaying.skins.warnings import WarningsCollector

__all__ = [
    "DEFAULT_SKIN_ID",
    "ComponentId",
    "LayoutModel",
    "SkinBundle",
    "SkinSummary",
    "SkinWarning",
    "ThemeModel",
    "Variant",
    "WarningsCollector",
]
