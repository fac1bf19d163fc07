"""Skin engine constants."""

from __future__ import annotations

from enum import Enum

DEFAULT_SKIN_ID = "classic"
THEME_ENGINE_VERSION = "1"
LAYOUT_ENGINE_VERSION = "1"

THEME_FILENAME = "theme.toml"
LAYOUT_FILENAME = "layout.toml"
ASSETS_DIRNAME = "assets"

MAX_RESOLVE_PASSES = 5
MAX_DOCUMENT_BYTES = 256 * 1024

DEFAULT_CONTAINER_SPACING = 8.0
DEFAULT_SPACER_SIZE = 8.0


class ComponentId(str, Enum):
    """Closed set of layout components the renderer knows how to draw."""

    THUMBNAIL = "thumbnail"
    TITLE = "title"
    METADATA_GROUP = "metadata"
    METADATA_ARTIST = "metadata.artist"
    METADATA_ALBUM = "metadata.album"
    METADATA_STATE = "metadata.state"
    PLAYBACK_CONTROLS = "playback_controls"
    BUTTON_PREVIOUS = "button.previous"
    BUTTON_PLAY_PAUSE = "button.playpause"
    BUTTON_NEXT = "button.next"
    BUTTON_STOP = "button.stop"
    TIMELINE = "timeline"
    SKIN_WARNINGS = "skin_warnings"
    SKIN_ERROR = "skin_error"
    NOW_PLAYING_ERROR = "error"
    THUMBNAIL_ERROR = "thumbnail_error"


COMPONENT_ALIASES: dict[str, ComponentId] = {
    "artwork": ComponentId.THUMBNAIL,
    "metadata_group": ComponentId.METADATA_GROUP,
    "details": ComponentId.METADATA_GROUP,
    "artist": ComponentId.METADATA_ARTIST,
    "album": ComponentId.METADATA_ALBUM,
    "state": ComponentId.METADATA_STATE,
    "playstate": ComponentId.METADATA_STATE,
    "controls": ComponentId.PLAYBACK_CONTROLS,
    "previous": ComponentId.BUTTON_PREVIOUS,
    "button.play": ComponentId.BUTTON_PLAY_PAUSE,
    "button.pause": ComponentId.BUTTON_PLAY_PAUSE,
    "playpause": ComponentId.BUTTON_PLAY_PAUSE,
    "next": ComponentId.BUTTON_NEXT,
    "stop": ComponentId.BUTTON_STOP,
    "progress": ComponentId.TIMELINE,
    "warnings": ComponentId.SKIN_WARNINGS,
    "now_playing_error": ComponentId.NOW_PLAYING_ERROR,
}


def lookup_component(value: str) -> ComponentId | None:
    """Map a layout component id (or one of its aliases) to a ComponentId."""
    key = value.strip().lower()
    try:
        return ComponentId(key)
    except ValueError:
        return COMPONENT_ALIASES.get(key)
