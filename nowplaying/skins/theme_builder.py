"""Build a resolved ThemeModel from a raw theme document."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from nowplaying.core.colors import TRANSPARENT, WHITE, ColorValue, parse_color
from nowplaying.core.params import parse_bool, parse_number
from nowplaying.errors import ColorFormatError, ErrorCode, InvalidBooleanError
from nowplaying.skins.constants import ASSETS_DIRNAME, THEME_ENGINE_VERSION
from nowplaying.skins.defaults import DEFAULT_THEME_TOML
from nowplaying.skins.document import RawTable, get_table, load_document, merge_tables
from nowplaying.skins.models import (
    AreaBackground,
    AreaStyle,
    ButtonStyle,
    CircleThumb,
    ComponentStyles,
    GradientDirection,
    GradientSpec,
    IconStyle,
    ImageThumb,
    SliderStyle,
    SolidBackground,
    TextStyle,
    ThemeMeta,
    ThemeModel,
    ThumbnailOverlay,
    ThumbnailStyle,
)
from nowplaying.skins.tokens import ResolvedDocument, resolve_tokens
from nowplaying.skins.warnings import WarningSink

_ROOT_BACKGROUND = ColorValue.rgb(18, 18, 18)
_PANEL_BACKGROUND = ColorValue.rgb(32, 32, 32)
_ACCENT = ColorValue.rgb(0, 120, 212)
_ACCENT_HOVER = ColorValue.rgb(15, 108, 189)
_ACCENT_ACTIVE = ColorValue.rgb(17, 94, 163)
_TRACK_BACKGROUND = ColorValue.rgb(64, 64, 64)
_TEXT_SECONDARY = ColorValue.rgb(200, 200, 200)

_DEFAULT_RADIUS = 8.0
_DEFAULT_THUMB_RADIUS = 8.0
_DEFAULT_THUMB_IMAGE_SIZE = 24.0
_DEFAULT_TRACK_THICKNESS = 4.0
_TITLE_SIZE = 20.0
_BODY_SIZE = 16.0

_MISSING = object()


def builtin_theme_document() -> RawTable:
    return load_document(DEFAULT_THEME_TOML)


def build_theme(
    raw: RawTable | None,
    sink: WarningSink,
    *,
    skin_dir: Path | None = None,
) -> ThemeModel:
    """Merge a skin theme over the built-in one and resolve it into a ThemeModel.

    ``raw`` may be None when the skin has no usable theme document; the
    built-in theme is resolved on its own then.
    """
    document = builtin_theme_document()
    if raw is not None:
        engine = get_table(raw, "meta").get("engine")
        if engine is None:
            sink.add(ErrorCode.SCHEMA_ERROR, "meta.engine missing; assuming version 1")
            document = merge_tables(document, raw)
        elif str(engine).strip() != THEME_ENGINE_VERSION:
            sink.add(
                ErrorCode.SCHEMA_ERROR,
                f"Skin engine version {engine} does not match {THEME_ENGINE_VERSION}; using defaults",
            )
        else:
            document = merge_tables(document, raw)

    resolved = resolve_tokens(document, sink)
    asset_root = (skin_dir / ASSETS_DIRNAME) if skin_dir is not None else Path(ASSETS_DIRNAME)
    reader = _FieldReader(resolved, sink, asset_root)
    return reader.build_theme(skin_dir)


class _FieldReader:
    """Typed access to resolved theme fields with per-field recovery."""

    def __init__(self, resolved: ResolvedDocument, sink: WarningSink, asset_root: Path) -> None:
        self._resolved = resolved
        self._sink = sink
        self._asset_root = asset_root
        self._colors = self._parse_color_table()

    # -- whole theme --

    def build_theme(self, skin_dir: Path | None) -> ThemeModel:
        radius_default = self._variable_number("radius", _DEFAULT_RADIUS)
        thumb_radius_default = self._variable_number("slider_thumb_radius", _DEFAULT_THUMB_RADIUS)

        def named(key: str, fallback: ColorValue) -> ColorValue:
            return self._colors.get(key, fallback)

        components = ComponentStyles(
            root=self.area("components.root", _ROOT_BACKGROUND, radius_default),
            panel=self.area("components.panel", named("panel", _PANEL_BACKGROUND), radius_default),
            button=self.button("components.button", radius_default),
            button_icon=IconStyle(
                color=self.color("components.button.icon.color", named("text_on_accent", WHITE)),
                size_scale=self.number("components.button.icon.size_scale", 1.0),
            ),
            slider=self.slider("components.slider", thumb_radius_default),
            thumbnail=self.thumbnail("components.thumbnail", radius_default),
            text_title=TextStyle(
                color=self.color("components.text.title.color", named("text_primary", WHITE)),
                size=self.number("components.text.title.size", _TITLE_SIZE),
            ),
            text_body=TextStyle(
                color=self.color(
                    "components.text.body.color", named("text_secondary", _TEXT_SECONDARY)
                ),
                size=self.number("components.text.body.size", _BODY_SIZE),
            ),
        )

        fallback_name = skin_dir.name if skin_dir is not None else "builtin"
        name = self.text("meta.name", fallback_name) or fallback_name
        display_name = self.text("meta.display_name", name) or name
        transparent = self.boolean("transparent_background", None)
        if transparent is None:
            transparent = self.boolean("meta.transparent_background", False)

        meta = ThemeMeta(
            engine_version=self.text("meta.engine", THEME_ENGINE_VERSION) or THEME_ENGINE_VERSION,
            name=name,
            display_name=display_name,
            disable_vinyl_thumbnail=bool(self.boolean("meta.disable_vinyl_thumbnail", False)),
            transparent_background=bool(transparent),
        )
        return ThemeModel(
            meta=meta,
            use_gradient=bool(self.boolean("use_gradient", True)),
            asset_root=self._asset_root,
            colors=dict(self._colors),
            variables=dict(self._resolved.variables),
            components=components,
        )

    # -- component groups --

    def area(self, prefix: str, fallback_background: ColorValue, radius_default: float) -> AreaStyle:
        background = self.background(f"{prefix}.background", fallback_background)
        foreground = self.color(f"{prefix}.foreground", WHITE)
        border_color = self.color(f"{prefix}.border_color", TRANSPARENT)
        border_radius = self.number(f"{prefix}.border_radius", radius_default)
        border_width = max(0.0, self.number(f"{prefix}.border_width", 0.0))
        show_border = self.boolean(
            f"{prefix}.show_border",
            border_width > 0.0 and not border_color.is_transparent,
        )
        return AreaStyle(
            background=background,
            foreground=foreground,
            border_color=border_color,
            border_radius=border_radius,
            border_width=border_width,
            show_border=bool(show_border),
        )

    def button(self, prefix: str, radius_default: float) -> ButtonStyle:
        return ButtonStyle(
            background=self.color(f"{prefix}.background", _ACCENT),
            foreground=self.color(f"{prefix}.foreground", WHITE),
            hover_background=self.color(f"{prefix}.hover_background", _ACCENT_HOVER),
            active_background=self.color(f"{prefix}.active_background", _ACCENT_ACTIVE),
            border_color=self.color(f"{prefix}.border_color", TRANSPARENT),
            border_radius=self.number(f"{prefix}.border_radius", radius_default),
            border_width=max(0.0, self.number(f"{prefix}.border_width", 0.0)),
        )

    def slider(self, prefix: str, thumb_radius_default: float) -> SliderStyle:
        track_fill = self.color(f"{prefix}.track_fill", _ACCENT)
        thumb_color = self.color(f"{prefix}.thumb_color", track_fill)
        shape = (self.text(f"{prefix}.thumb_shape", "circle") or "circle").strip().lower()
        circle = CircleThumb(
            color=thumb_color,
            radius=self.number(f"{prefix}.thumb_radius", thumb_radius_default),
        )

        thumb: CircleThumb | ImageThumb = circle
        if shape == "image":
            image_name = (self.text(f"{prefix}.thumb_image", "") or "").strip()
            if not image_name:
                self._sink.add(
                    ErrorCode.SCHEMA_ERROR,
                    "Slider thumb image requested but no image provided",
                )
            else:
                path = self.asset_path(image_name, f"{prefix}.thumb_image")
                if path is not None:
                    thumb = ImageThumb(
                        color=thumb_color,
                        path=path,
                        size=self.number(f"{prefix}.thumb_size", _DEFAULT_THUMB_IMAGE_SIZE),
                    )
        elif shape != "circle":
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{prefix}.thumb_shape: unknown shape {shape!r}")

        return SliderStyle(
            track_fill=track_fill,
            track_background=self.color(f"{prefix}.track_background", _TRACK_BACKGROUND),
            track_thickness=self.number(f"{prefix}.track_thickness", _DEFAULT_TRACK_THICKNESS),
            thumb=thumb,
        )

    def thumbnail(self, prefix: str, radius_default: float) -> ThumbnailStyle:
        overlays: list[ThumbnailOverlay] = []
        entries = self.get(f"{prefix}.overlay_images")
        if entries is not _MISSING:
            if not isinstance(entries, list):
                self._sink.add(ErrorCode.SCHEMA_ERROR, f"{prefix}.overlay_images must be a list")
                entries = []
            for index, entry in enumerate(entries):
                overlay = self.overlay(entry, f"{prefix}.overlay_images[{index}]")
                if overlay is not None:
                    overlays.append(overlay)

        border_image = (self.text(f"{prefix}.border_image", "") or "").strip()
        if border_image:
            path = self.asset_path(border_image, f"{prefix}.border_image")
            if path is not None:
                overlays.append(ThumbnailOverlay(path=path))

        return ThumbnailStyle(
            corner_radius=self.number(f"{prefix}.corner_radius", radius_default),
            stroke_color=self.color(f"{prefix}.stroke_color", TRANSPARENT),
            stroke_width=max(0.0, self.number(f"{prefix}.stroke_width", 0.0)),
            overlays=tuple(overlays),
        )

    def overlay(self, entry: Any, path: str) -> ThumbnailOverlay | None:
        if isinstance(entry, str):
            name, offset_x, offset_y = entry, 0.0, 0.0
        elif isinstance(entry, dict):
            name = entry.get("path")
            if not isinstance(name, str):
                self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: overlay table requires 'path'")
                return None
            offset_x = self.number(f"{path}.offset_x", 0.0)
            offset_y = self.number(f"{path}.offset_y", 0.0)
        else:
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: expected a path or a table")
            return None
        name = name.strip()
        if not name:
            return None
        resolved = self.asset_path(name, path)
        if resolved is None:
            return None
        return ThumbnailOverlay(path=resolved, offset_x=offset_x, offset_y=offset_y)

    # -- typed fields --

    def get(self, path: str) -> Any:
        current: Any = self._resolved.tree
        for key in path.split("."):
            if "[" in key:
                name, _, rest = key.partition("[")
                current = current.get(name, _MISSING) if isinstance(current, dict) else _MISSING
                index = int(rest.rstrip("]"))
                if not isinstance(current, list) or index >= len(current):
                    return _MISSING
                current = current[index]
                continue
            if not isinstance(current, dict) or key not in current:
                return _MISSING
            current = current[key]
        return current

    def text(self, path: str, default: str | None) -> str | None:
        value = self.get(path)
        if value is _MISSING:
            return default
        if isinstance(value, str):
            return value
        self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path} must be a string")
        return default

    def color(self, path: str, default: ColorValue) -> ColorValue:
        value = self.get(path)
        if value is _MISSING or self._resolved.is_unresolved(path):
            return default
        if not isinstance(value, str):
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path} must be a color string")
            return default
        return self.color_from_text(value, path, default)

    def color_from_text(self, value: str, path: str, default: ColorValue) -> ColorValue:
        named = self._colors.get(value.strip())
        if named is not None:
            return named
        try:
            return parse_color(value)
        except ColorFormatError as exc:
            self._sink.add(ErrorCode.COLOR_FORMAT, f"{path}: {exc.message}; using default")
            return default

    def number(self, path: str, default: float) -> float:
        value = self.get(path)
        if value is _MISSING:
            return default
        if self._resolved.is_unresolved(path):
            return 0.0
        number = parse_number(value)
        if number is not None:
            return number
        referenced = self._resolved.referenced_vars(path)
        if referenced:
            for name in referenced:
                raw = self._resolved.variables.get(name, "")
                self._sink.add(
                    ErrorCode.INVALID_VARIABLE,
                    f"{path}: variable {name} could not be parsed as number: {raw!r}; using 0",
                )
            return 0.0
        self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: could not parse number {value!r}")
        return default

    def boolean(self, path: str, default: bool | None) -> bool | None:
        value = self.get(path)
        if value is _MISSING or self._resolved.is_unresolved(path):
            return default
        try:
            return parse_bool(value)
        except InvalidBooleanError:
            self._sink.add(
                ErrorCode.INVALID_BOOLEAN,
                f"{path}: {value!r} is not a boolean; using {default}",
            )
            return default

    def background(self, path: str, default: ColorValue) -> AreaBackground:
        value = self.get(path)
        if value is _MISSING or self._resolved.is_unresolved(path):
            return SolidBackground(default)
        if isinstance(value, str):
            return SolidBackground(self.color_from_text(value, path, default))
        if not isinstance(value, dict):
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path} must be a color or a table")
            return SolidBackground(default)

        kind = value.get("type")
        kind = kind.strip().lower() if isinstance(kind, str) else None
        if kind is None:
            if "start" in value or "end" in value:
                kind = "gradient"
            elif "color" in value:
                kind = "solid"
            else:
                self._sink.add(
                    ErrorCode.SCHEMA_ERROR,
                    f"{path}: background table requires either 'color' or 'start'/'end'",
                )
                return SolidBackground(default)

        if kind == "solid":
            if "color" not in value:
                self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: solid background requires 'color'")
                return SolidBackground(default)
            return SolidBackground(self.color(f"{path}.color", default))

        if kind == "gradient":
            for stop in ("start", "end"):
                if stop not in value:
                    self._sink.add(
                        ErrorCode.SCHEMA_ERROR, f"{path}: gradient background missing '{stop}' color"
                    )
                    return SolidBackground(default)
            start = self.color(f"{path}.start", default)
            end = self.color(f"{path}.end", default)
            direction = self.direction(f"{path}.direction")
            if start == end:
                return SolidBackground(start)
            return GradientSpec(start=start, end=end, direction=direction)

        self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: unknown background type {kind!r}")
        return SolidBackground(default)

    def direction(self, path: str) -> GradientDirection:
        raw = self.text(path, GradientDirection.VERTICAL.value) or GradientDirection.VERTICAL.value
        try:
            return GradientDirection(raw.strip().lower())
        except ValueError:
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: unknown direction {raw!r}; using vertical")
            return GradientDirection.VERTICAL

    def asset_path(self, name: str, path: str) -> Path | None:
        candidate = self._asset_root / name
        try:
            resolved_root = self._asset_root.resolve()
            resolved = candidate.resolve()
        except OSError:
            resolved_root, resolved = self._asset_root, candidate
        if resolved != resolved_root and resolved_root not in resolved.parents:
            self._sink.add(ErrorCode.SCHEMA_ERROR, f"{path}: asset path escapes the assets folder")
            return None
        if not resolved.is_file():
            self._sink.add(
                ErrorCode.MISSING_ASSET,
                f"{path}: image {candidate} not found; skipping",
                path=candidate,
            )
            return None
        return resolved

    # -- tables --

    def _parse_color_table(self) -> dict[str, ColorValue]:
        colors: dict[str, ColorValue] = {}
        for key, value in self._resolved.colors.items():
            path = f"colors.{key}"
            if self._resolved.is_unresolved(path):
                continue
            try:
                colors[key] = parse_color(value)
            except ColorFormatError as exc:
                self._sink.add(ErrorCode.COLOR_FORMAT, f"{path}: {exc.message}; using #FFFFFF")
                colors[key] = WHITE
        return colors

    def _variable_number(self, name: str, default: float) -> float:
        raw = self._resolved.variables.get(name)
        if raw is None or self._resolved.is_unresolved(f"vars.{name}"):
            return default
        number = parse_number(raw)
        if number is None:
            self._sink.add(
                ErrorCode.INVALID_VARIABLE,
                f"vars.{name} could not be parsed as number: {raw!r}; using {default:g}",
            )
            return default
        return number
