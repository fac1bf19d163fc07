"""Tests for resolving theme documents into ThemeModel."""

from __future__ import annotations

from pathlib import Path

from nowplaying.core.colors import TRANSPARENT, ColorValue
from nowplaying.errors import ErrorCode
from nowplaying.skins.document import load_document
from nowplaying.skins.models import (
    CircleThumb,
    GradientDirection,
    GradientSpec,
    ImageThumb,
    SolidBackground,
    WarningStage,
)
from nowplaying.skins.theme_builder import build_theme
from nowplaying.skins.warnings import WarningSink


def _build(text: str, skin_dir: Path | None = None):
    sink = WarningSink(WarningStage.THEME)
    raw = load_document('[meta]\nengine = "1"\n' + text)
    return build_theme(raw, sink, skin_dir=skin_dir), sink


def _codes(sink: WarningSink) -> list[ErrorCode]:
    return [warning.code for warning in sink.items]


def test_builtin_theme_resolves_without_warnings():
    sink = WarningSink(WarningStage.THEME)
    theme = build_theme(None, sink)

    assert len(sink) == 0
    assert theme.meta.name == "builtin"
    assert theme.use_gradient is True
    assert theme.components.root.background == SolidBackground(ColorValue.rgb(0x15, 0x16, 0x1B))
    assert theme.components.root.border_radius == 18.0
    assert theme.components.slider.thumb == CircleThumb(ColorValue.rgb(0x4C, 0x8D, 0xFF), 10.0)
    assert theme.components.text_title.size == 20.0
    assert theme.components.text_body.size == 16.0
    assert theme.variables == {"radius": "18", "slider_thumb_radius": "10"}


def test_skin_colors_flow_into_components():
    theme, sink = _build('[colors]\naccent = "#ff0000"\n')

    assert len(sink) == 0
    assert theme.components.button.background == ColorValue.rgb(255, 0, 0)
    assert theme.components.slider.track_fill == ColorValue.rgb(255, 0, 0)
    assert theme.colors["accent"] == ColorValue.rgb(255, 0, 0)


def test_bad_color_falls_back_to_component_default():
    theme, sink = _build('[components.button]\nbackground = "nope"\n')

    assert _codes(sink) == [ErrorCode.COLOR_FORMAT]
    assert "components.button.background" in sink.items[0].message
    assert theme.components.button.background == ColorValue.rgb(0, 120, 212)


def test_bad_color_table_entry_becomes_white():
    theme, sink = _build('[colors]\npanel = "not-a-color"\n')

    assert ErrorCode.COLOR_FORMAT in _codes(sink)
    assert theme.colors["panel"] == ColorValue.rgb(255, 255, 255)


def test_color_name_reference_resolves_to_color_entry():
    theme, sink = _build('[components.panel]\nbackground = "accent"\n')

    assert len(sink) == 0
    assert theme.components.panel.background == SolidBackground(ColorValue.rgb(0x4C, 0x8D, 0xFF))


def test_non_numeric_variable_reads_as_zero_and_stays_verbatim():
    theme, sink = _build('[vars]\nradius = "big"\n')

    assert ErrorCode.INVALID_VARIABLE in _codes(sink)
    assert theme.components.root.border_radius == 0.0
    assert theme.components.thumbnail.corner_radius == 0.0
    assert theme.variables["radius"] == "big"


def test_unresolved_numeric_field_reads_as_zero():
    theme, sink = _build('[components.button]\nborder_radius = "{vars.nowhere}"\n')

    assert _codes(sink) == [ErrorCode.UNRESOLVED_TOKEN]
    assert theme.components.button.border_radius == 0.0


def test_unresolved_color_field_uses_default_without_second_warning():
    theme, sink = _build('[components.button]\nforeground = "{colors.nowhere}"\n')

    assert _codes(sink) == [ErrorCode.UNRESOLVED_TOKEN]
    assert theme.components.button.foreground == ColorValue.rgb(255, 255, 255)


def test_gradient_background_table():
    theme, sink = _build(
        "[components.root]\n"
        'background = { start = "#000000", end = "#ffffff", direction = "horizontal" }\n'
    )

    assert len(sink) == 0
    assert theme.components.root.background == GradientSpec(
        ColorValue.rgb(0, 0, 0),
        ColorValue.rgb(255, 255, 255),
        GradientDirection.HORIZONTAL,
    )


def test_gradient_with_equal_stops_is_solid():
    theme, _ = _build(
        "[components.panel]\n"
        'background = { type = "gradient", start = "#101010", end = "#101010" }\n'
    )

    assert theme.components.panel.background == SolidBackground(ColorValue.rgb(16, 16, 16))


def test_gradient_missing_stop_warns_and_uses_default():
    theme, sink = _build(
        "[components.root]\n"
        'background = { type = "gradient", start = "#000000" }\n'
    )

    assert _codes(sink) == [ErrorCode.SCHEMA_ERROR]
    assert theme.components.root.background == SolidBackground(ColorValue.rgb(18, 18, 18))


def test_unknown_direction_defaults_to_vertical():
    theme, sink = _build(
        "[components.root]\n"
        'background = { start = "#000000", end = "#ffffff", direction = "diagonal" }\n'
    )

    assert _codes(sink) == [ErrorCode.SCHEMA_ERROR]
    assert theme.components.root.background.direction is GradientDirection.VERTICAL


def test_show_border_defaults_follow_width_and_color():
    theme, _ = _build(
        "[components.panel]\n"
        'border_color = "#ffffff"\n'
        'border_width = "2"\n'
    )

    assert theme.components.panel.show_border is True
    assert theme.components.root.show_border is False
    assert theme.components.root.border_color == TRANSPARENT


def test_explicit_show_border_and_invalid_boolean():
    theme, sink = _build(
        "[components.panel]\n"
        'border_color = "#ffffff"\n'
        'border_width = "2"\n'
        'show_border = "maybe"\n'
        "[components.root]\n"
        'show_border = "yes"\n'
    )

    assert _codes(sink) == [ErrorCode.INVALID_BOOLEAN]
    assert theme.components.panel.show_border is True
    assert theme.components.root.show_border is True


def test_meta_flags():
    theme, sink = _build_meta()

    assert len(sink) == 0
    assert theme.use_gradient is False
    assert theme.meta.name == "neon"
    assert theme.meta.display_name == "Neon Nights"
    assert theme.meta.disable_vinyl_thumbnail is True
    assert theme.meta.transparent_background is True


def _build_meta():
    sink = WarningSink(WarningStage.THEME)
    raw = load_document(
        'use_gradient = "off"\n'
        "transparent_background = true\n"
        "[meta]\n"
        'engine = "1"\n'
        'name = "neon"\n'
        'display_name = "Neon Nights"\n'
        'disable_vinyl_thumbnail = "YES"\n'
    )
    return build_theme(raw, sink), sink


def test_name_defaults_to_skin_directory(tmp_path: Path):
    skin_dir = tmp_path / "midnight"
    skin_dir.mkdir()
    theme, _ = _build("", skin_dir=skin_dir)

    assert theme.meta.name == "midnight"
    assert theme.meta.display_name == "midnight"
    assert theme.asset_root == skin_dir / "assets"


def test_engine_mismatch_discards_skin_document():
    sink = WarningSink(WarningStage.THEME)
    raw = load_document('[meta]\nengine = "2"\n[colors]\naccent = "#ff0000"\n')

    theme = build_theme(raw, sink)

    assert _codes(sink) == [ErrorCode.SCHEMA_ERROR]
    assert "engine version" in sink.items[0].message
    assert theme.colors["accent"] == ColorValue.rgb(0x4C, 0x8D, 0xFF)


def test_missing_engine_assumes_current_version():
    sink = WarningSink(WarningStage.THEME)
    raw = load_document('[colors]\naccent = "#ff0000"\n')

    theme = build_theme(raw, sink)

    assert _codes(sink) == [ErrorCode.SCHEMA_ERROR]
    assert theme.colors["accent"] == ColorValue.rgb(255, 0, 0)


def test_overlay_images_resolve_against_assets(tmp_path: Path):
    skin_dir = tmp_path / "skin"
    (skin_dir / "assets").mkdir(parents=True)
    (skin_dir / "assets" / "ring.png").write_bytes(b"png")
    (skin_dir / "assets" / "frame.png").write_bytes(b"png")

    theme, sink = _build(
        "[components.thumbnail]\n"
        'overlay_images = ["ring.png", { path = "ring.png", offset_x = 4, offset_y = "-2" }, "gone.png"]\n'
        'border_image = "frame.png"\n'
        'stroke_width = "-3"\n',
        skin_dir=skin_dir,
    )

    assert _codes(sink) == [ErrorCode.MISSING_ASSET]
    assert sink.items[0].path == skin_dir / "assets" / "gone.png"
    overlays = theme.components.thumbnail.overlays
    assert [overlay.path.name for overlay in overlays] == ["ring.png", "ring.png", "frame.png"]
    assert (overlays[1].offset_x, overlays[1].offset_y) == (4.0, -2.0)
    assert theme.components.thumbnail.stroke_width == 0.0


def test_overlay_outside_assets_is_rejected(tmp_path: Path):
    skin_dir = tmp_path / "skin"
    (skin_dir / "assets").mkdir(parents=True)
    (skin_dir / "secret.png").write_bytes(b"png")

    theme, sink = _build(
        '[components.thumbnail]\noverlay_images = ["../secret.png"]\n',
        skin_dir=skin_dir,
    )

    assert _codes(sink) == [ErrorCode.SCHEMA_ERROR]
    assert theme.components.thumbnail.overlays == ()


def test_slider_image_thumb(tmp_path: Path):
    skin_dir = tmp_path / "skin"
    (skin_dir / "assets").mkdir(parents=True)
    (skin_dir / "assets" / "knob.png").write_bytes(b"png")

    theme, sink = _build(
        '[components.slider]\nthumb_shape = "image"\nthumb_image = "knob.png"\nthumb_size = "30"\n',
        skin_dir=skin_dir,
    )

    assert len(sink) == 0
    thumb = theme.components.slider.thumb
    assert isinstance(thumb, ImageThumb)
    assert thumb.path.name == "knob.png"
    assert thumb.size == 30.0


def test_slider_missing_image_reverts_to_circle(tmp_path: Path):
    skin_dir = tmp_path / "skin"
    (skin_dir / "assets").mkdir(parents=True)

    theme, sink = _build(
        '[components.slider]\nthumb_shape = "image"\nthumb_image = "knob.png"\n',
        skin_dir=skin_dir,
    )

    assert _codes(sink) == [ErrorCode.MISSING_ASSET]
    assert isinstance(theme.components.slider.thumb, CircleThumb)


def test_theme_with_dynamic_backgrounds_leaves_other_components():
    sink = WarningSink(WarningStage.THEME)
    theme = build_theme(None, sink)
    gradient = GradientSpec(ColorValue.rgb(0, 0, 0), ColorValue.rgb(90, 90, 90))

    dynamic = theme.with_dynamic_backgrounds(gradient, None)

    assert dynamic.components.root.background == gradient
    assert dynamic.components.panel == theme.components.panel
    assert dynamic.components.button == theme.components.button
    assert theme.components.root.background != gradient
