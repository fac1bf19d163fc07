"""Skin directory loading: documents in, resolved theme and layout out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from nowplaying.errors import (
    DocumentMissingError,
    DocumentSyntaxError,
    SkinBuildError,
    SkinError,
    VariantListEmptyError,
)
from nowplaying.skins.constants import LAYOUT_FILENAME, THEME_FILENAME
from nowplaying.skins.document import RawTable, get_table, read_document
from nowplaying.skins.layout_builder import build_layout
from nowplaying.skins.models import (
    LayoutModel,
    SkinSummary,
    SkinWarning,
    ThemeModel,
    Variant,
    WarningStage,
)
from nowplaying.skins.theme_builder import build_theme
from nowplaying.skins.variants import select_variant
from nowplaying.skins.warnings import WarningSink

logger = logging.getLogger(__name__)

_MAX_NAME_LEN = 120


@dataclass(frozen=True, slots=True)
class SkinBuild:
    """Result of one pipeline run over a skin directory."""

    theme: ThemeModel
    layout: LayoutModel
    variant: Variant
    warnings: tuple[SkinWarning, ...] = ()
    mtimes: dict[str, int] = field(default_factory=dict)


def build_skin(
    skin_dir: Path | None,
    *,
    previous_variant_id: str | None = None,
    strict: bool = False,
) -> SkinBuild:
    """Run the whole pipeline for one skin directory.

    ``skin_dir=None`` builds the embedded defaults. In strict mode (used by
    reloads) a missing or malformed document and an empty variant list raise
    SkinBuildError; otherwise they fall back to the embedded defaults with a
    warning.
    """
    if skin_dir is not None and skin_dir.is_symlink():
        error = DocumentMissingError(skin_dir, "skin directory cannot be a symlink")
        if strict:
            raise SkinBuildError(error, skin_dir)
        skin_dir = None

    mtimes = document_mtimes(skin_dir) if skin_dir is not None else {}
    theme_path = skin_dir / THEME_FILENAME if skin_dir is not None else None
    layout_path = skin_dir / LAYOUT_FILENAME if skin_dir is not None else None

    theme_sink = WarningSink(WarningStage.THEME, theme_path)
    theme_raw = _read_or_fallback(theme_path, theme_sink, strict=strict)
    theme = build_theme(theme_raw, theme_sink, skin_dir=skin_dir)

    layout_sink = WarningSink(WarningStage.LAYOUT, layout_path)
    layout_raw = _read_or_fallback(layout_path, layout_sink, strict=strict)
    layout = build_layout(layout_raw, layout_sink)
    try:
        variant = select_variant(layout, previous_variant_id)
    except VariantListEmptyError as exc:
        error = VariantListEmptyError(layout_path)
        if strict:
            raise SkinBuildError(error, layout_path) from exc
        layout_sink.add_error(error, context="Layout has no usable variants; using built-in layout")
        layout = build_layout(None, layout_sink)
        variant = select_variant(layout, previous_variant_id)

    warnings = tuple(theme_sink.items) + tuple(layout_sink.items)
    logger.debug(
        "Built skin %s: variant=%s warnings=%d",
        skin_dir or "<builtin>",
        variant.id,
        len(warnings),
    )
    return SkinBuild(
        theme=theme,
        layout=layout,
        variant=variant,
        warnings=warnings,
        mtimes=mtimes,
    )


def _read_or_fallback(path: Path | None, sink: WarningSink, *, strict: bool) -> RawTable | None:
    if path is None:
        return None
    try:
        return read_document(path)
    except DocumentMissingError as exc:
        if strict:
            raise SkinBuildError(exc, path) from exc
        sink.add_error(exc, context=f"Skin folder {path.parent} missing {path.name}; falling back to defaults")
    except DocumentSyntaxError as exc:
        if strict:
            raise SkinBuildError(exc, path) from exc
        sink.add_error(exc, context=f"Failed to parse {path.name}; falling back to defaults")
    return None


def document_mtimes(skin_dir: Path) -> dict[str, int]:
    """Last-modified stamps (ns) of the skin's documents that exist."""
    stamps: dict[str, int] = {}
    for name in (THEME_FILENAME, LAYOUT_FILENAME):
        try:
            stamps[name] = (skin_dir / name).stat().st_mtime_ns
        except OSError:
            continue
    return stamps


def describe_skin(skin_dir: Path, *, is_builtin: bool = False) -> SkinSummary:
    """Read just enough of a skin directory to list it.

    Raises SkinError when the directory is not a usable skin.
    """
    if not skin_dir.is_dir():
        raise DocumentMissingError(skin_dir, "not a directory")
    if skin_dir.is_symlink():
        raise DocumentMissingError(skin_dir, "skin directory cannot be a symlink")
    theme_path = skin_dir / THEME_FILENAME
    layout_path = skin_dir / LAYOUT_FILENAME
    if not theme_path.is_file() and not layout_path.is_file():
        raise DocumentMissingError(theme_path, f"neither {THEME_FILENAME} nor {LAYOUT_FILENAME} found")

    display_name = skin_dir.name
    if theme_path.is_file():
        try:
            meta = get_table(read_document(theme_path), "meta")
        except SkinError as exc:
            logger.warning("Could not read skin metadata from %s: %s", theme_path, exc)
        else:
            for key in ("display_name", "name"):
                value = meta.get(key)
                if isinstance(value, str) and value.strip():
                    display_name = value.strip()[:_MAX_NAME_LEN]
                    break

    return SkinSummary(
        skin_id=skin_dir.name,
        display_name=display_name,
        source_dir=skin_dir,
        is_builtin=is_builtin,
    )
