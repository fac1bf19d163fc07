"""Skin document reading and TOML parsing."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any

from nowplaying.errors import DocumentMissingError, DocumentSyntaxError
from nowplaying.skins.constants import MAX_DOCUMENT_BYTES

RawTable = dict[str, Any]

_LOCATION_RE = re.compile(r"\(at line (\d+), column (\d+)\)")


def load_document(text: str, *, source: Path | None = None) -> RawTable:
    """Parse TOML text into a raw table.

    Raises DocumentSyntaxError with a best-effort line/column on malformed input.
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        reason = str(exc)
        line = getattr(exc, "lineno", None)
        column = getattr(exc, "colno", None)
        if line is None:
            match = _LOCATION_RE.search(reason)
            if match:
                line, column = int(match.group(1)), int(match.group(2))
        raise DocumentSyntaxError(reason, path=source, line=line, column=column) from exc


def read_document(path: Path, *, max_bytes: int = MAX_DOCUMENT_BYTES) -> RawTable:
    """Read and parse one skin document from disk."""
    return load_document(_read_text_limited(path, max_bytes=max_bytes), source=path)


def _read_text_limited(path: Path, *, max_bytes: int) -> str:
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise DocumentMissingError(path, exc.strerror or "") from exc
    if size > max_bytes:
        raise DocumentMissingError(path, f"file exceeds max size ({max_bytes} bytes)")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentMissingError(path, str(exc)) from exc


def get_table(raw: RawTable, *keys: str) -> RawTable:
    """Walk nested tables, returning an empty dict where a level is absent."""
    current: Any = raw
    for key in keys:
        if not isinstance(current, dict):
            return {}
        current = current.get(key, {})
    return current if isinstance(current, dict) else {}


def merge_tables(base: RawTable, overlay: RawTable) -> RawTable:
    """Deep-merge overlay onto a copy of base; overlay scalars and lists win."""
    merged: RawTable = dict(base)
    for key, value in overlay.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merged[key] = merge_tables(existing, value)
        else:
            merged[key] = value
    return merged
