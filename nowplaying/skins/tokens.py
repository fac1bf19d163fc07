"""Resolution of ``{colors.KEY}`` / ``{vars.KEY}`` placeholders in a theme document."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator

from nowplaying.core.params import stringify_param
from nowplaying.errors import ErrorCode
from nowplaying.skins.constants import MAX_RESOLVE_PASSES
from nowplaying.skins.document import RawTable
from nowplaying.skins.warnings import WarningSink

TOKEN_RE = re.compile(r"\{(colors|vars)\.([A-Za-z0-9_\-]+)\}")

_TOKEN_TABLES = ("colors", "vars")


@dataclass(frozen=True, slots=True)
class ResolvedDocument:
    """A theme document with every resolvable token substituted.

    Fields that still held a token after the pass budget are replaced by
    an empty string and listed in ``unresolved``.
    """

    tree: RawTable
    colors: dict[str, str]
    variables: dict[str, str]
    sources: dict[str, str] = field(default_factory=dict)
    unresolved: dict[str, tuple[str, ...]] = field(default_factory=dict)
    passes: int = 0

    def is_unresolved(self, path: str) -> bool:
        return path in self.unresolved

    def referenced_vars(self, path: str) -> tuple[str, ...]:
        """Variable names the field referenced before substitution."""
        source = self.sources.get(path, "")
        return tuple(key for table, key in TOKEN_RE.findall(source) if table == "vars")


def has_token(value: str) -> bool:
    return TOKEN_RE.search(value) is not None


def resolve_tokens(raw: RawTable, sink: WarningSink) -> ResolvedDocument:
    """Resolve placeholders across a theme document, iteratively and bounded.

    Each pass substitutes every recognized token whose target holds a
    literal value as of the start of the pass. A pass without substitutions
    ends resolution early; after ``MAX_RESOLVE_PASSES`` whatever is left is
    reported and blanked. Reference cycles end up in the unresolved set.
    """
    tree = _normalize_token_tables(raw, sink)
    values = dict(_iter_string_leaves(tree))
    sources = dict(values)
    table_paths = {
        table: {key: _join(table, key) for key in tree.get(table, {})}
        for table in _TOKEN_TABLES
    }

    passes = 0
    for _ in range(MAX_RESOLVE_PASSES):
        passes += 1
        lookup = {
            table: {key: values[path] for key, path in paths.items()}
            for table, paths in table_paths.items()
        }
        updates: dict[str, str] = {}
        replaced = 0

        def substitute(match: re.Match[str]) -> str:
            nonlocal replaced
            target = lookup[match.group(1)].get(match.group(2))
            if target is None or has_token(target):
                return match.group(0)
            replaced += 1
            return target

        for path, text in values.items():
            if not has_token(text):
                continue
            updated = TOKEN_RE.sub(substitute, text)
            if updated != text:
                updates[path] = updated
        values.update(updates)
        if replaced == 0:
            break

    unresolved: dict[str, tuple[str, ...]] = {}
    for path, text in values.items():
        keys = tuple(dict.fromkeys(f"{table}.{key}" for table, key in TOKEN_RE.findall(text)))
        if not keys:
            continue
        unresolved[path] = keys
        values[path] = ""
        joined = ", ".join(f"{{{key}}}" for key in keys)
        sink.add(ErrorCode.UNRESOLVED_TOKEN, f"{path}: could not resolve {joined}")

    resolved_tree = _rebuild(tree, values, "")
    return ResolvedDocument(
        tree=resolved_tree,
        colors={key: values[path] for key, path in table_paths["colors"].items()},
        variables={key: values[path] for key, path in table_paths["vars"].items()},
        sources=sources,
        unresolved=unresolved,
        passes=passes,
    )


def _normalize_token_tables(raw: RawTable, sink: WarningSink) -> RawTable:
    tree = dict(raw)
    for table in _TOKEN_TABLES:
        entries = raw.get(table, {})
        if not isinstance(entries, dict):
            sink.add(ErrorCode.SCHEMA_ERROR, f"{table} must be a table; ignoring it")
            tree[table] = {}
            continue
        cleaned: dict[str, str] = {}
        for key, value in entries.items():
            text = stringify_param(value)
            if text is None:
                sink.add(ErrorCode.SCHEMA_ERROR, f"{table}.{key} must be a string value")
                continue
            cleaned[key] = text
        tree[table] = cleaned
    return tree


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _iter_string_leaves(value: Any, prefix: str = "") -> Iterator[tuple[str, str]]:
    if isinstance(value, str):
        yield prefix, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _iter_string_leaves(item, _join(prefix, str(key)))
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from _iter_string_leaves(item, f"{prefix}[{index}]")


def _rebuild(value: Any, values: dict[str, str], prefix: str) -> Any:
    if isinstance(value, str):
        return values.get(prefix, value)
    if isinstance(value, dict):
        return {
            key: _rebuild(item, values, _join(prefix, str(key)))
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_rebuild(item, values, f"{prefix}[{index}]") for index, item in enumerate(value)]
    return value
