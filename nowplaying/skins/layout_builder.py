"""Layout document parsing into typed node trees, with visibility pruning."""

from __future__ import annotations

from typing import Any

from nowplaying.core.params import param_bool, parse_bool, parse_number, stringify_param
from nowplaying.errors import ErrorCode, InvalidBooleanError
from nowplaying.skins.constants import (
    DEFAULT_CONTAINER_SPACING,
    DEFAULT_SPACER_SIZE,
    LAYOUT_ENGINE_VERSION,
    lookup_component,
)
from nowplaying.skins.defaults import DEFAULT_LAYOUT_TOML
from nowplaying.skins.document import RawTable, get_table, load_document
from nowplaying.skins.models import (
    ComponentNode,
    ContainerKind,
    ContainerNode,
    LayoutAlign,
    LayoutModel,
    LayoutNode,
    SpacerNode,
    Variant,
)
from nowplaying.skins.warnings import WarningSink

_ALIGN_ALIASES: dict[str, LayoutAlign] = {
    "start": LayoutAlign.START,
    "top": LayoutAlign.START,
    "left": LayoutAlign.START,
    "center": LayoutAlign.CENTER,
    "middle": LayoutAlign.CENTER,
    "end": LayoutAlign.END,
    "bottom": LayoutAlign.END,
    "right": LayoutAlign.END,
}


def builtin_layout_document() -> RawTable:
    return load_document(DEFAULT_LAYOUT_TOML)


def build_layout(raw: RawTable | None, sink: WarningSink) -> LayoutModel:
    """Build a LayoutModel from a raw layout document.

    Malformed nodes are dropped with a warning and the rest of the tree
    still builds. The returned model may hold no variants at all; choosing
    from it is left to ``select_variant``.
    """
    document = raw if raw is not None else builtin_layout_document()
    engine = get_table(document, "meta").get("engine")
    if engine is None:
        sink.add(ErrorCode.SCHEMA_ERROR, "layout.meta.engine missing; assuming version 1")
    elif str(engine).strip() != LAYOUT_ENGINE_VERSION:
        sink.add(
            ErrorCode.SCHEMA_ERROR,
            f"Layout engine version {engine} does not match {LAYOUT_ENGINE_VERSION}; using defaults",
        )
        document = builtin_layout_document()

    layout = get_table(document, "layout")
    entries = layout.get("variants", [])
    if not isinstance(entries, list):
        sink.add(ErrorCode.SCHEMA_ERROR, "layout.variants must be an array of tables")
        entries = []

    variants: list[Variant] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        variant = _build_variant(index, entry, sink)
        if variant is None:
            continue
        if variant.id in seen:
            sink.add(ErrorCode.SCHEMA_ERROR, f"Duplicate layout variant id '{variant.id}'; skipping")
            continue
        seen.add(variant.id)
        variants.append(variant)

    default_id = layout.get("default")
    default_id = default_id.strip() if isinstance(default_id, str) else ""
    if default_id and default_id not in seen:
        sink.add(ErrorCode.SCHEMA_ERROR, f"layout.default '{default_id}' names no variant")
    return LayoutModel(default_variant_id=default_id, variants=tuple(variants))


def _build_variant(index: int, entry: Any, sink: WarningSink) -> Variant | None:
    if not isinstance(entry, dict):
        sink.add(ErrorCode.SCHEMA_ERROR, f"Layout variant {index} must be a table; skipping")
        return None
    structure = entry.get("structure")
    if structure is None:
        sink.add(ErrorCode.SCHEMA_ERROR, f"Layout variant {index} is missing structure; skipping")
        return None

    variant_id = _clean_text(entry.get("id")) or f"variant_{index}"
    display_name = _clean_text(entry.get("display_name")) or variant_id
    root = build_node(structure, sink, f"variant '{variant_id}'")
    if root is not None:
        root = prune_node(root)
    if root is None:
        sink.add(
            ErrorCode.SCHEMA_ERROR,
            f"Layout variant '{variant_id}' resolved to no visible content",
        )
    return Variant(id=variant_id, display_name=display_name, root=root)


def build_node(raw: Any, sink: WarningSink, context: str) -> LayoutNode | None:
    """Build one node and its children; None when the node itself is malformed."""
    if not isinstance(raw, dict):
        sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: node must be a table; skipping")
        return None
    node_type = raw.get("type")
    node_type = node_type.strip().lower() if isinstance(node_type, str) else ""

    if node_type in ("row", "column"):
        return _build_container(ContainerKind(node_type), raw, sink, context)
    if node_type == "component":
        return _build_component(raw, sink, context)
    if node_type == "spacer":
        size = _read_number(raw, "size", DEFAULT_SPACER_SIZE, sink, context)
        return SpacerNode(size=max(0.0, size))
    sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: unknown node type {raw.get('type')!r}; skipping")
    return None


def _build_container(
    kind: ContainerKind,
    raw: RawTable,
    sink: WarningSink,
    context: str,
) -> ContainerNode:
    align = LayoutAlign.START
    align_raw = raw.get("align")
    if align_raw is not None:
        resolved = _ALIGN_ALIASES.get(str(align_raw).strip().lower())
        if resolved is None:
            sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: unknown align {align_raw!r}; using start")
        else:
            align = resolved

    children_raw = raw.get("children", [])
    if not isinstance(children_raw, list):
        sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: children must be an array")
        children_raw = []
    children: list[LayoutNode] = []
    for index, child_raw in enumerate(children_raw):
        child = build_node(child_raw, sink, f"{context} > child #{index}")
        if child is not None:
            children.append(child)

    return ContainerNode(
        kind=kind,
        align=align,
        spacing=max(0.0, _read_number(raw, "spacing", DEFAULT_CONTAINER_SPACING, sink, context)),
        fill=_read_bool(raw, "fill", False, sink, context),
        visible=_read_bool(raw, "visible", True, sink, context),
        children=tuple(children),
    )


def _build_component(raw: RawTable, sink: WarningSink, context: str) -> ComponentNode | None:
    component_raw = raw.get("id")
    if not isinstance(component_raw, str) or not component_raw.strip():
        sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: component missing id; skipping")
        return None
    component = lookup_component(component_raw)
    if component is None:
        sink.add(
            ErrorCode.UNKNOWN_COMPONENT_ID,
            f"Unknown component '{component_raw}' in {context}; skipping",
        )
        return None

    params: dict[str, str] = {}
    params_raw = raw.get("params", {})
    if not isinstance(params_raw, dict):
        sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: params must be a table")
        params_raw = {}
    for key, value in params_raw.items():
        text = stringify_param(value)
        if text is None:
            sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: param '{key}' must be a scalar; skipping")
            continue
        params[str(key)] = text

    return ComponentNode(
        component=component,
        visible=_read_bool(raw, "visible", True, sink, context),
        params=params,
    )


def prune_node(node: LayoutNode) -> LayoutNode | None:
    """Drop containers that are hidden or have no visible content, bottom-up.

    Hidden components stay in place (with ``visible=False``) but do not keep
    their parent alive. Zero-size spacers are dropped; any other spacer
    counts as content.
    """
    if isinstance(node, SpacerNode):
        return node if node.size > 0 else None
    if not isinstance(node, ContainerNode):
        return node
    if not node.visible:
        return None
    children = tuple(
        pruned for pruned in (prune_node(child) for child in node.children) if pruned is not None
    )
    if not any(_has_visible_content(child) for child in children):
        return None
    return ContainerNode(
        kind=node.kind,
        align=node.align,
        spacing=node.spacing,
        fill=node.fill,
        visible=True,
        children=children,
    )


def _has_visible_content(node: LayoutNode) -> bool:
    if isinstance(node, ComponentNode):
        return node.visible
    # Containers and spacers reaching here already survived pruning.
    return True


def component_param_bool(node: ComponentNode, key: str) -> bool | None:
    """Read a boolean param for render code; None when absent or unparseable."""
    return param_bool(node.params, key)


def _read_bool(raw: RawTable, key: str, default: bool, sink: WarningSink, context: str) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    try:
        return parse_bool(value)
    except InvalidBooleanError:
        sink.add(
            ErrorCode.INVALID_BOOLEAN,
            f"{context}: {key} = {value!r} is not a boolean; using {str(default).lower()}",
        )
        return default


def _read_number(raw: RawTable, key: str, default: float, sink: WarningSink, context: str) -> float:
    value = raw.get(key)
    if value is None:
        return default
    number = parse_number(value)
    if number is None:
        sink.add(ErrorCode.SCHEMA_ERROR, f"{context}: {key} must be a number; using {default:g}")
        return default
    return number


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
