"""Skin engine models.

Everything here is an immutable snapshot. A new build produces new objects;
published objects are never edited in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Union

from nowplaying.core.colors import ColorValue
from nowplaying.errors import ErrorCode
from nowplaying.skins.constants import ComponentId


class WarningStage(str, Enum):
    """Pipeline stage a warning was raised in."""

    THEME = "theme"
    LAYOUT = "layout"
    ASSET = "asset"
    RELOAD = "reload"
    GRADIENT = "gradient"


@dataclass(frozen=True, slots=True)
class SkinWarning:
    """One diagnostic shown to the user in the warnings feed."""

    stage: WarningStage
    code: ErrorCode
    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"[{self.stage.value}] {self.message} ({self.path.name})"
        return f"[{self.stage.value}] {self.message}"


# -- theme --


class GradientDirection(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass(frozen=True, slots=True)
class GradientSpec:
    """Two-stop gradient. Dynamic gradients are ordered dark to light."""

    start: ColorValue
    end: ColorValue
    direction: GradientDirection = GradientDirection.VERTICAL


@dataclass(frozen=True, slots=True)
class SolidBackground:
    color: ColorValue


AreaBackground = Union[SolidBackground, GradientSpec]


def background_primary_color(background: AreaBackground) -> ColorValue:
    if isinstance(background, GradientSpec):
        return background.start
    return background.color


def background_direction(background: AreaBackground) -> GradientDirection:
    """Direction a dynamic gradient should use for this static background."""
    if isinstance(background, GradientSpec):
        return background.direction
    return GradientDirection.VERTICAL


@dataclass(frozen=True, slots=True)
class AreaStyle:
    background: AreaBackground
    foreground: ColorValue
    border_color: ColorValue
    border_radius: float
    border_width: float
    show_border: bool


@dataclass(frozen=True, slots=True)
class ButtonStyle:
    background: ColorValue
    foreground: ColorValue
    hover_background: ColorValue
    active_background: ColorValue
    border_color: ColorValue
    border_radius: float
    border_width: float


@dataclass(frozen=True, slots=True)
class IconStyle:
    color: ColorValue
    size_scale: float


@dataclass(frozen=True, slots=True)
class CircleThumb:
    color: ColorValue
    radius: float


@dataclass(frozen=True, slots=True)
class ImageThumb:
    color: ColorValue
    path: Path
    size: float


SliderThumb = Union[CircleThumb, ImageThumb]


@dataclass(frozen=True, slots=True)
class SliderStyle:
    track_fill: ColorValue
    track_background: ColorValue
    track_thickness: float
    thumb: SliderThumb


@dataclass(frozen=True, slots=True)
class ThumbnailOverlay:
    path: Path
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True, slots=True)
class ThumbnailStyle:
    corner_radius: float
    stroke_color: ColorValue
    stroke_width: float
    overlays: tuple[ThumbnailOverlay, ...] = ()


@dataclass(frozen=True, slots=True)
class TextStyle:
    color: ColorValue
    size: float


@dataclass(frozen=True, slots=True)
class ComponentStyles:
    root: AreaStyle
    panel: AreaStyle
    button: ButtonStyle
    button_icon: IconStyle
    slider: SliderStyle
    thumbnail: ThumbnailStyle
    text_title: TextStyle
    text_body: TextStyle


@dataclass(frozen=True, slots=True)
class ThemeMeta:
    engine_version: str
    name: str
    display_name: str
    disable_vinyl_thumbnail: bool = False
    transparent_background: bool = False


@dataclass(frozen=True, slots=True)
class ThemeModel:
    """A fully resolved theme."""

    meta: ThemeMeta
    use_gradient: bool
    asset_root: Path
    colors: dict[str, ColorValue]
    variables: dict[str, str]
    components: ComponentStyles

    def with_dynamic_backgrounds(
        self,
        root: GradientSpec | None,
        panel: GradientSpec | None,
    ) -> ThemeModel:
        """Return a copy whose root/panel backgrounds use the given gradients."""
        components = self.components
        if root is not None:
            components = replace(components, root=replace(components.root, background=root))
        if panel is not None:
            components = replace(components, panel=replace(components.panel, background=panel))
        return replace(self, components=components)


# -- layout --


class LayoutAlign(str, Enum):
    START = "start"
    CENTER = "center"
    END = "end"


class ContainerKind(str, Enum):
    ROW = "row"
    COLUMN = "column"


@dataclass(frozen=True, slots=True)
class ContainerNode:
    """A row or column of child nodes."""

    kind: ContainerKind
    align: LayoutAlign = LayoutAlign.START
    spacing: float = 8.0
    fill: bool = False
    visible: bool = True
    children: tuple[LayoutNode, ...] = ()


@dataclass(frozen=True, slots=True)
class ComponentNode:
    """A renderer-drawn component with its uninterpreted params."""

    component: ComponentId
    visible: bool = True
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SpacerNode:
    size: float = 8.0


LayoutNode = Union[ContainerNode, ComponentNode, SpacerNode]


@dataclass(frozen=True, slots=True)
class Variant:
    """One selectable layout tree. ``root`` is None when everything was pruned."""

    id: str
    display_name: str
    root: LayoutNode | None


@dataclass(frozen=True, slots=True)
class LayoutModel:
    default_variant_id: str
    variants: tuple[Variant, ...] = ()

    def get(self, variant_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None


# -- bundle --


@dataclass(frozen=True, slots=True)
class SkinSummary:
    """Display-ready skin metadata."""

    skin_id: str
    display_name: str
    source_dir: Path
    is_builtin: bool


@dataclass(frozen=True, slots=True)
class SkinBundle:
    """The atomically published theme/layout pair plus selection state."""

    skin_id: str
    source_dir: Path | None
    theme: ThemeModel
    static_theme: ThemeModel
    layout: LayoutModel
    active_variant_id: str
    mtimes: dict[str, int] = field(default_factory=dict)
    artwork_key: str | None = None

    @property
    def active_variant(self) -> Variant:
        variant = self.layout.get(self.active_variant_id)
        if variant is None:
            # Bundles are only built with a selected variant from their own layout.
            return self.layout.variants[0]
        return variant

    def with_variant(self, variant_id: str) -> SkinBundle:
        return replace(self, active_variant_id=variant_id)

    def with_gradient(
        self,
        artwork_key: str,
        root: GradientSpec | None,
        panel: GradientSpec | None,
    ) -> SkinBundle:
        theme = self.static_theme.with_dynamic_backgrounds(root, panel)
        return replace(self, theme=theme, artwork_key=artwork_key)

    def without_gradient(self) -> SkinBundle:
        return replace(self, theme=self.static_theme, artwork_key=None)
