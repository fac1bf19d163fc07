"""Built-in default skin documents.

The theme document is the base every skin theme is merged over. Both
documents are also what the engine falls back to when a skin's own
documents cannot be used on first load.
"""

from __future__ import annotations

DEFAULT_THEME_TOML = r"""
use_gradient = true

[meta]
engine = "1"

[colors]
background = "#15161b"
panel = "#1d1f26"
accent = "#4c8dff"
accent_hover = "#5e9dff"
accent_active = "#336cff"
text_primary = "#f7f9fc"
text_secondary = "#9ea7b8"
text_on_accent = "#081123"
slider_track_bg = "#2a2c35"
outline = "rgba(76, 141, 255, 0.45)"

[vars]
radius = "18"
slider_thumb_radius = "10"

[components.root]
background = "{colors.background}"
foreground = "{colors.text_primary}"
border_color = "transparent"
border_radius = "{vars.radius}"
border_width = "0"

[components.panel]
background = "{colors.panel}"
foreground = "{colors.text_primary}"
border_color = "transparent"
border_radius = "{vars.radius}"
border_width = "0"

[components.button]
background = "{colors.accent}"
foreground = "{colors.text_on_accent}"
hover_background = "{colors.accent_hover}"
active_background = "{colors.accent_active}"
border_color = "{colors.outline}"
border_radius = "26"
border_width = "1"

[components.button.icon]
color = "{colors.text_on_accent}"
size_scale = "1"

[components.slider]
track_fill = "{colors.accent}"
track_background = "{colors.slider_track_bg}"
track_thickness = "4"
thumb_shape = "circle"
thumb_color = "{colors.accent}"
thumb_radius = "{vars.slider_thumb_radius}"

[components.thumbnail]
corner_radius = "{vars.radius}"
stroke_color = "transparent"
stroke_width = "0"

[components.text.title]
color = "{colors.text_primary}"
size = "20"

[components.text.body]
color = "{colors.text_secondary}"
size = "16"
"""

DEFAULT_LAYOUT_TOML = r"""
[meta]
engine = "1"

[layout]
default = "art_left"

[[layout.variants]]
id = "art_left"
display_name = "Artwork Left"

[layout.variants.structure]
type = "row"
spacing = 16
fill = true

[[layout.variants.structure.children]]
type = "component"
id = "thumbnail"

[[layout.variants.structure.children]]
type = "column"
spacing = 8
fill = true

[[layout.variants.structure.children.children]]
type = "component"
id = "title"

[[layout.variants.structure.children.children]]
type = "component"
id = "metadata"

[[layout.variants.structure.children.children]]
type = "component"
id = "playback_controls"

[[layout.variants.structure.children.children]]
type = "component"
id = "timeline"

[[layout.variants.structure.children.children]]
type = "component"
id = "skin_warnings"

[[layout.variants.structure.children.children]]
type = "component"
id = "skin_error"

[[layout.variants.structure.children.children]]
type = "component"
id = "thumbnail_error"

[[layout.variants.structure.children.children]]
type = "component"
id = "error"

[[layout.variants]]
id = "art_top"
display_name = "Artwork Top"

[layout.variants.structure]
type = "column"
spacing = 12
fill = true
align = "center"

[[layout.variants.structure.children]]
type = "component"
id = "thumbnail"

[[layout.variants.structure.children]]
type = "component"
id = "title"

[[layout.variants.structure.children]]
type = "component"
id = "metadata"

[[layout.variants.structure.children]]
type = "component"
id = "playback_controls"
params = { centered = "true" }

[[layout.variants.structure.children]]
type = "component"
id = "timeline"
params = { centered = "true" }

[[layout.variants.structure.children]]
type = "component"
id = "skin_warnings"

[[layout.variants.structure.children]]
type = "component"
id = "skin_error"

[[layout.variants.structure.children]]
type = "component"
id = "error"
"""
