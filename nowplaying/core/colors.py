"""Color literal parsing and the normalized color value."""

from __future__ import annotations

import re
from dataclasses import dataclass

from nowplaying.errors import ColorFormatError

_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_COLOR_RE = re.compile(r"^(rgba?)\s*\(([^)]*)\)$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ColorValue:
    """Four 8-bit channels, straight (not premultiplied) alpha."""

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> ColorValue:
        return cls(r, g, b, 255)

    @property
    def is_transparent(self) -> bool:
        return self.a == 0

    def luminance(self) -> float:
        """Rec. 709 relative luminance on the 0-255 scale."""
        return 0.2126 * self.r + 0.7152 * self.g + 0.0722 * self.b

    def distance_sq(self, other: ColorValue) -> int:
        dr = self.r - other.r
        dg = self.g - other.g
        db = self.b - other.b
        return dr * dr + dg * dg + db * db

    def to_hex(self) -> str:
        if self.a == 255:
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"


TRANSPARENT = ColorValue(0, 0, 0, 0)
WHITE = ColorValue(255, 255, 255, 255)


def parse_color(value: str) -> ColorValue:
    """Parse a color literal.

    Accepts ``#RRGGBB``, ``#RRGGBBAA``, ``rgb(r, g, b)``, ``rgba(r, g, b, a)``
    and ``transparent``. Raises ColorFormatError for anything else.
    """
    if not isinstance(value, str):
        raise ColorFormatError(repr(value), "expected a string")
    cleaned = value.strip()
    if cleaned.lower() == "transparent":
        return TRANSPARENT

    hex_match = _HEX_COLOR_RE.match(cleaned)
    if hex_match:
        digits = hex_match.group(1)
        r = int(digits[0:2], 16)
        g = int(digits[2:4], 16)
        b = int(digits[4:6], 16)
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
        return ColorValue(r, g, b, a)

    func_match = _FUNC_COLOR_RE.match(cleaned)
    if func_match:
        name = func_match.group(1).lower()
        parts = [part.strip() for part in func_match.group(2).split(",")]
        expected = 4 if name == "rgba" else 3
        if len(parts) != expected:
            raise ColorFormatError(value, f"{name} expects {expected} components")
        r, g, b = (_parse_channel(part, value) for part in parts[:3])
        a = _parse_alpha(parts[3], value) if name == "rgba" else 255
        return ColorValue(r, g, b, a)

    raise ColorFormatError(value)


def _parse_channel(text: str, original: str) -> int:
    try:
        number = float(text)
    except ValueError as exc:
        raise ColorFormatError(original, f"invalid channel {text!r}") from exc
    if not 0.0 <= number <= 255.0:
        raise ColorFormatError(original, f"channel out of range {text!r}")
    return int(round(number))


def _parse_alpha(text: str, original: str) -> int:
    try:
        number = float(text)
    except ValueError as exc:
        raise ColorFormatError(original, f"invalid alpha {text!r}") from exc
    if 0.0 <= number <= 1.0:
        return int(round(number * 255.0))
    # Byte-scaled alpha, accepted for documents written against the 0-255 form.
    if 1.0 < number <= 255.0:
        return int(round(number))
    raise ColorFormatError(original, f"alpha out of range {text!r}")
