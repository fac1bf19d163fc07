"""Boolean and scalar parameter parsing shared by both skin documents."""

from __future__ import annotations

from typing import Mapping

from nowplaying.errors import InvalidBooleanError

_TRUE_LITERALS = frozenset({"true", "yes", "1", "on"})
_FALSE_LITERALS = frozenset({"false", "no", "0", "off"})


def parse_bool(value: object) -> bool:
    """Parse a case-insensitive truthy/falsy literal.

    Recognizes exactly true/false, yes/no, 1/0 and on/off. Native booleans
    from the TOML parser pass through unchanged.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_LITERALS:
            return True
        if lowered in _FALSE_LITERALS:
            return False
    raise InvalidBooleanError(value)


def parse_number(value: object) -> float | None:
    """Return value as a float, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def stringify_param(value: object) -> str | None:
    """Turn a TOML scalar into the string form used by component params."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def param_bool(params: Mapping[str, str], key: str) -> bool | None:
    """Read a boolean component parameter; None when absent or not a boolean."""
    raw = params.get(key)
    if raw is None:
        return None
    try:
        return parse_bool(raw)
    except InvalidBooleanError:
        return None
