"""
Color conversion between "#rrggbb" strings and RGB tuples.
"""
import re
from typing import Tuple

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def is_hex_color(value: str) -> bool:
    """Check if a string is a 6-digit hex color, with or without '#'."""
    return isinstance(value, str) and _HEX_RE.match(value) is not None


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """
    Convert a hex color to an RGB tuple in the 0-1 range used by PyMuPDF.

    Args:
        value: Color such as "#ff8800"

    Returns:
        (r, g, b) floats; black if the string is not a valid hex color
    """
    match = _HEX_RE.match(value or "")
    if not match:
        return (0.0, 0.0, 0.0)
    return tuple(int(part, 16) / 255.0 for part in match.groups())
