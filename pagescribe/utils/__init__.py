"""
Utility helpers.
"""
from .colors import hex_to_rgb, is_hex_color

__all__ = ["hex_to_rgb", "is_hex_color"]
