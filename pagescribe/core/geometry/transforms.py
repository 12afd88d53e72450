"""
Conversions between the three coordinate spaces.

- screen: pixels on the visible canvas, origin top-left, scales with zoom
- document: zoom-independent page units, origin top-left (storage space)
- export: PDF points, origin bottom-left
"""
from dataclasses import dataclass

from .models import Point, check_positive


@dataclass(frozen=True)
class Viewport:
    """Screen <-> document mapping for one zoom level."""

    zoom: float

    def __post_init__(self):
        check_positive("Zoom", self.zoom)

    def screen_to_document(self, x: float, y: float) -> Point:
        return Point(x / self.zoom, y / self.zoom)

    def document_to_screen(self, point: Point) -> Point:
        return Point(point.x * self.zoom, point.y * self.zoom)

    def length_to_document(self, length: float) -> float:
        """Convert a screen length (radius, font size) to document units."""
        return length / self.zoom

    def length_to_screen(self, length: float) -> float:
        return length * self.zoom


def document_to_export_point(point: Point, page_height: float) -> Point:
    """Flip a stroke point into PDF space (no height offset)."""
    return Point(point.x, page_height - point.y)


def document_to_export_text(x: float, y: float, font_size: float,
                            page_height: float) -> Point:
    """
    Convert a text annotation's top-left anchor into its PDF baseline origin.

    Document y marks the top of the glyph box while PDF text is drawn
    upward from the baseline, so the box height (the font size) is
    subtracted after flipping.
    """
    return Point(x, page_height - y - font_size)
