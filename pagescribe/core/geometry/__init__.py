"""
Geometry kernel and coordinate spaces.
"""
from .models import EraserFootprint, Point
from .kernel import (
    circle_segment_intersection,
    distance_point_to_point,
    distance_point_to_segment,
    is_point_in_circle,
    quadratic_bezier_smooth,
)
from .transforms import Viewport, document_to_export_point, document_to_export_text

__all__ = [
    "EraserFootprint",
    "Point",
    "circle_segment_intersection",
    "distance_point_to_point",
    "distance_point_to_segment",
    "is_point_in_circle",
    "quadratic_bezier_smooth",
    "Viewport",
    "document_to_export_point",
    "document_to_export_text",
]
