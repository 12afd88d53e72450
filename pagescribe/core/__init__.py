"""
Core annotation engine: geometry, annotation store, document collaborators.
"""
from .annotations import (
    AnnotationStore,
    FontFamily,
    PencilStroke,
    StrokeStyle,
    TextAnnotation,
)
from .geometry import EraserFootprint, Point, Viewport

__all__ = [
    "AnnotationStore",
    "FontFamily",
    "PencilStroke",
    "StrokeStyle",
    "TextAnnotation",
    "EraserFootprint",
    "Point",
    "Viewport",
]
