"""
Circular eraser for freehand strokes.

A stroke touched by the eraser is cut where its segments cross the
circle boundary; the pieces outside the circle survive as new strokes.
All geometry works on the raw (unsmoothed) points.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..geometry.kernel import (
    circle_segment_intersection,
    distance_point_to_point,
    is_point_in_circle,
)
from ..geometry.models import EraserFootprint, Point
from .models import PencilStroke
from .store import AnnotationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EraseResult:
    """Outcome of one eraser footprint against one stroke."""

    touched: bool
    fragments: Tuple[Tuple[Point, ...], ...] = ()


def erase_stroke(stroke: PencilStroke, footprint: EraserFootprint) -> EraseResult:
    """
    Split a stroke around an eraser footprint.

    Args:
        stroke: Stroke to test (at least 2 points)
        footprint: Eraser circle in document units

    Returns:
        EraseResult; untouched strokes carry no fragments, touched
        strokes carry every surviving fragment with 2 or more points
    """
    center = footprint.center
    radius = footprint.radius
    points = stroke.points

    fragments: List[Tuple[Point, ...]] = []
    current: List[Point] = []
    touched = False
    previous_inside = False

    for i, point in enumerate(points):
        inside = is_point_in_circle(point, center, radius)

        if inside:
            touched = True
            if current and i > 0:
                # Cut the open fragment where it enters the circle
                crossing = circle_segment_intersection(center, radius, points[i - 1], point)
                if crossing is not None:
                    current.append(crossing)
            if len(current) >= 2:
                fragments.append(tuple(current))
            current = []
        else:
            if not current and i > 0 and previous_inside:
                # Start the new fragment where it leaves the circle
                crossing = circle_segment_intersection(center, radius, points[i - 1], point)
                if crossing is not None:
                    current.append(crossing)
            current.append(point)

        previous_inside = inside

    if len(current) >= 2:
        fragments.append(tuple(current))

    if not touched:
        return EraseResult(touched=False)
    return EraseResult(touched=True, fragments=tuple(fragments))


def apply_eraser(store: AnnotationStore, footprint: EraserFootprint,
                 page_number: int) -> Dict[str, List[str]]:
    """
    Erase every stroke on a page under one footprint, atomically.

    All strokes are evaluated against the store state before any change,
    then removals and their replacements are applied as one store update.

    Args:
        store: Annotation store to edit
        footprint: Eraser circle in document units
        page_number: 1-based page being erased

    Returns:
        Mapping of erased stroke id -> ids of the fragments that replaced it
    """
    replacements = {}
    for stroke in store.strokes_on_page(page_number):
        result = erase_stroke(stroke, footprint)
        if result.touched:
            replacements[stroke.id] = result.fragments

    if not replacements:
        return {}

    replaced = store.replace_strokes(replacements)
    logger.debug(
        "Eraser at (%.1f, %.1f) r=%.1f cut %d stroke(s) on page %d",
        footprint.center_x, footprint.center_y, footprint.radius,
        len(replaced), page_number,
    )
    return replaced


def sweep_positions(last: Point, current: Point, diameter: float) -> List[Point]:
    """
    Eraser centers to apply for a pointer move from `last` to `current`.

    Consecutive centers are at most a quarter of the diameter (half the
    radius) apart so thin strokes cannot slip between samples.

    Args:
        last: Previous eraser center
        current: New eraser center
        diameter: Eraser diameter, same units as the points

    Returns:
        Centers in order, always ending at `current`
    """
    step = diameter / 4
    dx = current.x - last.x
    dy = current.y - last.y
    distance = distance_point_to_point(last, current)

    if distance <= step:
        return [current]

    steps = math.ceil(distance / step)
    positions = [
        Point(last.x + dx * i / steps, last.y + dy * i / steps)
        for i in range(1, steps)
    ]
    positions.append(current)
    return positions
