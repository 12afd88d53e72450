"""
Stateless geometry used by the eraser, hit testing and export smoothing.

All functions expect their arguments in one coordinate space; converting
between screen, document and export space is the caller's job.
"""
import math
from typing import List, Optional, Sequence

from .models import Point

# Samples taken along each quadratic curve when smoothing
_SMOOTH_STEPS = (0.25, 0.5, 0.75, 1.0)


def distance_point_to_point(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def is_point_in_circle(p: Point, center: Point, radius: float) -> bool:
    """
    Check if a point lies inside a circle.

    The boundary is inclusive: a point at exactly `radius` from the
    center counts as inside.
    """
    return distance_point_to_point(p, center) <= radius


def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """
    Shortest distance from a point to the segment a-b.

    Args:
        p: Point to measure from
        a: Segment start
        b: Segment end

    Returns:
        Distance to the nearest point of the segment
    """
    length_sq = (b.x - a.x) ** 2 + (b.y - a.y) ** 2

    if length_sq == 0:
        return distance_point_to_point(p, a)

    t = ((p.x - a.x) * (b.x - a.x) + (p.y - a.y) * (b.y - a.y)) / length_sq
    t = max(0.0, min(1.0, t))

    nearest = Point(a.x + t * (b.x - a.x), a.y + t * (b.y - a.y))
    return distance_point_to_point(p, nearest)


def circle_segment_intersection(center: Point, radius: float,
                                p1: Point, p2: Point) -> Optional[Point]:
    """
    Find where the segment p1-p2 crosses a circle boundary.

    Solves a*t^2 + b*t + c = 0 for the parametric segment p1 + t*(p2 - p1).
    When both roots fall inside [0, 1] the one nearest p1 wins, so the
    eraser always cuts at the entry point of a segment.

    Args:
        center: Circle center
        radius: Circle radius
        p1: Segment start
        p2: Segment end

    Returns:
        The crossing point, or None if the segment never touches the
        boundary or has zero length
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    fx = p1.x - center.x
    fy = p1.y - center.y

    a = dx * dx + dy * dy
    b = 2 * (fx * dx + fy * dy)
    c = fx * fx + fy * fy - radius * radius

    discriminant = b * b - 4 * a * c
    if discriminant < 0 or a == 0:
        return None

    root = math.sqrt(discriminant)
    t1 = (-b - root) / (2 * a)
    t2 = (-b + root) / (2 * a)

    for t in (t1, t2):
        if 0 <= t <= 1:
            return Point(p1.x + t * dx, p1.y + t * dy)

    return None


def quadratic_bezier_smooth(points: Sequence[Point]) -> List[Point]:
    """
    Densify a hand-drawn polyline into a smooth curve.

    Each interior point becomes the control point of a quadratic curve
    running between the midpoints of its two neighbouring segments. The
    first and last input points are kept exactly.

    Args:
        points: Raw stroke points

    Returns:
        Smoothed points; inputs with 2 points or fewer come back unchanged
    """
    if len(points) <= 2:
        return list(points)

    result = [points[0]]

    for i in range(len(points) - 2):
        p0, p1, p2 = points[i], points[i + 1], points[i + 2]
        start_x, start_y = (p0.x + p1.x) / 2, (p0.y + p1.y) / 2
        end_x, end_y = (p1.x + p2.x) / 2, (p1.y + p2.y) / 2

        for t in _SMOOTH_STEPS:
            ct = 1 - t
            result.append(Point(
                ct * ct * start_x + 2 * ct * t * p1.x + t * t * end_x,
                ct * ct * start_y + 2 * ct * t * p1.y + t * t * end_y,
            ))

    result.append(points[-1])
    return result
