import math
import numbers
from dataclasses import dataclass

from ...errors import InvalidInput


def is_finite_number(value) -> bool:
    """True for int and float values other than bool, NaN and infinity."""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def check_positive(name: str, value) -> None:
    """
    Raises:
        InvalidInput: `value` is not a finite number greater than zero
    """
    if not is_finite_number(value) or not value > 0:
        raise InvalidInput(f"{name} must be a positive number, got {value!r}")


@dataclass(frozen=True)
class Point:
    """A position in a single coordinate space (usually document units)."""

    x: float
    y: float

    def to_tuple(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class EraserFootprint:
    """Circular eraser area in document units."""

    center_x: float
    center_y: float
    radius: float

    def __post_init__(self):
        check_positive("Eraser radius", self.radius)

    @property
    def center(self) -> Point:
        return Point(self.center_x, self.center_y)

    @classmethod
    def from_screen(cls, screen_x: float, screen_y: float,
                    diameter: float, zoom: float) -> "EraserFootprint":
        """
        Build a footprint from the on-screen eraser cursor.

        Args:
            screen_x: Cursor center X in screen pixels
            screen_y: Cursor center Y in screen pixels
            diameter: Eraser cursor diameter in screen pixels
            zoom: Current zoom factor

        Returns:
            Footprint in document units
        """
        return cls(screen_x / zoom, screen_y / zoom, diameter / 2 / zoom)
