import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from ...errors import InvalidInput
from ...utils.colors import is_hex_color
from ..geometry.models import Point, check_positive, is_finite_number


class FontFamily(Enum):
    ARIAL = "Arial"
    TIMES_NEW_ROMAN = "Times New Roman"
    COURIER_NEW = "Courier New"
    GEORGIA = "Georgia"
    VERDANA = "Verdana"


def new_annotation_id() -> str:
    return str(uuid.uuid4())


def _check_page_number(page_number: int) -> None:
    if not isinstance(page_number, int) or page_number < 1:
        raise InvalidInput(f"Page number must be an integer >= 1, got {page_number!r}")


def _check_color(color: str) -> None:
    if not is_hex_color(color):
        raise InvalidInput(f"Color must be a hex RGB string, got {color!r}")


@dataclass(frozen=True)
class StrokeStyle:
    """Visual style shared by a stroke and every fragment split from it."""

    color: str = "#000000"
    stroke_width: float = 3.0
    opacity: float = 1.0

    def validate(self) -> None:
        _check_color(self.color)
        check_positive("Stroke width", self.stroke_width)
        if not is_finite_number(self.opacity) or not 0 <= self.opacity <= 1:
            raise InvalidInput(f"Opacity must be within [0, 1], got {self.opacity}")


@dataclass(frozen=True)
class PencilStroke:
    """A freehand annotation: ordered points (draw order) plus style."""

    id: str
    points: Tuple[Point, ...]
    color: str
    stroke_width: float
    opacity: float
    page_number: int  # 1-based

    @property
    def style(self) -> StrokeStyle:
        return StrokeStyle(self.color, self.stroke_width, self.opacity)

    @classmethod
    def create(cls, points: Iterable[Point], style: StrokeStyle,
               page_number: int) -> "PencilStroke":
        """
        Create a stroke with a fresh id.

        Raises:
            InvalidInput: fewer than 2 points, non-finite coordinates, bad style
                or page number
        """
        points = tuple(points)
        if len(points) < 2:
            raise InvalidInput(f"A stroke needs at least 2 points, got {len(points)}")
        if not all(is_finite_number(p.x) and is_finite_number(p.y) for p in points):
            raise InvalidInput("Stroke points must have finite coordinates")
        style.validate()
        _check_page_number(page_number)

        return cls(
            id=new_annotation_id(),
            points=points,
            color=style.color,
            stroke_width=style.stroke_width,
            opacity=style.opacity,
            page_number=page_number,
        )

    def derive(self, points: Iterable[Point]) -> "PencilStroke":
        """Create a new stroke (new id) with this stroke's style and page."""
        return PencilStroke.create(points, self.style, self.page_number)


@dataclass(frozen=True)
class TextAnnotation:
    """A positioned, styled run of text (top-left anchor, document units)."""

    id: str
    text: str
    x: float
    y: float
    font_size: float
    color: str
    page_number: int  # 1-based
    font_family: FontFamily = FontFamily.ARIAL
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def validate(self) -> None:
        check_positive("Font size", self.font_size)
        if not (is_finite_number(self.x) and is_finite_number(self.y)):
            raise InvalidInput(f"Position must be finite, got ({self.x!r}, {self.y!r})")
        if not isinstance(self.text, str):
            raise InvalidInput(f"Text must be a string, got {self.text!r}")
        _check_color(self.color)
        _check_page_number(self.page_number)
        if not isinstance(self.font_family, FontFamily):
            raise InvalidInput(f"Unknown font family {self.font_family!r}")

    @classmethod
    def create(cls, text: str, x: float, y: float, font_size: float,
               color: str, page_number: int, **style) -> "TextAnnotation":
        """
        Create a text annotation with a fresh id.

        `style` accepts font_family (FontFamily or its display name),
        bold, italic and underline.

        Raises:
            InvalidInput: non-positive font size, bad color, page or family
        """
        if "font_family" in style:
            style["font_family"] = coerce_font_family(style["font_family"])

        annotation = cls(
            id=new_annotation_id(),
            text=text,
            x=x,
            y=y,
            font_size=font_size,
            color=color,
            page_number=page_number,
            **style,
        )
        annotation.validate()
        return annotation


def coerce_font_family(value) -> FontFamily:
    """Accept a FontFamily or its display name ("Times New Roman")."""
    if isinstance(value, FontFamily):
        return value
    try:
        return FontFamily(value)
    except ValueError:
        raise InvalidInput(f"Unknown font family {value!r}") from None


TEXT_FIELDS = frozenset(
    f for f in TextAnnotation.__dataclass_fields__ if f != "id"
)
