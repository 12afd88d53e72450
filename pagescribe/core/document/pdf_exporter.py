"""
Writes text annotations and pencil strokes into a PDF.

Export is two steps: plan_text / plan_stroke convert stored annotations
into PDF space (origin bottom-left), then PDFExporter draws the plans
with PyMuPDF.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import fitz  # PyMuPDF

from ...utils.colors import hex_to_rgb
from ..annotations.models import FontFamily, PencilStroke, TextAnnotation
from ..geometry.kernel import quadratic_bezier_smooth
from ..geometry.models import Point
from ..geometry.transforms import document_to_export_point, document_to_export_text

logger = logging.getLogger(__name__)

DEFAULT_FONT_KEY = "Helvetica"

# Standard 14 font names -> PyMuPDF built-in font codes
BASE14_FONTS = {
    "Helvetica": "helv",
    "Helvetica-Bold": "hebo",
    "Helvetica-Oblique": "heit",
    "Helvetica-BoldOblique": "hebi",
    "Times-Roman": "tiro",
    "Times-Bold": "tibo",
    "Times-Italic": "tiit",
    "Times-BoldItalic": "tibi",
    "Courier": "cour",
    "Courier-Bold": "cobo",
    "Courier-Oblique": "coit",
    "Courier-BoldOblique": "cobi",
}

_FAMILY_BASE = {
    FontFamily.ARIAL: "Helvetica",
    FontFamily.VERDANA: "Helvetica",
    FontFamily.TIMES_NEW_ROMAN: "Times",
    FontFamily.GEORGIA: "Times",
    FontFamily.COURIER_NEW: "Courier",
}

UNDERLINE_OFFSET = 0.15  # below the baseline, as a fraction of font size
UNDERLINE_THICKNESS = 0.05
MIN_UNDERLINE_THICKNESS = 0.5

ROUND_CAP = 1


def resolve_font_key(family: FontFamily, bold: bool, italic: bool) -> str:
    """
    Pick the standard PDF font variant for a family and style.

    Returns:
        One of the 12 Helvetica/Times/Courier variant names
    """
    base = _FAMILY_BASE.get(family)
    if base is None:
        return DEFAULT_FONT_KEY

    if base == "Times":
        if bold and italic:
            return "Times-BoldItalic"
        if bold:
            return "Times-Bold"
        if italic:
            return "Times-Italic"
        return "Times-Roman"

    if bold and italic:
        return f"{base}-BoldOblique"
    if bold:
        return f"{base}-Bold"
    if italic:
        return f"{base}-Oblique"
    return base


def measure_text(text: str, font_key: str, font_size: float) -> float:
    """Width of `text` in points using the base-14 font metrics."""
    fontname = BASE14_FONTS.get(font_key, BASE14_FONTS[DEFAULT_FONT_KEY])
    return fitz.get_text_length(text, fontname=fontname, fontsize=font_size)


@dataclass(frozen=True)
class ExportText:
    """A text annotation resolved to PDF space."""

    text: str
    origin: Point  # baseline start, PDF space
    font_size: float
    font_key: str
    color: Tuple[float, float, float]
    underline: bool
    width: float

    @property
    def underline_y(self) -> float:
        return self.origin.y - self.font_size * UNDERLINE_OFFSET

    @property
    def underline_thickness(self) -> float:
        return max(MIN_UNDERLINE_THICKNESS, self.font_size * UNDERLINE_THICKNESS)


@dataclass(frozen=True)
class ExportStroke:
    """A pencil stroke as straight PDF-space segments."""

    segments: Tuple[Tuple[Point, Point], ...]
    color: Tuple[float, float, float]
    stroke_width: float
    opacity: float


def plan_text(annotation: TextAnnotation, page_height: float) -> ExportText:
    """
    Convert a text annotation to PDF space.

    Args:
        annotation: Stored annotation (document units)
        page_height: Height of the target page in points

    Returns:
        ExportText ready for drawing
    """
    font_key = resolve_font_key(annotation.font_family, annotation.bold, annotation.italic)
    return ExportText(
        text=annotation.text,
        origin=document_to_export_text(
            annotation.x, annotation.y, annotation.font_size, page_height
        ),
        font_size=annotation.font_size,
        font_key=font_key,
        color=hex_to_rgb(annotation.color),
        underline=annotation.underline,
        width=measure_text(annotation.text, font_key, annotation.font_size),
    )


def plan_stroke(stroke: PencilStroke, page_height: float) -> ExportStroke:
    """
    Convert a stroke to smoothed PDF-space segments.

    Args:
        stroke: Stored stroke (document units, raw points)
        page_height: Height of the target page in points

    Returns:
        ExportStroke with one segment per consecutive smoothed point pair
    """
    flipped = [document_to_export_point(p, page_height) for p in stroke.points]
    smoothed = quadratic_bezier_smooth(flipped)

    return ExportStroke(
        segments=tuple(zip(smoothed, smoothed[1:])),
        color=hex_to_rgb(stroke.color),
        stroke_width=stroke.stroke_width,
        opacity=stroke.opacity,
    )


class PDFExporter:
    """Handles exporting annotations to PDF files."""

    def export(self, pdf_bytes: bytes, text_annotations: Iterable[TextAnnotation],
               strokes: Iterable[PencilStroke]) -> bytes:
        """
        Draw annotations onto a copy of a PDF.

        Args:
            pdf_bytes: Source PDF
            text_annotations: Text annotations in draw order
            strokes: Pencil strokes in draw order

        Returns:
            Bytes of the annotated PDF
        """
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            skipped = 0

            for annotation in text_annotations:
                page = self._page_for(doc, annotation.page_number)
                if page is None:
                    skipped += 1
                    continue
                self._draw_text(page, plan_text(annotation, page.rect.height))

            for stroke in strokes:
                page = self._page_for(doc, stroke.page_number)
                if page is None or len(stroke.points) < 2:
                    skipped += 1
                    continue
                self._draw_stroke(page, plan_stroke(stroke, page.rect.height))

            if skipped:
                logger.warning("Skipped %d annotation(s) on missing pages", skipped)

            return doc.tobytes(garbage=4, deflate=True)
        finally:
            doc.close()

    @staticmethod
    def _page_for(doc: fitz.Document, page_number: int):
        if not 1 <= page_number <= doc.page_count:
            return None
        return doc[page_number - 1]

    @staticmethod
    def _to_page(page: fitz.Page, point: Point) -> fitz.Point:
        """PDF space (bottom-left origin) -> PyMuPDF page space (top-left)."""
        return fitz.Point(point.x, point.y) * page.transformation_matrix

    def _draw_text(self, page: fitz.Page, plan: ExportText) -> None:
        page.insert_text(
            self._to_page(page, plan.origin),
            plan.text,
            fontsize=plan.font_size,
            fontname=BASE14_FONTS[plan.font_key],
            color=plan.color,
        )

        if plan.underline:
            shape = page.new_shape()
            shape.draw_line(
                self._to_page(page, Point(plan.origin.x, plan.underline_y)),
                self._to_page(page, Point(plan.origin.x + plan.width, plan.underline_y)),
            )
            shape.finish(color=plan.color, width=plan.underline_thickness)
            shape.commit()

    def _draw_stroke(self, page: fitz.Page, plan: ExportStroke) -> None:
        shape = page.new_shape()
        for start, end in plan.segments:
            shape.draw_line(self._to_page(page, start), self._to_page(page, end))
        shape.finish(
            color=plan.color,
            width=plan.stroke_width,
            lineCap=ROUND_CAP,
            stroke_opacity=plan.opacity,
            closePath=False,
        )
        shape.commit()
