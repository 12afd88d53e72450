"""
Controller for managing annotation operations and pointer interactions.

Receives pointer positions in screen pixels relative to the page canvas,
converts them with the session zoom and edits the annotation store.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QColor, QImage

from ..core.annotations import StoreState, StrokeStyle, apply_eraser, sweep_positions
from ..core.annotations.models import FontFamily, TextAnnotation
from ..core.document.pdf_exporter import measure_text, resolve_font_key
from ..core.geometry import EraserFootprint, Point
from ..core.geometry.models import is_finite_number
from ..errors import NotFound
from .session import EditorSession

logger = logging.getLogger(__name__)


class Tool(Enum):
    SELECT = "select"
    TEXT = "text"
    PENCIL = "pencil"
    ERASER = "eraser"


class ColorTarget(Enum):
    TEXT = "text"
    PENCIL = "pencil"


@dataclass
class _TextDrag:
    annotation_id: str
    start_screen: Point
    start_position: Point  # annotation x/y when the drag began
    before: StoreState
    moved: bool = False


class AnnotationController(QObject):
    """Handles all annotation-related operations and user interactions."""

    # Signals
    selection_changed = pyqtSignal(object)  # TextAnnotation, PencilStroke or None
    tool_changed = pyqtSignal(object)  # Tool
    stroke_preview = pyqtSignal(object)  # List[Point] of the stroke being drawn

    def __init__(self, session: EditorSession, parent: QObject = None):
        super().__init__(parent)
        self.session = session
        settings = session.settings

        self.tool = Tool.SELECT
        self.pencil_style = StrokeStyle(
            settings.pencil_color, settings.pencil_width, settings.pencil_opacity
        )
        self.eraser_size = settings.eraser_size
        self.text_font_size = settings.text_font_size
        self.text_color = settings.text_color

        self.selected_text_id: Optional[str] = None
        self.selected_stroke_id: Optional[str] = None

        self._drawing: Optional[List[Point]] = None
        self._erase_before: Optional[StoreState] = None
        self._erase_changed = False
        self._last_erase: Optional[Point] = None
        self._drag: Optional[_TextDrag] = None

    @property
    def store(self):
        return self.session.store

    @property
    def is_drawing(self) -> bool:
        return self._drawing is not None

    @property
    def is_erasing(self) -> bool:
        return self._erase_before is not None

    # ------------------------------------------------------------------
    # Tool and selection
    # ------------------------------------------------------------------

    def set_tool(self, tool: Tool) -> None:
        self.tool = tool
        if tool == Tool.TEXT:
            self.clear_selection()
        self.tool_changed.emit(tool)

    def selected_text(self) -> Optional[TextAnnotation]:
        if self.selected_text_id is None:
            return None
        try:
            return self.store.get_text_annotation(self.selected_text_id)
        except NotFound:
            return None

    def _select(self, text_id: Optional[str] = None, stroke_id: Optional[str] = None) -> None:
        self.selected_text_id = text_id
        self.selected_stroke_id = stroke_id
        if text_id:
            self.selection_changed.emit(self.store.get_text_annotation(text_id))
        elif stroke_id:
            self.selection_changed.emit(self.store.get_stroke(stroke_id))
        else:
            self.selection_changed.emit(None)

    def clear_selection(self) -> None:
        """Deselect; closing an edit refreshes the thumbnails."""
        if self.selected_text_id is None and self.selected_stroke_id is None:
            return
        self._select()
        self.session.update_thumbnail_snapshot()

    # ------------------------------------------------------------------
    # Pointer input (screen pixels)
    # ------------------------------------------------------------------

    def pointer_pressed(self, x: float, y: float) -> None:
        self.session.require_document("edit annotations")

        if self.tool == Tool.TEXT:
            self._place_text(x, y)
        elif self.tool == Tool.PENCIL:
            self._drawing = [self.session.viewport.screen_to_document(x, y)]
        elif self.tool == Tool.ERASER:
            self._erase_before = self.store.snapshot()
            self._erase_changed = False
            self._last_erase = Point(x, y)
            self._erase_at(Point(x, y))
        else:
            self._press_select(x, y)

    def pointer_moved(self, x: float, y: float) -> None:
        if self._drawing is not None:
            self._drawing.append(self.session.viewport.screen_to_document(x, y))
            self.stroke_preview.emit(list(self._drawing))
        elif self._erase_before is not None:
            current = Point(x, y)
            for center in sweep_positions(self._last_erase, current, self.eraser_size):
                self._erase_at(center)
            self._last_erase = current
        elif self._drag is not None:
            self._move_drag(x, y)

    def pointer_released(self, x: float, y: float) -> None:
        if self._drawing is not None:
            self._finish_stroke()
        elif self._erase_before is not None:
            self._finish_erase()
        elif self._drag is not None:
            self._finish_drag()

    # ------------------------------------------------------------------
    # Pencil
    # ------------------------------------------------------------------

    def _finish_stroke(self) -> None:
        points, self._drawing = self._drawing, None
        self.stroke_preview.emit([])

        if len(points) < 2:
            logger.debug("Stroke discarded: only %d point(s) sampled", len(points))
            return

        before = self.store.snapshot()
        if self.store.add_stroke(points, self.pencil_style, self.session.current_page):
            self.session.record_history(before)
            self.session.update_thumbnail_snapshot()

    # ------------------------------------------------------------------
    # Eraser
    # ------------------------------------------------------------------

    def _erase_at(self, screen_center: Point) -> None:
        footprint = EraserFootprint.from_screen(
            screen_center.x, screen_center.y, self.eraser_size, self.session.zoom
        )
        if apply_eraser(self.store, footprint, self.session.current_page):
            self._erase_changed = True
            if self.selected_stroke_id and not any(
                s.id == self.selected_stroke_id for s in self.store.strokes
            ):
                self._select()

    def _finish_erase(self) -> None:
        before, self._erase_before = self._erase_before, None
        self._last_erase = None

        if self._erase_changed:
            self.session.record_history(before)
        self.session.update_thumbnail_snapshot()

    def eraser_cursor_rect(self, x: float, y: float):
        """Top-left corner and size of the eraser cursor centered on the pointer."""
        half = self.eraser_size / 2
        return (x - half, y - half, self.eraser_size, self.eraser_size)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _place_text(self, x: float, y: float) -> None:
        viewport = self.session.viewport
        position = viewport.screen_to_document(x, y)

        before = self.store.snapshot()
        annotation_id = self.store.add_text_annotation(
            self.session.settings.placeholder_text,
            position.x,
            position.y,
            viewport.length_to_document(self.text_font_size),
            self.text_color,
            self.session.current_page,
            font_family=FontFamily.ARIAL,
        )
        if annotation_id is None:
            return

        self.session.record_history(before)
        self._select(text_id=annotation_id)
        self.set_tool(Tool.SELECT)

    def text_at_point(self, point: Point) -> Optional[TextAnnotation]:
        """Topmost text annotation whose box contains a document point."""
        for annotation in reversed(self.store.text_on_page(self.session.current_page)):
            font_key = resolve_font_key(annotation.font_family, annotation.bold, annotation.italic)
            width = measure_text(annotation.text, font_key, annotation.font_size)
            if (annotation.x <= point.x <= annotation.x + width
                    and annotation.y <= point.y <= annotation.y + annotation.font_size):
                return annotation
        return None

    def _press_select(self, x: float, y: float) -> None:
        viewport = self.session.viewport
        point = viewport.screen_to_document(x, y)

        annotation = self.text_at_point(point)
        if annotation is not None:
            self._drag = _TextDrag(
                annotation_id=annotation.id,
                start_screen=Point(x, y),
                start_position=Point(annotation.x, annotation.y),
                before=self.store.snapshot(),
            )
            return

        stroke = self.store.stroke_at_point(self.session.current_page, point, viewport.zoom)
        if stroke is not None:
            self._select(stroke_id=stroke.id)
            return

        self.clear_selection()

    def _move_drag(self, x: float, y: float) -> None:
        drag = self._drag
        screen_dx = x - drag.start_screen.x
        screen_dy = y - drag.start_screen.y

        # Threshold is in screen pixels
        threshold = self.session.settings.drag_threshold
        if abs(screen_dx) > threshold or abs(screen_dy) > threshold:
            drag.moved = True

        if drag.moved:
            viewport = self.session.viewport
            self.store.update_text_annotation(
                drag.annotation_id,
                x=drag.start_position.x + viewport.length_to_document(screen_dx),
                y=drag.start_position.y + viewport.length_to_document(screen_dy),
            )

    def _finish_drag(self) -> None:
        drag, self._drag = self._drag, None

        if drag.moved:
            self.session.record_history(drag.before)
            self.session.update_thumbnail_snapshot()
        else:
            self._select(text_id=drag.annotation_id)

    # ------------------------------------------------------------------
    # Selected annotation edits
    # ------------------------------------------------------------------

    def _edit_selected_text(self, **changes) -> bool:
        if self.selected_text_id is None:
            return False

        before = self.store.snapshot()
        if not self.store.update_text_annotation(self.selected_text_id, **changes):
            return False

        self.session.record_history(before)
        self.selection_changed.emit(self.selected_text())
        return True

    def set_selected_text(self, text: str) -> bool:
        return self._edit_selected_text(text=text)

    def set_selected_font_size(self, screen_size: float) -> bool:
        """Set the font size as shown on screen at the current zoom."""
        if not is_finite_number(screen_size) or not screen_size > 0:
            return False
        return self._edit_selected_text(
            font_size=self.session.viewport.length_to_document(screen_size)
        )

    def set_selected_color(self, color: str) -> bool:
        return self._edit_selected_text(color=color)

    def set_selected_font_family(self, font_family) -> bool:
        return self._edit_selected_text(font_family=font_family)

    def toggle_selected_style(self, attribute: str) -> bool:
        """Flip bold, italic or underline on the selected text."""
        if attribute not in ("bold", "italic", "underline"):
            raise ValueError(f"Not a toggleable style: {attribute}")
        annotation = self.selected_text()
        if annotation is None:
            return False
        return self._edit_selected_text(**{attribute: not getattr(annotation, attribute)})

    def delete_selected(self) -> bool:
        """Delete the selected text annotation or stroke."""
        before = self.store.snapshot()

        if self.selected_text_id is not None:
            removed = self.store.remove_text_annotation(self.selected_text_id)
        elif self.selected_stroke_id is not None:
            removed = self.store.remove_stroke(self.selected_stroke_id)
        else:
            return False

        if removed:
            self.session.record_history(before)
        self._select()
        self.session.update_thumbnail_snapshot()
        return removed

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def apply_color(self, target: ColorTarget, color: str) -> None:
        """Use a color for new text (and the selected text) or the pencil."""
        if target == ColorTarget.TEXT:
            self.text_color = color
            self.set_selected_color(color)
        else:
            self.pencil_style = StrokeStyle(
                color, self.pencil_style.stroke_width, self.pencil_style.opacity
            )

    def pick_color(self, image: QImage, x: int, y: int, target: ColorTarget) -> str:
        """
        Eyedropper: take the color of a rendered page pixel.

        Args:
            image: The rendered page as shown on the canvas
            x: Pixel column
            y: Pixel row
            target: What the picked color applies to

        Returns:
            The picked color as "#rrggbb"
        """
        color = QColor(image.pixel(int(x), int(y))).name()
        self.apply_color(target, color)
        return color

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        if self.session.undo():
            self._select()
            return True
        return False

    def redo(self) -> bool:
        if self.session.redo():
            self._select()
            return True
        return False
