"""
Mutable collection of pencil strokes and text annotations for one document.
"""
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from ...errors import InvalidInput, NotFound
from ..geometry.kernel import distance_point_to_segment
from ..geometry.models import Point
from .models import (
    TEXT_FIELDS,
    PencilStroke,
    StrokeStyle,
    TextAnnotation,
    coerce_font_family,
    new_annotation_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreState:
    """Immutable copy of the store, used for history and thumbnails."""

    strokes: Tuple[PencilStroke, ...] = ()
    text_annotations: Tuple[TextAnnotation, ...] = ()
    page_ids: Tuple[str, ...] = ()

    def strokes_on_page(self, page_number: int) -> List[PencilStroke]:
        return [s for s in self.strokes if s.page_number == page_number]

    def text_on_page(self, page_number: int) -> List[TextAnnotation]:
        return [a for a in self.text_annotations if a.page_number == page_number]


class AnnotationStore(QObject):
    """
    Owns every stroke and text annotation of the loaded document.

    Also keeps one stable id per page, so page identity survives
    reordering while the 1-based page number shifts. Every annotation's
    page number refers to an existing page; structural page edits go
    through the renumber_* hooks, which update all annotations in one
    step.
    """

    # Signals
    annotations_changed = pyqtSignal()  # Emitted after any annotation mutation
    pages_changed = pyqtSignal()  # Emitted after the page sequence changes

    def __init__(self, parent: QObject = None):
        super().__init__(parent)
        self._strokes: Dict[str, PencilStroke] = {}
        self._texts: Dict[str, TextAnnotation] = {}
        self._page_ids: List[str] = []

        self._batch_depth = 0
        self._pending_signals: set = set()

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self):
        """
        Group mutations so observers get one notification at the end.

        Batches nest; signals fire when the outermost batch exits.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                pending = self._pending_signals
                self._pending_signals = set()
                if "pages" in pending:
                    self.pages_changed.emit()
                if "annotations" in pending:
                    self.annotations_changed.emit()

    def _notify(self, *kinds: str) -> None:
        if self._batch_depth:
            self._pending_signals.update(kinds)
            return
        if "pages" in kinds:
            self.pages_changed.emit()
        if "annotations" in kinds:
            self.annotations_changed.emit()

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def load_pages(self, page_count: int) -> None:
        """
        Start a fresh document with `page_count` pages and no annotations.

        Args:
            page_count: Number of pages in the newly loaded document
        """
        self._strokes = {}
        self._texts = {}
        self._page_ids = [new_annotation_id() for _ in range(page_count)]
        self._notify("pages", "annotations")

    def clear(self) -> None:
        """Drop all annotations and pages."""
        self.load_pages(0)

    @property
    def page_count(self) -> int:
        return len(self._page_ids)

    @property
    def page_ids(self) -> Tuple[str, ...]:
        return tuple(self._page_ids)

    def _check_page(self, page_number: int) -> None:
        if not 1 <= page_number <= self.page_count:
            raise InvalidInput(
                f"Page {page_number} does not exist (document has {self.page_count})"
            )

    # ------------------------------------------------------------------
    # Pencil strokes
    # ------------------------------------------------------------------

    @property
    def strokes(self) -> Tuple[PencilStroke, ...]:
        return tuple(self._strokes.values())

    def strokes_on_page(self, page_number: int) -> List[PencilStroke]:
        return [s for s in self._strokes.values() if s.page_number == page_number]

    def get_stroke(self, stroke_id: str) -> PencilStroke:
        try:
            return self._strokes[stroke_id]
        except KeyError:
            raise NotFound(stroke_id) from None

    def add_stroke(self, points: Sequence[Point], style: StrokeStyle,
                   page_number: int) -> Optional[str]:
        """
        Store a finished freehand stroke.

        Args:
            points: Raw points in document units, in draw order
            style: Color, width and opacity
            page_number: 1-based page the stroke was drawn on

        Returns:
            The new stroke id, or None if the input was rejected
        """
        try:
            self._check_page(page_number)
            stroke = PencilStroke.create(points, style, page_number)
        except (InvalidInput, TypeError) as e:
            logger.warning("Stroke rejected: %s", e)
            return None

        self._strokes[stroke.id] = stroke
        self._notify("annotations")
        return stroke.id

    def remove_stroke(self, stroke_id: str) -> bool:
        """
        Remove a stroke. Absent ids are ignored.

        Returns:
            True if a stroke was removed
        """
        if self._strokes.pop(stroke_id, None) is None:
            logger.debug("remove_stroke: %s not found", stroke_id)
            return False

        self._notify("annotations")
        return True

    def replace_strokes(
        self, replacements: Mapping[str, Iterable[Sequence[Point]]]
    ) -> Dict[str, List[str]]:
        """
        Swap strokes for their surviving fragments in one step.

        Each listed stroke is removed and every fragment with at least 2
        points is added as a new stroke with the original's style and
        page. Shorter fragments are dropped.

        Args:
            replacements: Stroke id -> fragments (an empty list just deletes)

        Returns:
            Mapping of replaced stroke id -> ids of the new strokes
        """
        replaced: Dict[str, List[str]] = {}
        updated = {
            sid: stroke for sid, stroke in self._strokes.items()
            if sid not in replacements
        }

        for sid, fragments in replacements.items():
            original = self._strokes.get(sid)
            if original is None:
                logger.debug("replace_strokes: %s not found", sid)
                continue

            new_ids = []
            for fragment in fragments:
                if len(fragment) < 2:
                    continue
                stroke = original.derive(fragment)
                updated[stroke.id] = stroke
                new_ids.append(stroke.id)
            replaced[sid] = new_ids

        if not replaced:
            return replaced

        self._strokes = updated
        self._notify("annotations")
        return replaced

    def stroke_at_point(self, page_number: int, point: Point,
                        zoom: float = 1.0) -> Optional[PencilStroke]:
        """
        Find the topmost stroke passing near a point.

        A stroke is hit within its own width plus 2 screen pixels, and
        never less than 5 screen pixels.

        Args:
            page_number: 1-based page to search
            point: Position in document units
            zoom: Current zoom level

        Returns:
            The most recently drawn matching stroke, or None
        """
        for stroke in reversed(self.strokes_on_page(page_number)):
            tolerance = max(stroke.stroke_width + 2.0, 5.0) / zoom
            pts = stroke.points
            for i in range(len(pts) - 1):
                if distance_point_to_segment(point, pts[i], pts[i + 1]) <= tolerance:
                    return stroke
        return None

    # ------------------------------------------------------------------
    # Text annotations
    # ------------------------------------------------------------------

    @property
    def text_annotations(self) -> Tuple[TextAnnotation, ...]:
        return tuple(self._texts.values())

    def text_on_page(self, page_number: int) -> List[TextAnnotation]:
        return [a for a in self._texts.values() if a.page_number == page_number]

    def get_text_annotation(self, annotation_id: str) -> TextAnnotation:
        try:
            return self._texts[annotation_id]
        except KeyError:
            raise NotFound(annotation_id) from None

    def add_text_annotation(self, text: str, x: float, y: float, font_size: float,
                            color: str, page_number: int, **style) -> Optional[str]:
        """
        Place a text annotation.

        `style` accepts font_family, bold, italic and underline.

        Returns:
            The new annotation id, or None if the input was rejected
        """
        try:
            self._check_page(page_number)
            annotation = TextAnnotation.create(
                text, x, y, font_size, color, page_number, **style
            )
        except (InvalidInput, TypeError) as e:
            logger.warning("Text annotation rejected: %s", e)
            return None

        self._texts[annotation.id] = annotation
        self._notify("annotations")
        return annotation.id

    def update_text_annotation(self, annotation_id: str, **changes) -> bool:
        """
        Change some fields of a text annotation.

        Absent ids are ignored. Invalid values reject the whole update.

        Returns:
            True if the annotation was updated
        """
        current = self._texts.get(annotation_id)
        if current is None:
            logger.debug("update_text_annotation: %s not found", annotation_id)
            return False

        try:
            unknown = set(changes) - TEXT_FIELDS
            if unknown:
                raise InvalidInput(f"Unknown text fields: {sorted(unknown)}")
            if "font_family" in changes:
                changes["font_family"] = coerce_font_family(changes["font_family"])

            updated = dataclasses.replace(current, **changes)
            updated.validate()
            self._check_page(updated.page_number)
        except (InvalidInput, TypeError) as e:
            logger.warning("Text update rejected: %s", e)
            return False

        self._texts[annotation_id] = updated
        self._notify("annotations")
        return True

    def remove_text_annotation(self, annotation_id: str) -> bool:
        if self._texts.pop(annotation_id, None) is None:
            logger.debug("remove_text_annotation: %s not found", annotation_id)
            return False

        self._notify("annotations")
        return True

    # ------------------------------------------------------------------
    # Page renumbering hooks
    # ------------------------------------------------------------------

    def _remap_pages(self, remap: Callable[[int], Optional[int]],
                     page_ids: List[str]) -> int:
        """
        Apply a page-number mapping to every annotation and swap in the
        new page id sequence. Annotations mapped to None are dropped.

        Returns:
            Number of annotations dropped
        """
        dropped = 0
        strokes: Dict[str, PencilStroke] = {}
        texts: Dict[str, TextAnnotation] = {}

        for source, target in ((self._strokes, strokes), (self._texts, texts)):
            for aid, annotation in source.items():
                new_page = remap(annotation.page_number)
                if new_page is None:
                    dropped += 1
                    continue
                if new_page != annotation.page_number:
                    annotation = dataclasses.replace(annotation, page_number=new_page)
                target[aid] = annotation

        self._strokes, self._texts, self._page_ids = strokes, texts, page_ids
        self._notify("pages", "annotations")
        return dropped

    def renumber_on_page_insert(self, after_page: int) -> str:
        """
        Account for a page inserted after `after_page` (0 = at the front).

        Returns:
            The id given to the new page
        """
        if not 0 <= after_page <= self.page_count:
            raise InvalidInput(f"Cannot insert after page {after_page}")

        page_id = new_annotation_id()
        page_ids = list(self._page_ids)
        page_ids.insert(after_page, page_id)

        self._remap_pages(lambda p: p + 1 if p > after_page else p, page_ids)
        return page_id

    def renumber_on_page_remove(self, page_number: int) -> int:
        """
        Account for a removed page: its annotations are deleted and
        later pages move up by one.

        Args:
            page_number: 1-based number of the removed page

        Returns:
            Number of annotations deleted with the page
        """
        self._check_page(page_number)

        page_ids = list(self._page_ids)
        del page_ids[page_number - 1]

        def remap(p: int) -> Optional[int]:
            if p == page_number:
                return None
            return p - 1 if p > page_number else p

        dropped = self._remap_pages(remap, page_ids)
        logger.info("Page %d removed with %d annotation(s)", page_number, dropped)
        return dropped

    def renumber_on_page_move(self, from_index: int, to_index: int) -> None:
        """
        Account for a page moved from one position to another.

        Applies the same permutation to annotation page numbers as was
        applied to the pages.

        Args:
            from_index: 0-based original position
            to_index: 0-based destination position
        """
        count = self.page_count
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise InvalidInput(f"Cannot move page {from_index} to {to_index} of {count}")
        if from_index == to_index:
            return

        order = list(range(count))
        order.insert(to_index, order.pop(from_index))
        new_position = {old: new for new, old in enumerate(order)}
        page_ids = [self._page_ids[old] for old in order]

        self._remap_pages(lambda p: new_position[p - 1] + 1, page_ids)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreState:
        return StoreState(
            strokes=self.strokes,
            text_annotations=self.text_annotations,
            page_ids=self.page_ids,
        )

    def restore(self, state: StoreState) -> None:
        """
        Replace all annotations with a previously taken snapshot.

        Raises:
            InvalidInput: the snapshot was taken for a different page layout
        """
        if state.page_ids != self.page_ids:
            raise InvalidInput("Snapshot does not match the current pages")

        self._strokes = {s.id: s for s in state.strokes}
        self._texts = {a.id: a for a in state.text_annotations}
        self._notify("annotations")

    def annotation_count(self) -> int:
        return len(self._strokes) + len(self._texts)
