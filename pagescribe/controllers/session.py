"""
Editor session: the loaded document, its annotations and view state.
"""
import logging
from typing import List, Optional, Union

from PyQt5.QtCore import QObject, pyqtSignal

from ..config import EditorSettings, configure_logging
from ..core.annotations import AnnotationStore, StoreState, UndoRedoStack
from ..core.annotations.models import PencilStroke, TextAnnotation
from ..core.document import PDFExporter, PdfDocument
from ..core.geometry import Viewport
from ..errors import DocumentNotLoaded, InvalidInput

logger = logging.getLogger(__name__)


class EditorSession(QObject):
    """
    Everything the editor knows about the open PDF.

    Page edits go to the PDF first and then to the annotation store's
    renumber hooks inside one store batch, so observers never see
    annotations pointing at pages that moved or no longer exist.
    """

    # Signals
    document_changed = pyqtSignal()  # Emitted on load and reset
    page_changed = pyqtSignal(int)  # Emitted when the current page changes
    zoom_changed = pyqtSignal(float)  # Emitted when zoom level changes
    thumbnail_snapshot_changed = pyqtSignal()  # Emitted at thumbnail checkpoints

    def __init__(self, settings: Optional[EditorSettings] = None, parent: QObject = None):
        super().__init__(parent)
        self.settings = settings or EditorSettings()
        configure_logging(self.settings.log_level)
        self.store = AnnotationStore(self)
        self.history = UndoRedoStack(self.settings.history_size)
        self.exporter = PDFExporter()

        self.document: Optional[PdfDocument] = None
        self.current_page: int = 1
        self.zoom: float = self.settings.default_zoom
        self._thumbnail_snapshot = StoreState()

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self.document is not None

    def require_document(self, operation: str = "edit the document") -> PdfDocument:
        """
        Raises:
            DocumentNotLoaded: no PDF is open
        """
        if self.document is None:
            raise DocumentNotLoaded(operation)
        return self.document

    def load(self, source: Union[str, bytes]) -> int:
        """
        Open a PDF and start with an empty annotation set.

        Args:
            source: Path to the PDF file, or its bytes

        Returns:
            Number of pages
        """
        document = PdfDocument.open(source)

        if self.document is not None:
            self.document.close()

        self.document = document
        self.store.load_pages(document.page_count)
        self.history.clear()
        self.current_page = 1
        self.update_thumbnail_snapshot()

        self.document_changed.emit()
        self.page_changed.emit(self.current_page)
        return document.page_count

    def reset(self) -> None:
        """Close the document and drop all annotations."""
        if self.document is not None:
            self.document.close()
        self.document = None
        self.store.clear()
        self.history.clear()
        self.current_page = 1
        self.zoom = self.settings.default_zoom
        self._thumbnail_snapshot = StoreState()
        self.document_changed.emit()

    @property
    def page_count(self) -> int:
        return self.document.page_count if self.document else 0

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.zoom)

    # ------------------------------------------------------------------
    # Navigation and zoom
    # ------------------------------------------------------------------

    def go_to_page(self, page_number: int) -> bool:
        """
        Jump to a page. Out-of-range numbers are ignored.

        Returns:
            True if the current page changed
        """
        if not 1 <= page_number <= self.page_count or page_number == self.current_page:
            return False
        self.current_page = page_number
        self.page_changed.emit(page_number)
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    def set_zoom(self, zoom: float) -> float:
        zoom = self.settings.clamp_zoom(zoom)
        if zoom != self.zoom:
            self.zoom = zoom
            self.zoom_changed.emit(zoom)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.settings.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.settings.zoom_step)

    # ------------------------------------------------------------------
    # Page structure
    # ------------------------------------------------------------------

    def _page_or_current(self, page_number: Optional[int]) -> int:
        return self.current_page if page_number is None else page_number

    def _set_current_page(self, page_number: int) -> None:
        page_number = max(1, min(page_number, self.page_count))
        if page_number != self.current_page:
            self.current_page = page_number
            self.page_changed.emit(page_number)

    def _after_structure_change(self) -> None:
        # Annotation history holds page numbers of the old layout
        self.history.clear()
        self.update_thumbnail_snapshot()

    def add_page(self) -> int:
        """
        Append a blank page and make it current.

        Returns:
            1-based number of the new page
        """
        document = self.require_document("add a page")
        before = document.page_count

        with self.store.batch():
            new_page = document.add_blank_page(self.settings.blank_page_size)
            self.store.renumber_on_page_insert(before)

        self._after_structure_change()
        self._set_current_page(new_page)
        return new_page

    def remove_page(self, page_number: Optional[int] = None) -> int:
        """
        Delete a page together with its annotations.

        Args:
            page_number: 1-based page, defaults to the current page

        Returns:
            Remaining page count

        Raises:
            InvalidInput: the document only has one page
        """
        document = self.require_document("remove a page")
        page_number = self._page_or_current(page_number)

        if document.page_count <= 1:
            raise InvalidInput("Cannot remove the only page of a document")

        with self.store.batch():
            remaining = document.remove_page(page_number)
            self.store.renumber_on_page_remove(page_number)

        self._after_structure_change()
        self._set_current_page(self.current_page)
        return remaining

    def move_page(self, from_index: int, to_index: int) -> None:
        """
        Reorder pages; the current page follows its content.

        Args:
            from_index: 0-based position of the page to move
            to_index: 0-based destination
        """
        document = self.require_document("reorder pages")

        current_index = self.current_page - 1
        new_current = self.current_page
        if current_index == from_index:
            new_current = to_index + 1
        elif from_index < current_index <= to_index:
            new_current = self.current_page - 1
        elif to_index <= current_index < from_index:
            new_current = self.current_page + 1

        with self.store.batch():
            document.move_page(from_index, to_index)
            self.store.renumber_on_page_move(from_index, to_index)

        self._after_structure_change()
        self._set_current_page(new_current)

    def rotate_page(self, page_number: Optional[int] = None, clockwise: bool = True) -> int:
        document = self.require_document("rotate a page")
        rotation = document.rotate_page(self._page_or_current(page_number), clockwise)
        self.update_thumbnail_snapshot()
        return rotation

    def flip_page(self, page_number: Optional[int] = None, horizontal: bool = True) -> None:
        document = self.require_document("flip a page")
        document.flip_page(self._page_or_current(page_number), horizontal)
        self.update_thumbnail_snapshot()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def record_history(self, state: Optional[StoreState] = None) -> None:
        """Push the state before an edit (defaults to the current state)."""
        self.history.push_state(self.store.snapshot() if state is None else state)

    def undo(self) -> bool:
        previous = self.history.undo(self.store.snapshot())
        if previous is None:
            return False
        self.store.restore(previous)
        self.update_thumbnail_snapshot()
        return True

    def redo(self) -> bool:
        following = self.history.redo(self.store.snapshot())
        if following is None:
            return False
        self.store.restore(following)
        self.update_thumbnail_snapshot()
        return True

    # ------------------------------------------------------------------
    # Thumbnail snapshot
    # ------------------------------------------------------------------

    def update_thumbnail_snapshot(self) -> None:
        """Copy the live annotations for thumbnails (explicit checkpoint)."""
        self._thumbnail_snapshot = self.store.snapshot()
        self.thumbnail_snapshot_changed.emit()

    @property
    def thumbnail_snapshot(self) -> StoreState:
        return self._thumbnail_snapshot

    def thumbnail_strokes(self, page_number: int) -> List[PencilStroke]:
        return self._thumbnail_snapshot.strokes_on_page(page_number)

    def thumbnail_text(self, page_number: int) -> List[TextAnnotation]:
        return self._thumbnail_snapshot.text_on_page(page_number)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> bytes:
        """
        Produce the annotated PDF.

        Returns:
            PDF bytes with every annotation drawn into its page
        """
        document = self.require_document("export")
        data = self.exporter.export(
            document.to_bytes(),
            self.store.text_annotations,
            self.store.strokes,
        )
        logger.info(
            "Exported %d page(s) with %d annotation(s)",
            document.page_count, self.store.annotation_count(),
        )
        return data
