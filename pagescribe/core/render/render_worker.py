"""
Background worker for page rasterization.
"""
import logging

from PyQt5.QtCore import QThread, pyqtSignal

from ..document.pdf_document import PdfDocument

logger = logging.getLogger(__name__)


class RenderWorker(QThread):
    """Worker thread that rasterizes one page without freezing the UI."""

    # Signals
    rendered = pyqtSignal(str, int, object)  # target, generation, QImage
    failed = pyqtSignal(str, int, str)  # target, generation, error message

    def __init__(self, document: PdfDocument, target: str, generation: int,
                 page_number: int, zoom: float, parent=None):
        super().__init__(parent)
        self.document = document
        self.target = target
        self.generation = generation
        self.page_number = page_number
        self.zoom = zoom

    def run(self):
        """Execute the rasterization in the background thread."""
        try:
            image = self.document.rasterize(self.page_number, self.zoom)
        except Exception as e:
            logger.exception("Rendering %s failed", self.target)
            self.failed.emit(self.target, self.generation, str(e))
            return

        self.rendered.emit(self.target, self.generation, image)
