"""
PDF document loading, rendering and page structure edits.
"""
import logging
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF
from PyQt5.QtCore import QBuffer, QByteArray, QIODevice
from PyQt5.QtGui import QImage

from ...config import A4_SIZE
from ...errors import InvalidInput

logger = logging.getLogger(__name__)

# Resolution used when a page has to be rebuilt from a bitmap
FLIP_RENDER_ZOOM = 2.0


class PdfDocument:
    """Wraps a PyMuPDF document; page numbers here are 1-based."""

    def __init__(self, doc: fitz.Document, name: Optional[str] = None):
        self.doc = doc
        self.name = name

    @classmethod
    def open(cls, source: Union[str, bytes]) -> "PdfDocument":
        """
        Open a PDF from a file path or raw bytes.

        Args:
            source: Path to the PDF file, or its bytes

        Returns:
            PdfDocument instance
        """
        try:
            if isinstance(source, (bytes, bytearray)):
                doc = fitz.open(stream=bytes(source), filetype="pdf")
                name = None
            else:
                doc = fitz.open(source)
                name = str(source)
        except RuntimeError as e:
            # PyMuPDF's FileDataError derives from RuntimeError
            raise InvalidInput(f"Cannot open PDF: {e}") from e

        if not doc.is_pdf:
            doc.close()
            raise InvalidInput(f"Not a PDF document: {name or '<bytes>'}")

        logger.info("Opened %s (%d pages)", name or "<bytes>", doc.page_count)
        return cls(doc, name)

    def close(self) -> None:
        if self.doc is not None:
            self.doc.close()
            self.doc = None

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    def _page(self, page_number: int) -> fitz.Page:
        if not 1 <= page_number <= self.page_count:
            raise InvalidInput(
                f"Page {page_number} does not exist (document has {self.page_count})"
            )
        return self.doc.load_page(page_number - 1)

    def get_page_size(self, page_number: int) -> Tuple[float, float]:
        """
        Get the size of a page in points.

        Args:
            page_number: 1-based page number

        Returns:
            Tuple of (width, height) in points
        """
        rect = self._page(page_number).rect
        return rect.width, rect.height

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def rasterize(self, page_number: int, zoom: float) -> QImage:
        """
        Render a page to an image.

        Args:
            page_number: 1-based page number
            zoom: Scale factor (1.0 = one pixel per point)

        Returns:
            RGB888 QImage owning its pixel data
        """
        page = self._page(page_number)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        img = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)

        # pix.samples is released with the pixmap
        return img.copy()

    def thumbnail_zoom(self, page_number: int, max_width: float) -> float:
        """Zoom factor that makes a page exactly `max_width` pixels wide."""
        width, _ = self.get_page_size(page_number)
        return max_width / width

    # ------------------------------------------------------------------
    # Page structure
    # ------------------------------------------------------------------

    def add_blank_page(self, default_size: Tuple[float, float] = A4_SIZE) -> int:
        """
        Append an empty page sized like the first page.

        Args:
            default_size: Size to use when the document has no pages

        Returns:
            1-based number of the new page
        """
        if self.page_count > 0:
            width, height = self.get_page_size(1)
        else:
            width, height = default_size

        self.doc.new_page(-1, width=width, height=height)
        return self.page_count

    def remove_page(self, page_number: int) -> int:
        """
        Delete a page.

        Returns:
            Remaining page count
        """
        self._page(page_number)
        self.doc.delete_page(page_number - 1)
        return self.page_count

    def move_page(self, from_index: int, to_index: int) -> None:
        """
        Move a page to a new position.

        Args:
            from_index: 0-based current position
            to_index: 0-based position after the move
        """
        count = self.page_count
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise InvalidInput(f"Cannot move page {from_index} to {to_index} of {count}")
        if from_index == to_index:
            return

        # fitz.move_page inserts before `to`; -1 appends
        if to_index == count - 1:
            self.doc.move_page(from_index, -1)
        elif to_index > from_index:
            self.doc.move_page(from_index, to_index + 1)
        else:
            self.doc.move_page(from_index, to_index)

    def rotate_page(self, page_number: int, clockwise: bool = True) -> int:
        """
        Rotate a page by 90 degrees.

        Returns:
            The page's new rotation (0, 90, 180 or 270)
        """
        page = self._page(page_number)
        delta = 90 if clockwise else -90
        rotation = (page.rotation + delta) % 360
        page.set_rotation(rotation)
        return rotation

    def flip_page(self, page_number: int, horizontal: bool = True) -> None:
        """
        Mirror a page by rebuilding it from a mirrored bitmap.

        The page content becomes an image; text is no longer selectable.

        Args:
            page_number: 1-based page number
            horizontal: Mirror left-right if True, top-bottom otherwise
        """
        rect = self._page(page_number).rect
        image = self.rasterize(page_number, FLIP_RENDER_ZOOM)
        mirrored = image.mirrored(horizontal, not horizontal)

        data = QByteArray()
        buffer = QBuffer(data)
        buffer.open(QIODevice.WriteOnly)
        mirrored.save(buffer, "PNG")
        buffer.close()

        index = page_number - 1
        self.doc.delete_page(index)
        new_page = self.doc.new_page(index, width=rect.width, height=rect.height)
        new_page.insert_image(new_page.rect, stream=bytes(data))

    def to_bytes(self) -> bytes:
        """Serialize the current document."""
        return self.doc.tobytes(garbage=4, deflate=True)
