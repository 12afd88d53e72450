"""
Controller that schedules page and thumbnail rasterization.
"""
import logging
from typing import Dict, Optional, Set

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from ..core.render import RenderGenerations, RenderWorker
from ..errors import StaleRender
from .session import EditorSession

logger = logging.getLogger(__name__)

MAIN_TARGET = "main"
THUMB_TARGET = "thumb"


def target_key(kind: str, page_number: int) -> str:
    return f"{kind}-{page_number}"


class RenderController(QObject):
    """
    Runs rasterization on worker threads and drops superseded results.

    A main-canvas request for a page that is already rendering is
    retried after a short delay. A thumbnail request for a page that is
    already rendering is not started; the page is marked pending and
    rendered again once the running thumbnail finishes. A thumbnail whose
    result turns out stale is also rendered again.
    """

    # Signals
    page_ready = pyqtSignal(int, object)  # page_number, QImage
    thumbnail_ready = pyqtSignal(int, object)  # page_number, QImage
    render_failed = pyqtSignal(str, str)  # target, error message

    def __init__(self, session: EditorSession, parent: QObject = None):
        super().__init__(parent)
        self.session = session
        self.generations = RenderGenerations()
        self._workers: Set[RenderWorker] = set()
        self._pending_thumbnails: Dict[int, Optional[float]] = {}  # page -> max_width

        session.document_changed.connect(self.generations.invalidate_all)

    def request_page(self, page_number: Optional[int] = None,
                     zoom: Optional[float] = None) -> int:
        """
        Render a page for the main canvas.

        Args:
            page_number: 1-based page, defaults to the current page
            zoom: Scale factor, defaults to the session zoom

        Returns:
            Generation number of this request
        """
        self.session.require_document("render a page")
        if page_number is None:
            page_number = self.session.current_page
        if zoom is None:
            zoom = self.session.zoom

        target = target_key(MAIN_TARGET, page_number)
        generation = self.generations.advance(target)
        self._start_when_idle(target, generation, page_number, zoom)
        return generation

    def request_thumbnail(self, page_number: int,
                          max_width: Optional[float] = None) -> Optional[int]:
        """
        Render a sidebar thumbnail.

        Returns:
            Generation number, or None if one is already rendering (it is
            then re-issued when the running one finishes)
        """
        document = self.session.require_document("render a thumbnail")
        target = target_key(THUMB_TARGET, page_number)

        if self.generations.is_in_flight(target):
            logger.debug("Thumbnail %s already rendering, marked pending", target)
            self._pending_thumbnails[page_number] = max_width
            return None

        zoom = document.thumbnail_zoom(
            page_number, max_width or self.session.settings.thumbnail_max_width
        )
        generation = self.generations.advance(target)
        self._start(target, generation, page_number, zoom)
        return generation

    def _start_when_idle(self, target: str, generation: int,
                         page_number: int, zoom: float) -> None:
        if not self.generations.is_current(target, generation):
            logger.debug("Render %s #%d superseded before start", target, generation)
            return
        if self.generations.is_in_flight(target):
            QTimer.singleShot(
                self.session.settings.render_retry_delay_ms,
                lambda: self._start_when_idle(target, generation, page_number, zoom),
            )
            return
        self._start(target, generation, page_number, zoom)

    def _start(self, target: str, generation: int, page_number: int, zoom: float) -> None:
        worker = RenderWorker(self.session.document, target, generation, page_number, zoom, self)
        worker.rendered.connect(self._on_rendered)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(lambda: self._workers.discard(worker))

        self._workers.add(worker)
        self.generations.mark_started(target)
        worker.start()

    def _on_rendered(self, target: str, generation: int, image) -> None:
        self.generations.mark_finished(target)
        kind, page = target.split("-", 1)
        try:
            self.generations.check(target, generation)
        except StaleRender as e:
            logger.debug("Discarded render: %s", e)
            if kind == THUMB_TARGET:
                self._rerender_thumbnail(int(page), stale=True)
            return

        if kind == MAIN_TARGET:
            self.page_ready.emit(int(page), image)
        else:
            self.thumbnail_ready.emit(int(page), image)
            self._rerender_thumbnail(int(page))

    def _on_failed(self, target: str, generation: int, message: str) -> None:
        self.generations.mark_finished(target)
        current = self.generations.is_current(target, generation)
        if current:
            self.render_failed.emit(target, message)

        kind, page = target.split("-", 1)
        if kind == THUMB_TARGET:
            self._rerender_thumbnail(int(page), stale=not current)

    def _rerender_thumbnail(self, page_number: int, stale: bool = False) -> None:
        """Start a thumbnail that was requested while another was running."""
        if page_number not in self._pending_thumbnails and not stale:
            return
        max_width = self._pending_thumbnails.pop(page_number, None)

        # The document may have been closed or shortened meanwhile
        if not 1 <= page_number <= self.session.page_count:
            return
        self.request_thumbnail(page_number, max_width)
