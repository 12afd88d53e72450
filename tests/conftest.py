import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz  # PyMuPDF
import pytest
from PyQt5.QtCore import QCoreApplication

from pagescribe.controllers import AnnotationController, EditorSession
from pagescribe.core.annotations import AnnotationStore, StrokeStyle
from pagescribe.core.geometry import Point

PAGE_WIDTH = 200
PAGE_HEIGHT = 300


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Qt needs an application object for signals and timers."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def make_pdf(page_count: int = 3) -> bytes:
    doc = fitz.open()
    for i in range(page_count):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        page.insert_text((20, 40), f"Page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def page_texts(pdf: bytes):
    doc = fitz.open(stream=pdf, filetype="pdf")
    texts = [page.get_text().strip() for page in doc]
    doc.close()
    return texts


def pts(*coords):
    return [Point(x, y) for x, y in coords]


@pytest.fixture
def pdf_bytes():
    return make_pdf(3)


@pytest.fixture
def style():
    return StrokeStyle("#ff0000", 2.5, 0.8)


@pytest.fixture
def store():
    s = AnnotationStore()
    s.load_pages(3)
    return s


@pytest.fixture
def session(pdf_bytes):
    s = EditorSession()
    s.load(pdf_bytes)
    s.set_zoom(1.0)
    yield s
    s.reset()


@pytest.fixture
def controller(session):
    return AnnotationController(session)
