"""
PageScribe: freehand and text annotation engine for PDF documents.
"""
from .config import EditorSettings, configure_logging
from .errors import (
    DocumentNotLoaded,
    InvalidInput,
    NotFound,
    PageScribeError,
    StaleRender,
)

__version__ = "0.1.0"

__all__ = [
    "EditorSettings",
    "configure_logging",
    "PageScribeError",
    "InvalidInput",
    "NotFound",
    "StaleRender",
    "DocumentNotLoaded",
]
