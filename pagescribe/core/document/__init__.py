"""
PDF document handling and manipulation.
"""
from .pdf_document import PdfDocument
from .pdf_exporter import (
    ExportStroke,
    ExportText,
    PDFExporter,
    plan_stroke,
    plan_text,
    resolve_font_key,
)

__all__ = [
    'PdfDocument',
    'PDFExporter',
    'ExportStroke',
    'ExportText',
    'plan_stroke',
    'plan_text',
    'resolve_font_key',
]
