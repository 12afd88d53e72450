"""
Annotation system for PDF documents.
"""
from .models import FontFamily, PencilStroke, StrokeStyle, TextAnnotation
from .store import AnnotationStore, StoreState
from .eraser import EraseResult, apply_eraser, erase_stroke, sweep_positions
from .undo_redo import UndoRedoStack

__all__ = [
    'FontFamily',
    'PencilStroke',
    'StrokeStyle',
    'TextAnnotation',
    'AnnotationStore',
    'StoreState',
    'EraseResult',
    'apply_eraser',
    'erase_stroke',
    'sweep_positions',
    'UndoRedoStack',
]
