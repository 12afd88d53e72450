"""
Controllers tying the annotation core to the interaction layer.
"""
from .session import EditorSession
from .annotation_controller import AnnotationController, ColorTarget, Tool
from .render_controller import RenderController

__all__ = [
    'EditorSession',
    'AnnotationController',
    'ColorTarget',
    'Tool',
    'RenderController',
]
