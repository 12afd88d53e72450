"""
Error types raised by the annotation engine.
"""


class PageScribeError(Exception):
    """Base class for all editor errors."""


class InvalidInput(PageScribeError):
    """Degenerate geometry or an out-of-range field (rejected, nothing created)."""


class NotFound(PageScribeError):
    """An operation referenced an annotation id that is not in the store."""

    def __init__(self, annotation_id: str):
        super().__init__(f"No annotation with id {annotation_id!r}")
        self.annotation_id = annotation_id


class StaleRender(PageScribeError):
    """A rasterization finished after its generation was superseded."""

    def __init__(self, target: str, generation: int, current: int):
        super().__init__(
            f"Render {target!r} generation {generation} superseded by {current}"
        )
        self.target = target
        self.generation = generation
        self.current = current


class DocumentNotLoaded(PageScribeError):
    """An annotation, page or export operation ran before a PDF was loaded."""

    def __init__(self, operation: str = "operation"):
        super().__init__(f"Cannot {operation}: no PDF document is loaded")
        self.operation = operation
