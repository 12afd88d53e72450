"""
Undo/Redo history for annotation edits.
"""
from typing import List, Optional

from .store import StoreState


class UndoRedoStack:
    """Keeps immutable store states for undo and redo."""

    def __init__(self, max_size: int = 50):
        """
        Args:
            max_size: Oldest snapshots beyond this many undo steps are discarded
        """
        self.undo_stack: List[StoreState] = []
        self.redo_stack: List[StoreState] = []
        self.max_size = max_size

    def push_state(self, state: StoreState) -> None:
        """
        Record the state that existed before a new edit.

        Args:
            state: Store snapshot taken before the edit
        """
        self.undo_stack.append(state)

        # A new edit invalidates everything that was undone
        self.redo_stack.clear()

        if len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def undo(self, current_state: StoreState) -> Optional[StoreState]:
        """
        Step back one edit.

        Args:
            current_state: Store snapshot before undoing

        Returns:
            The state to restore, or None if there is nothing to undo
        """
        if not self.can_undo():
            return None

        self.redo_stack.append(current_state)
        return self.undo_stack.pop()

    def redo(self, current_state: StoreState) -> Optional[StoreState]:
        """
        Re-apply one undone edit.

        Args:
            current_state: Store snapshot before redoing

        Returns:
            The state to restore, or None if there is nothing to redo
        """
        if not self.can_redo():
            return None

        self.undo_stack.append(current_state)
        return self.redo_stack.pop()

    def clear(self) -> None:
        """Forget every snapshot, e.g. after the page layout changed."""
        self.undo_stack.clear()
        self.redo_stack.clear()
