from __future__ import annotations

"""Undo/redo snapshot management for LayoutContext.

This service is UI-agnostic and performs pure in-memory history tracking.
Layouts are immutable values, so a snapshot is just the layout tuple plus
the id held in the edit-state slot; no serialization is needed.

Design principles
-----------------
- No UI imports and no I/O.
- Snapshots are immutable once stored.
- Redo stack is cleared on every new snapshot push (standard undo/redo behavior).
- Memory usage controlled by a max_history policy (trim oldest).
- Pushing a state identical to the top of the undo stack is a no-op, so
  callers may push a baseline before every mutation.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from layout_builder.core.context import LayoutContext
from layout_builder.core.edit_state import EditStateCoordinator
from layout_builder.core.models import Layout

logger = logging.getLogger(__name__)

__all__ = ["UndoService"]


@dataclass(frozen=True)
class _Snapshot:
    """Immutable snapshot of a LayoutContext.

    Attributes
    ----------
    layout :
        The layout tuple at snapshot time.
    editing_id :
        Id of the node in edit mode, or None.
    """

    layout: Layout
    editing_id: Optional[str]


class UndoService:
    """Manage undo/redo stacks for :class:`LayoutContext`.

    Parameters
    ----------
    max_history : int, default=50
        Maximum number of undo snapshots to keep. Oldest entries are discarded
        when the capacity is exceeded. Values below 1 are coerced to 1.

    Notes
    -----
    Callers push a snapshot BEFORE a mutation (baseline) and AFTER it (post).
    Undo restores the snapshot below the top of the stack and moves the top
    onto the redo stack.

    Examples
    --------
    >>> ctx = LayoutContext.from_raw(rows)
    >>> svc = UndoService(max_history=10)
    >>> svc.push_snapshot(ctx)
    >>> # mutate ctx through LayoutEditingService, then
    >>> svc.push_snapshot(ctx)
    >>> svc.undo(ctx)
    True
    """

    def __init__(self, max_history: int = 50) -> None:
        self._max_history: int = max(1, int(max_history))
        self._undo_stack: List[_Snapshot] = []
        self._redo_stack: List[_Snapshot] = []

    # --------------------------------------------------------------------- API

    def push_snapshot(self, context: LayoutContext) -> None:
        """Capture the current context state onto the undo stack.

        The redo stack is cleared; the oldest snapshot is dropped when the
        stack exceeds ``max_history``.
        """
        snap = _Snapshot(layout=context.layout, editing_id=context.edit_state.editing_id)
        if self._undo_stack and self._undo_stack[-1] == snap:
            return
        self._undo_stack.append(snap)
        # New user action invalidates redo history
        self._redo_stack.clear()
        self._trim(self._undo_stack)

    def undo(self, context: LayoutContext) -> bool:
        """Restore the previous state into the provided context.

        Given undo_stack = [..., baseline, post] and current context == post,
        pop ``post`` onto the redo stack and restore ``baseline``.
        """
        if len(self._undo_stack) < 2:
            return False
        post_snap = self._undo_stack.pop()
        self._restore(context, self._undo_stack[-1])
        self._redo_stack.append(post_snap)
        self._trim(self._redo_stack)
        logger.debug("Undo: %d undo / %d redo snapshots", len(self._undo_stack), len(self._redo_stack))
        return True

    def redo(self, context: LayoutContext) -> bool:
        """Re-apply the most recently undone state."""
        if not self._redo_stack:
            return False
        post_snap = self._redo_stack.pop()
        self._restore(context, post_snap)
        self._undo_stack.append(post_snap)
        self._trim(self._undo_stack)
        logger.debug("Redo: %d undo / %d redo snapshots", len(self._undo_stack), len(self._redo_stack))
        return True

    def can_undo(self) -> bool:
        """Return True if an undo operation is currently possible."""
        return len(self._undo_stack) > 1

    def can_redo(self) -> bool:
        """Return True if a redo operation is currently possible."""
        return bool(self._redo_stack)

    def clear(self) -> None:
        """Clear both undo and redo histories."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    # --------------------------------------------------------------- Internals

    def _trim(self, stack: List[_Snapshot]) -> None:
        overflow = len(stack) - self._max_history
        if overflow > 0:
            del stack[0:overflow]

    @staticmethod
    def _restore(context: LayoutContext, snap: _Snapshot) -> None:
        context.layout = snap.layout
        context.edit_state = EditStateCoordinator(snap.editing_id)
