from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from layout_builder.config import ConfigManager
from layout_builder.core.context import LayoutContext
from layout_builder.core.exceptions import LayoutError
from layout_builder.core.models import Layout, NodeType, iter_nodes
from layout_builder.core.services.layout_editing_service import (
    LayoutEditingService,
    OperationResult,
)
from layout_builder.core.services.undo_service import UndoService
from layout_builder.core.tree_ops import get_node

logger = logging.getLogger(__name__)

__all__ = ["LayoutController"]

LayoutListener = Callable[[Layout], None]


class LayoutController:
    """Controller exposing the renderer callbacks for one layout.

    The controller owns the :class:`LayoutContext`, serializes mutations
    behind a lock so overlapping gestures each see their predecessor's
    result, records undo snapshots around every edit and notifies listeners
    with the new layout after each committed change.

    Parameters
    ----------
    tree_data : sequence of dict, optional
        Raw row records loaded once at start-up.
    editing_service : LayoutEditingService, optional
        Service that performs the edits.
    undo_service : UndoService, optional
        Snapshot history; sized from the ``undo.max_history`` setting when omitted.
    editable : bool, optional
        False turns every mutation into a rejected no-op. Defaults to the
        ``editor.editable`` setting.
    is_collapsed : bool, default=False
        Initial collapsed state of rows and columns.

    Notes
    -----
    Routine failures never raise; callbacks return an OperationResult.
    """

    def __init__(
        self,
        tree_data: Optional[Sequence[Dict[str, Any]]] = None,
        editing_service: Optional[LayoutEditingService] = None,
        undo_service: Optional[UndoService] = None,
        editable: Optional[bool] = None,
        is_collapsed: bool = False,
    ) -> None:
        config = ConfigManager()
        self.context: LayoutContext = LayoutContext.from_raw(tree_data)
        self.editing_service: LayoutEditingService = editing_service or LayoutEditingService()
        self.undo_service: UndoService = undo_service or UndoService(
            max_history=int(config.get("layout", "undo.max_history", 50))
        )
        if editable is None:
            editable = bool(config.get("layout", "editor.editable", True))
        self.editable: bool = editable

        # Transient view state (keyed by node id so it survives moves)
        self.collapsed_ids: Set[str] = set()
        if is_collapsed:
            self.collapse_all()

        self._lock = threading.RLock()
        self._listeners: List[LayoutListener] = []
        self.undo_service.push_snapshot(self.context)
        logger.info("Layout loaded: %d rows", len(self.context.layout))

    # ---------------------------------------------------------------------------------
    # State access
    # ---------------------------------------------------------------------------------

    @property
    def layout(self) -> Layout:
        return self.context.layout

    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---------------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------------

    def _recorded_edit(self, mutate: Callable[[], OperationResult], record: bool = True) -> OperationResult:
        """Run a mutating service call with pre/post undo snapshots.

        Mutations are serialized; listeners run after the lock is released.
        Edit-mode toggles pass ``record=False`` and stay out of the history.
        """
        if not self.editable:
            return OperationResult(False, "Layout is read-only.", {"reason": "read_only"})
        with self._lock:
            if record:
                self.undo_service.push_snapshot(self.context)
            result = mutate()
            if result.success and record:
                self.undo_service.push_snapshot(self.context)
            layout = self.context.layout
        if result.success:
            self._notify(layout)
        return result

    def _notify(self, layout: Layout) -> None:
        for listener in list(self._listeners):
            listener(layout)

    # ---------------------------------------------------------------------------------
    # Renderer callbacks
    # ---------------------------------------------------------------------------------

    def can_drop(self, target_path: str, item: Any) -> bool:
        """Whether the drop indicator for ``target_path`` should light up."""
        if not self.editable:
            return False
        return self.editing_service.can_drop(target_path, item)

    def drop(self, target_path: str, item: Any) -> OperationResult:
        """Handle a drop of ``item`` (payload dict or DragItem) on a slot."""
        return self._recorded_edit(lambda: self.editing_service.drop(self.context, target_path, item))

    def add(self, count: int, parent_path: str, node_type: Any) -> OperationResult:
        """Add a row (``parent_path=""``), column or component at index ``count``."""
        return self._recorded_edit(
            lambda: self.editing_service.add_item(self.context, count, parent_path, node_type)
        )

    def add_row(self) -> OperationResult:
        return self.add(len(self.context.layout), "", NodeType.ROW)

    def delete(self, path: str) -> OperationResult:
        return self._recorded_edit(lambda: self.editing_service.delete_item(self.context, path))

    def move(self, parent_path: str, from_index: int, to_index: int) -> OperationResult:
        """Reorder siblings without a drag gesture (keyboard moves)."""
        return self._recorded_edit(
            lambda: self.editing_service.move_within_parent(self.context, parent_path, from_index, to_index)
        )

    def start_edit(self, path: str) -> OperationResult:
        return self._recorded_edit(lambda: self.editing_service.start_edit(self.context, path), record=False)

    def save_edit(self, path: str, content: str) -> OperationResult:
        return self._recorded_edit(lambda: self.editing_service.save_edit(self.context, path, content))

    def cancel_edit(self, path: str) -> OperationResult:
        return self._recorded_edit(lambda: self.editing_service.cancel_edit(self.context, path), record=False)

    # ---------------------------------------------------------------------------------
    # Undo / redo
    # ---------------------------------------------------------------------------------

    def undo(self) -> bool:
        with self._lock:
            changed = self.undo_service.undo(self.context)
            layout = self.context.layout
        if changed:
            self._notify(layout)
        return changed

    def redo(self) -> bool:
        with self._lock:
            changed = self.undo_service.redo(self.context)
            layout = self.context.layout
        if changed:
            self._notify(layout)
        return changed

    def can_undo(self) -> bool:
        return self.undo_service.can_undo()

    def can_redo(self) -> bool:
        return self.undo_service.can_redo()

    # ---------------------------------------------------------------------------------
    # Collapse state
    # ---------------------------------------------------------------------------------

    def is_collapsed(self, path: str) -> bool:
        try:
            return get_node(self.context.layout, path).id in self.collapsed_ids
        except LayoutError:
            return False

    def toggle_collapsed(self, path: str) -> bool:
        """Flip the collapsed state of a row or column; returns the new state.

        Only nodes with children can collapse.
        """
        try:
            node = get_node(self.context.layout, path)
        except LayoutError:
            logger.warning("Cannot toggle collapse: no node at %r", path)
            return False
        if not node.children:
            return False
        if node.id in self.collapsed_ids:
            self.collapsed_ids.discard(node.id)
            return False
        self.collapsed_ids.add(node.id)
        return True

    def expand_all(self) -> None:
        self.collapsed_ids.clear()

    def collapse_all(self) -> None:
        self.collapsed_ids = {node.id for _, node in iter_nodes(self.context.layout) if node.children}
