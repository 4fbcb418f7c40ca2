from __future__ import annotations

"""Service layer for structural and inline edits on a layout.

This module provides a UI-agnostic, testable service that turns renderer
gestures (drop, add, delete, edit) into calls on the pure tree functions and
commits the resulting layout into a :class:`LayoutContext`.

Scope and guarantees:
- Operates purely in-memory; no file I/O and no UI imports.
- Expected failures (bad paths, illegal nesting, rejected drops) return
  OperationResult(success=False, ...) with a clear message, never raise.
- A failed operation leaves ``context.layout`` untouched; a successful one
  replaces it with a single assignment.

Examples
--------
Basic usage:

    service = LayoutEditingService()
    ctx = LayoutContext.from_raw(raw_rows)
    result = service.drop(ctx, "0-0", {"path": "0-1", "type": "column"})
    if not result.success:
        print(result.message)

"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Optional

from layout_builder.config import ConfigManager
from layout_builder.core.context import LayoutContext
from layout_builder.core.defaults import default_content
from layout_builder.core.drop_validity import can_drop, resolve_within_parent_index
from layout_builder.core.exceptions import ContainmentError, LayoutError
from layout_builder.core.models import DragItem, Layout, Node, NodeType, drag_item_from_payload
from layout_builder.core.paths import PathLike, as_indices, encode
from layout_builder.core.tree_ops import (
    get_node,
    insert_child,
    move_across_parent,
    move_within_parent,
    remove_subtree,
)


__all__ = ["OperationResult", "LayoutEditingService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of an editing operation.

    Attributes
    ----------
    success
        Whether the operation changed the layout.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


class LayoutEditingService:
    """Encapsulates the edit operations a renderer can request.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected invalid actions; return OperationResult.
    - All tree surgery is delegated to :mod:`layout_builder.core.tree_ops`
      and :mod:`layout_builder.core.edit_state`.
    """

    def __init__(
        self,
        content_provider: Callable[[NodeType], str] = default_content,
        start_editing_new_nodes: Optional[bool] = None,
    ) -> None:
        """Initialize the layout editing service.

        Args:
            content_provider: Returns placeholder content for a node type
            start_editing_new_nodes: Open added nodes in edit mode; read from
                the ``editor`` config section when None
        """
        self._content_provider = content_provider
        if start_editing_new_nodes is None:
            start_editing_new_nodes = bool(
                ConfigManager().get("layout", "editor.start_editing_new_nodes", True)
            )
        self._start_editing_new_nodes = start_editing_new_nodes

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def can_drop(self, target_path: PathLike, item: Any) -> bool:
        """Non-raising drop check; malformed input is simply not droppable."""
        try:
            dragged = drag_item_from_payload(item)
            return can_drop(target_path, dragged.path)
        except LayoutError:
            return False

    def drop(self, context: LayoutContext, target_path: PathLike, item: Any) -> OperationResult:
        """Apply a drop of ``item`` (DragItem or payload dict) onto a slot."""
        logger.info("Edit: drop target=%s", target_path)
        try:
            dragged = drag_item_from_payload(item)
            if not can_drop(target_path, dragged.path):
                logger.info("Edit noop: drop target=%s source=%s", target_path, dragged.path)
                return OperationResult(
                    False,
                    "Drop target is not valid for this item.",
                    {"target": str(target_path), "source": dragged.path, "reason": "invalid_target"},
                )
            new_layout = self._apply_drop(context, as_indices(target_path), dragged)
        except LayoutError as e:
            return self._fail("drop", e, {"target": str(target_path)})

        self._commit(context, new_layout)
        logger.info("Edit OK: drop target=%s source=%s", target_path, dragged.path)
        return OperationResult(True, "Moved item.", {"target": str(target_path), "source": dragged.path})

    def add_item(
        self,
        context: LayoutContext,
        count: int,
        parent_path: PathLike,
        node_type: Any,
    ) -> OperationResult:
        """Insert a new node of ``node_type`` at index ``count`` under ``parent_path``.

        The renderer passes the parent's current child count, which appends.
        The new node carries placeholder content and, by default, opens in
        edit mode.
        """
        logger.info("Edit: add_item type=%s parent=%r index=%s", node_type, parent_path, count)
        try:
            node_type = NodeType.parse(node_type)
            parent = as_indices(parent_path)
            if node_type.depth != len(parent) + 1:
                raise ContainmentError(
                    f"A {node_type.value} cannot be added under a node at depth {len(parent)}",
                    path=encode(parent),
                )
            node = Node(
                id=context.id_allocator.next_id(),
                type=node_type,
                content=self._content_provider(node_type),
            )
            new_layout = insert_child(context.layout, parent, count, node)
            if self._start_editing_new_nodes:
                new_layout = context.edit_state.begin(new_layout, parent + (count,))
        except LayoutError as e:
            return self._fail("add_item", e, {"parent": str(parent_path), "index": count})

        self._commit(context, new_layout)
        path = encode(parent + (count,))
        logger.info("Edit OK: add_item type=%s path=%s id=%s", node_type.value, path, node.id)
        return OperationResult(True, f"Added {node_type.value}.", {"path": path, "id": node.id})

    def delete_item(self, context: LayoutContext, path: PathLike) -> OperationResult:
        """Remove the node at ``path`` and its whole subtree."""
        logger.info("Edit: delete_item path=%s", path)
        try:
            removed = get_node(context.layout, path)
            new_layout = remove_subtree(context.layout, path)
        except LayoutError as e:
            return self._fail("delete_item", e, {"path": str(path)})

        self._commit(context, new_layout)
        logger.info("Edit OK: delete_item path=%s id=%s", path, removed.id)
        return OperationResult(True, f"Deleted {removed.type.value}.", {"path": str(path), "id": removed.id})

    def move_within_parent(
        self,
        context: LayoutContext,
        parent_path: PathLike,
        from_index: int,
        to_index: int,
    ) -> OperationResult:
        """Reorder a child among its siblings (keyboard-style move)."""
        logger.info("Edit: move_within_parent parent=%r from=%s to=%s", parent_path, from_index, to_index)
        if from_index == to_index:
            logger.info("Edit noop: move_within_parent same index")
            return OperationResult(False, "Item is already at that position.", {"index": from_index})
        try:
            new_layout = move_within_parent(context.layout, parent_path, from_index, to_index)
        except LayoutError as e:
            return self._fail("move_within_parent", e, {"parent": str(parent_path)})

        self._commit(context, new_layout)
        logger.info("Edit OK: move_within_parent parent=%r from=%s to=%s", parent_path, from_index, to_index)
        return OperationResult(True, "Moved item.", {"from": from_index, "to": to_index})

    def start_edit(self, context: LayoutContext, path: PathLike) -> OperationResult:
        logger.info("Edit: start_edit path=%s", path)
        try:
            new_layout = context.edit_state.begin(context.layout, path)
        except LayoutError as e:
            return self._fail("start_edit", e, {"path": str(path)})
        self._commit(context, new_layout)
        return OperationResult(True, "Editing.", {"path": str(path)})

    def save_edit(self, context: LayoutContext, path: PathLike, new_content: str) -> OperationResult:
        logger.info("Edit: save_edit path=%s", path)
        try:
            new_layout = context.edit_state.save(context.layout, path, new_content)
        except LayoutError as e:
            return self._fail("save_edit", e, {"path": str(path)})
        self._commit(context, new_layout)
        logger.info("Edit OK: save_edit path=%s", path)
        return OperationResult(True, "Saved content.", {"path": str(path), "content": new_content})

    def cancel_edit(self, context: LayoutContext, path: PathLike) -> OperationResult:
        logger.info("Edit: cancel_edit path=%s", path)
        try:
            new_layout = context.edit_state.cancel(context.layout, path)
        except LayoutError as e:
            return self._fail("cancel_edit", e, {"path": str(path)})
        self._commit(context, new_layout)
        return OperationResult(True, "Edit cancelled.", {"path": str(path)})

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply_drop(self, context: LayoutContext, target: tuple, dragged: DragItem) -> Layout:
        source = None if dragged.path is None else as_indices(dragged.path)
        if source is not None and len(source) == len(target) and source[:-1] == target[:-1]:
            to_index = resolve_within_parent_index(source[-1], target[-1])
            logger.debug("Drop resolved as reorder parent=%s from=%d to=%d",
                         encode(target[:-1]), source[-1], to_index)
            return move_within_parent(context.layout, target[:-1], source[-1], to_index)
        return move_across_parent(
            context.layout,
            source,
            target,
            dragged,
            allocator=context.id_allocator,
            content_provider=self._content_provider,
        )

    @staticmethod
    def _commit(context: LayoutContext, new_layout: Layout) -> None:
        context.layout = new_layout
        context.edit_state.sync(new_layout)

    @staticmethod
    def _fail(operation: str, error: LayoutError, details: Dict[str, Any]) -> OperationResult:
        logger.warning("Edit FAIL: %s error=%s", operation, error)
        payload = dict(details)
        payload.update({"error": str(error), "error_type": type(error).__name__})
        return OperationResult(False, f"{operation.replace('_', ' ').capitalize()} failed: {error}", payload)
