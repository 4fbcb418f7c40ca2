"""Inline edit state.

The pure functions rewrite ``is_editing`` flags through the tree rewriter.
:class:`EditStateCoordinator` additionally remembers the id of the node being
edited in a single slot, so switching editors touches only the previous
editor instead of sweeping the whole layout.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from layout_builder.core.models import Layout, Node, find_path, iter_nodes
from layout_builder.core.paths import PathLike, as_indices, encode
from layout_builder.core.tree_ops import get_node, update_at_path

__all__ = [
    "begin_edit",
    "save_edit",
    "cancel_edit",
    "clear_editing",
    "find_editing",
    "EditStateCoordinator",
]

logger = logging.getLogger(__name__)


def clear_editing(layout: Sequence[Node]) -> Layout:
    """Return ``layout`` with every ``is_editing`` flag turned off."""
    out = []
    changed = False
    for node in layout:
        kids = clear_editing(node.children) if node.children else node.children
        if node.is_editing or kids is not node.children:
            node = replace(node, is_editing=False, children=kids)
            changed = True
        out.append(node)
    # untouched subtrees keep their identity
    return tuple(out) if changed else layout


def find_editing(layout: Sequence[Node]) -> Optional[str]:
    """Path of the node currently in edit mode, if any."""
    for path, node in iter_nodes(layout):
        if node.is_editing:
            return path
    return None


def begin_edit(layout: Sequence[Node], path: PathLike) -> Layout:
    """Put the node at ``path`` in edit mode and every other node out of it."""
    indices = as_indices(path)
    get_node(layout, indices)
    return update_at_path(clear_editing(layout), indices, {"is_editing": True})


def save_edit(layout: Sequence[Node], path: PathLike, new_content: str) -> Layout:
    return update_at_path(layout, path, {"content": new_content, "is_editing": False})


def cancel_edit(layout: Sequence[Node], path: PathLike) -> Layout:
    return update_at_path(layout, path, {"is_editing": False})


class EditStateCoordinator:
    """Single-slot tracker of the node being edited.

    The slot holds a node id rather than a path so it survives moves of the
    edited node or its ancestors.
    """

    def __init__(self, editing_id: Optional[str] = None) -> None:
        self._editing_id = editing_id

    @classmethod
    def from_layout(cls, layout: Sequence[Node]) -> "EditStateCoordinator":
        path = find_editing(layout)
        return cls(None if path is None else get_node(layout, path).id)

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    def editing_path(self, layout: Sequence[Node]) -> Optional[str]:
        if self._editing_id is None:
            return None
        return find_path(layout, self._editing_id)

    def begin(self, layout: Sequence[Node], path: PathLike) -> Layout:
        indices = as_indices(path)
        target = get_node(layout, indices)
        current = self.editing_path(layout)
        result: Layout = tuple(layout)
        if current is not None and current != encode(indices):
            result = update_at_path(result, current, {"is_editing": False})
        result = update_at_path(result, indices, {"is_editing": True})
        self._editing_id = target.id
        logger.debug("Editing node id=%s path=%s", target.id, encode(indices))
        return result

    def save(self, layout: Sequence[Node], path: PathLike, new_content: str) -> Layout:
        result = save_edit(layout, path, new_content)
        self._release(layout, path)
        return result

    def cancel(self, layout: Sequence[Node], path: PathLike) -> Layout:
        result = cancel_edit(layout, path)
        self._release(layout, path)
        return result

    def forget(self) -> None:
        self._editing_id = None

    def sync(self, layout: Sequence[Node]) -> None:
        """Drop the slot if its node no longer exists in ``layout``."""
        if self._editing_id is not None and find_path(layout, self._editing_id) is None:
            logger.debug("Edited node id=%s left the layout", self._editing_id)
            self._editing_id = None

    def _release(self, layout: Sequence[Node], path: PathLike) -> None:
        if get_node(layout, path).id == self._editing_id:
            self._editing_id = None
