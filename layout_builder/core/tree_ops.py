"""Path-addressed rewrites of an immutable layout.

Every function takes a layout and returns a new one; the input is never
modified (nodes are frozen and children are tuples). Ancestors along the
edited path are rebuilt, everything else is shared with the input.

Paths are resolved completely before anything is built, so a raised
:class:`~layout_builder.core.exceptions.LayoutError` always means "nothing
happened".
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from layout_builder.core.defaults import default_content
from layout_builder.core.exceptions import ContainmentError, MalformedPathError, PathNotFoundError
from layout_builder.core.identity import IdAllocator
from layout_builder.core.models import DragItem, Layout, Node, NodeType, iter_nodes
from layout_builder.core.paths import PathLike, as_indices, encode

__all__ = [
    "get_node",
    "get_children",
    "update_at_path",
    "insert_child",
    "remove_subtree",
    "move_within_parent",
    "move_across_parent",
]

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"content", "is_editing", "children"}

# Used when no allocator is passed; its "t" ids never overlap a context's "n" ids
_default_allocator = IdAllocator(prefix="t")


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def _walk(layout: Sequence[Node], indices: Tuple[int, ...]) -> Tuple[Node, ...]:
    """Return the chain of nodes from the root down to ``indices``."""
    chain = []
    siblings: Sequence[Node] = layout
    for level, index in enumerate(indices):
        if index >= len(siblings):
            raise PathNotFoundError(
                f"No node at index {index} (level {level} has {len(siblings)})",
                path=encode(indices),
            )
        node = siblings[index]
        chain.append(node)
        siblings = node.children
    return tuple(chain)


def get_node(layout: Sequence[Node], path: PathLike) -> Node:
    indices = as_indices(path)
    if not indices:
        raise PathNotFoundError("The root path does not address a node", path="")
    return _walk(layout, indices)[-1]


def get_children(layout: Sequence[Node], parent_path: PathLike) -> Tuple[Node, ...]:
    """Children of the node at ``parent_path``; ``""`` means the rows."""
    indices = as_indices(parent_path)
    if not indices:
        return tuple(layout)
    return _walk(layout, indices)[-1].children


def _rebuild(layout: Sequence[Node], parent: Tuple[int, ...], new_children: Tuple[Node, ...]) -> Layout:
    """Swap the child tuple under ``parent`` and rebuild its ancestors."""
    if not parent:
        return tuple(new_children)
    chain = _walk(layout, parent)
    replacement = replace(chain[-1], children=tuple(new_children))
    for level in range(len(parent) - 2, -1, -1):
        holder = chain[level]
        kids = list(holder.children)
        kids[parent[level + 1]] = replacement
        replacement = replace(holder, children=tuple(kids))
    rows = list(layout)
    rows[parent[0]] = replacement
    return tuple(rows)


def _check_child_type(parent: Tuple[int, ...], node: Node) -> None:
    expected = NodeType.for_depth(len(parent) + 1)
    if node.type is not expected:
        raise ContainmentError(
            f"A {node.type.value} cannot be placed where a {expected.value} belongs",
            path=encode(parent),
        )


# ---------------------------------------------------------------------------
# Primitive rewrites
# ---------------------------------------------------------------------------

def update_at_path(layout: Sequence[Node], path: PathLike, updates: Mapping[str, Any]) -> Layout:
    """Replace the node at ``path`` with a shallow merge of ``updates``.

    Only ``content``, ``is_editing`` and ``children`` may change; ids and
    types are fixed for the node's lifetime.
    """
    indices = as_indices(path)
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    node = get_node(layout, indices)
    changes = dict(updates)
    if "children" in changes:
        changes["children"] = tuple(changes["children"])
        for kid in changes["children"]:
            _check_child_type(indices, kid)
    siblings = list(get_children(layout, indices[:-1]))
    siblings[indices[-1]] = replace(node, **changes)
    return _rebuild(layout, indices[:-1], tuple(siblings))


def insert_child(layout: Sequence[Node], parent_path: PathLike, index: int, node: Node) -> Layout:
    """Insert ``node`` at ``index`` under ``parent_path``.

    ``index`` may equal the number of children (append). Siblings at or
    after ``index`` shift one slot later.
    """
    parent = as_indices(parent_path)
    siblings = get_children(layout, parent)
    if index < 0 or index > len(siblings):
        raise PathNotFoundError(
            f"Insert index {index} out of range 0..{len(siblings)}",
            path=encode(parent + (max(index, 0),)),
        )
    _check_child_type(parent, node)
    kids = list(siblings)
    kids.insert(index, node)
    return _rebuild(layout, parent, tuple(kids))


def remove_subtree(layout: Sequence[Node], path: PathLike) -> Layout:
    """Delete the node at ``path`` together with all of its descendants."""
    indices = as_indices(path)
    get_node(layout, indices)
    kids = list(get_children(layout, indices[:-1]))
    del kids[indices[-1]]
    return _rebuild(layout, indices[:-1], tuple(kids))


def move_within_parent(layout: Sequence[Node], parent_path: PathLike, from_index: int, to_index: int) -> Layout:
    """Move the child at ``from_index`` so it ends up at ``to_index``.

    Both indices address existing children; the siblings in between shift
    by one towards the vacated slot.
    """
    parent = as_indices(parent_path)
    siblings = get_children(layout, parent)
    for label, idx in (("from", from_index), ("to", to_index)):
        if idx < 0 or idx >= len(siblings):
            raise PathNotFoundError(
                f"{label} index {idx} out of range 0..{len(siblings) - 1}",
                path=encode(parent + (max(idx, 0),)),
            )
    if from_index == to_index:
        return tuple(layout)
    kids = list(siblings)
    moved = kids.pop(from_index)
    kids.insert(to_index, moved)
    return _rebuild(layout, parent, tuple(kids))


# ---------------------------------------------------------------------------
# Cross-parent move
# ---------------------------------------------------------------------------

def _shift_after_removal(source: Tuple[int, ...], target: Tuple[int, ...]) -> Tuple[int, ...]:
    """Adjust ``target`` for the slot freed by removing ``source``."""
    level = len(source) - 1
    if len(target) > level and target[:level] == source[:level] and target[level] > source[level]:
        return target[:level] + (target[level] - 1,) + target[level + 1:]
    return target


def _check_payload(node_type: NodeType, children: Sequence[Node], target: Tuple[int, ...]) -> None:
    """Raise unless every payload descendant sits at its own level."""
    for kid in children:
        if node_type.child_type is None or kid.type is not node_type.child_type:
            raise ContainmentError(
                f"A {kid.type.value} cannot be nested in a {node_type.value}",
                path=encode(target),
            )
        _check_payload(kid.type, kid.children, target)


def _adopt(children: Sequence[Node], existing: Node, allocator: IdAllocator) -> Tuple[Node, ...]:
    """Fit the payload children of a moved node into the layout.

    Ids and edit flags are kept only for nodes already living under
    ``existing``; any other payload node is new and gets a fresh id with
    editing off.
    """
    known = {node.id: node for _, node in iter_nodes(existing.children)}
    taken = set()

    def visit(kid: Node) -> Node:
        prior = known.get(kid.id)
        if prior is not None and kid.id not in taken:
            taken.add(kid.id)
            node_id, editing = kid.id, prior.is_editing
        else:
            node_id, editing = allocator.next_id(), False
        return replace(kid, id=node_id, is_editing=editing, children=tuple(visit(c) for c in kid.children))

    return tuple(visit(kid) for kid in children)


def _wrap(node: Node, target_depth: int, allocator: IdAllocator,
          content_provider: Callable[[NodeType], str]) -> Node:
    """Nest ``node`` in fresh containers until it fits at ``target_depth``."""
    if node.type.depth < target_depth:
        raise ContainmentError(
            f"A {node.type.value} cannot be dropped at depth {target_depth}",
        )
    while node.type.depth > target_depth:
        holder_type = NodeType.for_depth(node.type.depth - 1)
        node = Node(
            id=allocator.next_id(),
            type=holder_type,
            content=content_provider(holder_type),
            children=(node,),
        )
    return node


def move_across_parent(
    layout: Sequence[Node],
    source_path: Optional[PathLike],
    target_path: PathLike,
    dragged: DragItem,
    allocator: Optional[IdAllocator] = None,
    content_provider: Callable[[NodeType], str] = default_content,
) -> Layout:
    """Move (or materialize) ``dragged`` into the slot ``target_path``.

    When ``source_path`` is None or shorter than ``target_path`` the dragged
    item is a template: a new node with fresh ids is created and nothing is
    removed. Otherwise the node at ``source_path`` is removed first and
    re-inserted, keeping its id. Payload children replace the moved node's
    children; without them (``dragged.children is None``) the node keeps
    its own. Payload children nested at the wrong level raise
    :class:`ContainmentError` before anything is built.

    A node dropped into a slot shallower than its own level is wrapped in
    freshly created containers (a component dropped among rows becomes a new
    row holding a new column holding the component).
    """
    allocator = allocator or _default_allocator
    target = as_indices(target_path)
    if not target:
        raise MalformedPathError("A drop target needs at least one index", path="")
    source = None if source_path is None or source_path == "" else as_indices(source_path)
    content = dragged.content or content_provider(dragged.type)

    # Resolve everything against the current layout before building.
    slot_parent = get_children(layout, target[:-1])
    if target[-1] > len(slot_parent):
        raise PathNotFoundError(
            f"Drop slot {target[-1]} out of range 0..{len(slot_parent)}",
            path=encode(target),
        )
    if dragged.type.depth < len(target):
        raise ContainmentError(
            f"A {dragged.type.value} cannot be dropped at depth {len(target)}",
            path=encode(target),
        )

    if dragged.children is not None:
        _check_payload(dragged.type, dragged.children, target)

    create = source is None or len(source) < len(target)
    if create:
        node = Node(
            id=allocator.next_id(),
            type=dragged.type,
            content=content,
            children=tuple(allocator.fresh_copy(kid) for kid in dragged.children or ()),
        )
        working: Layout = tuple(layout)
    else:
        existing = get_node(layout, source)
        if existing.type is not dragged.type:
            raise ContainmentError(
                f"Drag payload type {dragged.type.value} does not match node type {existing.type.value}",
                path=encode(source),
            )
        if dragged.children is None:
            children = existing.children
        else:
            children = _adopt(dragged.children, existing, allocator)
        node = Node(
            id=existing.id,
            type=existing.type,
            content=content,
            children=children,
            is_editing=existing.is_editing,
        )
        working = remove_subtree(layout, source)
        target = _shift_after_removal(source, target)

    node = _wrap(node, len(target), allocator, content_provider)
    logger.debug(
        "move_across_parent source=%s target=%s create=%s node=%s",
        None if source is None else encode(source), encode(target), create, node.id,
    )
    return insert_child(working, target[:-1], target[-1], node)
