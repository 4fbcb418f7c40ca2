from __future__ import annotations

"""Shared data structures used across the layout engine.

This package exposes the immutable value objects the engine operates on.
It is free of UI code so the objects can be reused from any front-end
(pointer drag, keyboard, tests).

A layout is a tuple of ``Row`` nodes; rows hold ``Column`` nodes and columns
hold ``Component`` leaves. Nodes never store their own path: positions are
recomputed on demand with :func:`iter_nodes` / :func:`find_path`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from layout_builder.core.exceptions import ContainmentError, LayoutError
from layout_builder.core.paths import encode

__all__ = [
    "NodeType",
    "Node",
    "Layout",
    "DragItem",
    "iter_nodes",
    "find_path",
    "layout_from_raw",
    "layout_to_raw",
    "validate_layout",
    "drag_item_from_payload",
]


class NodeType(str, Enum):
    """The three fixed containment levels."""

    ROW = "row"
    COLUMN = "column"
    COMPONENT = "component"

    @property
    def depth(self) -> int:
        """Path length of a node of this type (row=1, column=2, component=3)."""
        return _DEPTHS[self]

    @property
    def child_type(self) -> Optional["NodeType"]:
        return _CHILD_TYPES[self]

    @classmethod
    def for_depth(cls, depth: int) -> "NodeType":
        for node_type, value in _DEPTHS.items():
            if value == depth:
                return node_type
        raise ContainmentError(f"No node type lives at depth {depth}")

    @classmethod
    def parse(cls, value: Any) -> "NodeType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ContainmentError(f"Unknown node type {value!r}") from None


_DEPTHS = {NodeType.ROW: 1, NodeType.COLUMN: 2, NodeType.COMPONENT: 3}
_CHILD_TYPES = {NodeType.ROW: NodeType.COLUMN, NodeType.COLUMN: NodeType.COMPONENT, NodeType.COMPONENT: None}


@dataclass(frozen=True)
class Node:
    """A single layout element.

    Attributes
    ----------
    id
        Stable identifier, assigned once and never rewritten by mutations.
    type
        Row, Column or Component.
    content
        Optional text payload edited in place.
    children
        Ordered child nodes; always empty for components.
    is_editing
        Transient flag, true for at most one node of a layout.
    """

    id: str
    type: NodeType
    content: Optional[str] = None
    children: Tuple["Node", ...] = field(default_factory=tuple)
    is_editing: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))


Layout = Tuple[Node, ...]


@dataclass(frozen=True)
class DragItem:
    """Payload describing the item being dragged.

    ``path`` is None for palette templates, which have no position in the
    layout yet. ``children`` is None when the payload does not carry them;
    a moved node then keeps the children it already has.
    """

    type: NodeType
    path: Optional[str] = None
    id: Optional[str] = None
    content: Optional[str] = None
    children: Optional[Tuple[Node, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", NodeType.parse(self.type))
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def from_node(cls, node: Node, path: str) -> "DragItem":
        return cls(type=node.type, path=path, id=node.id, content=node.content, children=node.children)

    @classmethod
    def template(cls, node_type: NodeType, content: Optional[str] = None) -> "DragItem":
        return cls(type=node_type, content=content)


def iter_nodes(layout: Sequence[Node], prefix: Tuple[int, ...] = ()) -> Iterator[Tuple[str, Node]]:
    """Yield ``(path, node)`` pairs root-to-leaf, left-to-right."""
    for index, node in enumerate(layout):
        here = prefix + (index,)
        yield encode(here), node
        if node.children:
            yield from iter_nodes(node.children, here)


def find_path(layout: Sequence[Node], node_id: str) -> Optional[str]:
    """Return the current path of the node with ``node_id``, or None."""
    for path, node in iter_nodes(layout):
        if node.id == node_id:
            return path
    return None


# ---------------------------------------------------------------------------
# Raw boundary conversion
# ---------------------------------------------------------------------------

def layout_from_raw(records: Sequence[Dict[str, Any]]) -> Layout:
    """Build a layout from raw row records (``type``/``content``/``children``).

    A missing ``type`` is inferred from the record's depth; a declared type
    that contradicts the depth raises :class:`ContainmentError`. Incoming
    ``id`` values are kept as-is; callers normally pass the result through
    :func:`layout_builder.core.identity.assign_ids`.
    """
    return tuple(_node_from_raw(rec, (i,)) for i, rec in enumerate(records or ()))


def _node_from_raw(record: Dict[str, Any], path: Tuple[int, ...]) -> Node:
    if not isinstance(record, dict):
        raise LayoutError(f"Expected a mapping, got {type(record).__name__}", path=encode(path))
    expected = NodeType.for_depth(len(path))
    declared = record.get("type")
    node_type = expected if declared is None else NodeType.parse(declared)
    if node_type is not expected:
        raise ContainmentError(
            f"A {node_type.value} cannot live at depth {len(path)} (expected {expected.value})",
            path=encode(path),
        )
    raw_children = record.get("children") or ()
    if node_type is NodeType.COMPONENT and raw_children:
        raise ContainmentError("Components cannot have children", path=encode(path))
    children = tuple(_node_from_raw(rec, path + (i,)) for i, rec in enumerate(raw_children))
    content = record.get("content")
    return Node(
        id=str(record.get("id") or ""),
        type=node_type,
        content=None if content is None else str(content),
        children=children,
        is_editing=bool(record.get("isEditing", False)),
    )


def layout_to_raw(layout: Sequence[Node]) -> List[Dict[str, Any]]:
    """Inverse of :func:`layout_from_raw`, using the boundary key names."""
    out: List[Dict[str, Any]] = []
    for node in layout:
        rec: Dict[str, Any] = {"id": node.id, "type": node.type.value}
        if node.content is not None:
            rec["content"] = node.content
        if node.type is not NodeType.COMPONENT:
            rec["children"] = layout_to_raw(node.children)
        if node.is_editing:
            rec["isEditing"] = True
        out.append(rec)
    return out


def validate_layout(layout: Sequence[Node]) -> None:
    """Check containment, the single-editor invariant and id uniqueness."""
    seen: Set[str] = set()
    editing: List[str] = []
    for path, node in iter_nodes(layout):
        expected = NodeType.for_depth(len(path.split("-")))
        if node.type is not expected:
            raise ContainmentError(f"Found {node.type.value} where a {expected.value} belongs", path=path)
        if node.type is NodeType.COMPONENT and node.children:
            raise ContainmentError("Components cannot have children", path=path)
        if node.id in seen:
            raise LayoutError(f"Duplicate node id {node.id!r}", path=path)
        seen.add(node.id)
        if node.is_editing:
            editing.append(path)
    if len(editing) > 1:
        raise LayoutError(f"More than one node is being edited: {', '.join(editing)}")


def drag_item_from_payload(payload: Any) -> DragItem:
    """Coerce a boundary payload (dict or :class:`DragItem`) into a DragItem.

    Dict payloads use the keys ``path``, ``type``, ``id``, ``content`` and
    ``children``; children may be nodes or raw records. A payload without a
    ``children`` key yields ``children=None``.
    """
    if isinstance(payload, DragItem):
        return payload
    if not isinstance(payload, dict):
        raise LayoutError(f"Unsupported drag payload {type(payload).__name__}")
    node_type = NodeType.parse(payload.get("type"))
    children: Optional[List[Node]] = None
    if payload.get("children") is not None:
        children = []
        for i, kid in enumerate(payload["children"]):
            if isinstance(kid, Node):
                children.append(kid)
            elif isinstance(kid, dict):
                # raw child records sit one level below the dragged item
                children.append(_node_from_raw(kid, (0,) * node_type.depth + (i,)))
            else:
                raise LayoutError(f"Unsupported child record {type(kid).__name__}")
    path = payload.get("path")
    content = payload.get("content")
    return DragItem(
        type=node_type,
        path=None if path in (None, "") else str(path),
        id=payload.get("id"),
        content=None if content is None else str(content),
        children=None if children is None else tuple(children),
    )
