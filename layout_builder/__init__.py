"""Top-level package for Layout Builder.

A path-addressed editing engine for three-level layouts (rows holding
columns holding components). Front-ends should depend on the names exported
here rather than importing internal modules directly.
"""

from .core.context import LayoutContext  # noqa: F401
from .core.exceptions import (  # noqa: F401
    ContainmentError,
    LayoutError,
    MalformedPathError,
    PathNotFoundError,
)
from .core.models import DragItem, Layout, Node, NodeType  # noqa: F401

__all__: list[str] = [
    "LayoutContext",
    "LayoutError",
    "MalformedPathError",
    "PathNotFoundError",
    "ContainmentError",
    "Node",
    "NodeType",
    "Layout",
    "DragItem",
]
