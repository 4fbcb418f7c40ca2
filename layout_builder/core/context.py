from __future__ import annotations

"""Live editing state for one layout.

:class:`LayoutContext` is the single holder of the current layout. Services
compute a new layout from it and swap ``context.layout`` in one assignment;
nothing else keeps a reference to the live tree.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from layout_builder.core.edit_state import EditStateCoordinator
from layout_builder.core.identity import IdAllocator, assign_ids
from layout_builder.core.models import Layout, layout_from_raw, validate_layout

__all__ = ["LayoutContext"]


@dataclass
class LayoutContext:
    """In-memory state of the layout being edited.

    Attributes
    ----------
    layout
        Current tuple of rows; replaced wholesale by every mutation.
    edit_state
        Single-slot tracker of the node in edit mode.
    id_allocator
        Source of ids for nodes created after load.
    """

    layout: Layout = field(default_factory=tuple)
    edit_state: EditStateCoordinator = field(default_factory=EditStateCoordinator)
    id_allocator: IdAllocator = field(default_factory=IdAllocator)

    @classmethod
    def from_raw(cls, records: Optional[Sequence[Dict[str, Any]]]) -> "LayoutContext":
        """Load raw row records, stamp positional ids and validate the result."""
        layout = assign_ids(layout_from_raw(records or ()))
        validate_layout(layout)
        return cls(layout=layout, edit_state=EditStateCoordinator.from_layout(layout))
