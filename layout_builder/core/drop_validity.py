"""Drop target validity.

Decides whether dropping the item at ``dragged_path`` into the slot
``target_path`` is a legal, non-trivial move. Slots are addressed like
nodes: among N siblings there are N+1 slots, ``parent-0`` .. ``parent-N``.
"""

from __future__ import annotations

from typing import Optional

from layout_builder.core.paths import PathLike, as_indices

__all__ = ["can_drop", "resolve_within_parent_index"]


def can_drop(target_path: PathLike, dragged_path: Optional[PathLike]) -> bool:
    """Return True if the drop should be accepted.

    Rules, in order:

    1. Items without a position (palette templates) may go anywhere.
    2. A shallower item never drops into a deeper slot (row onto a column slot).
    3. Dropping onto its own slot is a no-op.
    4. Within the same parent, the slot right after the item is also a no-op.

    Raises
    ------
    MalformedPathError
        If either path fails to decode.
    """
    target = as_indices(target_path)
    if dragged_path is None or dragged_path == "":
        return True
    dragged = as_indices(dragged_path)

    if len(dragged) < len(target):
        return False
    if dragged == target:
        return False
    if len(dragged) == len(target) and dragged[:-1] == target[:-1]:
        if target[-1] == dragged[-1] + 1:
            return False
    return True


def resolve_within_parent_index(from_index: int, slot_index: int) -> int:
    """Translate a drop slot into the final index after the item is lifted.

    Slot ``k`` sits before the child currently at ``k``. Once the item at
    ``from_index`` is removed, every slot past it moves one to the left.
    """
    return slot_index - 1 if slot_index > from_index else slot_index
