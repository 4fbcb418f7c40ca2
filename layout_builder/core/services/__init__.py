from __future__ import annotations

"""High-level editing services built on the pure tree functions."""

from .layout_editing_service import LayoutEditingService, OperationResult  # noqa: F401
from .undo_service import UndoService  # noqa: F401

__all__: list[str] = [
    "LayoutEditingService",
    "OperationResult",
    "UndoService",
]
