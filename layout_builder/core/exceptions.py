from __future__ import annotations

"""Layout engine exception classes.

All errors raised by the pure tree functions derive from :class:`LayoutError`
so callers (services, controllers) can catch a single base class. A raised
error always means the operation was not applied and the input tree is
untouched.
"""

from typing import Optional


class LayoutError(Exception):
    """Base exception for all layout engine errors."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"[path: {self.path!r}] {super().__str__()}"
        return super().__str__()


class MalformedPathError(LayoutError):
    """Raised when a path does not decode to non-negative integers."""
    pass


class PathNotFoundError(LayoutError):
    """Raised when a decoded path does not resolve to an existing node or slot.

    This signals an internal-invariant violation: the drop oracle or the UI
    should have prevented the call.
    """
    pass


class ContainmentError(LayoutError):
    """Raised when an operation would break Row > Column > Component nesting."""
    pass
