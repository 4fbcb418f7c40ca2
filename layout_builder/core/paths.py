"""Path codec.

A path is the sequence of zero-based child indices from the layout root to a
node, serialized as dash-joined integers (``"1-0-2"``). The empty string is
the root itself, i.e. the top-level sequence of rows.
"""

from __future__ import annotations

from typing import Sequence, Tuple, Union

from layout_builder.core.exceptions import MalformedPathError

__all__ = [
    "PathLike",
    "SEPARATOR",
    "encode",
    "decode",
    "as_indices",
    "parent",
    "last_index",
    "depth",
    "child",
]

SEPARATOR = "-"

PathLike = Union[str, Sequence[int]]


def encode(indices: Sequence[int]) -> str:
    """Join indices with ``-``. ``encode([])`` is the root path ``""``."""
    for idx in indices:
        if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
            raise MalformedPathError(f"Invalid path index {idx!r}", path=repr(tuple(indices)))
    return SEPARATOR.join(str(i) for i in indices)


def decode(path: str) -> Tuple[int, ...]:
    """Split a path string into a tuple of non-negative ints.

    Raises
    ------
    MalformedPathError
        If the value is not a string or any token is not a plain decimal
        number (signs, blanks and empty tokens are rejected).
    """
    if not isinstance(path, str):
        raise MalformedPathError(f"Path must be a string, got {type(path).__name__}")
    if path == "":
        return ()
    indices = []
    for token in path.split(SEPARATOR):
        if not (token.isascii() and token.isdigit()):
            raise MalformedPathError(f"Invalid path token {token!r}", path=path)
        indices.append(int(token))
    return tuple(indices)


def as_indices(path: PathLike) -> Tuple[int, ...]:
    """Normalize a string or an index sequence to a validated tuple."""
    if isinstance(path, str):
        return decode(path)
    try:
        indices = tuple(path)
    except TypeError:
        raise MalformedPathError(f"Path must be a string or index sequence, got {type(path).__name__}") from None
    encode(indices)  # validates
    return indices


def parent(path: PathLike) -> str:
    """Return the path with its last component dropped (``""`` at row level)."""
    return encode(as_indices(path)[:-1])


def last_index(path: PathLike) -> int:
    indices = as_indices(path)
    if not indices:
        raise MalformedPathError("The root path has no index", path="")
    return indices[-1]


def depth(path: PathLike) -> int:
    return len(as_indices(path))


def child(path: PathLike, index: int) -> str:
    return encode(as_indices(path) + (index,))
