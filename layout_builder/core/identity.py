"""Node identity.

``assign_ids`` runs once over freshly loaded data and stamps each node with
its positional path. Nodes created afterwards draw ids from an
:class:`IdAllocator`, so ids never depend on where a node currently sits.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from typing import Sequence, Tuple

from layout_builder.core.models import Layout, Node
from layout_builder.core.paths import encode

__all__ = ["assign_ids", "IdAllocator"]

logger = logging.getLogger(__name__)


def assign_ids(layout: Sequence[Node]) -> Layout:
    """Return a copy of ``layout`` where every ``id`` equals the node's path."""
    result = _assign(layout, ())
    logger.debug("Assigned positional ids to %d rows", len(result))
    return result


def _assign(nodes: Sequence[Node], prefix: Tuple[int, ...]) -> Layout:
    out = []
    for index, node in enumerate(nodes):
        here = prefix + (index,)
        out.append(replace(node, id=encode(here), children=_assign(node.children, here)))
    return tuple(out)


class IdAllocator:
    """Monotonic id source for nodes created after load.

    Ids look like ``"n1"``, ``"n2"``; positional ids only contain digits and
    dashes so the two families never collide.
    """

    def __init__(self, prefix: str = "n", start: int = 1) -> None:
        if not prefix or prefix[0].isdigit():
            raise ValueError("prefix must be non-empty and must not start with a digit")
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            return f"{self._prefix}{next(self._counter)}"

    def fresh_copy(self, node: Node) -> Node:
        """Deep-copy ``node`` giving it and every descendant a new id."""
        return replace(
            node,
            id=self.next_id(),
            children=tuple(self.fresh_copy(c) for c in node.children),
            is_editing=False,
        )
