"""Placeholder content for newly created nodes."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from layout_builder.config import ConfigManager
from layout_builder.core.models import NodeType

__all__ = ["BUILTIN_DEFAULT_CONTENT", "default_content"]

BUILTIN_DEFAULT_CONTENT: Dict[NodeType, str] = {
    NodeType.ROW: "New row",
    NodeType.COLUMN: "New column",
    NodeType.COMPONENT: "New component",
}


def default_content(node_type: NodeType, overrides: Optional[Mapping[str, str]] = None) -> str:
    """Return the placeholder text for ``node_type``.

    Lookup order: ``overrides`` (keyed by type value), the ``default_content``
    section of the layout config, then the built-in strings.
    """
    node_type = NodeType.parse(node_type)
    if overrides and overrides.get(node_type.value):
        return str(overrides[node_type.value])
    configured = ConfigManager().get_layout_defaults().get("default_content") or {}
    value = configured.get(node_type.value)
    if value:
        return str(value)
    return BUILTIN_DEFAULT_CONTENT[node_type]
