"""Shared fixtures for the Layout Builder test-suite."""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from layout_builder.config import ConfigManager
from layout_builder.core.context import LayoutContext
from layout_builder.core.identity import assign_ids
from layout_builder.core.models import Node, NodeType, layout_from_raw

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


SAMPLE_ROWS = [
    {
        "type": "row",
        "id": "row0",
        "content": "row0",
        "children": [
            {
                "type": "column",
                "id": "column0",
                "content": "column0",
                "children": [
                    {"type": "component", "id": "component0", "content": "component0"},
                    {"type": "component", "id": "component1", "content": "component1"},
                ],
            },
            {
                "type": "column",
                "id": "column1",
                "content": "column1",
                "children": [
                    {"type": "component", "id": "component2", "content": "component2"},
                ],
            },
        ],
    },
    {
        "type": "row",
        "id": "row1",
        "content": "row1",
        "children": [
            {
                "type": "column",
                "id": "column2",
                "content": "column2",
                "children": [
                    {"type": "component", "id": "component3", "content": "component3"},
                    {"type": "component", "id": "component0", "content": "component0"},
                    {"type": "component", "id": "component2", "content": "component2"},
                ],
            }
        ],
    },
]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty directory and reload config per test."""
    config_dir = tmp_path / "user_config"
    config_dir.mkdir()
    monkeypatch.setenv("LAYOUT_BUILDER_CONFIG_DIR", str(config_dir))
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def raw_rows():
    """The two-row sample layout (note the duplicated raw ids)."""
    import copy
    return copy.deepcopy(SAMPLE_ROWS)


@pytest.fixture
def layout(raw_rows):
    return assign_ids(layout_from_raw(raw_rows))


@pytest.fixture
def context(raw_rows):
    return LayoutContext.from_raw(raw_rows)


@pytest.fixture
def make_component():
    def factory(node_id, content=None):
        return Node(id=node_id, type=NodeType.COMPONENT, content=content or node_id)
    return factory


@pytest.fixture
def assert_invariants():
    """Containment, single editor and unique ids, for any produced layout."""
    from layout_builder.core.models import iter_nodes

    def check(layout):
        ids = set()
        editing = 0
        for path, node in iter_nodes(layout):
            depth = len(path.split("-"))
            assert node.type is NodeType.for_depth(depth), path
            if node.type is NodeType.ROW:
                assert all(c.type is NodeType.COLUMN for c in node.children)
            elif node.type is NodeType.COLUMN:
                assert all(c.type is NodeType.COMPONENT for c in node.children)
            else:
                assert node.children == ()
            assert node.id not in ids, f"duplicate id {node.id}"
            ids.add(node.id)
            editing += int(node.is_editing)
        assert editing <= 1
    return check
