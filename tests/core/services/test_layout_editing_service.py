import logging

import pytest

from layout_builder.core.models import DragItem, Node, NodeType, iter_nodes
from layout_builder.core.services.layout_editing_service import (
    LayoutEditingService,
    OperationResult,
)
from layout_builder.core.tree_ops import get_children, get_node


def _contents(nodes):
    return [n.content for n in nodes]


@pytest.fixture
def service():
    return LayoutEditingService()


class TestDrop:
    def test_column_moves_to_earlier_slot(self, service, context):
        result = service.drop(context, "0-0", {"path": "0-1", "type": "column", "content": "column1"})
        assert isinstance(result, OperationResult)
        assert result.success is True
        assert _contents(get_children(context.layout, "0")) == ["column1", "column0"]

    def test_slot_after_self_is_rejected_and_layout_kept(self, service, context):
        before = context.layout
        result = service.drop(context, "0-2", {"path": "0-1", "type": "column"})
        assert result.success is False
        assert result.details["reason"] == "invalid_target"
        assert context.layout is before

    def test_reorder_to_later_slot_lands_before_next_sibling(self, service, context):
        item = DragItem.from_node(get_node(context.layout, "1-0-0"), "1-0-0")
        assert service.drop(context, "1-0-2", item).success
        assert _contents(get_children(context.layout, "1-0")) == ["component0", "component3", "component2"]

    def test_reorder_to_last_slot(self, service, context):
        item = DragItem.from_node(get_node(context.layout, "1-0-0"), "1-0-0")
        assert service.drop(context, "1-0-3", item).success
        assert _contents(get_children(context.layout, "1-0")) == ["component0", "component2", "component3"]

    def test_cross_column_move_keeps_id(self, service, context):
        item = DragItem.from_node(get_node(context.layout, "0-0-1"), "0-0-1")
        assert service.drop(context, "1-0-0", item).success
        moved = get_node(context.layout, "1-0-0")
        assert (moved.id, moved.content) == ("0-0-1", "component1")

    def test_palette_component_gets_default_content(self, service, context):
        result = service.drop(context, "0-1-1", {"type": "component"})
        assert result.success
        node = get_node(context.layout, "0-1-1")
        assert node.content == "New component"
        assert node.id.startswith("n")

    def test_palette_row_into_component_slot_fails_cleanly(self, service, context, caplog):
        before = context.layout
        with caplog.at_level(logging.WARNING):
            result = service.drop(context, "0-0-0", {"type": "row"})
        assert result.success is False
        assert result.details["error_type"] == "ContainmentError"
        assert context.layout is before
        assert "Edit FAIL: drop" in caplog.text

    def test_malformed_target_is_reported(self, service, context):
        result = service.drop(context, "0-a", {"path": "0-1", "type": "column"})
        assert result.success is False
        assert result.details["error_type"] == "MalformedPathError"

    def test_missing_target_is_reported(self, service, context):
        result = service.drop(context, "7-0", {"path": "0-0-0", "type": "component"})
        assert result.success is False
        assert result.details["error_type"] == "PathNotFoundError"

    def test_can_drop_never_raises(self, service):
        assert service.can_drop("0-0", {"path": "0-1", "type": "column"}) is True
        assert service.can_drop("x", {"path": "0-1", "type": "column"}) is False
        assert service.can_drop("0", {"type": "nonsense"}) is False

    def test_column_with_nested_row_is_rejected(self, service, context):
        before = context.layout
        item = DragItem(type=NodeType.COLUMN, children=(Node(id="x", type=NodeType.ROW),))
        result = service.drop(context, "1-1", item)
        assert result.success is False
        assert result.details["error_type"] == "ContainmentError"
        assert context.layout is before

    def test_moved_column_payload_cannot_add_a_second_editor(self, service, context, assert_invariants):
        assert service.start_edit(context, "1-0-0").success
        payload = {"path": "0-0", "type": "column",
                   "children": [{"type": "component", "isEditing": True}]}
        assert service.drop(context, "1-1", payload).success
        assert_invariants(context.layout)
        editors = [path for path, node in iter_nodes(context.layout) if node.is_editing]
        assert editors == ["1-0-0"]
        assert context.edit_state.editing_id == "1-0-0"
        assert get_node(context.layout, "1-1-0").id.startswith("n")

    def test_column_payload_without_children_keeps_components(self, service, context):
        assert service.drop(context, "1-1", {"path": "0-0", "type": "column"}).success
        assert _contents(get_node(context.layout, "1-1").children) == ["component0", "component1"]

    @pytest.mark.parametrize("target", [None, 5])
    def test_non_path_target_is_reported(self, service, context, target):
        result = service.drop(context, target, {"type": "component"})
        assert result.success is False
        assert result.details["error_type"] == "MalformedPathError"

    def test_delete_with_non_path_is_reported(self, service, context):
        result = service.delete_item(context, None)
        assert result.success is False
        assert result.details["error_type"] == "MalformedPathError"


class TestAddDelete:
    def test_add_row_opens_in_edit_mode(self, service, context):
        result = service.add_item(context, 2, "", NodeType.ROW)
        assert result.success
        row = context.layout[2]
        assert (row.type, row.content, row.is_editing) == (NodeType.ROW, "New row", True)
        assert context.edit_state.editing_id == row.id == result.details["id"]

    def test_add_clears_previous_editor(self, service, context, assert_invariants):
        service.start_edit(context, "0-0-0")
        service.add_item(context, 1, "0-1", "component")
        assert [p for p, n in iter_nodes(context.layout) if n.is_editing] == ["0-1-1"]
        assert_invariants(context.layout)

    def test_add_without_edit_mode(self, context):
        service = LayoutEditingService(start_editing_new_nodes=False)
        service.add_item(context, 0, "1", "column")
        assert get_node(context.layout, "1-0").is_editing is False
        assert get_node(context.layout, "1-1").content == "column2"

    def test_add_with_wrong_level_fails(self, service, context):
        result = service.add_item(context, 0, "0", NodeType.COMPONENT)
        assert result.success is False
        assert result.details["error_type"] == "ContainmentError"

    def test_add_past_end_fails(self, service, context):
        result = service.add_item(context, 9, "0", NodeType.COLUMN)
        assert result.success is False
        assert result.details["error_type"] == "PathNotFoundError"

    def test_delete_removes_subtree_and_editor(self, service, context):
        service.start_edit(context, "0-0-1")
        result = service.delete_item(context, "0-0")
        assert result.success
        assert result.details["id"] == "0-0"
        assert _contents(get_children(context.layout, "0")) == ["column1"]
        assert context.edit_state.editing_id is None

    def test_delete_missing_path_fails(self, service, context):
        assert service.delete_item(context, "4").success is False

class TestEditing:
    def test_edit_cycle(self, service, context):
        assert service.start_edit(context, "0-0-1").success
        assert service.start_edit(context, "0-1-0").success
        assert [p for p, n in iter_nodes(context.layout) if n.is_editing] == ["0-1-0"]
        assert service.save_edit(context, "0-1-0", "Hero").success
        assert get_node(context.layout, "0-1-0").content == "Hero"
        assert context.edit_state.editing_id is None

    def test_cancel_keeps_content(self, service, context):
        service.start_edit(context, "1")
        service.cancel_edit(context, "1")
        node = get_node(context.layout, "1")
        assert (node.content, node.is_editing) == ("row1", False)

    def test_edit_on_missing_path_fails(self, service, context):
        assert service.start_edit(context, "0-9").success is False
        assert service.save_edit(context, "bad path", "x").success is False

class TestKeyboardMove:
    def test_move_within_parent(self, service, context):
        assert service.move_within_parent(context, "", 0, 1).success
        assert _contents(context.layout) == ["row1", "row0"]

    def test_same_index_is_noop(self, service, context):
        assert service.move_within_parent(context, "", 0, 0).success is False

    def test_out_of_range_fails(self, service, context):
        result = service.move_within_parent(context, "0", 0, 5)
        assert result.details["error_type"] == "PathNotFoundError"
