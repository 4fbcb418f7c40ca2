import pytest

from layout_builder.core.drop_validity import can_drop, resolve_within_parent_index
from layout_builder.core.exceptions import MalformedPathError


class TestCanDrop:
    def test_palette_items_can_go_anywhere(self):
        assert can_drop("0-0-0", None) is True
        assert can_drop("3", "") is True

    def test_parent_cannot_drop_into_child_level(self):
        assert can_drop("0-0", "1") is False
        assert can_drop("0-0-0", "0-1") is False

    def test_dropping_on_own_slot_is_rejected(self):
        assert can_drop("0-1", "0-1") is False

    def test_slot_right_after_self_is_rejected(self):
        assert can_drop("0-2", "0-1") is False

    def test_earlier_slot_in_same_row_is_allowed(self):
        assert can_drop("0-0", "0-1") is True

    def test_later_slots_beyond_next_are_allowed(self):
        assert can_drop("0-3", "0-1") is True

    def test_next_index_in_another_parent_is_allowed(self):
        assert can_drop("1-2", "0-1") is True

    def test_deeper_item_into_shallower_slot_is_allowed(self):
        assert can_drop("2", "0-0-1") is True
        assert can_drop("0-1", "0-0-1") is True

    def test_accepts_index_sequences(self):
        assert can_drop([0, 2], [0, 1]) is False

    def test_malformed_paths_raise(self):
        with pytest.raises(MalformedPathError):
            can_drop("0-x", "0-1")
        with pytest.raises(MalformedPathError):
            can_drop("0-1", "bad")

    @pytest.mark.parametrize("dragged,target", [("0", "0-0"), ("1", "1-0-0"), ("0-0", "0-0-0")])
    def test_shorter_dragged_path_is_always_rejected(self, dragged, target):
        assert can_drop(target, dragged) is False


@pytest.mark.parametrize("from_index,slot,expected", [(1, 0, 0), (0, 2, 1), (0, 3, 2), (2, 0, 0), (1, 1, 1)])
def test_resolve_within_parent_index(from_index, slot, expected):
    assert resolve_within_parent_index(from_index, slot) == expected
