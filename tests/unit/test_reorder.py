"""Unit tests for drop-index arithmetic."""

import pytest

from notesai.editor.block_store import BlockStore
from notesai.editor.reorder import apply_drop, compute_drop_index, is_past_midpoint
from notesai.models.block import Block


@pytest.fixture
def blocks():
    return [Block(id=name) for name in "abcd"]


class TestComputeDropIndex:
    """Tests for compute_drop_index."""

    def test_drop_on_self_is_noop(self, blocks):
        assert compute_drop_index(blocks, "b", "b", True) is None
        assert compute_drop_index(blocks, "b", "b", False) is None

    def test_unknown_ids_are_noop(self, blocks):
        assert compute_drop_index(blocks, "x", "b", False) is None
        assert compute_drop_index(blocks, "a", "x", False) is None

    def test_drag_down_past_midpoint(self, blocks):
        """a dropped on lower half of c lands after c."""
        assert compute_drop_index(blocks, "a", "c", True) == (0, 2)

    def test_drag_down_before_midpoint(self, blocks):
        """a dropped on upper half of c lands before c."""
        assert compute_drop_index(blocks, "a", "c", False) == (0, 1)

    def test_drag_up_before_midpoint(self, blocks):
        """d dropped on upper half of b lands before b."""
        assert compute_drop_index(blocks, "d", "b", False) == (3, 1)

    def test_drag_up_past_midpoint(self, blocks):
        """d dropped on lower half of b lands after b."""
        assert compute_drop_index(blocks, "d", "b", True) == (3, 2)

    def test_drop_onto_adjacent_slot_is_noop(self, blocks):
        """a dropped on upper half of b would land where it already is."""
        assert compute_drop_index(blocks, "a", "b", False) is None

    def test_drop_after_last(self, blocks):
        assert compute_drop_index(blocks, "a", "d", True) == (0, 3)


class TestApplyDrop:
    """Tests for committing drops through the store."""

    def test_results_match_visual_intent(self, blocks):
        store = BlockStore(blocks)

        assert apply_drop(store, "a", "c", True) is True

        assert [b.id for b in store] == ["b", "c", "a", "d"]

    def test_noop_drop_records_nothing(self, blocks):
        store = BlockStore(blocks)

        assert apply_drop(store, "b", "b", True) is False
        assert not store.history.can_undo


class TestIsPastMidpoint:
    def test_midpoint(self):
        assert is_past_midpoint(160, 100, 100) is True
        assert is_past_midpoint(140, 100, 100) is False
        assert is_past_midpoint(150, 100, 100) is False
