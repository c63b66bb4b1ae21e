"""Drop-index arithmetic for drag-and-drop and keyboard moves.

Pure functions over a block sequence; nothing here holds state, so a
drop can be tested without simulating pointer events.
"""

from typing import Optional, Sequence

from notesai.editor.block_store import BlockStore
from notesai.models.block import Block


def _find_index(blocks: Sequence[Block], block_id: str) -> Optional[int]:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    return None


def is_past_midpoint(pointer_y: float, target_top: float, target_height: float) -> bool:
    """
    Whether a pointer lies below the vertical midpoint of the target block.

    Args:
        pointer_y: Pointer position
        target_top: Top edge of the target block
        target_height: Height of the target block

    Returns:
        True when the drop should land after the target
    """
    return pointer_y > target_top + target_height / 2


def compute_drop_index(
    blocks: Sequence[Block],
    source_id: str,
    target_id: str,
    past_midpoint: bool,
) -> Optional[tuple[int, int]]:
    """
    Translate a drop of source onto target into reorder() arguments.

    The target index moves one further when the pointer is past the
    target's midpoint, then back by one if the source sits before it,
    since removing the source shifts everything after it left.

    Args:
        blocks: Current block list
        source_id: Block being dragged
        target_id: Block it was dropped on
        past_midpoint: Pointer below the target's vertical midpoint

    Returns:
        (from_index, to_index) for BlockStore.reorder, or None when the
        drop is a no-op (dropped on itself, unknown id, or lands in place)

    Examples:
        >>> # [a, b, c]: drop a on the lower half of b -> a lands after b
        >>> compute_drop_index(blocks, "a", "b", True)
        (0, 1)
    """
    if source_id == target_id:
        return None

    source_index = _find_index(blocks, source_id)
    target_index = _find_index(blocks, target_id)
    if source_index is None or target_index is None:
        return None

    if past_midpoint:
        target_index += 1
    if source_index < target_index:
        target_index -= 1

    if source_index == target_index:
        return None
    return source_index, target_index


def apply_drop(
    store: BlockStore,
    source_id: str,
    target_id: str,
    past_midpoint: bool,
) -> bool:
    """
    Commit a drop through the store.

    Returns:
        True if the store was reordered
    """
    move = compute_drop_index(store.blocks, source_id, target_id, past_midpoint)
    if move is None:
        return False
    store.reorder(*move)
    return True
