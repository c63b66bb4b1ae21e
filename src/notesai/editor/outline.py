"""Outline collapse: which blocks are visible given collapsed headings.

Collapsing is a view concern only. Blocks are never removed or changed;
expanding a heading shows its section exactly as it was.
"""

from typing import AbstractSet, Iterable, Optional

from notesai.models.block import Block, BlockType


def visible_blocks(blocks: Iterable[Block], collapsed_ids: AbstractSet[str]) -> list[Block]:
    """
    Compute the blocks to render.

    A collapsed heading hides everything after it up to the next heading
    of the same or a shallower level. The collapsed heading itself stays
    visible. A collapsed heading inside an already hidden section does not
    start a section of its own.

    Args:
        blocks: Blocks in document order
        collapsed_ids: Ids of collapsed headings

    Returns:
        Visible blocks in document order

    Examples:
        >>> # H1 A (collapsed), x, H2 B, y, H1 C
        >>> [b.content for b in visible_blocks(blocks, {"A"})]
        ['A', 'C']
    """
    visible: list[Block] = []
    active_collapse_level: Optional[int] = None

    for block in blocks:
        level = block.heading_level if block.type == BlockType.HEADING else None

        if active_collapse_level is not None and level is not None and level <= active_collapse_level:
            active_collapse_level = None

        if active_collapse_level is not None:
            continue

        if level is not None and block.id in collapsed_ids:
            active_collapse_level = level

        visible.append(block)

    return visible


def hidden_block_ids(blocks: Iterable[Block], collapsed_ids: AbstractSet[str]) -> set[str]:
    """Ids of blocks hidden by collapsed headings."""
    blocks = list(blocks)
    shown = {block.id for block in visible_blocks(blocks, collapsed_ids)}
    return {block.id for block in blocks if block.id not in shown}


def toggle_collapsed(collapsed_ids: AbstractSet[str], heading_id: str) -> set[str]:
    """Return a new collapsed set with heading_id flipped."""
    updated = set(collapsed_ids)
    if heading_id in updated:
        updated.remove(heading_id)
    else:
        updated.add(heading_id)
    return updated
