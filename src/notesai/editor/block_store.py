"""Block Store: the canonical ordered block list and its atomic mutations."""

from typing import Any, Callable, Iterator, Optional, Sequence, Union

import structlog

from notesai.editor.history import HistoryManager
from notesai.models.block import Block, BlockType, copy_blocks
from notesai.services.exceptions import BlockNotFound, EmptyDocumentRejected

logger = structlog.get_logger()

ChangeListener = Callable[[str], None]

_UNSET: Any = object()


class BlockStore:
    """
    Owns the ordered block list of one document.

    Every mutation validates its arguments, asks the HistoryManager for a
    snapshot (skipped while undo/redo is replaying), applies the change
    and then notifies the change listener. Operations that turn out to be
    no-ops record nothing.

    Example:
        >>> store = BlockStore([Block(id="1")])
        >>> new_id = store.insert_after("1", BlockType.HEADING, {"level": 1})
        >>> [b.id for b in store] == ["1", new_id]
        True
    """

    def __init__(
        self,
        blocks: Optional[Sequence[Block]] = None,
        history: Optional[HistoryManager] = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            blocks: Initial blocks (empty or None -> one empty text block)
            history: History manager to snapshot into (a private one if None)
            on_change: Called with the operation name after each mutation
        """
        self._blocks: list[Block] = list(blocks) if blocks else [Block()]
        self.history = history if history is not None else HistoryManager()
        self.on_change = on_change

    # Reads

    @property
    def blocks(self) -> tuple[Block, ...]:
        """Current blocks in order (read-only view)."""
        return tuple(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(tuple(self._blocks))

    def __contains__(self, block_id: object) -> bool:
        return any(block.id == block_id for block in self._blocks)

    def index_of(self, block_id: str) -> int:
        """
        Position of a block in the list.

        Raises:
            BlockNotFound: If no block has this id
        """
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        raise BlockNotFound(block_id)

    def get(self, block_id: str) -> Block:
        """
        Look up a block by id.

        Raises:
            BlockNotFound: If no block has this id
        """
        return self._blocks[self.index_of(block_id)]

    def snapshot(self) -> list[Block]:
        """Deep copy of the current list."""
        return copy_blocks(self._blocks)

    # Mutations

    def insert_after(
        self,
        anchor_id: str,
        type: Union[BlockType, str] = BlockType.TEXT,
        properties: Optional[dict[str, Any]] = None,
        initial_content: str = "",
    ) -> str:
        """
        Insert a new block immediately after an existing one.

        Args:
            anchor_id: Block to insert after
            type: Type of the new block
            properties: Type-specific properties for the new block
            initial_content: Content of the new block

        Returns:
            Id of the new block

        Raises:
            BlockNotFound: If anchor_id is not in the list (list unchanged)
        """
        index = self.index_of(anchor_id)
        new_block = Block(
            type=BlockType(type),
            content=initial_content,
            properties=dict(properties) if properties is not None else None,
        )

        self._record()
        self._blocks.insert(index + 1, new_block)

        logger.debug("block_inserted", block_id=new_block.id, after=anchor_id, type=new_block.type.value)
        self._notify("insert")
        return new_block.id

    def delete(self, block_id: str) -> Optional[str]:
        """
        Remove a block, never leaving the document empty.

        Args:
            block_id: Block to delete

        Returns:
            Id of the block that should receive focus next (the preceding
            block, or the new first block when the first was deleted), or
            None when the deletion was refused because it was the last block

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        try:
            return self._remove(block_id)
        except EmptyDocumentRejected:
            logger.debug("delete_refused_last_block", block_id=block_id)
            return None

    def _remove(self, block_id: str) -> str:
        index = self.index_of(block_id)
        if len(self._blocks) <= 1:
            raise EmptyDocumentRejected(block_id)

        self._record()
        del self._blocks[index]

        focus_id = self._blocks[max(0, index - 1)].id
        logger.debug("block_deleted", block_id=block_id, focus=focus_id)
        self._notify("delete")
        return focus_id

    def update(
        self,
        block_id: str,
        content: Any = _UNSET,
        type: Any = _UNSET,
        properties: Any = _UNSET,
    ) -> None:
        """
        Merge the given fields into a block; omitted fields stay untouched.

        ``properties`` given here replaces the block's properties field as a
        whole, the same as any other field.

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        block = self.get(block_id)
        changes: dict[str, Any] = {}
        if content is not _UNSET:
            changes["content"] = content
        if properties is not _UNSET:
            changes["properties"] = dict(properties) if properties is not None else None
        if type is not _UNSET:
            changes["type"] = BlockType(type)
        if not changes:
            return

        # Validate the merged result before anything is recorded or applied
        Block.model_validate({
            "id": block.id,
            "type": changes.get("type", block.type),
            "content": changes.get("content", block.content),
            "properties": changes.get("properties", block.properties),
        })

        self._record()
        for field, value in changes.items():
            setattr(block, field, value)

        logger.debug("block_updated", block_id=block_id, fields=sorted(changes))
        self._notify("update")

    def change_type(
        self,
        block_id: str,
        new_type: Union[BlockType, str],
        new_properties: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Convert a block to another type, replacing its properties wholesale.

        Properties are never inherited across a type change; the block gets
        exactly ``new_properties`` (``{}`` when omitted).

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        self.update(
            block_id,
            type=BlockType(new_type),
            properties=dict(new_properties) if new_properties else {},
        )

    def duplicate(self, block_id: str) -> str:
        """
        Insert a deep copy of a block (with a new id) right after it.

        Returns:
            Id of the copy

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        index = self.index_of(block_id)
        original = self._blocks[index]
        copy = Block(
            type=original.type,
            content=original.content,
            properties=original.deep_copy().properties,
        )

        self._record()
        self._blocks.insert(index + 1, copy)

        logger.debug("block_duplicated", block_id=block_id, copy_id=copy.id)
        self._notify("duplicate")
        return copy.id

    def move_up(self, block_id: str) -> bool:
        """
        Swap a block with its predecessor.

        Returns:
            True if the block moved, False at the top boundary

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        index = self.index_of(block_id)
        if index <= 0:
            return False
        self.reorder(index, index - 1)
        return True

    def move_down(self, block_id: str) -> bool:
        """
        Swap a block with its successor.

        Returns:
            True if the block moved, False at the bottom boundary

        Raises:
            BlockNotFound: If block_id is not in the list
        """
        index = self.index_of(block_id)
        if index >= len(self._blocks) - 1:
            return False
        self.reorder(index, index + 1)
        return True

    def reorder(self, from_index: int, to_index: int) -> None:
        """
        Move the block at from_index so it ends up at to_index.

        Splice semantics: the block is removed first and to_index refers to
        a position in the resulting shorter list.

        Raises:
            IndexError: If either index is out of range
        """
        count = len(self._blocks)
        if not 0 <= from_index < count:
            raise IndexError(f"from_index out of range: {from_index}")
        if not 0 <= to_index < count:
            raise IndexError(f"to_index out of range: {to_index}")
        if from_index == to_index:
            return

        self._record()
        moved = self._blocks.pop(from_index)
        self._blocks.insert(to_index, moved)

        logger.debug("blocks_reordered", block_id=moved.id, from_index=from_index, to_index=to_index)
        self._notify("reorder")

    def replace_all(self, blocks: Sequence[Block]) -> None:
        """
        Install a whole block list (used by undo/redo).

        Raises:
            ValueError: If blocks is empty
        """
        if not blocks:
            raise ValueError("A document must contain at least one block")

        self._record()
        self._blocks = list(blocks)
        self._notify("replace")

    def _record(self) -> None:
        self.history.record_if_not_replaying(self._blocks)

    def _notify(self, operation: str) -> None:
        if self.on_change is not None:
            self.on_change(operation)
