"""Linear undo/redo over full block-list snapshots.

Snapshotting the whole list instead of diffing trades memory for
simplicity; documents here are tens to low hundreds of blocks.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from notesai.models.block import Block, copy_blocks

logger = structlog.get_logger()


class HistoryManager:
    """
    Undo and redo stacks of block-list snapshots.

    The Block Store calls record_if_not_replaying() right before every
    mutation. While undo/redo installs a snapshot the replaying flag is
    set, so the installation is not recorded as a fresh action.

    Example:
        >>> history = HistoryManager()
        >>> history.record_if_not_replaying(store.blocks)
        >>> # ... mutate ...
        >>> previous = history.undo(store.blocks)
        >>> with history.replaying():
        ...     store.replace_all(previous)
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        """
        Initialize empty history.

        Args:
            limit: Maximum undo snapshots kept; oldest are dropped first.
                   None keeps everything.
        """
        self._undo_stack: list[list[Block]] = []
        self._redo_stack: list[list[Block]] = []
        self._replaying = False
        self.limit = limit

    @property
    def is_replaying(self) -> bool:
        return self._replaying

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)

    def record_if_not_replaying(self, current_blocks: list[Block]) -> bool:
        """
        Snapshot the pre-mutation state and clear the redo stack.

        Args:
            current_blocks: Block list about to be mutated

        Returns:
            True if a snapshot was recorded, False while replaying
        """
        if self._replaying:
            return False

        self._undo_stack.append(copy_blocks(current_blocks))
        self._redo_stack.clear()

        if self.limit is not None and len(self._undo_stack) > self.limit:
            del self._undo_stack[: len(self._undo_stack) - self.limit]

        logger.debug("history_recorded", undo_depth=len(self._undo_stack))
        return True

    def undo(self, current_blocks: list[Block]) -> Optional[list[Block]]:
        """
        Pop the most recent snapshot, saving the current state for redo.

        Args:
            current_blocks: Block list as it is right now

        Returns:
            Snapshot to install, or None when there is nothing to undo
        """
        if not self._undo_stack:
            return None

        previous = self._undo_stack.pop()
        self._redo_stack.append(copy_blocks(current_blocks))
        logger.debug("history_undo", undo_depth=len(self._undo_stack), redo_depth=len(self._redo_stack))
        return previous

    def redo(self, current_blocks: list[Block]) -> Optional[list[Block]]:
        """
        Pop the most recently undone snapshot, saving the current state for undo.

        Args:
            current_blocks: Block list as it is right now

        Returns:
            Snapshot to install, or None when there is nothing to redo
        """
        if not self._redo_stack:
            return None

        following = self._redo_stack.pop()
        self._undo_stack.append(copy_blocks(current_blocks))
        logger.debug("history_redo", undo_depth=len(self._undo_stack), redo_depth=len(self._redo_stack))
        return following

    @contextmanager
    def replaying(self) -> Iterator[None]:
        """Mark a snapshot installation so it is not recorded."""
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = False

    def clear(self) -> None:
        """Drop both stacks."""
        self._undo_stack.clear()
        self._redo_stack.clear()
