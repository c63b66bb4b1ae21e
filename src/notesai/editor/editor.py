"""BlockEditor: one editing session over a document.

Wires the Block Store, History Manager, Autosave Scheduler, Command
Palette, outline collapse and drag state together, and exposes explicit
dispatch functions for the keyboard and pointer input a front-end
receives. Cursor position is supplied by the caller as booleans; focus
changes are emitted as FocusRequested events.
"""

import functools
from typing import Any, Callable, Optional, TypeVar, Union

import structlog

from notesai.editor.autosave import AutosaveScheduler, ErrorCallback, SaveCallback
from notesai.editor.block_store import BlockStore
from notesai.editor.events import FocusListener, FocusRequested
from notesai.editor.history import HistoryManager
from notesai.editor.outline import toggle_collapsed, visible_blocks
from notesai.editor.palette import (
    CommandPalette,
    PaletteEntry,
    Point,
    Rect,
    Size,
    clamp_position,
    is_slash_trigger,
)
from notesai.editor.reorder import apply_drop
from notesai.models.block import Block, BlockType, copy_blocks
from notesai.models.config import Configuration
from notesai.models.document import Document, utc_now
from notesai.models.session import EditorSession
from notesai.services.exceptions import BlockNotFound

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def recover_missing_block(method: F) -> F:
    """Turn BlockNotFound into a logged no-op returning None."""

    @functools.wraps(method)
    def wrapper(self: "BlockEditor", *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except BlockNotFound as e:
            logger.warning(
                "block_not_found",
                operation=method.__name__,
                block_id=e.block_id,
                document_id=self.session.document_id,
            )
            return None

    return wrapper  # type: ignore[return-value]


def editable(method: F) -> F:
    """Ignore the call entirely in read-only mode."""

    @functools.wraps(method)
    def wrapper(self: "BlockEditor", *args: Any, **kwargs: Any) -> Any:
        if self.read_only:
            logger.debug("read_only_ignored", operation=method.__name__)
            return None
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class BlockEditor:
    """
    Editing session for a single document.

    Example:
        >>> editor = BlockEditor(document, save=store.save)
        >>> editor.on_focus(lambda event: print(event.block_id))
        >>> new_id = editor.handle_enter(document.blocks[0].id)
        >>> editor.handle_undo()
        True
    """

    def __init__(
        self,
        document: Document,
        save: Optional[SaveCallback] = None,
        config: Optional[Configuration] = None,
        read_only: bool = False,
        on_save_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Start a session.

        Args:
            document: Loaded document; its blocks are copied into the store
            save: Persistence collaborator for autosave and manual save
            config: Editor and palette settings (defaults if None)
            read_only: Ignore every mutating dispatch
            on_save_error: Called when a timed autosave fails
        """
        self.config = config or Configuration()
        self.read_only = read_only

        self._title = document.title
        self._metadata = dict(document.metadata)
        self._document_id = document.id
        self._created_at = document.created_at

        self.history = HistoryManager(limit=self.config.editor.history_limit)
        self.store = BlockStore(
            copy_blocks(document.blocks),
            history=self.history,
            on_change=self._on_store_change,
        )
        self.session = EditorSession(document_id=document.id)
        self.palette = CommandPalette()
        self.autosave = AutosaveScheduler(
            save,
            self.document,
            delay=self.config.editor.autosave_delay,
            on_error=on_save_error,
        )
        self._focus_listeners: list[FocusListener] = []

        logger.info("editor_opened", document_id=document.id, block_count=len(self.store))

    # State

    @property
    def title(self) -> str:
        return self._title

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    @property
    def blocks(self) -> tuple[Block, ...]:
        return self.store.blocks

    @property
    def active_block_id(self) -> Optional[str]:
        return self.session.active_block_id

    @property
    def dirty(self) -> bool:
        return self.autosave.dirty

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def document(self) -> Document:
        """Snapshot of the document as currently edited."""
        return Document(
            id=self._document_id,
            title=self._title,
            blocks=self.store.snapshot(),
            created_at=self._created_at,
            updated_at=utc_now(),
            metadata=dict(self._metadata),
        ).snapshot()

    def _on_store_change(self, operation: str) -> None:
        self.autosave.notify_change()

    # Focus

    def on_focus(self, listener: FocusListener) -> None:
        """Subscribe to FocusRequested events."""
        self._focus_listeners.append(listener)

    def _request_focus(self, block_id: Optional[str], reason: str) -> None:
        if block_id is None:
            return
        self.session.active_block_id = block_id
        event = FocusRequested(block_id=block_id, reason=reason)
        for listener in list(self._focus_listeners):
            listener(event)

    def set_active_block(self, block_id: Optional[str]) -> None:
        """Record focus changes made by the user (click, tab) without emitting."""
        self.session.active_block_id = block_id

    # Keyboard dispatch

    @editable
    @recover_missing_block
    def handle_enter(self, block_id: str, shift: bool = False) -> Optional[str]:
        """
        Enter: insert an empty text block below and focus it.

        Shift+Enter is left to the rendering layer (line break inside the block).

        Returns:
            Id of the new block, or None if nothing was inserted
        """
        if shift:
            return None
        new_id = self.store.insert_after(block_id)
        self._request_focus(new_id, "insert")
        return new_id

    @editable
    @recover_missing_block
    def handle_backspace(self, block_id: str, at_start: bool = False) -> bool:
        """
        Backspace: delete the block when it is empty or the cursor is at position 0.

        Args:
            block_id: Block receiving the key
            at_start: Cursor is at position 0 of the block's content

        Returns:
            True if the key was consumed (the rendering layer should not
            apply its default behaviour), even when the deletion was
            refused because it is the only block
        """
        block = self.store.get(block_id)
        if block.content != "" and not at_start:
            return False
        self.delete_block(block_id)
        return True

    @recover_missing_block
    def handle_arrow_up(self, block_id: str, at_start: bool = True) -> Optional[str]:
        """
        ArrowUp at the start of a block: focus the previous visible block.

        Returns:
            Id of the newly focused block, or None if focus stays
        """
        if not at_start:
            return None
        return self._focus_neighbour(block_id, -1)

    @recover_missing_block
    def handle_arrow_down(self, block_id: str, at_end: bool = True) -> Optional[str]:
        """
        ArrowDown at the end of a block: focus the next visible block.

        Returns:
            Id of the newly focused block, or None if focus stays
        """
        if not at_end:
            return None
        return self._focus_neighbour(block_id, 1)

    def _focus_neighbour(self, block_id: str, step: int) -> Optional[str]:
        self.store.index_of(block_id)
        shown = [block.id for block in self.visible_blocks()]
        if block_id not in shown:
            return None
        index = shown.index(block_id) + step
        if not 0 <= index < len(shown):
            return None
        self._request_focus(shown[index], "navigate")
        return shown[index]

    @editable
    @recover_missing_block
    def handle_key_up(self, block_id: str, key: str, anchor: Optional[Rect] = None) -> bool:
        """
        Key-up hook: typing ``/`` into an otherwise empty block opens the palette.

        The slash is removed from the block. Text typed after it (``/head``)
        never reaches this trigger, so it does not pre-filter the palette.

        Args:
            block_id: Block receiving the key
            key: Key that was released
            anchor: Screen rectangle of the block, for palette placement

        Returns:
            True if the palette was opened
        """
        block = self.store.get(block_id)
        if not is_slash_trigger(key, block.content):
            return False
        self.open_palette(block_id, anchor)
        self.store.update(block_id, content="")
        return True

    async def handle_shortcut(
        self,
        key: str,
        ctrl: bool = False,
        meta: bool = False,
        shift: bool = False,
    ) -> bool:
        """
        Global shortcuts: Ctrl/Cmd+Z undo, Ctrl/Cmd+Shift+Z or Ctrl/Cmd+Y redo,
        Ctrl/Cmd+S manual save.

        Returns:
            True if the key combination was handled
        """
        if not (ctrl or meta):
            return False
        key = key.lower()
        if key == "z":
            if shift:
                self.handle_redo()
            else:
                self.handle_undo()
            return True
        if key == "y":
            self.handle_redo()
            return True
        if key == "s":
            await self.handle_save()
            return True
        return False

    @editable
    def handle_undo(self) -> bool:
        """Restore the state before the most recent mutation. No-op when empty."""
        previous = self.history.undo(list(self.store.blocks))
        if previous is None:
            return False
        self._install(previous)
        logger.info("undo", document_id=self.session.document_id, undo_depth=self.history.undo_depth)
        return True

    @editable
    def handle_redo(self) -> bool:
        """Re-apply the most recently undone mutation. No-op when empty."""
        following = self.history.redo(list(self.store.blocks))
        if following is None:
            return False
        self._install(following)
        logger.info("redo", document_id=self.session.document_id, redo_depth=self.history.redo_depth)
        return True

    def _install(self, blocks: list[Block]) -> None:
        with self.history.replaying():
            self.store.replace_all(blocks)
        if self.session.active_block_id not in self.store:
            self.session.active_block_id = None

    async def handle_save(self) -> None:
        """
        Manual save: bypass the debounce and save now.

        Raises:
            SaveFailed: If the persistence collaborator fails
        """
        if self.read_only:
            return
        await self.autosave.save_now()
        logger.info("manual_save", document_id=self.session.document_id)

    # Block actions

    @editable
    @recover_missing_block
    def add_block_to_end(self, type: Union[BlockType, str] = BlockType.TEXT) -> Optional[str]:
        """Append a block after the last one and focus it."""
        new_id = self.store.insert_after(self.store.blocks[-1].id, type)
        self._request_focus(new_id, "insert")
        return new_id

    @editable
    @recover_missing_block
    def insert_block_after(
        self,
        anchor_id: str,
        type: Union[BlockType, str] = BlockType.TEXT,
        properties: Optional[dict[str, Any]] = None,
        content: str = "",
    ) -> Optional[str]:
        """Insert a block after anchor_id and focus it."""
        new_id = self.store.insert_after(anchor_id, type, properties, content)
        self._request_focus(new_id, "insert")
        return new_id

    @editable
    @recover_missing_block
    def delete_block(self, block_id: str) -> Optional[str]:
        """
        Delete a block and focus its neighbour.

        Returns:
            Id of the focused block, or None if the deletion was refused
        """
        focus_id = self.store.delete(block_id)
        if focus_id is None:
            return None
        if self.session.active_block_id == block_id:
            self.session.active_block_id = None
        self.session.collapsed_heading_ids.discard(block_id)
        self._request_focus(focus_id, "delete")
        return focus_id

    @editable
    @recover_missing_block
    def duplicate_block(self, block_id: str) -> Optional[str]:
        """Duplicate a block and focus the copy."""
        copy_id = self.store.duplicate(block_id)
        self._request_focus(copy_id, "duplicate")
        return copy_id

    @editable
    @recover_missing_block
    def move_block_up(self, block_id: str) -> bool:
        return self.store.move_up(block_id)

    @editable
    @recover_missing_block
    def move_block_down(self, block_id: str) -> bool:
        return self.store.move_down(block_id)

    @editable
    @recover_missing_block
    def change_block_type(
        self,
        block_id: str,
        new_type: Union[BlockType, str],
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        """Convert a block, replacing its properties, and keep focus on it."""
        self.store.change_type(block_id, new_type, properties)
        self._request_focus(block_id, "change_type")

    @editable
    @recover_missing_block
    def update_content(self, block_id: str, content: str) -> None:
        """Replace a block's text content (one undo step per call)."""
        if self.store.get(block_id).content == content:
            return
        self.store.update(block_id, content=content)

    @editable
    @recover_missing_block
    def toggle_todo(self, block_id: str) -> Optional[bool]:
        """
        Flip a todo's checked flag, keeping its other properties.

        Returns:
            New checked state, or None if the block is not a todo
        """
        block = self.store.get(block_id)
        if block.type != BlockType.TODO:
            return None
        properties = dict(block.properties or {})
        properties["checked"] = not properties.get("checked", False)
        self.store.update(block_id, properties=properties)
        return properties["checked"]

    @editable
    @recover_missing_block
    def set_code_language(self, block_id: str, language: str) -> None:
        """Set a code block's language, keeping its other properties."""
        block = self.store.get(block_id)
        if block.type != BlockType.CODE:
            return
        properties = dict(block.properties or {})
        properties["language"] = language
        self.store.update(block_id, properties=properties)

    @editable
    def set_title(self, title: str) -> None:
        """Rename the document. Titles are saved but not part of undo history."""
        if title == self._title:
            return
        self._title = title
        self.autosave.notify_change()

    @editable
    def update_metadata(self, **values: Any) -> None:
        """Merge keys into the document's opaque metadata map."""
        self._metadata.update(values)
        self.autosave.notify_change()

    # Command palette

    @editable
    @recover_missing_block
    def open_palette(self, block_id: str, anchor: Optional[Rect] = None) -> None:
        """Open the palette targeting a block (also used by "Change block type")."""
        self.store.index_of(block_id)
        self.palette.open(block_id, anchor)

    def close_palette(self) -> None:
        self.palette.close()

    def palette_position(self, viewport: Size, menu_size: Optional[Size] = None) -> Optional[Point]:
        """Top-left corner for the open palette, clamped to the viewport."""
        if not self.palette.is_open or self.palette.anchor is None:
            return None
        settings = self.config.palette
        return clamp_position(
            self.palette.anchor,
            menu_size,
            viewport,
            margin=settings.edge_margin,
            fallback_size=Size(settings.menu_width, settings.menu_height),
        )

    def palette_key(self, key: str) -> Optional[str]:
        """
        Route a key to the open palette; Enter commits the selection.

        Returns:
            Id of the converted block when an entry was committed
        """
        target_id = self.palette.target_block_id
        entry = self.palette.handle_key(key)
        if entry is None or target_id is None:
            return None
        return self._apply_palette_entry(target_id, entry)

    def select_palette_entry(self, entry: PaletteEntry) -> Optional[str]:
        """Commit an entry chosen with the pointer."""
        target_id = self.palette.target_block_id
        self.palette.close()
        if target_id is None:
            return None
        return self._apply_palette_entry(target_id, entry)

    def _apply_palette_entry(self, target_id: str, entry: PaletteEntry) -> Optional[str]:
        if target_id not in self.store:
            logger.warning("block_not_found", operation="palette_commit", block_id=target_id)
            return None
        self.change_block_type(target_id, entry.type, entry.properties)
        logger.info("palette_committed", block_id=target_id, type=entry.type.value, label=entry.label)
        return target_id

    # Outline collapse

    @recover_missing_block
    def toggle_collapse(self, heading_id: str) -> bool:
        """
        Collapse or expand a heading's section. Not an edit: no history, not dirty.

        Returns:
            True if the heading is now collapsed
        """
        self.store.index_of(heading_id)
        self.session.collapsed_heading_ids = toggle_collapsed(
            self.session.collapsed_heading_ids, heading_id
        )
        collapsed = heading_id in self.session.collapsed_heading_ids
        logger.debug("collapse_toggled", block_id=heading_id, collapsed=collapsed)
        return collapsed

    def visible_blocks(self) -> list[Block]:
        """Blocks to render with the current collapse state."""
        return visible_blocks(self.store.blocks, self.session.collapsed_heading_ids)

    # Drag and drop

    @editable
    @recover_missing_block
    def drag_start(self, block_id: str) -> None:
        self.store.index_of(block_id)
        self.session.dragged_block_id = block_id
        self.session.dragged_over_block_id = None

    def drag_over(self, block_id: str) -> bool:
        """
        Track the block under the pointer.

        Returns:
            True if the block is a valid drop target
        """
        if self.read_only or self.session.dragged_block_id is None:
            return False
        if block_id == self.session.dragged_block_id:
            return False
        self.session.dragged_over_block_id = block_id
        return True

    @editable
    def drop(self, target_id: str, past_midpoint: bool) -> bool:
        """
        Drop the dragged block on target_id. Drag state is always cleared.

        Args:
            target_id: Block under the pointer at release
            past_midpoint: Pointer is below the target's vertical midpoint

        Returns:
            True if the block moved
        """
        source_id = self.session.dragged_block_id
        self.session.clear_drag()
        if source_id is None:
            return False
        moved = apply_drop(self.store, source_id, target_id, past_midpoint)
        if moved:
            logger.debug("block_dropped", block_id=source_id, target=target_id, past_midpoint=past_midpoint)
        return moved

    def drag_end(self) -> None:
        self.session.clear_drag()

    # Lifecycle

    async def close(self) -> None:
        """Flush unsaved changes, stop the autosave timer and wait for saves in flight."""
        try:
            if not self.read_only:
                await self.autosave.flush()
        finally:
            self.autosave.close()
            await self.autosave.wait_idle()
        logger.info("editor_closed", document_id=self.session.document_id)
