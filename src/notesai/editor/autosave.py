"""Trailing-debounce autosave around a persistence collaborator.

Every change marks the document dirty and restarts a quiet-period
timer; the save runs only once edits stop for ``delay`` seconds. A long
uninterrupted burst of edits is therefore not persisted until it ends.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from notesai.models.document import Document
from notesai.services.exceptions import SaveFailed

logger = structlog.get_logger()

SaveCallback = Callable[[Document], Union[None, Awaitable[Any], Any]]
ErrorCallback = Callable[[SaveFailed], None]

DEFAULT_AUTOSAVE_DELAY = 1.5


class AutosaveScheduler:
    """
    Debounces saves of one document.

    The document handed to ``save`` is a snapshot taken at dispatch time,
    so edits made while a save is in flight never leak into it. In-flight
    saves are not cancelled; a later save simply writes a newer snapshot.

    Timers need a running asyncio loop. Without one, changes only mark the
    document dirty and the caller is expected to call save_now().

    Example:
        >>> scheduler = AutosaveScheduler(store.save, editor.document, delay=1.5)
        >>> scheduler.notify_change()      # starts the 1.5s timer
        >>> scheduler.notify_change()      # restarts it
        >>> await scheduler.save_now()     # saves immediately, timer cancelled
    """

    def __init__(
        self,
        save: Optional[SaveCallback],
        get_document: Callable[[], Document],
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            save: Persistence collaborator (sync or async); None disables
                  timed saves and only tracks the dirty flag
            get_document: Returns a snapshot of the document to persist
            delay: Quiet period in seconds before a timed save
            on_error: Called with SaveFailed when a timed save fails
        """
        self.save = save
        self.get_document = get_document
        self.delay = delay
        self.on_error = on_error

        self.dirty = False
        self.last_error: Optional[SaveFailed] = None
        self.save_count = 0

        self._generation = 0
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """Whether a debounce timer is running."""
        return self._timer is not None and not self._timer.done()

    def notify_change(self) -> None:
        """Mark dirty and (re)start the debounce timer."""
        self.dirty = True
        self._generation += 1

        if self.save is None:
            return

        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("autosave_no_event_loop", generation=self._generation)
            return

        self._timer = loop.create_task(self._wait_and_save())

    async def _wait_and_save(self) -> None:
        await asyncio.sleep(self.delay)

        # Detach from the timer slot so a new change can't cancel the save itself
        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        if task is not None:
            self._in_flight.add(task)
        try:
            await self._save()
        except SaveFailed as e:
            if self.on_error is not None:
                self.on_error(e)
        finally:
            if task is not None:
                self._in_flight.discard(task)

    async def _save(self) -> None:
        if self.save is None:
            return

        generation = self._generation
        document = self.get_document()
        try:
            result = self.save(document)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            error = SaveFailed(document.id, e)
            self.last_error = error
            logger.error(
                "autosave_failed",
                document_id=document.id,
                error=str(e),
            )
            raise error from e

        self.save_count += 1
        self.last_error = None
        # Changes that arrived while saving keep the document dirty
        if generation == self._generation:
            self.dirty = False

        logger.info(
            "autosave_completed",
            document_id=document.id,
            block_count=len(document.blocks),
            still_dirty=self.dirty,
        )

    async def save_now(self) -> None:
        """
        Save immediately, cancelling any pending timer.

        Raises:
            SaveFailed: If the collaborator fails; the document stays dirty
        """
        self._cancel_timer()
        await self._save()

    async def flush(self) -> None:
        """Save if there are unsaved changes."""
        if self.dirty:
            await self.save_now()

    async def wait_idle(self) -> None:
        """Wait for any pending timer and in-flight saves to finish."""
        tasks = [t for t in (self._timer, *self._in_flight) if t is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        """Cancel the pending timer without saving."""
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
            logger.debug("autosave_timer_reset")
        self._timer = None
