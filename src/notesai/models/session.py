"""EditorSession model: per-session editor state that is never persisted."""

from pydantic import BaseModel, Field
from typing import Optional


class EditorSession(BaseModel):
    """Focus, collapse and drag state for one open document.

    Undo/redo stacks live in the HistoryManager and the dirty flag in the
    AutosaveScheduler; both are discarded together with this object when
    the session ends.
    """

    document_id: str = Field(
        ...,
        description="Document being edited"
    )

    active_block_id: Optional[str] = Field(
        default=None,
        description="Block that currently has input focus"
    )

    collapsed_heading_ids: set[str] = Field(
        default_factory=set,
        description="Headings whose sections are hidden"
    )

    dragged_block_id: Optional[str] = Field(
        default=None,
        description="Block being dragged, if a drag is in progress"
    )

    dragged_over_block_id: Optional[str] = Field(
        default=None,
        description="Block currently under the drag pointer"
    )

    model_config = {"frozen": False}  # Allow mutation during editing

    def clear_drag(self) -> None:
        """Forget any in-progress drag."""
        self.dragged_block_id = None
        self.dragged_over_block_id = None
