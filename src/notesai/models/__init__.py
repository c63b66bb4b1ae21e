"""Pydantic data models for notesai."""

from notesai.models.block import Block, BlockType
from notesai.models.document import Document
from notesai.models.session import EditorSession

__all__ = ["Block", "BlockType", "Document", "EditorSession"]
