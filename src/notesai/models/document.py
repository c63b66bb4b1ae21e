"""Document model and its persisted wire shape."""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from notesai.models.block import Block, copy_blocks
from notesai.services.exceptions import SerializationError
from notesai.utils.ids import generate_document_id


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """A note: a title plus an ordered, never-empty list of blocks.

    ``metadata`` is opaque to the editing engine (the companion chat
    history lives there, for example) and is round-tripped untouched.
    """

    id: str = Field(default_factory=generate_document_id)

    title: str = Field(default="Untitled")

    blocks: list[Block] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": False, "populate_by_name": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def new(
        cls,
        title: str = "Untitled",
        blocks: Optional[list[Block]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "Document":
        """
        Create a document, seeding one empty text block if none are given.

        Args:
            title: Document title
            blocks: Initial blocks (empty or None -> one empty text block)
            metadata: Opaque metadata map

        Returns:
            New Document with matching created/updated timestamps
        """
        now = utc_now()
        return cls(
            title=title or "Untitled",
            blocks=list(blocks) if blocks else [Block()],
            created_at=now,
            updated_at=now,
            metadata=metadata or {},
        )

    def snapshot(self) -> "Document":
        """Deep copy, safe to hand to a save running concurrently with edits."""
        return self.model_copy(
            update={"blocks": copy_blocks(self.blocks)},
            deep=True,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape with ISO-8601 timestamps."""
        return {
            "id": self.id,
            "title": self.title,
            "blocks": [block.to_dict() for block in self.blocks],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "metadata": self.metadata,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<memory>") -> "Document":
        """
        Rehydrate a document from its wire shape.

        Args:
            data: Parsed JSON object
            source: Where the data came from, used in error messages

        Returns:
            Validated Document

        Raises:
            SerializationError: If the data does not describe a valid document
        """
        if not isinstance(data, dict):
            raise SerializationError(source, "Document data must be a JSON object")
        try:
            document = cls.model_validate(data)
        except ValidationError as e:
            raise SerializationError(source, f"Invalid document data ({e.error_count()} errors)") from e
        if not document.blocks:
            raise SerializationError(source, "Document has no blocks")
        return document

    @classmethod
    def from_json(cls, text: str, source: str = "<memory>") -> "Document":
        """
        Parse a document from a JSON string.

        Raises:
            SerializationError: If the text is not valid JSON or not a valid document
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(source, f"Invalid JSON: {e.msg}") from e
        return cls.from_dict(data, source=source)
