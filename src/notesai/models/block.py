"""Block model: a single typed content unit within a document."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from notesai.utils.ids import generate_block_id


class BlockType(str, Enum):
    """Enum for block types."""

    TEXT = "text"
    HEADING = "heading"
    LIST = "list"
    TODO = "todo"
    CODE = "code"
    AUDIO = "audio"


HEADING_LEVELS = (1, 2, 3)


class Block(BaseModel):
    """A typed content block.

    ``properties`` carries type-specific attributes and is ``None`` when
    the type needs none:

    - heading: ``level`` (1-3)
    - list: ``ordered``
    - todo: ``checked``
    - code: ``language``
    - audio: ``audioUrl``, ``duration``
    """

    id: str = Field(
        default_factory=generate_block_id,
        description="Opaque identifier, stable for the block's lifetime"
    )

    type: BlockType = Field(
        default=BlockType.TEXT,
        description="Block type tag"
    )

    content: str = Field(
        default="",
        description="Text payload (a URI reference for audio blocks)"
    )

    properties: Optional[dict[str, Any]] = Field(
        default=None,
        description="Type-specific attributes"
    )

    model_config = {"frozen": False}  # Blocks are edited in place by the store

    @model_validator(mode="after")
    def validate_heading_level(self) -> "Block":
        """Reject heading levels outside 1-3."""
        if self.type == BlockType.HEADING and self.properties:
            level = self.properties.get("level")
            if level is not None and level not in HEADING_LEVELS:
                raise ValueError(f"Heading level must be 1, 2 or 3, got {level!r}")
        return self

    @property
    def heading_level(self) -> Optional[int]:
        """Heading level, defaulting to 1 when unset. None for non-headings."""
        if self.type != BlockType.HEADING:
            return None
        if self.properties and self.properties.get("level"):
            return int(self.properties["level"])
        return 1

    def deep_copy(self) -> "Block":
        """Return an independent copy with the same id."""
        return self.model_copy(deep=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{id, type, content, properties?}``."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
        }
        if self.properties is not None:
            data["properties"] = dict(self.properties)
        return data


def copy_blocks(blocks: list[Block]) -> list[Block]:
    """Deep-copy a block list (a history snapshot)."""
    return [block.deep_copy() for block in blocks]
