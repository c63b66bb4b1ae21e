"""Unit tests for Pydantic models."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from notesai.models.block import Block, BlockType
from notesai.models.document import Document
from notesai.models.session import EditorSession
from notesai.services.exceptions import SerializationError


class TestBlock:
    """Tests for Block model."""

    def test_defaults(self):
        block = Block()
        assert block.type == BlockType.TEXT
        assert block.content == ""
        assert block.properties is None
        assert block.id

    def test_ids_are_unique(self):
        assert Block().id != Block().id

    def test_type_from_string(self):
        assert Block(type="todo").type == BlockType.TODO

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Block(type="table")

    def test_heading_level_validation(self):
        with pytest.raises(ValidationError):
            Block(type="heading", properties={"level": 4})

    def test_heading_level_defaults_to_one(self):
        assert Block(type="heading").heading_level == 1
        assert Block(type="heading", properties={"level": 3}).heading_level == 3
        assert Block(type="text").heading_level is None

    def test_deep_copy_is_independent(self):
        block = Block(type="todo", properties={"checked": False})
        copy = block.deep_copy()

        copy.properties["checked"] = True

        assert copy.id == block.id
        assert block.properties == {"checked": False}

    def test_to_dict_omits_missing_properties(self):
        assert Block(id="b1", content="hi").to_dict() == {"id": "b1", "type": "text", "content": "hi"}
        assert Block(id="b2", type="code", properties={"language": "go"}).to_dict()["properties"] == {
            "language": "go"
        }


class TestDocument:
    """Tests for Document model."""

    def test_new_seeds_one_empty_text_block(self):
        document = Document.new("Notes")

        assert len(document.blocks) == 1
        assert document.blocks[0].type == BlockType.TEXT
        assert document.blocks[0].content == ""
        assert document.created_at == document.updated_at

    def test_wire_shape(self):
        document = Document.new("Notes", [Block(id="b1", content="hi")], metadata={"chat": []})

        data = json.loads(document.to_json())

        assert set(data) == {"id", "title", "blocks", "createdAt", "updatedAt", "metadata"}
        assert data["blocks"] == [{"id": "b1", "type": "text", "content": "hi"}]
        assert data["metadata"] == {"chat": []}
        assert datetime.fromisoformat(data["createdAt"]) == document.created_at

    def test_json_round_trip(self):
        document = Document.new(
            "Notes",
            [
                Block(id="h", type="heading", content="Title", properties={"level": 2}),
                Block(id="t", type="todo", content="Task", properties={"checked": True}),
            ],
        )

        restored = Document.from_json(document.to_json())

        assert restored == document

    def test_naive_timestamps_are_utc(self):
        document = Document.from_dict({
            "id": "d1",
            "title": "Old",
            "blocks": [{"id": "b", "type": "text", "content": ""}],
            "createdAt": "2024-01-01T10:00:00",
            "updatedAt": "2024-01-01T10:00:00",
        })
        assert document.created_at.tzinfo == timezone.utc
        assert document.metadata == {}

    def test_snapshot_is_deep(self):
        document = Document.new("Notes", [Block(content="one")], metadata={"tags": ["a"]})
        snapshot = document.snapshot()

        document.blocks[0].content = "two"
        document.metadata["tags"].append("b")

        assert snapshot.blocks[0].content == "one"
        assert snapshot.metadata == {"tags": ["a"]}

    def test_invalid_json(self):
        with pytest.raises(SerializationError) as exc_info:
            Document.from_json("{not json", source="notes.json")
        assert exc_info.value.source == "notes.json"

    def test_not_an_object(self):
        with pytest.raises(SerializationError):
            Document.from_json("[1, 2, 3]")

    def test_missing_fields(self):
        with pytest.raises(SerializationError):
            Document.from_dict({"id": "d1", "blocks": [{"type": "nonsense"}]})

    def test_empty_block_list_rejected(self):
        with pytest.raises(SerializationError):
            Document.from_dict({"id": "d1", "title": "Empty", "blocks": []})


class TestEditorSession:
    def test_clear_drag(self):
        session = EditorSession(document_id="d1", dragged_block_id="a", dragged_over_block_id="b")
        session.clear_drag()
        assert session.dragged_block_id is None
        assert session.dragged_over_block_id is None
        assert session.collapsed_heading_ids == set()
