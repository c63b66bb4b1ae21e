"""End-to-end editing session against the JSON document store."""

import asyncio

import pytest

from notesai.editor.editor import BlockEditor
from notesai.models.block import BlockType
from notesai.models.config import Configuration, EditorConfig
from notesai.services.document_store import DocumentStore


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "data")


@pytest.fixture
def config():
    return Configuration(editor=EditorConfig(autosave_delay=0.05))


class TestEditingWorkflow:
    """An editing session autosaves through the store and reloads intact."""

    @pytest.mark.asyncio
    async def test_autosave_persists_edits(self, store, config):
        document = store.create("Plans")
        editor = BlockEditor(document, save=store.save, config=config)
        first = editor.blocks[0].id

        editor.update_content(first, "Weekend")
        editor.change_block_type(first, BlockType.HEADING, {"level": 1})
        todo = editor.insert_block_after(first, BlockType.TODO, {"checked": False}, "Book hut")
        editor.toggle_todo(todo)

        await asyncio.sleep(0.2)

        reloaded = store.load(document.id)
        assert [b.type for b in reloaded.blocks] == [BlockType.HEADING, BlockType.TODO]
        assert reloaded.blocks[1].properties == {"checked": True}
        assert not editor.dirty
        await editor.close()

    @pytest.mark.asyncio
    async def test_slash_menu_session(self, store, config):
        document = store.create("Snippets")
        editor = BlockEditor(document, save=store.save, config=config)
        new_id = editor.handle_enter(editor.blocks[0].id)
        editor.update_content(new_id, "/")
        editor.handle_key_up(new_id, "/")
        editor.palette.set_query("code")
        editor.palette_key("Enter")
        editor.set_code_language(new_id, "python")
        editor.update_content(new_id, "print('hi')")

        await editor.close()

        block = store.load(document.id).blocks[1]
        assert block.type == BlockType.CODE
        assert block.properties == {"language": "python"}
        assert block.content == "print('hi')"

    @pytest.mark.asyncio
    async def test_undo_after_reload_starts_fresh(self, store, config):
        document = store.create("Fresh")
        editor = BlockEditor(document, save=store.save, config=config)
        editor.add_block_to_end()
        await editor.close()

        reopened = BlockEditor(store.load(document.id), save=store.save, config=config)

        assert len(reopened.blocks) == 2
        assert not reopened.can_undo
        await reopened.close()
