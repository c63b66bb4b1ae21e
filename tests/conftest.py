"""Shared test fixtures for all test modules."""

import pytest

from notesai.editor.block_store import BlockStore
from notesai.editor.history import HistoryManager
from notesai.models.block import Block, BlockType
from notesai.utils.logging import reset_logging


def heading(block_id: str, level: int, content: str = "") -> Block:
    """Build a heading block."""
    return Block(id=block_id, type=BlockType.HEADING, content=content or block_id, properties={"level": level})


def text(block_id: str, content: str = "") -> Block:
    """Build a text block."""
    return Block(id=block_id, type=BlockType.TEXT, content=content or block_id)


@pytest.fixture
def three_blocks():
    """Blocks a, b, c in order."""
    return [text("a"), text("b"), text("c")]


@pytest.fixture
def store(three_blocks):
    """BlockStore over a, b, c with its own history."""
    return BlockStore(three_blocks, history=HistoryManager())


@pytest.fixture
def outline_blocks():
    """H1 A, x, H2 B, y, H1 C."""
    return [
        heading("A", 1),
        text("x"),
        heading("B", 2),
        text("y"),
        heading("C", 1),
    ]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Keep logs and default config paths out of the real home directory.

    Logging is reset afterwards so no test writes into another test's log file.
    """
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for name in ("NOTESAI_DATA_DIR", "NOTESAI_AUTOSAVE_DELAY", "NOTESAI_HISTORY_LIMIT", "NOTESAI_LOG_DIR", "NOTESAI_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield home
    reset_logging()
