"""Markdown rendering of documents for export."""

import re

from notesai.models.block import Block, BlockType
from notesai.models.document import Document


def render_block(block: Block) -> str:
    """Render a single block with its trailing separator.

    List and todo items end with a single newline so consecutive items
    stay one list; everything else is a paragraph followed by a blank line.
    """
    properties = block.properties or {}

    if block.type == BlockType.HEADING:
        return f"{'#' * (block.heading_level or 1)} {block.content}\n\n"
    if block.type == BlockType.LIST:
        return f"- {block.content}\n"
    if block.type == BlockType.TODO:
        mark = "x" if properties.get("checked") else " "
        return f"- [{mark}] {block.content}\n"
    if block.type == BlockType.CODE:
        language = properties.get("language") or ""
        return f"```{language}\n{block.content}\n```\n\n"
    return f"{block.content}\n\n"


def render_markdown(document: Document) -> str:
    """Render a document as Markdown, title first.

    Args:
        document: Document to render

    Returns:
        Markdown text
    """
    parts = [f"# {document.title}\n\n"]
    parts.extend(render_block(block) for block in document.blocks)
    return "".join(parts)


def export_filename(title: str) -> str:
    """File name for an exported document: non-alphanumerics become ``_``."""
    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() + ".md"
