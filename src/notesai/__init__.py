"""notesai - block-based document editing engine.

The engine represents a note as an ordered list of typed blocks and
provides the mutation, history, outline and autosave machinery an editor
front-end needs.

Example:
    >>> from notesai.models.document import Document
    >>> from notesai.editor.editor import BlockEditor
    >>> editor = BlockEditor(Document.new("Groceries"))
    >>> first = editor.store.blocks[0].id
    >>> new_id = editor.handle_enter(first)
"""

__version__ = "0.1.0"
