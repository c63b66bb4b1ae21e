"""Custom exceptions for notesai."""

from typing import Optional


class NotesAIError(Exception):
    """Base class for all notesai errors."""


class BlockNotFound(NotesAIError):
    """Raised when an operation references a block id that is not in the document.

    The editor treats this as recoverable: the operation becomes a no-op
    and a warning is logged. Callers using the Block Store directly see
    the exception.

    Attributes:
        block_id: The id that could not be resolved
    """

    def __init__(self, block_id: str):
        self.block_id = block_id
        super().__init__(f"Block not found: {block_id}")


class EmptyDocumentRejected(NotesAIError):
    """Raised when a deletion would leave a document with no blocks."""

    def __init__(self, block_id: str):
        self.block_id = block_id
        super().__init__(f"Refusing to delete the last block: {block_id}")


class DocumentNotFound(NotesAIError):
    """Raised when a document id is not present in the store."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class SaveFailed(NotesAIError):
    """Raised when the persistence collaborator could not save a document.

    The document stays dirty so the next autosave cycle retries.

    Attributes:
        document_id: Id of the document being saved
        cause: Underlying exception, if any
    """

    def __init__(self, document_id: str, cause: Optional[BaseException] = None):
        self.document_id = document_id
        self.cause = cause
        message = f"Failed to save document: {document_id}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class SerializationError(NotesAIError):
    """Raised when persisted document data is malformed.

    No partial recovery is attempted; the caller decides what to do with
    a corrupt document.

    Attributes:
        source: Where the data came from (file path or document id)
        message: Human-readable error message
    """

    def __init__(self, source: str, message: str = "Malformed document data"):
        self.source = source
        self.message = message
        super().__init__(f"{message}: {source}")
