"""JSON-file document store.

One ``<id>.json`` file per document plus an ``index.json`` listing
document ids newest-first. This is the persistence and load collaborator
for the editor: BlockEditor(save=store.save) wires it to autosave.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import structlog

from notesai.models.block import Block
from notesai.models.document import Document, utc_now
from notesai.services.exceptions import DocumentNotFound, SerializationError

logger = structlog.get_logger()

INDEX_FILE = "index.json"


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to temporary file in the same directory
    2. fsync to ensure data is on disk
    3. Atomic rename to replace original file

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
        PermissionError: On permission errors
    """
    # Same directory keeps the rename on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding="utf-8")

        with open(temp_path, "r+", encoding="utf-8") as f:
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

        logger.debug("atomic_write_success", path=str(path), size=len(content))

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


class DocumentStore:
    """
    Documents persisted as JSON files under a data directory.

    Saves are last-writer-wins on ``updated_at``: a snapshot older than
    the copy already on disk is skipped, so overlapping autosaves that
    complete out of order never roll a document back.

    Example:
        >>> store = DocumentStore(Path("~/.local/share/notesai").expanduser())
        >>> doc = store.create("Meeting notes")
        >>> store.load(doc.id).title
        'Meeting notes'
    """

    def __init__(self, data_dir: Path) -> None:
        """
        Initialize the store, creating the data directory if needed.

        Args:
            data_dir: Directory for index.json and document files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.index_path = self.data_dir / INDEX_FILE

    def document_path(self, document_id: str) -> Path:
        """Path of a document's JSON file."""
        if not document_id or "/" in document_id or document_id.startswith("."):
            raise ValueError(f"Invalid document id: {document_id!r}")
        return self.data_dir / f"{document_id}.json"

    # Index

    def _read_index(self) -> list[str]:
        if not self.index_path.exists():
            return []
        try:
            ids = json.loads(self.index_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SerializationError(str(self.index_path), f"Invalid document index: {e.msg}") from e
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            raise SerializationError(str(self.index_path), "Document index must be a list of ids")
        return ids

    def _write_index(self, ids: list[str]) -> None:
        atomic_write(self.index_path, json.dumps(ids, indent=2))

    def document_ids(self) -> list[str]:
        """Ids of all documents, newest first."""
        return self._read_index()

    # Documents

    def list_documents(self) -> list[Document]:
        """
        Load every indexed document.

        Documents that are missing or corrupt are logged and skipped so one
        bad file doesn't hide the rest.

        Returns:
            Documents in index order (newest first)
        """
        documents = []
        for document_id in self._read_index():
            try:
                documents.append(self.load(document_id))
            except (DocumentNotFound, SerializationError) as e:
                logger.error("document_list_skip", document_id=document_id, error=str(e))
        return documents

    def load(self, document_id: str) -> Document:
        """
        Load one document.

        Raises:
            DocumentNotFound: If the document file doesn't exist
            SerializationError: If the file is not a valid document
        """
        path = self.document_path(document_id)
        if not path.exists():
            raise DocumentNotFound(document_id)

        document = Document.from_json(path.read_text(encoding="utf-8"), source=str(path))
        logger.info("document_loaded", document_id=document.id, block_count=len(document.blocks))
        return document

    def create(
        self,
        title: str = "Untitled",
        blocks: Optional[list[Block]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Document:
        """
        Create and persist a new document at the front of the index.

        Returns:
            The new document (one empty text block if no blocks given)
        """
        document = Document.new(title, blocks=blocks, metadata=metadata)
        atomic_write(self.document_path(document.id), document.to_json())

        ids = [i for i in self._read_index() if i != document.id]
        ids.insert(0, document.id)
        self._write_index(ids)

        logger.info("document_created", document_id=document.id, title=document.title)
        return document

    def save(self, document: Document) -> bool:
        """
        Persist an existing document, stamping its ``updated_at``.

        The staleness check uses the ``updated_at`` the document arrives
        with. When written, ``document.updated_at`` is set to the save
        time (never earlier than the incoming stamp) and the caller's
        object carries the new value.

        Args:
            document: Snapshot to write

        Returns:
            True if written, False if skipped because the on-disk copy is newer

        Raises:
            DocumentNotFound: If the document was never created (or was deleted)
            OSError: On file I/O errors
        """
        path = self.document_path(document.id)
        if not path.exists():
            raise DocumentNotFound(document.id)

        try:
            existing = Document.from_json(path.read_text(encoding="utf-8"), source=str(path))
        except SerializationError as e:
            # A corrupt file on disk is overwritten by a good snapshot
            logger.warning("document_overwrite_corrupt", document_id=document.id, error=str(e))
            existing = None

        if existing is not None and existing.updated_at > document.updated_at:
            logger.warning(
                "stale_save_skipped",
                document_id=document.id,
                on_disk=existing.updated_at.isoformat(),
                incoming=document.updated_at.isoformat(),
            )
            return False

        document.updated_at = max(utc_now(), document.updated_at)
        atomic_write(path, document.to_json())
        logger.debug("document_saved", document_id=document.id, block_count=len(document.blocks))
        return True

    def delete(self, document_id: str) -> None:
        """
        Remove a document file and its index entry.

        Raises:
            DocumentNotFound: If the document is neither on disk nor indexed
        """
        path = self.document_path(document_id)
        ids = self._read_index()
        if not path.exists() and document_id not in ids:
            raise DocumentNotFound(document_id)

        if path.exists():
            path.unlink()
        self._write_index([i for i in ids if i != document_id])
        logger.info("document_deleted", document_id=document_id)
