from pathlib import Path

from inkwell.document_store.base import DocumentStore
from inkwell.domain.errors import NotFoundError, StorageError


class LocalDocumentStore(DocumentStore):
    """Document store reading and writing files on the local disk."""

    def read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"Document {path} not found") from e
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def write(self, path: Path, content: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
