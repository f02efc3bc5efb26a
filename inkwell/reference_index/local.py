import copy
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from inkwell.domain.errors import StorageError
from inkwell.domain.references import ReferenceMap
from inkwell.indexing import extract_references
from inkwell.reference_index.base import ReferenceIndex


def _rewrite_path(path: str, old_path: str, new_path: str, is_folder: bool) -> str:
    if path == old_path:
        return new_path
    if is_folder and path.startswith(old_path + "/"):
        return new_path + path[len(old_path) :]
    return path


class LocalReferenceIndex(ReferenceIndex):
    """Backlink index held in memory and persisted wholesale to a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalReferenceIndex.

        Args:
            filepath: Path to the index file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates an empty index in memory only.

        Raises:
            StorageError: If the index file exists but cannot be read or parsed.
        """
        self._filepath = str(filepath) if filepath else None
        self._references: dict[str, list[str]] = {}

        if self._filepath and Path(self._filepath).exists():
            try:
                raw = Path(self._filepath).read_text(encoding="utf-8")
                if raw.strip():
                    self._references = ReferenceMap.model_validate_json(raw).root
            except (OSError, ValidationError) as e:
                raise StorageError(f"Could not load reference index {self._filepath}: {e}") from e

    @classmethod
    def from_data(cls, references: dict[str, list[str]]) -> "LocalReferenceIndex":
        """Create an in-memory index from provided data (useful for testing)."""
        instance = cls(filepath=None)
        instance._references = copy.deepcopy(references)
        return instance

    def _purge_source(self, source_path: str) -> None:
        for target in list(self._references):
            sources = [s for s in self._references[target] if s != source_path]
            if sources:
                self._references[target] = sources
            else:
                del self._references[target]

    def record_save(self, source_path: str, content: str) -> None:
        """Rebuild the outgoing references of a document from its content.

        Stale entries from a previous save of the same document are purged
        before the freshly extracted targets are added.
        """
        self._purge_source(source_path)
        for target in extract_references(content):
            sources = self._references.setdefault(target, [])
            if source_path not in sources:
                sources.append(source_path)
        logger.debug(f"Indexed references of {source_path}")

    def record_delete(self, source_path: str) -> None:
        """Forget a document as a source and drop its own backlinks entry.

        Documents that still mention the deleted one are not re-read: if it
        comes back, its backlinks only reappear as those documents are saved.
        """
        self._purge_source(source_path)
        self._references.pop(source_path, None)

    def record_rename(self, old_path: str, new_path: str, is_folder: bool) -> None:
        """Rewrite every key and source affected by a rename or move.

        For folders every path equal to ``old_path`` or below it is rewritten;
        for files only exact matches are. A rewritten key that lands on an
        existing key is merged into it.
        """
        renamed: dict[str, list[str]] = {}
        for target, sources in self._references.items():
            merged = renamed.setdefault(_rewrite_path(target, old_path, new_path, is_folder), [])
            for source in sources:
                rewritten = _rewrite_path(source, old_path, new_path, is_folder)
                if rewritten not in merged:
                    merged.append(rewritten)
        self._references = renamed

    def backlinks_of(self, target_path: str) -> list[str]:
        return list(self._references.get(target_path, []))

    def snapshot(self) -> dict[str, list[str]]:
        return copy.deepcopy(self._references)

    def save(self, filepath: str | None = None) -> None:
        """Save the index to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.

        Raises:
            StorageError: If the file cannot be written.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        try:
            Path(save_path).write_text(
                ReferenceMap(self._references).model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise StorageError(f"Could not save reference index {save_path}: {e}") from e
