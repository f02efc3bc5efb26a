from typing import Protocol


class ReferenceIndex(Protocol):
    """Protocol for the backlink index: target path -> ordered source paths."""

    def record_save(self, source_path: str, content: str) -> None:
        """Rebuild the outgoing references of a document from its content."""
        ...

    def record_delete(self, source_path: str) -> None:
        """Forget a document as a source and as a target."""
        ...

    def record_rename(self, old_path: str, new_path: str, is_folder: bool) -> None:
        """Rewrite keys and sources after a rename or move."""
        ...

    def backlinks_of(self, target_path: str) -> list[str]:
        """Get the documents referencing a target, empty when there are none."""
        ...

    def snapshot(self) -> dict[str, list[str]]:
        """Get a copy of the whole index."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the index to disk."""
        ...
