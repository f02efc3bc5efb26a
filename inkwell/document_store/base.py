from pathlib import Path
from typing import Protocol


class DocumentStore(Protocol):
    """Protocol for raw document byte storage."""

    def read(self, path: Path) -> bytes:
        """Read the raw bytes of a physical file."""
        ...

    def write(self, path: Path, content: bytes) -> None:
        """Write raw bytes to a physical file, creating parent folders."""
        ...
