from typing import Protocol


class ActivityLog(Protocol):
    """Protocol for the user-visible activity log."""

    def record(self, message: str) -> None:
        """Append an entry. Must never raise into the caller."""
        ...

    def read(self) -> str:
        """Return the whole log, empty when nothing was recorded."""
        ...

    def clear(self) -> None:
        """Drop all entries."""
        ...
