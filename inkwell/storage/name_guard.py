"""Case-insensitive name uniqueness checks for a single directory."""

from pathlib import Path

from loguru import logger

from inkwell.domain.errors import StorageError

from .path_codec import comparison_key


def conflicts(directory: Path, name: str, exclude: Path | None = None) -> bool:
    """Check whether ``directory`` already holds an entry named ``name``.

    Folders are compared by their full name and files by their name without
    extension, both case-insensitively. The entry whose full path matches
    ``exclude`` (case-insensitively) is skipped, which lets an item be
    overwritten or renamed onto a differently-cased version of itself.

    Args:
        directory: Directory whose immediate children are checked
        name: Candidate base name, without extension
        exclude: Full path of an entry to ignore

    Returns:
        True if a conflicting entry exists. A missing directory never conflicts.

    Raises:
        StorageError: If the directory exists but cannot be listed.
    """
    try:
        children = list(directory.iterdir())
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageError(f"Could not list {directory}: {e}") from e

    wanted = name.casefold()
    excluded = str(exclude).casefold() if exclude is not None else None

    for child in children:
        if excluded is not None and str(child).casefold() == excluded:
            continue
        if comparison_key(child.name, child.is_dir()).casefold() == wanted:
            logger.debug(f"Name '{name}' conflicts with existing entry {child}")
            return True
    return False
