"""Mapping between logical document paths and physical storage paths."""

from pathlib import Path, PurePosixPath

from inkwell.domain.errors import InvalidPathError

# Priority order used when a logical path is resolved to a physical file
DOCUMENT_EXTENSIONS = (".md", ".txt", ".png", ".jpg", ".jpeg")
TEXT_EXTENSIONS = (".md", ".txt")
DEFAULT_EXTENSION = ".md"

MEDIA_TYPES = {
    ".md": "text/markdown",
    ".txt": "text/plain",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def decode_path(path: str) -> str:
    """Decode a URL path as sent by the editor.

    The editor replaces spaces with underscores. Percent escapes are already
    decoded by the router and are left alone.
    """
    return path.replace("_", " ")


def is_within(root: Path, path: Path) -> bool:
    """Check that ``path`` resolves to ``root`` or somewhere below it."""
    return path.resolve().is_relative_to(root.resolve())


def to_physical(root: Path, logical_path: str) -> Path:
    """Join a logical path onto the data root without adding an extension.

    Raises:
        InvalidPathError: If the path is empty, escapes the root, or targets a
            hidden top-level entry such as the trash root or the index file.
    """
    cleaned = logical_path.strip().strip("/")
    if not cleaned:
        raise InvalidPathError("Empty document path")

    parts = PurePosixPath(cleaned).parts
    if ".." in parts:
        raise InvalidPathError(f"Path escapes the storage root: {logical_path}")
    if parts[0].startswith("."):
        raise InvalidPathError(f"Path targets a reserved location: {logical_path}")

    physical = root.joinpath(*parts)
    if not is_within(root, physical):
        raise InvalidPathError(f"Path escapes the storage root: {logical_path}")
    return physical


def physical_candidates(root: Path, logical_path: str) -> list[Path]:
    """Candidate physical files for a logical path, in extension priority order."""
    base = to_physical(root, logical_path)
    return [base.with_name(base.name + ext) for ext in DOCUMENT_EXTENSIONS]


def resolve_document(root: Path, logical_path: str) -> Path | None:
    """Return the first existing candidate file for a logical path."""
    for candidate in physical_candidates(root, logical_path):
        if candidate.is_file():
            return candidate
    return None


def resolve_existing(root: Path, logical_path: str) -> Path | None:
    """Resolve a file or folder, trying the bare path before the extension candidates."""
    physical = to_physical(root, logical_path)
    if physical.exists():
        return physical
    return resolve_document(root, logical_path)


def split_extension(name: str) -> tuple[str, str]:
    extension = Path(name).suffix
    return name[: len(name) - len(extension)], extension


def comparison_key(name: str, is_dir: bool) -> str:
    """Name used for uniqueness checks: folders as-is, files without their extension."""
    if is_dir:
        return name
    return split_extension(name)[0]


def to_logical(root: Path, physical: Path, is_dir: bool) -> str:
    """Logical path of a physical entry below ``root``."""
    relative = physical.relative_to(root).as_posix()
    if is_dir:
        return relative
    return split_extension(relative)[0]


def is_text_document(path: Path) -> bool:
    return path.suffix.lower() in TEXT_EXTENSIONS


def media_type_for(path: Path) -> str:
    return MEDIA_TYPES.get(path.suffix.lower(), "text/plain")
