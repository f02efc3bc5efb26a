"""Batch resolution of case-insensitive name collisions across the document tree."""

from pathlib import Path
from typing import Iterable

from loguru import logger

from inkwell.activity_log.base import ActivityLog
from inkwell.domain.document import RenameOperation
from inkwell.domain.errors import InkwellError, InvalidPathError, StorageError
from inkwell.reference_index.base import ReferenceIndex

from .name_guard import conflicts
from .path_codec import comparison_key, resolve_document, split_extension, to_logical


class ConflictSweeper:
    """Walks the document tree and renames entries whose names collide.

    Entries of every directory are visited in lexical order of their physical
    names. The first entry to claim a case-insensitive name keeps it and every
    later entry with the same name is renamed with a ``-1``, ``-2``, ...
    suffix. The order is only a deterministic tie-break: it does not reflect
    which entry is older or more important.

    When a reference index is given, a renamed entry takes its index entries
    along, but only if it was the entry its logical path resolved to. A
    ``notes.txt`` renamed next to a ``notes.md`` leaves the index alone, since
    ``notes`` keeps resolving to the markdown file.
    """

    def __init__(
        self,
        root: Path,
        *,
        activity_log: ActivityLog,
        reference_index: ReferenceIndex | None = None,
        reserved_names: Iterable[str] = (),
    ):
        """Initialize the sweeper.

        Args:
            root: Data root holding the document tree
            activity_log: Sink receiving one entry per rename
            reference_index: Index to rewrite for renamed documents, not saved here
            reserved_names: Top-level entries to skip besides hidden ones
        """
        self.root = Path(root)
        self.activity_log = activity_log
        self.reference_index = reference_index
        self.reserved_names = set(reserved_names)

    def sweep(self) -> list[RenameOperation]:
        """Rename every colliding entry and report what was renamed.

        A rename that fails is logged and skipped; the remaining entries are
        still processed.

        Returns:
            Renames performed, with paths relative to the root

        Raises:
            StorageError: If the root itself cannot be listed.
        """
        operations: list[RenameOperation] = []
        self._sweep_directory(self.root, operations)
        logger.info(f"Conflict sweep finished: {len(operations)} items renamed")
        return operations

    def _is_skipped(self, name: str) -> bool:
        return name.startswith(".") or name in self.reserved_names

    def _sweep_directory(self, directory: Path, operations: list[RenameOperation]) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            if directory == self.root:
                raise StorageError(f"Could not list {directory}: {e}") from e
            logger.error(f"Skipping unreadable directory {directory}: {e}")
            return

        # lower-cased comparison key -> entry currently holding it
        occupied: dict[str, Path] = {}
        subdirectories = []

        for entry in entries:
            if directory == self.root and self._is_skipped(entry.name):
                continue

            is_dir = entry.is_dir()
            key = comparison_key(entry.name, is_dir).casefold()

            if key in occupied:
                logger.warning(
                    f"Conflict detected for name '{key}' in '{directory}'. "
                    f"Paths: {occupied[key]}, {entry}"
                )
                renamed = self._rename_loser(entry, is_dir, occupied, operations)
                if renamed is not None:
                    entry = renamed
            else:
                occupied[key] = entry

            if is_dir:
                subdirectories.append(entry)

        for subdirectory in subdirectories:
            self._sweep_directory(subdirectory, operations)

    def _rename_loser(
        self,
        entry: Path,
        is_dir: bool,
        occupied: dict[str, Path],
        operations: list[RenameOperation],
    ) -> Path | None:
        try:
            new_path = self._free_name(entry, is_dir, occupied)
            indexed = self._holds_logical_path(entry, is_dir)
            logger.info(f"Renaming '{entry}' to '{new_path}' to resolve conflict.")
            entry.rename(new_path)
        except (OSError, InkwellError) as e:
            logger.error(f"Error renaming conflicting item {entry}: {e}")
            return None

        operation = RenameOperation(
            old_path=entry.relative_to(self.root).as_posix(),
            new_path=new_path.relative_to(self.root).as_posix(),
        )
        operations.append(operation)
        self.activity_log.record(
            f"DATA INTEGRITY: Renamed '{operation.old_path}' to '{operation.new_path}'"
        )
        if indexed and self.reference_index is not None:
            self.reference_index.record_rename(
                to_logical(self.root, entry, is_dir),
                to_logical(self.root, new_path, is_dir),
                is_dir,
            )
        occupied[comparison_key(new_path.name, is_dir).casefold()] = new_path
        return new_path

    def _holds_logical_path(self, entry: Path, is_dir: bool) -> bool:
        """Check whether ``entry`` is what its logical path currently resolves to."""
        if is_dir:
            return True
        try:
            logical = to_logical(self.root, entry, is_dir=False)
            return resolve_document(self.root, logical) == entry
        except InvalidPathError:
            return False

    @staticmethod
    def _free_name(entry: Path, is_dir: bool, occupied: dict[str, Path]) -> Path:
        """First ``<base>-<n><ext>`` sibling name that is free on disk and in this run."""
        base, extension = (entry.name, "") if is_dir else split_extension(entry.name)
        counter = 1
        while True:
            candidate = entry.with_name(f"{base}-{counter}{extension}")
            key = comparison_key(candidate.name, is_dir).casefold()
            if (
                key not in occupied
                and not candidate.exists()
                and not conflicts(entry.parent, key)
            ):
                return candidate
            counter += 1
