"""Document tree operations that keep the backlink index and name uniqueness consistent."""

import shutil
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from inkwell.activity_log import ActivityLog, LocalActivityLog
from inkwell.clock import Clock, SystemClock
from inkwell.config import Settings
from inkwell.document_store import DocumentStore, LocalDocumentStore
from inkwell.domain.document import FileSystemItem, RenameOperation, TrashItem
from inkwell.domain.errors import (
    ConflictError,
    InkwellError,
    InvalidPathError,
    NotFoundError,
    StorageError,
)
from inkwell.domain.image import ImageFile
from inkwell.domain.trash import TrashedName
from inkwell.reference_index import LocalReferenceIndex, ReferenceIndex
from inkwell.storage.conflict_sweep import ConflictSweeper
from inkwell.storage.name_guard import conflicts
from inkwell.storage.path_codec import (
    DEFAULT_EXTENSION,
    DOCUMENT_EXTENSIONS,
    comparison_key,
    is_text_document,
    is_within,
    media_type_for,
    resolve_document,
    resolve_existing,
    to_logical,
    to_physical,
)
from inkwell.trash import LocalTrashManifest

IMAGES_URL_PREFIX = "/images/"
# Upload time prefix keeping repeated uploads of one file apart
IMAGE_PREFIX_FORMAT = "%Y%m%d%H%M%S_"


class Workspace:
    """The document tree under a data root, with its backlink index and trash.

    Every operation that changes the tree runs guard check, physical change
    and index update under one writer lock, so concurrent requests cannot
    interleave between the uniqueness check and the change it protects, nor
    lose each other's index updates.

    The filesystem is the source of truth: once a physical change has been
    made it is never rolled back. Index and manifest updates that follow it
    are best-effort and only logged when they fail; re-saving a document
    repairs its entries.
    """

    def __init__(
        self,
        *,
        root: Path,
        trash_dir: Path,
        images_dir: Path,
        reference_index: ReferenceIndex,
        trash_manifest: LocalTrashManifest,
        document_store: DocumentStore,
        activity_log: ActivityLog,
        clock: Clock,
        reserved_names: Iterable[str] = (),
    ):
        """Initialize the workspace with its collaborators.

        Args:
            root: Data root holding the document tree
            trash_dir: Folder receiving trashed items
            images_dir: Folder receiving uploaded images
            reference_index: Backlink index, saved after every update
            trash_manifest: Original locations of trashed items
            document_store: Raw byte storage for document content
            activity_log: Fire-and-forget sink for user-visible activity
            clock: Source of trash timestamps
            reserved_names: Top-level entries that are not part of the tree
        """
        self.root = Path(root)
        self.trash_dir = Path(trash_dir)
        self.images_dir = Path(images_dir)
        self.reference_index = reference_index
        self.trash_manifest = trash_manifest
        self.document_store = document_store
        self.activity_log = activity_log
        self.clock = clock
        self.reserved_names = set(reserved_names) | {self.trash_dir.name, self.images_dir.name}

        self._lock = threading.RLock()
        self._sweeper = ConflictSweeper(
            self.root,
            activity_log=activity_log,
            reference_index=reference_index,
            reserved_names=self.reserved_names,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        activity_log: ActivityLog | None = None,
        clock: Clock | None = None,
    ) -> "Workspace":
        """Create the data layout described by ``settings`` and load persisted state."""
        for directory in (
            settings.data_dir,
            settings.trash_dir,
            settings.images_dir,
            settings.logs_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)

        return cls(
            root=settings.data_dir,
            trash_dir=settings.trash_dir,
            images_dir=settings.images_dir,
            reference_index=LocalReferenceIndex(settings.references_path),
            trash_manifest=LocalTrashManifest(settings.trash_manifest_path),
            document_store=LocalDocumentStore(),
            activity_log=activity_log or LocalActivityLog(settings.activity_log_path),
            clock=clock or SystemClock(),
            reserved_names={
                settings.trash_dirname,
                settings.images_dirname,
                settings.logs_dirname,
                settings.references_filename,
                settings.trash_manifest_filename,
            },
        )

    # Reading

    def read_document(self, logical_path: str) -> tuple[bytes, str]:
        """Get the raw content and media type of a document."""
        with self._lock:
            physical = resolve_document(self.root, logical_path)
            if physical is None:
                if to_physical(self.root, logical_path).is_dir():
                    raise InvalidPathError(f"Path is a directory: {logical_path}")
                raise NotFoundError(f"Document not found: {logical_path}")
            return self.document_store.read(physical), media_type_for(physical)

    def list_tree(self) -> list[FileSystemItem]:
        """List folders and documents, folders first, then alphabetically."""
        with self._lock:
            try:
                return self._build_tree(self.root)
            except OSError as e:
                raise StorageError(f"Could not list documents: {e}") from e

    def _build_tree(self, directory: Path) -> list[FileSystemItem]:
        folders = []
        files = []
        for entry in directory.iterdir():
            if directory == self.root and self._is_reserved(entry.name):
                continue
            if entry.is_dir():
                folders.append(
                    FileSystemItem(
                        name=entry.name,
                        path=to_logical(self.root, entry, is_dir=True),
                        type="folder",
                        children=self._build_tree(entry),
                    )
                )
            elif entry.suffix.lower() in DOCUMENT_EXTENSIONS:
                files.append(
                    FileSystemItem(
                        name=entry.stem,
                        path=to_logical(self.root, entry, is_dir=False),
                        type="file",
                    )
                )
        return sorted(folders, key=lambda item: item.name) + sorted(files, key=lambda item: item.name)

    def backlinks(self, logical_path: str) -> list[str]:
        """Get the documents referencing ``logical_path`` through ``@(...)`` mentions."""
        with self._lock:
            return self.reference_index.backlinks_of(logical_path.strip().strip("/"))

    # Mutations

    def save_document(self, logical_path: str, content: bytes) -> None:
        """Create or overwrite a markdown document and re-index its references.

        Raises:
            ConflictError: If another entry already uses the name case-insensitively.
        """
        with self._lock:
            base = to_physical(self.root, logical_path)
            target = base.with_name(base.name + DEFAULT_EXTENSION)

            self._check_new_folders(target)
            # Overwriting the exact same file is allowed, any other casing is a conflict
            exclude = target if target.exists() else None
            if conflicts(base.parent, base.name, exclude):
                raise ConflictError("An item with the same name already exists in this folder.")

            self.document_store.write(target, content)

            source = to_logical(self.root, target, is_dir=False)
            text = content.decode("utf-8", errors="replace")
            self._update_references(
                f"save of {source}",
                lambda: self.reference_index.record_save(source, text),
            )

    def create_folder(self, logical_path: str) -> None:
        with self._lock:
            folder = to_physical(self.root, logical_path)
            self._check_new_folders(folder)
            if conflicts(folder.parent, folder.name):
                raise ConflictError(
                    "A file or folder with the same name already exists (case-insensitive)"
                )
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Could not create folder {logical_path}: {e}") from e

    def rename(self, old_logical_path: str, new_logical_path: str) -> RenameOperation:
        """Rename or move a document or folder and rewrite the index accordingly.

        A file keeps its extension; ``new_logical_path`` is extension-free.

        Returns:
            The old and new logical paths

        Raises:
            NotFoundError: If nothing exists at ``old_logical_path``.
            ConflictError: If the destination folder already holds the name.
            InvalidPathError: If a folder would be moved into itself.
        """
        with self._lock:
            old_full = resolve_existing(self.root, old_logical_path)
            if old_full is None:
                raise NotFoundError(f"Item not found: {old_logical_path}")
            is_dir = old_full.is_dir()

            new_base = to_physical(self.root, new_logical_path)
            new_full = new_base if is_dir else new_base.with_name(new_base.name + old_full.suffix)

            if is_dir and new_full != old_full and is_within(old_full, new_full):
                raise InvalidPathError("A folder cannot be moved into itself")

            self._check_new_folders(new_full)
            if conflicts(new_full.parent, new_base.name, exclude=old_full):
                raise ConflictError(
                    "An item with the same name already exists in the destination."
                )

            try:
                new_full.parent.mkdir(parents=True, exist_ok=True)
                old_full.rename(new_full)
            except OSError as e:
                raise StorageError(f"Could not rename/move item: {e}") from e

            operation = RenameOperation(
                old_path=to_logical(self.root, old_full, is_dir),
                new_path=to_logical(self.root, new_full, is_dir),
            )
            self._update_references(
                f"rename of {operation.old_path}",
                lambda: self.reference_index.record_rename(
                    operation.old_path, operation.new_path, is_dir
                ),
            )
            self.activity_log.record(
                f"MOVE/RENAME: Moved '{old_full.relative_to(self.root).as_posix()}' "
                f"to '{new_full.relative_to(self.root).as_posix()}'"
            )
            return operation

    # Trash

    def move_to_trash(self, logical_path: str) -> str:
        """Move a document or folder into the trash and drop it from the index.

        Returns:
            The trash identifier, the item's timestamp-suffixed name

        Raises:
            NotFoundError: If nothing exists at ``logical_path``.
        """
        with self._lock:
            physical = resolve_existing(self.root, logical_path)
            if physical is None:
                raise NotFoundError(f"Item not found: {logical_path}")
            is_dir = physical.is_dir()
            original = to_logical(self.root, physical, is_dir)
            contained = (
                [to_logical(self.root, p, is_dir=False) for p in self._text_documents(physical)]
                if is_dir
                else []
            )

            trashed = TrashedName.for_item(physical.name, is_dir, self.clock.now())
            while (self.trash_dir / trashed.physical_name).exists():
                trashed = trashed.one_second_later()
            trash_id = trashed.physical_name

            try:
                self.trash_dir.mkdir(parents=True, exist_ok=True)
                physical.rename(self.trash_dir / trash_id)
            except OSError as e:
                raise StorageError(f"Could not move {original} to trash: {e}") from e

            self.trash_manifest.add(trash_id, original)
            self._save_manifest()

            def forget() -> None:
                self.reference_index.record_delete(original)
                for document in contained:
                    self.reference_index.record_delete(document)

            self._update_references(f"trashing of {original}", forget)
            self.activity_log.record(f"TRASH: Moved '{original}' to trash")
            return trash_id

    def list_trash(self) -> list[TrashItem]:
        with self._lock:
            items = []
            for entry in self._trash_entries():
                is_dir = entry.is_dir()
                trashed = TrashedName.parse(entry.name, is_dir)
                items.append(
                    TrashItem(
                        name=entry.name,
                        path=entry.name,
                        type="folder" if is_dir else "file",
                        original_path=self._original_path(entry.name, trashed),
                        trashed_at=trashed.trashed_at,
                    )
                )
            return items

    def restore(self, trash_id: str) -> str:
        """Move a trashed item back to where it came from and re-index it.

        The original location comes from the trash manifest, or, for items
        without a manifest entry, from the name with its timestamp stripped,
        at the top of the tree. The restore is rejected, leaving the item in
        the trash, when the destination already holds the name.

        Returns:
            The logical path of the restored item

        Raises:
            NotFoundError: If the trash holds no such item.
            ConflictError: If the name is taken at the destination.
        """
        with self._lock:
            trash_path = self._trash_entry(trash_id)
            is_dir = trash_path.is_dir()
            trashed = TrashedName.parse(trash_id, is_dir)

            base = to_physical(self.root, self._original_path(trash_id, trashed))
            destination = base if is_dir else base.with_name(base.name + trashed.extension)

            self._check_new_folders(destination)
            if conflicts(destination.parent, comparison_key(destination.name, is_dir)):
                raise ConflictError(
                    "An item with the same name already exists in the destination folder."
                )

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                trash_path.rename(destination)
            except OSError as e:
                raise StorageError(f"Could not restore {trash_id}: {e}") from e

            self.trash_manifest.remove(trash_id)
            self._save_manifest()

            restored = to_logical(self.root, destination, is_dir)
            if is_dir:
                documents = self._text_documents(destination)
            else:
                documents = [destination] if is_text_document(destination) else []

            def reindex() -> None:
                for document in documents:
                    content = self.document_store.read(document)
                    self.reference_index.record_save(
                        to_logical(self.root, document, is_dir=False),
                        content.decode("utf-8", errors="replace"),
                    )

            self._update_references(f"restore of {restored}", reindex)
            self.activity_log.record(f"TRASH: Restored '{restored}' from trash")
            return restored

    def delete_permanently(self, trash_id: str) -> None:
        """Remove a trashed item for good.

        Raises:
            NotFoundError: If the trash holds no such item.
        """
        with self._lock:
            trash_path = self._trash_entry(trash_id)
            is_dir = trash_path.is_dir()
            original = self._original_path(trash_id, TrashedName.parse(trash_id, is_dir))

            self._update_references(
                f"permanent deletion of {original}",
                lambda: self.reference_index.record_delete(original),
            )

            try:
                if is_dir:
                    shutil.rmtree(trash_path)
                else:
                    trash_path.unlink()
            except OSError as e:
                raise StorageError(f"Could not delete {trash_id}: {e}") from e

            self.trash_manifest.remove(trash_id)
            self._save_manifest()
            self.activity_log.record(f"TRASH: Permanently deleted '{original}'")

    def empty_trash(self) -> int:
        """Remove every trashed item.

        The index is not cleaned: references to purged items stay until their
        source documents are saved again.

        Returns:
            Number of items removed

        Raises:
            StorageError: The first removal failure, after all other items were tried.
        """
        with self._lock:
            removed = 0
            first_error: OSError | None = None
            for entry in self._trash_entries():
                try:
                    if entry.is_dir():
                        shutil.rmtree(entry)
                    else:
                        entry.unlink()
                except OSError as e:
                    logger.error(f"Could not remove {entry} from trash: {e}")
                    first_error = first_error or e
                    continue
                self.trash_manifest.remove(entry.name)
                removed += 1

            self._save_manifest()
            self.activity_log.record(f"TRASH: Emptied trash ({removed} items)")
            if first_error is not None:
                raise StorageError(f"Could not empty trash: {first_error}") from first_error
            return removed

    # Integrity

    def resolve_conflicts(self) -> list[RenameOperation]:
        """Rename every entry that collides case-insensitively with a sibling.

        Renamed documents keep their backlinks: the sweep rewrites the index
        for each renamed entry that its logical path resolved to.
        """
        with self._lock:
            operations = self._sweeper.sweep()
            if operations:
                self._update_references("conflict resolution")
            return operations

    # Images

    def upload_image(self, filename: str, content: bytes) -> str:
        """Store an uploaded image under a timestamp-prefixed name.

        Returns:
            The URL the image is served from

        Raises:
            InvalidPathError: If the upload carries no usable file name.
        """
        with self._lock:
            name = Path(filename.replace("\\", "/")).name
            self._check_entry_name(name)

            moment = self.clock.now()
            while (self.images_dir / self._image_name(name, moment)).exists():
                moment += timedelta(seconds=1)
            stored = self._image_name(name, moment)

            self.document_store.write(self.images_dir / stored, content)
            logger.info(f"Stored uploaded image {stored}")
            return IMAGES_URL_PREFIX + stored

    def list_images(self) -> list[ImageFile]:
        with self._lock:
            try:
                entries = sorted(self.images_dir.iterdir(), key=lambda entry: entry.name)
            except FileNotFoundError:
                return []
            except OSError as e:
                raise StorageError(f"Could not list images: {e}") from e
            return [
                ImageFile(name=entry.name, url=IMAGES_URL_PREFIX + entry.name)
                for entry in entries
                if entry.is_file()
            ]

    def read_image(self, name: str) -> tuple[bytes, str]:
        with self._lock:
            self._check_entry_name(name)
            return self.document_store.read(self.images_dir / name), media_type_for(Path(name))

    def delete_image(self, name: str) -> None:
        """Remove an uploaded image.

        Raises:
            NotFoundError: If no image has that name.
        """
        with self._lock:
            self._check_entry_name(name)
            image = self.images_dir / name
            if not image.is_file():
                raise NotFoundError(f"Image not found: {name}")
            try:
                image.unlink()
            except OSError as e:
                raise StorageError(f"Could not delete image {name}: {e}") from e

    @staticmethod
    def _image_name(name: str, moment: datetime) -> str:
        return moment.strftime(IMAGE_PREFIX_FORMAT) + name

    def read_activity_log(self) -> str:
        return self.activity_log.read()

    def clear_activity_log(self) -> None:
        self.activity_log.clear()

    # Helpers

    def _is_reserved(self, name: str) -> bool:
        return name.startswith(".") or name in self.reserved_names

    def _check_new_folders(self, physical: Path) -> None:
        """Reject paths whose missing parent folders would collide with existing entries."""
        missing = []
        parent = physical.parent
        while parent != self.root and parent != parent.parent and not parent.exists():
            missing.append(parent)
            parent = parent.parent
        for folder in reversed(missing):
            if conflicts(folder.parent, folder.name):
                raise ConflictError(
                    f"An item named '{folder.name}' already exists in the destination."
                )

    def _text_documents(self, folder: Path) -> list[Path]:
        try:
            return sorted(
                path for path in folder.rglob("*") if path.is_file() and is_text_document(path)
            )
        except OSError as e:
            raise StorageError(f"Could not list {folder}: {e}") from e

    def _trash_entries(self) -> list[Path]:
        try:
            return sorted(self.trash_dir.iterdir(), key=lambda entry: entry.name)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Could not read trash: {e}") from e

    @staticmethod
    def _check_entry_name(name: str) -> None:
        """Reject names that would leave a flat folder such as the trash or image root."""
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise InvalidPathError(f"Invalid item name: {name}")

    def _trash_entry(self, trash_id: str) -> Path:
        self._check_entry_name(trash_id)
        trash_path = self.trash_dir / trash_id
        if not trash_path.exists():
            raise NotFoundError(f"Item not found in trash: {trash_id}")
        return trash_path

    def _original_path(self, trash_id: str, trashed: TrashedName) -> str:
        return self.trash_manifest.get(trash_id) or trashed.original_name

    def _update_references(
        self, description: str, update: Callable[[], None] | None = None
    ) -> None:
        try:
            if update is not None:
                update()
            self.reference_index.save()
        except (InkwellError, OSError, ValueError) as e:
            logger.exception(f"Failed to update references after {description}: {e}")

    def _save_manifest(self) -> None:
        try:
            self.trash_manifest.save()
        except (InkwellError, OSError, ValueError) as e:
            logger.exception(f"Failed to save trash manifest: {e}")
