from pathlib import Path

from pydantic import ValidationError

from inkwell.domain.errors import StorageError
from inkwell.domain.trash import TrashManifestData


class LocalTrashManifest:
    """Records where each trashed item came from, persisted to a JSON file.

    Trash entries live flat under the trash root, so their folder of origin
    is only known through this manifest. Entries are keyed by trash identifier.
    """

    def __init__(self, filepath: str | Path | None = None) -> None:
        self._filepath = str(filepath) if filepath else None
        self._entries: dict[str, str] = {}

        if self._filepath and Path(self._filepath).exists():
            try:
                raw = Path(self._filepath).read_text(encoding="utf-8")
                if raw.strip():
                    self._entries = TrashManifestData.model_validate_json(raw).root
            except (OSError, ValidationError) as e:
                raise StorageError(f"Could not load trash manifest {self._filepath}: {e}") from e

    def get(self, trash_id: str) -> str | None:
        """Get the original logical path of a trashed item, if recorded."""
        return self._entries.get(trash_id)

    def add(self, trash_id: str, original_path: str) -> None:
        self._entries[trash_id] = original_path

    def remove(self, trash_id: str) -> None:
        self._entries.pop(trash_id, None)

    def save(self, filepath: str | None = None) -> None:
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        try:
            Path(save_path).write_text(
                TrashManifestData(self._entries).model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise StorageError(f"Could not save trash manifest {save_path}: {e}") from e
