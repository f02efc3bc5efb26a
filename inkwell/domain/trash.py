"""Trash entry naming."""

import re
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, RootModel

TRASH_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TRASH_SUFFIX_LENGTH = 15

_SUFFIX_PATTERN = re.compile(r"_([0-9]{14})")


def _parse_suffix(suffix: str) -> datetime | None:
    """Return the moment encoded in a ``_YYYYMMDDHHMMSS`` suffix, or None."""
    match = _SUFFIX_PATTERN.fullmatch(suffix)
    if not match:
        return None
    digits = match.group(1)
    try:
        moment = datetime.strptime(digits, TRASH_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    # strptime accepts single-digit fields, so insist on a canonical round trip
    if moment.strftime(TRASH_TIMESTAMP_FORMAT) != digits:
        return None
    return moment


class TrashedName(BaseModel):
    """Name of an item in the trash root, split into its original name and timestamp.

    Files carry the suffix before their extension (``Note_20240101120000.md``),
    folders carry it at the end of the name (``Projects_20240101120000``).

    Attributes:
        original_name: Name the item had before trashing, extension excluded for files.
        extension: File extension including the dot, empty for folders.
        trashed_at: Moment encoded in the suffix, None when the name carries no valid suffix.
    """

    model_config = ConfigDict(frozen=True)

    original_name: str
    extension: str = ""
    trashed_at: datetime | None = None

    @classmethod
    def parse(cls, name: str, is_dir: bool = False) -> "TrashedName":
        """Split a physical trash entry name. Names without a valid suffix parse unchanged."""
        if is_dir:
            stem, extension = name, ""
        else:
            extension = Path(name).suffix
            stem = name[: len(name) - len(extension)]

        if len(stem) > TRASH_SUFFIX_LENGTH:
            trashed_at = _parse_suffix(stem[-TRASH_SUFFIX_LENGTH:])
            if trashed_at is not None:
                return cls(
                    original_name=stem[:-TRASH_SUFFIX_LENGTH],
                    extension=extension,
                    trashed_at=trashed_at,
                )
        return cls(original_name=stem, extension=extension)

    @classmethod
    def for_item(cls, name: str, is_dir: bool, trashed_at: datetime) -> "TrashedName":
        """Build the trash name for an active item trashed at ``trashed_at``."""
        if is_dir:
            return cls(original_name=name, trashed_at=trashed_at.replace(microsecond=0))
        extension = Path(name).suffix
        return cls(
            original_name=name[: len(name) - len(extension)],
            extension=extension,
            trashed_at=trashed_at.replace(microsecond=0),
        )

    @property
    def original(self) -> str:
        """Original physical name, extension included."""
        return f"{self.original_name}{self.extension}"

    @property
    def physical_name(self) -> str:
        """Name of the entry inside the trash root."""
        if self.trashed_at is None:
            return self.original
        suffix = "_" + self.trashed_at.strftime(TRASH_TIMESTAMP_FORMAT)
        return f"{self.original_name}{suffix}{self.extension}"

    def one_second_later(self) -> "TrashedName":
        """Same name with the suffix advanced by one second."""
        if self.trashed_at is None:
            raise ValueError(f"Trash name {self.original!r} carries no timestamp")
        return self.model_copy(update={"trashed_at": self.trashed_at + timedelta(seconds=1)})


def strip_trash_suffix(name: str, is_dir: bool = False) -> str:
    """Remove a valid trash timestamp suffix from ``name``; a no-op when there is none."""
    return TrashedName.parse(name, is_dir=is_dir).original


class TrashManifestData(RootModel[dict[str, str]]):
    """Maps a trash identifier to the logical path the item had before trashing."""

    root: dict[str, str] = {}
