"""Reference index domain models."""

from pydantic import RootModel


class ReferenceMap(RootModel[dict[str, list[str]]]):
    """Maps a target document path to the ordered paths of documents referencing it.

    Serialized as a flat JSON object so the persisted file stays a plain
    ``{"target": ["source", ...]}`` mapping.
    """

    root: dict[str, list[str]] = {}
