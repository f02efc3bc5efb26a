from pathlib import Path

import pytest

from inkwell.domain.errors import StorageError
from inkwell.indexing import extract_references
from inkwell.reference_index import LocalReferenceIndex


def test_extract_references() -> None:
    """Test that mentions are extracted in order without duplicates."""
    content = "See @(A) and @(folder/B c), then @(A) again."

    assert extract_references(content) == ["A", "folder/B c"]


def test_extract_ignores_empty_mentions() -> None:
    """Test that text which is not a complete mention is ignored."""
    assert extract_references("@() and @ (spaced) and (plain)") == []


def test_save_deduplicates_mentions() -> None:
    """Test that repeated mentions register a single backlink."""
    index = LocalReferenceIndex()

    index.record_save("D", "@(A) @(B) @(A)")

    assert index.backlinks_of("A") == ["D"]
    assert index.backlinks_of("B") == ["D"]


def test_save_replaces_previous_references() -> None:
    """Test that references dropped from a document disappear from the index."""
    index = LocalReferenceIndex()
    index.record_save("D", "@(A) @(B)")

    index.record_save("D", "@(B)")

    assert index.backlinks_of("A") == []
    assert "A" not in index.snapshot()
    assert index.backlinks_of("B") == ["D"]


def test_resave_keeps_other_sources() -> None:
    """Test that saving one source leaves the other sources of a target in place."""
    index = LocalReferenceIndex()
    index.record_save("x", "@(t)")
    index.record_save("y", "@(t)")

    index.record_save("x", "@(t)")

    assert index.backlinks_of("t") == ["y", "x"]


def test_delete_forgets_source_and_key() -> None:
    """Test that a deleted document is neither a source nor a target any more."""
    index = LocalReferenceIndex.from_data({"t": ["a", "b"], "a": ["c"]})

    index.record_delete("a")

    assert index.snapshot() == {"t": ["b"]}


def test_mutual_references_after_delete() -> None:
    """Test that deleting one of two documents mentioning each other clears both entries."""
    index = LocalReferenceIndex()
    index.record_save("a", "@(b)")
    index.record_save("b", "@(a)")
    assert index.backlinks_of("a") == ["b"]
    assert index.backlinks_of("b") == ["a"]

    index.record_delete("a")

    # b still mentions a in its content, the index only learns that again when b is saved
    assert index.backlinks_of("a") == []
    assert index.backlinks_of("b") == []

    index.record_save("b", "@(a)")
    assert index.backlinks_of("a") == ["b"]


def test_folder_rename_rewrites_prefixes() -> None:
    """Test that keys and sources below a renamed folder move with it."""
    index = LocalReferenceIndex.from_data({"t": ["f/x", "y"], "f/x": ["z"], "f2/x": ["f/x"]})

    index.record_rename("f", "g", is_folder=True)

    assert index.snapshot() == {"t": ["g/x", "y"], "g/x": ["z"], "f2/x": ["g/x"]}


def test_file_rename_rewrites_key_and_sources() -> None:
    """Test that a renamed document keeps both its backlinks and its outgoing references."""
    index = LocalReferenceIndex.from_data({"a": ["b"], "b": ["a"]})

    index.record_rename("a", "c", is_folder=False)

    assert index.snapshot() == {"c": ["b"], "b": ["c"]}


def test_file_rename_leaves_paths_below_it_alone() -> None:
    """Test that only exact matches are rewritten when a file is renamed."""
    index = LocalReferenceIndex.from_data({"t": ["a/x", "a"]})

    index.record_rename("a", "b", is_folder=False)

    assert index.snapshot() == {"t": ["a/x", "b"]}


def test_rename_merges_into_existing_key() -> None:
    """Test that a renamed key landing on an existing one merges without duplicates."""
    index = LocalReferenceIndex.from_data({"new": ["s1"], "old": ["s2", "s1"]})

    index.record_rename("old", "new", is_folder=False)

    assert index.snapshot() == {"new": ["s1", "s2"]}


def test_backlinks_are_copies() -> None:
    """Test that callers cannot modify the index through returned lists."""
    index = LocalReferenceIndex.from_data({"t": ["a"]})

    index.backlinks_of("t").append("b")
    index.snapshot()["t"].append("c")

    assert index.backlinks_of("t") == ["a"]


def test_persistence_round_trip(tmp_path: Path) -> None:
    """Test that a saved index is loaded back unchanged as a flat JSON mapping."""
    filepath = tmp_path / "references.json"
    index = LocalReferenceIndex(filepath)
    index.record_save("notes/D", "@(A) @(B)")
    index.save()

    reloaded = LocalReferenceIndex(filepath)

    assert reloaded.snapshot() == {"A": ["notes/D"], "B": ["notes/D"]}
    assert filepath.read_text().lstrip().startswith("{")


def test_empty_file_loads_empty_index(tmp_path: Path) -> None:
    """Test that an empty index file is an empty index."""
    filepath = tmp_path / "references.json"
    filepath.write_text("")

    assert LocalReferenceIndex(filepath).snapshot() == {}


def test_corrupt_file_raises(tmp_path: Path) -> None:
    """Test that an unreadable index file is a storage error."""
    filepath = tmp_path / "references.json"
    filepath.write_text('{"A": "not a list"}')

    with pytest.raises(StorageError):
        LocalReferenceIndex(filepath)


def test_save_without_path_raises() -> None:
    """Test that an in-memory index has nowhere to be saved."""
    with pytest.raises(ValueError):
        LocalReferenceIndex().save()
