from pathlib import Path

import pytest

from inkwell.domain.errors import InvalidPathError
from inkwell.storage.path_codec import (
    comparison_key,
    decode_path,
    media_type_for,
    physical_candidates,
    resolve_document,
    resolve_existing,
    to_logical,
    to_physical,
)


def test_decode_path_restores_spaces() -> None:
    """Test that underscores become spaces and nothing else is decoded again."""
    assert decode_path("My_Note") == "My Note"
    assert decode_path("folder/Café_notes") == "folder/Café notes"
    assert decode_path("100%25_done") == "100%25 done"
    assert decode_path("%41") == "%41"


def test_candidates_follow_extension_priority(data_root: Path) -> None:
    """Test that candidates are listed in the fixed extension order."""
    candidates = physical_candidates(data_root, "notes/project")

    assert candidates == [
        data_root / "notes" / "project.md",
        data_root / "notes" / "project.txt",
        data_root / "notes" / "project.png",
        data_root / "notes" / "project.jpg",
        data_root / "notes" / "project.jpeg",
    ]


def test_candidates_keep_dots_in_names(data_root: Path) -> None:
    """Test that a dot inside a logical name is not taken as an extension."""
    candidates = physical_candidates(data_root, "release v1.2")

    assert candidates[0] == data_root / "release v1.2.md"


def test_resolve_document_prefers_markdown(data_root: Path) -> None:
    """Test that the markdown file wins when several candidates exist."""
    (data_root / "plan.txt").write_text("text")
    (data_root / "plan.md").write_text("markdown")

    assert resolve_document(data_root, "plan") == data_root / "plan.md"


def test_resolve_document_missing(data_root: Path) -> None:
    """Test that nothing is resolved for a missing document."""
    assert resolve_document(data_root, "missing") is None


def test_resolve_existing_finds_folders_and_files(data_root: Path) -> None:
    """Test that folders resolve by their bare path and files through their extension."""
    (data_root / "projects").mkdir()
    (data_root / "projects" / "roadmap.txt").write_text("q1")

    assert resolve_existing(data_root, "projects") == data_root / "projects"
    assert resolve_existing(data_root, "projects/roadmap") == data_root / "projects" / "roadmap.txt"
    assert resolve_existing(data_root, "projects/missing") is None


def test_to_physical_strips_slashes(data_root: Path) -> None:
    """Test that leading and trailing slashes are ignored."""
    assert to_physical(data_root, "/notes/a/") == data_root / "notes" / "a"


@pytest.mark.parametrize(
    "logical_path",
    ["", "/", "../outside", "notes/../../outside", ".trash/item", ".references.json"],
)
def test_to_physical_rejects_paths_outside_the_tree(data_root: Path, logical_path: str) -> None:
    """Test that empty, escaping and reserved paths are rejected."""
    with pytest.raises(InvalidPathError):
        to_physical(data_root, logical_path)


def test_to_physical_rejects_symlink_escape(data_root: Path, tmp_path: Path) -> None:
    """Test that a symlink pointing outside the root cannot be followed."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (data_root / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(InvalidPathError):
        to_physical(data_root, "link/secret")


def test_comparison_key() -> None:
    """Test that files compare without extension and folders by their full name."""
    assert comparison_key("Note.md", is_dir=False) == "Note"
    assert comparison_key("archive.tar.txt", is_dir=False) == "archive.tar"
    assert comparison_key("v1.2", is_dir=True) == "v1.2"


def test_to_logical(data_root: Path) -> None:
    """Test that logical paths drop the extension of files only."""
    assert to_logical(data_root, data_root / "a" / "b.md", is_dir=False) == "a/b"
    assert to_logical(data_root, data_root / "a.v2", is_dir=True) == "a.v2"


def test_media_types() -> None:
    """Test media types derived from extensions."""
    assert media_type_for(Path("a.md")) == "text/markdown"
    assert media_type_for(Path("a.TXT")) == "text/plain"
    assert media_type_for(Path("a.jpeg")) == "image/jpeg"
    assert media_type_for(Path("a.bin")) == "text/plain"
