from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

import pytest

from kcdpak.errors import InvalidPathEncoding, UnsafeEntryName
from kcdpak.paths import split_entry_name, to_archive_name, to_output_path


def test_windows_separators_become_forward_slashes() -> None:
    assert to_archive_name(PureWindowsPath("a\\b\\c.txt")) == "a/b/c.txt"


def test_posix_relative_path_is_unchanged() -> None:
    assert to_archive_name(PurePosixPath("a/b/c.txt")) == "a/b/c.txt"


def test_literal_backslash_in_posix_name_is_rejected() -> None:
    # Would split into two components on extraction
    with pytest.raises(InvalidPathEncoding):
        to_archive_name(PurePosixPath("a\\b.txt"))


def test_drive_like_first_component_is_rejected() -> None:
    with pytest.raises(InvalidPathEncoding):
        to_archive_name(PurePosixPath("c:notes.txt"))
    # Only a leading component reads as a drive on the way back
    assert to_archive_name(PurePosixPath("docs/c:notes.txt")) == "docs/c:notes.txt"


def test_undecodable_name_is_rejected() -> None:
    with pytest.raises(InvalidPathEncoding):
        to_archive_name(PurePosixPath("bad\udcffname.txt"))


def test_empty_relative_path_is_an_error() -> None:
    with pytest.raises(ValueError):
        to_archive_name(PurePosixPath("."))


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a/b/c.txt", ("a", "b", "c.txt")),
        ("a\\b\\c.txt", ("a", "b", "c.txt")),
        ("./data/", ("data",)),
        ("data//x", ("data", "x")),
        ("./", ()),
    ],
)
def test_split_entry_name(name: str, expected: tuple[str, ...]) -> None:
    assert split_entry_name(name) == expected


@pytest.mark.parametrize(
    "name",
    [
        "../../escape.txt",
        "a/../../escape.txt",
        "..\\escape.txt",
        "/etc/passwd",
        "\\\\server\\share\\x",
        "C:\\Windows\\x.dll",
        "c:relative.txt",
        "nul\x00byte",
    ],
)
def test_unsafe_names_are_rejected(name: str) -> None:
    with pytest.raises(UnsafeEntryName):
        split_entry_name(name)


def test_to_output_path_stays_under_root(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    assert to_output_path("a/b/c.txt", root) == root / "a" / "b" / "c.txt"
    assert to_output_path("a\\b\\c.txt", root) == root / "a" / "b" / "c.txt"


def test_to_output_path_rejects_escape_through_existing_symlink(tmp_path: Path) -> None:
    root = (tmp_path / "out").resolve()
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (root / "link").symlink_to(outside, target_is_directory=True)
    with pytest.raises(UnsafeEntryName):
        to_output_path("link/escape.txt", root)
