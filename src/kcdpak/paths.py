"""
paths.py — Mapping between filesystem paths and .pak entry names.

Entry names are always relative and '/'-separated, whatever the host:

  pack:    to_archive_name(PureWindowsPath("a\\b\\c.txt"))  -> "a/b/c.txt"
  extract: to_output_path("a/b/c.txt", dest)               -> dest/a/b/c.txt

Archives produced by other tools sometimes store '\\' separators, so the
extract direction accepts either separator.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePath

from kcdpak.errors import InvalidPathEncoding, UnsafeEntryName

# "C:", "C:\foo", "c:foo"
_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:")


def to_archive_name(relative: PurePath) -> str:
    """Join the components of a relative source path with '/'.

    A component that contains a separator itself (a literal backslash in a
    POSIX file name) or cannot be encoded as UTF-8, or a first component that
    reads as a drive ("c:notes.txt"), has no archive name that survives
    extraction, so it raises InvalidPathEncoding.
    """
    parts = relative.parts
    if not parts:
        raise ValueError("Cannot name the source root itself")
    if relative.anchor:
        raise ValueError(f"Expected a relative path, got {relative}")
    if _DRIVE_PATTERN.match(parts[0]):
        raise InvalidPathEncoding("Path starts with a drive-like component", str(relative))
    for part in parts:
        if "/" in part or "\\" in part:
            raise InvalidPathEncoding("Path component contains a separator", str(relative))
        try:
            part.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidPathEncoding("Path is not valid UTF-8", repr(str(relative)), exc) from exc
    return "/".join(parts)


def split_entry_name(name: str) -> tuple[str, ...]:
    """Split a stored entry name into safe path components.

    '.' and empty components are dropped. Absolute names, drive-qualified
    names, '..' components and NUL bytes raise UnsafeEntryName. The result
    is empty for names like "" or "./" that denote the root.
    """
    if "\x00" in name:
        raise UnsafeEntryName("Entry name contains a NUL byte", repr(name))
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_PATTERN.match(normalized):
        raise UnsafeEntryName("Absolute entry name", name)
    parts: list[str] = []
    for part in normalized.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise UnsafeEntryName("Entry name escapes the output directory", name)
        parts.append(part)
    return tuple(parts)


def to_output_path(name: str, dest_root: Path) -> Path:
    """Return where entry ``name`` lands under ``dest_root``.

    ``dest_root`` should already be resolved. The candidate is resolved
    too, so a symlink already present under the root cannot redirect the
    write elsewhere.
    """
    target = dest_root.joinpath(*split_entry_name(name))
    resolved = target.resolve()
    if resolved != dest_root and dest_root not in resolved.parents:
        raise UnsafeEntryName("Entry resolves outside the output directory", name)
    return target
