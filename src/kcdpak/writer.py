"""
writer.py — Pack a directory tree into a .pak archive.

A .pak is a plain ZIP file. Every directory under the source becomes a
directory marker ("name/", no payload) so empty folders survive the round
trip; every file is stored with ZIP_DEFLATED. Entries are written in
lexicographic order of their archive names.

The archive is built in a temporary file next to the output and renamed
over it only once the central directory has been written, so a failed
pack never leaves a truncated .pak behind.
"""

from __future__ import annotations

import os
import stat
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Iterator, NamedTuple

from kcdpak.app_log import app_log
from kcdpak.errors import (
    ArchiveIOError,
    InvalidPathEncoding,
    SourceNotFound,
    SourceUnreadable,
    TraversalError,
)
from kcdpak.paths import to_archive_name
from kcdpak.settings import DEFAULT_COMPRESS_LEVEL


class SourceEntry(NamedTuple):
    """One file or directory to be packed."""
    path: Path
    name: str
    is_dir: bool


def _check_source(source: Path) -> None:
    try:
        st = source.stat()
    except FileNotFoundError as exc:
        raise SourceNotFound("Source directory does not exist", source) from exc
    except OSError as exc:
        raise SourceUnreadable("Cannot access source directory", source, exc) from exc
    if not stat.S_ISDIR(st.st_mode):
        raise SourceUnreadable("Source is not a directory", source)
    if not os.access(source, os.R_OK | os.X_OK):
        raise SourceUnreadable("Source directory is not readable", source)


def _kind(item: os.DirEntry) -> str:
    """Classify a directory entry as "dir", "file", "broken" or "special" (symlinks followed)."""
    try:
        if item.is_dir():
            return "dir"
        if item.is_file():
            return "file"
        if item.is_symlink():
            return "broken"
    except OSError as exc:
        raise TraversalError("Cannot inspect entry", item.path, exc) from exc
    return "special"


def _walk(
    directory: Path,
    follow_symlinks: bool,
    ancestors: frozenset[str],
) -> Iterator[tuple[Path, bool]]:
    """Yield (path, is_dir) for everything below ``directory``, depth first.

    ``ancestors`` holds the real paths of the directories on the current
    walk path; a followed link back into one of them is a cycle.
    """
    try:
        with os.scandir(directory) as it:
            items = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise TraversalError("Cannot list directory", directory, exc) from exc

    for item in items:
        path = Path(item.path)
        kind = _kind(item)
        if kind == "file":
            yield path, False
        elif kind == "dir":
            yield path, True
            # Unfollowed directory links are kept as empty directory markers
            if item.is_symlink() and not follow_symlinks:
                continue
            real = os.path.realpath(path)
            if real in ancestors:
                raise TraversalError("Symbolic link cycle", path)
            yield from _walk(path, follow_symlinks, ancestors | {real})
        elif kind == "broken":
            raise TraversalError("Broken symbolic link", path)
        else:
            raise TraversalError("Not a regular file or directory", path)


def iter_source_entries(
    source_dir: Path | str,
    *,
    follow_symlinks: bool = False,
    exclude: Path | None = None,
) -> list[SourceEntry]:
    """Walk source_dir and return its entries sorted by archive name.

    The root itself is not included. ``exclude`` skips one file (the
    output archive, when it is written inside the source tree).
    """
    source = Path(source_dir).resolve()
    entries: list[SourceEntry] = []
    seen: set[str] = set()
    for path, is_dir in _walk(source, follow_symlinks, frozenset({os.path.realpath(source)})):
        if not is_dir and exclude is not None and path == exclude:
            continue
        name = to_archive_name(path.relative_to(source))
        if name in seen:
            raise InvalidPathEncoding("Two source paths map to the same archive name", name)
        seen.add(name)
        entries.append(SourceEntry(path, name, is_dir))
    entries.sort(key=lambda e: e.name)
    return entries


def _write_entry(zf: zipfile.ZipFile, entry: SourceEntry, compress_level: int) -> None:
    try:
        # Keeps mtime and mode bits; pre-1980 timestamps are clamped
        info = zipfile.ZipInfo.from_file(entry.path, entry.name, strict_timestamps=False)
        data = b"" if entry.is_dir else entry.path.read_bytes()
    except OSError as exc:
        raise ArchiveIOError("Cannot read source entry", entry.path, exc) from exc
    if entry.is_dir:
        zf.writestr(info, b"", compress_type=zipfile.ZIP_STORED)
    else:
        zf.writestr(info, data, compress_type=zipfile.ZIP_DEFLATED, compresslevel=compress_level)


def _output_mode(output: Path) -> int:
    """Permission bits for the finished archive: keep an existing file's, else 0o644."""
    try:
        return stat.S_IMODE(output.stat().st_mode)
    except OSError:
        return 0o644


def pack_pak(
    source_dir: Path | str,
    output_path: Path | str,
    *,
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
    follow_symlinks: bool = False,
    progress_fn: Callable[[int, int], None] | None = None,
) -> int:
    """Pack a directory into a .pak file.

    source_dir: root directory to pack (walked recursively; not itself an entry).
    output_path: .pak file to create or overwrite. Parent directories are created.
    compress_level: deflate level 0-9.
    follow_symlinks: descend into symlinked directories instead of storing them empty.
    progress_fn: optional callable(done: int, total: int) called after each entry.

    Returns the number of entries written. Raises a PackError subclass on
    failure, in which case output_path is left as it was.
    """
    if not 0 <= compress_level <= 9:
        raise ValueError(f"compress_level must be 0-9, got {compress_level}")
    source = Path(source_dir).resolve()
    output = Path(output_path).resolve()
    _check_source(source)

    entries = iter_source_entries(source, follow_symlinks=follow_symlinks, exclude=output)
    total = len(entries)

    # Deepest first; removed again if the pack fails
    new_dirs = [d for d in (output.parent, *output.parent.parents) if not d.exists()]
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".tmp", dir=output.parent)
    except OSError as exc:
        _remove_empty_dirs(new_dirs)
        raise ArchiveIOError("Cannot create archive", output, exc) from exc
    tmp = Path(tmp_name)

    if progress_fn:
        progress_fn(0, total)
    packed = False
    try:
        with os.fdopen(fd, "wb") as out, zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as zf:
            for done, entry in enumerate(entries, 1):
                _write_entry(zf, entry, compress_level)
                app_log(f"  {'dir ' if entry.is_dir else 'file'}  {entry.name}")
                if progress_fn:
                    progress_fn(done, total)
        os.chmod(tmp, _output_mode(output))
        os.replace(tmp, output)
        packed = True
    except OSError as exc:
        raise ArchiveIOError("Cannot write archive", output, exc) from exc
    finally:
        if not packed:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            _remove_empty_dirs(new_dirs)

    return total


def _remove_empty_dirs(dirs: list[Path]) -> None:
    """Remove directories this pack created, deepest first, stopping at the first non-empty one."""
    for d in dirs:
        try:
            d.rmdir()
        except OSError:
            break
