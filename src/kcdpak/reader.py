"""
reader.py — .pak archive reader.

A .pak is a standard ZIP file; zipfile does the decompression and the
CRC checks. This module walks the central directory in index order and
maps each entry name to a path under the destination, refusing any
name that would land outside it (see kcdpak.paths).
"""

from __future__ import annotations

import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Callable, NamedTuple

from kcdpak.app_log import app_log
from kcdpak.errors import ArchiveIOError, CorruptEntry, InvalidArchive, UnsafeEntryName
from kcdpak.paths import to_output_path

# General purpose flag bit 0
_FLAG_ENCRYPTED = 0x1

# zipfile raises these while decompressing or checking a member.
# UnicodeDecodeError: a local header flagged UTF-8 whose name is not.
_CORRUPT_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    UnicodeDecodeError,
)


class PakEntry(NamedTuple):
    """Single entry in a .pak archive."""
    name: str
    is_dir: bool
    file_size: int
    compress_size: int


class PakReader:
    """Read a .pak archive: list entries and extract them. Usable as a context manager."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._zip: zipfile.ZipFile | None = None
        self._infos: list[zipfile.ZipInfo] = []

    def open(self) -> None:
        """Open the archive and read its central directory."""
        if self._zip is not None:
            return
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except FileNotFoundError as exc:
            raise InvalidArchive("Archive does not exist", self.path) from exc
        except (zipfile.BadZipFile, EOFError, ValueError) as exc:
            raise InvalidArchive("Not a valid .pak archive", self.path, exc) from exc
        except OSError as exc:
            raise InvalidArchive("Cannot open archive", self.path, exc) from exc
        self._infos = self._zip.infolist()

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None
            self._infos = []

    def __enter__(self) -> PakReader:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            self.open()
        return self._zip

    def list_entries(self) -> list[PakEntry]:
        """Return entries in archive index order."""
        self._require_open()
        return [
            PakEntry(info.filename, info.is_dir(), info.file_size, info.compress_size)
            for info in self._infos
        ]

    def read_file(self, index: int) -> bytes:
        """Read and decompress one entry by index (0-based)."""
        zf = self._require_open()
        if index < 0 or index >= len(self._infos):
            raise IndexError(f"Entry index {index} out of range (0..{len(self._infos) - 1})")
        info = self._infos[index]
        _check_supported(info)
        try:
            return zf.read(info)
        except _CORRUPT_ERRORS as exc:
            raise CorruptEntry("Corrupt entry", info.filename, exc) from exc
        except OSError as exc:
            raise ArchiveIOError("Cannot read archive", self.path, exc) from exc

    def extract_all(
        self,
        dest_dir: Path | str,
        progress_fn: Callable[[int, int], None] | None = None,
    ) -> list[Path]:
        """Extract every entry into dest_dir. Returns created paths in index order.

        Stops at the first failure; anything already written stays on disk.
        progress_fn: optional callable(done: int, total: int) called after each entry.
        """
        zf = self._require_open()
        dest = Path(dest_dir)
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveIOError("Cannot create output directory", dest, exc) from exc
        root = dest.resolve()

        created: list[Path] = []
        total = len(self._infos)
        if progress_fn:
            progress_fn(0, total)
        for i, info in enumerate(self._infos):
            out_path = to_output_path(info.filename, root)
            if info.is_dir():
                # "./" and the like name the root itself
                if out_path != root:
                    _make_dirs(out_path)
                    created.append(out_path)
            else:
                if out_path == root:
                    raise UnsafeEntryName("File entry has an empty name", repr(info.filename))
                _check_supported(info)
                _make_dirs(out_path.parent)
                _copy_member(zf, info, out_path)
                created.append(out_path)
            app_log(f"  {info.filename}")
            if progress_fn:
                progress_fn(i + 1, total)
        return created


def _check_supported(info: zipfile.ZipInfo) -> None:
    if info.flag_bits & _FLAG_ENCRYPTED:
        raise CorruptEntry("Encrypted entries are not supported", info.filename)


def _make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ArchiveIOError("Cannot create directory", path, exc) from exc


def _copy_member(zf: zipfile.ZipFile, info: zipfile.ZipInfo, out_path: Path) -> None:
    """Stream one member to out_path; both handles are closed before returning."""
    try:
        with zf.open(info) as src, out_path.open("wb") as dst:
            shutil.copyfileobj(src, dst)
    except _CORRUPT_ERRORS as exc:
        raise CorruptEntry("Corrupt entry", info.filename, exc) from exc
    except OSError as exc:
        raise ArchiveIOError("Cannot write file", out_path, exc) from exc


def list_pak(path: Path | str) -> list[PakEntry]:
    """List entries in a .pak file without holding it open."""
    with PakReader(path) as r:
        return r.list_entries()


def extract_pak(
    pak_path: Path | str,
    dest_dir: Path | str,
    progress_fn: Callable[[int, int], None] | None = None,
) -> list[Path]:
    """Extract a .pak archive to a directory. Returns the created paths.
    progress_fn: optional callable(done: int, total: int) called after each entry.
    """
    with PakReader(pak_path) as r:
        return r.extract_all(dest_dir, progress_fn=progress_fn)
