"""
errors.py — Exceptions raised by the packer and the extractor.

Every failure from zipfile, zlib or the OS is translated into one of these
before it leaves kcdpak, so callers only ever catch PakError (or one of
the narrower PackError / ExtractError groups).

  PackError     SourceNotFound, SourceUnreadable, TraversalError,
                InvalidPathEncoding
  ExtractError  InvalidArchive, UnsafeEntryName, CorruptEntry
  both          ArchiveIOError
"""

from __future__ import annotations

from pathlib import Path


class PakError(Exception):
    """Base class. ``path`` is the offending file or entry name, ``cause`` the wrapped error."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.path is not None:
            text = f"{text}: {self.path}"
        if self.cause is not None:
            text = f"{text} ({self.cause})"
        return text


class PackError(PakError):
    pass


class ExtractError(PakError):
    pass


class SourceNotFound(PackError):
    pass


class SourceUnreadable(PackError):
    pass


class TraversalError(PackError):
    """Directory listing failed, or the walk hit a dangling link, a link cycle or a special file."""


class InvalidPathEncoding(PackError):
    """A source path has no lossless '/'-separated UTF-8 archive name."""


class InvalidArchive(ExtractError):
    pass


class UnsafeEntryName(ExtractError):
    """An entry name is absolute, climbs out with '..', or resolves outside the destination."""


class CorruptEntry(ExtractError):
    pass


class ArchiveIOError(PackError, ExtractError):
    """Reading or writing a file on disk failed."""
