"""
kcdpak — pack and unpack Kingdom Come: Deliverance .pak mod archives.

Format: a standard ZIP file. Directories are stored as "name/" markers,
files are deflate-compressed, entry names always use '/' separators.
"""

from kcdpak.errors import (
    ArchiveIOError,
    CorruptEntry,
    ExtractError,
    InvalidArchive,
    InvalidPathEncoding,
    PackError,
    PakError,
    SourceNotFound,
    SourceUnreadable,
    TraversalError,
    UnsafeEntryName,
)
from kcdpak.reader import PakEntry, PakReader, extract_pak, list_pak
from kcdpak.writer import pack_pak

__version__ = "1.0.0"

__all__ = [
    "PakEntry", "PakReader", "list_pak", "extract_pak", "pack_pak",
    "PakError", "PackError", "ExtractError",
    "SourceNotFound", "SourceUnreadable", "TraversalError", "InvalidPathEncoding",
    "InvalidArchive", "UnsafeEntryName", "CorruptEntry", "ArchiveIOError",
]
