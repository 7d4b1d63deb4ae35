"""Archive writers and the archive loader."""

from .base import BaseArchiveWriter, ValueSet
from .loader import ArchiveRecord, LoadedArchive, find_archives, load_archive
from .local import LocalArchiveWriter

__all__ = [
    "ArchiveRecord",
    "BaseArchiveWriter",
    "LoadedArchive",
    "LocalArchiveWriter",
    "ValueSet",
    "find_archives",
    "load_archive",
]
