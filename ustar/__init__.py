from .archive import ArchiveReader, EntryHandle, open_archive
from .errors import (
    InvalidOptionError,
    MalformedArchive,
    MalformedField,
    MalformedOptionsFileError,
    SourceUnavailable,
    TruncatedContent,
    UstarError,
)
from .header import EntryType, HeaderRecord
from .options import ReaderOptions
from .version import USTAR_SEMVER

__version__ = USTAR_SEMVER

__all__ = [
    "ArchiveReader",
    "EntryHandle",
    "EntryType",
    "HeaderRecord",
    "InvalidOptionError",
    "MalformedArchive",
    "MalformedField",
    "MalformedOptionsFileError",
    "ReaderOptions",
    "SourceUnavailable",
    "TruncatedContent",
    "UstarError",
    "open_archive",
]
