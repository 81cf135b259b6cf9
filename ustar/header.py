import datetime
import enum
from functools import cached_property
import sys
from typing import Final

from .errors import MalformedField

# Header layout reference:
# https://www.gnu.org/software/tar/manual/html_node/Standard.html
BLOCK_SIZE: Final = 512

_OCTAL_DIGITS: Final = frozenset(b"01234567")


if sys.version_info >= (3, 11):

    class EntryType(enum.StrEnum):
        AREGULAR = "\0"
        REGULAR = "0"
        LINK = "1"
        SYMLINK = "2"
        CHAR = "3"
        BLOCK = "4"
        DIRECTORY = "5"
        FIFO = "6"
        CONTIGUOUS = "7"

else:

    class EntryType(str, enum.Enum):
        AREGULAR = "\0"
        REGULAR = "0"
        LINK = "1"
        SYMLINK = "2"
        CHAR = "3"
        BLOCK = "4"
        DIRECTORY = "5"
        FIFO = "6"
        CONTIGUOUS = "7"


def decode_octal(field: str, raw: bytes) -> int:
    """Decodes a fixed-width octal ASCII field.

    Trailing NUL and space padding is stripped, as are leading spaces used by
    some writers for right alignment. An empty field decodes to 0. Any other
    byte raises :class:`MalformedField`."""

    digits = raw.rstrip(b"\0 ").lstrip(b" ")
    if not digits:
        return 0
    if not _OCTAL_DIGITS.issuperset(digits):
        raise MalformedField(field, raw)
    return int(digits, 8)


def encode_octal(value: int, width: int) -> bytes:
    """Encodes ``value`` as zero-padded octal digits followed by one NUL,
    ``width`` bytes in total. A value needing all ``width`` digits is written
    without the terminator."""

    if value < 0:
        raise ValueError(f"cannot encode negative value {value}")
    digits = format(value, "o")
    if len(digits) > width:
        raise ValueError(f"value {value} does not fit in {width} bytes")
    if len(digits) == width:
        return digits.encode("ascii")
    return digits.rjust(width - 1, "0").encode("ascii") + b"\0"


def decode_nt_string(raw: bytes, encoding: str = "ascii") -> str:
    nul = raw.find(b"\0")
    if nul != -1:
        raw = raw[:nul]
    return raw.decode(encoding, "surrogateescape")


class HeaderRecord:
    """One decoded 512-byte header block.

    ``pos`` is the absolute offset of the first content byte, i.e. the offset
    just past this header block."""

    def __init__(self, data: bytes, pos: int, encoding: str = "ascii") -> None:
        if len(data) != BLOCK_SIZE:
            raise ValueError(
                f"header block must be {BLOCK_SIZE} bytes long, got {len(data)}"
            )
        self._data = bytes(data)
        self._pos = pos
        self._encoding = encoding

    def __repr__(self) -> str:
        return f"<HeaderRecord name={self.name!r} pos={self._pos}>"

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def offset(self) -> int:
        """Offset of the header block itself."""
        return self._pos - BLOCK_SIZE

    @property
    def raw(self) -> bytes:
        return self._data

    def _octal(self, field: str, start: int, length: int) -> int:
        return decode_octal(field, self._data[start : start + length])

    def _string(self, start: int, length: int) -> str:
        return decode_nt_string(self._data[start : start + length], self._encoding)

    @cached_property
    def name(self) -> str:
        return self._string(0, 100)

    @property
    def is_end_marker(self) -> bool:
        return self.name == ""

    @cached_property
    def mode(self) -> int:
        return self._octal("mode", 100, 8)

    @cached_property
    def uid(self) -> int:
        return self._octal("uid", 108, 8)

    @cached_property
    def gid(self) -> int:
        return self._octal("gid", 116, 8)

    @cached_property
    def size(self) -> int:
        return self._octal("size", 124, 12)

    @cached_property
    def mtime(self) -> int:
        return self._octal("mtime", 136, 12)

    @property
    def mtime_datetime(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.mtime, datetime.timezone.utc)

    @cached_property
    def chksum(self) -> int:
        return self._octal("chksum", 148, 8)

    @cached_property
    def typeflag(self) -> int:
        return self._octal("typeflag", 156, 1)

    @property
    def typeflag_char(self) -> str:
        return chr(self._data[156])

    @property
    def entry_type(self) -> EntryType | None:
        try:
            return EntryType(self.typeflag_char)
        except ValueError:
            # vendor extensions like GNU "L" or PAX "x"
            return None

    @cached_property
    def linkname(self) -> str:
        return self._string(157, 100)

    @cached_property
    def magic(self) -> str:
        return self._string(257, 6)

    @cached_property
    def version(self) -> int:
        return self._octal("version", 263, 2)

    @cached_property
    def uname(self) -> str:
        return self._string(265, 32)

    @cached_property
    def gname(self) -> str:
        return self._string(297, 32)

    @cached_property
    def devmajor(self) -> int:
        return self._octal("devmajor", 329, 8)

    @cached_property
    def devminor(self) -> int:
        return self._octal("devminor", 337, 8)

    @property
    def prefix(self) -> bytes:
        return self._data[345:500]
