from contextlib import AbstractContextManager
import os
import threading
from types import TracebackType
from typing import Any, BinaryIO, Callable, Iterator, Mapping, TYPE_CHECKING

from rich.markup import escape

if TYPE_CHECKING:
    from typing_extensions import Self

from .errors import MalformedArchive, SourceUnavailable, TruncatedContent
from .header import BLOCK_SIZE, HeaderRecord
from .log import UstarLogger, get_default_logger
from .options import LONE_ZERO_BLOCK_END, ReaderOptions, coerce_options
from .source import BufferSource, ByteSource, FileSource, StreamSource

ContentReader = Callable[[int, int], bytes]
"""Reads ``length`` bytes at an absolute ``offset`` of an archive's source."""

OptionsLike = ReaderOptions | Mapping[str, Any] | None


def padded_size(size: int) -> int:
    """Space taken by ``size`` bytes of content, rounded up to whole blocks."""
    return -(-size // BLOCK_SIZE) * BLOCK_SIZE


class EntryHandle:
    """One member of an archive.

    The handle reads its content through the owning reader and must not
    outlive it."""

    def __init__(self, header: HeaderRecord, read_at: ContentReader) -> None:
        self._header = header
        self._read_at = read_at

    def __repr__(self) -> str:
        return f"<EntryHandle name={self.name!r} size={self.size}>"

    @property
    def header(self) -> HeaderRecord:
        return self._header

    @property
    def name(self) -> str:
        return self._header.name

    @property
    def size(self) -> int:
        return self._header.size

    def content(self) -> bytes:
        """Reads the whole content of the entry from the archive source.

        Every call reads the source anew."""

        h = self._header
        if h.size == 0:
            return b""

        data = self._read_at(h.pos, h.size)
        if len(data) != h.size:
            raise TruncatedContent(h.name, h.pos, h.size, len(data))
        return data


class ArchiveReader(AbstractContextManager["ArchiveReader"]):
    """Reads a USTAR archive.

    All headers are scanned when the reader is constructed; content is only
    read when :meth:`EntryHandle.content` is called. A failed scan closes the
    source and propagates the error."""

    def __init__(
        self,
        source: ByteSource,
        options: OptionsLike = None,
        logger: UstarLogger | None = None,
    ) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._closed = False
        self.logger = get_default_logger() if logger is None else logger

        try:
            self.options = coerce_options(options)
            self.headers = tuple(self._scan())
        except BaseException:
            source.close()
            raise

        self.entries = tuple(EntryHandle(h, self.read_at) for h in self.headers)

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        options: OptionsLike = None,
        logger: UstarLogger | None = None,
    ) -> "Self":
        return cls(BufferSource(data), options, logger)

    @classmethod
    def from_path(
        cls,
        path: str | os.PathLike[Any],
        options: OptionsLike = None,
        logger: UstarLogger | None = None,
    ) -> "Self":
        return cls(FileSource(path), options, logger)

    @classmethod
    def from_stream(
        cls,
        fileobj: BinaryIO,
        options: OptionsLike = None,
        logger: UstarLogger | None = None,
        *,
        owned: bool = False,
    ) -> "Self":
        return cls(StreamSource(fileobj, owned=owned), options, logger)

    def __repr__(self) -> str:
        desc = self._source.description
        return f"<ArchiveReader {desc} entries={len(self.entries)}>"

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[EntryHandle]:
        return iter(self.entries)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._source.close()

    def read_at(self, offset: int, length: int) -> bytes:
        """Reads up to ``length`` bytes at ``offset``; fewer bytes are returned
        only if the source ends early."""

        with self._lock:
            if self._closed:
                raise SourceUnavailable(
                    self._source.description,
                    ValueError("archive is closed"),
                )
            self._source.seek(offset)
            return self._source.read(length)

    def _scan(self) -> list[HeaderRecord]:
        src = self._source
        encoding = self.options.encoding
        headers: list[HeaderRecord] = []

        while True:
            offset = src.tell()
            data = src.read(BLOCK_SIZE)
            if not data:
                break
            if len(data) < BLOCK_SIZE:
                raise MalformedArchive(
                    offset, f"truncated header block of {len(data)} bytes"
                )

            h = HeaderRecord(data, offset + BLOCK_SIZE, encoding)
            if h.is_end_marker:
                self._check_terminator(offset)
                break

            size = h.size
            headers.append(h)
            self.logger.D(
                f"found entry [cyan]{escape(h.name)}[/] at offset {offset}, size {size}"
            )

            if size > 0:
                src.seek(h.pos + padded_size(size))

        return headers

    def _check_terminator(self, offset: int) -> None:
        # offset is where the first end-of-archive block starts
        data = self._source.read(BLOCK_SIZE)
        if len(data) == BLOCK_SIZE:
            second = HeaderRecord(
                data,
                offset + 2 * BLOCK_SIZE,
                self.options.encoding,
            )
            if second.is_end_marker:
                self.logger.D(f"end-of-archive marker at offset {offset}")
                return
            raise MalformedArchive(
                offset, "end-of-archive block followed by a non-empty header"
            )

        if not data and self.options.lone_zero_block == LONE_ZERO_BLOCK_END:
            self.logger.W(
                f"lone end-of-archive block at offset {offset}, treating as end of archive"
            )
            return

        raise MalformedArchive(
            offset, "end-of-archive block not followed by another one"
        )


def open_archive(
    src: bytes | bytearray | memoryview | str | os.PathLike[Any] | BinaryIO,
    options: OptionsLike = None,
    logger: UstarLogger | None = None,
) -> ArchiveReader:
    """Opens an archive from in-memory bytes, a filesystem path, or an open
    seekable binary stream."""

    match src:
        case bytes() | bytearray() | memoryview():
            return ArchiveReader.from_bytes(src, options, logger)
        case str() | os.PathLike():
            return ArchiveReader.from_path(src, options, logger)
        case _:
            return ArchiveReader.from_stream(src, options, logger)
