import io
import os
from typing import Any, BinaryIO, Final, Protocol, runtime_checkable

from .errors import SourceUnavailable

READ_CHUNK_SIZE: Final = 1 << 20


@runtime_checkable
class ByteSource(Protocol):
    """A finite, seekable sequence of bytes with a current position."""

    @property
    def description(self) -> str: ...

    def read(self, n: int, /) -> bytes:
        """Reads exactly ``n`` bytes, or fewer only at end-of-source."""
        ...

    def seek(self, offset: int, /) -> None:
        """Moves the current position to the absolute ``offset``."""
        ...

    def tell(self) -> int: ...

    def close(self) -> None: ...


class StreamSource:
    """Byte source over a seekable binary stream.

    The stream is closed on :meth:`close` only when ``owned`` is true."""

    def __init__(
        self,
        fileobj: BinaryIO,
        owned: bool = False,
        description: str | None = None,
    ) -> None:
        if description is None:
            description = repr(getattr(fileobj, "name", fileobj))
        self._description = description
        self._f = fileobj
        self._owned = owned

        try:
            seekable = fileobj.seekable()
        except (OSError, ValueError) as e:
            raise SourceUnavailable(description, e) from e
        if not seekable:
            raise SourceUnavailable(description, ValueError("stream is not seekable"))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._description}>"

    @property
    def description(self) -> str:
        return self._description

    @property
    def closed(self) -> bool:
        return self._f.closed

    def read(self, n: int, /) -> bytes:
        chunks: list[bytes] = []
        remaining = n
        try:
            # a single read() may return short on pipes and some file-likes,
            # and n comes from an untrusted header, so read in bounded chunks
            while remaining > 0:
                chunk = self._f.read(min(remaining, READ_CHUNK_SIZE))
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except (OSError, ValueError) as e:
            raise SourceUnavailable(self._description, e) from e
        return b"".join(chunks)

    def seek(self, offset: int, /) -> None:
        try:
            self._f.seek(offset, os.SEEK_SET)
        except (OSError, ValueError) as e:
            raise SourceUnavailable(self._description, e) from e

    def tell(self) -> int:
        try:
            return self._f.tell()
        except (OSError, ValueError) as e:
            raise SourceUnavailable(self._description, e) from e

    def close(self) -> None:
        if self._owned:
            self._f.close()


class BufferSource(StreamSource):
    """Byte source over an in-memory buffer."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        super().__init__(
            io.BytesIO(data),
            owned=True,
            description=f"<buffer of {len(data)} bytes>",
        )


class FileSource(StreamSource):
    """Byte source over a file on disk, opened (and owned) by the source."""

    def __init__(self, path: str | os.PathLike[Any]) -> None:
        self.path = os.fspath(path)
        try:
            fp = open(self.path, "rb")
        except OSError as e:
            raise SourceUnavailable(str(self.path), e) from e

        try:
            super().__init__(fp, owned=True, description=str(self.path))
        except SourceUnavailable:
            fp.close()
            raise
