from os import PathLike
from typing import Any


class UstarError(Exception):
    """Base class of all errors raised while reading an archive."""


class MalformedField(UstarError, ValueError):
    def __init__(self, field: str, raw: bytes) -> None:
        super().__init__()
        self.field = field
        self.raw = raw

    def __str__(self) -> str:
        return f"malformed numeric field {self.field}: {self.raw!r}"

    def __repr__(self) -> str:
        return f"MalformedField({self.field!r}, {self.raw!r})"


class MalformedArchive(UstarError):
    def __init__(self, offset: int, reason: str) -> None:
        super().__init__()
        self.offset = offset
        self.reason = reason

    def __str__(self) -> str:
        return f"malformed archive at offset {self.offset}: {self.reason}"

    def __repr__(self) -> str:
        return f"MalformedArchive({self.offset!r}, {self.reason!r})"


class TruncatedContent(UstarError):
    def __init__(self, name: str, offset: int, expected: int, actual: int) -> None:
        super().__init__()
        self.name = name
        self.offset = offset
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return f"truncated content for {self.name} at offset {self.offset}: want {self.expected} bytes, got {self.actual}"

    def __repr__(self) -> str:
        return f"TruncatedContent({self.name!r}, {self.offset!r}, {self.expected!r}, {self.actual!r})"


class SourceUnavailable(UstarError):
    def __init__(self, source: str, cause: BaseException | None = None) -> None:
        super().__init__()
        self.source = source
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return f"byte source unavailable: {self.source}"
        return f"byte source unavailable: {self.source}: {self.cause}"

    def __repr__(self) -> str:
        return f"SourceUnavailable({self.source!r}, {self.cause!r})"


class InvalidOptionError(UstarError, ValueError):
    def __init__(self, key: str, val: object | None = None) -> None:
        super().__init__()
        self.key = key
        self.val = val

    def __str__(self) -> str:
        if self.val is None:
            return f"invalid reader option: {self.key}"
        return f"invalid value for reader option {self.key}: {self.val!r}"

    def __repr__(self) -> str:
        return f"InvalidOptionError({self.key!r}, {self.val!r})"


class MalformedOptionsFileError(UstarError):
    def __init__(self, path: PathLike[Any] | str) -> None:
        super().__init__()
        self.path = path

    def __str__(self) -> str:
        return f"malformed options file: {self.path}"

    def __repr__(self) -> str:
        return f"MalformedOptionsFileError({self.path!r})"
