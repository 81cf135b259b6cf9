import codecs
from dataclasses import dataclass
from os import PathLike
from typing import Any, Final, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    from typing_extensions import Self

from .errors import InvalidOptionError, MalformedOptionsFileError

SECTION_READER: Final = "reader"

KEY_ENCODING: Final = "encoding"
KEY_LONE_ZERO_BLOCK: Final = "lone_zero_block"

LONE_ZERO_BLOCK_ERROR: Final = "error"
LONE_ZERO_BLOCK_END: Final = "end"
LONE_ZERO_BLOCK_POLICIES: Final = {LONE_ZERO_BLOCK_ERROR, LONE_ZERO_BLOCK_END}


@dataclass(frozen=True)
class ReaderOptions:
    """Tunables of :class:`ustar.archive.ArchiveReader`.

    The defaults describe a strict USTAR reader; an empty configuration is
    always valid."""

    encoding: str = "ascii"
    """Text encoding of the string fields of a header"""

    lone_zero_block: str = LONE_ZERO_BLOCK_ERROR
    """What to do with a single end-of-archive block followed by end-of-source:
    ``"error"`` fails the scan, ``"end"`` treats it as the end of the archive"""

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise InvalidOptionError(KEY_ENCODING, self.encoding)

        if self.lone_zero_block not in LONE_ZERO_BLOCK_POLICIES:
            raise InvalidOptionError(KEY_LONE_ZERO_BLOCK, self.lone_zero_block)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Self":
        kwargs: dict[str, str] = {}
        for k, v in data.items():
            if k not in (KEY_ENCODING, KEY_LONE_ZERO_BLOCK):
                raise InvalidOptionError(k)
            if not isinstance(v, str):
                raise InvalidOptionError(k, v)
            # tomlkit hands out str subclasses, normalize them
            kwargs[k] = str(v)
        return cls(**kwargs)

    @classmethod
    def load_from_file(cls, path: PathLike[Any] | str) -> "Self":
        """Reads the ``[reader]`` table of a TOML file; a missing file means
        all defaults."""

        import tomlkit
        from tomlkit.exceptions import ParseError

        try:
            with open(path, "rb") as fp:
                data: Any = tomlkit.load(fp)
        except FileNotFoundError:
            return cls()
        except ParseError as e:
            raise MalformedOptionsFileError(path) from e

        section = data.get(SECTION_READER)
        if section is None:
            return cls()
        if not isinstance(section, Mapping):
            raise InvalidOptionError(SECTION_READER, section)
        return cls.from_mapping(section)


def coerce_options(
    options: "ReaderOptions | Mapping[str, Any] | None",
) -> ReaderOptions:
    if options is None:
        return ReaderOptions()
    if isinstance(options, ReaderOptions):
        return options
    return ReaderOptions.from_mapping(options)
