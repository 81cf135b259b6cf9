import io
import pathlib
import tarfile
from typing import Iterable

import pytest

from ustar.header import BLOCK_SIZE, encode_octal
from ustar.log import UstarConsoleLogger, UstarLogger
from ustar.utils.global_mode import GlobalModeProvider

ZERO_BLOCK = b"\0" * BLOCK_SIZE
FIXED_MTIME = 1700000000


class MockGlobalModeProvider(GlobalModeProvider):
    def __init__(self, is_debug: bool = False) -> None:
        self._is_debug = is_debug

    @property
    def is_debug(self) -> bool:
        return self._is_debug


def make_tarinfo(
    name: str,
    data: bytes = b"",
    *,
    type: bytes = tarfile.REGTYPE,
    mode: int = 0o644,
    linkname: str = "",
) -> tuple[tarfile.TarInfo, bytes | None]:
    ti = tarfile.TarInfo(name)
    ti.type = type
    ti.mode = mode
    ti.uid = 1000
    ti.gid = 100
    ti.uname = "alice"
    ti.gname = "users"
    ti.mtime = FIXED_MTIME
    ti.linkname = linkname
    if type in (tarfile.REGTYPE, tarfile.AREGTYPE):
        ti.size = len(data)
        return ti, data
    return ti, None


def build_tar(
    members: Iterable[tuple[str, bytes] | tuple[tarfile.TarInfo, bytes | None]],
) -> bytes:
    """Writes a USTAR archive with the standard library, padded to a full
    tar record the way tar(1) does."""

    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.USTAR_FORMAT) as tf:
        for m in members:
            if isinstance(m[0], str):
                assert isinstance(m[1], bytes)
                ti, data = make_tarinfo(m[0], m[1])
            else:
                ti, data = m
            tf.addfile(ti, None if data is None else io.BytesIO(data))
    return buf.getvalue()


def raw_header(name: bytes, size: int = 0, *, size_field: bytes | None = None) -> bytes:
    """A hand-made header block, for shapes the tarfile module refuses to
    write."""

    if size_field is None:
        size_field = encode_octal(size, 12)

    blk = bytearray(BLOCK_SIZE)
    blk[0 : len(name)] = name
    blk[100:108] = encode_octal(0o644, 8)
    blk[108:116] = encode_octal(0, 8)
    blk[116:124] = encode_octal(0, 8)
    blk[124 : 124 + len(size_field)] = size_field
    blk[136:148] = encode_octal(FIXED_MTIME, 12)
    blk[156:157] = b"0"
    blk[257:263] = b"ustar\0"
    blk[263:265] = b"00"
    return bytes(blk)


def content_blocks(data: bytes) -> bytes:
    rem = len(data) % BLOCK_SIZE
    if rem == 0:
        return data
    return data + b"\0" * (BLOCK_SIZE - rem)


@pytest.fixture
def mock_gm() -> MockGlobalModeProvider:
    return MockGlobalModeProvider()


@pytest.fixture
def log_buf(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    # keep rich from wrapping log lines in the middle of assertions
    monkeypatch.setenv("COLUMNS", "400")
    return io.StringIO()


@pytest.fixture
def ustar_logger(mock_gm: GlobalModeProvider, log_buf: io.StringIO) -> UstarLogger:
    """Fixture for creating a UstarLogger instance writing into ``log_buf``."""
    return UstarConsoleLogger(mock_gm, stderr=log_buf)


@pytest.fixture
def debug_logger(log_buf: io.StringIO) -> UstarLogger:
    return UstarConsoleLogger(MockGlobalModeProvider(is_debug=True), stderr=log_buf)


@pytest.fixture
def sample_tar() -> bytes:
    return build_tar(
        [
            make_tarinfo("docs", type=tarfile.DIRTYPE, mode=0o755),
            ("docs/readme.txt", b"read me\n"),
            ("empty", b""),
            ("block.bin", b"\xaa" * BLOCK_SIZE),
            ("block-plus-one.bin", b"\x55" * (BLOCK_SIZE + 1)),
            make_tarinfo("link", type=tarfile.SYMTYPE, linkname="docs/readme.txt"),
        ]
    )


@pytest.fixture
def sample_tar_path(tmp_path: pathlib.Path, sample_tar: bytes) -> pathlib.Path:
    p = tmp_path / "sample.tar"
    p.write_bytes(sample_tar)
    return p
