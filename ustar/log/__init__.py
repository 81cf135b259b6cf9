import abc
import datetime
from functools import cached_property
import sys
from typing import Any, TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    # too heavy at package import time
    from rich.console import Console, RenderableType
    from rich.text import Text

from ..utils.global_mode import EnvGlobalModeProvider, ProvidesGlobalMode


def log_time_formatter(x: datetime.datetime) -> "Text":
    from rich.text import Text

    return Text(f"debug: [{x.isoformat()}]")


class UstarLogger(metaclass=abc.ABCMeta):
    """Diagnostics sink of an archive reader.

    ``D`` traces the scan (headers and terminators found), ``W`` reports
    anomalies the reader was configured to tolerate."""

    @abc.abstractmethod
    def D(
        self,
        message: "RenderableType",
        *objects: Any,
        _stack_offset_delta: int = 0,
    ) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def W(self, message: "RenderableType", *objects: Any) -> None:
        raise NotImplementedError


class UstarConsoleLogger(UstarLogger):
    def __init__(
        self,
        gm: ProvidesGlobalMode,
        stderr: TextIO = sys.stderr,
    ) -> None:
        self._gm = gm
        self._stderr = stderr

    @cached_property
    def _debug_console(self) -> "Console":
        from rich.console import Console

        return Console(
            file=self._stderr,
            log_time_format=log_time_formatter,
            soft_wrap=True,
        )

    @cached_property
    def _warn_console(self) -> "Console":
        from rich.console import Console

        return Console(file=self._stderr, highlight=False, soft_wrap=True)

    def D(
        self,
        message: "RenderableType",
        *objects: Any,
        _stack_offset_delta: int = 0,
    ) -> None:
        if not self._gm.is_debug:
            return

        self._debug_console.log(
            message,
            *objects,
            _stack_offset=2 + _stack_offset_delta,
        )

    def W(self, message: "RenderableType", *objects: Any) -> None:
        self._warn_console.print(f"[bold yellow]warn:[/] {message}", *objects)


_default_logger: UstarLogger | None = None


def get_default_logger() -> UstarLogger:
    """Returns the process-wide console logger, with debug output controlled
    by the ``USTAR_DEBUG`` environment variable."""

    global _default_logger
    if _default_logger is None:
        _default_logger = UstarConsoleLogger(EnvGlobalModeProvider())
    return _default_logger
