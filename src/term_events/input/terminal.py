"""Controlling-terminal access for the input producer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import BinaryIO

from ..exceptions import TerminalUnavailableError
from .models import TermEvent
from .parser import InputDecoder

DEFAULT_TTY_PATH = "/dev/tty"


def open_tty(path: str = DEFAULT_TTY_PATH) -> BinaryIO:
    """Open the terminal device for unbuffered binary reads."""
    try:
        return open(path, "rb", buffering=0)
    except OSError as exc:
        raise TerminalUnavailableError(f"Could not find tty at {path}: {exc}", path=path) from exc


class TerminalInput:
    """Lazy, infinite, non-restartable stream of decoded terminal events.

    Each `read` returns whatever the terminal has buffered. A lone ESC byte
    at the end of a read is reported as the Esc key; any other sequence cut
    off by a read boundary is completed by the next read. The stream ends on
    EOF; read failures propagate as `OSError`.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        read_size: int = 1024,
        logger: logging.Logger | None = None,
    ) -> None:
        self._stream = stream
        self._read_size = read_size
        self._decoder = InputDecoder(logger=logger)
        self._started = False

    @classmethod
    def open(
        cls,
        path: str = DEFAULT_TTY_PATH,
        *,
        read_size: int = 1024,
        logger: logging.Logger | None = None,
    ) -> TerminalInput:
        return cls(open_tty(path), read_size=read_size, logger=logger)

    @property
    def malformed(self) -> int:
        return self._decoder.malformed

    def events(self) -> Iterator[TermEvent]:
        if self._started:
            raise RuntimeError("terminal event stream can only be consumed once")
        self._started = True
        try:
            while True:
                chunk = self._stream.read(self._read_size)
                if not chunk:
                    self._decoder.finish()
                    return
                yield from self._decoder.decode(chunk)
        finally:
            self._stream.close()

    def __iter__(self) -> Iterator[TermEvent]:
        return self.events()
