"""Application exception classes."""

from __future__ import annotations

from typing import Any


class TermEventsError(Exception):
    """Base exception for this package."""


class ConfigError(TermEventsError):
    """Raised when configuration is invalid or incomplete."""


class TerminalUnavailableError(TermEventsError):
    """Raised when the controlling terminal device cannot be opened."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class InputParseError(TermEventsError):
    """Raised when a raw terminal input sequence cannot be decoded."""

    def __init__(self, message: str, *, data: bytes = b"") -> None:
        super().__init__(message)
        self.data = data


class IncompleteInputError(InputParseError):
    """Raised when input ends part-way through a sequence."""


class ChannelError(TermEventsError):
    """Raised for event channel send/receive failures."""


class SendError(ChannelError):
    """Raised when sending into a channel whose receiving end is closed."""

    def __init__(self, item: Any) -> None:
        super().__init__("sending on a disconnected channel")
        self.item = item


class ChannelFullError(ChannelError):
    """Raised by a non-blocking send when the channel is at capacity."""

    def __init__(self, item: Any) -> None:
        super().__init__("sending on a full channel")
        self.item = item


class RecvError(ChannelError):
    """Raised when no more messages will ever arrive on a channel."""

    def __init__(self) -> None:
        super().__init__("receiving on an empty and disconnected channel")
