"""Terminal input decoding and device access."""

from .models import Key, MouseEvent, TermEvent, Unsupported
from .parser import InputDecoder, iter_parse, parse_event
from .terminal import DEFAULT_TTY_PATH, TerminalInput, open_tty

__all__ = [
    "DEFAULT_TTY_PATH",
    "InputDecoder",
    "Key",
    "MouseEvent",
    "TermEvent",
    "TerminalInput",
    "Unsupported",
    "iter_parse",
    "open_tty",
    "parse_event",
]
