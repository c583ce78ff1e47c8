"""Decoder for raw terminal input bytes (xterm/VT dialect).

Handles plain and UTF-8 characters, control characters, Alt combinations,
cursor and editing keys, function keys, and X10/SGR/rxvt mouse reports.
Each malformed sequence becomes one `InputParseError`; decoding resumes at
the next byte so a single bad sequence never poisons the rest of a chunk.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..exceptions import IncompleteInputError, InputParseError
from .models import (
    BACKSPACE,
    DOWN,
    ESC,
    LEFT,
    RIGHT,
    UP,
    Key,
    MouseButton,
    MouseEvent,
    TermEvent,
    Unsupported,
)

_ESC = 0x1B

_CSI_KEYS: dict[int, Key] = {
    ord("A"): UP,
    ord("B"): DOWN,
    ord("C"): RIGHT,
    ord("D"): LEFT,
    ord("H"): Key(code="home"),
    ord("F"): Key(code="end"),
    ord("Z"): Key(code="back_tab"),
}

# SS3 (ESC O) cursor keys sent in application cursor mode.
_SS3_KEYS: dict[int, Key] = {
    ord("A"): UP,
    ord("B"): DOWN,
    ord("C"): RIGHT,
    ord("D"): LEFT,
    ord("H"): Key(code="home"),
    ord("F"): Key(code="end"),
}

_TILDE_KEYS: dict[int, Key] = {
    1: Key(code="home"),
    2: Key(code="insert"),
    3: Key(code="delete"),
    4: Key(code="end"),
    5: Key(code="page_up"),
    6: Key(code="page_down"),
    7: Key(code="home"),
    8: Key(code="end"),
}

_SGR_BUTTONS: dict[int, MouseButton] = {
    0: "left",
    1: "middle",
    2: "right",
    64: "wheel_up",
    65: "wheel_down",
}


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def has_more(self) -> bool:
        return self.pos < len(self.data)

    def next(self) -> int:
        if self.pos >= len(self.data):
            raise IncompleteInputError("Input sequence ended unexpectedly", data=self.data)
        value = self.data[self.pos]
        self.pos += 1
        return value


def _parse_utf8_char(first: int, cursor: _Cursor) -> str:
    if first < 0x80:
        return chr(first)
    if 0xC0 <= first < 0xE0:
        extra = 1
    elif 0xE0 <= first < 0xF0:
        extra = 2
    elif 0xF0 <= first < 0xF8:
        extra = 3
    else:
        raise InputParseError("Input character is not valid UTF-8", data=bytes([first]))
    raw = bytes([first, *(cursor.next() for _ in range(extra))])
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InputParseError("Input character is not valid UTF-8", data=raw) from exc


def _parse_params(raw: bytes) -> list[int]:
    try:
        return [int(part) for part in raw.decode("ascii").split(";")]
    except (UnicodeDecodeError, ValueError) as exc:
        raise InputParseError(f"Invalid CSI parameters: {raw!r}", data=raw) from exc


def _parse_x10_mouse(cursor: _Cursor) -> MouseEvent:
    cb = cursor.next() - 32
    cx = max(cursor.next() - 32, 0)
    cy = max(cursor.next() - 32, 0)
    if cb < 0:
        raise InputParseError("Invalid X10 mouse report", data=cursor.data)
    if cb & 0x20:
        return MouseEvent(action="hold", x=cx, y=cy)
    low = cb & 0b11
    if low == 0:
        return MouseEvent(action="press", x=cx, y=cy, button="wheel_up" if cb & 0x40 else "left")
    if low == 1:
        return MouseEvent(action="press", x=cx, y=cy, button="wheel_down" if cb & 0x40 else "middle")
    if low == 2:
        return MouseEvent(action="press", x=cx, y=cy, button="right")
    return MouseEvent(action="release", x=cx, y=cy)


def _parse_sgr_mouse(cursor: _Cursor, start: int) -> TermEvent:
    raw = bytearray()
    final = cursor.next()
    while final not in (ord("m"), ord("M")):
        raw.append(final)
        final = cursor.next()
    params = _parse_params(bytes(raw))
    if len(params) != 3:
        raise InputParseError("SGR mouse report requires three parameters", data=bytes(raw))
    cb, cx, cy = params
    if cb in _SGR_BUTTONS:
        if final == ord("M"):
            return MouseEvent(action="press", x=cx, y=cy, button=_SGR_BUTTONS[cb])
        return MouseEvent(action="release", x=cx, y=cy)
    if cb == 32:
        return MouseEvent(action="hold", x=cx, y=cy)
    if cb == 3:
        return MouseEvent(action="release", x=cx, y=cy)
    return Unsupported(cursor.data[start : cursor.pos])


def _parse_rxvt_mouse(params: list[int], raw: bytes) -> TermEvent:
    if len(params) != 3:
        return Unsupported(raw)
    cb, cx, cy = params
    if cb == 32:
        return MouseEvent(action="press", x=cx, y=cy, button="left")
    if cb == 33:
        return MouseEvent(action="press", x=cx, y=cy, button="middle")
    if cb == 34:
        return MouseEvent(action="press", x=cx, y=cy, button="right")
    if cb == 35:
        return MouseEvent(action="release", x=cx, y=cy)
    if cb == 64:
        return MouseEvent(action="hold", x=cx, y=cy)
    if cb == 96:
        return MouseEvent(action="press", x=cx, y=cy, button="wheel_up")
    if cb == 97:
        return MouseEvent(action="press", x=cx, y=cy, button="wheel_down")
    return Unsupported(raw)


def _tilde_key(number: int) -> Key | None:
    if number in _TILDE_KEYS:
        return _TILDE_KEYS[number]
    if 11 <= number <= 15:
        return Key.function(number - 10)
    if 17 <= number <= 21:
        return Key.function(number - 11)
    if 23 <= number <= 24:
        return Key.function(number - 12)
    return None


def _parse_csi(cursor: _Cursor, start: int) -> TermEvent:
    code = cursor.next()
    if code == ord("["):
        # Linux console function keys: ESC [ [ A .. ESC [ [ E
        value = cursor.next()
        if ord("A") <= value <= ord("E"):
            return Key.function(1 + value - ord("A"))
        raise InputParseError("Unrecognized linux console sequence", data=cursor.data[start : cursor.pos])
    if code in _CSI_KEYS:
        return _CSI_KEYS[code]
    if code == ord("M"):
        return _parse_x10_mouse(cursor)
    if code == ord("<"):
        return _parse_sgr_mouse(cursor, start)
    if 0x30 <= code <= 0x3F:
        raw = bytearray([code])
        final = cursor.next()
        while not 0x40 <= final <= 0x7E:
            raw.append(final)
            final = cursor.next()
        sequence = cursor.data[start : cursor.pos]
        if not ord("0") <= code <= ord("9"):
            return Unsupported(sequence)
        params = _parse_params(bytes(raw))
        if final == ord("M"):
            return _parse_rxvt_mouse(params, sequence)
        if final == ord("~") and len(params) == 1:
            key = _tilde_key(params[0])
            if key is not None:
                return key
        return Unsupported(sequence)
    return Unsupported(cursor.data[start : cursor.pos])


def _parse_one(cursor: _Cursor) -> TermEvent:
    start = cursor.pos
    first = cursor.next()
    if first == _ESC:
        if not cursor.has_more():
            return ESC
        second = cursor.next()
        if second == ord("O"):
            code = cursor.next()
            if ord("P") <= code <= ord("S"):
                return Key.function(1 + code - ord("P"))
            if code in _SS3_KEYS:
                return _SS3_KEYS[code]
            raise InputParseError("Unrecognized SS3 sequence", data=cursor.data[start : cursor.pos])
        if second == ord("["):
            return _parse_csi(cursor, start)
        return Key.alt(_parse_utf8_char(second, cursor))
    if first in (0x0A, 0x0D):
        return Key.character("\n")
    if first == 0x09:
        return Key.character("\t")
    if first == 0x7F:
        return BACKSPACE
    if 0x01 <= first <= 0x1A:
        return Key.ctrl(chr(first - 0x01 + ord("a")))
    if 0x1C <= first <= 0x1F:
        return Key.ctrl(chr(first - 0x1C + ord("4")))
    if first == 0x00:
        return Key(code="null")
    return Key.character(_parse_utf8_char(first, cursor))


def iter_parse(data: bytes) -> Iterator[TermEvent | InputParseError]:
    """Yield one decoded event or parse error per input sequence in `data`."""
    cursor = _Cursor(data)
    while cursor.has_more():
        start = cursor.pos
        try:
            yield _parse_one(cursor)
        except InputParseError as exc:
            if cursor.pos == start:
                cursor.pos = start + 1
            yield type(exc)(str(exc), data=data[start : cursor.pos])


def parse_event(data: bytes) -> TermEvent:
    """Decode exactly one event from `data`, raising on malformed or extra bytes."""
    results = list(iter_parse(data))
    if len(results) != 1:
        raise InputParseError(f"Expected one input sequence, found {len(results)}", data=data)
    result = results[0]
    if isinstance(result, InputParseError):
        raise result
    return result


class InputDecoder:
    """Chunk decoder that drops malformed sequences and counts them.

    A sequence cut off at the end of a chunk is held back and completed by
    the next chunk, so reads that split a UTF-8 character or an escape
    sequence still decode correctly. A lone trailing ESC is the Esc key and
    is never held.
    """

    max_pending = 64

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("term_events")
        self.malformed = 0
        self._pending = b""

    @property
    def pending(self) -> bytes:
        return self._pending

    def decode(self, data: bytes) -> Iterator[TermEvent]:
        data = self._pending + data
        self._pending = b""
        for result in iter_parse(data):
            if isinstance(result, IncompleteInputError) and len(result.data) < self.max_pending:
                self._pending = result.data
                continue
            if isinstance(result, InputParseError):
                self._discard(result)
                continue
            yield result

    def finish(self) -> None:
        """Discard a sequence left incomplete at end of input."""
        if self._pending:
            self._discard(
                IncompleteInputError("Input sequence ended unexpectedly", data=self._pending)
            )
            self._pending = b""

    def _discard(self, error: InputParseError) -> None:
        self.malformed += 1
        self.logger.debug("Discarding malformed input %r: %s", error.data, error)
