"""Tests for raw terminal byte decoding."""

from __future__ import annotations

import logging

import pytest

from term_events.exceptions import InputParseError
from term_events.input.models import Key, MouseEvent, Unsupported
from term_events.input.parser import InputDecoder, iter_parse, parse_event


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"q", Key.character("q")),
        (b"\r", Key.character("\n")),
        (b"\n", Key.character("\n")),
        (b"\t", Key.character("\t")),
        (b"\x7f", Key(code="backspace")),
        (b"\x03", Key.ctrl("c")),
        (b"\x1a", Key.ctrl("z")),
        (b"\x1c", Key.ctrl("4")),
        (b"\x00", Key(code="null")),
        (b"\x1b", Key(code="esc")),
        (b"\x1bx", Key.alt("x")),
        ("é".encode(), Key.character("é")),
        ("€".encode(), Key.character("€")),
    ],
)
def test_single_byte_and_char_keys(data: bytes, expected: Key) -> None:
    assert parse_event(data) == expected


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"\x1b[A", Key(code="up")),
        (b"\x1b[B", Key(code="down")),
        (b"\x1b[C", Key(code="right")),
        (b"\x1b[D", Key(code="left")),
        (b"\x1b[H", Key(code="home")),
        (b"\x1b[F", Key(code="end")),
        (b"\x1b[Z", Key(code="back_tab")),
        (b"\x1bOA", Key(code="up")),
        (b"\x1b[2~", Key(code="insert")),
        (b"\x1b[3~", Key(code="delete")),
        (b"\x1b[5~", Key(code="page_up")),
        (b"\x1b[6~", Key(code="page_down")),
        (b"\x1b[7~", Key(code="home")),
        (b"\x1b[8~", Key(code="end")),
    ],
)
def test_cursor_and_editing_keys(data: bytes, expected: Key) -> None:
    assert parse_event(data) == expected


@pytest.mark.parametrize(
    ("data", "number"),
    [
        (b"\x1bOP", 1),
        (b"\x1bOS", 4),
        (b"\x1b[[A", 1),
        (b"\x1b[[E", 5),
        (b"\x1b[15~", 5),
        (b"\x1b[17~", 6),
        (b"\x1b[21~", 10),
        (b"\x1b[24~", 12),
    ],
)
def test_function_keys(data: bytes, number: int) -> None:
    assert parse_event(data) == Key.function(number)


def test_x10_mouse_press_and_release() -> None:
    press = parse_event(b"\x1b[M" + bytes([32, 32 + 10, 32 + 5]))
    assert press == MouseEvent(action="press", x=10, y=5, button="left")

    wheel = parse_event(b"\x1b[M" + bytes([32 + 0x40, 33, 34]))
    assert wheel == MouseEvent(action="press", x=1, y=2, button="wheel_up")

    release = parse_event(b"\x1b[M" + bytes([32 + 3, 40, 41]))
    assert release == MouseEvent(action="release", x=8, y=9)


def test_sgr_mouse_reports() -> None:
    assert parse_event(b"\x1b[<0;12;7M") == MouseEvent(action="press", x=12, y=7, button="left")
    assert parse_event(b"\x1b[<65;3;4M") == MouseEvent(
        action="press", x=3, y=4, button="wheel_down"
    )
    assert parse_event(b"\x1b[<0;12;7m") == MouseEvent(action="release", x=12, y=7)
    assert parse_event(b"\x1b[<32;5;6M") == MouseEvent(action="hold", x=5, y=6)


def test_rxvt_mouse_report() -> None:
    assert parse_event(b"\x1b[32;20;3M") == MouseEvent(action="press", x=20, y=3, button="left")
    assert parse_event(b"\x1b[35;20;3M") == MouseEvent(action="release", x=20, y=3)


def test_well_formed_but_unknown_sequences_are_unsupported() -> None:
    assert parse_event(b"\x1b[1;5A") == Unsupported(b"\x1b[1;5A")
    assert parse_event(b"\x1b[99~") == Unsupported(b"\x1b[99~")


def test_chunk_with_several_events_decodes_in_order() -> None:
    results = list(iter_parse(b"ab\x1b[A\x03"))
    assert results == [
        Key.character("a"),
        Key.character("b"),
        Key(code="up"),
        Key.ctrl("c"),
    ]


def test_truncated_sequence_is_reported_as_parse_error() -> None:
    with pytest.raises(InputParseError):
        parse_event(b"\x1b[<0;1")
    with pytest.raises(InputParseError, match="UTF-8"):
        parse_event(b"\xff")


def test_decoder_drops_malformed_sequences_and_continues() -> None:
    decoder = InputDecoder(logger=logging.getLogger("test.decoder"))
    events = list(decoder.decode(b"a\xffb"))
    assert events == [Key.character("a"), Key.character("b")]
    assert decoder.malformed == 1


def test_key_labels() -> None:
    assert Key.ctrl("c").label() == "Ctrl+c"
    assert Key.function(5).label() == "F5"
    assert Key(code="page_up").label() == "PageUp"
    assert Key.character("\n").label() == "Enter"


def test_key_rejects_inconsistent_fields() -> None:
    with pytest.raises(ValueError, match="single character"):
        Key(code="char")
    with pytest.raises(ValueError, match="function key"):
        Key(code="f")


def test_decoder_completes_sequences_split_across_chunks() -> None:
    decoder = InputDecoder(logger=logging.getLogger("test.decoder"))
    encoded = "é".encode()

    assert list(decoder.decode(b"a" + encoded[:1])) == [Key.character("a")]
    assert decoder.pending == encoded[:1]
    assert list(decoder.decode(encoded[1:] + b"\x1b[")) == [Key.character("é")]
    assert list(decoder.decode(b"A\x1b[<0;1")) == [Key(code="up")]
    assert list(decoder.decode(b"0;5M")) == [
        MouseEvent(action="press", x=10, y=5, button="left")
    ]
    assert decoder.malformed == 0
    assert decoder.pending == b""


def test_decoder_finish_discards_incomplete_tail() -> None:
    decoder = InputDecoder(logger=logging.getLogger("test.decoder"))
    assert list(decoder.decode(b"\x1b[<0")) == []
    decoder.finish()
    assert decoder.malformed == 1
    assert decoder.pending == b""


def test_decoder_does_not_hold_unbounded_partial_sequences() -> None:
    decoder = InputDecoder(logger=logging.getLogger("test.decoder"))
    assert list(decoder.decode(b"\x1b[<" + b"1" * 100)) == []
    assert decoder.malformed == 1
    assert decoder.pending == b""
