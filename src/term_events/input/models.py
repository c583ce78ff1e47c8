"""Typed terminal input events produced by the input decoder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

KeyCode = Literal[
    "backspace",
    "left",
    "right",
    "up",
    "down",
    "home",
    "end",
    "page_up",
    "page_down",
    "back_tab",
    "delete",
    "insert",
    "f",
    "char",
    "alt",
    "ctrl",
    "null",
    "esc",
]
MouseAction = Literal["press", "release", "hold"]
MouseButton = Literal["left", "right", "middle", "wheel_up", "wheel_down"]

_CHAR_CODES = frozenset({"char", "alt", "ctrl"})


@dataclass(frozen=True, slots=True)
class Key:
    """One key press. `char` is set for char/alt/ctrl keys, `number` for F-keys."""

    code: KeyCode
    char: str | None = None
    number: int | None = None

    def __post_init__(self) -> None:
        if self.code in _CHAR_CODES and (self.char is None or len(self.char) != 1):
            raise ValueError(f"{self.code} key requires a single character")
        if self.code == "f" and (self.number is None or self.number <= 0):
            raise ValueError("function key requires a positive number")

    @classmethod
    def character(cls, char: str) -> Key:
        return cls(code="char", char=char)

    @classmethod
    def alt(cls, char: str) -> Key:
        return cls(code="alt", char=char)

    @classmethod
    def ctrl(cls, char: str) -> Key:
        return cls(code="ctrl", char=char)

    @classmethod
    def function(cls, number: int) -> Key:
        return cls(code="f", number=number)

    def label(self) -> str:
        """Short human-readable name, e.g. ``Ctrl+c`` or ``F5``."""
        if self.code == "char":
            return {"\n": "Enter", "\t": "Tab", " ": "Space"}.get(self.char or "", self.char or "")
        if self.code == "alt":
            return f"Alt+{self.char}"
        if self.code == "ctrl":
            return f"Ctrl+{self.char}"
        if self.code == "f":
            return f"F{self.number}"
        return self.code.replace("_", " ").title().replace(" ", "")


@dataclass(frozen=True, slots=True)
class MouseEvent:
    """Mouse report with 1-based terminal cell coordinates."""

    action: MouseAction
    x: int
    y: int
    button: MouseButton | None = None

    def label(self) -> str:
        if self.action == "press":
            return f"Mouse {self.button} ({self.x},{self.y})"
        return f"Mouse {self.action} ({self.x},{self.y})"


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Well-formed escape sequence the decoder does not map to a key."""

    data: bytes

    def label(self) -> str:
        return f"Unsupported {self.data!r}"


TermEvent = Union[Key, MouseEvent, Unsupported]

ESC = Key(code="esc")
BACKSPACE = Key(code="backspace")
UP = Key(code="up")
DOWN = Key(code="down")
LEFT = Key(code="left")
RIGHT = Key(code="right")
