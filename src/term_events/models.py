"""Messages delivered by the event handle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

InputT = TypeVar("InputT")


@dataclass(frozen=True, slots=True)
class Input(Generic[InputT]):
    """One raw input event forwarded from the input producer."""

    event: InputT


@dataclass(frozen=True, slots=True)
class Tick:
    """Periodic payload-less event from the tick producer."""


TICK = Tick()

Event = Union[Input[InputT], Tick]
