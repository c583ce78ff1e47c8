"""Merge terminal input and a fixed-rate tick into one blocking event stream."""

from .config import EventsConfig
from .events import Events, terminal_source
from .exceptions import RecvError
from .input.models import Key, MouseEvent, TermEvent, Unsupported
from .models import TICK, Event, Input, Tick

Config = EventsConfig

__all__ = [
    "TICK",
    "Config",
    "Event",
    "Events",
    "EventsConfig",
    "Input",
    "Key",
    "MouseEvent",
    "RecvError",
    "TermEvent",
    "Tick",
    "Unsupported",
    "__version__",
    "terminal_source",
]

__version__ = "0.1.0"
