"""Fan-in of terminal input and a fixed-rate tick into one blocking stream.

Two daemon threads feed a shared channel of capacity 1:

- the input producer sends without blocking and drops events while the
  channel is full, so bursts (scroll wheel spam) never queue up;
- the tick producer sends with blocking, so a slow consumer delays ticks
  but never loses them.

The consumer calls `Events.next()` and receives whichever message entered
the channel first.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from typing import Generic

from .channel import Receiver, Sender, bounded
from .config import EventsConfig
from .exceptions import ChannelFullError, RecvError, SendError, TerminalUnavailableError
from .input.models import TermEvent
from .input.terminal import DEFAULT_TTY_PATH, TerminalInput
from .models import TICK, Event, Input, InputT, Tick

InputSource = Callable[[], Iterable[InputT]]

EXIT_NO_TTY = 1


def terminal_source(
    path: str = DEFAULT_TTY_PATH,
    *,
    logger: logging.Logger | None = None,
) -> InputSource[TermEvent]:
    """Input source factory reading decoded events from the terminal at `path`."""

    def _open() -> Iterable[TermEvent]:
        return TerminalInput.open(path, logger=logger).events()

    return _open


def _abort(exc: TerminalUnavailableError, logger: logging.Logger) -> None:
    """Terminate the whole process; the aggregator cannot run without a tty."""
    logger.critical("Terminal unavailable, exiting: %s", exc)
    logging.shutdown()
    os._exit(EXIT_NO_TTY)


def _run_input_producer(
    sender: Sender[Event[InputT]],
    source: InputSource[InputT],
    logger: logging.Logger,
) -> None:
    with sender:
        try:
            events = source()
        except TerminalUnavailableError as exc:
            _abort(exc, logger)
            return

        try:
            for event in events:
                try:
                    sender.try_send(Input(event))
                except ChannelFullError:
                    logger.debug("Event queue full; dropping input %r", event)
                except SendError as exc:
                    logger.error("Input producer stopping: %s", exc)
                    return
        except OSError as exc:
            logger.error("Terminal read failed; input producer stopping: %s", exc)
            return
        logger.error("Input source exhausted; input producer stopping.")


def _run_tick_producer(
    sender: Sender[Event[InputT]],
    interval_seconds: float,
    logger: logging.Logger,
) -> None:
    with sender:
        while True:
            try:
                sender.send(TICK)
            except SendError:
                logger.debug("Receiver closed; tick producer stopping.")
                return
            time.sleep(max(interval_seconds, 0.0))


class Events(Generic[InputT]):
    """Blocking handle over the merged input + tick stream.

    The channel and both producer threads are created here and live for the
    rest of the process. `close()`, or dropping the handle, disconnects the
    receiving end; producers notice on their next send and exit.
    """

    def __init__(
        self,
        config: EventsConfig | None = None,
        *,
        input_source: InputSource[InputT] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config or EventsConfig()
        self.logger = logger or logging.getLogger("term_events")
        source = input_source or terminal_source(logger=self.logger)

        # Capacity 1 keeps scroll bursts from stacking up behind the consumer.
        tick_tx, rx = bounded(1)
        input_tx = tick_tx.clone()
        self._rx: Receiver[Event[InputT]] = rx

        self._input_thread = threading.Thread(
            target=_run_input_producer,
            args=(input_tx, source, self.logger),
            name="term-events-input",
            daemon=True,
        )
        self._tick_thread = threading.Thread(
            target=_run_tick_producer,
            args=(tick_tx, self._config.tick_seconds, self.logger),
            name="term-events-tick",
            daemon=True,
        )
        self._input_thread.start()
        self._tick_thread.start()

    @classmethod
    def new(cls) -> Events[TermEvent]:
        """Handle over the terminal with the default configuration."""
        return cls()

    @classmethod
    def with_config(cls, config: EventsConfig) -> Events[TermEvent]:
        """Handle over the terminal with a caller-supplied configuration."""
        return cls(config)

    @property
    def config(self) -> EventsConfig:
        return self._config

    @property
    def dropped_inputs(self) -> int:
        """Input events discarded because the channel was full."""
        return self._rx.dropped

    def next(self) -> Input[InputT] | Tick:
        """Block until an input or tick is available and return it.

        Raises RecvError when no more events will ever arrive.
        """
        return self._rx.recv()

    def close(self) -> None:
        self._rx.close()

    def __iter__(self) -> Iterator[Input[InputT] | Tick]:
        while True:
            try:
                yield self.next()
            except RecvError:
                return

    def __enter__(self) -> Events[InputT]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
