"""Demo front-end: drive an `Events` loop and show what arrives."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.live import Live

from .config import EventsConfig, load_settings
from .events import Events, terminal_source
from .exceptions import ConfigError
from .input.models import Key, TermEvent
from .log_setup import setup_logger
from .models import Input, Tick
from .ui.monitor import EventMonitor

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_STREAM_ENDED = 3
EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show merged terminal input and tick events until the exit key is pressed.",
    )
    parser.add_argument(
        "--tick-rate-ms",
        type=int,
        default=None,
        help="Override tick interval from config (milliseconds).",
    )
    parser.add_argument(
        "--exit-key",
        type=str,
        default=None,
        help="Override the single-character exit key from config.",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=0,
        help="Stop after this many ticks (0 runs until the exit key).",
    )
    parser.add_argument(
        "--ui-mode",
        choices=("rich", "plain"),
        default="rich",
        help="Live rich monitor or one plain line per event.",
    )
    return parser.parse_args(argv)


def _build_events(
    config: EventsConfig,
    *,
    tty_path: str,
    logger: logging.Logger,
) -> Events[TermEvent]:
    return Events(
        config,
        input_source=terminal_source(tty_path, logger=logger),
        logger=logger,
    )


@contextmanager
def _cbreak_terminal() -> Iterator[None]:
    """Deliver key presses unbuffered for the session; restore on exit."""
    if os.name == "nt" or not sys.stdin.isatty():
        yield
        return
    import termios
    import tty

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _run_loop(
    events: Any,
    *,
    monitor: EventMonitor,
    exit_key: Key,
    max_ticks: int,
    logger: logging.Logger,
    on_event: Callable[[Input[Any] | Tick], None],
) -> int:
    for event in events:
        monitor.record(event)
        monitor.dropped = events.dropped_inputs
        on_event(event)
        if isinstance(event, Input) and event.event == exit_key:
            logger.info("Exit key received.")
            return EXIT_OK
        if max_ticks and monitor.ticks >= max_ticks:
            logger.info("Tick limit reached: %s", max_ticks)
            return EXIT_OK
    logger.error("Event stream ended: no more events will arrive.")
    return EXIT_STREAM_ENDED


def main(argv: list[str] | None = None) -> int:
    """Run the event monitor until the exit key, a tick limit, or stream end."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    if args.tick_rate_ms is not None and args.tick_rate_ms <= 0:
        logger.error("--tick-rate-ms must be > 0.")
        return EXIT_CONFIG
    if args.exit_key is not None and len(args.exit_key) != 1:
        logger.error("--exit-key must be a single character.")
        return EXIT_CONFIG
    if args.max_ticks < 0:
        logger.error("--max-ticks must be >= 0.")
        return EXIT_CONFIG

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return EXIT_CONFIG
    logger.setLevel(settings.log_level)
    logger.info("Starting event monitor: %s", settings.summary())

    config = settings.events_config(tick_rate_ms=args.tick_rate_ms, exit_key=args.exit_key)
    monitor = EventMonitor(
        console=console,
        exit_key_label=config.exit_key.label(),
        tick_rate=config.tick_rate,
        max_entries=settings.feed_size,
    )

    exit_code = EXIT_STREAM_ENDED
    try:
        # The input thread starts reading as soon as the handle exists.
        with _cbreak_terminal(), _build_events(
            config, tty_path=settings.tty_path, logger=logger
        ) as events:
            if args.ui_mode == "rich":
                monitor.attach_logger(logger)
                try:
                    with Live(monitor.render(), console=console, refresh_per_second=10) as live:
                        exit_code = _run_loop(
                            events,
                            monitor=monitor,
                            exit_key=config.exit_key,
                            max_ticks=args.max_ticks,
                            logger=logger,
                            on_event=lambda _event: live.update(monitor.render()),
                        )
                finally:
                    monitor.detach_logger()
            else:
                exit_code = _run_loop(
                    events,
                    monitor=monitor,
                    exit_key=config.exit_key,
                    max_ticks=args.max_ticks,
                    logger=logger,
                    on_event=lambda event: console.print(
                        monitor.render_plain(event), highlight=False, markup=False
                    ),
                )
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        exit_code = EXIT_INTERRUPTED

    monitor.render_end(exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
