"""Rich-rendered monitor for the merged input + tick stream."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import Input, Tick
from .event_feed import EventFeed
from .models import FeedKind


def _kind_from_level(level_no: int) -> FeedKind:
    if level_no >= logging.CRITICAL:
        return "CRITICAL"
    if level_no >= logging.ERROR:
        return "ERROR"
    if level_no >= logging.WARNING:
        return "WARN"
    return "INFO"


def describe_input(event: Any) -> str:
    """Display label for an input payload."""
    label = getattr(event, "label", None)
    if callable(label):
        return str(label())
    return repr(event)


class _MonitorLogHandler(logging.Handler):
    """Route logger output into the monitor feed instead of over the live view."""

    def __init__(self, monitor: EventMonitor) -> None:
        super().__init__()
        self.monitor = monitor

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.monitor.record_log(
                kind=_kind_from_level(record.levelno),
                message=record.getMessage(),
            )
        except Exception:
            self.handleError(record)


class EventMonitor:
    """Counts ticks and inputs and renders them with a bounded event feed."""

    def __init__(
        self,
        *,
        console: Console,
        exit_key_label: str,
        tick_rate: timedelta,
        max_entries: int = 40,
    ) -> None:
        self.console = console
        self.exit_key_label = exit_key_label
        self.tick_rate = tick_rate
        self.feed = EventFeed(max_entries=max_entries)
        self.started_at = datetime.now(UTC)
        self.ticks = 0
        self.inputs = 0
        self.dropped = 0
        self.last_tick_at: datetime | None = None
        self.last_input_at: datetime | None = None
        self._logger: logging.Logger | None = None
        self._original_handlers: list[logging.Handler] = []

    def attach_logger(self, logger: logging.Logger) -> None:
        """Replace console handlers with the monitor feed handler."""
        self._logger = logger
        self._original_handlers = list(logger.handlers)
        logger.handlers = [_MonitorLogHandler(self)]

    def detach_logger(self) -> None:
        """Restore original logger handlers."""
        if self._logger is None:
            return
        self._logger.handlers = self._original_handlers
        self._logger = None
        self._original_handlers = []

    def record_log(self, *, kind: FeedKind, message: str) -> None:
        dedupe_key = f"{kind}:{message}" if kind in {"WARN", "ERROR"} else None
        self.feed.add(kind=kind, message=message, dedupe_key=dedupe_key)

    def record(self, event: Input[Any] | Tick, *, ts: datetime | None = None) -> None:
        """Account for one message received from the event handle."""
        now = ts or datetime.now(UTC)
        if isinstance(event, Tick):
            self.ticks += 1
            self.last_tick_at = now
            return
        self.inputs += 1
        self.last_input_at = now
        label = describe_input(event.event)
        self.feed.add(kind="INPUT", message=label, dedupe_key=f"input:{label}", ts=now)

    def observed_tick_ms(self, *, now: datetime | None = None) -> float | None:
        """Mean wall-clock gap between ticks since start, in milliseconds."""
        if self.ticks < 2:
            return None
        end = self.last_tick_at or now or datetime.now(UTC)
        return (end - self.started_at).total_seconds() * 1000.0 / (self.ticks - 1)

    def render(self) -> Group:
        stats = self._build_stats_panel()
        help_panel = self._build_help_panel()
        if self.console.width < 90:
            return Group(self._build_header_panel(), stats, help_panel, self._build_feed_panel())
        return Group(
            self._build_header_panel(),
            Columns([stats, help_panel], equal=True, expand=True),
            self._build_feed_panel(),
        )

    def render_plain(self, event: Input[Any] | Tick) -> str:
        if isinstance(event, Tick):
            return f"tick #{self.ticks}"
        return f"input #{self.inputs}: {describe_input(event.event)}"

    def build_summary_lines(self, *, exit_code: int) -> list[str]:
        observed = self.observed_tick_ms()
        observed_text = f"{observed:.1f}ms" if observed is not None else "-"
        return [
            f"ticks={self.ticks} inputs={self.inputs} dropped_inputs={self.dropped}",
            (
                f"tick_rate={self.tick_rate.total_seconds() * 1000:.0f}ms "
                f"observed_tick={observed_text}"
            ),
            f"exit_code={exit_code}",
        ]

    def render_end(self, *, exit_code: int) -> None:
        border = "green" if exit_code == 0 else "red"
        self.console.print(
            Panel(
                "\n".join(self.build_summary_lines(exit_code=exit_code)),
                title="Session Summary",
                border_style=border,
            )
        )

    def _build_header_panel(self) -> Panel:
        text = Text()
        text.append("term-events monitor", style="bold white")
        text.append("  |  ")
        text.append(f"tick={self.tick_rate.total_seconds() * 1000:.0f}ms", style="cyan")
        text.append("  ")
        text.append(f"quit={self.exit_key_label}", style="bold yellow")
        text.append("  ")
        text.append(datetime.now(UTC).strftime("%H:%M:%SZ"), style="dim")
        return Panel(text, border_style="blue", title="Runtime Status")

    def _build_stats_panel(self) -> Panel:
        table = Table.grid(padding=(0, 1))
        table.add_column(style="bold")
        table.add_column(justify="right")
        table.add_row("Ticks", str(self.ticks))
        table.add_row("Inputs", str(self.inputs))
        table.add_row("Dropped Inputs", str(self.dropped))
        observed = self.observed_tick_ms()
        table.add_row("Observed Tick", f"{observed:.1f}ms" if observed is not None else "-")
        table.add_row("Last Tick", self._format_ts(self.last_tick_at))
        table.add_row("Last Input", self._format_ts(self.last_input_at))
        table.add_row("Warnings", str(self.feed.count_matching(kind="WARN")))
        table.add_row("Errors", str(self.feed.count_matching(kind="ERROR")))
        return Panel(table, title="Stream Metrics", border_style="cyan")

    def _build_help_panel(self) -> Panel:
        lines = [
            f"Press {self.exit_key_label} to quit.",
            "Input is best-effort: bursts beyond one pending event are dropped.",
            "Ticks are never dropped; a slow loop delays them.",
        ]
        return Panel("\n".join(lines), title="Controls", border_style="magenta")

    def _build_feed_panel(self) -> Panel:
        table = Table(show_header=True, header_style="bold")
        table.add_column("UTC", width=9)
        table.add_column("Kind", width=9)
        table.add_column("Event", overflow="fold")
        styles = {
            "INPUT": "green",
            "INFO": "white",
            "WARN": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold red",
        }
        entries = self.feed.snapshot()
        for entry in entries[-12:]:
            style = styles[entry.kind]
            message = entry.message
            if entry.count > 1:
                message = f"{message} (x{entry.count})"
            table.add_row(
                entry.ts.strftime("%H:%M:%S"),
                Text(entry.kind, style=style),
                Text(message),
            )
        if not entries:
            table.add_row("-", "INFO", "No input yet")
        return Panel(table, title="Event Feed", border_style="white")

    @staticmethod
    def _format_ts(value: datetime | None) -> str:
        if value is None:
            return "-"
        return value.astimezone(UTC).strftime("%H:%M:%S.%f")[:-3] + "Z"
