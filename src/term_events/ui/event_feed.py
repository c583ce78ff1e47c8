"""Bounded feed of received events that collapses rapid repeats."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime

from .models import FeedEntry, FeedKind


class EventFeed:
    """Keep recent entries; a repeated key within the window extends the last line.

    Scroll-wheel bursts and held keys therefore render as one line with a
    repeat count instead of flooding the feed. Safe to use from several
    threads; producer log records arrive off the render thread.
    """

    def __init__(
        self,
        *,
        max_entries: int = 40,
        dedupe_window_seconds: float = 1.0,
    ) -> None:
        self.max_entries = max_entries
        self.dedupe_window_seconds = dedupe_window_seconds
        self._entries: list[FeedEntry] = []
        self._lock = threading.Lock()

    def add(
        self,
        *,
        kind: FeedKind,
        message: str,
        dedupe_key: str | None = None,
        ts: datetime | None = None,
    ) -> FeedEntry:
        now = ts or datetime.now(UTC)
        now = now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)

        with self._lock:
            # Only the newest entry can absorb a repeat; anything in between
            # breaks the run so the feed order stays truthful.
            if dedupe_key is not None and self._entries:
                last = self._entries[-1]
                if last.dedupe_key == dedupe_key and last.last_seen is not None:
                    if (now - last.last_seen).total_seconds() <= self.dedupe_window_seconds:
                        last.count += 1
                        last.last_seen = now
                        return replace(last)

            entry = FeedEntry(ts=now, kind=kind, message=message, dedupe_key=dedupe_key)
            self._entries.append(entry)
            if len(self._entries) > self.max_entries:
                del self._entries[: len(self._entries) - self.max_entries]
            return replace(entry)

    def snapshot(self, *, newest_first: bool = False) -> list[FeedEntry]:
        """Return a copy of tracked entries in display order."""
        with self._lock:
            items = [replace(entry) for entry in self._entries]
        if newest_first:
            items.reverse()
        return items

    def count_matching(self, *, kind: FeedKind | None = None) -> int:
        """Count entries weighted by repeat counts."""
        with self._lock:
            return sum(
                entry.count for entry in self._entries if kind is None or entry.kind == kind
            )
