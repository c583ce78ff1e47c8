"""Typed feed entries for the terminal monitor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

FeedKind = Literal["INPUT", "INFO", "WARN", "ERROR", "CRITICAL"]


@dataclass(slots=True)
class FeedEntry:
    """One monitor-visible line; repeats within the dedupe window bump `count`."""

    ts: datetime
    kind: FeedKind
    message: str
    count: int = 1
    last_seen: datetime | None = None
    dedupe_key: str | None = None

    def __post_init__(self) -> None:
        self.ts = self.ts.replace(tzinfo=UTC) if self.ts.tzinfo is None else self.ts.astimezone(UTC)
        if self.last_seen is None:
            self.last_seen = self.ts
        elif self.last_seen.tzinfo is None:
            self.last_seen = self.last_seen.replace(tzinfo=UTC)
