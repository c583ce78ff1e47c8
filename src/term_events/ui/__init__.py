"""Terminal monitor helpers for the demo front-end."""

from .event_feed import EventFeed
from .models import FeedEntry
from .monitor import EventMonitor

__all__ = ["EventFeed", "EventMonitor", "FeedEntry"]
