"""Bounded multi-producer single-consumer channel with disconnect tracking."""

from __future__ import annotations

import threading
import weakref
from collections import deque
from typing import Any, Generic, TypeVar

from .exceptions import ChannelFullError, RecvError, SendError

T = TypeVar("T")


class _ChannelState(Generic[T]):
    """Shared buffer plus liveness bookkeeping for both channel ends."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.items: deque[T] = deque()
        self.senders = 0
        self.receiver_open = True
        self.dropped = 0
        self.lock = threading.Lock()
        self.not_empty = threading.Condition(self.lock)
        self.not_full = threading.Condition(self.lock)


class Sender(Generic[T]):
    """Sending half of a bounded channel. Clone it to add producers."""

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state
        self._closed = False
        with state.lock:
            state.senders += 1

    def clone(self) -> Sender[T]:
        if self._closed:
            raise ValueError("cannot clone a closed sender")
        return Sender(self._state)

    def send(self, item: T) -> None:
        """Block until there is room for `item`, then enqueue it."""
        state = self._state
        with state.not_full:
            while True:
                if not state.receiver_open:
                    raise SendError(item)
                if len(state.items) < state.capacity:
                    state.items.append(item)
                    state.not_empty.notify()
                    return
                state.not_full.wait()

    def try_send(self, item: T) -> None:
        """Enqueue `item` without blocking.

        Raises ChannelFullError when the buffer is at capacity and SendError
        when the receiving end has been closed.
        """
        state = self._state
        with state.lock:
            if not state.receiver_open:
                raise SendError(item)
            if len(state.items) >= state.capacity:
                state.dropped += 1
                raise ChannelFullError(item)
            state.items.append(item)
            state.not_empty.notify()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release this sender. Safe to call multiple times."""
        state = self._state
        with state.lock:
            if self._closed:
                return
            self._closed = True
            state.senders -= 1
            if state.senders == 0:
                state.not_empty.notify_all()

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Receiver(Generic[T]):
    """Receiving half of a bounded channel. Never cloned.

    Dropping the last reference to the receiver closes the channel, the same
    as calling `close()`.
    """

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state
        self._finalizer = weakref.finalize(self, _close_receiver, state)

    def recv(self) -> T:
        """Block until a message is available and return it.

        Raises RecvError once the receiver is closed, or once every sender is
        gone and the buffer is drained.
        """
        state = self._state
        with state.not_empty:
            while not state.items:
                if not state.receiver_open or state.senders == 0:
                    raise RecvError()
                state.not_empty.wait()
            item = state.items.popleft()
            state.not_full.notify()
            return item

    def __len__(self) -> int:
        with self._state.lock:
            return len(self._state.items)

    @property
    def dropped(self) -> int:
        """Messages refused by `try_send` because the buffer was full."""
        with self._state.lock:
            return self._state.dropped

    @property
    def sender_count(self) -> int:
        with self._state.lock:
            return self._state.senders

    @property
    def closed(self) -> bool:
        with self._state.lock:
            return not self._state.receiver_open

    def close(self) -> None:
        """Disconnect the channel; pending and future sends fail."""
        self._finalizer()


def _close_receiver(state: _ChannelState[Any]) -> None:
    with state.lock:
        if not state.receiver_open:
            return
        state.receiver_open = False
        state.items.clear()
        state.not_full.notify_all()
        state.not_empty.notify_all()


def bounded(capacity: int) -> tuple[Sender[T], Receiver[T]]:
    """Create a channel holding at most `capacity` undelivered messages."""
    if capacity <= 0:
        raise ValueError("channel capacity must be > 0")
    state: _ChannelState[T] = _ChannelState(capacity)
    return Sender(state), Receiver(state)
