"""Tests for the bounded event channel."""

from __future__ import annotations

import gc
import threading
import time

import pytest

from term_events.channel import bounded
from term_events.exceptions import ChannelFullError, RecvError, SendError


def test_capacity_one_refuses_second_nonblocking_send() -> None:
    tx, rx = bounded(1)
    tx.try_send("first")
    with pytest.raises(ChannelFullError) as excinfo:
        tx.try_send("second")
    assert excinfo.value.item == "second"
    assert len(rx) == 1
    assert rx.dropped == 1
    assert rx.recv() == "first"


def test_messages_are_received_in_send_order() -> None:
    tx, rx = bounded(3)
    for item in ("a", "b", "c"):
        tx.send(item)
    assert [rx.recv(), rx.recv(), rx.recv()] == ["a", "b", "c"]


def test_blocking_send_waits_for_consumer() -> None:
    tx, rx = bounded(1)
    tx.send(1)
    delivered = threading.Event()

    def _producer() -> None:
        tx.send(2)
        delivered.set()

    thread = threading.Thread(target=_producer, daemon=True)
    thread.start()
    assert not delivered.wait(0.1)

    assert rx.recv() == 1
    assert delivered.wait(1.0)
    assert rx.recv() == 2


def test_recv_fails_once_all_senders_closed_and_drained() -> None:
    tx, rx = bounded(1)
    other = tx.clone()
    assert rx.sender_count == 2
    tx.send("last")
    tx.close()
    other.close()
    assert rx.sender_count == 0

    assert rx.recv() == "last"
    with pytest.raises(RecvError):
        rx.recv()


def test_closing_last_sender_wakes_blocked_receiver() -> None:
    tx, rx = bounded(1)
    outcome: list[BaseException] = []

    def _consumer() -> None:
        try:
            rx.recv()
        except RecvError as exc:
            outcome.append(exc)

    thread = threading.Thread(target=_consumer, daemon=True)
    thread.start()
    time.sleep(0.05)
    tx.close()
    thread.join(1.0)
    assert not thread.is_alive()
    assert len(outcome) == 1


def test_closed_receiver_fails_sends_and_wakes_blocked_sender() -> None:
    tx, rx = bounded(1)
    tx.send("pending")
    errors: list[SendError] = []

    def _producer() -> None:
        try:
            tx.send("blocked")
        except SendError as exc:
            errors.append(exc)

    thread = threading.Thread(target=_producer, daemon=True)
    thread.start()
    time.sleep(0.05)
    rx.close()
    thread.join(1.0)

    assert not thread.is_alive()
    assert errors and errors[0].item == "blocked"
    with pytest.raises(SendError):
        tx.try_send("after close")
    with pytest.raises(RecvError):
        rx.recv()


def test_sender_close_is_idempotent_and_blocks_cloning() -> None:
    tx, rx = bounded(1)
    with tx:
        pass
    tx.close()
    assert tx.closed
    assert rx.sender_count == 0
    with pytest.raises(ValueError, match="closed sender"):
        tx.clone()


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="capacity"):
        bounded(0)


def test_dropping_receiver_disconnects_channel() -> None:
    tx, rx = bounded(1)
    tx.send("buffered")
    blocked_error: list[Exception] = []

    def _producer() -> None:
        try:
            tx.send("waiting")
        except SendError as exc:
            blocked_error.append(exc)

    thread = threading.Thread(target=_producer)
    thread.start()
    time.sleep(0.05)

    del rx
    gc.collect()
    thread.join(1.0)

    assert not thread.is_alive()
    assert len(blocked_error) == 1
    with pytest.raises(SendError):
        tx.try_send("late")
