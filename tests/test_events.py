from __future__ import annotations

import pytest

from pylumi.events import EventEmitter, HubEvent


def test_multiple_listeners_in_subscription_order() -> None:
    emitter = EventEmitter()
    calls: list[str] = []
    emitter.on(HubEvent.WARNING, lambda reason: calls.append(f"a:{reason}"))
    emitter.on("warning", lambda reason: calls.append(f"b:{reason}"))

    emitter.emit(HubEvent.WARNING, "x")

    assert calls == ["a:x", "b:x"]
    assert emitter.listener_count(HubEvent.WARNING) == 2


def test_unsubscribe_and_once() -> None:
    emitter = EventEmitter()
    calls: list[str] = []
    unsubscribe = emitter.on(HubEvent.MESSAGE, lambda msg: calls.append(f"on:{msg}"))
    emitter.once(HubEvent.MESSAGE, lambda msg: calls.append(f"once:{msg}"))

    emitter.emit(HubEvent.MESSAGE, 1)
    unsubscribe()
    emitter.emit(HubEvent.MESSAGE, 2)

    assert calls == ["on:1", "once:1"]
    assert emitter.listener_count(HubEvent.MESSAGE) == 0


def test_failing_listener_is_isolated() -> None:
    emitter = EventEmitter()
    calls: list[object] = []

    def broken(_exc: object) -> None:
        raise RuntimeError("listener bug")

    emitter.on(HubEvent.ERROR, broken)
    emitter.on(HubEvent.ERROR, calls.append)

    emitter.emit(HubEvent.ERROR, "boom")

    assert calls == ["boom"]


def test_unknown_event_name_rejected() -> None:
    with pytest.raises(ValueError):
        EventEmitter().on("connected", print)
