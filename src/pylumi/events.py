"""Notifications the hub raises to its embedder.

Subscribers register per :class:`HubEvent` kind.  Delivery is
synchronous, in subscription order, on the event loop thread that
processes the datagram.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

_logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class HubEvent(StrEnum):
    BROWSE = "browse"
    MESSAGE = "message"
    DEVICE = "device"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class DiscoveredGateway:
    """A gateway announcement seen in discovery-only mode."""

    ip: str


class EventEmitter:
    """Minimal observer registry keyed by :class:`HubEvent`.

    A listener that raises is logged and skipped; the remaining
    listeners still receive the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[HubEvent, list[Listener]] = {}

    def on(self, event: HubEvent | str, listener: Listener) -> Callable[[], None]:
        """Subscribe *listener* to *event*. Returns an unsubscribe callable."""
        kind = HubEvent(event)
        self._listeners.setdefault(kind, []).append(listener)
        return lambda: self.off(kind, listener)

    def once(self, event: HubEvent | str, listener: Listener) -> Callable[[], None]:
        """Subscribe *listener* for a single delivery."""
        kind = HubEvent(event)

        def _wrapper(*args: Any) -> None:
            self.off(kind, _wrapper)
            listener(*args)

        return self.on(kind, _wrapper)

    def off(self, event: HubEvent | str, listener: Listener) -> None:
        listeners = self._listeners.get(HubEvent(event))
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: HubEvent | str) -> int:
        return len(self._listeners.get(HubEvent(event), ()))

    def emit(self, event: HubEvent, *args: Any) -> None:
        # Copy so listeners may unsubscribe during delivery.
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                _logger.debug("%s listener %r failed", event, listener, exc_info=True)
