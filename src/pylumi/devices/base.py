"""Device capability contract and a reusable base implementation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pylumi.config import HubConfig
from pylumi.models.message import InboundMessage

if TYPE_CHECKING:
    from pylumi.hub import Hub


@runtime_checkable
class Device(Protocol):
    """What the hub needs from every device implementation."""

    sid: str
    ip: str
    model: str

    def heartbeat(self, token: str | None = None, data: Any = None) -> None: ...

    def on_message(self, message: InboundMessage) -> None: ...


class BaseDevice:
    """Device that keeps the latest liveness and report state.

    Parameters
    ----------
    sid : str
        Device id.
    ip : str
        Address of the gateway the device was first seen through.
    hub : Hub
        Owning hub, used for outbound commands.
    model : str
        Model tag from the announce message.
    config : HubConfig
        Hub configuration.
    """

    model_tag: str = ""

    def __init__(self, sid: str, ip: str, hub: Hub, model: str, config: HubConfig) -> None:
        self.sid = sid
        self.ip = ip
        self.hub = hub
        self.model = model
        self.config = config
        self.token: str | None = None
        self.data: dict[str, Any] = {}
        self.last_seen: float | None = None
        self.last_message: InboundMessage | None = None
        self.heartbeats = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sid={self.sid!r}, model={self.model!r}, ip={self.ip!r})"

    def heartbeat(self, token: str | None = None, data: Any = None) -> None:
        """Record that the device is alive; merge any heartbeat payload."""
        self.last_seen = time.monotonic()
        self.heartbeats += 1
        if token:
            self.token = token
        if isinstance(data, dict):
            self.data.update(data)

    def on_message(self, message: InboundMessage) -> None:
        """Merge a ``report`` or ``*_ack`` payload into :attr:`data`."""
        self.last_message = message
        if isinstance(message.data, dict):
            self.data.update(message.data)
