from __future__ import annotations

import json
from typing import Any

import pytest

from pylumi._transport import HubProtocol
from pylumi.config import HubConfig
from pylumi.devices import BaseDevice, DeviceCatalog
from pylumi.events import HubEvent
from pylumi.hub import Hub
from pylumi.models.message import InboundMessage

GATEWAY_IP = "10.0.0.5"
SECRET = "0987654321qwerty"


class FakeSocket:
    def __init__(self) -> None:
        self.options: list[tuple[int, int, Any]] = []

    def setsockopt(self, level: int, option: int, value: Any) -> None:
        self.options.append((level, option, value))


class FakeTransport:
    def __init__(self, *, fail_close: bool = False) -> None:
        self.socket = FakeSocket()
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.close_calls = 0
        self._fail_close = fail_close

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return self.socket if name == "socket" else default

    def sendto(self, data: bytes, addr: tuple[str, int]) -> None:
        self.sent.append((data, addr))

    def close(self) -> None:
        self.close_calls += 1
        if self._fail_close:
            raise OSError("close failed")


class RecordingDevice(BaseDevice):
    def __init__(self, *args: Any) -> None:
        super().__init__(*args)
        self.heartbeat_calls: list[tuple[Any, ...]] = []
        self.messages: list[InboundMessage] = []

    def heartbeat(self, *args: Any) -> None:
        self.heartbeat_calls.append(args)
        super().heartbeat(*args)

    def on_message(self, message: InboundMessage) -> None:
        self.messages.append(message)
        super().on_message(message)


class Recorder:
    """Collects every hub notification as ``(event, args)``."""

    def __init__(self, hub: Hub) -> None:
        self.calls: list[tuple[HubEvent, tuple[Any, ...]]] = []
        for event in HubEvent:
            hub.on(event, self._make(event))

    def _make(self, event: HubEvent) -> Any:
        return lambda *args: self.calls.append((event, args))

    def of(self, event: HubEvent) -> list[tuple[Any, ...]]:
        return [args for kind, args in self.calls if kind == event]


def make_catalog() -> DeviceCatalog:
    catalog = DeviceCatalog()
    catalog.add("gateway", RecordingDevice)
    catalog.add("sensor_ht", RecordingDevice)
    return catalog


def make_hub(**config: Any) -> Hub:
    config.setdefault("key", SECRET)
    return Hub(HubConfig(**config), catalog=make_catalog())


def connect(hub: Hub, transport: FakeTransport | None = None) -> tuple[HubProtocol, FakeTransport]:
    transport = transport or FakeTransport()
    protocol = HubProtocol(hub)
    hub._protocol = protocol  # noqa: SLF001
    protocol.connection_made(transport)  # type: ignore[arg-type]
    return protocol, transport


def packet(**fields: Any) -> bytes:
    return json.dumps(fields).encode()


@pytest.fixture
def hub() -> Hub:
    return make_hub()


@pytest.fixture
def recorder(hub: Hub) -> Recorder:
    return Recorder(hub)
