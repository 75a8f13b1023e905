"""Gateway hub: multicast socket lifecycle, message dispatch and keys."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pylumi._crypto.aes import GATEWAY_IV, derive_key
from pylumi._redact import redact_for_log
from pylumi._transport import (
    DISCOVERY_PORT,
    MULTICAST_GROUP,
    WHOIS_COMMAND,
    HubProtocol,
    join_multicast,
    open_socket,
)
from pylumi.config import HubConfig
from pylumi.devices.catalog import DeviceCatalog, default_catalog
from pylumi.devices.gateway import Gateway
from pylumi.events import DiscoveredGateway, EventEmitter, HubEvent, Listener
from pylumi.exceptions import LumiCryptoError, LumiError, LumiTransportError
from pylumi.models.message import InboundMessage, encode_command
from pylumi.registry import SensorRegistry

_logger = logging.getLogger(__name__)


class HubState(enum.Enum):
    INIT = "init"
    CONNECTED = "connected"
    CLOSED = "closed"


class Hub:
    """Listens for gateway multicast traffic and routes it to devices.

    Usage::

        hub = Hub(HubConfig(key="0123456789abcdef"))
        hub.on(HubEvent.DEVICE, lambda device, name: print(device, name))
        async with hub:
            await asyncio.sleep(60)

    All processing happens on the event loop thread; one datagram is
    handled completely, device callbacks included, before the next.
    """

    def __init__(
        self,
        config: HubConfig | None = None,
        *,
        catalog: DeviceCatalog | None = None,
    ) -> None:
        self._config = config or HubConfig()
        self._state = HubState.INIT
        self._events = EventEmitter()
        self._registry = SensorRegistry(self, catalog if catalog is not None else default_catalog())
        self._protocol: HubProtocol | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._closed = asyncio.Event()

        self.keys: dict[str, str] = dict(self._config.keys)
        self.tokens: dict[str, str] = {}
        self.iv: bytes = GATEWAY_IV

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Hub:
        await self.listen()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.stop()
        await self.wait_closed()

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def config(self) -> HubConfig:
        return self._config

    @property
    def state(self) -> HubState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is HubState.CLOSED

    @property
    def connected(self) -> bool:
        return self._state is HubState.CONNECTED

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def sensors(self) -> SensorRegistry:
        return self._registry

    def on(self, event: HubEvent | str, listener: Listener) -> Callable[[], None]:
        """Subscribe to a hub notification. Returns an unsubscribe callable."""
        return self._events.on(event, listener)

    # ------------------------------------------------------------------
    # Socket lifecycle
    # ------------------------------------------------------------------

    async def listen(self) -> None:
        """Bind the UDP port, join the multicast group and send ``whois``.

        Raises :class:`~pylumi.exceptions.LumiTransportError` if the port
        cannot be bound.
        """
        if self.closed:
            _logger.debug("listen() ignored, hub is closed")
            return
        if self._protocol is not None:
            return

        loop = asyncio.get_running_loop()
        sock = open_socket(self._config.port)
        protocol = HubProtocol(self)
        self._protocol = protocol
        try:
            transport, _ = await loop.create_datagram_endpoint(lambda: protocol, sock=sock)
        except OSError as exc:
            self._protocol = None
            sock.close()
            raise LumiTransportError(f"Could not listen on port {self._config.port}: {exc}") from exc

        if self.closed:
            # stop() ran while the endpoint was being created.
            transport.close()

    def _on_listening(self, transport: asyncio.DatagramTransport) -> None:
        if self.closed:
            transport.close()
            return
        self._transport = transport
        self._state = HubState.CONNECTED
        interface = self._config.multicast_interface
        _logger.debug(
            "Listening on port %s, joining %s via %s",
            self._config.port,
            MULTICAST_GROUP,
            interface or "default interface",
        )
        try:
            join_multicast(transport.get_extra_info("socket"), interface)
            transport.sendto(WHOIS_COMMAND, (MULTICAST_GROUP, DISCOVERY_PORT))
        except OSError as exc:
            self._on_error(exc)

    def stop(self, on_done: Callable[[], None] | None = None) -> bool:
        """Close the socket and move to ``CLOSED``.

        Returns ``False`` if the hub was already closed.  *on_done* is
        invoked exactly once for every call, also when the hub was
        already closed or closing the socket failed.
        """
        if self.closed:
            if on_done is not None:
                on_done()
            return False
        self._state = HubState.CLOSED

        protocol, self._protocol = self._protocol, None
        transport, self._transport = self._transport, None
        if protocol is not None:
            protocol.detach()
        if transport is not None:
            try:
                transport.close()
            except Exception:
                _logger.debug("Socket close failed", exc_info=True)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._finish_stop(on_done)
        else:
            # Runs after the transport's own connection_lost callback.
            loop.call_soon(self._finish_stop, on_done)
        return True

    def _finish_stop(self, on_done: Callable[[], None] | None) -> None:
        self._closed.set()
        _logger.debug("Hub closed")
        if on_done is not None:
            on_done()

    async def wait_closed(self) -> None:
        """Wait until :meth:`stop` has released the socket."""
        await self._closed.wait()

    def _on_error(self, exc: Exception) -> None:
        if self.closed:
            return
        _logger.debug("Transport error: %s", exc)
        self._events.emit(HubEvent.ERROR, exc)

    def _on_connection_lost(self) -> None:
        if not self.closed:
            _logger.warning("Socket closed unexpectedly")
            self.stop()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def _warn(self, reason: str) -> None:
        _logger.warning("%s", reason)
        self._events.emit(HubEvent.WARNING, reason)

    def dispatch(self, datagram: bytes | str, ip: str) -> InboundMessage | None:
        """Process one inbound datagram from *ip*.

        Returns the decoded message, or ``None`` when it was dropped.
        """
        if self.closed:
            return None

        msg = InboundMessage.decode(datagram, ip)
        if msg is None:
            _logger.debug("Dropping undecodable datagram from %s", ip)
            return None
        _logger.debug("<< %s %s", ip, redact_for_log(msg.to_dict()))

        device = self._registry.lookup(msg.sid)
        if device is None:
            if not msg.model:
                return None
            if self._config.browse:
                if msg.model == Gateway.model_tag:
                    self._events.emit(HubEvent.BROWSE, DiscoveredGateway(ip=ip))
                return None
            if not msg.sid:
                _logger.debug("Announce for %s from %s has no sid", msg.model, ip)
                return None
            try:
                device = self._registry.create(msg.sid, msg.model, ip, msg.name)
            except LumiError as exc:
                self._warn(f"Could not add new sensor: {exc}")
                return None
            if device is None:
                return None

        if msg.data == "":
            msg.data = None
        elif isinstance(msg.data, str):
            try:
                msg.decode_payload()
            except ValueError:
                self._warn(f"Could not parse: {msg.data}")
                msg.data = None

        if msg.token:
            self.tokens[ip] = msg.token

        if msg.is_heartbeat:
            device.heartbeat(msg.token, msg.data)
        else:
            device.heartbeat()

        if msg.data is not None and (msg.is_report or msg.is_ack):
            device.on_message(msg)

        self._events.emit(HubEvent.MESSAGE, msg)
        return msg

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def derive_key(self, ip: str) -> str | None:
        """Write key for the gateway at *ip*, or ``None`` before its first token.

        Raises :class:`~pylumi.exceptions.LumiCryptoError` when no secret
        is configured for *ip* or the secret is not 16 ASCII characters.
        Any token derives a key; non-ASCII characters keep their low byte.
        """
        token = self.tokens.get(ip)
        if not token:
            return None
        secret = self.keys.get(ip) or self._config.key
        if not secret:
            raise LumiCryptoError(f"No gateway secret configured for {ip}")
        return derive_key(secret, token, self.iv)

    def send(self, payload: Mapping[str, Any], ip: str | None = None) -> bool:
        """Send *payload* to *ip*, or to the multicast group when omitted.

        Best effort: returns ``False`` if the hub is not connected or the
        send failed, and never retries.
        """
        if self.closed or self._transport is None:
            return False
        target = (ip or MULTICAST_GROUP, self._config.port)
        _logger.debug(">> %s %s", target[0], redact_for_log(payload))
        try:
            self._transport.sendto(encode_command(payload), target)
        except OSError as exc:
            self._on_error(exc)
            return False
        return True
