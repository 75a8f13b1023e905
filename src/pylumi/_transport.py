"""UDP multicast socket plumbing for the hub."""

from __future__ import annotations

import asyncio
import logging
import socket
import struct
from typing import TYPE_CHECKING, Any, cast

from pylumi.exceptions import LumiTransportError

if TYPE_CHECKING:
    from pylumi.hub import Hub

_logger = logging.getLogger(__name__)

MULTICAST_GROUP = "224.0.0.50"
DISCOVERY_PORT = 4321
MULTICAST_TTL = 128
WHOIS_COMMAND = b'{"cmd":"whois"}'


def open_socket(port: int) -> socket.socket:
    """Create a reusable UDP socket bound to *port* on all interfaces."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    except OSError as ex:
        _logger.debug("Unable to set SO_REUSEADDR: %s", ex)
    try:
        sock.bind(("0.0.0.0", port))  # noqa: S104
    except OSError as exc:
        sock.close()
        raise LumiTransportError(f"Could not bind UDP port {port}: {exc}", address=("0.0.0.0", port)) from exc
    sock.setblocking(False)
    return sock


def join_multicast(sock: Any, interface: str | None) -> None:
    """Enable broadcast, set the multicast TTL and join the gateway group."""
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, MULTICAST_TTL)
    local = socket.inet_aton(interface) if interface else struct.pack("=I", socket.INADDR_ANY)
    mreq = socket.inet_aton(MULTICAST_GROUP) + local
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)


class HubProtocol(asyncio.DatagramProtocol):
    """Feeds datagrams from the loop into a :class:`~pylumi.hub.Hub`.

    :meth:`detach` cuts the link to the hub so late callbacks from a
    closing transport are dropped.
    """

    def __init__(self, hub: Hub) -> None:
        self._hub: Hub | None = hub
        self.transport: asyncio.DatagramTransport | None = None

    def detach(self) -> None:
        self._hub = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = cast(asyncio.DatagramTransport, transport)
        if self._hub is not None:
            self._hub._on_listening(self.transport)

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if self._hub is None:
            return
        try:
            self._hub.dispatch(data, addr[0])
        except Exception:
            _logger.exception("Failed to process datagram from %s", addr[0])

    def error_received(self, exc: Exception) -> None:
        if self._hub is not None:
            self._hub._on_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        hub = self._hub
        if hub is not None:
            if exc is not None:
                hub._on_error(exc)
            hub._on_connection_lost()
