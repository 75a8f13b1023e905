"""In-memory device registry.

The single source of truth mapping device id to device object.  Entries
live for the lifetime of the hub; nothing is ever evicted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from pylumi.devices.base import Device
from pylumi.devices.catalog import DeviceCatalog
from pylumi.events import HubEvent

if TYPE_CHECKING:
    from pylumi.hub import Hub

_logger = logging.getLogger(__name__)


class SensorRegistry:
    """Device lookup plus construction through a :class:`DeviceCatalog`."""

    def __init__(self, hub: Hub, catalog: DeviceCatalog) -> None:
        self._hub = hub
        self._catalog = catalog
        self._sensors: dict[str, Device] = {}

    def __contains__(self, sid: object) -> bool:
        return sid in self._sensors

    def __iter__(self) -> Iterator[str]:
        return iter(self._sensors)

    def __len__(self) -> int:
        return len(self._sensors)

    @property
    def catalog(self) -> DeviceCatalog:
        return self._catalog

    def values(self) -> list[Device]:
        return list(self._sensors.values())

    def lookup(self, sid: str | None) -> Device | None:
        """Return the device registered as *sid*, never creating one."""
        if sid is None:
            return None
        return self._sensors.get(sid)

    get = lookup

    def create(self, sid: str, model: str, ip: str, name: str | None = None) -> Device | None:
        """Construct, announce and register a device.

        Returns ``None`` when the hub is closed.  Raises
        :class:`~pylumi.exceptions.UnsupportedModelError` when no
        implementation is registered for *model*.
        """
        if self._hub.closed:
            return None
        factory = self._catalog.resolve(model)
        device = factory(sid, ip, self._hub, model, self._hub.config)
        _logger.debug("New device sid=%s model=%s ip=%s name=%s", sid, model, ip, name)
        # Subscribers see the device before lookup() can return it.
        self._hub.events.emit(HubEvent.DEVICE, device, name)
        self._sensors[device.sid] = device
        return device
