"""Device contract, built-in devices and the model catalog."""

from __future__ import annotations

from pylumi.devices.base import BaseDevice, Device
from pylumi.devices.catalog import DeviceCatalog, DeviceFactory, default_catalog
from pylumi.devices.gateway import Gateway

__all__ = [
    "BaseDevice",
    "Device",
    "DeviceCatalog",
    "DeviceFactory",
    "Gateway",
    "default_catalog",
]
