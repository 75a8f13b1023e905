"""pylumi - Async discovery and dispatch for multicast smart-home gateways."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylumi")
except PackageNotFoundError:
    __version__ = "0+local"
from pylumi._crypto import GATEWAY_IV, derive_key
from pylumi._mqtt import MqttBridge
from pylumi.config import HubConfig
from pylumi.devices import BaseDevice, Device, DeviceCatalog, Gateway, default_catalog
from pylumi.events import DiscoveredGateway, EventEmitter, HubEvent
from pylumi.exceptions import (
    LumiConfigError,
    LumiCryptoError,
    LumiError,
    LumiTransportError,
    UnsupportedModelError,
)
from pylumi.hub import Hub, HubState
from pylumi.models import InboundMessage, encode_command
from pylumi.registry import SensorRegistry

__all__ = [
    "__version__",
    "BaseDevice",
    "Device",
    "DeviceCatalog",
    "DiscoveredGateway",
    "EventEmitter",
    "GATEWAY_IV",
    "Gateway",
    "Hub",
    "HubConfig",
    "HubEvent",
    "HubState",
    "InboundMessage",
    "LumiConfigError",
    "LumiCryptoError",
    "LumiError",
    "LumiTransportError",
    "MqttBridge",
    "SensorRegistry",
    "UnsupportedModelError",
    "default_catalog",
    "derive_key",
    "encode_command",
]
