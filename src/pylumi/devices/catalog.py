"""Model tag to device class lookup.

The catalog is populated explicitly at startup; the hub never searches
modules at runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, TypeVar

from pylumi.config import HubConfig
from pylumi.devices.base import Device
from pylumi.devices.gateway import Gateway
from pylumi.exceptions import UnsupportedModelError

if TYPE_CHECKING:
    from pylumi.hub import Hub

DeviceFactory = Callable[[str, str, "Hub", str, HubConfig], Device]
F = TypeVar("F", bound=DeviceFactory)


class DeviceCatalog:
    """Registry of device constructors keyed by model tag."""

    def __init__(self) -> None:
        self._factories: dict[str, DeviceFactory] = {}

    def __contains__(self, model: object) -> bool:
        return model in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def add(self, model: str, factory: DeviceFactory) -> None:
        if not model:
            raise ValueError("model tag must be non-empty")
        if model in self._factories:
            raise ValueError(f"model {model!r} is already registered")
        self._factories[model] = factory

    def register(self, model: str) -> Callable[[F], F]:
        """Class decorator form of :meth:`add`."""

        def decorator(factory: F) -> F:
            self.add(model, factory)
            return factory

        return decorator

    def models(self) -> tuple[str, ...]:
        return tuple(self._factories)

    def resolve(self, model: str) -> DeviceFactory:
        """Return the constructor for *model* or raise :class:`UnsupportedModelError`."""
        factory = self._factories.get(model)
        if factory is None:
            raise UnsupportedModelError(model, self._factories)
        return factory


def default_catalog() -> DeviceCatalog:
    """Return a fresh catalog with the built-in device types."""
    catalog = DeviceCatalog()
    catalog.add(Gateway.model_tag, Gateway)
    return catalog
