"""Gateway device."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pylumi.devices.base import BaseDevice


class Gateway(BaseDevice):
    """The multicast gateway that relays all sub-device traffic."""

    model_tag = "gateway"

    @property
    def key(self) -> str | None:
        """Current write key, or ``None`` until a token has been seen."""
        return self.hub.derive_key(self.ip)

    def send(self, payload: Mapping[str, Any]) -> bool:
        """Unicast *payload* to this gateway."""
        return self.hub.send(payload, self.ip)
