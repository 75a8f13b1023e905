"""Custom exception hierarchy for pylumi."""

from __future__ import annotations

from collections.abc import Iterable


class LumiError(Exception):
    """Base exception for all pylumi errors."""


class LumiConfigError(LumiError):
    """Invalid or missing configuration."""


class LumiCryptoError(LumiError):
    """Key derivation failure."""


class LumiTransportError(LumiError):
    """UDP socket failure (bind, membership, send)."""

    def __init__(self, message: str, *, address: tuple[str, int] | None = None) -> None:
        self.address = address
        super().__init__(message)


class UnsupportedModelError(LumiError):
    """No device implementation is registered for a model tag.

    Raised by the device catalog when an announce message names a model
    that nothing was registered against.  The hub turns it into a
    ``warning`` event and drops the message.
    """

    def __init__(self, model: str, supported: Iterable[str] = ()) -> None:
        self.model = model
        self.supported = tuple(sorted(supported))
        choices = ", ".join(self.supported) or "<none>"
        super().__init__(f'Type "{model}" is not valid, use one of: {choices}')
