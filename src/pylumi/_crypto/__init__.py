"""Cryptographic primitives for gateway command authorization."""

from __future__ import annotations

from pylumi._crypto.aes import GATEWAY_IV, derive_key

__all__ = [
    "GATEWAY_IV",
    "derive_key",
]
