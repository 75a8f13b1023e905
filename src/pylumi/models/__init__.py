"""Data models for gateway wire messages."""

from __future__ import annotations

from pylumi.models.message import ACK_SUFFIX, InboundMessage, encode_command

__all__ = [
    "ACK_SUFFIX",
    "InboundMessage",
    "encode_command",
]
