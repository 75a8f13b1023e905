"""Wire message model.

Every datagram on the gateway protocol is a single JSON object.  Only a
handful of keys matter for routing; the rest are device specific and
are preserved as extra fields.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ACK_SUFFIX = "_ack"


class InboundMessage(BaseModel):
    """A decoded inbound message.

    ``data`` arrives as a JSON string on the wire; the hub replaces it
    with the decoded value (or ``None`` when it cannot be decoded).
    ``address`` is the sender's IP as reported by the transport.
    """

    model_config = ConfigDict(extra="allow")

    cmd: str | None = None
    sid: str | None = None
    model: str | None = None
    name: str | None = None
    data: Any = None
    token: str | None = None
    address: str | None = Field(default=None, exclude=True)

    @classmethod
    def decode(cls, datagram: bytes | str, address: str | None = None) -> InboundMessage | None:
        """Parse a datagram, returning ``None`` if it is not a valid message."""
        try:
            raw = json.loads(datagram)
        except (TypeError, ValueError):
            return None
        if not isinstance(raw, dict):
            return None
        raw.pop("address", None)
        try:
            message = cls.model_validate(raw)
        except ValidationError:
            return None
        message.address = address
        return message

    @property
    def is_heartbeat(self) -> bool:
        return self.cmd == "heartbeat"

    @property
    def is_report(self) -> bool:
        return self.cmd == "report"

    @property
    def is_ack(self) -> bool:
        return self.cmd is not None and self.cmd.endswith(ACK_SUFFIX)

    def decode_payload(self) -> Any:
        """Decode a string ``data`` field in place and return it.

        Raises :class:`ValueError` if the string is not valid JSON.
        Non-string payloads are returned untouched.
        """
        if isinstance(self.data, str) and self.data:
            self.data = json.loads(self.data)
        return self.data

    def to_dict(self) -> dict[str, Any]:
        """Wire-form dict including extra fields, without ``None`` values."""
        return self.model_dump(exclude_none=True)


def encode_command(payload: Mapping[str, Any] | BaseModel) -> bytes:
    """Encode an outbound command as compact JSON bytes."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_none=True)
    return json.dumps(dict(payload), separators=(",", ":")).encode("utf-8")
