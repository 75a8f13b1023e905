from __future__ import annotations

import pytest

from pylumi.models.message import InboundMessage, encode_command


def test_decode_keeps_extra_fields_and_sets_address() -> None:
    msg = InboundMessage.decode(
        b'{"cmd":"report","model":"sensor_ht","sid":"158d0001","short_id":18088,"data":"{\\"humidity\\":\\"6522\\"}"}',
        "10.0.0.5",
    )

    assert msg is not None
    assert msg.cmd == "report"
    assert msg.sid == "158d0001"
    assert msg.address == "10.0.0.5"
    assert msg.to_dict()["short_id"] == 18088
    assert "address" not in msg.to_dict()
    assert msg.decode_payload() == {"humidity": "6522"}
    assert msg.data == {"humidity": "6522"}


def test_decode_ignores_wire_address_field() -> None:
    msg = InboundMessage.decode(b'{"cmd":"heartbeat","address":"1.2.3.4"}', "10.0.0.5")
    assert msg is not None
    assert msg.address == "10.0.0.5"


@pytest.mark.parametrize(
    "datagram",
    [b"", b"not json", b"null", b'"text"', b'{"cmd": ["x"]}', b'{"sid": 12}', b"\xff\xfe"],
)
def test_decode_rejects_malformed(datagram: bytes) -> None:
    assert InboundMessage.decode(datagram, "10.0.0.5") is None


def test_command_kinds() -> None:
    assert InboundMessage(cmd="heartbeat").is_heartbeat
    assert InboundMessage(cmd="report").is_report
    assert InboundMessage(cmd="read_ack").is_ack
    assert InboundMessage(cmd="get_id_list_ack").is_ack
    assert not InboundMessage(cmd="ack").is_ack
    assert not InboundMessage().is_ack


def test_decode_payload_raises_on_bad_json() -> None:
    msg = InboundMessage(cmd="report", data="{oops")
    with pytest.raises(ValueError):
        msg.decode_payload()


def test_encode_command_is_compact() -> None:
    assert encode_command({"cmd": "read", "sid": "abc"}) == b'{"cmd":"read","sid":"abc"}'
    assert encode_command(InboundMessage(cmd="whois")) == b'{"cmd":"whois"}'
