from __future__ import annotations

import pytest

from pylumi.config import HubConfig
from pylumi.exceptions import LumiConfigError


def test_defaults() -> None:
    config = HubConfig()
    assert config.port == 9898
    assert config.browse is False
    assert config.multicast_interface is None
    assert dict(config.keys) == {}


def test_any_address_means_default_interface() -> None:
    assert HubConfig(bind="0.0.0.0").multicast_interface is None
    assert HubConfig(bind="192.168.1.2").multicast_interface == "192.168.1.2"


@pytest.mark.parametrize("port", [0, 70000, "nope"])
def test_invalid_port_rejected(port: object) -> None:
    with pytest.raises(LumiConfigError):
        HubConfig(port=port)  # type: ignore[arg-type]


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMI_PORT", "9999")
    monkeypatch.setenv("LUMI_BIND", "192.168.1.2")
    monkeypatch.setenv("LUMI_KEY", "0987654321qwerty")
    monkeypatch.setenv("LUMI_KEYS", "10.0.0.5=abcdefghijklmnop, 10.0.0.6=ponmlkjihgfedcba")
    monkeypatch.setenv("LUMI_BROWSE", "yes")

    config = HubConfig.from_env()

    assert config.port == 9999
    assert config.bind == "192.168.1.2"
    assert config.key == "0987654321qwerty"
    assert dict(config.keys) == {"10.0.0.5": "abcdefghijklmnop", "10.0.0.6": "ponmlkjihgfedcba"}
    assert config.browse is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMI_PORT", "9999")
    monkeypatch.setenv("LUMI_BROWSE", "1")

    config = HubConfig.from_env(port=4000, browse=False)

    assert config.port == 4000
    assert config.browse is False


def test_from_env_rejects_malformed_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMI_KEYS", "10.0.0.5")
    with pytest.raises(LumiConfigError, match="expected ip=secret"):
        HubConfig.from_env()


def test_from_env_rejects_unrecognized_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMI_BROWSE", "maybe")
    with pytest.raises(LumiConfigError, match="LUMI_BROWSE"):
        HubConfig.from_env()

    # An explicit override skips the variable entirely.
    assert HubConfig.from_env(browse=True).browse is True


def test_from_key_list() -> None:
    config = HubConfig.from_key_list([{"ip": "10.0.0.5", "key": "abcdefghijklmnop"}], key="0987654321qwerty")
    assert dict(config.keys) == {"10.0.0.5": "abcdefghijklmnop"}
    assert config.key == "0987654321qwerty"

    with pytest.raises(LumiConfigError):
        HubConfig.from_key_list([{"ip": "10.0.0.5"}])


def test_keys_are_read_only() -> None:
    config = HubConfig(keys={"10.0.0.5": "abcdefghijklmnop"})
    with pytest.raises(TypeError):
        config.keys["10.0.0.6"] = "x"  # type: ignore[index]
