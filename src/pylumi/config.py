"""Hub configuration for pylumi."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pylumi.exceptions import LumiConfigError

DEFAULT_PORT = 9898


def _env_bool(name: str, value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise LumiConfigError(f"{name} must be a boolean (true/false), got {value!r}")


def _parse_keys(value: str) -> dict[str, str]:
    """Parse ``ip=secret,ip=secret`` into a mapping."""
    keys: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        ip, sep, secret = item.partition("=")
        if not sep or not ip.strip() or not secret.strip():
            raise LumiConfigError(f"Malformed key entry {item!r}, expected ip=secret")
        keys[ip.strip()] = secret.strip()
    return keys


@dataclasses.dataclass(frozen=True)
class HubConfig:
    """Hub configuration.

    Parameters
    ----------
    port : int
        Local UDP port to bind. Also the destination port for
        :meth:`pylumi.Hub.send`. Defaults to ``9898``.
    bind : str or None
        Local interface address used when joining the multicast group.
        ``None`` or ``"0.0.0.0"`` joins on the default interface.
    key : str or None
        Default gateway shared secret (16 ASCII characters), used for
        key derivation when no per-address override exists.
    keys : Mapping[str, str]
        Per-gateway shared secrets keyed by gateway IP address.
    browse : bool
        Discovery-only mode. The hub reports gateway announcements and
        never creates devices.
    """

    port: int = DEFAULT_PORT
    bind: str | None = None
    key: str | None = None
    keys: Mapping[str, str] = dataclasses.field(default_factory=dict)
    browse: bool = False

    def __post_init__(self) -> None:
        try:
            port = int(self.port)
        except (TypeError, ValueError) as exc:
            raise LumiConfigError(f"port must be an integer (got {self.port!r})") from exc
        if not 0 < port < 65536:
            raise LumiConfigError(f"port must be between 1 and 65535 (got {port})")
        object.__setattr__(self, "port", port)
        object.__setattr__(self, "keys", MappingProxyType(dict(self.keys)))

    @property
    def multicast_interface(self) -> str | None:
        """Interface address for the multicast membership, if any."""
        if self.bind and self.bind != "0.0.0.0":
            return self.bind
        return None

    @classmethod
    def from_key_list(cls, entries: Iterable[Mapping[str, str]], **kwargs: Any) -> HubConfig:
        """Build a config from ``[{"ip": ..., "key": ...}, ...]`` entries."""
        keys: dict[str, str] = {}
        for entry in entries:
            try:
                keys[entry["ip"]] = entry["key"]
            except KeyError as exc:
                raise LumiConfigError(f"Key entry {dict(entry)!r} is missing {exc.args[0]!r}") from exc
        return cls(keys=keys, **kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> HubConfig:
        """Create configuration from environment variables.

        Reads ``LUMI_PORT``, ``LUMI_BIND``, ``LUMI_KEY``, ``LUMI_KEYS``
        (``ip=secret,ip=secret``) and ``LUMI_BROWSE``. Explicit keyword
        arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        port_env = env.get("LUMI_PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = port_env

        for env_key, field_name in (("LUMI_BIND", "bind"), ("LUMI_KEY", "key")):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        keys_env = env.get("LUMI_KEYS")
        if keys_env is not None and "keys" not in overrides:
            config_kwargs["keys"] = _parse_keys(keys_env)

        if "browse" not in overrides:
            config_kwargs["browse"] = _env_bool("LUMI_BROWSE", env.get("LUMI_BROWSE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
