#!/usr/bin/env python3
"""Watch gateway multicast traffic on the local network.

Binds the hub port, sends a ``whois`` probe and prints every gateway,
device and message the hub sees.

Usage
-----
::

    python scripts/monitor.py --browse          # list gateways only
    python scripts/monitor.py --key 0123456789abcdef --duration 60

Environment variables ``LUMI_PORT``, ``LUMI_BIND``, ``LUMI_KEY``,
``LUMI_KEYS`` and ``LUMI_BROWSE`` are honoured; flags take precedence.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pylumi import Hub, HubConfig, HubEvent, InboundMessage, LumiError  # noqa: E402
from pylumi._redact import redact_for_log  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--port", type=int, help="Local UDP port (default 9898)")
    parser.add_argument("--bind", help="Interface address for the multicast membership")
    parser.add_argument("--key", help="Default gateway secret, used to print write keys")
    parser.add_argument("--browse", action="store_true", help="Only report gateway announcements")
    parser.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (0 = until Ctrl-C)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


def _print(kind: str, payload: Any) -> None:
    print(f"[{kind}] {json.dumps(redact_for_log(payload), default=str)}", flush=True)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.port is not None:
        overrides["port"] = args.port
    if args.bind is not None:
        overrides["bind"] = args.bind
    if args.key is not None:
        overrides["key"] = args.key
    if args.browse:
        overrides["browse"] = True
    config = HubConfig.from_env(**overrides)

    hub = Hub(config)
    hub.on(HubEvent.BROWSE, lambda gateway: _print("browse", {"ip": gateway.ip}))
    hub.on(HubEvent.DEVICE, lambda device, name: _print("device", {"device": repr(device), "name": name}))
    hub.on(HubEvent.WARNING, lambda reason: _print("warning", reason))
    hub.on(HubEvent.ERROR, lambda exc: _print("error", str(exc)))

    def on_message(message: InboundMessage) -> None:
        _print("message", {"from": message.address, **message.to_dict()})
        if config.key and message.address and message.token:
            _print("key", {"ip": message.address, "derived": hub.derive_key(message.address) is not None})

    hub.on(HubEvent.MESSAGE, on_message)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    try:
        async with hub:
            if args.duration > 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=args.duration)
                except TimeoutError:
                    pass
            else:
                await stop_event.wait()
    except LumiError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"{len(hub.sensors)} device(s) seen", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
