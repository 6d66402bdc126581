"""Command line entry point: run one poll and exit.

Usage
-----
Set environment variables and run::

    export SOFAR_USERNAME="you@example.com"
    export SOFAR_PASSWORD="your-password"
    python -m pysofar --state-file state.json

Options override the matching ``SOFAR_*`` variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import Any

from pysofar.config import SofarConfig, parse_port
from pysofar.runner import RunOrchestrator


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll SofarCloud once and publish station data")
    parser.add_argument("--username", help="SofarCloud account name")
    parser.add_argument("--password", help="SofarCloud account password")
    parser.add_argument("--broker", dest="broker_address", help="MQTT broker address (enables MQTT)")
    parser.add_argument("--mqtt-port", help="MQTT broker port (default 1883)")
    parser.add_argument("--mqtt-user", help="MQTT username")
    parser.add_argument("--mqtt-pass", help="MQTT password")
    parser.add_argument("--no-mqtt", action="store_true", help="Disable MQTT even if the environment enables it")
    parser.add_argument("--store-json", action="store_true", help="Write the fetched data to sofar_realtime.json")
    parser.add_argument("--store-dir", help="Directory for the JSON snapshot")
    parser.add_argument("--state-file", help="JSON file backing the state tree between runs")
    parser.add_argument("--no-delay", action="store_true", help="Skip the random startup delay")
    parser.add_argument("--verify-ssl", action="store_true", help="Validate the SofarCloud TLS certificate")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in ("username", "password", "mqtt_user", "mqtt_pass", "store_dir", "state_file"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.broker_address is not None:
        overrides["broker_address"] = args.broker_address
        overrides["mqtt_enabled"] = True
    if args.mqtt_port is not None:
        overrides["mqtt_port"] = parse_port(args.mqtt_port)
    if args.no_mqtt:
        overrides["mqtt_enabled"] = False
    if args.store_json:
        overrides["store_json"] = True
    if args.no_delay:
        overrides["startup_delay_max"] = 0
    if args.verify_ssl:
        overrides["verify_ssl"] = True
    return overrides


async def _run(config: SofarConfig) -> None:
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    if task is not None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, task.cancel)
            except (NotImplementedError, RuntimeError):
                logging.getLogger(__name__).debug("Signal handlers unavailable on this platform")
                break
    await RunOrchestrator(config).run()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = SofarConfig.from_env(**_overrides(args))
    try:
        asyncio.run(_run(config))
    except asyncio.CancelledError:
        logging.getLogger(__name__).info("Run interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
