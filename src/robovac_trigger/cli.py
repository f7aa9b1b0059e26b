"""Command-line entry point.

Intended to be run from cron or a systemd timer::

    outdoor-robovac-trigger -config /etc/robovac/config.yaml -action start
    outdoor-robovac-trigger -config /etc/robovac/config.yaml -action stop
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from robovac_trigger import __version__
from robovac_trigger.config import RobovacConfig, load_configuration
from robovac_trigger.exceptions import (
    RobovacConfigError,
    RobovacConnectionError,
    RobovacError,
    RobovacQueryError,
    RobovacWebhookError,
)
from robovac_trigger.models.decision import Action, Decision
from robovac_trigger.trigger import RobovacTrigger

_logger = logging.getLogger("robovac_trigger")

EXIT_OK = 0
EXIT_FATAL = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outdoor-robovac-trigger",
        description="Start or stop an outdoor robot vacuum based on precipitation data in InfluxDB.",
    )
    parser.add_argument(
        "-config",
        "--config",
        default="config.yaml",
        help="Set the location for the YAML config file",
    )
    parser.add_argument(
        "-action",
        "--action",
        default=Action.START.value,
        help=(
            "Set action for outdoor-robovac-trigger; start will decide whether to start the vacuum "
            "and stop will decide whether to stop it based on the forecast"
        ),
    )
    parser.add_argument(
        "-version",
        "--version",
        action="store_true",
        dest="show_version",
        help="Print the version of outdoor-robovac-trigger",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _op_for(exc: RobovacError) -> str:
    if isinstance(exc, RobovacConfigError) and exc.path:
        return "load_configuration"
    if isinstance(exc, RobovacConnectionError):
        return "influxdb.connect"
    if isinstance(exc, RobovacQueryError):
        return "influxdb.query"
    if isinstance(exc, RobovacWebhookError):
        return "webhook"
    return "main"


async def _run(config: RobovacConfig, action: Action) -> Decision:
    async with RobovacTrigger(config) as trigger:
        return await trigger.run(action)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.show_version:
        print(__version__)
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        action = Action(args.action)
    except ValueError:
        _logger.error("CLI parameter action must be either start or stop op=main action=%r", args.action)
        return EXIT_FATAL

    try:
        config = load_configuration(args.config)
        asyncio.run(_run(config, action))
    except RobovacError as exc:
        _logger.error("Run failed op=%s error=%s", _op_for(exc), exc)
        return EXIT_FATAL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
