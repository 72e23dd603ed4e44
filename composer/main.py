"""
Index Composer order runner.

Submits the order batch through the Polynance API server, then keeps checking
for pending price data and verifies it when ready.

Usage:
    python -m composer                          # default batch, verify every 2s
    python -m composer --orders orders.yaml     # batch from a YAML file
    python -m composer --interval 5             # verify every 5s
    python -m composer --batch-only             # submit orders and exit
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
from typing import Optional

from composer.config import Settings
from composer.runner import OrderRunner, RunState

log = logging.getLogger("composer")

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="composer",
        description="Submit a batch of orders, then verify pending prices periodically",
    )
    parser.add_argument(
        "--orders", "-o",
        default=None,
        help="YAML file with the orders to submit (default: built-in batch, or ORDERS_FILE)"
    )
    parser.add_argument(
        "--interval", "-i",
        type=float,
        default=None,
        help="Seconds between price verification checks (default: VERIFY_INTERVAL_SECONDS or 2)"
    )
    parser.add_argument(
        "--api-base-url",
        default=None,
        help="Polynance API server (default: POLYNANCE_API_BASE_URL or http://localhost:9000)"
    )
    parser.add_argument(
        "--batch-only",
        action="store_true",
        help="Exit after the order batch instead of polling"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.orders:
        overrides["orders_file"] = args.orders
    if args.interval is not None:
        if args.interval <= 0:
            raise ValueError("--interval must be positive")
        overrides["verify_interval_seconds"] = args.interval
    if args.api_base_url:
        overrides["api_base_url"] = args.api_base_url
    return dataclasses.replace(settings, **overrides) if overrides else settings


def run(args: argparse.Namespace) -> int:
    try:
        settings = _apply_overrides(Settings.from_env(), args)
    except Exception as e:
        log.error("Error in main function: %s", e)
        return 1

    log.info("Settings: %s", settings.masked())
    runner = OrderRunner(settings=settings)

    def handle_shutdown(signum, frame):
        log.info("Shutdown requested (signal %d), stopping price verification...", signum)
        runner.stop()

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    state = runner.run(block=True, poll=not args.batch_only)
    log.info("Run finished: %s", state.value)
    return 0 if state == RunState.STOPPED else 1


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
    try:
        return run(args)
    except Exception as e:
        log.exception("Unhandled error: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
