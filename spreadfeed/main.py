#!/usr/bin/env python3
"""Basket Spread Price Feed.

Builds a price feed tree from a JSON configuration, refreshes it
periodically and logs the resulting price.

Run via ``python -m spreadfeed.main --config feeds.json``.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src import FixedPoint
from .src.fetchers import BaseFetcher, get_available_fetchers
from .src.PriceFeedFactory import ConfigError, PriceFeedFactory, load_config
from .src.PriceMonitor import PriceMonitor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_api_keys(api_key_str: str | None) -> dict[str, str]:
    """Parse comma-separated API key string into a dictionary.

    Format: source1=key1,source2=key2

    :param api_key_str: Comma-separated API key string.
    :returns: Dict mapping source names to API keys.
    """
    if not api_key_str:
        return {}

    api_keys = {}
    for item in api_key_str.split(","):
        item = item.strip()
        if "=" in item:
            source, key = item.split("=", 1)
            api_keys[source.strip().lower()] = key.strip()
    return api_keys


def parse_env_api_keys(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Parse API keys from API_KEY_<SOURCE> environment variables.

    :param environ: Environment mapping (defaults to os.environ).
    :returns: Dict mapping source names to API keys.
    """
    environ = os.environ if environ is None else environ
    api_keys = {}
    for key, value in environ.items():
        if key.startswith("API_KEY_") and value:
            api_keys[key[len("API_KEY_"):].lower()] = value
    return api_keys


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser. Defaults come from environment variables."""
    parser = argparse.ArgumentParser(
        description="Basket spread price feed: clamped basket spread over a denominator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available exchange sources:
  {', '.join(get_available_fetchers())}

Environment variables (CLI args take precedence):
  FEED_CONFIG, UPDATE_PERIOD, NETWORK, RPC_URL, API_KEYS, API_KEY_<SOURCE>
""",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to the JSON price feed configuration",
        default=os.environ.get("FEED_CONFIG"),
    )

    parser.add_argument(
        "--update-period",
        dest="update_period",
        type=int,
        help="Seconds between feed updates (minimum: 1, default: 60)",
        default=int(os.environ.get("UPDATE_PERIOD") or "60"),
    )

    parser.add_argument(
        "--network",
        type=str,
        help="Network name or RPC URL for contract feeds (RPC_URL overrides)",
        default=os.environ.get("NETWORK") or "localnet",
    )

    parser.add_argument(
        "--api-keys",
        dest="api_keys",
        type=str,
        help="Comma-separated API keys (e.g., coinbase=abc,kraken=xyz)",
        default=os.environ.get("API_KEYS"),
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single update cycle and exit (non-zero if no price)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser


async def _run_once(monitor: PriceMonitor) -> bool:
    try:
        return await monitor.run_once() is not None
    finally:
        await BaseFetcher.close_shared_client()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the basket spread price feed CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.config:
        parser.error("--config (or FEED_CONFIG) is required")

    if args.update_period < 1:
        parser.error("--update-period must be at least 1 second")

    api_keys = parse_env_api_keys()
    api_keys.update(parse_api_keys(args.api_keys))

    try:
        config = load_config(args.config)
        factory = PriceFeedFactory(api_keys=api_keys, network=args.network)
        feed = factory.create(config)
    except ConfigError as e:
        parser.error(str(e))

    # medianizers report the precision their leaves were built with
    precision = getattr(feed, "precision", None)
    if precision is None:
        precision = FixedPoint.DEFAULT_PRECISION

    logger.info("=" * 60)
    logger.info("Basket Spread Price Feed")
    logger.info("=" * 60)
    logger.info(f"Config:            {args.config}")
    logger.info(f"Feed:              {feed!r}")
    logger.info(f"Update Period:     {args.update_period}s")
    logger.info(f"Network:           {args.network}")
    if api_keys:
        logger.info(f"API Keys:          {', '.join(api_keys.keys())}")
    logger.info("=" * 60)

    monitor = PriceMonitor(feed, update_period=args.update_period, precision=precision)

    try:
        if args.once:
            if not asyncio.run(_run_once(monitor)):
                sys.exit(1)
        else:
            asyncio.run(monitor.run())
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
