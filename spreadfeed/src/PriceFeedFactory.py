"""PriceFeedFactory: Builds a price feed tree from a JSON-style configuration.

Supported feed types:
    - "medianizer": ``medianized_feeds`` (list of configs), ``compute_mean`` (bool)
    - "basketspread": ``baseline_price_feeds``, ``experimental_price_feeds``
      (lists of configs), ``denominator_price_feed`` (config)
    - "fetcher": ``source`` (exchange name), ``pair`` ("base/quote"),
      optional ``lookback`` and ``timeout``
    - "contract": ``address`` (aggregator contract), optional ``lookback``

Every config may set ``precision``; children inherit their parent's precision
unless they override it.

.. code-block:: python

    >>> factory = PriceFeedFactory(api_keys={})
    >>> feed = factory.create({
    ...     "type": "basketspread",
    ...     "baseline_price_feeds": [
    ...         {"type": "medianizer", "medianized_feeds": [
    ...             {"type": "fetcher", "source": "coinbase", "pair": "usdc/usd"},
    ...             {"type": "fetcher", "source": "kraken", "pair": "usdc/usd"},
    ...         ]},
    ...     ],
    ...     "experimental_price_feeds": [...],
    ...     "denominator_price_feed": {...},
    ... })
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from . import FixedPoint
from .BasketSpreadPriceFeed import BasketSpreadPriceFeed
from .ContractPriceFeed import ContractPriceFeed
from .ContractUtility import ContractUtility
from .FetcherPriceFeed import FetcherPriceFeed
from .fetchers import BaseFetcher, FetcherConfigError, get_fetcher
from .MedianizerPriceFeed import MedianizerPriceFeed
from .PriceFeed import PriceFeed
from .PriceHistory import PriceHistory

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a price feed configuration is invalid."""

    pass


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a price feed configuration from a JSON file.

    :param path: Path to the JSON file.
    :returns: Parsed configuration dict.
    :raises ConfigError: If the file cannot be read or is not a JSON object.
    """
    try:
        with open(path, "r") as file:
            config = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot load price feed config {path}: {e}") from e
    if not isinstance(config, dict):
        raise ConfigError(f"Price feed config {path} must be a JSON object")
    return config


def _parse_pair(pair_str: Any) -> tuple[str, str]:
    if not isinstance(pair_str, str):
        raise ConfigError(f"Invalid pair {pair_str!r}. Expected 'base/quote'")
    parts = pair_str.lower().split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigError(
            f"Invalid pair format '{pair_str}'. Expected 'base/quote' (e.g., 'usdc/usd')"
        )
    return parts[0], parts[1]


class PriceFeedFactory:
    """Creates price feeds from configuration dicts.

    Fetcher instances are shared per source and timeout, and a single
    ContractUtility is created on first use of a contract feed.

    :ivar api_keys: Dict mapping source names to API keys.
    :ivar network: Network name or RPC URL used for contract feeds.
    :ivar fetchers: Fetcher instances created so far, by (source, timeout).
    """

    def __init__(
        self,
        api_keys: dict[str, str] | None = None,
        network: str = "localnet",
        contract_utility: ContractUtility | None = None,
    ) -> None:
        self.api_keys = api_keys or {}
        self.network = network
        self.fetchers: dict[tuple[str, float], BaseFetcher] = {}
        self._contract_utility = contract_utility

    @property
    def contract_utility(self) -> ContractUtility:
        if self._contract_utility is None:
            self._contract_utility = ContractUtility(self.network)
        return self._contract_utility

    def create(self, config: dict[str, Any], precision: int | None = None) -> PriceFeed:
        """Create a price feed (and all of its children) from ``config``.

        :param config: Feed configuration dict.
        :param precision: Precision inherited from the parent config.
        :returns: Configured price feed.
        :raises ConfigError: If the configuration is invalid.
        """
        if not isinstance(config, dict):
            raise ConfigError(f"Price feed config must be an object, got {config!r}")

        precision = config.get("precision", precision)
        if precision is None:
            precision = FixedPoint.DEFAULT_PRECISION
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
            raise ConfigError(f"Invalid precision {precision!r}")

        feed_type = config.get("type")
        if feed_type == "medianizer":
            return self._create_medianizer(config, precision)
        if feed_type == "basketspread":
            return self._create_basket_spread(config, precision)
        if feed_type == "fetcher":
            return self._create_fetcher_feed(config, precision)
        if feed_type == "contract":
            return self._create_contract_feed(config, precision)
        raise ConfigError(f"Unknown price feed type {feed_type!r}")

    def _create_children(self, config: dict[str, Any], key: str, precision: int) -> list[PriceFeed]:
        children = config.get(key)
        if not isinstance(children, list) or not children:
            raise ConfigError(f"'{key}' must be a non-empty list of price feed configs")
        return [self.create(child, precision) for child in children]

    def _create_medianizer(self, config: dict[str, Any], precision: int) -> MedianizerPriceFeed:
        use_mean = config.get("compute_mean", False)
        if not isinstance(use_mean, bool):
            raise ConfigError(f"'compute_mean' must be a boolean, got {use_mean!r}")
        feeds = self._create_children(config, "medianized_feeds", precision)
        logger.debug(f"Creating medianizer over {len(feeds)} feeds (mean={use_mean})")
        try:
            return MedianizerPriceFeed(feeds, use_mean=use_mean)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def _create_basket_spread(self, config: dict[str, Any], precision: int) -> BasketSpreadPriceFeed:
        baseline = self._create_children(config, "baseline_price_feeds", precision)
        experimental = self._create_children(config, "experimental_price_feeds", precision)
        if "denominator_price_feed" not in config:
            raise ConfigError("'denominator_price_feed' is required for a basketspread feed")
        denominator = self.create(config["denominator_price_feed"], precision)
        logger.debug(
            f"Creating basket spread feed: {len(baseline)} baseline, "
            f"{len(experimental)} experimental, precision={precision}"
        )
        try:
            return BasketSpreadPriceFeed(baseline, experimental, denominator, precision=precision)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def _get_fetcher(self, source: Any, timeout: Any) -> BaseFetcher:
        if not isinstance(source, str) or not source:
            raise ConfigError(f"Invalid fetcher source {source!r}")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"Invalid fetcher timeout {timeout!r}")
        key = (source.lower(), float(timeout))
        if key not in self.fetchers:
            try:
                self.fetchers[key] = get_fetcher(
                    key[0], api_key=self.api_keys.get(key[0]), timeout=key[1]
                )
            except FetcherConfigError as e:
                raise ConfigError(str(e)) from e
        return self.fetchers[key]

    def _create_fetcher_feed(self, config: dict[str, Any], precision: int) -> FetcherPriceFeed:
        base, quote = _parse_pair(config.get("pair"))
        timeout = config.get("timeout", FetcherPriceFeed.DEFAULT_FETCH_TIMEOUT)
        fetcher = self._get_fetcher(config.get("source"), timeout)
        if not fetcher.supports_pair(base, quote):
            raise ConfigError(f"Source '{fetcher.name}' does not support {base}/{quote}")
        return FetcherPriceFeed(
            fetcher,
            base,
            quote,
            precision=precision,
            lookback=config.get("lookback", PriceHistory.DEFAULT_LOOKBACK_SECONDS),
            fetch_timeout=timeout,
        )

    def _create_contract_feed(self, config: dict[str, Any], precision: int) -> ContractPriceFeed:
        address = config.get("address")
        if not isinstance(address, str):
            raise ConfigError(f"Invalid contract address {address!r}")
        try:
            contract = self.contract_utility.get_aggregator(address)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return ContractPriceFeed(
            contract,
            precision=precision,
            lookback=config.get("lookback", PriceHistory.DEFAULT_LOOKBACK_SECONDS),
        )
