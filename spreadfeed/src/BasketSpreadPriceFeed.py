"""BasketSpreadPriceFeed: Spread between two baskets, normalized by a denominator.

Algorithm (all values fixed-point at ``precision``):
    1. baseline = mean of the baseline basket prices
    2. experimental = mean of the experimental basket prices
    3. spread = 1 + experimental - baseline
    4. spread is clamped to [0, 2]
    5. result = spread / denominator price

Equal baskets therefore give a neutral spread of 1 before normalization.

.. code-block:: python

    >>> feed = BasketSpreadPriceFeed(
    ...     baseline_price_feeds=[usdc_feed, dai_feed],
    ...     experimental_price_feeds=[ust_feed, frax_feed],
    ...     denominator_price_feed=eth_feed,
    ... )
    >>> await feed.update()
    >>> feed.get_current_price()
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from . import FixedPoint
from .PriceFeed import (
    Commit,
    NoPriceAvailableError,
    PriceFeed,
    shared_precision,
    stage_all,
)

logger = logging.getLogger(__name__)


class BasketSpreadPriceFeed:
    """Clamped spread of an experimental basket over a baseline basket.

    The basket members are typically MedianizerPriceFeed instances, but any
    PriceFeed works. All feeds must share this feed's precision.

    :ivar baseline_price_feeds: Feeds averaged into the baseline basket price.
    :ivar experimental_price_feeds: Feeds averaged into the experimental basket price.
    :ivar denominator_price_feed: Feed whose price divides the clamped spread.
    :ivar precision: Number of fixed-point decimal digits.
    """

    def __init__(
        self,
        baseline_price_feeds: Sequence[PriceFeed],
        experimental_price_feeds: Sequence[PriceFeed],
        denominator_price_feed: PriceFeed,
        precision: int = FixedPoint.DEFAULT_PRECISION,
    ) -> None:
        """Initialize the basket spread feed.

        :param baseline_price_feeds: Non-empty baseline basket.
        :param experimental_price_feeds: Non-empty experimental basket.
        :param denominator_price_feed: Single denominator feed.
        :param precision: Fixed-point precision shared by all feeds (default 18).
        :raises ValueError: If a basket is empty, precision is invalid or a
            member declares a different precision.
        """
        if not baseline_price_feeds:
            raise ValueError("baseline basket must contain at least one price feed")
        if not experimental_price_feeds:
            raise ValueError("experimental basket must contain at least one price feed")
        if denominator_price_feed is None:
            raise ValueError("denominator price feed is required")
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
            raise ValueError("precision must be a non-negative integer")

        self.baseline_price_feeds = list(baseline_price_feeds)
        self.experimental_price_feeds = list(experimental_price_feeds)
        self.denominator_price_feed = denominator_price_feed
        self.precision = precision

        member_precision = shared_precision(self._all_feeds())
        if member_precision not in (None, precision):
            raise ValueError(
                f"basket members use precision {member_precision}, expected {precision}"
            )

        self.ONE = FixedPoint.scale(precision)
        self.TWO = 2 * self.ONE

    def __repr__(self) -> str:
        return (
            f"BasketSpreadPriceFeed(baseline={len(self.baseline_price_feeds)}, "
            f"experimental={len(self.experimental_price_feeds)}, "
            f"precision={self.precision})"
        )

    def _all_feeds(self) -> list[PriceFeed]:
        return [
            *self.baseline_price_feeds,
            *self.experimental_price_feeds,
            self.denominator_price_feed,
        ]

    async def stage_update(self) -> Commit:
        """Stage every basket member and the denominator.

        Each referenced feed is staged once per call, even if the same feed
        appears in several places.

        :returns: Callable publishing every staged feed at once.
        """
        feeds = self._all_feeds()
        logger.debug(f"{self!r}: updating {len(feeds)} feeds")
        return await stage_all(feeds)

    async def update(self) -> None:
        """Update every basket member and the denominator.

        New prices are published only if every feed succeeded; otherwise the
        previous prices stay readable and the first failure is raised.
        """
        commit = await self.stage_update()
        commit()

    def get_current_price(self) -> int:
        """Return the current basket spread divided by the denominator price.

        :raises NoPriceAvailableError: If any required price is missing.
        :raises PriceDivisionByZeroError: If the denominator price is zero.
        """
        return self._compute_price(lambda feed: feed.get_current_price())

    def get_historical_price(self, timestamp: int) -> int:
        """Return the basket spread at ``timestamp`` divided by the denominator.

        The timestamp is passed unchanged to every constituent feed.

        :raises NoPriceAvailableError: If any required price is missing.
        :raises PriceDivisionByZeroError: If the denominator price is zero.
        """
        return self._compute_price(lambda feed: feed.get_historical_price(timestamp))

    def get_last_update_time(self) -> int | None:
        """Return the most recent update time of any basket member or the denominator."""
        times = [feed.get_last_update_time() for feed in self._all_feeds()]
        known = [t for t in times if t is not None]
        return max(known) if known else None

    def _basket_average(
        self, feeds: list[PriceFeed], read_price: Callable[[PriceFeed], int | None]
    ) -> int:
        prices = []
        for feed in feeds:
            price = read_price(feed)
            if price is None:
                raise NoPriceAvailableError(f"{self!r}: basket member {feed!r} has no price")
            prices.append(price)
        return FixedPoint.mean(prices)

    def _compute_price(self, read_price: Callable[[PriceFeed], int | None]) -> int:
        baseline = self._basket_average(self.baseline_price_feeds, read_price)
        experimental = self._basket_average(self.experimental_price_feeds, read_price)

        spread = FixedPoint.sub(FixedPoint.add(self.ONE, experimental), baseline)
        clamped = FixedPoint.clamp(spread, 0, self.TWO)

        denominator = read_price(self.denominator_price_feed)
        if denominator is None:
            raise NoPriceAvailableError(f"{self!r}: denominator has no price")

        logger.debug(
            f"{self!r}: baseline={baseline} experimental={experimental} "
            f"spread={spread} clamped={clamped} denominator={denominator}"
        )
        return FixedPoint.div(clamped, denominator, self.precision)
