"""MedianizerPriceFeed: Combines several price feeds into one.

The combined price is the median of the constituent prices by default, or
their arithmetic mean when ``use_mean`` is set. The last update time is
always the most recent one among the constituents.

.. code-block:: python

    >>> feed = MedianizerPriceFeed([feed_a, feed_b, feed_c])
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


class MedianizerPriceFeed:
    """Median (or mean) of an ordered list of price feeds.

    :ivar price_feeds: Constituent feeds, updated by this feed's update().
    :ivar use_mean: If True, aggregate with the mean instead of the median.
    :ivar precision: Precision shared by the constituents, or None if none
        of them declares one.
    """

    def __init__(self, price_feeds: Sequence[PriceFeed], use_mean: bool = False) -> None:
        """Initialize the medianizer.

        :param price_feeds: Constituent feeds. May be empty, in which case
            every price read raises NoPriceAvailableError.
        :param use_mean: Aggregate with the mean instead of the median.
        :raises ValueError: If the constituents declare different precisions.
        """
        self.price_feeds = list(price_feeds)
        self.use_mean = use_mean
        self.precision = shared_precision(self.price_feeds)

    def __repr__(self) -> str:
        mode = "mean" if self.use_mean else "median"
        return f"MedianizerPriceFeed({len(self.price_feeds)} feeds, {mode})"

    async def stage_update(self) -> Commit:
        """Stage every constituent feed.

        :returns: Callable publishing all constituents at once.
        :raises Exception: The first failure from any constituent, after all
            constituents have finished. Nothing is published in that case.
        """
        logger.debug(f"{self!r}: updating {len(self.price_feeds)} feeds")
        return await stage_all(self.price_feeds)

    async def update(self) -> None:
        """Update every constituent feed, publishing only if all succeed."""
        commit = await self.stage_update()
        commit()

    def get_current_price(self) -> int:
        """Return the aggregated current price.

        :raises NoPriceAvailableError: If any constituent has no price yet or
            there are no constituents.
        """
        return self._aggregate(lambda feed: feed.get_current_price())

    def get_historical_price(self, timestamp: int) -> int:
        """Return the aggregated price at ``timestamp``.

        :raises NoPriceAvailableError: If any constituent has no price for
            ``timestamp`` or there are no constituents.
        """
        return self._aggregate(lambda feed: feed.get_historical_price(timestamp))

    def get_last_update_time(self) -> int | None:
        """Return the most recent update time among the constituents."""
        times = [feed.get_last_update_time() for feed in self.price_feeds]
        known = [t for t in times if t is not None]
        return max(known) if known else None

    def _aggregate(self, read_price: Callable[[PriceFeed], int | None]) -> int:
        prices = []
        for feed in self.price_feeds:
            price = read_price(feed)
            if price is None:
                raise NoPriceAvailableError(f"{self!r}: constituent {feed!r} has no price")
            prices.append(price)

        if self.use_mean:
            return FixedPoint.mean(prices)
        return FixedPoint.median(prices)
