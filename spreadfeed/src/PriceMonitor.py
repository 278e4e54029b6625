"""PriceMonitor: Periodically refreshes a price feed and reports its price.

Any failure during a cycle means "no actionable price this cycle": it is
logged and reported as None, never as zero.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from . import FixedPoint
from .fetchers import BaseFetcher, FetcherError
from .PriceFeed import PriceFeed, PriceFeedError

logger = logging.getLogger(__name__)


class PriceMonitor:
    """Update/report loop around a single top-level price feed.

    :ivar feed: Price feed to refresh.
    :ivar update_period: Seconds between cycles.
    :ivar precision: Precision used to format the feed's prices.
    :ivar last_price: Last successfully read price, or None.
    """

    def __init__(
        self,
        feed: PriceFeed,
        update_period: int = 60,
        precision: int = FixedPoint.DEFAULT_PRECISION,
    ) -> None:
        self.feed = feed
        self.update_period = max(1, update_period)
        self.precision = precision
        self.last_price: int | None = None

    async def run_once(self) -> Decimal | None:
        """Update the feed and read its current price.

        :returns: The current price as a Decimal, or None if no price could be
            obtained this cycle.
        """
        try:
            await self.feed.update()
            price = self.feed.get_current_price()
        except (PriceFeedError, FetcherError) as e:
            logger.warning(f"No actionable price this cycle: {type(e).__name__}: {e}")
            return None

        if price is None:
            logger.warning("No actionable price this cycle: feed returned no price")
            return None

        self.last_price = price
        value = FixedPoint.from_fixed(price, self.precision)
        logger.info(
            f"Price {value} (raw={price}, last_update={self.feed.get_last_update_time()})"
        )
        return value

    async def run(self) -> None:
        """Run update cycles forever, every ``update_period`` seconds."""
        logger.info(f"Starting price monitor, update period {self.update_period}s")
        try:
            while True:
                await self.run_once()
                await asyncio.sleep(self.update_period)
        finally:
            await BaseFetcher.close_shared_client()
