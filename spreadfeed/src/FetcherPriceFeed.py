"""FetcherPriceFeed: Leaf price feed backed by an exchange fetcher.

Each update() polls the exchange once and records the price, converted to
fixed point, in an in-memory history. Historical lookups return the latest
observation at or before the requested time.

.. code-block:: python

    >>> feed = FetcherPriceFeed(get_fetcher("coinbase"), "usdc", "usd", precision=18)
    >>> await feed.update()
    >>> feed.get_current_price()
    1000100000000000000
"""

from __future__ import annotations

import asyncio
import logging
import time

from . import FixedPoint
from .fetchers import BaseFetcher, FetcherError
from .PriceFeed import Commit, PriceFeedUpdateError
from .PriceHistory import PriceHistory

logger = logging.getLogger(__name__)


class FetcherPriceFeed:
    """Price feed for one trading pair on one exchange.

    :ivar fetcher: Exchange fetcher used to poll prices.
    :ivar base: Base currency symbol (lowercase).
    :ivar quote: Quote currency symbol (lowercase).
    :ivar precision: Fixed-point precision of reported prices.
    :ivar fetch_timeout: Seconds to wait for a single fetch.
    :ivar history: Observations within the lookback window.
    """

    DEFAULT_FETCH_TIMEOUT = 10.0

    def __init__(
        self,
        fetcher: BaseFetcher,
        base: str,
        quote: str,
        precision: int = FixedPoint.DEFAULT_PRECISION,
        lookback: int = PriceHistory.DEFAULT_LOOKBACK_SECONDS,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        """Initialize the feed.

        :param fetcher: Exchange fetcher instance.
        :param base: Base currency symbol (e.g., "usdc").
        :param quote: Quote currency symbol (e.g., "usd").
        :param precision: Fixed-point precision (default 18).
        :param lookback: Seconds of history to keep (default 7200).
        :param fetch_timeout: Timeout for a single fetch (default 10).
        """
        self.fetcher = fetcher
        self.base = base.lower()
        self.quote = quote.lower()
        self.precision = precision
        self.fetch_timeout = fetch_timeout
        self.history = PriceHistory(lookback)

    def __repr__(self) -> str:
        return f"FetcherPriceFeed({self.fetcher.name}:{self.base}/{self.quote})"

    async def stage_update(self) -> Commit:
        """Fetch the latest price without recording it.

        :returns: Callable appending the fetched price to the history.
        :raises PriceFeedUpdateError: If the fetch fails, times out or returns
            no price.
        """
        try:
            price = await asyncio.wait_for(
                self.fetcher.fetch(self.base, self.quote),
                timeout=self.fetch_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"{self!r}: fetch timed out after {self.fetch_timeout}s")
            raise PriceFeedUpdateError(repr(self), "fetch timed out") from e
        except FetcherError as e:
            logger.warning(f"{self!r}: fetch failed: {e}")
            raise PriceFeedUpdateError(repr(self), str(e)) from e

        if price is None:
            logger.warning(f"{self!r}: no price returned")
            raise PriceFeedUpdateError(repr(self), "no price returned")

        fixed = FixedPoint.to_fixed(price, self.precision)
        observed_at = int(time.time())

        def commit() -> None:
            self._record(observed_at, fixed)
            logger.debug(f"{self!r}: price {price} at {observed_at}")

        return commit

    async def update(self) -> None:
        """Fetch the latest price and append it to the history.

        :raises PriceFeedUpdateError: If the fetch fails, times out or returns
            no price. The previously recorded prices are left unchanged.
        """
        commit = await self.stage_update()
        commit()

    def _record(self, timestamp: int, price: int) -> None:
        # the history only moves forward, even if the clock steps back
        latest = self.history.latest()
        if latest is not None and timestamp < latest[0]:
            timestamp = latest[0]
        self.history.record(timestamp, price)

    def get_current_price(self) -> int | None:
        latest = self.history.latest()
        return latest[1] if latest else None

    def get_historical_price(self, timestamp: int) -> int | None:
        return self.history.price_at(timestamp)

    def get_last_update_time(self) -> int | None:
        latest = self.history.latest()
        return latest[0] if latest else None
