"""PriceFeed: The capability shared by leaf feeds and aggregators.

Any object with the four methods below can be composed into a
MedianizerPriceFeed or BasketSpreadPriceFeed; no base class is required.
All prices are fixed-point integers scaled by ``10 ** precision``, where the
precision is agreed between every feed in one aggregation tree.

Feeds in this package also implement ``stage_update()``: it does the slow
work of an update and returns a callable that publishes the result. An
aggregator publishes its children only once all of them have staged
successfully, so a failed update never leaves a partially refreshed tree.

.. code-block:: python

    class MyFeed:
        async def update(self) -> None: ...
        def get_current_price(self) -> int | None: ...
        def get_historical_price(self, timestamp: int) -> int | None: ...
        def get_last_update_time(self) -> int | None: ...
"""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, Protocol, runtime_checkable


class PriceFeedError(Exception):
    """Base exception for price feed errors."""

    pass


class NoPriceAvailableError(PriceFeedError):
    """Raised when a price is required but not available.

    Happens when a feed is read before its first successful update, when a
    historical lookup has no observation, or when an aggregation has no inputs.
    """

    pass


class PriceDivisionByZeroError(PriceFeedError, ZeroDivisionError):
    """Raised when a fixed-point division has a zero denominator."""

    pass


class PriceFeedUpdateError(PriceFeedError):
    """Raised when a leaf feed fails to refresh its price.

    :ivar feed: Description of the feed that failed.
    """

    def __init__(self, feed: str, message: str):
        """Initialize the update error.

        :param feed: Description of the failing feed.
        :param message: Reason for the failure.
        """
        self.feed = feed
        super().__init__(f"{feed}: {message}")


@runtime_checkable
class PriceFeed(Protocol):
    """Structural interface for all price feeds."""

    async def update(self) -> None:
        """Refresh the feed. May suspend while data is fetched."""
        ...

    def get_current_price(self) -> int | None:
        """Return the latest price, or None if not yet available."""
        ...

    def get_historical_price(self, timestamp: int) -> int | None:
        """Return the price at ``timestamp`` (unix seconds), or None."""
        ...

    def get_last_update_time(self) -> int | None:
        """Return the latest unix timestamp at which data was observed."""
        ...


def shared_precision(feeds: Iterable[PriceFeed]) -> int | None:
    """Return the precision declared by ``feeds``.

    Feeds without a ``precision`` attribute (or with None) are ignored.

    :param feeds: Feeds to inspect.
    :returns: The common precision, or None if no feed declares one.
    :raises ValueError: If the feeds declare different precisions.
    """
    precisions = {getattr(feed, "precision", None) for feed in feeds} - {None}
    if len(precisions) > 1:
        raise ValueError(f"price feeds have mixed precisions {sorted(precisions)}")
    return precisions.pop() if precisions else None


Commit = Callable[[], None]


def _nothing_to_commit() -> None:
    pass


async def stage_update(feed: PriceFeed) -> Commit:
    """Fetch ``feed``'s next state without publishing it.

    Feeds exposing ``stage_update()`` return a callable that publishes the
    staged state. Any other PriceFeed is updated in place, so its new price is
    visible as soon as its own update() returns.

    :param feed: Feed to stage.
    :returns: Callable publishing the staged state.
    """
    stage = getattr(feed, "stage_update", None)
    if stage is None:
        await feed.update()
        return _nothing_to_commit
    return await stage()


async def stage_all(feeds: Iterable[PriceFeed]) -> Commit:
    """Stage every feed once, concurrently, in the given order.

    Feeds are not de-duplicated: a feed listed twice is staged twice.
    All stages run to completion before the first failure (in list order)
    is re-raised unchanged, in which case nothing is published.

    :param feeds: Feeds to stage.
    :returns: Callable publishing every staged state, in list order.
    :raises BaseException: The first exception raised by any feed.
    """
    results = await asyncio.gather(
        *(stage_update(feed) for feed in feeds), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result

    def commit() -> None:
        for commit_feed in results:
            commit_feed()

    return commit
