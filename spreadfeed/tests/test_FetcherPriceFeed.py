"""Unit tests for FetcherPriceFeed."""

import asyncio
from decimal import Decimal
from unittest.mock import patch

import pytest

from spreadfeed.src.FetcherPriceFeed import FetcherPriceFeed
from spreadfeed.src.fetchers import BaseFetcher, FetcherError
from spreadfeed.src.PriceFeed import PriceFeed, PriceFeedUpdateError


class StubFetcher(BaseFetcher):
    """Fetcher returning queued results instead of calling an exchange."""

    name = "stub"

    def __init__(self, results: list) -> None:
        super().__init__()
        self.results = list(results)
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, base: str, quote: str) -> Decimal | None:
        self.calls.append((base, quote))
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class SlowFetcher(BaseFetcher):
    """Fetcher that never answers in time."""

    name = "slow"

    async def fetch(self, base: str, quote: str) -> Decimal | None:
        await asyncio.sleep(10)
        return Decimal("1")


class TestFetcherPriceFeedUpdate:
    """Test update behaviour."""

    def test_not_available_before_update(self) -> None:
        """A fresh feed has no price and no update time."""
        feed = FetcherPriceFeed(StubFetcher([]), "USDC", "USD")

        assert feed.get_current_price() is None
        assert feed.get_historical_price(1000) is None
        assert feed.get_last_update_time() is None
        assert isinstance(feed, PriceFeed)

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_update_records_price(self, mock_time) -> None:
        """update() should convert the price to fixed point and record it."""
        mock_time.return_value = 1000.7
        fetcher = StubFetcher([Decimal("1.0001")])
        feed = FetcherPriceFeed(fetcher, "USDC", "USD", precision=8)

        await feed.update()

        assert fetcher.calls == [("usdc", "usd")]
        assert feed.get_current_price() == 100010000
        assert feed.get_last_update_time() == 1000

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_historical_lookup(self, mock_time) -> None:
        """Historical prices should come from the recorded observations."""
        fetcher = StubFetcher([Decimal("1"), Decimal("2")])
        feed = FetcherPriceFeed(fetcher, "eth", "usd", precision=2)

        mock_time.return_value = 1000
        await feed.update()
        mock_time.return_value = 1060
        await feed.update()

        assert feed.get_historical_price(999) is None
        assert feed.get_historical_price(1030) == 100
        assert feed.get_historical_price(1060) == 200
        assert feed.get_current_price() == 200

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_clock_going_backwards(self, mock_time) -> None:
        """A clock step backwards should not break the history order."""
        fetcher = StubFetcher([Decimal("1"), Decimal("2")])
        feed = FetcherPriceFeed(fetcher, "eth", "usd", precision=2)

        mock_time.return_value = 1000
        await feed.update()
        mock_time.return_value = 990
        await feed.update()

        assert feed.get_current_price() == 200
        assert feed.get_last_update_time() == 1000

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_staged_price_recorded_on_commit(self, mock_time) -> None:
        """stage_update() should fetch but only the commit records the price."""
        mock_time.return_value = 1000
        fetcher = StubFetcher([Decimal("3")])
        feed = FetcherPriceFeed(fetcher, "eth", "usd", precision=2)

        commit = await feed.stage_update()

        assert fetcher.calls == [("eth", "usd")]
        assert feed.get_current_price() is None

        commit()

        assert feed.get_current_price() == 300
        assert feed.get_last_update_time() == 1000

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_commits_out_of_order(self, mock_time) -> None:
        """An older staged observation committed late should not break the history."""
        fetcher = StubFetcher([Decimal("1"), Decimal("2")])
        feed = FetcherPriceFeed(fetcher, "eth", "usd", precision=2)

        mock_time.return_value = 1000
        first = await feed.stage_update()
        mock_time.return_value = 1010
        second = await feed.stage_update()
        second()
        first()

        assert feed.get_current_price() == 100
        assert feed.get_last_update_time() == 1010


class TestFetcherPriceFeedFailures:
    """Test failure handling."""

    @pytest.mark.asyncio
    @patch("spreadfeed.src.FetcherPriceFeed.time.time")
    async def test_none_price_raises_and_keeps_state(self, mock_time) -> None:
        """A missing price should raise and leave the last good price."""
        mock_time.return_value = 1000
        feed = FetcherPriceFeed(StubFetcher([Decimal("1.5"), None]), "eth", "usd", precision=1)
        await feed.update()

        with pytest.raises(PriceFeedUpdateError, match="no price returned"):
            await feed.update()

        assert feed.get_current_price() == 15
        assert feed.get_last_update_time() == 1000

    @pytest.mark.asyncio
    async def test_fetcher_error_wrapped(self) -> None:
        """FetcherError should be raised as PriceFeedUpdateError."""
        feed = FetcherPriceFeed(StubFetcher([FetcherError("down")]), "eth", "usd")

        with pytest.raises(PriceFeedUpdateError, match="down") as exc_info:
            await feed.update()

        assert isinstance(exc_info.value.__cause__, FetcherError)
        assert feed.get_current_price() is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """A fetch exceeding the timeout should fail the update."""
        feed = FetcherPriceFeed(SlowFetcher(), "eth", "usd", fetch_timeout=0.01)

        with pytest.raises(PriceFeedUpdateError, match="timed out"):
            await feed.update()
