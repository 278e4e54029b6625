"""Unit tests for exchange fetchers, using an httpx mock transport."""

from decimal import Decimal

import httpx
import pytest

from spreadfeed.src.fetchers import (
    BaseFetcher,
    BitstampFetcher,
    CoinbaseFetcher,
    FetcherConfigError,
    KrakenFetcher,
    get_available_fetchers,
    get_fetcher,
    parse_decimal,
)


@pytest.fixture
def transport_routes():
    """Install a shared client that answers from a {path: response} dict."""
    routes: dict[str, httpx.Response] = {}
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path in routes:
            return routes[request.url.path]
        return httpx.Response(404, text="not found")

    BaseFetcher.set_shared_client(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    yield routes, requests
    BaseFetcher.set_shared_client(None)


class TestRegistry:
    """Test the fetcher registry."""

    def test_available_fetchers(self) -> None:
        """All exchange fetchers should be registered."""
        assert get_available_fetchers() == ["bitstamp", "coinbase", "kraken"]

    def test_get_fetcher(self) -> None:
        """get_fetcher should build an instance with the given options."""
        fetcher = get_fetcher("kraken", api_key="k", timeout=3.0)
        assert isinstance(fetcher, KrakenFetcher)
        assert fetcher.has_api_key
        assert fetcher.timeout == 3.0

    def test_unknown_fetcher(self) -> None:
        """Unknown names should raise FetcherConfigError."""
        with pytest.raises(FetcherConfigError, match="Unknown fetcher"):
            get_fetcher("nope")


class TestParseDecimal:
    """Test price parsing."""

    def test_parses_strings(self) -> None:
        """Strings should parse exactly."""
        assert parse_decimal("1.000100") == Decimal("1.0001")

    @pytest.mark.parametrize("value", [1.5, True, "abc", "0", "-1", None, "Infinity"])
    def test_rejects_invalid(self, value) -> None:
        """Floats, non-numbers and non-positive values are rejected."""
        with pytest.raises(ValueError):
            parse_decimal(value)


class TestCoinbaseFetcher:
    """Test the Coinbase fetcher."""

    @pytest.mark.asyncio
    async def test_fetch(self, transport_routes) -> None:
        """Ticker price should be returned as a Decimal."""
        routes, requests = transport_routes
        routes["/products/USDC-USD/ticker"] = httpx.Response(200, json={"price": "1.0001"})

        price = await CoinbaseFetcher().fetch("usdc", "usd")

        assert price == Decimal("1.0001")
        assert requests[0].url.host == "api.exchange.coinbase.com"

    @pytest.mark.asyncio
    async def test_missing_price(self, transport_routes) -> None:
        """A ticker without a price should return None."""
        routes, _ = transport_routes
        routes["/products/USDC-USD/ticker"] = httpx.Response(200, json={"message": "x"})

        assert await CoinbaseFetcher().fetch("usdc", "usd") is None

    @pytest.mark.asyncio
    async def test_http_error(self, transport_routes) -> None:
        """HTTP errors should return None."""
        assert await CoinbaseFetcher().fetch("usdc", "usd") is None


class TestKrakenFetcher:
    """Test the Kraken fetcher."""

    @pytest.mark.asyncio
    async def test_fetch(self, transport_routes) -> None:
        """The last trade price should be read from the 'c' field."""
        routes, requests = transport_routes
        routes["/0/public/Ticker"] = httpx.Response(
            200,
            text='{"error": [], "result": {"XXBTZUSD": {"c": ["64000.10000", "0.01"]}}}',
        )

        price = await KrakenFetcher().fetch("btc", "usd")

        assert price == Decimal("64000.1")
        assert requests[0].url.params["pair"] == "XBTUSD"

    @pytest.mark.asyncio
    async def test_api_error(self, transport_routes) -> None:
        """Kraken API errors should return None."""
        routes, _ = transport_routes
        routes["/0/public/Ticker"] = httpx.Response(
            200, json={"error": ["EQuery:Unknown asset pair"], "result": {}}
        )

        assert await KrakenFetcher().fetch("foo", "usd") is None


class TestBitstampFetcher:
    """Test the Bitstamp fetcher."""

    @pytest.mark.asyncio
    async def test_fetch(self, transport_routes) -> None:
        """The 'last' field should be returned as a Decimal."""
        routes, _ = transport_routes
        routes["/api/v2/ticker/ethusd/"] = httpx.Response(200, json={"last": "3100.55"})

        assert await BitstampFetcher().fetch("ETH", "USD") == Decimal("3100.55")

    @pytest.mark.asyncio
    async def test_numeric_json_price(self, transport_routes) -> None:
        """JSON numbers should be parsed as Decimal, not float."""
        routes, _ = transport_routes
        routes["/api/v2/ticker/ethusd/"] = httpx.Response(
            200, text='{"last": 3100.1000000000001}'
        )

        assert await BitstampFetcher().fetch("eth", "usd") == Decimal("3100.1000000000001")
