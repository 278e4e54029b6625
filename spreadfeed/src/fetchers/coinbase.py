"""Coinbase Exchange fetcher.

Endpoint: https://api.exchange.coinbase.com/products/{BASE}-{QUOTE}/ticker
Rate Limit: High (no key required)
"""

import logging
from decimal import Decimal

from .base import BaseFetcher, FetcherError, parse_decimal, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class CoinbaseFetcher(BaseFetcher):
    """Fetcher for the Coinbase Exchange public ticker.

    Reports the last trade price. No API key required.
    """

    name = "coinbase"
    BASE_URL = "https://api.exchange.coinbase.com"

    async def fetch(self, base: str, quote: str) -> Decimal | None:
        """Fetch the last trade price from Coinbase Exchange.

        :param base: Base currency (e.g., "btc", "usdc").
        :param quote: Quote currency (e.g., "usd").
        :returns: Current price or None on failure.
        """
        product = f"{base.upper()}-{quote.upper()}"
        url = f"{self.BASE_URL}/products/{product}/ticker"

        try:
            data = self._json(await self._get(url))
            if "price" not in data:
                logger.warning(f"[coinbase] No price in ticker for {product}: {data}")
                return None
            return parse_decimal(data["price"])

        except FetcherError as e:
            logger.warning(f"[coinbase] Failed to fetch {product}: {e}")
            return None
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"[coinbase] Unparseable ticker for {product}: {e}")
            return None
