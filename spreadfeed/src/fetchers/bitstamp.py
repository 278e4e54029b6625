"""Bitstamp fetcher.

Endpoint: https://www.bitstamp.net/api/v2/ticker/{base}{quote}/
Rate Limit: High (no key required)
"""

import logging
from decimal import Decimal

from .base import BaseFetcher, FetcherError, parse_decimal, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class BitstampFetcher(BaseFetcher):
    """Fetcher for the Bitstamp public ticker."""

    name = "bitstamp"
    BASE_URL = "https://www.bitstamp.net/api/v2"

    async def fetch(self, base: str, quote: str) -> Decimal | None:
        """Fetch the last trade price from Bitstamp.

        :param base: Base currency (e.g., "btc", "eth").
        :param quote: Quote currency (e.g., "usd").
        :returns: Current price or None on failure.
        """
        market = f"{base.lower()}{quote.lower()}"
        url = f"{self.BASE_URL}/ticker/{market}/"

        try:
            data = self._json(await self._get(url))
            if "last" not in data:
                logger.warning(f"[bitstamp] No 'last' price for {market}: {data}")
                return None
            return parse_decimal(data["last"])

        except FetcherError as e:
            logger.warning(f"[bitstamp] Failed to fetch {market}: {e}")
            return None
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"[bitstamp] Unparseable ticker for {market}: {e}")
            return None
