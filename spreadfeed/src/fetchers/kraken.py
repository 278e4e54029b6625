"""Kraken fetcher.

Endpoint: https://api.kraken.com/0/public/Ticker?pair={BASE}{QUOTE}
Rate Limit: High (no key required)
"""

import logging
from decimal import Decimal

from .base import BaseFetcher, FetcherError, parse_decimal, register_fetcher

logger = logging.getLogger(__name__)


@register_fetcher
class KrakenFetcher(BaseFetcher):
    """Fetcher for the Kraken public ticker."""

    name = "kraken"
    BASE_URL = "https://api.kraken.com/0/public"

    # Kraken uses XBT instead of BTC
    SYMBOL_MAP = {
        "btc": "XBT",
    }

    def kraken_pair(self, base: str, quote: str) -> str:
        """Return Kraken's symbol for a base/quote pair."""
        kraken_base = self.SYMBOL_MAP.get(base.lower(), base.upper())
        kraken_quote = self.SYMBOL_MAP.get(quote.lower(), quote.upper())
        return f"{kraken_base}{kraken_quote}"

    async def fetch(self, base: str, quote: str) -> Decimal | None:
        """Fetch the last trade price from Kraken.

        :param base: Base currency (e.g., "btc", "eth").
        :param quote: Quote currency (e.g., "usd").
        :returns: Current price or None on failure.
        """
        pair = self.kraken_pair(base, quote)

        try:
            response = await self._get(f"{self.BASE_URL}/Ticker", params={"pair": pair})
            data = self._json(response)

            if data.get("error"):
                logger.warning(f"[kraken] API error for {pair}: {data['error']}")
                return None

            result = data.get("result") or {}
            if not result:
                logger.warning(f"[kraken] No result for {pair}")
                return None

            # Result keys are Kraken's canonical pair names (e.g. XXBTZUSD)
            pair_data = next(iter(result.values()))

            # 'c' is the last trade closed array: [price, lot volume]
            return parse_decimal(pair_data["c"][0])

        except FetcherError as e:
            logger.warning(f"[kraken] Failed to fetch {pair}: {e}")
            return None
        except (KeyError, ValueError, TypeError, IndexError) as e:
            logger.warning(f"[kraken] Unparseable ticker for {pair}: {e}")
            return None
