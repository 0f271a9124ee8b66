"""Binance sources.

Binance US lists HNT against USD directly, so its last traded price is used
as-is. Binance International only lists HNT against USDT; its rolling average
price is taken at face value (USDT treated as USD).

Endpoints:
    - https://api.binance.us/api/v3/ticker/price?symbol=HNTUSD
    - https://api.binance.com/api/v3/avgPrice?symbol=HNTUSDT
Rate Limit: High (no key required for public endpoints)
"""

import logging

from ..FixedPointPrice import FixedPointPrice
from .base import PriceSource, register_source

logger = logging.getLogger(__name__)


class _BinanceSource(PriceSource):
    """Shared fetch logic for Binance endpoints returning ``{"price": "..."}``.

    :cvar BASE_URL: API root for the exchange.
    :cvar ENDPOINT: Ticker endpoint path.
    :cvar SYMBOL: Trading symbol to query.
    """

    BASE_URL = ""
    ENDPOINT = ""
    SYMBOL = ""

    async def fetch(self) -> FixedPointPrice:
        """Fetch the symbol price from Binance.

        :returns: Current price.
        """
        data = await self._get_json(
            f"{self.BASE_URL}/{self.ENDPOINT}", params={"symbol": self.SYMBOL}
        )
        price = self._parse_field(data, "price", require_string=True)
        logger.debug(f"[{self.name}] {self.SYMBOL} = {price}")
        return price


@register_source
class BinanceUSSource(_BinanceSource):
    """Last traded HNT/USD price on Binance US."""

    name = "binance-us"
    label = "Binance US"
    BASE_URL = "https://api.binance.us/api/v3"
    ENDPOINT = "ticker/price"
    SYMBOL = "HNTUSD"


@register_source
class BinanceIntlSource(_BinanceSource):
    """Average HNT/USDT price on Binance International."""

    name = "binance-int"
    label = "Binance International"
    BASE_URL = "https://api.binance.com/api/v3"
    ENDPOINT = "avgPrice"
    SYMBOL = "HNTUSDT"
