"""CoinGecko source.

Endpoint: https://api.coingecko.com/api/v3/coins/helium
Field: market_data.current_price.usd (JSON number)
Rate Limit: 30 calls/min (free)
"""

import logging

from ..FixedPointPrice import FixedPointPrice
from .base import PriceSource, register_source

logger = logging.getLogger(__name__)


@register_source
class CoinGeckoSource(PriceSource):
    """Source for the CoinGecko coin detail API.

    The price is a bare JSON number rather than a string, so it is decoded as
    Decimal to keep every digit CoinGecko sent.
    """

    name = "coingecko"
    label = "Coingecko"
    BASE_URL = "https://api.coingecko.com/api/v3"
    COIN_ID = "helium"

    async def fetch(self) -> FixedPointPrice:
        """Fetch the HNT/USD price from CoinGecko.

        :returns: Current price.
        """
        data = await self._get_json(f"{self.BASE_URL}/coins/{self.COIN_ID}")
        price = self._parse_field(data, "market_data", "current_price", "usd")
        logger.debug(f"[coingecko] {self.COIN_ID}/usd = {price}")
        return price
