"""Bilaxy source.

Endpoint: https://newapi.bilaxy.com/v1/valuation?currency=HNT
Field: HNT.usd_value (JSON string)
"""

from ..FixedPointPrice import FixedPointPrice
from .base import PriceSource, register_source


@register_source
class BilaxySource(PriceSource):
    """Source for the Bilaxy valuation API."""

    name = "bilaxy"
    label = "Bilaxy"
    BASE_URL = "https://newapi.bilaxy.com/v1"
    CURRENCY = "HNT"

    async def fetch(self) -> FixedPointPrice:
        """Fetch the HNT/USD valuation from Bilaxy.

        :returns: Current price.
        """
        data = await self._get_json(
            f"{self.BASE_URL}/valuation", params={"currency": self.CURRENCY}
        )
        return self._parse_field(data, self.CURRENCY, "usd_value", require_string=True)
