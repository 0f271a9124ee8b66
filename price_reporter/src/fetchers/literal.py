"""Literal source and price name resolution."""

from ..FixedPointPrice import FixedPointPrice
from .base import SOURCE_ALIASES, SOURCE_REGISTRY, PriceSource, get_source


class LiteralSource(PriceSource):
    """A fixed, operator-supplied price. Never touches the network."""

    name = "literal"
    label = "Literal"

    def __init__(self, price: FixedPointPrice):
        super().__init__()
        self.price = price

    def __str__(self) -> str:
        return f"${self.price}"

    def __repr__(self) -> str:
        return f"LiteralSource({self})"

    async def fetch(self) -> FixedPointPrice:
        return self.price


def resolve_price(text: str, timeout: float | None = None) -> PriceSource:
    """Resolve a ``--price`` argument to a source.

    Known source names and aliases (case-sensitive) map to their fetcher;
    anything else is parsed as a decimal literal.

    :param text: Source name or decimal literal.
    :param timeout: Request timeout for network sources.
    :returns: Source to fetch the price from.
    :raises InvalidPriceFormat: If text is neither a source name nor a number.

    .. code-block:: python

        >>> resolve_price("binance").name
        'binance-us'
        >>> resolve_price("1.5e-1")
        LiteralSource($0.15000000)
    """
    if text in SOURCE_REGISTRY or text in SOURCE_ALIASES:
        return get_source(text, timeout=timeout)
    return LiteralSource(FixedPointPrice.parse(text))
