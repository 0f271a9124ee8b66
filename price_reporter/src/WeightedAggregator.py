"""WeightedAggregator: Weighted average over price sources with exclusion.

Algorithm:
    1. Skip sources with weight 0 (no network call)
    2. Fetch every other source under the retry policy
    3. Exclude sources that still fail (weight and price both dropped)
    4. Fail with NoViableSources if no weight remains
    5. Normalize each quote by weight / total_weight, sum, and round
       half-up to 8 fractional digits

.. code-block:: python

    >>> aggregator = WeightedAggregator(RetryPolicy(fixed_delay=0))
    >>> result = await aggregator.aggregate([(source_a, 2.0), (source_b, 3.0)])
    >>> result.price, result.total_weight
    (FixedPointPrice('10.00000000'), 2.0)
    >>> result.excluded
    ['Bilaxy']
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Iterator

from .errors import ConfigurationError, NoViableSources
from .FixedPointPrice import FixedPointPrice, decimal_ratio, to_decimal
from .fetchers import PriceSource, get_source
from .RetryPolicy import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class Weights:
    """Per-source weights for the four named sources.

    :ivar binance_us: Weight given to the Binance US price.
    :ivar binance_int: Weight given to the Binance International price.
    :ivar bilaxy: Weight given to the Bilaxy price.
    :ivar coingecko: Weight given to the CoinGecko price.
    """

    binance_us: float = 0.0
    binance_int: float = 0.0
    bilaxy: float = 0.0
    coingecko: float = 0.0

    def __post_init__(self) -> None:
        for name, weight in self.items():
            validate_weight(name, weight)

    def items(self) -> Iterator[tuple[str, float]]:
        """Yield (source name, weight) in reporting order."""
        yield "binance-us", self.binance_us
        yield "binance-int", self.binance_int
        yield "bilaxy", self.bilaxy
        yield "coingecko", self.coingecko

    def __str__(self) -> str:
        return ", ".join(f"{name}={weight:g}" for name, weight in self.items())


def validate_weight(name: str, weight: float) -> None:
    """Reject negative or non-finite weights.

    :raises ConfigurationError: If the weight is unusable.
    """
    if not math.isfinite(weight) or weight < 0:
        raise ConfigurationError(
            f"Weight for {name} must be a non-negative number, got {weight}"
        )


@dataclass
class AggregationResult:
    """Result of weighted aggregation.

    :ivar price: Weighted average of the sources that responded, rounded to 8 digits.
    :ivar total_weight: Sum of weights of sources that were requested and succeeded.
    :ivar quotes: Quote obtained from each successful source.
    :ivar excluded: Sources with non-zero weight that failed.
    """

    price: FixedPointPrice
    total_weight: float
    quotes: dict[str, FixedPointPrice] = field(default_factory=dict)
    excluded: list[str] = field(default_factory=list)


class WeightedAggregator:
    """Combines weighted sources into one price.

    A source that fails after retries is excluded from both numerator and
    denominator, so the average stays meaningful among the sources that
    actually responded.

    :ivar retry_policy: Policy applied to every source fetch.
    """

    def __init__(self, retry_policy: RetryPolicy | None = None) -> None:
        """Initialize the aggregator.

        :param retry_policy: Retry policy for source fetches (default: 10 x 1s).
        """
        self.retry_policy = retry_policy or RetryPolicy()

    async def aggregate(
        self, weighted_sources: Iterable[tuple[PriceSource, float]]
    ) -> AggregationResult:
        """Fetch and average the given sources.

        :param weighted_sources: (source, weight) pairs.
        :returns: AggregationResult with the averaged price.
        :raises ConfigurationError: If a weight is negative or not finite.
        :raises NoViableSources: If the effective total weight is zero.
        """
        terms: list[tuple[float, FixedPointPrice]] = []
        quotes: dict[str, FixedPointPrice] = {}
        excluded: list[str] = []

        for source, weight in weighted_sources:
            validate_weight(str(source), weight)
            if weight == 0:
                terms.append((0.0, FixedPointPrice.zero()))
                continue

            try:
                price = await self.retry_policy.run(
                    source.fetch, description=f"[{source.name}] fetch"
                )
            except Exception as exc:
                logger.warning(
                    f"{source} is failing so removed from weighted average "
                    f"({exc})"
                )
                excluded.append(str(source))
                terms.append((0.0, FixedPointPrice.zero()))
                continue

            logger.info(f"{str(source):25} reports price of ${price}")
            quotes[str(source)] = price
            terms.append((weight, price))

        total = sum((to_decimal(weight) for weight, _ in terms), Decimal(0))
        if total == 0:
            raise NoViableSources(
                "Must have at least one price source with a non-zero weight "
                "that responds"
            )

        price = FixedPointPrice.zero()
        for weight, term in terms:
            price = price.add(term.scale(decimal_ratio(weight, total)))

        return AggregationResult(
            price=price.rounded(),
            total_weight=float(total),
            quotes=quotes,
            excluded=excluded,
        )

    async def aggregate_weights(
        self, weights: Weights, timeout: float | None = None
    ) -> AggregationResult:
        """Aggregate over the four named sources.

        :param weights: Per-source weights.
        :param timeout: Request timeout for each source.
        :returns: AggregationResult with the averaged price.
        """
        return await self.aggregate(
            (get_source(name, timeout=timeout), weight)
            for name, weight in weights.items()
        )
