"""FixedPointPrice: Exact decimal prices and their on-chain integer form.

Prices are held as :class:`decimal.Decimal` and converted to chain units by
rounding half-up to 8 fractional digits and scaling by 10^8.

.. code-block:: python

    >>> price = FixedPointPrice.parse("12.345678905")
    >>> price.to_chain_units()
    1234567891
    >>> FixedPointPrice.from_chain_units(1234567891)
    FixedPointPrice('12.34567891')
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

from .errors import InvalidPriceFormat, PriceOverflow

# Number of fractional digits carried by chain units.
NUM_DECIMALS = 8

USD_TO_PRICE_SCALAR = 10**NUM_DECIMALS

MAX_CHAIN_UNITS = 2**64 - 1

_QUANTUM = Decimal(1).scaleb(-NUM_DECIMALS)

# Wide enough that sums and products of realistic prices never round.
_CONTEXT = Context(prec=100, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | int | float) -> Decimal:
    """Convert a scalar to Decimal without picking up binary float noise.

    Floats go through their shortest repr, so ``0.1`` becomes ``Decimal("0.1")``.

    :param value: Decimal, int or float.
    :returns: Equivalent Decimal.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def decimal_ratio(
    numerator: Decimal | int | float, denominator: Decimal | int | float
) -> Decimal:
    """Divide two scalars in the price context (100 significant digits).

    :raises decimal.DivisionByZero: If denominator is zero.
    """
    return _CONTEXT.divide(to_decimal(numerator), to_decimal(denominator))


class FixedPointPrice:
    """Immutable decimal price with conversion to/from chain units.

    :ivar value: Underlying decimal value.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Decimal) -> None:
        """Initialize from a Decimal.

        :param value: Finite decimal value.
        """
        self._value = value

    @property
    def value(self) -> Decimal:
        """Underlying decimal value."""
        return self._value

    @classmethod
    def parse(cls, text: str) -> FixedPointPrice:
        """Parse a decimal literal, rounding half-up to 8 fractional digits.

        Scientific notation (``"1.5e-3"``) is accepted.

        :param text: Decimal literal.
        :returns: Parsed price.
        :raises InvalidPriceFormat: If text is not a finite number.
        :raises PriceOverflow: If the number is too large to represent.
        """
        try:
            value = Decimal(str(text).strip())
        except InvalidOperation as e:
            raise InvalidPriceFormat(f"Invalid price: {text!r}") from e

        if not value.is_finite():
            raise InvalidPriceFormat(f"Price must be finite: {text!r}")

        return cls(value).rounded()

    @classmethod
    def from_chain_units(cls, units: int) -> FixedPointPrice:
        """Rebuild a price from its chain representation.

        :param units: Price scaled by 10^8.
        :returns: Price with exactly 8 fractional digits.
        """
        return cls(Decimal(units).scaleb(-NUM_DECIMALS, context=_CONTEXT))

    @classmethod
    def zero(cls) -> FixedPointPrice:
        """Additive identity."""
        return cls(Decimal(0))

    def to_chain_units(self) -> int:
        """Round half-up to 8 fractional digits and scale by 10^8.

        :returns: Unsigned 64-bit chain units.
        :raises PriceOverflow: If the result is negative or exceeds 2^64-1.
        """
        rounded = self.rounded()._value
        units = int(rounded.scaleb(NUM_DECIMALS, context=_CONTEXT))
        if units < 0:
            raise PriceOverflow(f"Price {self} is negative")
        if units > MAX_CHAIN_UNITS:
            raise PriceOverflow(f"Price {self} exceeds 64-bit chain units")
        return units

    def rounded(self) -> FixedPointPrice:
        """Return this price rounded half-up to 8 fractional digits.

        :raises PriceOverflow: If the value has too many integer digits to quantize.
        """
        try:
            return FixedPointPrice(self._value.quantize(_QUANTUM, context=_CONTEXT))
        except InvalidOperation as e:
            raise PriceOverflow(f"Price {self._value:E} cannot be represented") from e

    def add(self, other: FixedPointPrice) -> FixedPointPrice:
        """Return the sum of two prices."""
        return FixedPointPrice(_CONTEXT.add(self._value, other._value))

    def scale(self, factor: Decimal | int | float) -> FixedPointPrice:
        """Return this price multiplied by a non-negative scalar.

        :param factor: Weight or normalization factor.
        """
        return FixedPointPrice(_CONTEXT.multiply(self._value, to_decimal(factor)))

    def __add__(self, other: object) -> FixedPointPrice:
        if not isinstance(other, FixedPointPrice):
            return NotImplemented
        return self.add(other)

    def __mul__(self, factor: object) -> FixedPointPrice:
        if not isinstance(factor, (Decimal, int, float)):
            return NotImplemented
        return self.scale(factor)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedPointPrice):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return f"{self._value:f}"

    def __repr__(self) -> str:
        return f"FixedPointPrice('{self}')"
