"""FixedPoint: Integer fixed-point arithmetic for prices.

A fixed-point value is a plain ``int`` holding ``real_value * 10 ** precision``.
All operations stay in integer arithmetic so results are identical on every
platform. Divisions truncate toward zero.

.. code-block:: python

    >>> one = scale(18)
    >>> div(to_fixed("0.65", 18), to_fixed("5", 18), 18) == to_fixed("0.13", 18)
    True
    >>> clamp(-5, 0, 2 * one)
    0
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .PriceFeed import NoPriceAvailableError, PriceDivisionByZeroError

DEFAULT_PRECISION = 18


def scale(precision: int) -> int:
    """Return ``10 ** precision``, the fixed-point representation of 1."""
    if precision < 0:
        raise ValueError("precision must be non-negative")
    return 10**precision


def _truncating_div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise PriceDivisionByZeroError("division by zero")
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def add(a: int, b: int) -> int:
    return a + b


def sub(a: int, b: int) -> int:
    return a - b


def mul(a: int, b: int, precision: int = DEFAULT_PRECISION) -> int:
    """Multiply two fixed-point values, dropping the extra scale factor."""
    return _truncating_div(a * b, scale(precision))


def div(a: int, b: int, precision: int = DEFAULT_PRECISION) -> int:
    """Divide two fixed-point values.

    :param a: Numerator.
    :param b: Denominator.
    :param precision: Shared precision of both operands.
    :returns: ``a * 10**precision / b`` truncated toward zero.
    :raises PriceDivisionByZeroError: If ``b`` is zero.
    """
    return _truncating_div(a * scale(precision), b)


def fp_min(a: int, b: int) -> int:
    return a if a <= b else b


def fp_max(a: int, b: int) -> int:
    return a if a >= b else b


def clamp(value: int, lower: int, upper: int) -> int:
    """Bound ``value`` to ``[lower, upper]``."""
    if lower > upper:
        raise ValueError("lower bound must not exceed upper bound")
    return fp_min(fp_max(value, lower), upper)


def mean(values: Iterable[int]) -> int:
    """Arithmetic mean of fixed-point values.

    :raises NoPriceAvailableError: If ``values`` is empty.
    """
    values = list(values)
    if not values:
        raise NoPriceAvailableError("cannot average an empty set of prices")
    return _truncating_div(sum(values), len(values))


def median(values: Iterable[int]) -> int:
    """Median of fixed-point values.

    Even-length inputs return the mean of the two middle values.

    :raises NoPriceAvailableError: If ``values`` is empty.
    """
    ordered = sorted(values)
    if not ordered:
        raise NoPriceAvailableError("cannot take the median of an empty set of prices")
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[middle]
    return _truncating_div(ordered[middle - 1] + ordered[middle], 2)


def to_fixed(value: str | int | Decimal, precision: int = DEFAULT_PRECISION) -> int:
    """Convert a decimal number to its fixed-point representation.

    Digits beyond ``precision`` are truncated toward zero.

    :param value: Decimal string, integer or Decimal. Floats are rejected.
    :param precision: Number of decimal digits to keep.
    :returns: Scaled integer.
    :raises TypeError: If ``value`` is a float.
    :raises ValueError: If ``value`` is not a finite decimal number.

    .. code-block:: python

        >>> to_fixed("1.65", 2)
        165
    """
    if isinstance(value, float):
        raise TypeError("floats are not accepted; pass a decimal string instead")
    if isinstance(value, int):
        return value * scale(precision)
    try:
        decimal_value = Decimal(value)
    except ArithmeticError as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e
    if not decimal_value.is_finite():
        raise ValueError(f"Invalid decimal value: {value!r}")
    sign, digits, exponent = decimal_value.as_tuple()
    magnitude = int("".join(str(d) for d in digits) or "0")
    shift = exponent + precision
    if shift >= 0:
        magnitude *= 10**shift
    else:
        magnitude //= 10**-shift
    return -magnitude if sign else magnitude


def from_fixed(value: int, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Return the exact Decimal represented by a fixed-point value."""
    digits = tuple(int(d) for d in str(abs(value)))
    return Decimal((1 if value < 0 else 0, digits, -precision))


def rescale(value: int, from_precision: int, to_precision: int) -> int:
    """Change the precision of a fixed-point value, truncating toward zero."""
    if to_precision >= from_precision:
        return value * scale(to_precision - from_precision)
    return _truncating_div(value, scale(from_precision - to_precision))
