"""Unit tests for FixedPoint arithmetic."""

from decimal import Decimal

import pytest

from spreadfeed.src import FixedPoint
from spreadfeed.src.PriceFeed import NoPriceAvailableError, PriceDivisionByZeroError

ONE = 10**18


class TestConversion:
    """Test conversion between decimals and fixed point."""

    def test_to_fixed_from_string(self) -> None:
        """Decimal strings should convert exactly."""
        assert FixedPoint.to_fixed("1.65") == 1_650_000_000_000_000_000
        assert FixedPoint.to_fixed("0.13", 8) == 13_000_000

    def test_to_fixed_from_int_and_decimal(self) -> None:
        """Integers and Decimals should be accepted."""
        assert FixedPoint.to_fixed(5) == 5 * ONE
        assert FixedPoint.to_fixed(Decimal("2.5"), 2) == 250

    def test_to_fixed_truncates_extra_digits(self) -> None:
        """Digits beyond the precision should be truncated toward zero."""
        assert FixedPoint.to_fixed("1.239", 2) == 123
        assert FixedPoint.to_fixed("-1.239", 2) == -123

    def test_to_fixed_exponent_notation(self) -> None:
        """Exponent notation should be handled."""
        assert FixedPoint.to_fixed("1E+2", 2) == 10000
        assert FixedPoint.to_fixed("5e-3", 4) == 50

    def test_to_fixed_rejects_float(self) -> None:
        """Floats should be rejected."""
        with pytest.raises(TypeError):
            FixedPoint.to_fixed(1.5)

    def test_to_fixed_rejects_garbage(self) -> None:
        """Non-numeric strings and NaN should be rejected."""
        with pytest.raises(ValueError):
            FixedPoint.to_fixed("abc")
        with pytest.raises(ValueError):
            FixedPoint.to_fixed("NaN")

    def test_from_fixed(self) -> None:
        """from_fixed should return the exact decimal."""
        assert FixedPoint.from_fixed(130_000_000_000_000_000) == Decimal("0.13")
        assert FixedPoint.from_fixed(-250, 2) == Decimal("-2.5")
        assert FixedPoint.from_fixed(0, 8) == Decimal("0")

    def test_from_fixed_keeps_all_digits(self) -> None:
        """Large values should not be rounded by the decimal context."""
        value = 123456789012345678901234567890123456789
        assert FixedPoint.to_fixed(FixedPoint.from_fixed(value)) == value

    def test_rescale(self) -> None:
        """rescale should move between precisions."""
        assert FixedPoint.rescale(150_000_000, 8, 18) == 15 * 10**17
        assert FixedPoint.rescale(15 * 10**17, 18, 8) == 150_000_000
        assert FixedPoint.rescale(19, 1, 0) == 1

    def test_negative_precision_rejected(self) -> None:
        """A negative precision is invalid."""
        with pytest.raises(ValueError):
            FixedPoint.scale(-1)


class TestArithmetic:
    """Test arithmetic operations."""

    def test_add_sub(self) -> None:
        """add and sub are plain integer operations."""
        assert FixedPoint.add(ONE, 3 * ONE) == 4 * ONE
        assert FixedPoint.sub(ONE, 3 * ONE) == -2 * ONE

    def test_mul(self) -> None:
        """mul should drop the extra scale factor."""
        assert FixedPoint.mul(2 * ONE, FixedPoint.to_fixed("1.5")) == 3 * ONE
        assert FixedPoint.mul(150, 150, 2) == 225

    def test_div(self) -> None:
        """div should compute the scaled quotient."""
        spread = FixedPoint.to_fixed("0.65")
        assert FixedPoint.div(spread, 5 * ONE) == FixedPoint.to_fixed("0.13")

    def test_div_truncates_toward_zero(self) -> None:
        """Division should truncate, not floor."""
        assert FixedPoint.div(100, 300, 2) == 33
        assert FixedPoint.div(-100, 300, 2) == -33

    def test_div_by_zero(self) -> None:
        """Division by zero should raise PriceDivisionByZeroError."""
        with pytest.raises(PriceDivisionByZeroError):
            FixedPoint.div(ONE, 0)

    def test_div_by_zero_is_zero_division_error(self) -> None:
        """PriceDivisionByZeroError should also be a ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            FixedPoint.div(ONE, 0)

    def test_min_max(self) -> None:
        """fp_min and fp_max should pick the right operand."""
        assert FixedPoint.fp_min(1, 2) == 1
        assert FixedPoint.fp_max(1, 2) == 2


class TestClamp:
    """Test clamping."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (-1, 0),
            (0, 0),
            (ONE, ONE),
            (2 * ONE, 2 * ONE),
            (2 * ONE + 1, 2 * ONE),
        ],
    )
    def test_clamp_bounds(self, value: int, expected: int) -> None:
        """clamp should bound values to [lower, upper]."""
        assert FixedPoint.clamp(value, 0, 2 * ONE) == expected

    def test_clamp_monotonic(self) -> None:
        """clamp should preserve order of its inputs."""
        values = [-3 * ONE, -1, 0, 1, ONE, 2 * ONE - 1, 2 * ONE, 5 * ONE]
        clamped = [FixedPoint.clamp(v, 0, 2 * ONE) for v in values]
        assert clamped == sorted(clamped)
        assert all(0 <= c <= 2 * ONE for c in clamped)

    def test_clamp_invalid_bounds(self) -> None:
        """lower > upper is invalid."""
        with pytest.raises(ValueError):
            FixedPoint.clamp(1, 2, 1)


class TestMedianAndMean:
    """Test median and mean."""

    def test_median_odd(self) -> None:
        """Odd-length median should be the middle value."""
        assert FixedPoint.median([9, 1, 5]) == 5

    def test_median_even(self) -> None:
        """Even-length median should be the mean of the two middle values."""
        assert FixedPoint.median([1, 9]) == 5
        assert FixedPoint.median([4, 1, 3, 2]) == 2

    def test_median_even_truncates(self) -> None:
        """Even-length median truncates toward zero."""
        assert FixedPoint.median([1, 2]) == 1
        assert FixedPoint.median([-1, -2]) == -1

    def test_mean(self) -> None:
        """Mean should be sum / count."""
        values = [FixedPoint.to_fixed(v) for v in ("1.1", "2", "2.3")]
        assert FixedPoint.mean(values) == FixedPoint.to_fixed("1.8")

    def test_mean_truncates(self) -> None:
        """Mean truncates toward zero."""
        assert FixedPoint.mean([1, 1, 2]) == 1

    def test_empty_inputs(self) -> None:
        """Empty inputs should raise NoPriceAvailableError."""
        with pytest.raises(NoPriceAvailableError):
            FixedPoint.median([])
        with pytest.raises(NoPriceAvailableError):
            FixedPoint.mean([])
