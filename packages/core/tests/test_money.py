"""Tests for German currency parsing and formatting."""

from decimal import Decimal

import pytest

from foerder_core import money
from foerder_core.exceptions import AmountFormatError


class TestParse:
    """Test suite for the forgiving parser."""

    def test_german_format(self):
        """Thousands dots, decimal comma and the euro sign are understood."""
        assert money.parse("1.234,56 €") == 123456
        assert money.parse("1.000") == 100000
        assert money.parse("  12,5 ") == 1250

    def test_empty_is_zero(self):
        """Empty input parses as zero."""
        assert money.parse("") == 0
        assert money.parse(None) == 0
        assert money.parse("   ") == 0

    def test_garbage_is_zero(self):
        """Unparsable text fails soft."""
        assert money.parse("abc") == 0
        assert money.parse("12,3,4") == 0

    def test_numbers_are_euros(self):
        """Numeric input is taken as euros."""
        assert money.parse(12.5) == 1250
        assert money.parse(3) == 300
        assert money.parse(Decimal("0.015")) == 2

    def test_negative_amount(self):
        """A leading minus is kept."""
        assert money.parse("-5,00") == -500


class TestParseStrict:
    """Test suite for the strict parser."""

    def test_blank_is_none(self):
        """Absent input is None, not zero."""
        assert money.parse_strict("") is None
        assert money.parse_strict(None) is None

    def test_zero_is_zero(self):
        """An explicit zero is a value."""
        assert money.parse_strict("0") == 0

    def test_malformed_raises(self):
        """Present but malformed text raises AmountFormatError."""
        with pytest.raises(AmountFormatError) as exc_info:
            money.parse_strict("zwölf")

        assert exc_info.value.value == "zwölf"
        assert exc_info.value.recoverable is True

    def test_bool_is_not_an_amount(self):
        """Booleans are rejected even though they are ints."""
        with pytest.raises(AmountFormatError):
            money.parse_strict(True)


class TestFormat:
    """Test suite for formatting."""

    def test_grouping_and_decimals(self):
        """Cents render with thousands dots and a decimal comma."""
        assert money.format(123456) == "1.234,56 €"
        assert money.format(100000000) == "1.000.000,00 €"
        assert money.format(0) == "0,00 €"

    def test_negative(self):
        """Negative amounts get a leading minus."""
        assert money.format(-5) == "-0,05 €"

    def test_format_parse_idempotent(self):
        """Formatting a parsed well-formed amount is stable."""
        for text in ("1.234,56 €", "1234,5", "0,99", "45.000"):
            once = money.format(money.parse(text))
            assert money.format(money.parse(once)) == once


class TestArithmetic:
    """Test suite for integer cent arithmetic."""

    def test_add_subtract_total(self):
        """Sums stay in integer cents."""
        assert money.add(10, 5) == 15
        assert money.subtract(10, 15) == -5
        assert money.total([10, 20, 30]) == 60
        assert money.total([]) == 0

    def test_divide_evenly_floors(self):
        """Division is integer division."""
        assert money.divide_evenly(100, 3) == 33
        assert money.yearly_to_monthly(1200000) == 100000
        assert money.yearly_to_monthly(100) == 8

    def test_divide_by_zero_rejected(self):
        """Parts must be positive."""
        with pytest.raises(ValueError):
            money.divide_evenly(100, 0)

    def test_split_evenly_keeps_total(self):
        """Split parts differ by at most a cent and sum to the input."""
        parts = money.split_evenly(1000, 3)

        assert parts == [334, 333, 333]
        assert sum(parts) == 1000
