"""Tests for month windows and calendar arithmetic."""

from datetime import date

import pytest

from foerder_core.calendar_window import (
    MonthKey,
    default_anchor,
    last_n_months,
    parse_iso_date,
    shift_months,
    shift_years,
)


class TestLastNMonths:
    """Test suite for last_n_months."""

    def test_january_anchor_rolls_into_previous_year(self):
        """A January anchor yields eleven months of the year before."""
        window = last_n_months(2024, 0, 12)

        assert [m.key for m in window] == [
            "2024-0", "2023-11", "2023-10", "2023-9", "2023-8", "2023-7",
            "2023-6", "2023-5", "2023-4", "2023-3", "2023-2", "2023-1",
        ]
        assert sum(1 for m in window if m.year == 2023) == 11

    def test_anchor_included_most_recent_first(self):
        """The anchor month comes first."""
        window = last_n_months(2024, 6, 3)

        assert window[0] == MonthKey(2024, 6)
        assert window[-1] == MonthKey(2024, 4)

    def test_restartable(self):
        """The same inputs always give the same window."""
        assert last_n_months(2023, 5) == last_n_months(2023, 5)

    def test_invalid_month(self):
        """Months outside 0-11 are rejected."""
        with pytest.raises(ValueError):
            last_n_months(2024, 12)


class TestMonthKey:
    """Test suite for MonthKey."""

    def test_label(self):
        """Labels use German month names."""
        assert MonthKey(2024, 2).label == "März 2024"

    def test_previous_wraps(self):
        """January's previous month is December of the prior year."""
        assert MonthKey(2024, 0).previous() == MonthKey(2023, 11)


class TestDefaultAnchor:
    """Test suite for the default anchor month."""

    def test_last_fully_elapsed_month(self):
        """Mid May anchors at April."""
        assert default_anchor(date(2024, 5, 15)) == MonthKey(2024, 3)

    def test_january_anchors_at_december(self):
        """In January the anchor is December of the prior year."""
        assert default_anchor(date(2024, 1, 10)) == MonthKey(2023, 11)


class TestDateHelpers:
    """Test suite for date shifting and parsing."""

    def test_shift_months_clamps_day(self):
        """Shifting to a shorter month clamps to its last day."""
        assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert shift_months(date(2024, 1, 15), 12) == date(2025, 1, 15)

    def test_shift_years_leap_day(self):
        """Leap days move to February 28th."""
        assert shift_years(date(2024, 2, 29), 1) == date(2025, 2, 28)

    def test_parse_iso_date(self):
        """Only valid ISO dates parse."""
        assert parse_iso_date("2024-05-15") == date(2024, 5, 15)
        assert parse_iso_date("2024-13-01") is None
        assert parse_iso_date("15.05.2024") is None
        assert parse_iso_date("") is None
        assert parse_iso_date(None) is None
