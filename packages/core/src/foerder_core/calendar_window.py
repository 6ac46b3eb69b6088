"""Rolling month windows and calendar arithmetic.

Monthly income is captured for the twelve months ending at an anchor month
the applicant picks (default: the last fully elapsed month). Months are
0-based throughout (January is 0) because that is how the stored table keys
have always been written: ``"2024-0"`` is January 2024.
"""

import calendar
from datetime import date
from typing import NamedTuple, Optional

GERMAN_MONTH_NAMES: tuple[str, ...] = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)


class MonthKey(NamedTuple):
    """A calendar month with a 0-based month index."""

    year: int
    month: int

    @property
    def key(self) -> str:
        """Key used in the monthly income table."""
        return f"{self.year}-{self.month}"

    @property
    def label(self) -> str:
        return f"{GERMAN_MONTH_NAMES[self.month]} {self.year}"

    def previous(self) -> "MonthKey":
        if self.month == 0:
            return MonthKey(self.year - 1, 11)
        return MonthKey(self.year, self.month - 1)


def last_n_months(anchor_year: int, anchor_month: int, n: int = 12) -> tuple[MonthKey, ...]:
    """Return the ``n`` months ending at the anchor, most recent first.

    The anchor itself is included. Walking below January wraps to December
    of the previous year.

    Example:
        >>> [m.key for m in last_n_months(2024, 0, 3)]
        ['2024-0', '2023-11', '2023-10']
    """
    if not 0 <= anchor_month <= 11:
        raise ValueError(f"anchor_month must be 0-11, got {anchor_month}")
    months = []
    current = MonthKey(anchor_year, anchor_month)
    for _ in range(n):
        months.append(current)
        current = current.previous()
    return tuple(months)


def default_anchor(today: date) -> MonthKey:
    """The last fully elapsed month relative to ``today``."""
    return MonthKey(today.year, today.month - 1).previous()


def shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the month length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month0 = divmod(index, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, min(day.day, last_day))


def shift_years(day: date, years: int) -> date:
    return shift_months(day, years * 12)


def parse_iso_date(value: object) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` text. Returns None for anything else."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


__all__ = [
    "GERMAN_MONTH_NAMES",
    "MonthKey",
    "last_n_months",
    "default_anchor",
    "shift_months",
    "shift_years",
    "parse_iso_date",
]
