"""German-locale currency amounts as integer cents.

Users type amounts the way they are printed in Germany: ``1.234,56 €``.
Everything in the engine works on integer cents so sums never drift.
Parsing is forgiving by default (garbage counts as zero, which is what the
wizard has always done); ``parse_strict`` is available for callers that
need to tell an absent amount from a malformed one.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from foerder_core.exceptions import AmountFormatError

AmountInput = Union[str, int, float, Decimal, None]

_STRIP = re.compile(r"[€\s]")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
_CENT = Decimal("0.01")


def _normalise(text: str) -> str:
    cleaned = _STRIP.sub("", text)
    cleaned = cleaned.replace(".", "")
    return cleaned.replace(",", ".")


def _to_cents(value: Decimal) -> int:
    return int((value.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def parse(value: AmountInput) -> int:
    """Parse a German-formatted amount into cents, failing soft to 0.

    Numbers are taken as euros. Text has currency glyphs and whitespace
    removed, every ``.`` dropped as a thousands separator and the decimal
    comma turned into a point.

    Example:
        >>> parse("1.234,56 €")
        123456
        >>> parse("abc")
        0
    """
    try:
        cents = parse_strict(value)
    except AmountFormatError:
        return 0
    return cents or 0


def parse_strict(value: AmountInput) -> Optional[int]:
    """Parse an amount, distinguishing absent from malformed input.

    Returns:
        Cents, or None when the input is empty.

    Raises:
        AmountFormatError: If the input is present but not a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise AmountFormatError("Boolean is not an amount", value=str(value))
    if isinstance(value, (int, float, Decimal)):
        try:
            return _to_cents(Decimal(str(value)))
        except InvalidOperation as e:
            raise AmountFormatError(f"Cannot parse amount: {value!r}", value=str(value)) from e

    cleaned = _normalise(str(value))
    if not cleaned:
        return None
    if not _NUMBER.match(cleaned):
        raise AmountFormatError(f"Cannot parse amount: {value!r}", value=str(value))
    return _to_cents(Decimal(cleaned))


def is_blank(value: AmountInput) -> bool:
    """True when the user has not entered anything."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def format(cents: int) -> str:
    """Render cents as ``1.234,56 €``."""
    sign = "-" if cents < 0 else ""
    euros, rest = divmod(abs(int(cents)), 100)
    grouped = f"{euros:,}".replace(",", ".")
    return f"{sign}{grouped},{rest:02d} €"


def add(a: int, b: int) -> int:
    return a + b


def subtract(a: int, b: int) -> int:
    return a - b


def total(values: Iterable[int]) -> int:
    """Sum cent values."""
    return sum(values, 0)


def divide_evenly(cents: int, parts: int) -> int:
    """Integer division of an amount into equal parts, never via float."""
    if parts <= 0:
        raise ValueError("parts must be positive")
    return cents // parts


def split_evenly(cents: int, parts: int) -> list[int]:
    """Split an amount into parts that differ by at most one cent.

    The parts always sum to the original amount.

    Example:
        >>> split_evenly(1000, 3)
        [334, 333, 333]
    """
    base = divide_evenly(cents, parts)
    remainder = cents - base * parts
    return [base + 1 if i < remainder else base for i in range(parts)]


def yearly_to_monthly(cents: int) -> int:
    """Monthly equivalent of a yearly figure."""
    return divide_evenly(cents, 12)


__all__ = [
    "AmountInput",
    "parse",
    "parse_strict",
    "is_blank",
    "format",
    "add",
    "subtract",
    "total",
    "divide_evenly",
    "split_evenly",
    "yearly_to_monthly",
]
