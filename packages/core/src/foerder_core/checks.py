"""Reusable field checks for rule tables.

Each factory returns a callable ``(value, ctx) -> Finding | None`` that is
run on a field only once it holds a value. Date windows are always computed
from ``ctx.today`` so validation is deterministic for a given day.
"""

import re
from datetime import date
from typing import Any, Callable, Optional

from foerder_core import money
from foerder_core.calendar_window import parse_iso_date, shift_months, shift_years
from foerder_core.exceptions import AmountFormatError
from foerder_core.models.application import ChangeEntry, IncomeDeclaration, Periodicity
from foerder_core.models.results import ErrorCategory, ErrorCode
from foerder_core.periodicity import change_periodicity, policy_for
from foerder_core.rules import Check, EvaluationContext, Finding

POSTAL_CODE = re.compile(r"^\d{5}$")
EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def amount() -> Check:
    """Report unparsable amounts, only when strict amounts are configured."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        if not ctx.config.strict_amounts:
            return None
        try:
            money.parse_strict(value)
        except AmountFormatError:
            return Finding(ErrorCode.AMOUNT_FORMAT)
        return None

    return check


def postal_code(regional: bool = False) -> Check:
    """Exactly five digits; optionally inside the configured region."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        text = str(value).strip()
        if not POSTAL_CODE.match(text):
            return Finding(ErrorCode.POSTAL_CODE_FORMAT)
        if regional and text[:2] not in ctx.config.object_postal_prefixes:
            return Finding(ErrorCode.POSTAL_CODE_REGION, params={"region": ctx.config.object_region})
        return None

    return check


def email() -> Check:
    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        if not EMAIL.match(str(value).strip()):
            return Finding(ErrorCode.EMAIL_FORMAT)
        return None

    return check


Bounds = Callable[[EvaluationContext], tuple[date, date]]


def date_window(code: ErrorCode, bounds: Bounds) -> Check:
    """The value must be an ISO date within ``bounds(ctx)``, both ends inclusive."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        parsed = parse_iso_date(value)
        if parsed is None:
            return Finding(ErrorCode.DATE_FORMAT)
        earliest, latest = bounds(ctx)
        if not earliest <= parsed <= latest:
            return Finding(code, params={"earliest": earliest.isoformat(), "latest": latest.isoformat()})
        return None

    return check


def birth_date() -> Check:
    """Applicants must be of age and not implausibly old."""

    def bounds(ctx: EvaluationContext) -> tuple[date, date]:
        return (
            shift_years(ctx.today, -ctx.config.max_applicant_age),
            shift_years(ctx.today, -ctx.config.min_applicant_age),
        )

    inner = date_window(ErrorCode.BIRTH_DATE_RANGE, bounds)

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        finding = inner(value, ctx)
        if finding is not None and finding.code == ErrorCode.BIRTH_DATE_RANGE:
            params = {
                **finding.params,
                "min_age": ctx.config.min_applicant_age,
                "max_age": ctx.config.max_applicant_age,
            }
            return Finding(finding.code, params=params)
        return finding

    return check


def change_date(months: int = 12) -> Check:
    """Announced changes lie at most ``months`` in the past or future."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        finding = date_window(
            ErrorCode.CHANGE_DATE_RANGE,
            lambda c: (shift_months(c.today, -months), shift_months(c.today, months)),
        )(value, ctx)
        if finding is not None and finding.code == ErrorCode.CHANGE_DATE_RANGE:
            return Finding(finding.code, params={**finding.params, "months": months})
        return finding

    return check


def employment_start() -> Check:
    return date_window(
        ErrorCode.EMPLOYMENT_START_RANGE,
        lambda c: (shift_years(c.today, -110), c.today),
    )


def contract_end() -> Check:
    return date_window(
        ErrorCode.CONTRACT_END_RANGE,
        lambda c: (shift_years(c.today, -1), shift_years(c.today, 2)),
    )


def future_date() -> Check:
    """An end date (Laufzeit bis) must lie after today."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        parsed = parse_iso_date(value)
        if parsed is None:
            return Finding(ErrorCode.DATE_FORMAT)
        if parsed <= ctx.today:
            return Finding(ErrorCode.DATE_NOT_FUTURE)
        return None

    return check


def periodicity_allowed(category_path: str = "category") -> Check:
    """The chosen periodicity must be allowed for the entry's category."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        policy = policy_for(ctx.get(category_path))
        if not policy.is_allowed(value):
            return Finding(ErrorCode.PERIODICITY_NOT_ALLOWED, params={"periodicity": str(getattr(value, "value", value))})
        return None

    return check


def change_periodicity_allowed(type_path: str = "type") -> Check:
    """A change's monthly/yearly answer must be allowed for its type."""

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        policy = policy_for(ctx.get(type_path))
        requested = Periodicity.MONTHLY if value else Periodicity.YEARLY
        if not policy.is_allowed(requested):
            return Finding(ErrorCode.PERIODICITY_NOT_ALLOWED, params={"periodicity": requested.value})
        return None

    return check


# =============================================================================
# INCREASE / DECREASE CONSISTENCY
# =============================================================================

def current_value(declaration: IncomeDeclaration, change_type: Any) -> tuple[int, Optional[Periodicity]]:
    """The currently declared amount for a change type, with its periodicity."""
    key = getattr(change_type, "value", change_type)
    policy = policy_for(key)
    if key == "werbungskosten":
        return money.parse(declaration.costs.werbungskosten), policy.default
    if key == "kinderbetreuungskosten":
        return money.parse(declaration.costs.kinderbetreuungskosten), policy.default
    if key == "unterhaltszahlungen":
        payments = declaration.costs.maintenance_payments
        return money.total(money.parse(p.amount) for p in payments), policy.default
    for entry in declaration.additional_incomes:
        if entry.category.value == key:
            return money.parse(entry.amount), entry.periodicity or policy.default
    return 0, policy.default


def increase_consistent(declaration_path: str = "^^") -> Check:
    """The increase/decrease answer must agree with old and new amounts.

    Only checked when the direction is a boolean and a new amount is
    present, and only when both amounts are for the same periodicity. An
    unknown periodicity or a daily original amount skips the check.
    """

    def check(value: Any, ctx: EvaluationContext) -> Optional[Finding]:
        change: ChangeEntry = ctx.node
        if not isinstance(change.increase, bool) or money.is_blank(change.new_amount):
            return None

        declaration: IncomeDeclaration = ctx.get(declaration_path)
        current, base = current_value(declaration, change.type)
        requested = change_periodicity(change)
        if base is None or requested is None or base == Periodicity.DAILY or base != requested:
            return None

        new = money.parse(change.new_amount)
        label = policy_for(change.type).label
        params = {"type_label": label, "new": money.format(new), "current": money.format(current)}
        if change.increase and new <= current:
            return Finding(ErrorCode.INCREASE_NOT_HIGHER, ErrorCategory.CROSS_FIELD, params)
        if not change.increase and new >= current:
            return Finding(ErrorCode.DECREASE_NOT_LOWER, ErrorCategory.CROSS_FIELD, params)
        return None

    return check


__all__ = [
    "POSTAL_CODE",
    "EMAIL",
    "amount",
    "postal_code",
    "email",
    "date_window",
    "birth_date",
    "change_date",
    "employment_start",
    "contract_end",
    "future_date",
    "periodicity_allowed",
    "change_periodicity_allowed",
    "current_value",
    "increase_consistent",
]
