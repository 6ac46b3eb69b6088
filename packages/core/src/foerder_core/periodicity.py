"""Allowed payment periodicities per income and cost category.

Categories with exactly one allowed periodicity get it assigned the first
time they are seen without one. That default is applied once: an explicit
value, allowed or not, is never overwritten.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from foerder_core.exceptions import RuleDefinitionError
from foerder_core.models.application import (
    ChangeEntry,
    CostChangeType,
    IncomeCategory,
    IncomeEntry,
    Periodicity,
)

CategoryKey = Union[IncomeCategory, CostChangeType, str]


class PolicyKind(str, Enum):
    MONTHLY_ONLY = "monthly-only"
    YEARLY_ONLY = "yearly-only"
    BOTH = "both"


class PeriodicityPolicy(BaseModel):
    """Which periodicities a category accepts and what it shows as."""

    model_config = ConfigDict(frozen=True)

    category: str
    label: str
    short_label: str = Field(default="", description="Label used inside field messages")
    allowed: frozenset[Periodicity]
    year_required: frozenset[Periodicity] = Field(
        default=frozenset(), description="Periodicities that also need a reference year"
    )

    @property
    def kind(self) -> PolicyKind:
        if self.allowed == {Periodicity.MONTHLY}:
            return PolicyKind.MONTHLY_ONLY
        if self.allowed == {Periodicity.YEARLY}:
            return PolicyKind.YEARLY_ONLY
        return PolicyKind.BOTH

    @property
    def default(self) -> Optional[Periodicity]:
        """The single allowed periodicity, if there is only one."""
        if len(self.allowed) == 1:
            return next(iter(self.allowed))
        return None

    def is_allowed(self, periodicity: Optional[Periodicity]) -> bool:
        return periodicity in self.allowed

    def needs_year(self, periodicity: Optional[Periodicity]) -> bool:
        return periodicity in self.year_required


_M = frozenset({Periodicity.MONTHLY})
_Y = frozenset({Periodicity.YEARLY})


def _policy(category, label, short_label, allowed, year_required=frozenset()):
    key = category.value if isinstance(category, Enum) else category
    return key, PeriodicityPolicy(
        category=key,
        label=label,
        short_label=short_label,
        allowed=allowed,
        year_required=year_required,
    )


POLICIES: dict[str, PeriodicityPolicy] = dict([
    _policy(IncomeCategory.RENTEN, "Renten", "Renten", _M),
    _policy(IncomeCategory.VERMIETUNG, "Einkünfte aus Vermietung und Verpachtung", "Vermietung/Verpachtung", _Y, _Y),
    _policy(IncomeCategory.GEWERBE, "Einkünfte aus Gewerbebetrieb/selbstständiger Arbeit",
            "Gewerbebetrieb/selbstständige Arbeit", _Y, _Y),
    _policy(IncomeCategory.LANDFORST, "Einkünfte aus Land- und Forstwirtschaft", "Land- und Forstwirtschaft", _Y, _Y),
    _policy(IncomeCategory.SONSTIGE, "Sonstige Einkünfte", "Sonstige Einkünfte", _Y, _Y),
    _policy(IncomeCategory.UNTERHALT_STEUERFREI, "Unterhaltsleistungen steuerfrei", "Unterhaltsleistungen steuerfrei", _M),
    _policy(IncomeCategory.UNTERHALT_STEUERPFLICHTIG, "Unterhaltsleistungen steuerpflichtig", "Unterhaltsleistungen steuerpflichtig", _M),
    _policy(IncomeCategory.AUSLAND, "Ausländische Einkünfte", "Ausländische Einkünfte", _M | _Y, _Y),
    _policy(IncomeCategory.PAUSCHAL, "Vom Arbeitgeber pauschal besteuerter Arbeitslohn",
            "pauschal besteuerten Arbeitslohn", _M),
    _policy(
        IncomeCategory.ARBEITSLOSENGELD,
        "Arbeitslosengeld",
        "Arbeitslosengeld",
        frozenset({Periodicity.DAILY, Periodicity.MONTHLY, Periodicity.YEARLY}),
    ),
    _policy(CostChangeType.WERBUNGSKOSTEN, "Werbungskosten", "Werbungskosten", _Y),
    _policy(CostChangeType.KINDERBETREUUNGSKOSTEN, "Kinderbetreuungskosten", "Kinderbetreuungskosten", _Y),
    _policy(CostChangeType.UNTERHALTSZAHLUNGEN, "Unterhaltszahlungen", "Unterhaltszahlungen", _M),
])


def policy_for(category: CategoryKey) -> PeriodicityPolicy:
    key = category.value if isinstance(category, Enum) else str(category)
    try:
        return POLICIES[key]
    except KeyError as e:
        raise RuleDefinitionError(f"No periodicity policy for {key!r}", rule=key) from e


def is_allowed(category: CategoryKey, periodicity: Optional[Periodicity]) -> bool:
    return policy_for(category).is_allowed(periodicity)


def apply_default(entry: IncomeEntry) -> IncomeEntry:
    """Assign the single allowed periodicity to an entry that has none."""
    if entry.periodicity is not None:
        return entry
    default = policy_for(entry.category).default
    if default is None:
        return entry
    return entry.model_copy(update={"periodicity": default})


def apply_change_default(change: ChangeEntry) -> ChangeEntry:
    """Preset the monthly/yearly answer of a change for fixed categories."""
    if change.is_new_income_monthly is not None:
        return change
    default = policy_for(change.type).default
    if default is None:
        return change
    return change.model_copy(update={"is_new_income_monthly": default == Periodicity.MONTHLY})


def change_periodicity(change: ChangeEntry) -> Optional[Periodicity]:
    if change.is_new_income_monthly is None:
        return None
    return Periodicity.MONTHLY if change.is_new_income_monthly else Periodicity.YEARLY


__all__ = [
    "PolicyKind",
    "PeriodicityPolicy",
    "POLICIES",
    "policy_for",
    "is_allowed",
    "apply_default",
    "apply_change_default",
    "change_periodicity",
]
