"""Validation engine: derive, evaluate, repeat.

The presentation layer hands the engine the current snapshot and a change.
The engine writes the change into a new record, recomputes the derived
values, re-evaluates the sections that read any touched path and returns
the new record together with the section results. It performs no I/O and
keeps no state between calls besides its configuration and reference day.

Example:
    engine = ValidationEngine(EngineConfig(), today=date(2024, 5, 15))
    result = engine.evaluate(engine.derive(record))
    result = engine.apply_change(result.record, Change(path="...", value="..."), previous=result)
    result = engine.activate(result.record, WizardStep.INCOME_DECLARATION, previous=result)
    for message in result.messages:
        print(message)
"""

from datetime import date
from typing import Any, Iterable, Iterator, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field

from foerder_core import messages, money
from foerder_core.calendar_window import default_anchor
from foerder_core.config import EngineConfig
from foerder_core.exceptions import RuleDefinitionError
from foerder_core.identity import DuplicateAdvisory, resolve_duplicate
from foerder_core.ledger import CostLedger, normalise_entries
from foerder_core.models.application import (
    MAIN_APPLICANT_ROLE,
    ApplicationRecord,
    Helper,
    IncomeDeclaration,
    NetIncomeType,
    SelfDisclosure,
    WizardStep,
)
from foerder_core.models.results import AdvisoryOutcome, FieldError, FieldStatus, SectionResult
from foerder_core.periodicity import apply_change_default, apply_default
from foerder_core.rules import SectionSpec
from foerder_core.sections import ALL_SECTIONS
from foerder_core.snapshot import is_prefix, join_path, set_at
from foerder_core.validators import SectionValidator

logger = structlog.get_logger()


class Change(BaseModel):
    """A single field edit."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Dotted record path")
    value: Any = None


class EngineResult(BaseModel):
    """A derived record and its section results."""

    model_config = ConfigDict(frozen=True)

    record: ApplicationRecord
    sections: tuple[SectionResult, ...] = ()
    reevaluated: tuple[str, ...] = Field(
        default=(), description="Ids of the sections evaluated in this pass"
    )

    @property
    def errors(self) -> tuple[FieldError, ...]:
        """Visible errors in section order."""
        return tuple(e for s in self.sections for e in s.errors)

    @property
    def messages(self) -> list[str]:
        return messages.render_all(self.errors)

    def section(self, section_id: str) -> list[SectionResult]:
        return [s for s in self.sections if s.id == section_id]

    def for_step(self, step: WizardStep) -> list[SectionResult]:
        return [s for s in self.sections if s.step == step]

    def blocks_submit(self, step: WizardStep) -> bool:
        """Whether the step has issues, shown or not."""
        return any(s.issues for s in self.for_step(step))

    def completion(self, step: WizardStep) -> int:
        """Share of the step's applicable fields without an issue, 0-100."""
        total = failing = 0
        for result in self.for_step(step):
            total += result.applicable_fields
            failing += min(len(result.issues), result.applicable_fields)
        if total == 0:
            return 100
        return round((total - failing) * 100 / total)


def changed_paths(before: BaseModel, after: BaseModel, depth: int = 2, prefix: str = "") -> Iterator[str]:
    """Paths of the model fields that differ, down to ``depth`` levels."""
    for name in type(after).model_fields:
        old, new = getattr(before, name), getattr(after, name)
        if old == new:
            continue
        path = join_path(prefix, name)
        if depth > 1 and isinstance(old, BaseModel) and isinstance(new, BaseModel):
            yield from changed_paths(old, new, depth - 1, path)
        else:
            yield path


def _intersects(reads: Sequence[str], touched: Sequence[str]) -> bool:
    return any(is_prefix(r, t) or is_prefix(t, r) for r in reads for t in touched)


class ValidationEngine:
    """Applies edits, recomputes derived values and evaluates sections."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        today: Optional[date] = None,
        sections: Sequence[SectionSpec] = ALL_SECTIONS,
    ) -> None:
        """
        Args:
            config: Engine settings (default: loaded from the environment).
            today: Reference day for date windows and default anchors.
            sections: Rule tables to evaluate, in display order.
        """
        self.config = config or EngineConfig()
        self.today = today or date.today()
        self.sections = tuple(sections)
        self.validator = SectionValidator(self.config)

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    def derive(self, record: ApplicationRecord) -> ApplicationRecord:
        """Recompute every derived value of the record.

        Defaults (window anchors, fixed periodicities) are only written into
        empty fields and never replace a value that is already there.
        """
        record = self._derive_household(record)
        record = self._derive_income(record)
        record = self._derive_self_disclosure(record)
        return self._derive_self_help(record)

    def _derive_household(self, record: ApplicationRecord) -> ApplicationRecord:
        persons = record.personal_info.persons
        if not persons:
            return record
        if not persons[0].role:
            main = persons[0].model_copy(update={"role": MAIN_APPLICANT_ROLE})
            record = set_at(record, "personal_info.persons.0", main)

        declarations = record.income_declaration.declarations
        missing = tuple(
            IncomeDeclaration(person_id=p.id)
            for p in record.applicants
            if record.declaration_for(p.id) is None
        )
        if missing:
            record = set_at(record, "income_declaration.declarations", declarations + missing)

        disclosures = record.self_disclosure.disclosures
        missing_disclosures = tuple(
            SelfDisclosure(person_id=p.id)
            for p in record.applicants
            if record.disclosure_for(p.id) is None
        )
        if missing_disclosures:
            record = set_at(record, "self_disclosure.disclosures", disclosures + missing_disclosures)
        return record

    def _derive_declaration(self, declaration: IncomeDeclaration) -> IncomeDeclaration:
        updates: dict[str, Any] = {}

        employment = declaration.employment
        if declaration.has_employment_income and (
            employment.anchor_month is None or employment.anchor_year is None
        ):
            anchor = default_anchor(self.today)
            updates["employment"] = employment.model_copy(
                update={
                    "anchor_month": anchor.month if employment.anchor_month is None else employment.anchor_month,
                    "anchor_year": anchor.year if employment.anchor_year is None else employment.anchor_year,
                }
            )

        incomes = tuple(apply_default(e) for e in declaration.additional_incomes)
        if incomes != declaration.additional_incomes:
            updates["additional_incomes"] = incomes
        changes = tuple(apply_change_default(c) for c in declaration.changes)
        if changes != declaration.changes:
            updates["changes"] = changes

        return declaration.model_copy(update=updates) if updates else declaration

    def _derive_income(self, record: ApplicationRecord) -> ApplicationRecord:
        declarations = record.income_declaration.declarations
        derived = tuple(self._derive_declaration(d) for d in declarations)
        if derived == declarations:
            return record
        return set_at(record, "income_declaration.declarations", derived)

    @staticmethod
    def _derive_disclosure(disclosure: SelfDisclosure) -> SelfDisclosure:
        business = NetIncomeType.GEWERBE in disclosure.income_types

        def monthly(selected: bool, text: str) -> Optional[int]:
            if not selected or money.is_blank(text):
                return None
            return money.yearly_to_monthly(money.parse(text))

        return disclosure.model_copy(
            update={
                "monthly_business_net": monthly(business, disclosure.yearly_business_net),
                "monthly_self_employed_net": monthly(business, disclosure.yearly_self_employed_net),
                "monthly_capital_net": monthly(
                    NetIncomeType.KAPITAL in disclosure.income_types, disclosure.yearly_capital_net
                ),
            }
        )

    def _derive_self_disclosure(self, record: ApplicationRecord) -> ApplicationRecord:
        disclosures = record.self_disclosure.disclosures
        derived = tuple(self._derive_disclosure(d) for d in disclosures)
        if derived == disclosures:
            return record
        return set_at(record, "self_disclosure.disclosures", derived)

    def _derive_self_help(self, record: ApplicationRecord) -> ApplicationRecord:
        step = record.self_help
        entries = normalise_entries(step.entries)
        updates: dict[str, Any] = {"entries": entries, "totals": CostLedger(entries).totals()}

        persons = record.personal_info.persons
        if step.main_applicant_will_help and persons:
            main = persons[0]
            helpers = step.helpers or (Helper(),)
            first = helpers[0].model_copy(
                update={
                    "name": main.first_name,
                    "surname": main.last_name,
                    "email": main.contact.email,
                    "address": main.address,
                }
            )
            updates["helpers"] = (first,) + helpers[1:]

        derived = step.model_copy(update=updates)
        if derived == step:
            return record
        return record.model_copy(update={"self_help": derived})

    # =========================================================================
    # EVALUATION
    # =========================================================================

    def evaluate(
        self,
        record: ApplicationRecord,
        previous: Optional[EngineResult] = None,
        touched: Optional[Iterable[str]] = None,
    ) -> EngineResult:
        """Evaluate the sections for a derived record.

        Args:
            record: A derived snapshot.
            previous: Result of the last evaluation, for reuse.
            touched: Paths changed since ``previous``. Sections that read
                none of them keep their previous results. All sections are
                evaluated when either argument is missing.
        """
        reusable: dict[str, list[SectionResult]] = {}
        paths: tuple[str, ...] = ()
        if previous is not None and touched is not None:
            paths = tuple(touched)
            for result in previous.sections:
                reusable.setdefault(result.id, []).append(result)

        results: list[SectionResult] = []
        evaluated: list[str] = []
        for section in self.sections:
            active = record.validation.is_active(section.step)
            if section.id in reusable and not _intersects(section.reads, paths):
                results.extend(r.model_copy(update={"activated": active}) for r in reusable[section.id])
                continue
            results.extend(self.validator.evaluate(section, record, self.today, activated=active))
            evaluated.append(section.id)

        logger.debug("record_evaluated", record_id=record.id, reevaluated=len(evaluated), total=len(self.sections))
        return EngineResult(record=record, sections=tuple(results), reevaluated=tuple(evaluated))

    def apply_change(
        self,
        record: ApplicationRecord,
        change: Change,
        previous: Optional[EngineResult] = None,
    ) -> EngineResult:
        """Write one edit, derive, and evaluate what it touches.

        Raises:
            RecordPathError: If the path does not exist or the value does
                not fit the field.
        """
        written = set_at(record, change.path, change.value)
        derived = self.derive(written)
        touched = [change.path, *changed_paths(written, derived)]
        logger.debug("change_applied", path=change.path, touched=touched)
        return self.evaluate(derived, previous=previous, touched=touched)

    def activate(
        self,
        record: ApplicationRecord,
        step: WizardStep,
        previous: Optional[EngineResult] = None,
    ) -> EngineResult:
        """Show the step's errors, as on a submit or advance attempt."""
        record = set_at(record, join_path("validation", step.value), True)
        derived = self.derive(record)
        touched = list(changed_paths(record, derived)) if previous is not None else None
        result = self.evaluate(derived, previous=previous, touched=touched)
        logger.info(
            "step_activated",
            step=step.value,
            blocks_submit=result.blocks_submit(step),
            errors=sum(len(s.errors) for s in result.for_step(step)),
        )
        return result

    def resolve_advisory(
        self,
        record: ApplicationRecord,
        advisory: DuplicateAdvisory,
        outcome: AdvisoryOutcome,
        previous: Optional[EngineResult] = None,
    ) -> EngineResult:
        """Apply the answer to a duplicate advisory and re-evaluate."""
        resolved = self.derive(resolve_duplicate(record, advisory, outcome))
        touched = list(changed_paths(record, resolved, depth=3))
        return self.evaluate(resolved, previous=previous, touched=touched)

    def field_statuses(self, record: ApplicationRecord, section_id: str) -> list[FieldStatus]:
        """Per-field visibility, lock and error state of one section."""
        for section in self.sections:
            if section.id == section_id:
                return self.validator.field_statuses(section, record, self.today)
        raise RuleDefinitionError(f"Unknown section {section_id!r}", rule=section_id)


__all__ = ["Change", "EngineResult", "changed_paths", "ValidationEngine"]
