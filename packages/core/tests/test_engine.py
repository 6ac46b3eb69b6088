"""Tests for the validation engine."""

from datetime import date

import pytest

from foerder_core.engine import Change, EngineResult, ValidationEngine, changed_paths
from foerder_core.exceptions import RecordPathError, RuleDefinitionError
from foerder_core.identity import DuplicateAdvisory, RosterEntry
from foerder_core.models import (
    MAIN_APPLICANT_ROLE,
    AdvisoryOutcome,
    ApplicationRecord,
    ChangeEntry,
    CostChangeType,
    CostLedgerEntry,
    EmploymentIncome,
    IncomeCategory,
    IncomeEntry,
    NetIncomeType,
    Periodicity,
    Person,
    PersonalInfo,
    WizardStep,
)
from foerder_core.sections import ALL_SECTIONS, section, sections_for_step
from foerder_core.snapshot import set_at

DECLARATION = "income_declaration.declarations.0"
DISCLOSURE = "self_disclosure.disclosures.0"


@pytest.fixture
def engine(today: date, config) -> ValidationEngine:
    return ValidationEngine(config, today=today)


@pytest.fixture
def result(engine: ValidationEngine, record: ApplicationRecord) -> EngineResult:
    return engine.evaluate(engine.derive(record))


class TestDerive:
    """Test suite for derived values."""

    def test_default_anchor(self, engine: ValidationEngine, record: ApplicationRecord):
        """Employed applicants get the last fully elapsed month as anchor."""
        record = set_at(record, f"{DECLARATION}.has_employment_income", True)

        employment = engine.derive(record).income_declaration.declarations[0].employment

        assert (employment.anchor_year, employment.anchor_month) == (2024, 3)

    def test_explicit_anchor_kept(self, engine: ValidationEngine, record: ApplicationRecord):
        """An anchor picked by the applicant is never replaced."""
        record = set_at(record, f"{DECLARATION}.has_employment_income", True)
        record = set_at(record, f"{DECLARATION}.employment", EmploymentIncome(anchor_month=11, anchor_year=2023))

        employment = engine.derive(record).income_declaration.declarations[0].employment

        assert (employment.anchor_year, employment.anchor_month) == (2023, 11)

    def test_no_anchor_without_employment(self, engine: ValidationEngine, record: ApplicationRecord):
        """The anchor is only defaulted for employment income."""
        employment = engine.derive(record).income_declaration.declarations[0].employment

        assert employment.anchor_month is None

    def test_periodicity_defaults(self, engine: ValidationEngine, record: ApplicationRecord):
        """Fixed periodicities are filled in, explicit ones kept."""
        incomes = (
            IncomeEntry(category=IncomeCategory.RENTEN),
            IncomeEntry(category=IncomeCategory.AUSLAND),
            IncomeEntry(category=IncomeCategory.VERMIETUNG, periodicity=Periodicity.MONTHLY),
        )
        changes = (ChangeEntry(type=CostChangeType.WERBUNGSKOSTEN),)
        record = set_at(record, f"{DECLARATION}.additional_incomes", incomes)
        record = set_at(record, f"{DECLARATION}.changes", changes)

        declaration = engine.derive(record).income_declaration.declarations[0]

        assert [e.periodicity for e in declaration.additional_incomes] == [
            Periodicity.MONTHLY,
            None,
            Periodicity.MONTHLY,
        ]
        assert declaration.changes[0].is_new_income_monthly is False

    def test_self_disclosure_monthly(self, engine: ValidationEngine, record: ApplicationRecord):
        """Yearly net income is shown per month while its type is selected."""
        record = set_at(record, f"{DISCLOSURE}.income_types", (NetIncomeType.GEWERBE,))
        record = set_at(record, f"{DISCLOSURE}.yearly_business_net", "12.000,00")
        record = set_at(record, f"{DISCLOSURE}.yearly_capital_net", "600")

        disclosure = engine.derive(record).self_disclosure.disclosures[0]

        assert disclosure.monthly_business_net == 100000
        assert disclosure.monthly_capital_net is None

    def test_ledger_totals(self, engine: ValidationEngine, record: ApplicationRecord):
        """Ledger rows are normalised and totalled."""
        entry = CostLedgerEntry(category="elektro", material="100", labor="50,50", self_help="20")
        record = set_at(record, "self_help.entries", (entry,))

        self_help = engine.derive(record).self_help

        assert len(self_help.entries) == 23
        assert (self_help.totals.material, self_help.totals.labor, self_help.totals.self_help) == (
            10000,
            5050,
            2000,
        )

    def test_helper_synced_from_main_applicant(self, engine: ValidationEngine, record: ApplicationRecord):
        """The main applicant's helper row mirrors step 1."""
        record = set_at(record, "self_help.will_provide_self_help", True)
        record = set_at(record, "self_help.main_applicant_will_help", True)

        [helper] = engine.derive(record).self_help.helpers

        assert (helper.name, helper.surname, helper.email) == ("Max", "Mustermann", "max@example.de")
        assert helper.address.city == "Düsseldorf"

    def test_household(self, engine: ValidationEngine):
        """Every applicant gets a declaration and a self-disclosure, the first the main role."""
        record = ApplicationRecord(personal_info=PersonalInfo(persons=(Person(), Person(), Person(is_applicant=False))))

        derived = engine.derive(record)

        assert derived.personal_info.persons[0].role == MAIN_APPLICANT_ROLE
        assert len(derived.income_declaration.declarations) == 2
        assert len(derived.self_disclosure.disclosures) == 2

    def test_idempotent(self, engine: ValidationEngine, record: ApplicationRecord):
        """Deriving a derived record changes nothing."""
        derived = engine.derive(record)

        assert engine.derive(derived) == derived
        assert list(changed_paths(derived, engine.derive(derived))) == []


class TestEvaluate:
    """Test suite for evaluation and activation."""

    def test_complete_record(self, result: EngineResult):
        """A complete record is ready for submission in every step."""
        for step in WizardStep:
            assert not result.blocks_submit(step)
            assert result.completion(step) == 100

    def test_errors_hidden_until_activated(self, engine: ValidationEngine, record: ApplicationRecord):
        """Errors only show once the step is activated."""
        record = set_at(record, "personal_info.persons.0.title", None)
        result = engine.evaluate(engine.derive(record))

        assert result.errors == ()
        assert result.blocks_submit(WizardStep.PERSONAL_INFO)

        activated = engine.activate(result.record, WizardStep.PERSONAL_INFO, previous=result)

        assert activated.record.validation.personal_info
        assert activated.messages[0] == "Hauptantragsteller: Titel ist erforderlich"
        assert activated.completion(WizardStep.PERSONAL_INFO) < 100

    def test_one_result_per_applicant(self, engine: ValidationEngine, record: ApplicationRecord):
        """Income sections are evaluated once per applicant."""
        record = set_at(record, "personal_info.persons", record.personal_info.persons + (Person(first_name="Erika"),))
        result = engine.evaluate(engine.derive(record))

        scopes = [s.scope for s in result.section("einkommenserklarung-legal")]

        assert scopes == ["income_declaration.declarations.0", "income_declaration.declarations.1"]

    def test_field_statuses_unknown_section(self, engine: ValidationEngine, record: ApplicationRecord):
        """Asking for an unknown section is a definition error."""
        with pytest.raises(RuleDefinitionError):
            engine.field_statuses(record, "step-99")


class TestApplyChange:
    """Test suite for incremental re-evaluation."""

    def test_only_affected_sections(self, engine: ValidationEngine, result: EngineResult):
        """Sections that do not read the changed path keep their results."""
        changed = engine.apply_change(
            result.record,
            Change(path="personal_info.persons.0.nationality", value=""),
            previous=result,
        )

        assert "hauptantrag-step1" in changed.reevaluated
        assert "selbsthilfe-aufstellung" not in changed.reevaluated
        assert changed.section("selbsthilfe-aufstellung") == result.section("selbsthilfe-aufstellung")
        assert changed.blocks_submit(WizardStep.PERSONAL_INFO)

    def test_derived_changes_are_touched(self, engine: ValidationEngine, result: EngineResult):
        """Paths rewritten by derivation count as touched."""
        changed = engine.apply_change(
            result.record,
            Change(path=f"{DECLARATION}.has_employment_income", value=True),
            previous=result,
        )

        employment = changed.record.income_declaration.declarations[0].employment
        assert employment.anchor_month == 3
        assert "einkommenserklarung-income" in changed.reevaluated

    def test_same_as_full_evaluation(self, engine: ValidationEngine, result: EngineResult):
        """Incremental results equal a full evaluation."""
        changed = engine.apply_change(
            result.record,
            Change(path="self_help.will_provide_self_help", value=True),
            previous=result,
        )

        assert changed.sections == engine.evaluate(changed.record).sections

    def test_bad_path(self, engine: ValidationEngine, result: EngineResult):
        """Unknown paths are rejected."""
        with pytest.raises(RecordPathError):
            engine.apply_change(result.record, Change(path="personal_info.nope", value=1))


class TestResolveAdvisory:
    """Test suite for duplicate advisories."""

    def test_revert(self, engine: ValidationEngine, result: EngineResult):
        """Reverting restores the identity the person had before the edit."""
        before = result.record.personal_info.persons[0]
        edited = set_at(result.record, "personal_info.persons.0.first_name", "Erika")
        advisory = DuplicateAdvisory(
            row_id=before.id,
            match=RosterEntry(id="r1", first_name="Erika", last_name="Mustermann", birth_date="1980-01-01"),
            previous=before,
        )

        resolved = engine.resolve_advisory(edited, advisory, AdvisoryOutcome.REVERT)

        assert resolved.record.personal_info.persons[0].first_name == "Max"

    def test_accept(self, engine: ValidationEngine, result: EngineResult):
        """Accepting keeps the edit."""
        edited = set_at(result.record, "personal_info.persons.0.first_name", "Erika")
        advisory = DuplicateAdvisory(
            row_id=edited.personal_info.persons[0].id,
            match=RosterEntry(id="r1", first_name="Erika", last_name="Mustermann", birth_date="1980-01-01"),
        )

        resolved = engine.resolve_advisory(edited, advisory, AdvisoryOutcome.ACCEPT_AND_CONTINUE)

        assert resolved.record.personal_info.persons[0].first_name == "Erika"


class TestRegistry:
    """Test suite for the section registry."""

    def test_unique_ids(self):
        """Section ids are unique."""
        ids = [s.id for s in ALL_SECTIONS]

        assert len(ids) == len(set(ids))

    def test_sections_for_step(self):
        """Sections are grouped by wizard step in display order."""
        ids = [s.id for s in sections_for_step(WizardStep.SELF_HELP)]

        assert ids == ["selbsthilfe-allgemein", "selbsthilfe-aufstellung", "selbsthilfe-helfer"]

    def test_unknown_section(self):
        """Unknown ids raise."""
        with pytest.raises(RuleDefinitionError):
            section("step-99")
