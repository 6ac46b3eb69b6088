"""Tests for rule predicates and the field and section validators."""

from datetime import date

import pytest

from foerder_core import checks
from foerder_core.config import EngineConfig
from foerder_core.messages import render
from foerder_core.models import (
    ApplicationRecord,
    EmploymentType,
    ErrorCategory,
    ErrorCode,
    FieldState,
    ValidationFlags,
    WizardStep,
)
from foerder_core.rules import (
    ALWAYS,
    NEVER,
    Computed,
    EvaluationContext,
    Expand,
    FieldRule,
    ForEach,
    SectionSpec,
    all_of,
    any_of,
    field,
    is_blank,
)
from foerder_core.snapshot import set_at
from foerder_core.validators import FieldValidator, SectionValidator


def context(record: ApplicationRecord, today: date, scope: str = "", **kwargs) -> EvaluationContext:
    return EvaluationContext(record=record, today=today, config=EngineConfig(), scope=scope, **kwargs)


class TestIsBlank:
    """Test suite for is_blank."""

    def test_answers_are_not_blank(self):
        """False and zero are answers."""
        assert not is_blank(False)
        assert not is_blank(0)

    def test_blank_values(self):
        """None, whitespace and empty collections are blank."""
        assert is_blank(None)
        assert is_blank("  ")
        assert is_blank(())
        assert is_blank({})


class TestEvaluationContext:
    """Test suite for scope-relative paths."""

    def test_relative_path(self, record: ApplicationRecord, today: date):
        """Plain paths resolve below the scope."""
        ctx = context(record, today, scope="personal_info.persons.0")

        assert ctx.path("address.city") == "personal_info.persons.0.address.city"
        assert ctx.get("address.city") == "Düsseldorf"

    def test_root_and_parent_paths(self, record: ApplicationRecord, today: date):
        """A leading slash reads from the root, each caret climbs one segment."""
        ctx = context(record, today, scope="income_declaration.declarations.0.changes.2")

        assert ctx.path("/financing") == "financing"
        assert ctx.path("^^costs") == "income_declaration.declarations.0.costs"

    def test_label_placeholders(self, record: ApplicationRecord, today: date):
        """Labels are prefixed and filled from the context vars."""
        ctx = context(record, today, label_prefix="Person 2: ", vars={"n": 3})

        assert ctx.label("Name für Person {n}") == "Person 2: Name für Person 3"


class TestPredicates:
    """Test suite for composable predicates."""

    def test_is_bool_is_identity(self, record: ApplicationRecord, today: date):
        """Boolean comparison does not treat None as False."""
        ctx = context(record, today)

        assert field("self_help.will_provide_self_help").is_(False)(ctx)
        assert not field("self_help.main_applicant_will_help").is_(False)(ctx)
        assert field("self_help.main_applicant_will_help").is_(None)(ctx)

    def test_one_of_accepts_raw_values(self, record: ApplicationRecord, today: date):
        """Enum members and their raw values compare equal."""
        ctx = context(record, today, scope="personal_info.persons.0")

        assert field("employment.type").one_of({"employee", "worker"})(ctx)
        assert field("employment.type").is_(EmploymentType.EMPLOYEE)(ctx)
        assert not field("employment.type").one_of({EmploymentType.FREELANCER})(ctx)

    def test_combinators(self, record: ApplicationRecord, today: date):
        """Predicates combine with and, or and not."""
        ctx = context(record, today)
        yes = field("self_help.will_provide_self_help").is_(False)

        assert (yes & ALWAYS)(ctx)
        assert not (yes & NEVER)(ctx)
        assert (NEVER | yes)(ctx)
        assert not (~yes)(ctx)
        assert all_of(yes, ALWAYS)(ctx)
        assert any_of(NEVER, yes)(ctx)

    def test_present_and_blank(self, record: ApplicationRecord, today: date):
        """Presence follows is_blank."""
        ctx = context(record, today)

        assert field("personal_info.subsidized_object.city").present()(ctx)
        assert field("financing.declared_self_help").blank()(ctx)


class TestFieldValidator:
    """Test suite for FieldValidator."""

    def test_not_applicable(self, record: ApplicationRecord, today: date):
        """A field whose condition is false never errors."""
        rule = FieldRule("financing.declared_self_help", "Selbsthilfe", when=NEVER)

        assert FieldValidator().validate(rule, context(record, today)) is None

    def test_required_error(self, record: ApplicationRecord, today: date):
        """A blank required field yields a field-required error."""
        rule = FieldRule("financing.declared_self_help", "Selbsthilfe")

        error = FieldValidator().validate(rule, context(record, today))

        assert error.code == ErrorCode.REQUIRED
        assert error.category == ErrorCategory.FIELD_REQUIRED
        assert error.path == "financing.declared_self_help"
        assert render(error) == "Selbsthilfe ist erforderlich"

    def test_optional_blank(self, record: ApplicationRecord, today: date):
        """Blank optional fields are fine."""
        rule = FieldRule("financing.declared_self_help", "Selbsthilfe", required=False)

        assert FieldValidator().validate(rule, context(record, today)) is None

    def test_plural_and_prompt(self, record: ApplicationRecord, today: date):
        """Plural labels and question prompts shape the message."""
        plural = FieldRule("financing.declared_self_help", "Kosten", plural=True)
        question = FieldRule(
            "self_help.main_applicant_will_help",
            "Beteiligung",
            code=ErrorCode.QUESTION_UNANSWERED,
            prompt="Bitte geben Sie an, ob Sie helfen",
        )
        ctx = context(record, today)

        assert render(FieldValidator().validate(plural, ctx)) == "Kosten sind erforderlich"
        assert render(FieldValidator().validate(question, ctx)) == "Bitte geben Sie an, ob Sie helfen"

    def test_false_is_an_answer(self, record: ApplicationRecord, today: date):
        """A question answered with no is complete."""
        rule = FieldRule("self_help.will_provide_self_help", "Selbsthilfe", code=ErrorCode.QUESTION_UNANSWERED)

        assert FieldValidator().validate(rule, context(record, today)) is None

    def test_first_check_wins(self, record: ApplicationRecord, today: date):
        """Only the first failing check is reported."""
        bad = set_at(record, "personal_info.persons.0.address.postal_code", "1234")
        rule = FieldRule(
            "personal_info.persons.0.address.postal_code",
            "Postleitzahl",
            checks=(checks.postal_code(), checks.email()),
        )

        error = FieldValidator().validate(rule, context(bad, today))

        assert error.code == ErrorCode.POSTAL_CODE_FORMAT
        assert error.category == ErrorCategory.FIELD_MALFORMED

    def test_strict_amounts(self, record: ApplicationRecord, today: date):
        """Malformed amounts are reported only in strict mode."""
        bad = set_at(record, "financing.declared_self_help", "viel")
        rule = FieldRule("financing.declared_self_help", "Selbsthilfe", checks=(checks.amount(),))
        strict = EvaluationContext(record=bad, today=today, config=EngineConfig(strict_amounts=True))

        assert FieldValidator().validate(rule, context(bad, today)) is None
        assert FieldValidator().validate(rule, strict).code == ErrorCode.AMOUNT_FORMAT


@pytest.fixture
def section() -> SectionSpec:
    return SectionSpec(
        id="test",
        title="Test",
        step=WizardStep.PERSONAL_INFO,
        reads=("personal_info",),
        rules=(
            FieldRule("personal_info.subsidized_object.city", "Ort"),
            ForEach(
                "personal_info.persons",
                prefix=lambda person, index, ctx: f"Person {index + 1}: ",
                rules=(FieldRule("nationality", "Staatsangehörigkeit"), FieldRule("role", "Rolle")),
            ),
            Expand(lambda ctx: [FieldRule("financing.declared_self_help", "Selbsthilfe")]),
        ),
    )


class TestSectionValidator:
    """Test suite for SectionValidator."""

    def test_errors_in_declaration_order(self, section: SectionSpec, record: ApplicationRecord, today: date):
        """Errors follow the rule table, not evaluation order."""
        record = set_at(record, "personal_info.subsidized_object.city", "")
        record = set_at(record, "personal_info.persons.0.nationality", "")

        [result] = SectionValidator().evaluate(section, record, today, activated=True)

        assert [e.label for e in result.errors] == ["Ort", "Person 1: Staatsangehörigkeit", "Selbsthilfe"]
        assert result.applicable_fields == 4
        assert result.progress_percent == 25

    def test_hidden_until_activated(self, section: SectionSpec, record: ApplicationRecord, today: date):
        """Issues are collected but not shown before activation."""
        [result] = SectionValidator().evaluate(section, record, today)

        assert result.issues
        assert result.errors == ()
        assert result.state == FieldState.UNTOUCHED
        assert not result.success

    def test_activation_from_record(self, section: SectionSpec, record: ApplicationRecord, today: date):
        """The step's flag on the record activates the section."""
        record = record.model_copy(update={"validation": ValidationFlags(personal_info=True)})

        [result] = SectionValidator().evaluate(section, record, today)

        assert result.state == FieldState.INVALID
        assert len(result.errors) == 1

    def test_computed_rules(self, record: ApplicationRecord, today: date):
        """Computed rules contribute their errors and weight."""
        error = FieldValidator().validate(FieldRule("financing.declared_self_help", "X"), context(record, today))
        spec = SectionSpec(
            id="computed",
            title="Computed",
            step=WizardStep.SELF_HELP,
            reads=(),
            rules=(Computed(lambda ctx: [error, error], weight=1), Computed(lambda ctx: [], weight=3)),
        )

        [result] = SectionValidator().evaluate(spec, record, today, activated=True)

        assert len(result.errors) == 2
        assert result.applicable_fields == 5

    def test_unknown_rule_type(self, record: ApplicationRecord, today: date):
        """Rule tables may only hold known rule types."""
        spec = SectionSpec(id="bad", title="Bad", step=WizardStep.SELF_HELP, reads=(), rules=("nope",))

        with pytest.raises(TypeError):
            SectionValidator().evaluate(spec, record, today)

    def test_field_statuses(self, section: SectionSpec, record: ApplicationRecord, today: date):
        """Statuses report visibility, requirement and state per field."""
        statuses = SectionValidator().field_statuses(section, record, today, activated=True)

        by_path = {s.path: s for s in statuses}
        assert by_path["personal_info.subsidized_object.city"].state == FieldState.VALID
        assert by_path["financing.declared_self_help"].state == FieldState.INVALID
        assert by_path["personal_info.persons.0.role"].required
        assert not by_path["personal_info.persons.0.role"].locked
