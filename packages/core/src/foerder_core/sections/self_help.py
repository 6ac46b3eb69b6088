"""Self-help (Selbsthilfe) sections: general answers, cost ledger, helpers.

The ledger and helper sections only apply once the applicant says self-help
work will be provided. The first helper row always stands for the main
applicant; their name, email and address are taken from step 1 and shown
read-only.
"""

from typing import Optional

from foerder_core import checks, money
from foerder_core.ledger import ENTRIES_PATH, CostLedger
from foerder_core.models.application import Helper, WizardStep
from foerder_core.models.results import ErrorCategory, ErrorCode, FieldError
from foerder_core.rules import (
    Computed,
    EvaluationContext,
    FieldRule,
    ForEach,
    SectionSpec,
    field,
    when,
)

M = ErrorCode.MISSING
Q = ErrorCode.QUESTION_UNANSWERED

providing = field("self_help.will_provide_self_help").is_(True)
declined = field("self_help.will_provide_self_help").is_(False)


def declared_self_help(ctx: EvaluationContext) -> Optional[int]:
    """Self-help declared in the financing step, in cents; None when blank."""
    text = ctx.get("financing.declared_self_help")
    if money.is_blank(text):
        return None
    return money.parse(text)


def _ledger(ctx: EvaluationContext) -> CostLedger:
    return CostLedger(ctx.get(ENTRIES_PATH) or ())


# =============================================================================
# GENERAL
# =============================================================================

def _declined_but_declared(ctx: EvaluationContext):
    declared = declared_self_help(ctx)
    if declared is None or declared <= 0:
        return []
    return [
        FieldError(
            code=ErrorCode.SELF_HELP_DECLINED_BUT_DECLARED,
            category=ErrorCategory.CROSS_FORM,
            path="self_help.will_provide_self_help",
            label="Selbsthilfeleistungen",
            params={"declared": money.format(declared), "declared_cents": declared},
        )
    ]


OBJECT = "personal_info.subsidized_object"

GENERAL = SectionSpec(
    id="selbsthilfe-allgemein",
    title="Allgemein",
    step=WizardStep.SELF_HELP,
    reads=("self_help.will_provide_self_help", "self_help.main_applicant_will_help", "financing", OBJECT),
    rules=(
        FieldRule(
            "self_help.will_provide_self_help",
            "Selbsthilfeleistungen",
            code=Q,
            prompt="Es wurde nicht angegeben, ob Selbsthilfeleistungen erbracht werden",
        ),
        Computed(_declined_but_declared, when=declined),
        FieldRule(
            "self_help.main_applicant_will_help",
            "Beteiligung des Hauptantragstellers",
            when=providing,
            code=Q,
            prompt="Es wurde nicht angegeben, ob sich der Hauptantragsteller an den Selbsthilfeleistungen beteiligt",
        ),
        FieldRule(f"{OBJECT}.street", "Straße des Förderobjekts", when=providing, code=M),
        FieldRule(f"{OBJECT}.house_number", "Hausnummer des Förderobjekts", when=providing, code=M),
        FieldRule(
            f"{OBJECT}.postal_code",
            "Postleitzahl des Förderobjekts",
            when=providing,
            code=M,
            checks=(checks.postal_code(),),
        ),
        FieldRule(f"{OBJECT}.city", "Ort des Förderobjekts", when=providing, code=M),
    ),
)


# =============================================================================
# COST LEDGER
# =============================================================================

def _nothing_costed(ctx: EvaluationContext):
    if _ledger(ctx).costed_categories():
        return []
    return [
        FieldError(
            code=ErrorCode.NO_SELF_HELP_COSTS,
            category=ErrorCategory.FIELD_REQUIRED,
            path=ENTRIES_PATH,
            label="Selbsthilfeleistungen",
        )
    ]


def _row_errors(ctx: EvaluationContext):
    return _ledger(ctx).row_errors()


def _total_mismatch(ctx: EvaluationContext):
    return _ledger(ctx).aggregate_errors(declared_self_help(ctx))


LEDGER = SectionSpec(
    id="selbsthilfe-aufstellung",
    title="Aufstellung Selbsthilfeleistungen",
    step=WizardStep.SELF_HELP,
    reads=("self_help.will_provide_self_help", ENTRIES_PATH, "financing"),
    rules=(
        Computed(_nothing_costed, when=providing),
        Computed(_row_errors, when=providing),
        Computed(_total_mismatch, when=providing),
    ),
)


# =============================================================================
# HELPERS
# =============================================================================

def _include_helper(helper: Helper, index: int, ctx: EvaluationContext) -> bool:
    if index == 0:
        return ctx.get("self_help.main_applicant_will_help") is True
    return helper.has_data


def _helper_name(index: int) -> str:
    return "Hauptantragsteller" if index == 0 else f"Helfer {index}"


is_main_applicant = when(lambda c: c.scope.endswith("helpers.0"), "main applicant row")


def _uncosted_jobs(ctx: EvaluationContext):
    ledger = CostLedger(ctx.get("/" + ENTRIES_PATH) or ())
    return ledger.helper_errors(ctx.node, ctx.label_prefix.rstrip(": "), ctx.scope)


HELPERS = SectionSpec(
    id="selbsthilfe-helfer",
    title="Angaben zu den Helfern",
    step=WizardStep.SELF_HELP,
    reads=(
        "self_help.will_provide_self_help",
        "self_help.main_applicant_will_help",
        "self_help.helpers",
        ENTRIES_PATH,
    ),
    rules=(
        ForEach(
            "self_help.helpers",
            when=providing,
            include=_include_helper,
            prefix=lambda helper, index, ctx: f"{_helper_name(index)}: ",
            rules=(
                FieldRule("name", "Vorname", code=M, locked_when=is_main_applicant),
                FieldRule("surname", "Nachname", code=M, locked_when=is_main_applicant),
                FieldRule(
                    "email",
                    "E-Mail-Adresse",
                    code=M,
                    checks=(checks.email(),),
                    locked_when=is_main_applicant,
                ),
                FieldRule("job_title", "Berufsangabe", code=M),
                FieldRule("job_categories", "Arbeitsnummern", code=M, plural=True),
                FieldRule("hours", "Stundenanzahl", code=M),
                FieldRule("address.street", "Straße der Adresse", code=M, locked_when=is_main_applicant),
                FieldRule(
                    "address.house_number",
                    "Hausnummer der Adresse",
                    code=M,
                    locked_when=is_main_applicant,
                ),
                FieldRule(
                    "address.postal_code",
                    "Postleitzahl der Adresse",
                    code=M,
                    checks=(checks.postal_code(),),
                    locked_when=is_main_applicant,
                ),
                FieldRule("address.city", "Ort der Adresse", code=M, locked_when=is_main_applicant),
                Computed(_uncosted_jobs, weight=0),
            ),
        ),
    ),
)

SECTIONS = (GENERAL, LEDGER, HELPERS)
