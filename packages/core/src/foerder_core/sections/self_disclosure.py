"""Self-disclosure (Selbstauskunft) sections, one set per applicant.

Net income, benefits and monthly obligations are each validated on their
own. Tables that must have at least one row once their question is
answered with yes report the columns of a missing first row.
"""

from foerder_core import checks
from foerder_core.models.application import ApplicationRecord, BenefitType, NetIncomeType, WizardStep
from foerder_core.models.results import ErrorCode
from foerder_core.rules import (
    ALWAYS,
    EvaluationContext,
    Expand,
    FieldRule,
    ForEach,
    RulePredicate,
    Scope,
    SectionSpec,
    field,
)
from foerder_core.sections.personal import applicant_title

Q = ErrorCode.QUESTION_UNANSWERED
M = ErrorCode.MISSING
READS = ("self_disclosure", "personal_info.persons")


def disclosure_scopes(record: ApplicationRecord) -> list[Scope]:
    """One scope per applicant that has a self-disclosure, in person order."""
    positions = {d.person_id: i for i, d in enumerate(record.self_disclosure.disclosures)}
    scopes = []
    for index, person in enumerate(record.personal_info.persons):
        if index > 0 and not person.is_applicant:
            continue
        position = positions.get(person.id)
        if position is None:
            continue
        scopes.append(
            Scope(
                path=f"self_disclosure.disclosures.{position}",
                title_prefix=f"{applicant_title(person, index)}: ",
            )
        )
    return scopes


def _section(id_suffix: str, title: str, rules: tuple) -> SectionSpec:
    return SectionSpec(
        id=f"selbstauskunft-{id_suffix}",
        title=title,
        step=WizardStep.SELF_DISCLOSURE,
        scopes=disclosure_scopes,
        reads=READS,
        rules=rules,
    )


AMOUNT = (checks.amount(),)
DURATION = (checks.future_date(),)

Column = tuple[str, str, tuple]


def _table(
    path: str,
    name: str,
    columns: tuple[Column, ...],
    when: RulePredicate = ALWAYS,
    numbered: bool = True,
    at_least_one: bool = False,
) -> tuple:
    """Rules for a table of rows, each column reported as missing on its own.

    Args:
        path: Path of the row collection.
        name: Row name in messages ("Kredit" gives "Kredit 1: ...").
        columns: ``(field, label, checks)`` per column.
        when: The table applies only when true.
        numbered: Whether the row number follows the name.
        at_least_one: Report an empty table as a first row with every
            column missing.
    """

    def prefix(index: int) -> str:
        return f"{name} {index + 1}: " if numbered else f"{name}: "

    rules: tuple = (
        ForEach(
            path,
            when=when,
            prefix=lambda item, index, ctx: prefix(index),
            rules=tuple(FieldRule(f, label, code=M, checks=c) for f, label, c in columns),
        ),
    )
    if at_least_one:

        def first_row(ctx: EvaluationContext):
            if ctx.get(path):
                return ()
            return tuple(FieldRule(path, prefix(0) + label, code=M) for _, label, _ in columns)

        rules += (Expand(first_row, when=when),)
    return rules


def _amount(path: str, label: str, when: RulePredicate = ALWAYS, required: bool = True) -> FieldRule:
    return FieldRule(path, label, when=when, required=required, checks=AMOUNT)


# =============================================================================
# NET INCOME
# =============================================================================

salaried = field("has_salary_income").is_(True)
business = field("income_types").contains(NetIncomeType.GEWERBE)

NET_INCOME = _section(
    "einkommen",
    "Nettoeinkommen",
    (
        FieldRule(
            "has_salary_income",
            "Einkünfte aus nichtselbstständiger Arbeit",
            code=Q,
            prompt="Bitte geben Sie an, ob Sie Einkünfte aus nichtselbstständiger Arbeit erzielen",
        ),
        _amount("monthly_net_salary", "Lohn/Gehalt: Monatliches Nettoeinkommen", salaried),
        _amount("christmas_bonus", "Weihnachtsgeld: Jahresbetrag", salaried),
        _amount("holiday_pay", "Urlaubsgeld: Jahresbetrag", salaried),
        *_table(
            "other_employment_income",
            "Sonstige Beträge",
            (("type", "Art des Betrags", ()), ("amount", "Jahresbetrag", AMOUNT)),
            when=salaried,
        ),
        FieldRule(
            "yearly_business_net",
            "Gewerbebetrieb/selbstständiger Arbeit",
            when=business & field("yearly_self_employed_net").blank(),
            code=ErrorCode.AT_LEAST_ONE_AMOUNT,
            checks=AMOUNT,
        ),
        _amount("yearly_self_employed_net", "Selbstständige Arbeit: Jahresbetrag", business, required=False),
        _amount(
            "yearly_agriculture_net",
            "Land- und Forstwirtschaft: Jahresbetrag",
            field("income_types").contains(NetIncomeType.LANDFORST),
        ),
        _amount(
            "yearly_capital_net",
            "Kapitalvermögen: Jahresbetrag",
            field("income_types").contains(NetIncomeType.KAPITAL),
        ),
        _amount(
            "yearly_rental_net",
            "Vermietung und Verpachtung: Jahresbetrag",
            field("income_types").contains(NetIncomeType.VERMIETUNG),
        ),
    ),
)


# =============================================================================
# BENEFITS
# =============================================================================

def _benefit(path: str, label: str, benefit: BenefitType) -> FieldRule:
    return _amount(path, f"{label}: Monatliches Nettoeinkommen", field("benefit_types").contains(benefit))


BENEFITS = _section(
    "bezuege",
    "Bezüge und Weitere Einkünfte",
    (
        FieldRule(
            "has_pension_income",
            "Rentenbezüge/Versorgungsbezüge",
            code=Q,
            prompt="Bitte geben Sie an, ob Sie Rentenbezüge/Versorgungsbezüge beziehen",
        ),
        *_table(
            "pensions",
            "Rentenart",
            (("type", "Rentenart", ()), ("amount", "Monatliches Nettoeinkommen", AMOUNT)),
            when=field("has_pension_income").is_(True),
            at_least_one=True,
        ),
        _benefit("monthly_child_benefit", "Kindergeld", BenefitType.KINDERGELD),
        _benefit("monthly_care_allowance", "Pflegegeld", BenefitType.PFLEGEGELD),
        _benefit("monthly_maintenance_tax_free", "Unterhaltsleistungen steuerfrei", BenefitType.UNTERHALT_STEUERFREI),
        _benefit(
            "monthly_maintenance_taxable",
            "Unterhaltsleistungen steuerpflichtig",
            BenefitType.UNTERHALT_STEUERPFLICHTIG,
        ),
        _benefit("monthly_parental_allowance", "Elterngeld/Erziehungsgeld", BenefitType.ELTERNGELD),
        *_table(
            "other_income",
            "Sonstiges Einkommen",
            (("type", "Art des Einkommens", ()), ("amount", "Monatliches Nettoeinkommen", AMOUNT)),
            when=field("benefit_types").contains(BenefitType.SONSTIGES),
            at_least_one=True,
        ),
    ),
)


# =============================================================================
# MONTHLY OBLIGATIONS
# =============================================================================

def _question(path: str, label: str, prompt: str) -> FieldRule:
    return FieldRule(path, label, code=Q, prompt=f"Bitte geben Sie an, ob Sie {prompt}")


def _contract(flag: str, prefix: str, institute: str, amount: str) -> tuple[FieldRule, ...]:
    """Institute and monthly amount of a savings or insurance contract."""
    active = field(flag).is_(True)
    return (
        FieldRule(institute, f"{prefix}: Institut", when=active, code=M),
        FieldRule(amount, f"{prefix}: Monatlicher Betrag", when=active, code=M, checks=AMOUNT),
    )


OBLIGATIONS = _section(
    "belastungen",
    "Monatliche Belastungen",
    (
        *_table(
            "taxes_and_contributions",
            "Steuer/Beitrag",
            (("type", "Art der Steuer bzw. Beitrag", ()), ("amount", "Monatlicher Betrag", AMOUNT)),
        ),
        _question("is_paying_loans", "Laufende Kredite", "laufende Kredite haben"),
        *_table(
            "loans",
            "Kredit",
            (
                ("description", "Kredit Beschreibung", ()),
                ("duration", "Laufzeit bis", DURATION),
                ("amount", "Monatlicher Betrag", AMOUNT),
            ),
            when=field("is_paying_loans").is_(True),
            at_least_one=True,
        ),
        _question(
            "is_paying_bridging_loan",
            "Zwischenkredit",
            "einen laufenden Zwischenkredit für Bauspardarlehen haben",
        ),
        *_table(
            "bridging_loans",
            "Zwischenkredit",
            (("duration", "Laufzeit bis", DURATION), ("amount", "Monatlicher Betrag", AMOUNT)),
            when=field("is_paying_bridging_loan").is_(True),
            numbered=False,
            at_least_one=True,
        ),
        _question("is_paying_maintenance", "Unterhalt", "Unterhalt zahlen"),
        *_table(
            "maintenance_obligations",
            "Unterhalt",
            (("duration", "Laufzeit bis", DURATION), ("amount", "Monatlicher Betrag", AMOUNT)),
            when=field("is_paying_maintenance").is_(True),
            numbered=False,
        ),
        _question("has_other_obligations", "Sonstige Zahlungsverpflichtungen", "sonstige Zahlungsverpflichtungen haben"),
        *_table(
            "other_obligations",
            "Zahlungsverpflichtung",
            (
                ("description", "Art der Zahlungsverpflichtung", ()),
                ("duration", "Laufzeit bis", DURATION),
                ("amount", "Monatlicher Betrag", AMOUNT),
            ),
            when=field("has_other_obligations").is_(True),
        ),
        _question(
            "has_building_savings",
            "Bausparverträge",
            "monatlich Sparraten für Bausparverträge zahlen",
        ),
        *_contract(
            "has_building_savings",
            "Bausparverträge",
            "building_savings_institute",
            "building_savings_rate",
        ),
        _question(
            "has_life_insurance",
            "Kapitallebens- und Rentenversicherungen",
            "monatlich Prämien für Kapitallebens- und Rentenversicherungen zahlen",
        ),
        *_contract(
            "has_life_insurance",
            "Rentenversicherung",
            "life_insurance_institute",
            "life_insurance_premium",
        ),
    ),
)


# =============================================================================
# FURTHER DETAILS
# =============================================================================

FURTHER = _section(
    "weitere-angaben",
    "Weitere Angaben",
    (
        _amount("expenses_payable", "Fällige Ausgaben", required=False),
        _amount("bank_overdraft", "Kontoüberziehung", required=False),
        _amount("debt_payable", "Fällige Schulden", required=False),
        FieldRule("has_guarantee", "Bürgschaft", required=False),
    ),
)

SECTIONS = (NET_INCOME, BENEFITS, OBLIGATIONS, FURTHER)
