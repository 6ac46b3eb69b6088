"""Income declaration (Einkommenserklärung) sections, one set per applicant.

Employment income questions unfold step by step: the monthly table, the
special payments, the planned change and the contract details only apply
once the applicant says they earn employment income at all.
"""

from foerder_core import checks
from foerder_core.calendar_window import last_n_months
from foerder_core.models.application import (
    ApplicationRecord,
    IncomeCategory,
    IncomeEntry,
    WizardStep,
)
from foerder_core.models.results import ErrorCode
from foerder_core.periodicity import policy_for
from foerder_core.rules import (
    EvaluationContext,
    Expand,
    FieldRule,
    ForEach,
    Scope,
    SectionSpec,
    field,
)
from foerder_core.sections.personal import applicant_title

Q = ErrorCode.QUESTION_UNANSWERED
READS = ("income_declaration", "personal_info.persons")


def declaration_scopes(record: ApplicationRecord) -> list[Scope]:
    """One scope per applicant that has a declaration, in person order."""
    positions = {d.person_id: i for i, d in enumerate(record.income_declaration.declarations)}
    scopes = []
    for index, person in enumerate(record.personal_info.persons):
        if index > 0 and not person.is_applicant:
            continue
        position = positions.get(person.id)
        if position is None:
            continue
        scopes.append(
            Scope(
                path=f"income_declaration.declarations.{position}",
                title_prefix=f"{applicant_title(person, index)}: ",
                vars={"person_path": f"personal_info.persons.{index}"},
            )
        )
    return scopes


def _section(id_suffix: str, title: str, rules: tuple) -> SectionSpec:
    return SectionSpec(
        id=f"einkommenserklarung-{id_suffix}",
        title=title,
        step=WizardStep.INCOME_DECLARATION,
        scopes=declaration_scopes,
        reads=READS,
        rules=rules,
    )


# =============================================================================
# PERSONAL
# =============================================================================

def _personal_rules(ctx: EvaluationContext):
    person = "/" + ctx.vars["person_path"]
    return (
        FieldRule(f"{person}.title", "Titel"),
        FieldRule(f"{person}.first_name", "Vorname"),
        FieldRule(f"{person}.last_name", "Name"),
        FieldRule(f"{person}.address.street", "Straße"),
        FieldRule(f"{person}.address.house_number", "Hausnummer"),
        FieldRule(f"{person}.address.postal_code", "Postleitzahl", checks=(checks.postal_code(),)),
        FieldRule(f"{person}.address.city", "Ort"),
    )


PERSONAL = _section("personal", "Persönliche Angaben", (Expand(_personal_rules),))


# =============================================================================
# EMPLOYMENT INCOME
# =============================================================================

employed = field("has_employment_income").is_(True)
changing = employed & field("employment.will_change_income").is_(True)
limited = employed & field("employment.is_contract_limited").is_(True)


def _monthly_rules(ctx: EvaluationContext):
    """One required amount per window month, oldest first."""
    month = ctx.get("employment.anchor_month")
    year = ctx.get("employment.anchor_year")
    if month is None or year is None:
        return ()
    window = last_n_months(year, month, ctx.config.window_months)
    return tuple(
        FieldRule(
            f"employment.monthly_income.{m.key}",
            f"Einkommen für {m.label}",
            code=ErrorCode.MONTHLY_INCOME_REQUIRED,
            checks=(checks.amount(),),
        )
        for m in reversed(window)
    )


def _special_payment(path: str, what: str, period: str) -> FieldRule:
    return FieldRule(
        f"employment.{path}",
        f"Der Betrag für {what} der {period} 12 Monate",
        when=employed,
        checks=(checks.amount(),),
    )


INCOME = _section(
    "income",
    "Einkommensangaben",
    (
        FieldRule(
            "has_employment_income",
            "Einkünfte aus nichtselbstständiger Arbeit",
            code=Q,
            prompt="Bitte geben Sie an, ob Sie Einkünfte aus nichtselbstständiger Arbeit/Versorgungsbezüge erzielen",
        ),
        FieldRule("employment.income_year", "Jahr für steuerpflichtige Einkünfte", when=employed),
        FieldRule(
            "employment.income_year_amount",
            "Jahresbetrag für steuerpflichtige Einkünfte",
            when=employed,
            checks=(checks.amount(),),
        ),
        FieldRule("employment.anchor_month", "Letzter Monat", when=employed),
        FieldRule("employment.anchor_year", "Jahr für letzter Monat", when=employed),
        Expand(_monthly_rules, when=employed),
        _special_payment("past_special_payments.weihnachtsgeld", "das Weihnachtsgeld", "vergangenen"),
        _special_payment("upcoming_special_payments.weihnachtsgeld", "das Weihnachtsgeld", "kommenden"),
        _special_payment("past_special_payments.urlaubsgeld", "das Urlaubsgeld", "vergangenen"),
        _special_payment("upcoming_special_payments.urlaubsgeld", "das Urlaubsgeld", "kommenden"),
        _special_payment("past_special_payments.sonstige", "sonstige Leistungen", "vergangenen"),
        _special_payment("upcoming_special_payments.sonstige", "sonstige Leistungen", "kommenden"),
        FieldRule(
            "employment.will_change_income",
            "Einkommensänderung",
            when=employed,
            code=Q,
            prompt="Bitte geben Sie an, ob sich Ihr Einkommen ändern wird.",
        ),
        FieldRule(
            "employment.income_change_date",
            "Das Datum der Einkommensänderung",
            when=changing,
            code=Q,
            prompt="Bitte geben Sie das Datum der Einkommensänderung an.",
            checks=(checks.change_date(),),
        ),
        FieldRule(
            "employment.will_change_increase",
            "Richtung der Einkommensänderung",
            when=changing,
            code=Q,
            prompt="Bitte geben Sie an, ob das Einkommen steigt oder sinkt.",
        ),
        FieldRule("employment.new_income", "Neuer Betrag", when=changing, checks=(checks.amount(),)),
        FieldRule(
            "employment.is_new_income_monthly",
            "Turnus des neuen Betrags",
            when=changing,
            code=Q,
            prompt="Bitte geben Sie an, ob der neue Betrag monatlich oder jährlich ist.",
        ),
        FieldRule(
            "employment.new_income_reason",
            "Begründung",
            when=changing,
            code=Q,
            prompt="Bitte geben Sie eine Begründung für die Einkommensänderung an.",
        ),
        FieldRule(
            "employment.employment_start",
            "Beschäftigungsbeginn",
            when=employed,
            code=Q,
            prompt="Bitte geben Sie das Beschäftigungsbeginn-Datum an.",
            checks=(checks.employment_start(),),
        ),
        FieldRule(
            "employment.is_contract_limited",
            "Befristung",
            when=employed,
            code=Q,
            prompt="Bitte geben Sie an, ob Ihr Vertrag befristet oder unbefristet ist.",
        ),
        FieldRule(
            "employment.contract_end",
            "Vertragsende",
            when=limited,
            code=Q,
            prompt="Bitte geben Sie das Ende des befristeten Vertrags an.",
            checks=(checks.contract_end(),),
        ),
    ),
)


# =============================================================================
# ADDITIONAL INCOME
# =============================================================================

def _additional_income_rules(ctx: EvaluationContext):
    entry: IncomeEntry = ctx.node
    policy = policy_for(entry.category)
    name = policy.short_label
    daily_capable = entry.category == IncomeCategory.ARBEITSLOSENGELD
    periodicity = FieldRule(
        "periodicity",
        f"{'Zeitraum' if daily_capable else 'Turnus'} für {name}",
        checks=(checks.periodicity_allowed(),),
    )

    rules = []
    chooses_periodicity = len(policy.allowed) > 1 and not daily_capable
    if chooses_periodicity:
        rules.append(periodicity)
    if policy.year_required:
        rules.append(
            FieldRule("year", f"Jahr für {name}", when=field("periodicity").one_of(policy.year_required))
        )
    rules.append(FieldRule("amount", f"Betrag für {name}", checks=(checks.amount(),)))
    if not chooses_periodicity:
        rules.append(periodicity)
    return rules


ADDITIONAL_INCOME = _section(
    "additional-income",
    "Weitere Einkünfte",
    (ForEach("additional_incomes", (Expand(_additional_income_rules),)),),
)


# =============================================================================
# COSTS
# =============================================================================

pays_maintenance = field("costs.pays_maintenance").is_(True)


def _question(path: str, prompt: str) -> FieldRule:
    return FieldRule(path, prompt, code=Q, prompt=prompt)


COSTS = _section(
    "costs",
    "Kosten, Zahlungen, und Abgaben",
    (
        FieldRule("costs.werbungskosten", "Werbungskosten", when=employed, checks=(checks.amount(),)),
        _question("costs.pays_income_tax", "Bitte geben Sie an, ob Sie Einkommensteuer zahlen"),
        _question("costs.pays_health_insurance", "Bitte geben Sie an, ob Sie Krankenversicherung zahlen"),
        _question("costs.pays_pension_insurance", "Bitte geben Sie an, ob Sie Rentenversicherung zahlen"),
        _question("costs.pays_maintenance", "Bitte geben Sie an, ob Sie Unterhalt zahlen"),
        FieldRule(
            "costs.maintenance_payments",
            "Unterhaltszahlungen",
            when=pays_maintenance,
            code=ErrorCode.MAINTENANCE_PAYMENT_MISSING,
        ),
        ForEach(
            "costs.maintenance_payments",
            when=pays_maintenance,
            vars=lambda item, index: {"n": index + 1},
            rules=(
                FieldRule("name", "Name für Person {n} bei Unterhaltszahlungen"),
                FieldRule(
                    "amount",
                    "Betrag für Person {n} bei Unterhaltszahlungen",
                    checks=(checks.amount(),),
                ),
            ),
        ),
    ),
)


# =============================================================================
# CHANGES
# =============================================================================

CHANGES = _section(
    "changes",
    "Änderung der weiteren Einkünfte, Kosten und Zahlungen",
    (
        ForEach(
            "changes",
            vars=lambda change, index: {"type_label": policy_for(change.type).label},
            rules=(
                FieldRule(
                    "date",
                    "Das Änderungsdatum für {type_label}",
                    code=Q,
                    prompt="Bitte geben Sie das Änderungsdatum für {type_label} an.",
                    checks=(checks.change_date(),),
                ),
                FieldRule("new_amount", "Neuer Betrag für {type_label}", checks=(checks.amount(),)),
                FieldRule(
                    "increase",
                    "Richtung der Änderung für {type_label}",
                    code=Q,
                    prompt="Bitte geben Sie an, ob sich das Einkommen für {type_label} erhöht oder verringert.",
                    checks=(checks.increase_consistent(),),
                ),
                FieldRule(
                    "is_new_income_monthly",
                    "Turnus für {type_label}",
                    code=Q,
                    prompt="Bitte geben Sie an, ob der neue Betrag für {type_label} monatlich oder jährlich ist.",
                    checks=(checks.change_periodicity_allowed(),),
                ),
                FieldRule(
                    "reason",
                    "Begründung für {type_label}",
                    code=Q,
                    prompt="Bitte geben Sie eine Begründung für die Änderung bei {type_label} an.",
                ),
            ),
        ),
    ),
)


# =============================================================================
# LEGAL
# =============================================================================

LEGAL = _section(
    "legal",
    "Gesetzliche Angaben",
    (
        FieldRule("legal.finanzamt", "Zuständiges Finanzamt"),
        FieldRule("legal.steuer_id", "Steuer-ID"),
    ),
)

SECTIONS = (PERSONAL, INCOME, ADDITIONAL_INCOME, COSTS, CHANGES, LEGAL)
