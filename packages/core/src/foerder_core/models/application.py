"""Application record models for the subsidy wizard.

The record is a nested, immutable tree keyed by wizard step. Every edit
produces a new complete record (see ``foerder_core.snapshot``), so the
validators always see a consistent snapshot and never a half-applied write.

Amounts and dates are stored as the text the applicant typed. Parsing
happens in the validators, which is what lets them tell "missing" from
"malformed".
"""

from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid4().hex


# =============================================================================
# ENUMERATIONS
# =============================================================================

class WizardStep(str, Enum):
    """Top-level steps of the application record."""

    PERSONAL_INFO = "personal_info"
    INCOME_DECLARATION = "income_declaration"
    SELF_DISCLOSURE = "self_disclosure"
    SELF_HELP = "self_help"


class Periodicity(str, Enum):
    """How often an amount is paid."""

    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class IncomeCategory(str, Enum):
    """Additional income categories of the income declaration."""

    RENTEN = "renten"
    VERMIETUNG = "vermietung"
    GEWERBE = "gewerbe"
    LANDFORST = "landforst"
    SONSTIGE = "sonstige"
    UNTERHALT_STEUERFREI = "unterhaltsteuerfrei"
    UNTERHALT_STEUERPFLICHTIG = "unterhaltsteuerpflichtig"
    AUSLAND = "ausland"
    PAUSCHAL = "pauschal"
    ARBEITSLOSENGELD = "arbeitslosengeld"


class CostChangeType(str, Enum):
    """Cost positions that can be reported as changing."""

    WERBUNGSKOSTEN = "werbungskosten"
    KINDERBETREUUNGSKOSTEN = "kinderbetreuungskosten"
    UNTERHALTSZAHLUNGEN = "unterhaltszahlungen"


ChangeType = Union[IncomeCategory, CostChangeType]


class EmploymentType(str, Enum):
    """Employment situation of a person."""

    WORKER = "worker"
    EMPLOYEE = "employee"
    CIVIL_SERVANT = "civil-servant"
    APPRENTICE = "apprentice"
    RETIRED = "retired"
    UNEMPLOYED = "unemployed"
    SOLE_TRADER = "sole-trader"
    BUSINESS_OWNER = "business-owner"
    FREELANCER = "freelancer"
    FARMER = "farmer"
    PRIVATE_INCOME = "private-income"
    STUDENT = "student"
    PUPIL = "pupil"
    HOMEMAKER = "homemaker"
    NO_OCCUPATION = "no-occupation"


SELF_EMPLOYED_TYPES = frozenset({
    EmploymentType.SOLE_TRADER,
    EmploymentType.BUSINESS_OWNER,
    EmploymentType.FREELANCER,
    EmploymentType.FARMER,
    EmploymentType.PRIVATE_INCOME,
})
"""Employment types that additionally require the industry ("Branche")."""


class Title(str, Enum):
    HERR = "Herr"
    FRAU = "Frau"
    OHNE_ANREDE = "ohne Anrede"


MAIN_APPLICANT_ROLE = "Hauptantragsteller"


# =============================================================================
# PERSONAL INFORMATION
# =============================================================================

class Address(BaseModel):
    """A postal address."""

    model_config = ConfigDict(frozen=True)

    street: str = ""
    house_number: str = ""
    postal_code: str = ""
    city: str = ""

    @property
    def is_empty(self) -> bool:
        return not any(v.strip() for v in (self.street, self.house_number, self.postal_code, self.city))


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone: str = ""
    email: str = ""


class Employment(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Optional[EmploymentType] = Field(default=None, description="Employment situation")
    details: str = Field(default="", description="Industry, required for self-employed types")


class Person(BaseModel):
    """A household member listed in the application.

    The first person of the list is the main applicant. ``original_person_id``
    is a stable identity token that survives edits; it is the roster id when
    the person was copied from the known-persons roster and is used to keep
    a person from being reported as a duplicate of themselves.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    title: Optional[Title] = None
    first_name: str = ""
    last_name: str = ""
    nationality: str = ""
    birth_date: str = Field(default="", description="ISO date as entered (YYYY-MM-DD)")
    tax_id: str = ""
    address: Address = Field(default_factory=Address)
    contact: Contact = Field(default_factory=Contact)
    employment: Employment = Field(default_factory=Employment)
    is_applicant: bool = True
    role: str = ""
    original_person_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PersonalInfo(BaseModel):
    """Step 1 persons and the step 3 address of the subsidized object."""

    model_config = ConfigDict(frozen=True)

    persons: tuple[Person, ...] = ()
    subsidized_object: Address = Field(
        default_factory=Address,
        description="Address of the property the subsidy is requested for",
    )


# =============================================================================
# INCOME DECLARATION
# =============================================================================

class SpecialPayments(BaseModel):
    """One-off payments (Sonderzuwendungen) for a 12 month period."""

    model_config = ConfigDict(frozen=True)

    weihnachtsgeld: str = ""
    urlaubsgeld: str = ""
    sonstige: str = ""


class EmploymentIncome(BaseModel):
    """Income from employment or pensions of one applicant."""

    model_config = ConfigDict(frozen=True)

    income_year: str = Field(default="", description="Year of the taxable income figure")
    income_year_amount: str = ""
    anchor_month: Optional[int] = Field(
        default=None, ge=0, le=11, description="Last month of the 12 month window (0-based)"
    )
    anchor_year: Optional[int] = None
    monthly_income: dict[str, str] = Field(
        default_factory=dict,
        description='Monthly gross income keyed "{year}-{month0}"',
    )
    past_special_payments: SpecialPayments = Field(default_factory=SpecialPayments)
    upcoming_special_payments: SpecialPayments = Field(default_factory=SpecialPayments)
    will_change_income: Optional[bool] = None
    income_change_date: str = ""
    will_change_increase: Optional[bool] = None
    new_income: str = ""
    is_new_income_monthly: Optional[bool] = None
    new_income_reason: str = ""
    employment_start: str = ""
    is_contract_limited: Optional[bool] = None
    contract_end: str = ""


class IncomeEntry(BaseModel):
    """An additional income source of a given category."""

    model_config = ConfigDict(frozen=True)

    category: IncomeCategory
    amount: str = ""
    periodicity: Optional[Periodicity] = None
    year: str = Field(default="", description="Reference year for yearly figures")
    extra_fields: dict[str, str] = Field(
        default_factory=dict, description="Category-specific details, e.g. the country of foreign income"
    )


class MaintenancePayment(BaseModel):
    """Maintenance (Unterhalt) paid to one person."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    amount: str = ""


class Costs(BaseModel):
    model_config = ConfigDict(frozen=True)

    werbungskosten: str = ""
    kinderbetreuungskosten: str = ""
    pays_income_tax: Optional[bool] = None
    pays_health_insurance: Optional[bool] = None
    pays_pension_insurance: Optional[bool] = None
    pays_maintenance: Optional[bool] = None
    maintenance_payments: tuple[MaintenancePayment, ...] = ()


class ChangeEntry(BaseModel):
    """An announced change of an income or cost position."""

    model_config = ConfigDict(frozen=True)

    type: ChangeType
    date: str = ""
    new_amount: str = ""
    increase: Optional[bool] = None
    is_new_income_monthly: Optional[bool] = None
    reason: str = ""


class LegalData(BaseModel):
    model_config = ConfigDict(frozen=True)

    finanzamt: str = ""
    steuer_id: str = ""


class IncomeDeclaration(BaseModel):
    """The income declaration (Einkommenserklärung) of one applicant."""

    model_config = ConfigDict(frozen=True)

    person_id: str
    has_employment_income: Optional[bool] = None
    employment: EmploymentIncome = Field(default_factory=EmploymentIncome)
    additional_incomes: tuple[IncomeEntry, ...] = ()
    costs: Costs = Field(default_factory=Costs)
    changes: tuple[ChangeEntry, ...] = ()
    legal: LegalData = Field(default_factory=LegalData)

    def income_for(self, category: IncomeCategory) -> Optional[IncomeEntry]:
        for entry in self.additional_incomes:
            if entry.category == category:
                return entry
        return None


class IncomeDeclarationStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    declarations: tuple[IncomeDeclaration, ...] = ()


# =============================================================================
# SELF DISCLOSURE
# =============================================================================

class NetIncomeType(str, Enum):
    """Further net income sources selectable in the self-disclosure."""

    GEWERBE = "gewerbe"
    LANDFORST = "landforst"
    KAPITAL = "kapital"
    VERMIETUNG = "vermietung"


class BenefitType(str, Enum):
    """Benefits and support payments selectable in the self-disclosure."""

    KINDERGELD = "kindergeld"
    PFLEGEGELD = "pflegegeld"
    UNTERHALT_STEUERFREI = "unterhaltsteuerfrei"
    UNTERHALT_STEUERPFLICHTIG = "unterhaltsteuerpflichtig"
    ELTERNGELD = "elterngeld"
    SONSTIGES = "sonstiges"


class AmountItem(BaseModel):
    """A typed amount row, e.g. one pension or one tax."""

    model_config = ConfigDict(frozen=True)

    type: str = ""
    amount: str = ""


class Obligation(BaseModel):
    """A running payment obligation with its end date (Laufzeit bis)."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(default="", description="Loan description or kind of obligation")
    duration: str = Field(default="", description="ISO date the obligation runs until")
    amount: str = Field(default="", description="Monthly amount")


class SelfDisclosure(BaseModel):
    """The net income self-disclosure (Selbstauskunft) of one applicant.

    Yes/no questions are None until answered. Yearly business,
    self-employed and capital figures are shown as a monthly equivalent;
    the ``monthly_*`` fields are derived and written by the engine.
    """

    model_config = ConfigDict(frozen=True)

    person_id: str

    # Net income
    has_salary_income: Optional[bool] = None
    monthly_net_salary: str = ""
    christmas_bonus: str = Field(default="", description="Weihnachtsgeld, coming 12 months")
    holiday_pay: str = Field(default="", description="Urlaubsgeld, coming 12 months")
    other_employment_income: tuple[AmountItem, ...] = ()
    income_types: tuple[NetIncomeType, ...] = ()
    yearly_business_net: str = ""
    yearly_self_employed_net: str = ""
    yearly_agriculture_net: str = ""
    yearly_capital_net: str = ""
    yearly_rental_net: str = ""
    monthly_business_net: Optional[int] = Field(default=None, description="Derived, cents")
    monthly_self_employed_net: Optional[int] = Field(default=None, description="Derived, cents")
    monthly_capital_net: Optional[int] = Field(default=None, description="Derived, cents")

    # Benefits
    has_pension_income: Optional[bool] = None
    pensions: tuple[AmountItem, ...] = ()
    benefit_types: tuple[BenefitType, ...] = ()
    monthly_child_benefit: str = ""
    monthly_care_allowance: str = ""
    monthly_maintenance_tax_free: str = ""
    monthly_maintenance_taxable: str = ""
    monthly_parental_allowance: str = ""
    other_income: tuple[AmountItem, ...] = ()

    # Monthly obligations
    taxes_and_contributions: tuple[AmountItem, ...] = ()
    is_paying_loans: Optional[bool] = None
    loans: tuple[Obligation, ...] = ()
    is_paying_bridging_loan: Optional[bool] = None
    bridging_loans: tuple[Obligation, ...] = ()
    is_paying_maintenance: Optional[bool] = None
    maintenance_obligations: tuple[Obligation, ...] = ()
    has_other_obligations: Optional[bool] = None
    other_obligations: tuple[Obligation, ...] = ()
    has_building_savings: Optional[bool] = None
    building_savings_institute: str = ""
    building_savings_rate: str = ""
    has_life_insurance: Optional[bool] = None
    life_insurance_institute: str = ""
    life_insurance_premium: str = ""

    # Further details
    expenses_payable: str = ""
    bank_overdraft: str = ""
    debt_payable: str = ""
    has_guarantee: Optional[bool] = None


class SelfDisclosureStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    disclosures: tuple[SelfDisclosure, ...] = ()


# =============================================================================
# SELF HELP
# =============================================================================

class CostLedgerEntry(BaseModel):
    """One row of the self-help cost breakdown (Selbsthilfe)."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(description="Key of the job category, e.g. 'erdarbeiten'")
    description: str = ""
    material: str = ""
    labor: str = ""
    self_help: str = ""


class LedgerTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    material: int = 0
    labor: int = 0
    self_help: int = 0


class Helper(BaseModel):
    """A person contributing self-help work.

    The first helper is always the main applicant.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str = ""
    surname: str = ""
    email: str = ""
    job_title: str = ""
    job_categories: tuple[str, ...] = Field(default=(), description="Job category keys")
    hours: str = ""
    address: Address = Field(default_factory=Address)

    @property
    def has_data(self) -> bool:
        texts = (self.name, self.surname, self.email, self.job_title, self.hours)
        return any(t.strip() for t in texts) or bool(self.job_categories) or not self.address.is_empty


class SelfHelpStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    will_provide_self_help: Optional[bool] = None
    main_applicant_will_help: Optional[bool] = None
    entries: tuple[CostLedgerEntry, ...] = ()
    helpers: tuple[Helper, ...] = ()
    totals: LedgerTotals = Field(default_factory=LedgerTotals, description="Derived")


class Financing(BaseModel):
    """Figures from the main application's financing step."""

    model_config = ConfigDict(frozen=True)

    declared_self_help: str = Field(default="", description="Self-help total declared in step 6")


# =============================================================================
# RECORD
# =============================================================================

class ValidationFlags(BaseModel):
    """Per-step "validation activated" flags.

    A step's errors are hidden until the applicant first tries to submit or
    advance past it.
    """

    model_config = ConfigDict(frozen=True)

    personal_info: bool = False
    income_declaration: bool = False
    self_disclosure: bool = False
    self_help: bool = False

    def is_active(self, step: WizardStep) -> bool:
        return bool(getattr(self, step.value))


class ApplicationRecord(BaseModel):
    """The complete, immutable snapshot of one application."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    income_declaration: IncomeDeclarationStep = Field(default_factory=IncomeDeclarationStep)
    self_disclosure: SelfDisclosureStep = Field(default_factory=SelfDisclosureStep)
    self_help: SelfHelpStep = Field(default_factory=SelfHelpStep)
    financing: Financing = Field(default_factory=Financing)
    validation: ValidationFlags = Field(default_factory=ValidationFlags)

    @property
    def applicants(self) -> tuple[Person, ...]:
        return tuple(p for i, p in enumerate(self.personal_info.persons) if i == 0 or p.is_applicant)

    def declaration_for(self, person_id: str) -> Optional[IncomeDeclaration]:
        for declaration in self.income_declaration.declarations:
            if declaration.person_id == person_id:
                return declaration
        return None

    def disclosure_for(self, person_id: str) -> Optional[SelfDisclosure]:
        for disclosure in self.self_disclosure.disclosures:
            if disclosure.person_id == person_id:
                return disclosure
        return None

    def person(self, person_id: str) -> Optional[Person]:
        for person in self.personal_info.persons:
            if person.id == person_id:
                return person
        return None
