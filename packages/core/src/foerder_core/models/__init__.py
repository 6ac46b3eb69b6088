"""Data models for foerder-core.

This package provides:
- The immutable application record and its parts (application.py)
- Validation results, error codes and field states (results.py)
"""

from foerder_core.models.application import (
    # Enumerations
    WizardStep,
    Periodicity,
    IncomeCategory,
    CostChangeType,
    ChangeType,
    EmploymentType,
    SELF_EMPLOYED_TYPES,
    Title,
    MAIN_APPLICANT_ROLE,
    # Personal information
    Address,
    Contact,
    Employment,
    Person,
    PersonalInfo,
    # Income declaration
    SpecialPayments,
    EmploymentIncome,
    IncomeEntry,
    MaintenancePayment,
    Costs,
    ChangeEntry,
    LegalData,
    IncomeDeclaration,
    IncomeDeclarationStep,
    # Self disclosure
    NetIncomeType,
    BenefitType,
    AmountItem,
    Obligation,
    SelfDisclosure,
    SelfDisclosureStep,
    # Self help
    CostLedgerEntry,
    LedgerTotals,
    Helper,
    SelfHelpStep,
    Financing,
    # Record
    ValidationFlags,
    ApplicationRecord,
)
from foerder_core.models.results import (
    AdvisoryOutcome,
    ErrorCategory,
    ErrorCode,
    FieldError,
    FieldState,
    FieldStatus,
    SectionResult,
)

__all__ = [
    "WizardStep",
    "Periodicity",
    "IncomeCategory",
    "CostChangeType",
    "ChangeType",
    "EmploymentType",
    "SELF_EMPLOYED_TYPES",
    "Title",
    "MAIN_APPLICANT_ROLE",
    "Address",
    "Contact",
    "Employment",
    "Person",
    "PersonalInfo",
    "SpecialPayments",
    "EmploymentIncome",
    "IncomeEntry",
    "MaintenancePayment",
    "Costs",
    "ChangeEntry",
    "LegalData",
    "IncomeDeclaration",
    "IncomeDeclarationStep",
    "NetIncomeType",
    "BenefitType",
    "AmountItem",
    "Obligation",
    "SelfDisclosure",
    "SelfDisclosureStep",
    "CostLedgerEntry",
    "LedgerTotals",
    "Helper",
    "SelfHelpStep",
    "Financing",
    "ValidationFlags",
    "ApplicationRecord",
    "AdvisoryOutcome",
    "ErrorCategory",
    "ErrorCode",
    "FieldError",
    "FieldState",
    "FieldStatus",
    "SectionResult",
]
