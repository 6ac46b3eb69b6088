"""Validation result models.

Errors carry a stable code, a category and the parameters needed to word
them. The German wording lives in ``foerder_core.messages`` and is produced
as a separate formatting step.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from foerder_core.models.application import WizardStep


class ErrorCategory(str, Enum):
    """The four kinds of validation failure."""

    FIELD_REQUIRED = "field-required"
    FIELD_MALFORMED = "field-malformed"
    CROSS_FIELD = "cross-field-inconsistent"
    CROSS_FORM = "cross-form-inconsistent"


class ErrorCode(str, Enum):
    """Stable identifiers for every validation failure."""

    # Required
    REQUIRED = "required"
    MISSING = "missing"
    QUESTION_UNANSWERED = "question_unanswered"
    MONTHLY_INCOME_REQUIRED = "monthly_income_required"
    MAINTENANCE_PAYMENT_MISSING = "maintenance_payment_missing"
    NO_SELF_HELP_COSTS = "no_self_help_costs"
    AT_LEAST_ONE_AMOUNT = "at_least_one_amount"

    # Malformed
    AMOUNT_FORMAT = "amount_format"
    DATE_FORMAT = "date_format"
    POSTAL_CODE_FORMAT = "postal_code_format"
    POSTAL_CODE_REGION = "postal_code_region"
    EMAIL_FORMAT = "email_format"
    BIRTH_DATE_RANGE = "birth_date_range"
    CHANGE_DATE_RANGE = "change_date_range"
    EMPLOYMENT_START_RANGE = "employment_start_range"
    CONTRACT_END_RANGE = "contract_end_range"
    DATE_NOT_FUTURE = "date_not_future"
    PERIODICITY_NOT_ALLOWED = "periodicity_not_allowed"

    # Cross-field
    INCREASE_NOT_HIGHER = "increase_not_higher"
    DECREASE_NOT_LOWER = "decrease_not_lower"
    SELF_HELP_EXCEEDS_COSTS = "self_help_exceeds_costs"
    HELPER_JOB_NOT_COSTED = "helper_job_not_costed"

    # Cross-form
    SELF_HELP_TOTAL_MISMATCH = "self_help_total_mismatch"
    SELF_HELP_DECLINED_BUT_DECLARED = "self_help_declined_but_declared"


class FieldError(BaseModel):
    """A single validation failure for one field."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    category: ErrorCategory
    path: str = Field(description="Dotted record path of the field")
    label: str = Field(default="", description="Display label, already prefixed")
    params: dict[str, Any] = Field(default_factory=dict)


class FieldState(str, Enum):
    """Visible state of a field or section."""

    UNTOUCHED = "untouched"
    VALID = "valid"
    INVALID = "invalid"


class FieldStatus(BaseModel):
    """Per-field UI properties derived from the rule table."""

    model_config = ConfigDict(frozen=True)

    path: str
    label: str
    visible: bool = True
    required: bool = False
    locked: bool = False
    state: FieldState = FieldState.UNTOUCHED
    error: Optional[FieldError] = None


class SectionResult(BaseModel):
    """Evaluation of one section for one scope (the record or an applicant).

    ``issues`` always holds what the rules found; ``errors`` is what the
    applicant gets to see, which stays empty until the step's validation
    has been activated.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    step: WizardStep
    scope: str = Field(default="", description="Record path the section was evaluated at")
    activated: bool = False
    issues: tuple[FieldError, ...] = ()
    applicable_fields: int = 0

    @property
    def key(self) -> str:
        return f"{self.id}@{self.scope}" if self.scope else self.id

    @property
    def errors(self) -> tuple[FieldError, ...]:
        return self.issues if self.activated else ()

    @property
    def state(self) -> FieldState:
        if not self.activated:
            return FieldState.UNTOUCHED
        return FieldState.INVALID if self.issues else FieldState.VALID

    @property
    def success(self) -> bool:
        return not self.issues

    @computed_field  # type: ignore[prop-decorator]
    @property
    def progress_percent(self) -> int:
        """Share of applicable fields without an issue, 0-100."""
        if self.applicable_fields == 0:
            return 100
        failing = min(len(self.issues), self.applicable_fields)
        return round((self.applicable_fields - failing) * 100 / self.applicable_fields)


class AdvisoryOutcome(str, Enum):
    """The two ways an applicant can answer an advisory."""

    ACCEPT_AND_CONTINUE = "accept_and_continue"
    REVERT = "revert"
