"""Foerder Core - Validation and derived state for subsidy applications."""

__version__ = "0.1.0"

from .config import EngineConfig
from .engine import Change, EngineResult, ValidationEngine
from .household import add_applicant, main_applicant, remove_applicant
from .models import ApplicationRecord, FieldError, SectionResult, WizardStep

__all__ = [
    "EngineConfig",
    "Change",
    "EngineResult",
    "ValidationEngine",
    "add_applicant",
    "main_applicant",
    "remove_applicant",
    "ApplicationRecord",
    "FieldError",
    "SectionResult",
    "WizardStep",
]
