"""Shared fixtures: a complete application for a single applicant."""

from datetime import date

import pytest

from foerder_core.config import EngineConfig
from foerder_core.models import (
    Address,
    ApplicationRecord,
    Contact,
    Costs,
    Employment,
    EmploymentType,
    IncomeDeclaration,
    IncomeDeclarationStep,
    LegalData,
    Person,
    PersonalInfo,
    SelfDisclosure,
    SelfDisclosureStep,
    SelfHelpStep,
    Title,
)

TODAY = date(2024, 5, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def main_person() -> Person:
    """A main applicant with every field filled in."""
    return Person(
        title=Title.HERR,
        first_name="Max",
        last_name="Mustermann",
        nationality="deutsch",
        birth_date="1980-01-01",
        tax_id="12345678901",
        address=Address(street="Hauptstraße", house_number="1", postal_code="40210", city="Düsseldorf"),
        contact=Contact(phone="0211 123456", email="max@example.de"),
        employment=Employment(type=EmploymentType.EMPLOYEE),
        role="Hauptantragsteller",
    )


@pytest.fixture
def declaration(main_person: Person) -> IncomeDeclaration:
    """An answered declaration without employment income."""
    return IncomeDeclaration(
        person_id=main_person.id,
        has_employment_income=False,
        costs=Costs(
            pays_income_tax=False,
            pays_health_insurance=False,
            pays_pension_insurance=False,
            pays_maintenance=False,
        ),
        legal=LegalData(finanzamt="Düsseldorf-Mitte", steuer_id="12345678901"),
    )


@pytest.fixture
def disclosure(main_person: Person) -> SelfDisclosure:
    """A self-disclosure with every question answered with no."""
    return SelfDisclosure(
        person_id=main_person.id,
        has_salary_income=False,
        has_pension_income=False,
        is_paying_loans=False,
        is_paying_bridging_loan=False,
        is_paying_maintenance=False,
        has_other_obligations=False,
        has_building_savings=False,
        has_life_insurance=False,
    )


@pytest.fixture
def record(main_person: Person, declaration: IncomeDeclaration, disclosure: SelfDisclosure) -> ApplicationRecord:
    """A complete record that validates without issues."""
    return ApplicationRecord(
        personal_info=PersonalInfo(
            persons=(main_person,),
            subsidized_object=Address(street="Am Markt", house_number="5", postal_code="48143", city="Münster"),
        ),
        income_declaration=IncomeDeclarationStep(declarations=(declaration,)),
        self_disclosure=SelfDisclosureStep(disclosures=(disclosure,)),
        self_help=SelfHelpStep(will_provide_self_help=False),
    )
