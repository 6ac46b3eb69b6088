"""Applicant persons and the subsidized object's address."""

from foerder_core import checks
from foerder_core.models.application import SELF_EMPLOYED_TYPES, ApplicationRecord, Person, WizardStep
from foerder_core.rules import FieldRule, Scope, SectionSpec, field


def applicant_scopes(record: ApplicationRecord) -> list[Scope]:
    """One scope per applicant; the first person always applies."""
    scopes = []
    for index, person in enumerate(record.personal_info.persons):
        if index == 0:
            prefix = "Hauptantragsteller: "
        elif person.is_applicant:
            prefix = f"Zusätzlicher Antragsteller {index}: "
        else:
            continue
        scopes.append(Scope(path=f"personal_info.persons.{index}", label_prefix=prefix))
    return scopes


def applicant_title(person: Person, index: int) -> str:
    """How an applicant is named in per-applicant section titles."""
    if person.first_name and person.last_name:
        return f"{person.first_name} {person.last_name}"
    return "Hauptantragsteller" if index == 0 else f"Person {index + 1}"


is_self_employed = field("employment.type").one_of(SELF_EMPLOYED_TYPES)

APPLICANTS = SectionSpec(
    id="hauptantrag-step1",
    title="Schritt 1: Antragstellende Personen",
    step=WizardStep.PERSONAL_INFO,
    scopes=applicant_scopes,
    reads=("personal_info.persons",),
    rules=(
        FieldRule("title", "Titel"),
        FieldRule("first_name", "Vorname"),
        FieldRule("last_name", "Name"),
        FieldRule("birth_date", "Geburtsdatum", checks=(checks.birth_date(),)),
        FieldRule("nationality", "Staatsangehörigkeit"),
        FieldRule("tax_id", "Steuer-ID"),
        FieldRule("address.street", "Straße"),
        FieldRule("address.house_number", "Hausnummer"),
        FieldRule("address.postal_code", "Postleitzahl", checks=(checks.postal_code(),)),
        FieldRule("address.city", "Ort"),
        FieldRule("contact.phone", "Telefonnummer"),
        FieldRule("contact.email", "E-Mail", checks=(checks.email(),)),
        FieldRule("employment.type", "Beschäftigungsart"),
        FieldRule("employment.details", "Branche", when=is_self_employed),
    ),
)

SUBSIDIZED_OBJECT = SectionSpec(
    id="hauptantrag-step3",
    title="Schritt 3: Objektdetails",
    step=WizardStep.PERSONAL_INFO,
    reads=("personal_info.subsidized_object",),
    rules=(
        FieldRule("personal_info.subsidized_object.street", "Straße"),
        FieldRule("personal_info.subsidized_object.house_number", "Hausnummer"),
        FieldRule(
            "personal_info.subsidized_object.postal_code",
            "Postleitzahl",
            checks=(checks.postal_code(regional=True),),
        ),
        FieldRule("personal_info.subsidized_object.city", "Stadt"),
    ),
)

SECTIONS = (APPLICANTS, SUBSIDIZED_OBJECT)
