"""Adding and removing applicants.

Every applicant owns an income declaration and a self-disclosure, and the
three lists are kept in step here. The first person is the main applicant
and cannot be removed.
"""

from typing import Optional

import structlog

from foerder_core.exceptions import OperationNotAllowedError, RecordPathError
from foerder_core.identity import RosterEntry
from foerder_core.models.application import (
    MAIN_APPLICANT_ROLE,
    ApplicationRecord,
    IncomeDeclaration,
    Person,
    SelfDisclosure,
)

logger = structlog.get_logger()


def main_applicant(record: ApplicationRecord) -> Optional[Person]:
    persons = record.personal_info.persons
    return persons[0] if persons else None


def person_from_roster(entry: RosterEntry) -> Person:
    """A new person row prefilled from a known person.

    The roster id becomes the person's ``original_person_id`` so the row is
    never reported as a duplicate of the entry it was copied from.
    """
    extra = entry.model_extra or {}
    copied = {k: v for k, v in extra.items() if k in Person.model_fields and k not in ("id", "role")}
    return Person.model_validate(
        {
            **copied,
            "first_name": entry.first_name,
            "last_name": entry.last_name,
            "birth_date": entry.birth_date,
            "original_person_id": entry.id,
        }
    )


def add_applicant(
    record: ApplicationRecord,
    person: Optional[Person] = None,
    from_roster: Optional[RosterEntry] = None,
) -> ApplicationRecord:
    """Append an applicant with an empty income declaration and self-disclosure.

    Args:
        record: Current snapshot.
        person: The person to add; a blank person when omitted.
        from_roster: Known person to copy instead of ``person``.

    Returns:
        A new record with the person appended.
    """
    if from_roster is not None:
        person = person_from_roster(from_roster)
    elif person is None:
        person = Person()

    persons = record.personal_info.persons
    updates = {"is_applicant": True}
    if not persons and not person.role:
        updates["role"] = MAIN_APPLICANT_ROLE
    person = person.model_copy(update=updates)

    declarations = record.income_declaration.declarations
    if record.declaration_for(person.id) is None:
        declarations = declarations + (IncomeDeclaration(person_id=person.id),)
    disclosures = record.self_disclosure.disclosures
    if record.disclosure_for(person.id) is None:
        disclosures = disclosures + (SelfDisclosure(person_id=person.id),)

    logger.info(
        "applicant_added",
        person_id=person.id,
        position=len(persons),
        from_roster=from_roster.id if from_roster else None,
    )
    return record.model_copy(
        update={
            "personal_info": record.personal_info.model_copy(update={"persons": persons + (person,)}),
            "income_declaration": record.income_declaration.model_copy(update={"declarations": declarations}),
            "self_disclosure": record.self_disclosure.model_copy(update={"disclosures": disclosures}),
        }
    )


def remove_applicant(record: ApplicationRecord, person_id: str) -> ApplicationRecord:
    """Remove an applicant with their income declaration and self-disclosure.

    Raises:
        OperationNotAllowedError: For the main applicant.
        RecordPathError: If no person has ``person_id``.
    """
    persons = record.personal_info.persons
    index = next((i for i, p in enumerate(persons) if p.id == person_id), None)
    if index is None:
        raise RecordPathError(f"No person with id {person_id!r}", path="personal_info.persons")
    if index == 0:
        raise OperationNotAllowedError("The main applicant cannot be removed", operation="remove_applicant")

    remaining = persons[:index] + persons[index + 1:]
    declarations = tuple(d for d in record.income_declaration.declarations if d.person_id != person_id)
    disclosures = tuple(d for d in record.self_disclosure.disclosures if d.person_id != person_id)
    logger.info("applicant_removed", person_id=person_id, position=index)
    return record.model_copy(
        update={
            "personal_info": record.personal_info.model_copy(update={"persons": remaining}),
            "income_declaration": record.income_declaration.model_copy(update={"declarations": declarations}),
            "self_disclosure": record.self_disclosure.model_copy(update={"disclosures": disclosures}),
        }
    )


__all__ = ["main_applicant", "person_from_roster", "add_applicant", "remove_applicant"]
