"""Person identity matching against the known-persons roster.

Two people are considered the same when first name, last name (both trimmed
and case-folded) and birth date (exact text) agree. All three parts must be
filled in before a match is attempted.
"""

from typing import Any, Iterable, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from foerder_core.models.application import ApplicationRecord, Person
from foerder_core.models.results import AdvisoryOutcome
from foerder_core.snapshot import join_path, set_at

logger = structlog.get_logger()

IDENTITY_FIELDS = frozenset({"first_name", "last_name", "birth_date"})
"""Person fields whose edits can change the identity."""


class RosterEntry(BaseModel):
    """A person already known to the applicant account."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    first_name: str = ""
    last_name: str = ""
    birth_date: str = ""


class PersonIdentity(BaseModel):
    """Normalized identity key of a person."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    birth_date: str

    @classmethod
    def of(cls, person: Union[Person, RosterEntry, Mapping[str, Any]]) -> "PersonIdentity":
        if isinstance(person, Mapping):
            values = [str(person.get(k) or "") for k in ("first_name", "last_name", "birth_date")]
        else:
            values = [person.first_name, person.last_name, person.birth_date]
        first, last, born = values
        return cls(
            first_name=first.strip().lower(),
            last_name=last.strip().lower(),
            birth_date=born,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.first_name and self.last_name and self.birth_date.strip())

    def matches(self, other: "PersonIdentity") -> bool:
        if not (self.is_complete and other.is_complete):
            return False
        return (
            self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.birth_date == other.birth_date
        )


def find_duplicate(person: Person, roster: Iterable[RosterEntry]) -> Optional[RosterEntry]:
    """Return the first roster entry matching ``person``.

    The entry the person was copied from (``original_person_id``) is never
    reported.
    """
    identity = PersonIdentity.of(person)
    if not identity.is_complete:
        return None
    for entry in roster:
        if person.original_person_id and entry.id == person.original_person_id:
            continue
        if identity.matches(PersonIdentity.of(entry)):
            return entry
    return None


class DuplicateAdvisory(BaseModel):
    """A blocking notice that an edited person matches a known person.

    The applicant either accepts the edit and continues or reverts the
    person to the values it had before the edit.
    """

    model_config = ConfigDict(frozen=True)

    row_id: str = Field(description="Id of the edited person")
    match: RosterEntry
    previous: Optional[Person] = Field(
        default=None, description="Person values before the edit, restored on revert"
    )

    @property
    def outcomes(self) -> tuple[AdvisoryOutcome, ...]:
        return (AdvisoryOutcome.ACCEPT_AND_CONTINUE, AdvisoryOutcome.REVERT)


def resolve_duplicate(
    record: ApplicationRecord,
    advisory: DuplicateAdvisory,
    outcome: AdvisoryOutcome,
) -> ApplicationRecord:
    """Apply the applicant's answer to a duplicate advisory."""
    if outcome == AdvisoryOutcome.ACCEPT_AND_CONTINUE or advisory.previous is None:
        logger.info("duplicate_accepted", row_id=advisory.row_id, match_id=advisory.match.id)
        return record

    for index, person in enumerate(record.personal_info.persons):
        if person.id == advisory.row_id:
            restored = person.model_copy(
                update={name: getattr(advisory.previous, name) for name in IDENTITY_FIELDS}
            )
            logger.info("duplicate_reverted", row_id=advisory.row_id)
            return set_at(record, join_path("personal_info", "persons", index), restored)

    logger.warning("duplicate_row_missing", row_id=advisory.row_id)
    return record


__all__ = [
    "IDENTITY_FIELDS",
    "RosterEntry",
    "PersonIdentity",
    "find_duplicate",
    "DuplicateAdvisory",
    "resolve_duplicate",
]
