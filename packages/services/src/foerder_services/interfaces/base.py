"""Collaborator interfaces for duplicate detection.

The known-persons roster lives outside this project (an account service, a
local cache, a test fixture). Anything with a matching async
``fetch_known_persons`` method can serve as the roster; no inheritance is
required.

Example Usage:
    ```python
    from foerder_services.interfaces.base import RosterProvider

    class AccountRoster:
        '''Reads the persons saved in the applicant's account.'''

        async def fetch_known_persons(self):
            rows = await self._client.get_persons()
            return [
                {"id": r["id"], "first_name": r["firstName"], "last_name": r["lastName"],
                 "birth_date": r["birthDate"]}
                for r in rows
            ]

    # AccountRoster is compatible with RosterProvider
    ```
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from foerder_core.identity import DuplicateAdvisory, RosterEntry


# =============================================================================
# ENUMERATIONS
# =============================================================================

class LookupStatus(str, Enum):
    """Outcome of one scheduled roster lookup."""

    MATCH = "match"
    """A known person with the same identity exists."""

    NO_MATCH = "no_match"
    """No known person matches, or the identity is incomplete."""

    FAILED = "failed"
    """The roster could not be read; treated as no match."""

    SUPERSEDED = "superseded"
    """A newer edit of the same row replaced this lookup."""

    CANCELLED = "cancelled"
    """The lookup was cancelled before it ran."""


# =============================================================================
# RESULT MODELS
# =============================================================================

class LookupResult(BaseModel):
    """Result of a roster lookup for one edited row.

    Attributes:
        status: How the lookup ended.
        row_id: Id of the edited person.
        advisory: The duplicate advisory when status is MATCH.
        error: Failure description when status is FAILED.
        completed_at: When the lookup finished.
    """

    model_config = ConfigDict(frozen=True)

    status: LookupStatus
    row_id: str
    advisory: Optional[DuplicateAdvisory] = None
    error: Optional[str] = None
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_match(self) -> bool:
        return self.status == LookupStatus.MATCH

    @property
    def applied(self) -> bool:
        """Whether the result should reach the applicant."""
        return self.status not in (LookupStatus.SUPERSEDED, LookupStatus.CANCELLED)

    @classmethod
    def match(cls, advisory: DuplicateAdvisory) -> LookupResult:
        return cls(status=LookupStatus.MATCH, row_id=advisory.row_id, advisory=advisory)

    @classmethod
    def no_match(cls, row_id: str) -> LookupResult:
        return cls(status=LookupStatus.NO_MATCH, row_id=row_id)

    @classmethod
    def failed(cls, row_id: str, message: str) -> LookupResult:
        """A lookup whose roster could not be read. Never blocks the applicant."""
        return cls(status=LookupStatus.FAILED, row_id=row_id, error=message)


# =============================================================================
# ROSTER PROTOCOL
# =============================================================================

RosterPayload = Sequence[Union[RosterEntry, Mapping[str, Any]]]


@runtime_checkable
class RosterProvider(Protocol):
    """Read-only source of previously known persons.

    Notes:
        - Implementations MUST be async-compatible
        - Entries MAY be RosterEntry models or plain mappings with ``id``,
          ``first_name``, ``last_name`` and ``birth_date`` keys
        - The detector never writes to the roster
    """

    async def fetch_known_persons(self) -> RosterPayload:
        """Return all known persons.

        Raises:
            RosterError: If the roster cannot be read. Any other exception
                is treated the same way by the detector.
        """
        ...


__all__ = [
    "LookupStatus",
    "LookupResult",
    "RosterPayload",
    "RosterProvider",
]
