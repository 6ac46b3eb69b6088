"""Debounced duplicate detection against the known-persons roster.

Each edit of a person's first name, last name or birth date schedules a
roster lookup for that row after a quiet period. Scheduling again for the
same row cancels the pending lookup, and a lookup that finishes after it
was superseded is discarded, so only the latest edit of a row can ever
surface an advisory. Roster failures are logged and reported as "no match";
they never hold the applicant up.

Example:
    detector = DuplicateDetector(AccountRoster(), on_result=show_advisory)

    async def on_edit(person, previous):
        detector.on_field_edit(person.id, person, "last_name", previous)
"""

import asyncio
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError

from foerder_core.exceptions import ConfigurationError, RosterError
from foerder_core.identity import (
    IDENTITY_FIELDS,
    DuplicateAdvisory,
    PersonIdentity,
    RosterEntry,
    find_duplicate,
)
from foerder_core.models.application import Person
from foerder_services.config import DetectorConfig
from foerder_services.interfaces.base import LookupResult, LookupStatus, RosterPayload, RosterProvider

logger = structlog.get_logger()

ResultCallback = Callable[[LookupResult], Any]


def parse_roster(payload: RosterPayload, provider: Optional[str] = None) -> list[RosterEntry]:
    """Validate a roster payload.

    Args:
        payload: What the provider returned.
        provider: Provider name, for error context.

    Raises:
        RosterError: If the payload is not a list of persons.
    """
    if payload is None or isinstance(payload, (str, bytes)):
        raise RosterError(
            "Roster payload is not a list", provider=provider, details={"type": type(payload).__name__}
        )
    try:
        return [e if isinstance(e, RosterEntry) else RosterEntry.model_validate(e) for e in payload]
    except (ValidationError, TypeError) as e:
        raise RosterError(f"Corrupt roster entry: {e}", provider=provider) from e


class DuplicateDetector:
    """Schedules and runs roster lookups, one pending lookup per row.

    Must be used from a running event loop.
    """

    def __init__(
        self,
        provider: RosterProvider,
        config: Optional[DetectorConfig] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        """
        Args:
            provider: Known-persons roster.
            config: Detector settings (default: loaded from the environment).
            on_result: Called with every result that should reach the
                applicant, i.e. not superseded.
        """
        if not isinstance(provider, RosterProvider):
            raise ConfigurationError(
                "Roster provider must implement fetch_known_persons()",
                config_key="provider",
                expected="RosterProvider",
                actual=type(provider).__name__,
            )
        self.provider = provider
        self.config = config or DetectorConfig()
        self.on_result = on_result
        self._tasks: dict[str, asyncio.Task] = {}
        self._generations: dict[str, int] = {}

    @property
    def pending_rows(self) -> frozenset[str]:
        return frozenset(row for row, task in self._tasks.items() if not task.done())

    def on_field_edit(
        self,
        row_id: str,
        person: Person,
        field: str,
        previous: Optional[Person] = None,
    ) -> Optional[asyncio.Task]:
        """Schedule a lookup for an edited person row.

        Args:
            row_id: Id of the edited person.
            person: Person values after the edit.
            field: Name of the edited field; only identity fields schedule.
            previous: Person values before the edit, restored on revert.

        Returns:
            The scheduled task, or None when nothing was scheduled.
        """
        if not self.config.enabled or field not in IDENTITY_FIELDS:
            return None

        self.cancel(row_id)
        generation = self._generations.get(row_id, 0) + 1
        self._generations[row_id] = generation
        task = asyncio.get_running_loop().create_task(self._run(row_id, person, previous, generation))
        self._tasks[row_id] = task
        logger.debug("duplicate_lookup_scheduled", row_id=row_id, field=field, generation=generation)
        return task

    def cancel(self, row_id: str) -> bool:
        """Cancel the pending lookup of a row. Returns whether one was pending."""
        self._generations[row_id] = self._generations.get(row_id, 0) + 1
        task = self._tasks.pop(row_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("duplicate_lookup_cancelled", row_id=row_id)
        return True

    def cancel_all(self) -> int:
        return sum(1 for row in list(self._tasks) if self.cancel(row))

    async def wait(self, row_id: str) -> Optional[LookupResult]:
        """Wait for the latest lookup of a row; None if there is none or it was cancelled."""
        task = self._tasks.get(row_id)
        if task is None:
            return None
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def _fetch(self) -> list[RosterEntry]:
        payload = await self.provider.fetch_known_persons()
        return parse_roster(payload, provider=type(self.provider).__name__)

    async def _run(
        self,
        row_id: str,
        person: Person,
        previous: Optional[Person],
        generation: int,
    ) -> LookupResult:
        await asyncio.sleep(self.config.quiet_period)

        if not PersonIdentity.of(person).is_complete:
            result = LookupResult.no_match(row_id)
        else:
            try:
                roster = await self._fetch()
            except RosterError as e:
                logger.warning("roster_corrupt", row_id=row_id, error=str(e), details=e.details)
                result = LookupResult.failed(row_id, str(e))
            except Exception as e:
                logger.warning("roster_lookup_failed", row_id=row_id, error=str(e), error_type=type(e).__name__)
                result = LookupResult.failed(row_id, f"Roster lookup failed: {e}")
            else:
                match = find_duplicate(person, roster)
                if match is None:
                    result = LookupResult.no_match(row_id)
                else:
                    result = LookupResult.match(DuplicateAdvisory(row_id=row_id, match=match, previous=previous))

        if self._generations.get(row_id) != generation:
            logger.debug("duplicate_lookup_superseded", row_id=row_id, generation=generation)
            return LookupResult(status=LookupStatus.SUPERSEDED, row_id=row_id)

        if result.is_match:
            logger.info("duplicate_found", row_id=row_id, match_id=result.advisory.match.id)
        if self.on_result is not None:
            self.on_result(result)
        return result


__all__ = ["DuplicateDetector", "parse_roster", "ResultCallback"]
