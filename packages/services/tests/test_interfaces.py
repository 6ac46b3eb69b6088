"""Tests for lookup results and roster payload parsing."""

import pytest

from foerder_core.exceptions import RosterError
from foerder_core.identity import DuplicateAdvisory, RosterEntry
from foerder_services.duplicates import parse_roster
from foerder_services.interfaces import LookupResult, LookupStatus


class TestLookupResult:
    """Test suite for LookupResult."""

    def test_match(self):
        """Matches carry the advisory and its row."""
        advisory = DuplicateAdvisory(row_id="p1", match=RosterEntry(id="r1"))

        result = LookupResult.match(advisory)

        assert result.is_match
        assert result.row_id == "p1"
        assert result.applied

    def test_failed(self):
        """Failures reach the applicant as a non-match."""
        result = LookupResult.failed("p1", "timeout")

        assert result.status == LookupStatus.FAILED
        assert result.error == "timeout"
        assert not result.is_match
        assert result.applied

    def test_superseded_not_applied(self):
        """Superseded and cancelled results are dropped."""
        assert not LookupResult(status=LookupStatus.SUPERSEDED, row_id="p1").applied
        assert not LookupResult(status=LookupStatus.CANCELLED, row_id="p1").applied


class TestParseRoster:
    """Test suite for parse_roster."""

    def test_mappings_and_models(self):
        """Mappings are validated and extra keys kept."""
        entry = RosterEntry(id="r2", first_name="Erika")

        roster = parse_roster([{"id": "r1", "first_name": "Max", "nationality": "deutsch"}, entry])

        assert [e.id for e in roster] == ["r1", "r2"]
        assert roster[0].model_extra == {"nationality": "deutsch"}
        assert roster[1] is entry

    def test_not_a_list(self):
        """Non-list payloads are corrupt."""
        with pytest.raises(RosterError) as exc_info:
            parse_roster("r1,r2", provider="AccountRoster")

        assert exc_info.value.details == {"type": "str", "provider": "AccountRoster"}
        assert exc_info.value.recoverable

    def test_entry_without_id(self):
        """Every roster entry needs an id."""
        with pytest.raises(RosterError):
            parse_roster([{"first_name": "Max"}])
