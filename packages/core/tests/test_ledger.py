"""Tests for the self-help cost ledger."""

import pytest

from foerder_core.exceptions import RuleDefinitionError
from foerder_core.ledger import JOB_CATEGORIES, CostLedger, category, normalise_entries
from foerder_core.messages import render, render_all
from foerder_core.models import CostLedgerEntry, ErrorCategory, ErrorCode, Helper


def ledger(*entries: CostLedgerEntry) -> CostLedger:
    return CostLedger(normalise_entries(entries))


class TestCategories:
    """Test suite for the fixed job categories."""

    def test_table_order(self):
        """The ledger has twenty-three rows, numbered by group."""
        assert len(JOB_CATEGORIES) == 23
        assert JOB_CATEGORIES[0].label == "1.1 Erdarbeiten"
        assert JOB_CATEGORIES[-1].number == "3.4"

    def test_unknown_category(self):
        """Unknown keys are a rule definition error."""
        with pytest.raises(RuleDefinitionError):
            category("keller")

    def test_normalise_fills_and_orders(self):
        """Normalising yields one row per category in table order."""
        entries = normalise_entries(
            [CostLedgerEntry(category="elektro", material="10"), CostLedgerEntry(category="erdarbeiten")]
        )

        assert [e.category for e in entries] == [c.key for c in JOB_CATEGORIES]
        assert entries[13].material == "10"

    def test_normalise_rejects_unknown(self):
        """Rows for unknown categories are rejected."""
        with pytest.raises(RuleDefinitionError):
            normalise_entries([CostLedgerEntry(category="keller")])


class TestRowErrors:
    """Test suite for per-row completeness and limits."""

    def test_empty_rows_are_fine(self):
        """Untouched rows need nothing."""
        assert ledger().row_errors() == []

    def test_partial_row(self):
        """A started row must be completed."""
        errors = ledger(CostLedgerEntry(category="erdarbeiten", material="500")).row_errors()

        assert render_all(errors) == [
            "1.1 Erdarbeiten: Lohnkosten fehlen",
            "1.1 Erdarbeiten: Selbsthilfe-Angabe fehlt",
        ]
        assert errors[0].path == "self_help.entries.0.labor"

    def test_free_text_row_needs_description(self):
        """Free-text rows also need a description."""
        errors = ledger(CostLedgerEntry(category="sonstige", material="500")).row_errors()

        assert render_all(errors) == [
            "1.15 Sonstige Gebäudearbeiten: Beschreibung fehlt",
            "1.15 Sonstige Gebäudearbeiten: Lohnkosten fehlen",
            "1.15 Sonstige Gebäudearbeiten: Selbsthilfe-Angabe fehlt",
        ]

    def test_self_help_exceeds_costs(self):
        """Self-help cannot exceed material and labour together."""
        entry = CostLedgerEntry(category="elektro", material="100,00", labor="200,00", self_help="300,01")

        [error] = ledger(entry).row_errors()

        assert error.code == ErrorCode.SELF_HELP_EXCEEDS_COSTS
        assert error.category == ErrorCategory.CROSS_FIELD
        assert render(error) == (
            "1.14 Elektroarbeiten: Selbsthilfe (300,01 €) ist höher als "
            "Material- und Lohnkosten zusammen (300,00 €)"
        )

    def test_self_help_equal_to_costs(self):
        """Self-help may use up the full costs."""
        entry = CostLedgerEntry(category="elektro", material="100,00", labor="200,00", self_help="300,00")

        assert ledger(entry).row_errors() == []


class TestAggregate:
    """Test suite for totals and the declared total."""

    @pytest.fixture
    def filled(self) -> CostLedger:
        return ledger(
            CostLedgerEntry(category="erdarbeiten", material="1.000", labor="500", self_help="300,00"),
            CostLedgerEntry(category="elektro", material="400", labor="200", self_help="200,00"),
        )

    def test_totals(self, filled: CostLedger):
        """Totals are summed in cents."""
        totals = filled.totals()

        assert totals.material == 140000
        assert totals.labor == 70000
        assert totals.self_help == 50000

    def test_matching_total(self, filled: CostLedger):
        """No error when the totals agree."""
        assert filled.aggregate_errors(50000) == []

    def test_nothing_declared(self, filled: CostLedger):
        """Without a declared figure there is nothing to compare."""
        assert filled.aggregate_errors(None) == []

    def test_mismatch_reported_once(self, filled: CostLedger):
        """A mismatch is one cross-form error naming both figures."""
        [error] = filled.aggregate_errors(45000)

        assert filled.row_errors() == []
        assert error.category == ErrorCategory.CROSS_FORM
        assert render(error) == (
            "Die Gesamtsumme der Selbsthilfeleistungen (500,00 €) weicht von der "
            "Angabe im Hauptantrag ab (450,00 €)"
        )

    def test_costed_categories(self, filled: CostLedger):
        """Only rows with a positive self-help share count as costed."""
        assert filled.costed_categories() == frozenset({"erdarbeiten", "elektro"})
        assert not filled.has_self_help("sanitaer")


class TestHelperErrors:
    """Test suite for helper job selections."""

    def test_uncosted_job(self):
        """Selecting a job without self-help costs is reported."""
        costed = ledger(CostLedgerEntry(category="elektro", material="1", labor="1", self_help="1"))
        helper = Helper(job_categories=("elektro", "sanitaer"))

        [error] = costed.helper_errors(helper, "Helfer 1", "self_help.helpers.1")

        assert error.path == "self_help.helpers.1.job_categories"
        assert render(error) == 'Helfer 1: Für ausgewählte Arbeit "1.12 Sanitäre Installation" sind keine Selbsthilfekosten definiert'

    def test_unknown_job_key(self):
        """A job key outside the category table references no costed row."""
        costed = ledger(CostLedgerEntry(category="erdarbeiten", material="1", labor="1", self_help="1"))
        helper = Helper(job_categories=("erdarbeiten", "doesnotexist"))

        [error] = costed.helper_errors(helper, "Helfer 2", "self_help.helpers.1")

        assert error.code == ErrorCode.HELPER_JOB_NOT_COSTED
        assert error.params["job_key"] == "doesnotexist"
        assert render(error) == 'Helfer 2: Für ausgewählte Arbeit "doesnotexist" sind keine Selbsthilfekosten definiert'
