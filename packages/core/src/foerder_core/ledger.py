"""Self-help cost ledger (Aufstellung der Selbsthilfeleistungen).

The ledger has one row per job category. A row that has any value filled in
must be filled in completely, and the self-help share of a row can never
exceed its material plus labour costs. The sum of all self-help shares has
to equal the self-help amount declared in the main application's financing
step; a difference is reported once, naming both figures.
"""

from typing import Iterator, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict

from foerder_core import money
from foerder_core.exceptions import RuleDefinitionError
from foerder_core.models.application import CostLedgerEntry, Helper, LedgerTotals
from foerder_core.models.results import ErrorCategory, ErrorCode, FieldError
from foerder_core.snapshot import join_path

logger = structlog.get_logger()

ENTRIES_PATH = "self_help.entries"


class JobCategory(BaseModel):
    """A fixed row of the ledger."""

    model_config = ConfigDict(frozen=True)

    key: str
    number: str
    title: str
    free_text: bool = False

    @property
    def label(self) -> str:
        return f"{self.number} {self.title}"


def _job(key: str, number: str, title: str, free_text: bool = False) -> JobCategory:
    return JobCategory(key=key, number=number, title=title, free_text=free_text)


JOB_CATEGORIES: tuple[JobCategory, ...] = (
    # 1. Building work
    _job("erdarbeiten", "1.1", "Erdarbeiten"),
    _job("maurerarbeiten", "1.2", "Maurerarbeiten Fundamente"),
    _job("putzStuck", "1.3", "Putz- und Stuckarbeiten"),
    _job("fliesenPlatten", "1.4", "Fliesen- und Plattenarbeiten"),
    _job("zimmererarbeiten", "1.5", "Zimmererarbeiten"),
    _job("dachdeckerarbeiten", "1.6", "Dachdeckerarbeiten"),
    _job("klempnerarbeiten", "1.7", "Klempnerarbeiten"),
    _job("tischlerarbeiten", "1.8", "Tischlerarbeiten"),
    _job("schlosserarbeiten", "1.9", "Schlosserarbeiten"),
    _job("anstrichTapezier", "1.10", "Anstrich- und Tapezierarbeiten"),
    _job("zentralheizung", "1.11", "Zentralheizungen"),
    _job("sanitaer", "1.12", "Sanitäre Installation"),
    _job("fussboden", "1.13", "Fußboden, Teppichbelag"),
    _job("elektro", "1.14", "Elektroarbeiten"),
    _job("sonstige", "1.15", "Sonstige Gebäudearbeiten", free_text=True),
    # 2. Outdoor facilities
    _job("gartenanlagen", "2.1", "Gartenanlagen"),
    _job("wegeflaeche", "2.2", "Wegefläche/Terrasse"),
    _job("sonstigeAussen1", "2.3", "Sonstige Außenanlagen", free_text=True),
    _job("sonstigeAussen2", "2.4", "Weitere Außenanlagen", free_text=True),
    # 3. Ancillary building costs
    _job("architektur", "3.1", "Architekturleistungen"),
    _job("verwaltung", "3.2", "Verwaltungsleistungen"),
    _job("sonstigeBaunebenkosten1", "3.3", "Sonstige Baunebenkosten", free_text=True),
    _job("sonstigeBaunebenkosten2", "3.4", "Weitere Baunebenkosten", free_text=True),
)

CATEGORIES_BY_KEY: dict[str, JobCategory] = {c.key: c for c in JOB_CATEGORIES}


def category(key: str) -> JobCategory:
    try:
        return CATEGORIES_BY_KEY[key]
    except KeyError as e:
        raise RuleDefinitionError(f"Unknown job category {key!r}", rule=key) from e


def _present(text: str) -> bool:
    return bool(text and text.strip())


def normalise_entries(entries: Sequence[CostLedgerEntry]) -> tuple[CostLedgerEntry, ...]:
    """One entry per category, in table order; missing rows are empty."""
    by_key = {}
    for entry in entries:
        category(entry.category)
        by_key[entry.category] = entry
    return tuple(by_key.get(c.key) or CostLedgerEntry(category=c.key) for c in JOB_CATEGORIES)


class CostLedger:
    """Totals and consistency rules over the ledger rows.

    Example:
        ledger = CostLedger(record.self_help.entries)
        ledger.totals().self_help  # cents
    """

    def __init__(self, entries: Sequence[CostLedgerEntry], base_path: str = ENTRIES_PATH) -> None:
        self.entries = tuple(entries)
        self.base_path = base_path
        self._index = {}
        for index, entry in enumerate(self.entries):
            category(entry.category)
            self._index[entry.category] = index

    def entry(self, key: str) -> Optional[CostLedgerEntry]:
        index = self._index.get(key)
        return None if index is None else self.entries[index]

    def rows(self) -> Iterator[tuple[str, JobCategory, CostLedgerEntry]]:
        """Filled-in rows in table order, with their record path."""
        for job in JOB_CATEGORIES:
            index = self._index.get(job.key)
            if index is not None:
                yield join_path(self.base_path, index), job, self.entries[index]

    def totals(self) -> LedgerTotals:
        return LedgerTotals(
            material=money.total(money.parse(e.material) for e in self.entries),
            labor=money.total(money.parse(e.labor) for e in self.entries),
            self_help=money.total(money.parse(e.self_help) for e in self.entries),
        )

    def has_self_help(self, key: str) -> bool:
        entry = self.entry(key)
        return entry is not None and money.parse(entry.self_help) > 0

    def costed_categories(self) -> frozenset[str]:
        """Keys of the rows with a non-zero self-help share."""
        return frozenset(k for k in self._index if self.has_self_help(k))

    def row_errors(self) -> list[FieldError]:
        """All-or-nothing completeness and the per-row cost limit."""
        errors: list[FieldError] = []
        for path, job, entry in self.rows():
            errors.extend(self.errors_for_row(path, job, entry))
        return errors

    def errors_for_row(self, path: str, job: JobCategory, entry: CostLedgerEntry) -> list[FieldError]:
        has = {
            "description": _present(entry.description),
            "material": _present(entry.material),
            "labor": _present(entry.labor),
            "self_help": _present(entry.self_help),
        }
        if not any(has.values()):
            return []

        errors = []
        required = [
            ("description", "Beschreibung", False),
            ("material", "Materialkosten", True),
            ("labor", "Lohnkosten", True),
            ("self_help", "Selbsthilfe-Angabe", False),
        ]
        for name, label, plural in required:
            if name == "description" and not job.free_text:
                continue
            if not has[name]:
                errors.append(
                    FieldError(
                        code=ErrorCode.MISSING,
                        category=ErrorCategory.FIELD_REQUIRED,
                        path=join_path(path, name),
                        label=f"{job.label}: {label}",
                        params={"plural": True} if plural else {},
                    )
                )

        if has["material"] and has["labor"] and has["self_help"]:
            costs = money.parse(entry.material) + money.parse(entry.labor)
            self_help = money.parse(entry.self_help)
            if self_help > 0 and costs < self_help:
                errors.append(
                    FieldError(
                        code=ErrorCode.SELF_HELP_EXCEEDS_COSTS,
                        category=ErrorCategory.CROSS_FIELD,
                        path=join_path(path, "self_help"),
                        label=job.label,
                        params={
                            "self_help": money.format(self_help),
                            "costs": money.format(costs),
                            "self_help_cents": self_help,
                            "costs_cents": costs,
                        },
                    )
                )
        return errors

    def aggregate_errors(self, declared_total: Optional[int]) -> list[FieldError]:
        """A single mismatch error when the totals disagree.

        Args:
            declared_total: Self-help declared in the main application, in
                cents, or None when nothing was declared.
        """
        if declared_total is None:
            return []
        total = self.totals().self_help
        if total == declared_total:
            return []
        logger.info("self_help_total_mismatch", total=total, declared=declared_total)
        return [
            FieldError(
                code=ErrorCode.SELF_HELP_TOTAL_MISMATCH,
                category=ErrorCategory.CROSS_FORM,
                path=self.base_path,
                label="Selbsthilfeleistungen",
                params={
                    "total": money.format(total),
                    "declared": money.format(declared_total),
                    "total_cents": total,
                    "declared_cents": declared_total,
                },
            )
        ]

    def helper_errors(self, helper: Helper, label: str, path: str) -> list[FieldError]:
        """Selected job categories that have no self-help costs.

        Keys outside the category table reference no ledger row and are
        reported under their raw key.
        """
        errors = []
        for key in helper.job_categories:
            if self.has_self_help(key):
                continue
            job = CATEGORIES_BY_KEY.get(key)
            errors.append(
                FieldError(
                    code=ErrorCode.HELPER_JOB_NOT_COSTED,
                    category=ErrorCategory.CROSS_FIELD,
                    path=join_path(path, "job_categories"),
                    label=label,
                    params={"job": job.label if job is not None else key, "job_key": key},
                )
            )
        return errors


__all__ = [
    "ENTRIES_PATH",
    "JobCategory",
    "JOB_CATEGORIES",
    "CATEGORIES_BY_KEY",
    "category",
    "normalise_entries",
    "CostLedger",
]
