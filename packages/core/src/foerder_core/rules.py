"""Declarative rule tables for conditional field validation.

A section is a table of rules. Each rule names a field path, a label, the
condition under which the field applies (is shown and validated), whether
it is required, and the checks to run once it holds a value. Conditions are
composable predicates over the record snapshot:

    has_income = field("has_employment_income").is_(True)
    FieldRule("employment.income_year", "Jahr für steuerpflichtige Einkünfte", when=has_income)

Paths are relative to the scope the section is evaluated at. A leading ``/``
resolves from the record root, each leading ``^`` climbs one segment up from
the scope (``^^costs`` from a change entry reaches the declaration's costs).

Adding a field to the wizard means adding a row here; nothing else changes.
"""

from dataclasses import dataclass, field as dc_field, replace
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from foerder_core.config import EngineConfig
from foerder_core.models.application import ApplicationRecord, WizardStep
from foerder_core.models.results import ErrorCategory, ErrorCode, FieldError
from foerder_core.snapshot import get_at, join_path, split_path


def plain(value: Any) -> Any:
    """Unwrap enum members so raw and enum values compare equal."""
    return value.value if isinstance(value, Enum) else value


def is_blank(value: Any) -> bool:
    """True when a field holds no answer.

    ``False`` and ``0`` are answers; empty text and empty collections are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (tuple, list, dict, set, frozenset)):
        return len(value) == 0
    return False


# =============================================================================
# EVALUATION CONTEXT
# =============================================================================

@dataclass(frozen=True)
class EvaluationContext:
    """A record snapshot seen from one scope."""

    record: ApplicationRecord
    today: date
    config: EngineConfig
    scope: str = ""
    label_prefix: str = ""
    vars: Mapping[str, Any] = dc_field(default_factory=dict)

    def path(self, relative: str) -> str:
        """Absolute record path for a scope-relative path."""
        if relative.startswith("/"):
            return relative[1:]
        base = list(split_path(self.scope))
        while relative.startswith("^"):
            relative = relative[1:]
            if base:
                base.pop()
        return join_path(*base, relative)

    def get(self, relative: str) -> Any:
        return get_at(self.record, self.path(relative))

    @property
    def node(self) -> Any:
        return get_at(self.record, self.scope)

    def within(self, relative: str, *, label_prefix: Optional[str] = None, **vars: Any) -> "EvaluationContext":
        return replace(
            self,
            scope=self.path(relative),
            label_prefix=self.label_prefix if label_prefix is None else label_prefix,
            vars={**self.vars, **vars},
        )

    def label(self, text: str) -> str:
        return self.label_prefix + text.format(**self.vars)


# =============================================================================
# PREDICATES
# =============================================================================

class RulePredicate:
    """A boolean condition over an evaluation context.

    Predicates compose with ``&``, ``|`` and ``~``.
    """

    __slots__ = ("_fn", "description")

    def __init__(self, fn: Callable[[EvaluationContext], Any], description: str = "") -> None:
        self._fn = fn
        self.description = description

    def __call__(self, ctx: EvaluationContext) -> bool:
        return bool(self._fn(ctx))

    def __and__(self, other: "RulePredicate") -> "RulePredicate":
        return RulePredicate(lambda c: self(c) and other(c), f"({self.description} and {other.description})")

    def __or__(self, other: "RulePredicate") -> "RulePredicate":
        return RulePredicate(lambda c: self(c) or other(c), f"({self.description} or {other.description})")

    def __invert__(self) -> "RulePredicate":
        return RulePredicate(lambda c: not self(c), f"not {self.description}")

    def __repr__(self) -> str:
        return f"RulePredicate({self.description})"


ALWAYS = RulePredicate(lambda c: True, "always")
NEVER = RulePredicate(lambda c: False, "never")


class FieldRef:
    """Builds predicates about the value at one path."""

    def __init__(self, path: str) -> None:
        self.path = path

    def value(self, ctx: EvaluationContext) -> Any:
        return ctx.get(self.path)

    def is_(self, expected: Any) -> RulePredicate:
        if isinstance(expected, bool) or expected is None:
            return RulePredicate(lambda c: self.value(c) is expected, f"{self.path} is {expected}")
        target = plain(expected)
        return RulePredicate(lambda c: plain(self.value(c)) == target, f"{self.path} == {target!r}")

    def one_of(self, options: Iterable[Any]) -> RulePredicate:
        targets = frozenset(plain(o) for o in options)
        return RulePredicate(lambda c: plain(self.value(c)) in targets, f"{self.path} in {sorted(targets)}")

    def present(self) -> RulePredicate:
        return RulePredicate(lambda c: not is_blank(self.value(c)), f"{self.path} present")

    def blank(self) -> RulePredicate:
        return RulePredicate(lambda c: is_blank(self.value(c)), f"{self.path} blank")

    def truthy(self) -> RulePredicate:
        return RulePredicate(lambda c: bool(self.value(c)), f"{self.path} truthy")

    def contains(self, option: Any) -> RulePredicate:
        """For multi-select fields: ``option`` is among the selected values."""
        target = plain(option)
        return RulePredicate(
            lambda c: target in {plain(v) for v in self.value(c) or ()},
            f"{target!r} in {self.path}",
        )


def field(path: str) -> FieldRef:
    return FieldRef(path)


def all_of(*predicates: RulePredicate) -> RulePredicate:
    return RulePredicate(lambda c: all(p(c) for p in predicates), " and ".join(p.description for p in predicates))


def any_of(*predicates: RulePredicate) -> RulePredicate:
    return RulePredicate(lambda c: any(p(c) for p in predicates), " or ".join(p.description for p in predicates))


def when(fn: Callable[[EvaluationContext], Any], description: str = "custom") -> RulePredicate:
    return RulePredicate(fn, description)


# =============================================================================
# CHECKS
# =============================================================================

@dataclass(frozen=True)
class Finding:
    """What a check reports; the validator turns it into a FieldError."""

    code: ErrorCode
    category: ErrorCategory = ErrorCategory.FIELD_MALFORMED
    params: Mapping[str, Any] = dc_field(default_factory=dict)


Check = Callable[[Any, EvaluationContext], Optional[Finding]]


# =============================================================================
# RULES
# =============================================================================

@dataclass(frozen=True)
class FieldRule:
    """One row of a section's rule table.

    Attributes:
        path: Scope-relative path of the field.
        label: Display label; ``{name}`` placeholders are filled from the
            context vars.
        when: The field applies (is visible and validated) only when true.
        required: Whether an applicable field must hold a value.
        checks: Run in order on a present value; the first finding wins.
        locked_when: The field is shown read-only when true.
        code: Error code for a missing value.
        prompt: Full question text, used instead of the label for
            unanswered yes/no questions.
        plural: Label is grammatically plural ("sind erforderlich").
    """

    path: str
    label: str
    when: RulePredicate = ALWAYS
    required: bool = True
    checks: tuple[Check, ...] = ()
    locked_when: RulePredicate = NEVER
    code: ErrorCode = ErrorCode.REQUIRED
    prompt: str = ""
    plural: bool = False


@dataclass(frozen=True)
class ForEach:
    """Applies a group of rules to every item of a collection.

    ``prefix`` builds the label prefix for an item from the item and its
    0-based index; ``vars`` adds placeholder values for labels.
    """

    path: str
    rules: tuple["Rule", ...]
    when: RulePredicate = ALWAYS
    prefix: Optional[Callable[[Any, int, EvaluationContext], str]] = None
    vars: Optional[Callable[[Any, int], Mapping[str, Any]]] = None
    include: Optional[Callable[[Any, int, EvaluationContext], bool]] = None


@dataclass(frozen=True)
class Expand:
    """Rules generated from the snapshot, such as one per window month."""

    build: Callable[[EvaluationContext], Iterable["Rule"]]
    when: RulePredicate = ALWAYS


@dataclass(frozen=True)
class Computed:
    """Errors computed directly, for checks spanning many fields."""

    evaluate: Callable[[EvaluationContext], Iterable[FieldError]]
    when: RulePredicate = ALWAYS
    weight: int = 1


Rule = Union[FieldRule, ForEach, Expand, Computed]


@dataclass(frozen=True)
class Scope:
    """Where a section is evaluated and how its output is titled."""

    path: str = ""
    title_prefix: str = ""
    label_prefix: str = ""
    vars: Mapping[str, Any] = dc_field(default_factory=dict)


def record_scope(record: ApplicationRecord) -> Sequence[Scope]:
    return (Scope(),)


@dataclass(frozen=True)
class SectionSpec:
    """A named, ordered rule table.

    Attributes:
        id: Stable identifier.
        title: Display title.
        step: Wizard step whose activation flag controls visibility.
        rules: Rules in display order; errors keep this order.
        reads: Record path prefixes the section depends on.
        scopes: Where to evaluate; one result per scope.
    """

    id: str
    title: str
    step: WizardStep
    rules: tuple[Rule, ...]
    reads: tuple[str, ...]
    scopes: Callable[[ApplicationRecord], Sequence[Scope]] = record_scope


__all__ = [
    "plain",
    "is_blank",
    "EvaluationContext",
    "RulePredicate",
    "ALWAYS",
    "NEVER",
    "FieldRef",
    "field",
    "all_of",
    "any_of",
    "when",
    "Finding",
    "Check",
    "FieldRule",
    "ForEach",
    "Expand",
    "Computed",
    "Rule",
    "Scope",
    "record_scope",
    "SectionSpec",
]
