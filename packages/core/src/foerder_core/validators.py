"""Field and section validators.

``FieldValidator`` evaluates one rule row against a snapshot and yields at
most one error: the required check first, then the row's checks in order.
``SectionValidator`` walks a section's rule table in declaration order and
collects a flat, ordered error list per scope.
"""

from datetime import date
from typing import Iterator, Optional, Sequence, Union

import structlog

from foerder_core.config import EngineConfig
from foerder_core.models.application import ApplicationRecord
from foerder_core.models.results import (
    ErrorCategory,
    FieldError,
    FieldState,
    FieldStatus,
    SectionResult,
)
from foerder_core.rules import (
    Computed,
    EvaluationContext,
    Expand,
    FieldRule,
    ForEach,
    Rule,
    SectionSpec,
    is_blank,
)
from foerder_core.snapshot import get_at

logger = structlog.get_logger()


class FieldValidator:
    """Validates a single field rule."""

    def validate(self, rule: FieldRule, ctx: EvaluationContext) -> Optional[FieldError]:
        """Return the first problem with the field, or None.

        Fields whose ``when`` condition is false are not applicable and
        never produce an error.
        """
        if not rule.when(ctx):
            return None

        path = ctx.path(rule.path)
        value = get_at(ctx.record, path)
        label = ctx.label(rule.label)

        if is_blank(value):
            if not rule.required:
                return None
            params = {}
            if rule.prompt:
                params["prompt"] = ctx.label(rule.prompt)
            if rule.plural:
                params["plural"] = True
            return FieldError(
                code=rule.code,
                category=ErrorCategory.FIELD_REQUIRED,
                path=path,
                label=label,
                params=params,
            )

        for check in rule.checks:
            finding = check(value, ctx)
            if finding is not None:
                return FieldError(
                    code=finding.code,
                    category=finding.category,
                    path=path,
                    label=label,
                    params=dict(finding.params),
                )
        return None


Walked = tuple[Union[FieldRule, Computed], EvaluationContext]


class SectionValidator:
    """Evaluates section rule tables.

    Example:
        validator = SectionValidator(EngineConfig())
        for result in validator.evaluate(INCOME_SECTION, record, date.today()):
            print(result.title, len(result.issues))
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        field_validator: Optional[FieldValidator] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.fields = field_validator or FieldValidator()

    def evaluate(
        self,
        section: SectionSpec,
        record: ApplicationRecord,
        today: date,
        activated: Optional[bool] = None,
    ) -> list[SectionResult]:
        """Evaluate a section for each of its scopes.

        Args:
            section: The rule table.
            record: Snapshot to validate.
            today: Reference day for all date windows.
            activated: Override for the step's validation flag.

        Returns:
            One SectionResult per scope, in scope order.
        """
        active = record.validation.is_active(section.step) if activated is None else activated
        results = []
        for ctx, scope in self._contexts(section, record, today):
            issues: list[FieldError] = []
            applicable = 0
            for rule, rule_ctx in self._walk(section.rules, ctx):
                if isinstance(rule, Computed):
                    found = list(rule.evaluate(rule_ctx))
                    issues.extend(found)
                    applicable += max(rule.weight, len(found))
                    continue
                if not rule.when(rule_ctx):
                    continue
                applicable += 1
                error = self.fields.validate(rule, rule_ctx)
                if error is not None:
                    issues.append(error)

            results.append(
                SectionResult(
                    id=section.id,
                    title=scope.title_prefix + section.title,
                    step=section.step,
                    scope=scope.path,
                    activated=active,
                    issues=tuple(issues),
                    applicable_fields=applicable,
                )
            )
            logger.debug(
                "section_evaluated",
                section=section.id,
                scope=scope.path,
                issues=len(issues),
                activated=active,
            )
        return results

    def field_statuses(
        self,
        section: SectionSpec,
        record: ApplicationRecord,
        today: date,
        activated: Optional[bool] = None,
    ) -> list[FieldStatus]:
        """Visible/required/locked state and error for every field row."""
        active = record.validation.is_active(section.step) if activated is None else activated
        statuses = []
        for ctx, _ in self._contexts(section, record, today):
            for rule, rule_ctx in self._walk(section.rules, ctx):
                if not isinstance(rule, FieldRule):
                    continue
                visible = rule.when(rule_ctx)
                error = self.fields.validate(rule, rule_ctx) if visible else None
                if not active or not visible:
                    state = FieldState.UNTOUCHED
                else:
                    state = FieldState.INVALID if error else FieldState.VALID
                statuses.append(
                    FieldStatus(
                        path=rule_ctx.path(rule.path),
                        label=rule_ctx.label(rule.label),
                        visible=visible,
                        required=visible and rule.required,
                        locked=rule.locked_when(rule_ctx),
                        state=state,
                        error=error if active else None,
                    )
                )
        return statuses

    def _contexts(self, section: SectionSpec, record: ApplicationRecord, today: date):
        for scope in section.scopes(record):
            ctx = EvaluationContext(
                record=record,
                today=today,
                config=self.config,
                scope=scope.path,
                label_prefix=scope.label_prefix,
                vars=dict(scope.vars),
            )
            yield ctx, scope

    def _walk(self, rules: Sequence[Rule], ctx: EvaluationContext) -> Iterator[Walked]:
        for rule in rules:
            if isinstance(rule, FieldRule):
                yield rule, ctx
            elif isinstance(rule, Computed):
                if rule.when(ctx):
                    yield rule, ctx
            elif isinstance(rule, Expand):
                if rule.when(ctx):
                    yield from self._walk(tuple(rule.build(ctx)), ctx)
            elif isinstance(rule, ForEach):
                if not rule.when(ctx):
                    continue
                items = ctx.get(rule.path) or ()
                for index, item in enumerate(items):
                    if rule.include is not None and not rule.include(item, index, ctx):
                        continue
                    prefix = rule.prefix(item, index, ctx) if rule.prefix else None
                    extra = dict(rule.vars(item, index)) if rule.vars else {}
                    child = ctx.within(f"{rule.path}.{index}", label_prefix=prefix, **extra)
                    yield from self._walk(rule.rules, child)
            else:
                raise TypeError(f"Unknown rule type: {type(rule).__name__}")


__all__ = ["FieldValidator", "SectionValidator"]
