"""Section rule tables of the application wizard, in display order."""

from foerder_core.exceptions import RuleDefinitionError
from foerder_core.models.application import WizardStep
from foerder_core.rules import SectionSpec
from foerder_core.sections import income, personal, self_disclosure, self_help


def _register(*groups: tuple[SectionSpec, ...]) -> tuple[SectionSpec, ...]:
    sections = tuple(s for group in groups for s in group)
    seen = set()
    for section in sections:
        if section.id in seen:
            raise RuleDefinitionError(f"Duplicate section id {section.id!r}", rule=section.id)
        seen.add(section.id)
    return sections


ALL_SECTIONS = _register(
    personal.SECTIONS,
    income.SECTIONS,
    self_disclosure.SECTIONS,
    self_help.SECTIONS,
)


def sections_for_step(step: WizardStep) -> tuple[SectionSpec, ...]:
    return tuple(s for s in ALL_SECTIONS if s.step == step)


def section(section_id: str) -> SectionSpec:
    for spec in ALL_SECTIONS:
        if spec.id == section_id:
            return spec
    raise RuleDefinitionError(f"Unknown section {section_id!r}", rule=section_id)


__all__ = ["ALL_SECTIONS", "sections_for_step", "section"]
