"""German wording for validation errors.

Validators only produce codes and parameters; this module turns them into
the sentences shown to applicants.
"""

from typing import Iterable

from foerder_core.models.results import ErrorCode, FieldError

_DATE_INVALID = "Bitte geben Sie ein valides Datum an."

TEMPLATES: dict[ErrorCode, str] = {
    ErrorCode.REQUIRED: "{label} {verb} erforderlich",
    ErrorCode.MISSING: "{label} {missing}",
    ErrorCode.QUESTION_UNANSWERED: "{prompt}",
    ErrorCode.MONTHLY_INCOME_REQUIRED: "{label} ist erforderlich",
    ErrorCode.MAINTENANCE_PAYMENT_MISSING: "Bitte fügen Sie mindestens eine Person für Unterhaltszahlungen hinzu",
    ErrorCode.NO_SELF_HELP_COSTS: "Es müssen mindestens für eine Arbeitsart Selbsthilfekosten angegeben werden",
    ErrorCode.AT_LEAST_ONE_AMOUNT: "Bei {label} muss mindestens ein Betrag angegeben werden",
    ErrorCode.AMOUNT_FORMAT: "{label} ist kein gültiger Betrag",
    ErrorCode.DATE_FORMAT: _DATE_INVALID,
    ErrorCode.POSTAL_CODE_FORMAT: "{label} muss aus genau 5 Ziffern bestehen",
    ErrorCode.POSTAL_CODE_REGION: "Die Postleitzahl muss sich in {region} befinden",
    ErrorCode.EMAIL_FORMAT: "{label} ist ungültig",
    ErrorCode.BIRTH_DATE_RANGE: (
        "{label} liegt außerhalb des gültigen Bereichs (Antragsteller muss mindestens "
        "{min_age} Jahre alt und nicht älter als {max_age} Jahre sein)"
    ),
    ErrorCode.CHANGE_DATE_RANGE: (
        "{label} darf nicht mehr als {months} Monate in der Vergangenheit liegen "
        "und nicht mehr als {months} Monate in der Zukunft."
    ),
    ErrorCode.EMPLOYMENT_START_RANGE: _DATE_INVALID,
    ErrorCode.CONTRACT_END_RANGE: _DATE_INVALID,
    ErrorCode.DATE_NOT_FUTURE: "{label} muss in der Zukunft liegen",
    ErrorCode.PERIODICITY_NOT_ALLOWED: "{label}: Der Turnus '{periodicity}' ist nicht zulässig",
    ErrorCode.INCREASE_NOT_HIGHER: "{type_label}: Ihr neuer Betrag ist geringer als oder gleich dem alten Betrag.",
    ErrorCode.DECREASE_NOT_LOWER: "{type_label}: Ihr neuer Betrag ist größer als oder gleich dem alten Betrag.",
    ErrorCode.SELF_HELP_EXCEEDS_COSTS: (
        "{label}: Selbsthilfe ({self_help}) ist höher als Material- und Lohnkosten zusammen ({costs})"
    ),
    ErrorCode.HELPER_JOB_NOT_COSTED: '{label}: Für ausgewählte Arbeit "{job}" sind keine Selbsthilfekosten definiert',
    ErrorCode.SELF_HELP_TOTAL_MISMATCH: (
        "Die Gesamtsumme der Selbsthilfeleistungen ({total}) weicht von der Angabe im Hauptantrag ab ({declared})"
    ),
    ErrorCode.SELF_HELP_DECLINED_BUT_DECLARED: (
        'Im Hauptantrag wurde ein Selbsthilfe-Betrag von {declared} angegeben, '
        'aber es wurde "Nein" bei Selbsthilfeleistungen gewählt.'
    ),
}


class _Defaults(dict):
    def __missing__(self, key: str) -> str:
        return ""


def render(error: FieldError) -> str:
    """The German sentence for one error."""
    plural = bool(error.params.get("plural"))
    values = _Defaults(
        label=error.label,
        verb="sind" if plural else "ist",
        missing="fehlen" if plural else "fehlt",
    )
    values.update(error.params)
    return TEMPLATES[error.code].format_map(values)


def render_all(errors: Iterable[FieldError]) -> list[str]:
    return [render(e) for e in errors]


__all__ = ["TEMPLATES", "render", "render_all"]
