"""Engine configuration.

Pydantic Settings based configuration for the validation engine, loaded
from environment variables with the prefix FOERDER_ENGINE_ and an optional
``.env`` file.

Usage:
    from foerder_core.config import EngineConfig

    config = EngineConfig()
    if config.strict_amounts:
        print("Malformed amounts are reported")
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NRW_POSTAL_PREFIXES: tuple[str, ...] = (
    "32", "33", "34", "37", "40", "41", "42", "44", "45", "46",
    "47", "48", "49", "50", "51", "52", "53", "57", "58", "59",
)
"""First two postal code digits of North Rhine-Westphalia."""


class EngineConfig(BaseSettings):
    """Validation engine settings.

    Environment Variables:
        FOERDER_ENGINE_STRICT_AMOUNTS: Report unparsable amounts as malformed
        FOERDER_ENGINE_WINDOW_MONTHS: Length of the monthly income window
        FOERDER_ENGINE_OBJECT_POSTAL_PREFIXES: JSON list of allowed prefixes
        FOERDER_ENGINE_OBJECT_REGION: Region name shown in postal code messages
        FOERDER_ENGINE_MIN_APPLICANT_AGE: Minimum applicant age in years
        FOERDER_ENGINE_MAX_APPLICANT_AGE: Maximum applicant age in years
    """

    model_config = SettingsConfigDict(
        env_prefix="FOERDER_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strict_amounts: bool = Field(
        default=False,
        description="Report present but unparsable amounts instead of reading them as zero",
    )
    window_months: int = Field(
        default=12,
        ge=1,
        le=24,
        description="Number of months in the monthly income window",
    )
    object_postal_prefixes: tuple[str, ...] = Field(
        default=NRW_POSTAL_PREFIXES,
        description="Allowed two digit prefixes for the subsidized object's postal code",
    )
    object_region: str = Field(
        default="Nordrhein-Westfalen",
        description="Region name used in the postal code message",
    )
    min_applicant_age: int = Field(default=18, ge=0, description="Minimum applicant age")
    max_applicant_age: int = Field(default=120, gt=0, description="Maximum applicant age")

    @field_validator("object_postal_prefixes")
    @classmethod
    def validate_prefixes(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Prefixes must be two digits each."""
        cleaned = tuple(p.strip() for p in v)
        for prefix in cleaned:
            if len(prefix) != 2 or not prefix.isdigit():
                raise ValueError(f"Invalid postal code prefix: {prefix!r}")
        return cleaned
