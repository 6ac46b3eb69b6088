"""Foerder Services - Roster lookups, configuration and logging."""

from foerder_services.config import (
    DetectorConfig,
    FoerderConfig,
    configure_logging,
)
from foerder_services.duplicates import DuplicateDetector

__version__ = "0.1.0"

__all__ = [
    "DetectorConfig",
    "FoerderConfig",
    "configure_logging",
    "DuplicateDetector",
]
