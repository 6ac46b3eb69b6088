"""Interfaces to collaborators outside the engine.

Available Interfaces:
    RosterProvider: Protocol for known-persons roster sources
    LookupResult: Result of one debounced roster lookup
    LookupStatus: Enum for lookup outcomes
"""

from foerder_services.interfaces.base import (
    # Enumerations
    LookupStatus,
    # Result models
    LookupResult,
    # Protocols
    RosterPayload,
    RosterProvider,
)

__all__ = [
    # Enumerations
    "LookupStatus",
    # Result models
    "LookupResult",
    # Protocols
    "RosterPayload",
    "RosterProvider",
]
