"""
Capabilities Module - authorization checks for delete actions.

Resolves which store paths must be checked for each delete-family action and
caches the results as permission flags.
"""

from .models import ActionKind, CapabilityLookup, CapabilityResult, LookupStatus
from .paths import (
    CapabilityPathResolver,
    destroy_version_path,
    metadata_path,
    secret_data_path,
    secret_soft_data_path,
    undelete_version_path,
)
from .availability import CapabilityAvailability

__all__ = [
    # Cache
    "CapabilityAvailability",
    # Resolver
    "CapabilityPathResolver",
    "undelete_version_path",
    "destroy_version_path",
    "metadata_path",
    "secret_data_path",
    "secret_soft_data_path",
    # Models
    "ActionKind",
    "CapabilityLookup",
    "CapabilityResult",
    "LookupStatus",
]
