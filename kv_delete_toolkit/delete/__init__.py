"""
Delete Module - version-aware delete dispatch.

Selects the store call and target version for each delete variant and turns
the result into a refresh, an error message, or a navigation.
"""

from .dispatcher import DeleteDispatcher, resolve_version
from .models import (
    AdapterErrorResponse,
    DeleteOutcome,
    DeleteState,
    DeleteVariant,
    is_adapter_error,
)
from .outcome import OutcomeHandler, get_error_message

__all__ = [
    # Dispatch
    "DeleteDispatcher",
    "resolve_version",
    # Outcomes
    "OutcomeHandler",
    "get_error_message",
    # Models
    "AdapterErrorResponse",
    "DeleteOutcome",
    "DeleteState",
    "DeleteVariant",
    "is_adapter_error",
]
