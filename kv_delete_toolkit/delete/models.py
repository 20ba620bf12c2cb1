"""Data models for delete dispatch."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DeleteVariant(str, Enum):
    """Delete-family operations offered by the delete menu."""

    DELETE = "delete"
    DESTROY = "destroy"
    UNDELETE = "undelete"
    DELETE_LATEST_VERSION = "delete-latest-version"
    DESTROY_ALL_VERSIONS = "destroy-all-versions"
    V1 = "v1"

    @property
    def removes_whole_secret(self) -> bool:
        """Whether the variant destroys the secret and every version."""
        return self in (DeleteVariant.DESTROY_ALL_VERSIONS, DeleteVariant.V1)


class DeleteState(str, Enum):
    """States of the delete dispatcher."""

    IDLE = "idle"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DeleteOutcome(str, Enum):
    """What happened after a dispatch."""

    SKIPPED = "skipped"
    REFRESHED = "refreshed"
    ERROR_SHOWN = "error_shown"
    RELOADED = "reloaded"
    NAVIGATED = "navigated"


class AdapterErrorResponse(BaseModel):
    """Structured error returned (not raised) by a versioned delete."""

    model_config = ConfigDict(frozen=True)

    is_adapter_error: bool = Field(True, description="Marks the response as an error")
    errors: Optional[List[str]] = Field(
        None, description="Human readable error messages, in order"
    )
    status: Optional[int] = Field(None, description="HTTP status, when known")


def is_adapter_error(response: Any) -> bool:
    """Whether ``response`` is an error-carrying delete response."""
    if isinstance(response, AdapterErrorResponse):
        return response.is_adapter_error
    if isinstance(response, dict):
        return bool(response.get("is_adapter_error"))
    return bool(getattr(response, "is_adapter_error", False))


def response_errors(response: Any) -> Optional[List[str]]:
    """The ``errors`` sequence carried by an error response, if any."""
    if isinstance(response, dict):
        return response.get("errors")
    return getattr(response, "errors", None)
