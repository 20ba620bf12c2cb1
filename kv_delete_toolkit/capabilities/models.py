"""
Models for capability lookups.

A capability lookup is an authorization check against a single store path.
Results are cached per action kind and keyed by the inputs the path was
derived from.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
    """Delete-family actions that need a capability check."""

    UNDELETE = "undelete"
    DESTROY = "destroy"
    METADATA = "metadata"
    DATA = "data"
    SOFT_DELETE = "soft_delete"


class LookupStatus(str, Enum):
    """State of a single capability lookup."""

    UNAVAILABLE = "unavailable"
    PENDING = "pending"
    RESOLVED = "resolved"


class CapabilityResult(BaseModel):
    """Operations granted on a path."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path the capabilities apply to")
    can_read: bool = Field(False, description="Read is granted")
    can_update: bool = Field(False, description="Update is granted")
    can_delete: bool = Field(False, description="Delete is granted")

    @classmethod
    def from_capabilities(
        cls, path: str, capabilities: Iterable[str]
    ) -> "CapabilityResult":
        """
        Build a result from a raw capability list such as ``["read", "update"]``.

        ``deny`` overrides everything; ``root`` grants everything.
        """
        caps = set(capabilities or [])
        if "deny" in caps:
            return cls(path=path)
        if "root" in caps:
            return cls(path=path, can_read=True, can_update=True, can_delete=True)
        return cls(
            path=path,
            can_read="read" in caps,
            can_update="update" in caps,
            can_delete="delete" in caps,
        )

    @classmethod
    def coerce(cls, path: str, raw: Any) -> "CapabilityResult":
        """
        Build a result for ``path`` from whatever a store returned.

        Accepts a CapabilityResult, a mapping, or an object with attributes,
        in either ``can_delete`` or ``canDelete`` spelling. Missing flags are
        False.
        """
        if isinstance(raw, cls):
            return raw

        def flag(snake: str, camel: str) -> bool:
            if isinstance(raw, Mapping):
                return bool(raw.get(snake, raw.get(camel, False)))
            return bool(getattr(raw, snake, getattr(raw, camel, False)))

        return cls(
            path=path,
            can_read=flag("can_read", "canRead"),
            can_update=flag("can_update", "canUpdate"),
            can_delete=flag("can_delete", "canDelete"),
        )


@dataclass
class CapabilityLookup:
    """Cache slot for one action kind."""

    kind: ActionKind
    key: Optional[Tuple[Any, ...]] = None
    path: Optional[str] = None
    status: LookupStatus = LookupStatus.UNAVAILABLE
    value: Optional[CapabilityResult] = None
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False)

    def grants(self, attribute: str) -> bool:
        """Whether the cached result grants ``attribute``; False when absent."""
        if self.value is None:
            return False
        return bool(getattr(self.value, attribute, False))
