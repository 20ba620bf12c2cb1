"""
Data models describing the secret a delete menu operates on.

A secret is seen through two objects: the *model* (the secret record, which
carries the engine and the version history when metadata access is
available) and the *model for data* (the last fetched version of the secret,
identified by a composite id such as ``["kv", "app/db", 3]``).
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from .exceptions import CompositeIdError


class InteractionMode(str, Enum):
    """Modes a secret view can be in."""

    CREATE = "create"
    SHOW = "show"
    EDIT = "edit"


ModeLike = Union[InteractionMode, str, None]


@dataclass(frozen=True)
class SecretIdentity:
    """Mount path and secret path of a stored secret."""

    backend: str
    id: str
    version: Optional[int] = None


def parse_composite_id(raw_id: Any) -> SecretIdentity:
    """
    Parse a composite identifier of the form ``[backend, id, version?]``.

    Args:
        raw_id: JSON encoded list, or an already decoded list/tuple

    Returns:
        The parsed identity

    Raises:
        CompositeIdError: If the identifier is not a well-formed composite id
    """
    parts = raw_id
    if isinstance(raw_id, str):
        try:
            parts = json.loads(raw_id)
        except ValueError as e:
            raise CompositeIdError(raw_id, f"not valid JSON ({e})")

    if not isinstance(parts, (list, tuple)):
        raise CompositeIdError(raw_id, "expected a list")
    if len(parts) not in (2, 3):
        raise CompositeIdError(raw_id, "expected [backend, id] or [backend, id, version]")

    backend, secret_id = parts[0], parts[1]
    if not isinstance(backend, str) or not backend:
        raise CompositeIdError(raw_id, "backend must be a non-empty string")
    if not isinstance(secret_id, str) or not secret_id:
        raise CompositeIdError(raw_id, "id must be a non-empty string")

    version = parts[2] if len(parts) == 3 else None
    if version is not None:
        if isinstance(version, bool):
            raise CompositeIdError(raw_id, "version must be an integer")
        try:
            version = int(version)
        except (TypeError, ValueError):
            raise CompositeIdError(raw_id, "version must be an integer")

    return SecretIdentity(backend=backend, id=secret_id, version=version)


def try_parse_composite_id(raw_id: Any) -> Optional[SecretIdentity]:
    """Parse a composite id, returning None instead of raising."""
    if not raw_id:
        return None
    try:
        return parse_composite_id(raw_id)
    except CompositeIdError:
        return None


def build_composite_id(
    backend: str, secret_id: str, version: Optional[int] = None
) -> str:
    """Encode a composite id the same way the store does."""
    parts: list = [backend, secret_id]
    if version is not None:
        parts.append(version)
    return json.dumps(parts)


@dataclass(frozen=True)
class EngineRef:
    """The secrets engine (mount) a secret lives in."""

    id: str
    version: int = 2

    @property
    def is_v2(self) -> bool:
        return self.version == 2


@dataclass(frozen=True)
class SelectedVersion:
    """The version currently selected in the UI."""

    version: Optional[int]


@dataclass
class SecretModel:
    """The secret record as loaded by the caller."""

    id: str
    backend: Optional[str] = None
    engine: Optional[EngineRef] = None
    current_version: Optional[int] = None
    selected_version: Optional[SelectedVersion] = None

    @property
    def mount(self) -> Optional[str]:
        """Mount path, preferring the engine id."""
        if self.engine is not None:
            return self.engine.id
        return self.backend


@dataclass
class SecretDataModel:
    """The last fetched version of a secret."""

    id: str
    version: Optional[int] = None

    @property
    def identity(self) -> Optional[SecretIdentity]:
        return try_parse_composite_id(self.id)


@dataclass
class MenuInputs:
    """Everything the delete menu derives its state from."""

    model: Optional[SecretModel] = None
    model_for_data: Optional[SecretDataModel] = None
    mode: ModeLike = InteractionMode.SHOW
    is_v2: bool = True
    can_read_secret_metadata: bool = False

    @property
    def is_creating(self) -> bool:
        return self.mode == InteractionMode.CREATE
