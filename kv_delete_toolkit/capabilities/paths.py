"""
Capability path resolution.

Maps the current delete-menu inputs to the single store path that must be
checked for each action kind, or to ``None`` when the check cannot be made
yet (no model loaded, creating a new secret, unparsable identifier). Absence
of a path is an expected state and never raises.

Path formats::

    {backend}/undelete/{id}    v2 only, from the composite data id
    {backend}/destroy/{id}     v2 only, from the composite data id
    {backend}/metadata/{id}    from the model's engine
    {backend}/data/{id}        v2 data
    {backend}/delete/{id}      v2 soft delete
    {backend}/{id}             v1, used for both data and soft delete
"""

from typing import Any, Callable, Dict, Optional, Tuple

from ..models import MenuInputs, try_parse_composite_id
from .models import ActionKind

DependencyKey = Tuple[Any, ...]


def undelete_version_path(inputs: MenuInputs) -> Optional[str]:
    """Path checked before offering undelete of a version."""
    data = inputs.model_for_data
    identity = try_parse_composite_id(data.id if data else None)
    if identity is None:
        return None
    return f"{identity.backend}/undelete/{identity.id}"


def destroy_version_path(inputs: MenuInputs) -> Optional[str]:
    """Path checked before offering destroy of a single version."""
    data = inputs.model_for_data
    identity = try_parse_composite_id(data.id if data else None)
    if identity is None:
        return None
    return f"{identity.backend}/destroy/{identity.id}"


def metadata_path(inputs: MenuInputs) -> Optional[str]:
    """Path checked before offering destroy of all versions."""
    model = inputs.model
    if model is None or model.engine is None or not model.engine.id or not model.id:
        return None
    return f"{model.engine.id}/metadata/{model.id}"


def _data_backend(inputs: MenuInputs) -> Optional[str]:
    model = inputs.model
    if model is None:
        return None
    if inputs.is_v2:
        return model.engine.id if model.engine is not None else None
    return model.backend


def secret_data_path(inputs: MenuInputs) -> Optional[str]:
    """Path checked before offering hard delete of the secret data."""
    if inputs.model is None or inputs.is_creating:
        return None
    backend = _data_backend(inputs)
    if not backend:
        return None
    secret_id = inputs.model.id
    if inputs.is_v2:
        return f"{backend}/data/{secret_id}"
    return f"{backend}/{secret_id}"


def secret_soft_data_path(inputs: MenuInputs) -> Optional[str]:
    """Path checked before offering soft delete of a version."""
    if inputs.model is None or inputs.is_creating:
        return None
    backend = _data_backend(inputs)
    if not backend:
        return None
    secret_id = inputs.model.id
    if inputs.is_v2:
        return f"{backend}/delete/{secret_id}"
    return f"{backend}/{secret_id}"


def _composite_key(inputs: MenuInputs) -> DependencyKey:
    data = inputs.model_for_data
    return (data.id if data else None,)


def _metadata_key(inputs: MenuInputs) -> DependencyKey:
    model = inputs.model
    if model is None:
        return (None, None, _mode_value(inputs))
    engine_id = model.engine.id if model.engine else None
    return (engine_id, model.id, _mode_value(inputs))


def _data_key(inputs: MenuInputs) -> DependencyKey:
    model = inputs.model
    if model is None:
        return (inputs.is_v2, None, None, None, _mode_value(inputs))
    engine_id = model.engine.id if model.engine else None
    return (inputs.is_v2, engine_id, model.backend, model.id, _mode_value(inputs))


def _mode_value(inputs: MenuInputs) -> Any:
    mode = inputs.mode
    return getattr(mode, "value", mode)


class CapabilityPathResolver:
    """
    Pure resolver from menu inputs to capability-check targets.

    Each action kind has a path function and a dependency-key function. The
    key lists exactly the inputs the path depends on, so a cache can tell
    when a lookup must be refreshed.
    """

    _paths: Dict[ActionKind, Callable[[MenuInputs], Optional[str]]] = {
        ActionKind.UNDELETE: undelete_version_path,
        ActionKind.DESTROY: destroy_version_path,
        ActionKind.METADATA: metadata_path,
        ActionKind.DATA: secret_data_path,
        ActionKind.SOFT_DELETE: secret_soft_data_path,
    }

    _keys: Dict[ActionKind, Callable[[MenuInputs], DependencyKey]] = {
        ActionKind.UNDELETE: _composite_key,
        ActionKind.DESTROY: _composite_key,
        ActionKind.METADATA: _metadata_key,
        ActionKind.DATA: _data_key,
        ActionKind.SOFT_DELETE: _data_key,
    }

    def resolve(self, kind: ActionKind, inputs: MenuInputs) -> Optional[str]:
        """Return the target path for ``kind`` or None."""
        return self._paths[ActionKind(kind)](inputs)

    def dependency_key(self, kind: ActionKind, inputs: MenuInputs) -> DependencyKey:
        """Return the tuple of inputs the path for ``kind`` depends on."""
        return self._keys[ActionKind(kind)](inputs)

    def resolve_all(self, inputs: MenuInputs) -> Dict[ActionKind, Optional[str]]:
        """Resolve every action kind at once."""
        return {kind: self.resolve(kind, inputs) for kind in ActionKind}
