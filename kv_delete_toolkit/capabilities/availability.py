"""
Capability availability cache.

Keeps one cached capability lookup per action kind and derives the boolean
permission flags the delete menu is rendered from. Lookups run as asyncio
tasks on the caller's event loop; they are independent and may be in flight
at the same time.

In-flight lookups are never cancelled when inputs change. Unless
``discard_stale_capability_results`` is enabled, a slow response for an old
path can therefore overwrite the flag of a newer one.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Set

from ..config import DeleteToolkitConfig, get_config
from ..delete.models import DeleteVariant
from ..exceptions import CapabilityFetchError
from ..models import MenuInputs
from ..store import SecretStore, missing_capabilities
from .models import ActionKind, CapabilityLookup, CapabilityResult, LookupStatus
from .paths import CapabilityPathResolver, DependencyKey

logger = logging.getLogger(__name__)

# Flag consulted on each lookup's result
GRANT_ATTRIBUTES: Dict[ActionKind, str] = {
    ActionKind.UNDELETE: "can_update",
    ActionKind.DESTROY: "can_update",
    ActionKind.METADATA: "can_delete",
    ActionKind.DATA: "can_delete",
    ActionKind.SOFT_DELETE: "can_update",
}


class CapabilityAvailability:
    """
    Memoized capability lookups for the delete menu.

    Call :meth:`update` whenever the inputs change; it recomputes each
    lookup's dependency key and starts a fetch for every key that changed.
    :meth:`refresh` does the same and waits for the fetches to finish.

    Example:
        >>> availability = CapabilityAvailability(store)
        >>> await availability.refresh(inputs)
        >>> availability.can_destroy_version
        True
    """

    def __init__(
        self,
        store: SecretStore,
        resolver: Optional[CapabilityPathResolver] = None,
        config: Optional[DeleteToolkitConfig] = None,
    ):
        """
        Initialize the cache.

        Args:
            store: Store answering capability queries
            resolver: Path resolver, defaults to CapabilityPathResolver()
            config: Configuration, defaults to the global configuration
        """
        missing = list(missing_capabilities(store))
        if missing:
            raise TypeError(f"Store is missing required methods: {', '.join(missing)}")

        self.store = store
        self.resolver = resolver or CapabilityPathResolver()
        self.config = config or get_config()
        self.inputs = MenuInputs()
        self._lookups: Dict[ActionKind, CapabilityLookup] = {
            kind: CapabilityLookup(kind=kind) for kind in ActionKind
        }
        self._in_flight: Set["asyncio.Task[None]"] = set()

    def update(self, inputs: MenuInputs) -> List["asyncio.Task[None]"]:
        """
        Apply new inputs and start fetches for changed lookups.

        Must be called from a running event loop when any path is defined.

        Returns:
            Tasks started by this call
        """
        self.inputs = inputs
        started: List["asyncio.Task[None]"] = []

        for kind, lookup in self._lookups.items():
            key = self.resolver.dependency_key(kind, inputs)
            if key == lookup.key:
                continue

            lookup.key = key
            path = self.resolver.resolve(kind, inputs)
            lookup.path = path

            if path is None:
                lookup.status = LookupStatus.UNAVAILABLE
                lookup.value = None
                continue

            # Previous value stays visible until the new one arrives
            lookup.status = LookupStatus.PENDING
            task = asyncio.ensure_future(self._fetch(lookup, key, path))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            lookup.task = task
            started.append(task)

        return started

    async def refresh(self, inputs: Optional[MenuInputs] = None) -> None:
        """Apply ``inputs`` (or re-apply the current ones) and wait for fetches."""
        self.update(inputs if inputs is not None else self.inputs)
        await self.wait()

    async def wait(self) -> None:
        """Wait for every in-flight lookup to finish, stale ones included."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    def invalidate(self) -> None:
        """Forget every cached key so the next update refetches all paths."""
        for lookup in self._lookups.values():
            lookup.key = None

    async def _fetch(
        self, lookup: CapabilityLookup, key: DependencyKey, path: str
    ) -> None:
        try:
            raw = await self.store.query_capabilities(path)
            result = None if raw is None else CapabilityResult.coerce(path, raw)
        except CapabilityFetchError as e:
            logger.warning(f"Capability lookup for {path} failed: {e}")
            result = None
        except Exception as e:
            # Any store failure denies the action
            logger.warning(
                f"Capability lookup for {path} failed: {e.__class__.__name__}: {e}"
            )
            result = None

        if self.config.discard_stale_capability_results and lookup.key != key:
            logger.debug(f"Discarding stale capability result for {path}")
            return

        if result is None:
            lookup.status = LookupStatus.UNAVAILABLE
            lookup.value = None
            return

        lookup.status = LookupStatus.RESOLVED
        lookup.value = result

    def lookup(self, kind: ActionKind) -> CapabilityLookup:
        """Return the cache slot for ``kind``."""
        return self._lookups[ActionKind(kind)]

    def path(self, kind: ActionKind) -> Optional[str]:
        """Target path currently associated with ``kind``."""
        return self.lookup(kind).path

    def _granted(self, kind: ActionKind) -> bool:
        lookup = self._lookups[kind]
        if lookup.path is None:
            return False
        return lookup.grants(GRANT_ATTRIBUTES[kind])

    @property
    def can_undelete_version(self) -> bool:
        return self._granted(ActionKind.UNDELETE)

    @property
    def can_destroy_version(self) -> bool:
        return self._granted(ActionKind.DESTROY)

    @property
    def can_destroy_all_versions(self) -> bool:
        return self._granted(ActionKind.METADATA)

    @property
    def can_delete_secret_data(self) -> bool:
        return self._granted(ActionKind.DATA)

    @property
    def can_soft_delete_secret_data(self) -> bool:
        return self._granted(ActionKind.SOFT_DELETE)

    @property
    def is_latest_version(self) -> bool:
        """True when the loaded model's selected version is its current one."""
        model = self.inputs.model
        if model is None or model.current_version is None:
            return False
        selected = model.selected_version.version if model.selected_version else None
        return model.current_version == selected

    def permits(self, variant: DeleteVariant) -> bool:
        """Whether the flags allow offering ``variant``."""
        variant = DeleteVariant(variant)
        if variant in (DeleteVariant.V1, DeleteVariant.DELETE_LATEST_VERSION):
            return self.can_delete_secret_data
        if variant == DeleteVariant.DELETE:
            return self.can_soft_delete_secret_data
        if variant == DeleteVariant.DESTROY:
            return self.can_destroy_version
        if variant == DeleteVariant.UNDELETE:
            return self.can_undelete_version
        return self.can_destroy_all_versions

    def allowed_variants(self) -> List[DeleteVariant]:
        """Variants that may be offered for the current engine version."""
        if self.inputs.is_v2:
            candidates = [v for v in DeleteVariant if v != DeleteVariant.V1]
        else:
            candidates = [DeleteVariant.V1]
        return [v for v in candidates if self.permits(v)]

    def flags(self) -> Dict[str, bool]:
        """All derived flags by name."""
        return {
            "can_undelete_version": self.can_undelete_version,
            "can_destroy_version": self.can_destroy_version,
            "can_destroy_all_versions": self.can_destroy_all_versions,
            "can_delete_secret_data": self.can_delete_secret_data,
            "can_soft_delete_secret_data": self.can_soft_delete_secret_data,
            "is_latest_version": self.is_latest_version,
        }
