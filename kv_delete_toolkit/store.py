"""
Collaborator interfaces.

The delete menu never talks to HTTP, routing, or the screen directly; these
protocols are supplied at construction time instead.
"""

from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .capabilities.models import CapabilityResult
    from .models import SecretModel


@runtime_checkable
class SecretStore(Protocol):
    """Backend that answers capability queries and performs deletes."""

    async def query_capabilities(self, path: str) -> "CapabilityResult":
        """
        Check which operations the caller may perform on ``path``.

        Raises:
            CapabilityFetchError: If the query could not be completed
        """
        ...

    async def v2_delete_operation(
        self,
        composite_id: str,
        variant: str,
        version_override: Optional[int] = None,
    ) -> Optional[Any]:
        """
        Delete, destroy, or undelete one version of a secret.

        Returns None on success, an ``AdapterErrorResponse`` on a structured
        failure, and anything else in the unexpected case.
        """
        ...

    async def destroy_record(self, model: "SecretModel") -> None:
        """
        Remove the whole secret and all of its versions.

        Raises:
            DeleteTransportError: If the store rejects the request
        """
        ...


@runtime_checkable
class Navigator(Protocol):
    """Moves the caller to another route."""

    def transition_to(self, route: str, *params: Any) -> Any: ...


@runtime_checkable
class Notifier(Protocol):
    """Shows messages to the user."""

    def danger(self, message: str) -> None: ...


@runtime_checkable
class PageReloader(Protocol):
    """Forces a full reload of the current view."""

    def reload(self) -> None: ...


def missing_capabilities(store: Any) -> Iterable[str]:
    """Names of SecretStore methods that ``store`` lacks."""
    for name in ("query_capabilities", "v2_delete_operation", "destroy_record"):
        if not callable(getattr(store, name, None)):
            yield name
