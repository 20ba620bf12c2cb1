"""
Delete dispatch.

Runs the delete menu's small state machine::

    IDLE -> CONFIRMING -> EXECUTING -> SUCCEEDED
                ^              |
                +--------------+  (adapter error)
                               -> FAILED  (whole-secret destroy rejected)

and selects the store call and target version for each delete variant.
The dispatcher is not reentrant; callers disable the menu while a delete
is executing.
"""

import logging
from typing import Any, Callable, Optional, Union

from ..config import DeleteToolkitConfig, get_config
from ..exceptions import DeleteToolkitError, UnsupportedVariantError
from ..models import MenuInputs
from ..store import Navigator, Notifier, PageReloader, SecretStore, missing_capabilities
from .models import DeleteOutcome, DeleteState, DeleteVariant
from .outcome import OutcomeHandler

logger = logging.getLogger(__name__)


def resolve_version(inputs: MenuInputs) -> Optional[int]:
    """
    Pick the version override for a versioned delete.

    Without metadata read access the selected version cannot be trusted, so
    the version of the last fetched data is used. With access, None is
    returned and the store acts on the selected version carried by the
    composite data id.
    """
    if inputs.can_read_secret_metadata:
        return None
    if inputs.model_for_data is None:
        return None
    return inputs.model_for_data.version


class DeleteDispatcher:
    """
    Executes delete, destroy, and undelete requests for one secret.

    Example:
        >>> dispatcher = DeleteDispatcher(store, router, flash, page, reload_model)
        >>> dispatcher.request_delete()
        >>> await dispatcher.handle_delete("destroy", inputs)
        <DeleteOutcome.REFRESHED: 'refreshed'>
    """

    def __init__(
        self,
        store: SecretStore,
        navigator: Navigator,
        notifier: Notifier,
        reloader: PageReloader,
        refresh: Callable[[], Any],
        config: Optional[DeleteToolkitConfig] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            store: Store performing the delete calls
            navigator: Router used after a whole secret is destroyed
            notifier: Displays delete errors
            reloader: Forces a reload on an unexpected response
            refresh: Called (and awaited if it returns an awaitable) after a
                successful versioned delete
            config: Configuration, defaults to the global configuration
        """
        missing = list(missing_capabilities(store))
        if missing:
            raise TypeError(f"Store is missing required methods: {', '.join(missing)}")

        self.store = store
        self.navigator = navigator
        self.config = config or get_config()
        self._refresh = refresh
        self._state = DeleteState.IDLE
        self.outcome_handler = OutcomeHandler(
            notifier=notifier,
            reloader=reloader,
            refresh=self._close_and_refresh,
            config=self.config,
        )

    @property
    def state(self) -> DeleteState:
        return self._state

    @property
    def show_confirmation(self) -> bool:
        """Whether the confirmation prompt should be visible."""
        return self._state in (
            DeleteState.CONFIRMING,
            DeleteState.EXECUTING,
            DeleteState.FAILED,
        )

    @property
    def last_error(self) -> Optional[str]:
        return self.outcome_handler.last_error

    def request_delete(self) -> None:
        """Open the confirmation prompt."""
        if self._state == DeleteState.EXECUTING:
            return
        self._state = DeleteState.CONFIRMING

    def cancel(self) -> None:
        """Close the confirmation prompt without deleting."""
        if self._state == DeleteState.EXECUTING:
            return
        self._state = DeleteState.IDLE

    def _close_and_refresh(self) -> Any:
        self._state = DeleteState.SUCCEEDED
        return self._refresh()

    @staticmethod
    def _coerce(variant: Union[DeleteVariant, str]) -> DeleteVariant:
        try:
            return DeleteVariant(variant)
        except ValueError:
            raise UnsupportedVariantError(str(variant))

    async def handle_delete(
        self, variant: Union[DeleteVariant, str, None], inputs: MenuInputs
    ) -> DeleteOutcome:
        """
        Perform ``variant`` against the secret described by ``inputs``.

        An empty variant does nothing.

        Raises:
            UnsupportedVariantError: If ``variant`` is not a known variant
            DeleteToolkitError: If the object the variant needs is not loaded
            DeleteTransportError: If destroying the whole secret is rejected
        """
        if not variant:
            return DeleteOutcome.SKIPPED

        variant = self._coerce(variant)
        if variant.removes_whole_secret:
            return await self._destroy_secret(variant, inputs)
        return await self._delete_version(variant, inputs)

    async def _destroy_secret(
        self, variant: DeleteVariant, inputs: MenuInputs
    ) -> DeleteOutcome:
        model = inputs.model
        if model is None:
            raise DeleteToolkitError(f"Cannot {variant.value}: no secret is loaded")

        logger.info(f"Destroying secret {model.mount}/{model.id} ({variant.value})")
        self._state = DeleteState.EXECUTING
        try:
            await self.store.destroy_record(model)
        except Exception:
            self._state = DeleteState.FAILED
            raise

        self._state = DeleteState.SUCCEEDED
        self.navigator.transition_to(self.config.list_root_route, model.mount)
        return DeleteOutcome.NAVIGATED

    async def _delete_version(
        self, variant: DeleteVariant, inputs: MenuInputs
    ) -> DeleteOutcome:
        data = inputs.model_for_data
        if data is None:
            raise DeleteToolkitError(
                f"Cannot {variant.value}: no secret version is loaded"
            )

        version = resolve_version(inputs)
        logger.info(
            f"Running {variant.value} on {data.id}"
            + (f" (version {version})" if version is not None else "")
        )
        self._state = DeleteState.EXECUTING
        try:
            response = await self.store.v2_delete_operation(
                data.id, variant.value, version
            )
        except Exception:
            self._state = DeleteState.FAILED
            raise

        outcome = await self.outcome_handler.handle(response)
        if outcome == DeleteOutcome.ERROR_SHOWN:
            self._state = DeleteState.CONFIRMING
        elif outcome == DeleteOutcome.RELOADED:
            self._state = DeleteState.SUCCEEDED
        return outcome
