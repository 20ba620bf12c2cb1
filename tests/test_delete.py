"""
Tests for delete dispatch and outcome handling.

Tests cover version targeting, the whole-secret destroy path, and the three
outcomes of a versioned delete.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from kv_delete_toolkit.config import DEFAULT_ERROR_MESSAGE, DeleteToolkitConfig
from kv_delete_toolkit.delete import (
    AdapterErrorResponse,
    DeleteDispatcher,
    DeleteOutcome,
    DeleteState,
    DeleteVariant,
    OutcomeHandler,
    get_error_message,
    is_adapter_error,
    resolve_version,
)
from kv_delete_toolkit.exceptions import (
    DeleteToolkitError,
    DeleteTransportError,
    UnsupportedVariantError,
)
from kv_delete_toolkit.models import (
    EngineRef,
    MenuInputs,
    SecretDataModel,
    SecretModel,
    SelectedVersion,
)

VERSIONED = ["delete", "destroy", "undelete", "delete-latest-version"]
WHOLE_SECRET = ["destroy-all-versions", "v1"]


@pytest.fixture
def store():
    """Store mock whose versioned delete succeeds with no body."""
    mock = AsyncMock()
    mock.v2_delete_operation.return_value = None
    mock.destroy_record.return_value = None
    return mock


@pytest.fixture
def collaborators():
    """Navigator, notifier, reloader, and refresh callback mocks."""
    return {
        "navigator": Mock(),
        "notifier": Mock(),
        "reloader": Mock(),
        "refresh": Mock(return_value=None),
    }


@pytest.fixture
def dispatcher(store, collaborators):
    """Dispatcher with the confirmation prompt open."""
    dispatcher = DeleteDispatcher(store=store, **collaborators)
    dispatcher.request_delete()
    return dispatcher


def make_inputs(metadata_access=True, data_version=2, selected=5):
    """Inputs where the fetched data version differs from the selected one."""
    return MenuInputs(
        model=SecretModel(
            id="s1",
            engine=EngineRef(id="kv", version=2),
            current_version=5,
            selected_version=SelectedVersion(selected),
        ),
        model_for_data=SecretDataModel(id='["kv","s1",5]', version=data_version),
        is_v2=True,
        can_read_secret_metadata=metadata_access,
    )


class TestErrorMessage:
    """Test building user-visible error messages."""

    def test_single_error(self):
        """Test that a single error is shown verbatim."""
        assert get_error_message(["access denied"]) == "access denied"

    def test_multiple_errors_joined(self):
        """Test that errors are joined with a period and a space."""
        message = get_error_message(["permission denied", "invalid token"])

        assert message == "permission denied. invalid token"

    @pytest.mark.parametrize("errors", [[], None])
    def test_fallback_message(self, errors):
        """Test the generic message when no error text is present."""
        assert get_error_message(errors) == DEFAULT_ERROR_MESSAGE

    def test_configured_fallback(self):
        """Test that the fallback message comes from configuration."""
        config = DeleteToolkitConfig(
            environment="test", generic_error_message="Delete failed"
        )

        assert get_error_message([], config) == "Delete failed"


class TestResolveVersion:
    """Test choosing the version override."""

    def test_without_metadata_access_uses_fetched_version(self):
        """Test that the fetched data version wins without metadata access."""
        assert resolve_version(make_inputs(metadata_access=False)) == 2

    def test_with_metadata_access_uses_selected_version(self):
        """Test that no override is sent when the selection can be trusted."""
        assert resolve_version(make_inputs(metadata_access=True)) is None

    def test_without_data(self):
        """Test that missing data yields no override."""
        assert resolve_version(MenuInputs()) is None


class TestDispatch:
    """Test selecting the store call for each variant."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("variant", [None, ""])
    async def test_empty_variant_is_noop(self, dispatcher, store, variant):
        """Test that an empty variant does nothing."""
        outcome = await dispatcher.handle_delete(variant, make_inputs())

        assert outcome == DeleteOutcome.SKIPPED
        assert dispatcher.state == DeleteState.CONFIRMING
        store.v2_delete_operation.assert_not_called()
        store.destroy_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_variant(self, dispatcher, store):
        """Test that unknown variants are rejected before any store call."""
        with pytest.raises(UnsupportedVariantError):
            await dispatcher.handle_delete("shred", make_inputs())

        store.v2_delete_operation.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("variant", WHOLE_SECRET)
    async def test_whole_secret_variants_destroy_record(
        self, dispatcher, store, collaborators, variant
    ):
        """Test that whole-secret variants destroy the record and navigate once."""
        inputs = make_inputs()

        outcome = await dispatcher.handle_delete(variant, inputs)

        assert outcome == DeleteOutcome.NAVIGATED
        store.destroy_record.assert_awaited_once_with(inputs.model)
        store.v2_delete_operation.assert_not_called()
        collaborators["navigator"].transition_to.assert_called_once_with(
            "vault.cluster.secrets.backend.list-root", "kv"
        )
        assert dispatcher.state == DeleteState.SUCCEEDED
        assert dispatcher.show_confirmation is False

    @pytest.mark.asyncio
    async def test_whole_secret_rejection_propagates(
        self, dispatcher, store, collaborators
    ):
        """Test that a rejected destroy is raised and nothing navigates."""
        store.destroy_record.side_effect = DeleteTransportError(
            "kv/metadata/s1", "permission denied"
        )

        with pytest.raises(DeleteTransportError):
            await dispatcher.handle_delete(DeleteVariant.DESTROY_ALL_VERSIONS, make_inputs())

        collaborators["navigator"].transition_to.assert_not_called()
        assert dispatcher.state == DeleteState.FAILED
        assert dispatcher.show_confirmation is True

    @pytest.mark.asyncio
    async def test_whole_secret_without_model(self, dispatcher):
        """Test that destroying without a loaded secret raises."""
        with pytest.raises(DeleteToolkitError):
            await dispatcher.handle_delete("v1", MenuInputs())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("variant", VERSIONED)
    async def test_no_metadata_access_uses_fetched_version(
        self, dispatcher, store, variant
    ):
        """Test that the fetched data version is sent without metadata access."""
        await dispatcher.handle_delete(variant, make_inputs(metadata_access=False))

        store.v2_delete_operation.assert_awaited_once_with('["kv","s1",5]', variant, 2)
        store.destroy_record.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("variant", VERSIONED)
    async def test_metadata_access_uses_selected_version(
        self, dispatcher, store, variant
    ):
        """Test that no override is sent with metadata access."""
        await dispatcher.handle_delete(variant, make_inputs(metadata_access=True))

        store.v2_delete_operation.assert_awaited_once_with(
            '["kv","s1",5]', variant, None
        )

    @pytest.mark.asyncio
    async def test_versioned_without_data(self, dispatcher):
        """Test that a versioned delete needs loaded data."""
        with pytest.raises(DeleteToolkitError):
            await dispatcher.handle_delete("destroy", MenuInputs())


class TestOutcomes:
    """Test reacting to versioned delete results."""

    @pytest.mark.asyncio
    async def test_no_body_closes_and_refreshes(self, dispatcher, collaborators):
        """Test that an empty response closes the prompt and refreshes."""
        seen = []
        collaborators["refresh"].side_effect = lambda: seen.append(
            dispatcher.show_confirmation
        )

        outcome = await dispatcher.handle_delete("delete", make_inputs())

        assert outcome == DeleteOutcome.REFRESHED
        assert seen == [False]
        assert dispatcher.state == DeleteState.SUCCEEDED
        collaborators["notifier"].danger.assert_not_called()

    @pytest.mark.asyncio
    async def test_repeated_success_is_safe(self, dispatcher, collaborators):
        """Test that handling the same success twice never errors."""
        await dispatcher.handle_delete("delete", make_inputs())
        dispatcher.request_delete()
        outcome = await dispatcher.handle_delete("delete", make_inputs())

        assert outcome == DeleteOutcome.REFRESHED
        assert collaborators["refresh"].call_count == 2
        assert dispatcher.show_confirmation is False

    @pytest.mark.asyncio
    async def test_async_refresh_is_awaited(self, store, collaborators):
        """Test that a coroutine refresh callback is awaited."""
        collaborators["refresh"] = AsyncMock()
        dispatcher = DeleteDispatcher(store=store, **collaborators)

        await dispatcher.handle_delete("undelete", make_inputs())

        collaborators["refresh"].assert_awaited_once()

    @pytest.mark.asyncio
    async def test_adapter_error_shows_message(self, dispatcher, store, collaborators):
        """Test that an adapter error is shown and the prompt stays open."""
        store.v2_delete_operation.return_value = AdapterErrorResponse(
            errors=["access denied"]
        )

        outcome = await dispatcher.handle_delete("destroy", make_inputs())

        assert outcome == DeleteOutcome.ERROR_SHOWN
        collaborators["notifier"].danger.assert_called_once_with("access denied")
        collaborators["refresh"].assert_not_called()
        assert dispatcher.state == DeleteState.CONFIRMING
        assert dispatcher.show_confirmation is True
        assert dispatcher.last_error == "access denied"

    @pytest.mark.asyncio
    async def test_adapter_error_without_messages(
        self, dispatcher, store, collaborators
    ):
        """Test the generic message for an error with no text."""
        store.v2_delete_operation.return_value = AdapterErrorResponse(errors=[])

        await dispatcher.handle_delete("destroy", make_inputs())

        collaborators["notifier"].danger.assert_called_once_with(DEFAULT_ERROR_MESSAGE)

    @pytest.mark.asyncio
    async def test_unexpected_response_reloads(self, dispatcher, store, collaborators):
        """Test that a non-error body forces a reload."""
        store.v2_delete_operation.return_value = {"data": {"version": 5}}

        outcome = await dispatcher.handle_delete("undelete", make_inputs())

        assert outcome == DeleteOutcome.RELOADED
        collaborators["reloader"].reload.assert_called_once()
        collaborators["refresh"].assert_not_called()
        collaborators["notifier"].danger.assert_not_called()

    @pytest.mark.asyncio
    async def test_dict_error_response(self, collaborators):
        """Test that dict-shaped error responses are recognized."""
        handler = OutcomeHandler(
            notifier=collaborators["notifier"],
            reloader=collaborators["reloader"],
            refresh=collaborators["refresh"],
        )

        outcome = await handler.handle({"is_adapter_error": True, "errors": ["a", "b"]})

        assert outcome == DeleteOutcome.ERROR_SHOWN
        collaborators["notifier"].danger.assert_called_once_with("a. b")


class TestConfirmation:
    """Test the confirmation prompt state."""

    def test_initially_closed(self, store, collaborators):
        """Test that a new dispatcher is idle."""
        dispatcher = DeleteDispatcher(store=store, **collaborators)

        assert dispatcher.state == DeleteState.IDLE
        assert dispatcher.show_confirmation is False

    def test_request_and_cancel(self, dispatcher):
        """Test opening and closing the prompt."""
        assert dispatcher.show_confirmation is True

        dispatcher.cancel()

        assert dispatcher.state == DeleteState.IDLE
        assert dispatcher.show_confirmation is False

    def test_is_adapter_error(self):
        """Test recognizing error responses."""
        assert is_adapter_error(AdapterErrorResponse(errors=["x"]))
        assert not is_adapter_error({"data": {}})
        assert not is_adapter_error(None)
