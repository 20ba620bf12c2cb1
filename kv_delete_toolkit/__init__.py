"""
KV Delete Toolkit - permission-aware delete, destroy, and undelete of
versioned secrets.

This toolkit holds the decision logic behind a secret's delete menu: which
authorization checks to issue for the secret on screen, which delete actions
those checks allow, and which store call to make for the action the user
picks.

Key Features
------------
* **Capability paths**: exact check targets for KV v1 and v2 engines
* **Capability cache**: asynchronous, keyed lookups that deny by default
* **Delete dispatch**: version targeting with or without metadata access
* **Outcome handling**: refresh, error message, or reload per result
* **Vault store**: SecretStore implementation over the Vault HTTP API

Quick Start
-----------
>>> from kv_delete_toolkit import (
...     CapabilityAvailability, DeleteDispatcher, MenuInputs, VaultHttpStore
... )
>>>
>>> store = VaultHttpStore(addr="https://vault.example.com")
>>> availability = CapabilityAvailability(store)
>>> await availability.refresh(inputs)
>>> if availability.permits("destroy"):
...     await dispatcher.handle_delete("destroy", inputs)
"""

__version__ = "1.0.0"

from .capabilities import (
    ActionKind,
    CapabilityAvailability,
    CapabilityPathResolver,
    CapabilityResult,
)
from .config import DeleteToolkitConfig, configure, get_config, set_config
from .delete import (
    AdapterErrorResponse,
    DeleteDispatcher,
    DeleteOutcome,
    DeleteState,
    DeleteVariant,
    OutcomeHandler,
    get_error_message,
)
from .exceptions import (
    CapabilityFetchError,
    CompositeIdError,
    DeleteToolkitError,
    DeleteTransportError,
    UnsupportedVariantError,
)
from .models import (
    EngineRef,
    InteractionMode,
    MenuInputs,
    SecretDataModel,
    SecretIdentity,
    SecretModel,
    SelectedVersion,
    parse_composite_id,
)
from .store import Navigator, Notifier, PageReloader, SecretStore
from .vault import VaultHttpStore

__all__ = [
    # Capabilities
    "ActionKind",
    "CapabilityAvailability",
    "CapabilityPathResolver",
    "CapabilityResult",
    # Delete
    "AdapterErrorResponse",
    "DeleteDispatcher",
    "DeleteOutcome",
    "DeleteState",
    "DeleteVariant",
    "OutcomeHandler",
    "get_error_message",
    # Models
    "EngineRef",
    "InteractionMode",
    "MenuInputs",
    "SecretDataModel",
    "SecretIdentity",
    "SecretModel",
    "SelectedVersion",
    "parse_composite_id",
    # Collaborators
    "SecretStore",
    "Navigator",
    "Notifier",
    "PageReloader",
    "VaultHttpStore",
    # Exceptions
    "DeleteToolkitError",
    "CompositeIdError",
    "CapabilityFetchError",
    "DeleteTransportError",
    "UnsupportedVariantError",
    # Configuration
    "DeleteToolkitConfig",
    "configure",
    "get_config",
    "set_config",
]
