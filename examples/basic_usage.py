"""
Basic Usage Example - KV Delete Toolkit

This is a demonstration file. It wires the capability cache and the delete
dispatcher to a small in-memory store so it runs without a Vault server.
Pass ``--vault`` to run the same flow against the server named by
VAULT_ADDR and VAULT_TOKEN.
"""

import asyncio
import sys
from typing import Dict, List, Optional

from kv_delete_toolkit import (
    AdapterErrorResponse,
    CapabilityAvailability,
    CapabilityResult,
    DeleteDispatcher,
    EngineRef,
    MenuInputs,
    SecretDataModel,
    SecretModel,
    SelectedVersion,
    VaultHttpStore,
    parse_composite_id,
)


class InMemoryStore:
    """Store with a fixed policy and a dict of secret versions."""

    def __init__(self, policy: Dict[str, List[str]]):
        self.policy = policy
        self.versions: Dict[str, Dict[int, str]] = {"kv/app/db": {1: "live", 2: "live"}}

    async def query_capabilities(self, path: str) -> CapabilityResult:
        return CapabilityResult.from_capabilities(path, self.policy.get(path, ["deny"]))

    async def v2_delete_operation(
        self, composite_id: str, variant: str, version_override: Optional[int] = None
    ):
        identity = parse_composite_id(composite_id)
        version = version_override or identity.version
        key = f"{identity.backend}/{identity.id}"
        if version not in self.versions.get(key, {}):
            return AdapterErrorResponse(errors=[f"version {version} not found"])
        states = {"delete": "deleted", "destroy": "destroyed", "undelete": "live"}
        self.versions[key][version] = states.get(variant, "deleted")
        return None

    async def destroy_record(self, model: SecretModel) -> None:
        self.versions.pop(f"{model.mount}/{model.id}", None)


class PrintingRouter:
    def transition_to(self, route, *params):
        print(f"→ navigating to {route} {' '.join(map(str, params))}")


class PrintingFlash:
    def danger(self, message):
        print(f"✗ {message}")


class PrintingPage:
    def reload(self):
        print("⚠ reloading page")


def secret_inputs(version: int) -> MenuInputs:
    """Inputs for version ``version`` of kv/app/db."""
    return MenuInputs(
        model=SecretModel(
            id="app/db",
            engine=EngineRef(id="kv", version=2),
            current_version=2,
            selected_version=SelectedVersion(version),
        ),
        model_for_data=SecretDataModel(id=f'["kv","app/db",{version}]', version=version),
        is_v2=True,
        can_read_secret_metadata=True,
    )


async def run(store) -> None:
    inputs = secret_inputs(version=2)

    print("\n🔐 CAPABILITIES")
    print("=" * 50)
    availability = CapabilityAvailability(store)
    await availability.refresh(inputs)
    for name, value in availability.flags().items():
        print(f"  {name:30} {'✓' if value else '✗'}")
    print(f"  allowed: {[v.value for v in availability.allowed_variants()]}")

    print("\n🗑️  DELETE")
    print("=" * 50)
    dispatcher = DeleteDispatcher(
        store=store,
        navigator=PrintingRouter(),
        notifier=PrintingFlash(),
        reloader=PrintingPage(),
        refresh=lambda: print("✅ version updated, refreshing secret"),
    )
    for variant in ("delete", "undelete", "destroy"):
        if not availability.permits(variant):
            print(f"  skipping {variant}: not permitted")
            continue
        dispatcher.request_delete()
        outcome = await dispatcher.handle_delete(variant, inputs)
        print(f"  {variant}: {outcome.value}")


def main() -> None:
    if "--vault" in sys.argv:
        asyncio.run(_run_vault())
        return

    store = InMemoryStore(
        policy={
            "kv/undelete/app/db": ["update"],
            "kv/destroy/app/db": ["update"],
            "kv/metadata/app/db": ["read"],
            "kv/data/app/db": ["read", "delete"],
            "kv/delete/app/db": ["update"],
        }
    )
    asyncio.run(run(store))
    print(f"\nFinal state: {store.versions}")


async def _run_vault() -> None:
    async with VaultHttpStore() as store:
        await run(store)


if __name__ == "__main__":
    main()
