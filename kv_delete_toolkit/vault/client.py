"""
Vault HTTP client.

Implements the SecretStore protocol against the Vault HTTP API using
``httpx``. Versioned delete failures are returned as AdapterErrorResponse
objects rather than raised, so the delete menu can show them.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from ..capabilities.models import CapabilityResult
from ..config import DeleteToolkitConfig, get_config
from ..delete.models import AdapterErrorResponse, DeleteVariant
from ..exceptions import (
    CapabilityFetchError,
    DeleteTransportError,
    UnsupportedVariantError,
)
from ..models import SecretModel, parse_composite_id

logger = logging.getLogger(__name__)

VERSIONED_VARIANTS = {
    DeleteVariant.DELETE,
    DeleteVariant.DESTROY,
    DeleteVariant.UNDELETE,
    DeleteVariant.DELETE_LATEST_VERSION,
}


def _error_messages(response: httpx.Response) -> List[str]:
    """Extract Vault's ``errors`` list from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    errors = body.get("errors") or []
    return [str(e) for e in errors if e]


class VaultHttpStore:
    """
    SecretStore backed by a Vault server.

    The address, token, and namespace fall back to ``VAULT_ADDR``,
    ``VAULT_TOKEN``, and ``VAULT_NAMESPACE`` and then to the toolkit
    configuration.

    Example:
        >>> async with VaultHttpStore(addr="https://vault.example.com") as store:
        ...     caps = await store.query_capabilities("secret/data/app")
    """

    def __init__(
        self,
        addr: Optional[str] = None,
        token: Optional[str] = None,
        namespace: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        config: Optional[DeleteToolkitConfig] = None,
    ):
        """
        Initialize the store.

        Args:
            addr: Vault address such as ``https://vault.example.com:8200``
            token: Vault token sent as ``X-Vault-Token``
            namespace: Namespace sent as ``X-Vault-Namespace``
            timeout: Request timeout in seconds
            transport: Custom httpx transport
            config: Configuration, defaults to the global configuration
        """
        config = config or get_config()

        self.addr = (addr or os.getenv("VAULT_ADDR") or config.vault_addr).rstrip("/")
        self.token = token or os.getenv("VAULT_TOKEN") or config.vault_token
        self.namespace = (
            namespace or os.getenv("VAULT_NAMESPACE") or config.vault_namespace
        )
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds

        headers: Dict[str, str] = {}
        if self.token:
            headers["X-Vault-Token"] = self.token
        if self.namespace:
            headers["X-Vault-Namespace"] = self.namespace

        self._client = httpx.AsyncClient(
            base_url=f"{self.addr}/v1/",
            headers=headers,
            timeout=self.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "VaultHttpStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def query_capabilities(self, path: str) -> CapabilityResult:
        """
        Ask Vault which capabilities the current token has on ``path``.

        Raises:
            CapabilityFetchError: On transport errors or non-2xx responses
        """
        try:
            response = await self._client.post(
                "sys/capabilities-self", json={"paths": [path]}
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            messages = _error_messages(e.response)
            reason = "; ".join(messages) or f"HTTP {e.response.status_code}"
            raise CapabilityFetchError(path, reason)
        except (httpx.HTTPError, ValueError) as e:
            raise CapabilityFetchError(path, str(e) or e.__class__.__name__)

        if not isinstance(body, dict):
            raise CapabilityFetchError(path, "unexpected response body")

        data = body.get("data") or {}
        capabilities = (
            body.get(path)
            or body.get("capabilities")
            or data.get(path)
            or data.get("capabilities")
            or []
        )
        logger.debug(f"Capabilities for {path}: {capabilities}")
        return CapabilityResult.from_capabilities(path, capabilities)

    async def v2_delete_operation(
        self,
        composite_id: str,
        variant: str,
        version_override: Optional[int] = None,
    ) -> Optional[AdapterErrorResponse]:
        """
        Delete, destroy, or undelete one version of a KV v2 secret.

        ``delete-latest-version``, and ``delete`` when the composite id carries
        no version, soft-delete the latest version. Every other case posts the
        chosen version (the override, else the id's version) to the variant's
        endpoint.

        Returns:
            None on success, otherwise an AdapterErrorResponse
        """
        identity = parse_composite_id(composite_id)
        try:
            variant = DeleteVariant(variant)
        except ValueError:
            raise UnsupportedVariantError(str(variant))
        if variant not in VERSIONED_VARIANTS:
            raise UnsupportedVariantError(variant.value)

        try:
            if variant == DeleteVariant.DELETE_LATEST_VERSION or (
                variant == DeleteVariant.DELETE and identity.version is None
            ):
                response = await self._client.delete(
                    f"{identity.backend}/data/{identity.id}"
                )
            else:
                version = (
                    version_override
                    if version_override is not None
                    else identity.version
                )
                if version is None:
                    return AdapterErrorResponse(
                        errors=[f"No version selected to {variant.value}"]
                    )
                response = await self._client.post(
                    f"{identity.backend}/{variant.value}/{identity.id}",
                    json={"versions": [version]},
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return AdapterErrorResponse(
                errors=_error_messages(e.response), status=e.response.status_code
            )
        except httpx.HTTPError as e:
            logger.error(f"Request to Vault failed: {e}")
            return AdapterErrorResponse(errors=[str(e)] if str(e) else [])

        return None

    async def destroy_record(self, model: SecretModel) -> None:
        """
        Permanently remove a secret with all of its versions.

        Raises:
            DeleteTransportError: If Vault rejects the request
        """
        if model.engine is not None and model.engine.is_v2:
            path = f"{model.engine.id}/metadata/{model.id}"
        else:
            path = f"{model.mount}/{model.id}"

        try:
            response = await self._client.delete(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            messages = _error_messages(e.response)
            raise DeleteTransportError(
                path, "; ".join(messages) or f"HTTP {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            raise DeleteTransportError(path, str(e) or e.__class__.__name__)
