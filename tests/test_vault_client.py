"""Tests for the Vault HTTP store."""

import json

import httpx
import pytest

from kv_delete_toolkit.delete import AdapterErrorResponse
from kv_delete_toolkit.exceptions import (
    CapabilityFetchError,
    CompositeIdError,
    DeleteTransportError,
    UnsupportedVariantError,
)
from kv_delete_toolkit.models import EngineRef, SecretModel
from kv_delete_toolkit.vault import VaultHttpStore

pytestmark = pytest.mark.vault


class RecordingTransport:
    """Builds an httpx.MockTransport that records requests."""

    def __init__(self, status=200, body=None, error=None):
        self.status = status
        self.body = body
        self.error = error
        self.requests = []

    def handler(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.body is None:
            return httpx.Response(self.status)
        return httpx.Response(self.status, json=self.body)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    @property
    def last(self):
        return self.requests[-1]


def make_store(recorder, **kwargs):
    return VaultHttpStore(
        addr="http://vault.test:8200",
        token="s.test",
        transport=recorder.transport,
        **kwargs,
    )


class TestConfiguration:
    """Test how the store picks up its settings."""

    @pytest.mark.asyncio
    async def test_headers(self):
        """Test that token and namespace headers are sent."""
        recorder = RecordingTransport(body={"capabilities": ["read"]})
        async with make_store(recorder, namespace="team-a") as store:
            await store.query_capabilities("kv/data/s1")

        assert recorder.last.headers["X-Vault-Token"] == "s.test"
        assert recorder.last.headers["X-Vault-Namespace"] == "team-a"

    @pytest.mark.asyncio
    async def test_environment_overrides_config(self, monkeypatch):
        """Test that VAULT_ADDR and VAULT_TOKEN are honored."""
        monkeypatch.setenv("VAULT_ADDR", "https://vault.env:8200/")
        monkeypatch.setenv("VAULT_TOKEN", "s.env")
        recorder = RecordingTransport(body={"capabilities": []})

        async with VaultHttpStore(transport=recorder.transport) as store:
            await store.query_capabilities("kv/data/s1")

        assert store.addr == "https://vault.env:8200"
        assert str(recorder.last.url) == "https://vault.env:8200/v1/sys/capabilities-self"
        assert recorder.last.headers["X-Vault-Token"] == "s.env"


class TestQueryCapabilities:
    """Test capability queries."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test the capabilities-self request."""
        recorder = RecordingTransport(body={"capabilities": ["read", "update"]})
        async with make_store(recorder) as store:
            result = await store.query_capabilities("kv/delete/s1")

        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/v1/sys/capabilities-self"
        assert json.loads(recorder.last.content) == {"paths": ["kv/delete/s1"]}
        assert result.path == "kv/delete/s1"
        assert result.can_read is True
        assert result.can_update is True
        assert result.can_delete is False

    @pytest.mark.asyncio
    async def test_path_keyed_response(self):
        """Test responses that key capabilities by path."""
        recorder = RecordingTransport(body={"data": {"kv/data/s1": ["delete"]}})
        async with make_store(recorder) as store:
            result = await store.query_capabilities("kv/data/s1")

        assert result.can_delete is True

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test that a failed query raises CapabilityFetchError."""
        recorder = RecordingTransport(status=403, body={"errors": ["permission denied"]})
        async with make_store(recorder) as store:
            with pytest.raises(CapabilityFetchError) as exc:
                await store.query_capabilities("kv/data/s1")

        assert "permission denied" in str(exc.value)
        assert exc.value.path == "kv/data/s1"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test that connection failures raise CapabilityFetchError."""
        recorder = RecordingTransport(error=httpx.ConnectError("connection refused"))
        async with make_store(recorder) as store:
            with pytest.raises(CapabilityFetchError):
                await store.query_capabilities("kv/data/s1")


class TestVersionedDelete:
    """Test versioned delete operations."""

    @pytest.mark.asyncio
    async def test_delete_latest_version(self):
        """Test that delete-latest-version deletes the data path."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            response = await store.v2_delete_operation(
                '["kv","app/db",3]', "delete-latest-version"
            )

        assert response is None
        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/v1/kv/data/app/db"

    @pytest.mark.asyncio
    async def test_delete_without_version_targets_latest(self):
        """Test that delete with no version in the id deletes the latest."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            await store.v2_delete_operation('["kv","s1"]', "delete")

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/v1/kv/data/s1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("variant", ["delete", "destroy", "undelete"])
    async def test_version_from_id(self, variant):
        """Test posting the composite id's version to the variant endpoint."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            await store.v2_delete_operation('["kv","s1",3]', variant)

        assert recorder.last.method == "POST"
        assert recorder.last.url.path == f"/v1/kv/{variant}/s1"
        assert json.loads(recorder.last.content) == {"versions": [3]}

    @pytest.mark.asyncio
    async def test_version_override(self):
        """Test that an override replaces the composite id's version."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            await store.v2_delete_operation('["kv","s1",3]', "destroy", 1)

        assert json.loads(recorder.last.content) == {"versions": [1]}

    @pytest.mark.asyncio
    async def test_missing_version(self):
        """Test that destroy without any version returns an error response."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            response = await store.v2_delete_operation('["kv","s1"]', "destroy")

        assert isinstance(response, AdapterErrorResponse)
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_http_error_returned(self):
        """Test that Vault errors are returned, not raised."""
        recorder = RecordingTransport(status=403, body={"errors": ["access denied"]})
        async with make_store(recorder) as store:
            response = await store.v2_delete_operation('["kv","s1",3]', "undelete")

        assert response.is_adapter_error is True
        assert response.errors == ["access denied"]
        assert response.status == 403

    @pytest.mark.asyncio
    async def test_transport_error_returned(self):
        """Test that connection failures are returned as error responses."""
        recorder = RecordingTransport(error=httpx.ConnectError("connection refused"))
        async with make_store(recorder) as store:
            response = await store.v2_delete_operation('["kv","s1",3]', "destroy")

        assert response.errors == ["connection refused"]

    @pytest.mark.asyncio
    async def test_rejects_whole_secret_variants(self):
        """Test that whole-secret variants are not versioned operations."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            with pytest.raises(UnsupportedVariantError):
                await store.v2_delete_operation('["kv","s1",3]', "v1")

    @pytest.mark.asyncio
    async def test_rejects_bad_composite_id(self):
        """Test that a malformed composite id is raised."""
        recorder = RecordingTransport(status=204)
        async with make_store(recorder) as store:
            with pytest.raises(CompositeIdError):
                await store.v2_delete_operation("s1", "destroy", 1)


class TestDestroyRecord:
    """Test destroying whole secrets."""

    @pytest.mark.asyncio
    async def test_v2_destroys_metadata(self):
        """Test that v2 secrets are destroyed through the metadata path."""
        recorder = RecordingTransport(status=204)
        model = SecretModel(id="app/db", engine=EngineRef(id="kv", version=2))
        async with make_store(recorder) as store:
            await store.destroy_record(model)

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/v1/kv/metadata/app/db"

    @pytest.mark.asyncio
    async def test_v1_deletes_secret_path(self):
        """Test that v1 secrets are deleted at their own path."""
        recorder = RecordingTransport(status=204)
        model = SecretModel(id="s2", backend="kv1")
        async with make_store(recorder) as store:
            await store.destroy_record(model)

        assert recorder.last.url.path == "/v1/kv1/s2"

    @pytest.mark.asyncio
    async def test_failure_raises(self):
        """Test that a rejected destroy raises DeleteTransportError."""
        recorder = RecordingTransport(status=403, body={"errors": ["permission denied"]})
        model = SecretModel(id="s1", engine=EngineRef(id="kv", version=2))
        async with make_store(recorder) as store:
            with pytest.raises(DeleteTransportError) as exc:
                await store.destroy_record(model)

        assert exc.value.path == "kv/metadata/s1"
        assert "permission denied" in str(exc.value)
