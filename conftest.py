"""Pytest configuration for the KV Delete Toolkit."""

import pytest

from kv_delete_toolkit.config import DeleteToolkitConfig, set_config


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add custom markers
    config.addinivalue_line("markers", "vault: mark test as exercising the Vault store")


@pytest.fixture(autouse=True)
def toolkit_config(monkeypatch):
    """Give every test a fresh default configuration."""
    for var in ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_NAMESPACE"):
        monkeypatch.delenv(var, raising=False)
    config = DeleteToolkitConfig(environment="test")
    set_config(config)
    yield config
    set_config(None)
