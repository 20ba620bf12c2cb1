"""Vault Module - SecretStore implementation over the Vault HTTP API."""

from .client import VaultHttpStore

__all__ = ["VaultHttpStore"]
