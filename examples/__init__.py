"""
KV Delete Toolkit Examples

Available Examples:
------------------

basic_usage.py
    Capability checks and delete dispatch against an in-memory store,
    optionally against a real Vault server.

Running Examples:
----------------

    python examples/basic_usage.py
    VAULT_ADDR=http://127.0.0.1:8200 VAULT_TOKEN=... python examples/basic_usage.py --vault
"""
