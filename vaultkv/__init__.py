"""vaultkv - Minimal client for KV version 2 secrets engines over HTTP.

Consumer API:
    from vaultkv import Client, Config

    client = Client(Config(addr="https://vault.internal:8200",
                           engine="secret", token="hvs.example"))
    record = client.get("app/db")

Write, delete and health check:
    client.set("app/db", {"password": "hunter2"})
    client.delete("app/db")
    client.ping()

Configuration from the environment (connect() / Config.from_env()):
    VAULT_ADDR       store address   (default http://127.0.0.1:8200)
    VAULT_KV_MOUNT   engine mount    (default "secret")
    VAULT_TOKEN      bearer token    (fallback: ~/.vault-token or VAULT_TOKEN_FILE)
    VAULT_CACERT     CA bundle for https:// addresses

Constructing a Client verifies the mount is a "kv" engine at version 2
and raises EngineUnsupportedError otherwise. Operations never retry and
impose no timeout unless one is passed.
"""

__version__ = "0.1.0"

from .exceptions import (
    VaultKVError,
    ConfigError,
    TransportError,
    UnexpectedStatusError,
    KeyNotFoundError,
    EngineUnsupportedError,
)
from ._client import Client, Config, connect


__all__ = [
    "Client",
    "Config",
    "connect",
    "VaultKVError",
    "ConfigError",
    "TransportError",
    "UnexpectedStatusError",
    "KeyNotFoundError",
    "EngineUnsupportedError",
]
