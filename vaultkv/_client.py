"""Client for a KV version 2 secrets engine.

Usage:
    from vaultkv import Client, Config

    client = Client(Config(addr="https://vault.internal:8200",
                           engine="secret", token="hvs.example"))
    client.set("app/db", {"password": "hunter2"})
    record = client.get("app/db")

Or resolve the configuration from the environment:
    from vaultkv import connect

    client = connect()  # VAULT_ADDR, VAULT_KV_MOUNT, VAULT_TOKEN

Token resolution for connect() / Config.from_env():
    1. Explicit token= parameter
    2. VAULT_TOKEN env var
    3. Token file (~/.vault-token, or the path in VAULT_TOKEN_FILE)
    4. Error

Constructing a Client checks the mount before returning: it must be a
"kv" engine at version 2. A Client holds nothing but its configuration,
so one instance can be shared between threads.
"""

import os
from dataclasses import dataclass
from types import EllipsisType
from typing import Any, Optional

import httpx

from . import _protocol as protocol
from ._transport import (
    TimeoutTypes,
    VerifyTypes,
    normalize_addr,
    request,
    resolve_addr,
    resolve_verify,
    warn_if_plaintext,
)
from .exceptions import (
    ConfigError,
    KeyNotFoundError,
    UnexpectedStatusError,
)

DEFAULT_ENGINE = "secret"

_TOKEN_FILENAME = ".vault-token"


# -- Configuration --

def _resolve_engine(engine: Optional[str] = None) -> str:
    """Resolve the mount name.

    Resolution order:
      1. Explicit engine parameter (non-empty)
      2. VAULT_KV_MOUNT env var
      3. Default "secret"
    """
    if engine:
        return engine
    env_engine = os.environ.get("VAULT_KV_MOUNT", "").strip()
    if env_engine:
        return env_engine
    return DEFAULT_ENGINE


def _resolve_token(token: Optional[str] = None) -> str:
    """Resolve the bearer token.

    Resolution order:
      1. Explicit token parameter
      2. VAULT_TOKEN env var
      3. Token file
      4. Error
    """
    if token:
        return token

    env_token = os.environ.get("VAULT_TOKEN", "").strip()
    if env_token:
        return env_token

    file_token = _load_token_file()
    if file_token:
        return file_token

    raise ConfigError(
        "No token found. Pass token=, set VAULT_TOKEN, "
        f"or write the token to {_token_file_path()}."
    )


def _token_file_path() -> str:
    override = os.environ.get("VAULT_TOKEN_FILE", "").strip()
    if override:
        return os.path.expanduser(override)
    return os.path.join(os.path.expanduser("~"), _TOKEN_FILENAME)


def _load_token_file() -> str | None:
    """Read the token from the token file.

    Returns the first non-blank line, or None if the file is missing
    or empty.
    """
    path = _token_file_path()
    if not os.path.isfile(path):
        return None
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line:
                return line
    return None


@dataclass(frozen=True)
class Config:
    """Connection settings for one client: base address, mount, token."""

    addr: str
    engine: str
    token: str

    def __repr__(self) -> str:
        return f"Config(addr={self.addr!r}, engine={self.engine!r}, token='***')"

    @classmethod
    def from_env(
        cls,
        addr: Optional[str] = None,
        engine: Optional[str] = None,
        token: Optional[str] = None,
    ) -> "Config":
        """Build a Config from parameters, falling back to the environment."""
        return cls(
            addr=resolve_addr(addr),
            engine=_resolve_engine(engine),
            token=_resolve_token(token),
        )


# -- Public API --

class Client:
    """KV v2 store client.

    The constructor performs the mount check; an instance exists only if
    the mount is a supported KV engine. Every method is a single HTTP
    round trip with no retries.

    ``timeout`` sets the default per-request timeout in seconds (None, the
    default, imposes none). Each method also accepts ``timeout=`` to
    override it for that call.
    """

    def __init__(
        self,
        config: Config,
        *,
        timeout: TimeoutTypes = None,
        verify: Optional[VerifyTypes] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        addr = normalize_addr(config.addr)
        if not config.engine:
            raise ConfigError("No engine mount specified.")
        if not config.token:
            raise ConfigError("No token specified.")
        warn_if_plaintext(addr)

        self._config = Config(addr=addr, engine=config.engine, token=config.token)
        self._timeout = timeout
        self._verify = resolve_verify(verify)
        self._transport = transport

        self._check_mount()

    @property
    def config(self) -> Config:
        return self._config

    def __repr__(self) -> str:
        return (
            f"Client(addr={self._config.addr!r}, engine={self._config.engine!r})"
        )

    def _check_mount(self) -> protocol.EngineDescriptor:
        path = protocol.mount_path(self._config.engine)
        status, body = self._request("GET", path)
        if status != protocol.STATUS_OK:
            raise UnexpectedStatusError(status, "GET", path)
        return protocol.check_engine(body, self._config.engine)

    def get(
        self, key: str, *, timeout: TimeoutTypes | EllipsisType = ...
    ) -> dict[str, Any]:
        """Read the record stored under *key*.

        Raises KeyNotFoundError on 404, and also when a 200 response lacks
        the nested ``data.data`` object.
        """
        path = self._data_path(key)
        status, body = self._request("GET", path, timeout=timeout)

        if status == protocol.STATUS_NOT_FOUND:
            raise KeyNotFoundError(key)
        if status != protocol.STATUS_OK:
            raise UnexpectedStatusError(status, "GET", path)

        record = protocol.extract_record(body)
        if record is None:
            raise KeyNotFoundError(key)
        return record

    def set(
        self,
        key: str,
        record: dict[str, Any],
        *,
        timeout: TimeoutTypes | EllipsisType = ...,
    ) -> None:
        """Write *record* under *key*. Only a 200 response counts as success."""
        if not isinstance(record, dict):
            raise TypeError(
                f"record must be a dict, not {type(record).__name__}"
            )
        path = self._data_path(key)
        status, _ = self._request(
            "POST", path, protocol.make_write_body(record), timeout=timeout
        )
        if status != protocol.STATUS_OK:
            raise UnexpectedStatusError(status, "POST", path)

    def delete(self, key: str, *, timeout: TimeoutTypes | EllipsisType = ...) -> None:
        """Delete *key*. Only a 204 response counts as success."""
        path = self._data_path(key)
        status, _ = self._request("DELETE", path, timeout=timeout)
        if status != protocol.STATUS_NO_CONTENT:
            raise UnexpectedStatusError(status, "DELETE", path)

    def ping(self, *, timeout: TimeoutTypes | EllipsisType = ...) -> None:
        """Check the store's health endpoint answers 200."""
        status, _ = self._request("GET", protocol.HEALTH_PATH, timeout=timeout)
        if status != protocol.STATUS_OK:
            raise UnexpectedStatusError(status, "GET", protocol.HEALTH_PATH)

    # -- Internal --

    def _data_path(self, key: str) -> str:
        if not key:
            raise ValueError("key must be a non-empty string")
        return protocol.data_path(self._config.engine, key)

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        timeout: TimeoutTypes | EllipsisType = ...,
    ) -> tuple[int, dict[str, Any]]:
        if timeout is ...:
            timeout = self._timeout
        return request(
            self._config.addr,
            self._config.token,
            method,
            path,
            body,
            timeout=timeout,
            verify=self._verify,
            transport=self._transport,
        )


def connect(
    addr: Optional[str] = None,
    engine: Optional[str] = None,
    token: Optional[str] = None,
    **kwargs: Any,
) -> Client:
    """Resolve a Config from parameters and environment, then build a Client.

    Extra keyword arguments (timeout, verify, transport) go to Client.
    """
    return Client(Config.from_env(addr, engine, token), **kwargs)
