"""HTTP transport for the vaultkv client.

Supports two address schemes:
  http://host:port   -- plain HTTP (warn if non-loopback, the token is sent in clear)
  https://host:port  -- HTTP over TLS (CA bundle via verify= or VAULT_CACERT)

Address resolution order:
  1. Explicit addr= parameter
  2. VAULT_ADDR environment variable
  3. Default: http://127.0.0.1:8200

Each call to request() opens its own httpx.Client for exactly one
request/response cycle and closes it before returning.
"""

import logging
import os
import ssl
import warnings
from typing import Any, Optional, Union
from urllib.parse import urlparse

import httpx

from ._protocol import API_PREFIX, decode_body, encode_body, make_headers
from .exceptions import ConfigError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8200
DEFAULT_ADDR = f"http://127.0.0.1:{DEFAULT_PORT}"

_LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})

TimeoutTypes = Union[None, float, httpx.Timeout]
VerifyTypes = Union[bool, str, ssl.SSLContext]


def resolve_addr(addr: Optional[str] = None) -> str:
    """Resolve the store address from parameter, env var, or default.

    Resolution order:
      1. Explicit addr parameter (if non-empty)
      2. VAULT_ADDR environment variable
      3. Default local address
    """
    if addr:
        return addr
    env_addr = os.environ.get("VAULT_ADDR", "").strip()
    if env_addr:
        return env_addr
    return DEFAULT_ADDR


def normalize_addr(addr: str) -> str:
    """Validate a store address and strip any trailing slash.

    Raises ConfigError for anything other than http:// or https://.
    """
    parsed = urlparse(addr)
    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https"):
        raise ConfigError(
            f"Unsupported address scheme: {scheme!r}. Use http:// or https://"
        )
    if not parsed.hostname:
        raise ConfigError(f"Address has no host: {addr!r}")
    return addr.rstrip("/")


def is_loopback(addr: str) -> bool:
    """Return True if the address points at the local machine."""
    return urlparse(addr).hostname in _LOOPBACK_HOSTS


def warn_if_plaintext(addr: str) -> None:
    """Warn when a bearer token would travel over plain HTTP off-host."""
    parsed = urlparse(addr)
    if parsed.scheme.lower() == "http" and not is_loopback(addr):
        warnings.warn(
            f"Sending the store token over unencrypted HTTP to {parsed.hostname}. "
            "Use https:// for non-loopback addresses.",
            UserWarning,
            stacklevel=3,
        )


def resolve_verify(verify: Optional[VerifyTypes] = None) -> VerifyTypes:
    """Resolve TLS verification settings.

    A string is treated as a CA bundle path. Without an explicit value the
    VAULT_CACERT env var is consulted, then the system trust store is used.
    """
    if verify is None:
        verify = os.environ.get("VAULT_CACERT", "").strip() or True
    if isinstance(verify, str):
        ctx = ssl.create_default_context()
        try:
            ctx.load_verify_locations(verify)
        except OSError as e:
            raise ConfigError(f"Cannot load CA bundle {verify!r}: {e}") from e
        return ctx
    return verify


def request(
    addr: str,
    token: str,
    method: str,
    path: str,
    body: Any = None,
    *,
    timeout: TimeoutTypes = None,
    verify: VerifyTypes = True,
    transport: Optional[httpx.BaseTransport] = None,
) -> tuple[int, dict[str, Any]]:
    """Perform one round trip and return (status code, decoded body).

    The body is always sent, as JSON ``null`` when there is nothing to
    send. The status code is not inspected here. Network failures,
    timeouts, unbuildable requests and undecodable bodies raise
    TransportError.
    """
    content = encode_body(body)
    url = f"{addr}{API_PREFIX}{path}"

    try:
        with httpx.Client(timeout=timeout, verify=verify, transport=transport) as client:
            try:
                req = client.build_request(
                    method, url, content=content, headers=make_headers(token)
                )
            except (httpx.InvalidURL, ValueError, TypeError) as e:
                # Header values may hold the token; keep them out of the message.
                raise TransportError(
                    f"failed to create request {method} {path}: {type(e).__name__}"
                ) from e
            response = client.send(req)
            raw = response.content
    except httpx.HTTPError as e:
        raise TransportError(f"failed to request {method} {path}: {e}") from e

    logger.debug("%s %s -> %d", method, path, response.status_code)
    return response.status_code, decode_body(raw)
