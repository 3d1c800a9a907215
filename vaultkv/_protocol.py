"""Wire protocol for the KV v2 secrets engine HTTP API.

Every request is JSON over HTTP under the ``/v1`` prefix and carries a
bearer token. Requests without a logical payload still send a JSON body
(``null``).

Endpoints:
  GET    /v1/sys/mounts/{engine}   -- mount introspection (construction)
  GET    /v1/{engine}/data/{key}   -- read a record
  POST   /v1/{engine}/data/{key}   -- write a record, body {"data": record}
  DELETE /v1/{engine}/data/{key}   -- delete a record
  GET    /v1/sys/health            -- health check

Accepted statuses are per operation; Delete is the only one answering 204.
"""

import json
from typing import Any, NamedTuple

from .exceptions import EngineUnsupportedError, TransportError

API_PREFIX = "/v1"
SUPPORTED_ENGINE_VERSION = 2
ENGINE_TYPE_KV = "kv"

HEALTH_PATH = "/sys/health"

# Accepted response statuses
STATUS_OK = 200
STATUS_NO_CONTENT = 204
STATUS_NOT_FOUND = 404

CONTENT_TYPE = "application/json"


class EngineDescriptor(NamedTuple):
    """Engine type and version parsed from a mount-introspection body."""
    type: str
    version: str


def mount_path(engine: str) -> str:
    """Path of the mount-introspection endpoint for *engine*."""
    return f"/sys/mounts/{engine}"


def data_path(engine: str, key: str) -> str:
    """Path of the data endpoint for *key*. The key is not escaped."""
    return f"/{engine}/data/{key}"


def make_headers(token: str) -> dict[str, str]:
    """Build the headers sent with every request."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": CONTENT_TYPE,
    }


def encode_body(body: Any = None) -> bytes:
    """Encode a request body as JSON. ``None`` encodes to ``null``.

    NaN and infinities are not JSON and are rejected.
    """
    try:
        return json.dumps(body, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise TransportError(f"failed to encode request body: {e}") from e


def decode_body(raw: bytes) -> dict[str, Any]:
    """Decode a response body as a JSON object.

    An empty or non-JSON body is an error. JSON ``null`` decodes to an
    empty dict; any other non-object value is an error. Trailing data after
    the first value (e.g. two concatenated objects) is rejected too.
    """
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        raise TransportError(f"failed to decode response body: {e}") from e
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise TransportError(
            "failed to decode response body: "
            f"expected a JSON object, got {type(decoded).__name__}"
        )
    return decoded


def make_write_body(record: dict[str, Any]) -> dict[str, Any]:
    """Wrap a record in the envelope the data endpoint expects."""
    return {"data": record}


def check_engine(body: dict[str, Any], engine: str = "") -> EngineDescriptor:
    """Validate a mount-introspection body.

    Returns the descriptor when the mount is a KV engine at the supported
    version; raises EngineUnsupportedError otherwise.
    """
    data = body.get("data")
    if not isinstance(data, dict):
        raise EngineUnsupportedError(engine, "mount description has no data")

    if data.get("type") != ENGINE_TYPE_KV:
        raise EngineUnsupportedError(
            engine, f"engine type is {data.get('type')!r}, not {ENGINE_TYPE_KV!r}"
        )

    options = data.get("options")
    if not isinstance(options, dict):
        raise EngineUnsupportedError(engine, "mount description has no options")

    version = options.get("version")
    if version != str(SUPPORTED_ENGINE_VERSION):
        raise EngineUnsupportedError(
            engine,
            f"engine version is {version!r}, "
            f"only {str(SUPPORTED_ENGINE_VERSION)!r} is supported",
        )

    return EngineDescriptor(data["type"], version)


def extract_record(body: dict[str, Any]) -> dict[str, Any] | None:
    """Return the ``data.data`` object of a read response, or None."""
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    record = data.get("data")
    if not isinstance(record, dict):
        return None
    return record
