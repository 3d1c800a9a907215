"""Shared fixtures: an in-memory KV v2 backend served over httpx.MockTransport."""

import json
import threading

import httpx
import pytest

from vaultkv import Client, Config

ADDR = "https://vault.test:8200"
ENGINE = "secret"
TOKEN = "hvs.test-token"

MOUNT_KV2 = {
    "data": {
        "type": "kv",
        "description": "key/value secret storage",
        "options": {"version": "2"},
    },
}


class FakeKVBackend:
    """Minimal in-memory KV v2 engine.

    Records live in a dict keyed by path. Responses for a given
    (method, path) can be pinned with override() to exercise status
    handling. Every request is kept in ``requests`` for inspection.
    """

    def __init__(self, engine: str = ENGINE, token: str = TOKEN, mount: dict | None = None):
        self.engine = engine
        self.token = token
        self.mount = MOUNT_KV2 if mount is None else mount
        self.records: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self._overrides: dict[tuple[str, str], httpx.Response] = {}
        self._versions: dict[str, int] = {}
        self._lock = threading.Lock()

    def override(self, method: str, path: str, status: int, body=None, content: bytes | None = None) -> None:
        if content is None:
            content = json.dumps(body).encode("utf-8")
        self._overrides[(method, path)] = httpx.Response(status, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
            return self._handle(request)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path

        pinned = self._overrides.get((method, path))
        if pinned is not None:
            return pinned

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(403, json={"errors": ["permission denied"]})

        if method == "GET" and path == f"/v1/sys/mounts/{self.engine}":
            return httpx.Response(200, json=self.mount)

        if method == "GET" and path == "/v1/sys/health":
            return httpx.Response(200, json={"initialized": True, "sealed": False})

        prefix = f"/v1/{self.engine}/data/"
        if not path.startswith(prefix):
            return httpx.Response(404, json={"errors": []})
        key = path[len(prefix):]

        if method == "GET":
            if key not in self.records:
                return httpx.Response(404, json={"errors": []})
            return httpx.Response(200, json={
                "data": {
                    "data": self.records[key],
                    "metadata": {"version": self._versions[key]},
                },
            })

        if method == "POST":
            payload = json.loads(request.content)
            self.records[key] = payload["data"]
            self._versions[key] = self._versions.get(key, 0) + 1
            return httpx.Response(200, json={"data": {"version": self._versions[key]}})

        if method == "DELETE":
            self.records.pop(key, None)
            return httpx.Response(204, json={})

        return httpx.Response(405, json={"errors": ["unsupported operation"]})


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_KV_MOUNT", "VAULT_CACERT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VAULT_TOKEN_FILE", str(tmp_path / "no-such-token-file"))


@pytest.fixture
def backend():
    return FakeKVBackend()


@pytest.fixture
def config():
    return Config(addr=ADDR, engine=ENGINE, token=TOKEN)


@pytest.fixture
def client(backend, config):
    return Client(config, transport=backend.transport)
