"""vaultkv exceptions."""


class VaultKVError(Exception):
    """Base exception for all vaultkv errors."""
    pass


class ConfigError(VaultKVError, ValueError):
    """Raised when the client configuration is missing or invalid."""
    pass


class TransportError(VaultKVError):
    """Raised when a request could not be sent or its response decoded.

    The underlying exception, if any, is chained as ``__cause__``.
    """
    def __init__(self, detail: str = ""):
        self.detail = detail
        msg = "Request to secrets store failed"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class UnexpectedStatusError(VaultKVError):
    """Raised when a response carries a status the operation does not accept."""
    def __init__(self, status_code: int, method: str = "", path: str = ""):
        self.status_code = status_code
        self.method = method
        self.path = path
        msg = f"Unexpected response status '{status_code}' received"
        if method and path:
            msg += f" ({method} {path})"
        super().__init__(msg)


class KeyNotFoundError(VaultKVError):
    """Raised when a key does not exist, or its payload is malformed."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key not found: {key}")


class EngineUnsupportedError(VaultKVError):
    """Raised when the mount is not a KV engine at the supported version."""
    def __init__(self, engine: str = "", reason: str = ""):
        self.engine = engine
        self.reason = reason
        msg = "Engine unsupported"
        if engine:
            msg += f": {engine}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
