"""
Error taxonomy for authentication, sessions, storage and bootstrap.
Every error carries a stable machine-readable code; HTTP-facing errors also
carry the status code the exception handler in main.py renders them with.
"""
from typing import Optional


class PortalError(Exception):
    """Base exception for the portal."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidCredentials(PortalError):
    """Unknown username or wrong password. The two cases look identical to callers."""

    code = "AUTH_INVALID_CREDENTIALS"
    status_code = 401
    message = "Incorrect username or password"


class SessionInvalid(PortalError):
    """Session cookie missing, corrupt, expired or signed with an unknown key."""

    code = "AUTH_REQUIRED"
    status_code = 401
    message = "Authentication required"


class Forbidden(PortalError):
    """Valid session but the role is insufficient."""

    code = "FORBIDDEN_ADMIN_ONLY"
    status_code = 403
    message = "Administrator role required"


class StorageUnavailable(PortalError):
    """Persistence layer unreachable after bounded retries."""

    code = "STORAGE_UNAVAILABLE"
    status_code = 503
    message = "Storage is temporarily unavailable"


class KeyRingError(PortalError):
    """Key material exists but cannot be decrypted with the configured secret."""

    code = "KEY_RING_ERROR"
    status_code = 500
    message = "Key ring entry could not be unwrapped"


class BootstrapFailed(PortalError):
    """Admin reseed failed at startup. Logged, never fatal."""

    code = "BOOTSTRAP_FAILED"
    message = "Admin bootstrap failed"
