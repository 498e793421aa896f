"""
Backend-specific exceptions.

Raised when a failed gateway result is unwrapped. Day-to-day call sites
receive `Result` values instead (see core.backend.result).
"""


class BackendError(Exception):
    """Base exception for managed-backend errors."""

    def __init__(self, message: str, kind: str | None = None, code: str | None = None) -> None:
        self.kind = kind
        self.code = code
        super().__init__(message)


class BackendConfigurationError(BackendError):
    """
    Raised when backend configuration is missing or invalid.

    Examples:
        - SUPABASE_URL not set
        - SUPABASE_ANON_KEY not set
    """
    pass


class BackendConnectionError(BackendError):
    """Raised when the backend cannot be reached."""
    pass


class BackendQueryError(BackendError):
    """Raised for provider-reported failures (bad query, auth, conflict, not found)."""
    pass
