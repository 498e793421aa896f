"""
Core Backend Gateway.

Framework-level access to the managed backend (hosted PostgreSQL tables
behind PostgREST, plus its auth API).

Components:
    - BackendService: Low-level HTTP client returning Result values
    - TableQuery: Fluent select/insert/upsert/update builder
    - BackendAuthClient: Sign-in, sign-up, sign-out, refresh and auth events
    - Ok / Err / ErrorKind: Uniform result type
"""

from core.backend.auth_client import (
    AuthEvent,
    AuthSession,
    BackendAuthClient,
    Identity,
    SignUpResult,
    Subscription,
)
from core.backend.exceptions import (
    BackendConfigurationError,
    BackendConnectionError,
    BackendError,
    BackendQueryError,
)
from core.backend.query import TableQuery
from core.backend.result import NOT_FOUND_CODE, Err, ErrorKind, Ok, Result
from core.backend.service import BackendService

__all__ = [
    # Gateway
    "BackendService",
    "TableQuery",
    # Auth
    "AuthEvent",
    "AuthSession",
    "BackendAuthClient",
    "Identity",
    "SignUpResult",
    "Subscription",
    # Results
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "NOT_FOUND_CODE",
    # Exceptions
    "BackendError",
    "BackendConfigurationError",
    "BackendConnectionError",
    "BackendQueryError",
]
