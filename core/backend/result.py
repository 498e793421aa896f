"""
Uniform result type for gateway calls.

Every remote operation returns either `Ok(value)` or `Err(kind, message, code)`.
Callers branch on the result and decide themselves whether to retry, fall back
or surface the message; nothing in the gateway retries on its own.

Usage:
    result = await gateway.table("employees").select("*").eq("user_id", uid).single().execute()
    if isinstance(result, Err):
        if result.is_not_found:
            ...  # expected absence, e.g. provision a record
        return result
    record = result.value
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from core.backend.exceptions import (
    BackendConfigurationError,
    BackendConnectionError,
    BackendQueryError,
)

T = TypeVar("T")

# PostgREST error code for "single object requested, zero rows returned"
NOT_FOUND_CODE = "PGRST116"


class ErrorKind(str, Enum):
    """Closed taxonomy of failures a gateway call can produce."""

    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    QUERY = "query"
    CONNECTION = "connection"
    CONFIGURATION = "configuration"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the decoded payload."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the provider's message verbatim."""

    kind: ErrorKind
    message: str
    code: str | None = None
    status_code: int | None = None

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_not_found(self) -> bool:
        return self.kind == ErrorKind.NOT_FOUND

    def unwrap(self) -> Any:
        if self.kind is ErrorKind.CONFIGURATION:
            error_class = BackendConfigurationError
        elif self.kind is ErrorKind.CONNECTION:
            error_class = BackendConnectionError
        else:
            error_class = BackendQueryError
        raise error_class(self.message, kind=self.kind.value, code=self.code)


Result = Union[Ok[T], Err]
