"""
Backend HTTP Service.

Low-level HTTP client for the managed backend (PostgREST tables plus the
GoTrue auth API). Every call returns a `Result`; transport and provider
failures are classified into an `ErrorKind` and logged, never raised.

Design Principles:
    BackendService requires httpx.AsyncClient via EXPLICIT dependency injection.
    It does NOT fetch clients from global state.
    The HTTP client lifecycle is managed by the caller.

    Usage in FastAPI routes:
        @router.get("/leave-requests")
        async def list_requests(backend: BackendServiceDep):
            return await backend.table("leaveRequests").select("*").execute()

    Usage in scripts or background tasks:
        from core.http_client import create_standalone_http_client

        async with create_standalone_http_client() as http_client:
            backend = BackendService(http_client=http_client)
            await backend.table("employees").select("*").execute()

    Row-level security on the backend scopes table access to the signed-in
    user. Use `with_access_token()` to get a gateway that sends the user's
    token instead of the anonymous key.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from core.app_context import ConfigLoader
from core.backend.auth_client import BackendAuthClient
from core.backend.query import TableQuery
from core.backend.result import NOT_FOUND_CODE, Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class BackendService:
    """
    Managed-backend API HTTP client.

    Args:
        http_client: Shared httpx.AsyncClient (required).
        url: Backend project URL. If not provided, loads from config.
        api_key: Anonymous (public) API key. If not provided, loads from config.
        access_token: User access token sent as bearer instead of the anon key.
        timeout: HTTP request timeout in seconds (for per-request override).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        if http_client is None:
            raise ValueError(
                "http_client is required. Use dependency injection via BackendServiceDep "
                "in FastAPI routes, or create_standalone_http_client() for scripts."
            )

        self._client = http_client
        self._timeout = timeout
        self._access_token = access_token
        self._auth: BackendAuthClient | None = None

        # Load from config if not provided
        if url is None or api_key is None:
            config = ConfigLoader()
            config.load()
            backend_config = config.get("backend", {})

            url = url if url is not None else backend_config.get("url", "")
            api_key = api_key if api_key is not None else backend_config.get("anon_key", "")

        self._url = (url or "").rstrip("/")
        self._api_key = api_key or ""

    @property
    def url(self) -> str:
        return self._url

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for backend API requests."""
        bearer = self._access_token or self._api_key
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {bearer}",
            "Content-Type": "application/json",
        }

    def is_configured(self) -> bool:
        """Check if the service is properly configured."""
        return bool(self._url and self._api_key)

    def with_access_token(self, access_token: str | None) -> "BackendService":
        """Return a gateway sharing this client but authorised as a user."""
        return BackendService(
            http_client=self._client,
            url=self._url,
            api_key=self._api_key,
            access_token=access_token,
            timeout=self._timeout,
        )

    def table(self, name: str) -> TableQuery:
        """Start a query against one table."""
        return TableQuery(self, name)

    @property
    def auth(self) -> BackendAuthClient:
        """Auth API client (lazy; one per gateway so listeners stay local)."""
        if self._auth is None:
            self._auth = BackendAuthClient(self)
        return self._auth

    # =========================================================================
    # Transport
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        error_kind: Optional[ErrorKind] = None,
    ) -> Result[Any]:
        """
        Send one request and classify the outcome.

        Args:
            method: HTTP method.
            path: Path below the project URL (e.g. "/rest/v1/employees").
            params: Query parameters.
            json: JSON body.
            headers: Extra headers, merged over the defaults.
            error_kind: Forces the kind of any provider error (auth endpoints
                report every rejection as AUTH).

        Returns:
            Ok(decoded JSON or None) or Err(kind, message, code).
        """
        if not self.is_configured():
            logger.error("Backend service not configured (SUPABASE_URL / SUPABASE_ANON_KEY)")
            return Err(ErrorKind.CONFIGURATION, "Backend service is not configured.")

        request_headers = self._get_headers()
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(
                method,
                f"{self._url}{path}",
                params=params,
                json=json,
                headers=request_headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Backend request failed: {method} {path} - {e}")
            return Err(ErrorKind.CONNECTION, f"Could not reach backend: {e}")

        if response.status_code >= 400:
            err = self._error_from_response(response, error_kind)
            if err.is_not_found:
                logger.debug(f"Backend {method} {path}: no rows")
            else:
                logger.warning(
                    f"Backend error {response.status_code} on {method} {path}: "
                    f"[{err.kind}] {err.message}"
                )
            return err

        if response.status_code == 204 or not response.content:
            return Ok(None)

        try:
            return Ok(response.json())
        except ValueError:
            logger.error(f"Backend returned non-JSON body for {method} {path}")
            return Err(ErrorKind.QUERY, "Backend returned an unreadable response.")

    @staticmethod
    def _error_from_response(
        response: httpx.Response,
        error_kind: Optional[ErrorKind] = None,
    ) -> Err:
        """Map a provider error body onto an Err, keeping its message verbatim."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or response.text
            or f"HTTP {response.status_code}"
        )
        raw_code = body.get("error_code") or body.get("code")
        code = str(raw_code) if raw_code is not None else None

        if error_kind is not None:
            kind = error_kind
        elif code == NOT_FOUND_CODE and "0 rows" in (body.get("details") or "0 rows"):
            kind = ErrorKind.NOT_FOUND
        elif response.status_code in (401, 403):
            kind = ErrorKind.AUTH
        elif response.status_code == 409 or code == UNIQUE_VIOLATION_CODE:
            kind = ErrorKind.CONFLICT
        else:
            kind = ErrorKind.QUERY

        return Err(kind=kind, message=str(message), code=code, status_code=response.status_code)

    # =========================================================================
    # Health
    # =========================================================================

    async def check_connection(self) -> dict:
        """
        Check backend connectivity for health monitoring.

        Returns:
            dict: {"status": "healthy" | "warning" | "error", "message": ..., "details": {...}}
        """
        if not self.is_configured():
            return {
                "status": "error",
                "message": "Not configured",
                "details": {
                    "URL": self._url or "Not set",
                    "Anon Key": "Not set",
                },
            }

        masked_key = f"****{self._api_key[-4:]}" if len(self._api_key) > 4 else "****"

        try:
            start_time = time.time()
            response = await self._client.get(
                f"{self._url}/auth/v1/health",
                headers=self._get_headers(),
                timeout=10.0,
            )
            latency_ms = int((time.time() - start_time) * 1000)
        except httpx.HTTPError as e:
            logger.error(f"Backend health check failed: {e}")
            return {
                "status": "error",
                "message": "Connection failed",
                "details": {"URL": self._url, "Anon Key": masked_key, "Error": str(e)[:50]},
            }

        details = {"Latency": f"{latency_ms}ms", "URL": self._url, "Anon Key": masked_key}
        if response.status_code == 200:
            return {"status": "healthy", "message": "Connected", "details": details}
        if response.status_code == 401:
            return {"status": "error", "message": "Authentication failed", "details": details}
        return {"status": "warning", "message": f"HTTP {response.status_code}", "details": details}
