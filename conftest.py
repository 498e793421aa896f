"""
Shared Pytest Fixtures.

Provides an in-memory stand-in for the managed backend (PostgREST tables and
GoTrue auth endpoints) served through httpx.MockTransport, plus application
fixtures wired to it. Used by the framework tests and the module tests.
"""

import itertools
import json
import time
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl

import httpx
import pytest
import pytest_asyncio

BACKEND_URL = "https://backend.test"
ANON_KEY = "test-anon-key"

SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"

# Embedded selects resolve through these foreign keys: (table, embed) -> fk column
EMBEDDED_RELATIONS = {
    ("leaveRequests", "employees"): "employeeId",
}

# Columns with a unique constraint per table
UNIQUE_COLUMNS = {
    "employees": "user_id",
}


def _filter_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _split_select(select: str) -> list[str]:
    """Split a select expression on top-level commas."""
    items, depth, current = [], 0, ""
    for char in select:
        if char == "," and depth == 0:
            items.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        items.append(current)
    return items


class FakeBackend:
    """
    In-memory managed backend.

    Tables are lists of dict rows; ids are assigned on insert. Auth users are
    kept by email with their password. Every request is recorded in
    `requests` so tests can inspect headers and paths.
    """

    URL = BACKEND_URL
    ANON_KEY = ANON_KEY

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.access_tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}
        self.auto_confirm = True
        self.token_lifetime = 3600
        self.unreachable = False
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)

    # =========================================================================
    # Seeding
    # =========================================================================

    def add_user(self, email: str, password: str = "secret123") -> dict[str, Any]:
        user = {"id": f"user-{next(self._ids)}", "email": email, "password": password}
        self.users[email] = user
        return user

    def add_row(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", next(self._ids))
        self.tables.setdefault(table, []).append(stored)
        return stored

    def add_employee(
        self,
        user: dict[str, Any],
        role: Optional[str] = "employee",
        **extra: Any,
    ) -> dict[str, Any]:
        local = user["email"].split("@")[0].split(".")
        row = {
            "user_id": user["id"],
            "email": user["email"],
            "firstName": local[0].title(),
            "lastName": local[1].title() if len(local) > 1 else "User",
            "hireDate": "2024-01-15",
            "status": "Active",
            "role": role,
        }
        row.update(extra)
        return self.add_row("employees", row)

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def fail(
        self,
        target: str,
        method: str = "GET",
        status_code: int = 500,
        message: str = "Internal server error",
        code: Optional[str] = None,
    ) -> None:
        """Make every `method` request to a table (or auth path) fail."""
        self.failures[(target, method.upper())] = (
            status_code,
            {"message": message, "code": code, "details": None, "hint": None},
        )

    def issue_session(self, user: dict[str, Any]) -> dict[str, Any]:
        """Token payload as returned by the password grant."""
        n = next(self._tokens)
        access, refresh = f"access-{n}", f"refresh-{n}"
        self.access_tokens[access] = user["email"]
        self.refresh_tokens[refresh] = user["email"]
        return {
            "access_token": access,
            "token_type": "bearer",
            "expires_in": self.token_lifetime,
            "expires_at": int(time.time()) + self.token_lifetime,
            "refresh_token": refresh,
            "user": {"id": user["id"], "email": user["email"]},
        }

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if path.startswith("/rest/v1/"):
            table = path[len("/rest/v1/"):]
            failure = self.failures.get((table, request.method))
            if failure:
                return httpx.Response(failure[0], json=failure[1])
            return self._handle_rest(request, table)

        if path.startswith("/auth/v1/"):
            failure = self.failures.get((path, request.method))
            if failure:
                return httpx.Response(failure[0], json=failure[1])
            return self._handle_auth(request, path[len("/auth/v1/"):])

        return httpx.Response(404, json={"message": f"No route for {path}"})

    @staticmethod
    def _body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    @staticmethod
    def _bearer(request: httpx.Request) -> str:
        return request.headers.get("Authorization", "").removeprefix("Bearer ").strip()

    # =========================================================================
    # PostgREST
    # =========================================================================

    def _matches(self, row: dict[str, Any], filters: list[tuple[str, str]]) -> bool:
        for column, expression in filters:
            operator, _, expected = expression.partition(".")
            if operator == "is" and expected == "null":
                if row.get(column) is not None:
                    return False
            elif operator == "eq":
                if column not in row or _filter_text(row[column]) != expected:
                    return False
            else:
                raise AssertionError(f"Unsupported filter {column}={expression}")
        return True

    def _project(self, table: str, row: dict[str, Any], select: Optional[str]) -> dict[str, Any]:
        if not select or select == "*":
            return dict(row)

        projected: dict[str, Any] = {}
        for item in _split_select(select):
            if item == "*":
                projected.update(row)
            elif "(" in item:
                embed, _, columns = item.partition("(")
                fk = EMBEDDED_RELATIONS[(table, embed)]
                parent = next(
                    (r for r in self.rows(embed) if r.get("id") == row.get(fk)),
                    None,
                )
                wanted = columns.rstrip(")").split(",")
                projected[embed] = (
                    {c: parent.get(c) for c in wanted} if parent is not None else None
                )
            else:
                projected[item] = row.get(item)
        return projected

    def _handle_rest(self, request: httpx.Request, table: str) -> httpx.Response:
        params = parse_qsl(request.url.query.decode(), keep_blank_values=True)
        select = next((v for k, v in params if k == "select"), None)
        on_conflict = next((v for k, v in params if k == "on_conflict"), None)
        filters = [(k, v) for k, v in params if k not in ("select", "on_conflict")]
        prefer = request.headers.get("Prefer", "")
        single = request.headers.get("Accept") == SINGLE_OBJECT_MEDIA_TYPE

        if request.method == "GET":
            found = [self._project(table, r, select) for r in self.rows(table) if self._matches(r, filters)]
            if single:
                if len(found) != 1:
                    return httpx.Response(406, json={
                        "code": "PGRST116",
                        "details": f"The result contains {len(found)} rows",
                        "hint": None,
                        "message": "JSON object requested, multiple (or no) rows returned",
                    })
                return httpx.Response(200, json=found[0])
            return httpx.Response(200, json=found)

        if request.method == "POST":
            payload = self._body(request)
            rows = payload if isinstance(payload, list) else [payload]
            inserted = []
            for row in rows:
                conflict_column = on_conflict or UNIQUE_COLUMNS.get(table)
                duplicate = conflict_column and any(
                    existing.get(conflict_column) == row.get(conflict_column)
                    for existing in self.rows(table)
                )
                if duplicate:
                    if "resolution=ignore-duplicates" in prefer:
                        continue
                    return httpx.Response(409, json={
                        "code": "23505",
                        "details": f"Key ({conflict_column})=({row.get(conflict_column)}) already exists.",
                        "hint": None,
                        "message": f'duplicate key value violates unique constraint "{table}_{conflict_column}_key"',
                    })
                inserted.append(self.add_row(table, row))
            if "return=representation" in prefer:
                return httpx.Response(201, json=[dict(r) for r in inserted])
            return httpx.Response(201)

        if request.method == "PATCH":
            values = self._body(request) or {}
            updated = []
            for row in self.rows(table):
                if self._matches(row, filters):
                    row.update(values)
                    updated.append(dict(row))
            if "return=representation" in prefer:
                return httpx.Response(200, json=updated)
            return httpx.Response(204)

        return httpx.Response(405, json={"message": f"Method {request.method} not allowed"})

    # =========================================================================
    # GoTrue
    # =========================================================================

    def _handle_auth(self, request: httpx.Request, endpoint: str) -> httpx.Response:
        if endpoint == "health":
            return httpx.Response(200, json={"name": "GoTrue", "version": "test"})

        if endpoint == "token":
            grant_type = request.url.params.get("grant_type")
            body = self._body(request) or {}
            if grant_type == "password":
                user = self.users.get(body.get("email", ""))
                if user is None or user["password"] != body.get("password"):
                    return httpx.Response(400, json={
                        "code": 400,
                        "error_code": "invalid_credentials",
                        "msg": "Invalid login credentials",
                    })
                return httpx.Response(200, json=self.issue_session(user))
            if grant_type == "refresh_token":
                email = self.refresh_tokens.pop(body.get("refresh_token", ""), None)
                if email is None:
                    return httpx.Response(400, json={
                        "code": 400,
                        "error_code": "refresh_token_not_found",
                        "msg": "Invalid Refresh Token: Refresh Token Not Found",
                    })
                return httpx.Response(200, json=self.issue_session(self.users[email]))
            return httpx.Response(400, json={"msg": f"Unsupported grant type {grant_type}"})

        if endpoint == "signup":
            body = self._body(request) or {}
            email, password = body.get("email", ""), body.get("password", "")
            if email in self.users:
                return httpx.Response(422, json={
                    "code": 422,
                    "error_code": "user_already_exists",
                    "msg": "User already registered",
                })
            if len(password) < 6:
                return httpx.Response(422, json={
                    "code": 422,
                    "error_code": "weak_password",
                    "msg": "Password should be at least 6 characters.",
                })
            user = self.add_user(email, password)
            if self.auto_confirm:
                return httpx.Response(200, json=self.issue_session(user))
            return httpx.Response(200, json={"id": user["id"], "email": email, "confirmation_sent_at": "now"})

        if endpoint == "logout":
            token = self._bearer(request)
            if self.access_tokens.pop(token, None) is None:
                return httpx.Response(403, json={
                    "code": 403,
                    "error_code": "session_not_found",
                    "msg": "Session from session_id claim in JWT does not exist",
                })
            return httpx.Response(204)

        if endpoint == "user":
            email = self.access_tokens.get(self._bearer(request))
            if email is None:
                return httpx.Response(401, json={"code": 401, "msg": "invalid JWT"})
            user = self.users[email]
            return httpx.Response(200, json={"id": user["id"], "email": user["email"]})

        return httpx.Response(404, json={"msg": f"Unknown auth endpoint {endpoint}"})


# =============================================================================
# Backend Fixtures
# =============================================================================

@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(fake_backend):
    async with httpx.AsyncClient(transport=fake_backend.transport) as client:
        yield client


@pytest.fixture
def backend_service(http_client):
    """Anonymous gateway talking to the fake backend."""
    from core.backend import BackendService

    return BackendService(http_client=http_client, url=BACKEND_URL, api_key=ANON_KEY)


@pytest.fixture
def user_gateway(backend_service, fake_backend) -> Callable[[dict[str, Any]], Any]:
    """Factory: a gateway carrying a fresh access token for a seeded user."""
    def _create(user: dict[str, Any]):
        session = fake_backend.issue_session(user)
        return backend_service.with_access_token(session["access_token"])

    return _create


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def backend_env(monkeypatch) -> dict[str, str]:
    """Environment for an application wired to the fake backend."""
    env_vars = {
        "SERVER_HOST": "127.0.0.1",
        "SERVER_PORT": "8000",
        "BASE_URL": "http://testserver",
        "APP_DEBUG": "true",
        "APP_LOG_LEVEL": "DEBUG",
        "SUPABASE_URL": BACKEND_URL,
        "SUPABASE_ANON_KEY": ANON_KEY,
        "SUPABASE_TIMEOUT": "5",
        "SESSION_COOKIE_NAME": "hr_session",
        "SESSION_COOKIE_SECURE": "false",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def app(backend_env, fake_backend):
    """Full application (modules loaded) using the fake backend transport."""
    from core.app_context import AppContext, ConfigLoader
    from core.registry import ModuleRegistry
    from main import create_app
    from modules.hr_portal.core.config import get_hr_portal_settings

    ModuleRegistry.reset()
    get_hr_portal_settings.cache_clear()

    loader = ConfigLoader()
    loader.load()
    application = create_app(AppContext(loader), transport=fake_backend.transport)

    yield application

    ModuleRegistry.reset()
    get_hr_portal_settings.cache_clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client, fake_backend) -> Callable[..., dict[str, Any]]:
    """
    Factory: seed a user (and employee row) then sign in through the form.

    Returns the seeded employee row (None when `with_employee=False`).
    """
    def _login(
        email: str = "jane.doe@corp.com",
        role: Optional[str] = "employee",
        password: str = "secret123",
        with_employee: bool = True,
    ) -> Optional[dict[str, Any]]:
        user = fake_backend.users.get(email) or fake_backend.add_user(email, password)
        employee = fake_backend.add_employee(user, role=role) if with_employee else None
        response = client.post(
            "/auth/login",
            data={"email": email, "password": password},
            follow_redirects=False,
        )
        assert response.status_code == 303, response.text
        return employee

    return _login
