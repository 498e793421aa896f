"""
Table query builder.

Builds PostgREST requests for one table in the fluent style of the managed
backend's own SDK:

    await gateway.table("leaveRequests").select("*").eq("status", "pending").execute()
    await gateway.table("leaveRequests").insert({...}).execute()
    await gateway.table("leaveRequests").update({"status": "approved"}).eq("id", 7).execute()

Only equality filters are supported; that is all the application needs.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from core.backend.result import Result

if TYPE_CHECKING:
    from core.backend.service import BackendService

SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


def _format_filter_value(value: Any) -> str:
    """Render a Python value the way PostgREST expects it in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _compact_columns(columns: str) -> str:
    """PostgREST rejects whitespace inside select expressions."""
    return "".join(columns.split())


class TableQuery:
    """A single request against one table. Build, then `await execute()`."""

    def __init__(self, service: "BackendService", table: str) -> None:
        self._service = service
        self._table = table
        self._method = "GET"
        self._params: list[tuple[str, str]] = []
        self._payload: Any = None
        self._prefer: list[str] = []
        self._single = False

    @property
    def path(self) -> str:
        return f"/rest/v1/{self._table}"

    def select(self, columns: str = "*") -> "TableQuery":
        self._params.append(("select", _compact_columns(columns)))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        if value is None:
            self._params.append((column, "is.null"))
        else:
            self._params.append((column, f"eq.{_format_filter_value(value)}"))
        return self

    def insert(self, rows: dict[str, Any] | list[dict[str, Any]]) -> "TableQuery":
        self._method = "POST"
        self._payload = rows
        self._prefer.append("return=representation")
        return self

    def upsert(
        self,
        rows: dict[str, Any] | list[dict[str, Any]],
        *,
        on_conflict: str,
        ignore_duplicates: bool = False,
    ) -> "TableQuery":
        """
        Insert rows, resolving conflicts on `on_conflict`.

        With `ignore_duplicates=True` existing rows are left untouched and are
        not returned; callers re-read when they need the stored row.
        """
        self._method = "POST"
        self._payload = rows
        self._params.append(("on_conflict", on_conflict))
        resolution = "ignore-duplicates" if ignore_duplicates else "merge-duplicates"
        self._prefer.extend([f"resolution={resolution}", "return=representation"])
        return self

    def update(self, values: dict[str, Any]) -> "TableQuery":
        self._method = "PATCH"
        self._payload = values
        self._prefer.append("return=representation")
        return self

    def single(self) -> "TableQuery":
        """Expect exactly one row; zero rows yields a NOT_FOUND error."""
        self._single = True
        return self

    def build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)
        if self._single:
            headers["Accept"] = SINGLE_OBJECT_MEDIA_TYPE
        return headers

    @property
    def params(self) -> list[tuple[str, str]]:
        return list(self._params)

    async def execute(self) -> Result[Any]:
        return await self._service.request(
            self._method,
            self.path,
            params=self._params,
            json=self._payload,
            headers=self.build_headers(),
        )

    def __repr__(self) -> str:
        return f"TableQuery({self._method} {self._table} {self._params})"
