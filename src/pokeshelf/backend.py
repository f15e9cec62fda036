"""Thin async accessor for the hosted PostgREST API and its edge functions.

Every method raises ``PokeShelfError`` on failure; deciding whether a failure
degrades to an empty result is left to the component that owns the read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from pokeshelf.errors import ErrorCode, PokeShelfError

if TYPE_CHECKING:
    from pokeshelf.config import BackendSettings

log = structlog.get_logger()

_REST_PREFIX = "/rest/v1"
_FUNCTIONS_PREFIX = "/functions/v1"

_PG_UNIQUE_VIOLATION = "23505"
_PG_INSUFFICIENT_PRIVILEGE = "42501"


# ---------------------------------------------------------------------------
# Filter helpers (PostgREST operator syntax)
# ---------------------------------------------------------------------------


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def eq(value: Any) -> str:
    return f"eq.{_literal(value)}"


def ilike(pattern: str) -> str:
    # PostgREST accepts * as the LIKE wildcard in query strings
    return f"ilike.{pattern.replace('%', '*')}"


def in_(values: Iterable[Any]) -> str:
    quoted = ",".join(f'"{_literal(v)}"' for v in values)
    return f"in.({quoted})"


def is_(value: Any) -> str:
    return f"is.{_literal(value)}"


def not_is(value: Any) -> str:
    return f"not.is.{_literal(value)}"


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def build_http_client(settings: BackendSettings) -> httpx.AsyncClient:
    """Create the shared client. Auth headers are added per request."""
    return httpx.AsyncClient(
        base_url=settings.url.rstrip("/"),
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"apikey": settings.anon_key},
    )


def _error_from_response(response: httpx.Response) -> PokeShelfError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    pg_code = str(body.get("code") or "")
    detail = body.get("message") or body.get("error") or response.reason_phrase

    if pg_code == _PG_UNIQUE_VIOLATION or response.status_code == 409:
        return PokeShelfError(
            code=ErrorCode.DUPLICATE_ENTRY,
            message=f"Record already exists: {detail}",
            recoverable=False,
        )
    if pg_code == _PG_INSUFFICIENT_PRIVILEGE or response.status_code in (401, 403):
        return PokeShelfError(
            code=ErrorCode.PERMISSION_DENIED,
            message=f"Insufficient rights: {detail}",
            suggestion="Sign in with an account that is allowed to perform this action.",
            recoverable=False,
        )
    if response.status_code >= 500:
        return PokeShelfError(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message=f"Backend returned HTTP {response.status_code}: {detail}",
            suggestion="The service may be temporarily unavailable. Try again later.",
            recoverable=True,
        )
    return PokeShelfError(
        code=ErrorCode.BACKEND_ERROR,
        message=f"Backend rejected the request (HTTP {response.status_code}): {detail}",
        recoverable=False,
    )


class BackendClient:
    """Table and function access for one signed-in (or anonymous) caller."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: BackendSettings,
        access_token: str | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._access_token = access_token

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def set_access_token(self, token: str | None) -> None:
        self._access_token = token

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {self._access_token or self._settings.anon_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=dict(params or {}),
                json=json,
                headers=self._headers(prefer),
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as exc:
            log.warning("backend_request_failed", method=method, path=path, error=str(exc))
            raise PokeShelfError(
                code=ErrorCode.BACKEND_UNAVAILABLE,
                message=f"Could not reach the backend: {exc}",
                suggestion="Check your network connection and try again.",
                recoverable=True,
            ) from exc

        if response.is_error:
            error = _error_from_response(response)
            log.warning(
                "backend_request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                code=error.code,
            )
            raise error
        return response

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": columns, **(filters or {})}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", f"{_REST_PREFIX}/{table}", params=params)
        return response.json()

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """Return the first matching row, or ``None`` when nothing matches."""
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(
        self, table: str, rows: dict[str, Any] | list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "POST", f"{_REST_PREFIX}/{table}", json=rows, prefer="return=representation"
        )
        return response.json()

    async def upsert(
        self, table: str, rows: list[dict[str, Any]], *, on_conflict: str
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "POST",
            f"{_REST_PREFIX}/{table}",
            params={"on_conflict": on_conflict},
            json=rows,
            prefer="resolution=merge-duplicates,return=representation",
        )
        return response.json()

    async def update(
        self, table: str, values: dict[str, Any], *, filters: Mapping[str, str]
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"{_REST_PREFIX}/{table}",
            params=filters,
            json=values,
            prefer="return=representation",
        )
        return response.json()

    async def delete(self, table: str, *, filters: Mapping[str, str]) -> None:
        await self._request("DELETE", f"{_REST_PREFIX}/{table}", params=filters)

    async def count(self, table: str, *, filters: Mapping[str, str] | None = None) -> int:
        """Exact row count read from the ``Content-Range`` header."""
        response = await self._request(
            "HEAD",
            f"{_REST_PREFIX}/{table}",
            params={"select": "*", **(filters or {})},
            prefer="count=exact",
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total.isdigit():
            return 0
        return int(total)

    # ------------------------------------------------------------------
    # Edge functions
    # ------------------------------------------------------------------

    async def invoke(
        self, function: str, payload: dict[str, Any], *, timeout: float | None = None
    ) -> dict[str, Any]:
        try:
            response = await self._request(
                "POST", f"{_FUNCTIONS_PREFIX}/{function}", json=payload, timeout=timeout
            )
        except PokeShelfError as exc:
            if exc.code == ErrorCode.PERMISSION_DENIED:
                raise
            raise PokeShelfError(
                code=ErrorCode.FUNCTION_FAILED,
                message=f"Function {function!r} failed: {exc.message}",
                recoverable=exc.recoverable,
            ) from exc
        return response.json()
