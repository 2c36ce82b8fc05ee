"""Async PostgREST client wrapper for Supabase.

This is the single point of Supabase HTTP interaction for the durable
storage backend. Every table call returns a list of row dicts; every
non-2xx response becomes a ``SupabaseError`` subclass.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

import httpx

from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)

# Shared pool for callers that do not inject their own client.
_shared_async_client: httpx.AsyncClient | None = None

_WRITE_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})
_LIST_OPS = frozenset({"in", "not.in"})
_NULL_HOSTILE_OPS = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike"})

_STATUS_ERRORS: dict[int, type[SupabaseError]] = {
    401: SupabaseAuthError,
    403: SupabaseAuthError,
    404: SupabaseNotFoundError,
    409: SupabaseConflictError,
}


def _get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None:
        _shared_async_client = httpx.AsyncClient()
    return _shared_async_client


def _reset_shared_async_client_for_tests() -> None:
    """Test helper: forget the shared client (it is not closed)."""
    global _shared_async_client
    _shared_async_client = None


@dataclass(frozen=True, slots=True)
class PostgrestFilter:
    column: str
    op: str
    value: Any


Filters = Optional[Union[Sequence[PostgrestFilter], Mapping[str, Any]]]


def _qualify(table: str, default_schema: str) -> tuple[str, str]:
    """Split ``"schema.table"``; bare names use ``default_schema``."""
    schema, dot, name = table.partition(".")
    if not dot:
        return default_schema, table.strip()
    return schema.strip(), name.strip()


def _literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_value(op: str, value: Any) -> str:
    if op in _LIST_OPS:
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError(f"{op} operator requires an iterable of values")
        # Strings are JSON-quoted so commas and quotes survive inside (...).
        members = (json.dumps(v) if isinstance(v, str) else _literal(v) for v in value)
        return f"({','.join(members)})"
    if value is None and op in _NULL_HOSTILE_OPS:
        raise ValueError(f"{op} does not support None; use op='is' with value=None")
    return _literal(value)


def _filters_to_params(filters: Filters) -> dict[str, str]:
    """Render filters as PostgREST query params (``column=op.value``).

    Mapping values are either a bare value (``eq``) or an ``(op, value)`` pair.
    """
    if not filters:
        return {}

    if isinstance(filters, Mapping):
        triples = []
        for column, condition in filters.items():
            if isinstance(condition, tuple) and len(condition) == 2:
                triples.append((str(column), str(condition[0]), condition[1]))
            else:
                triples.append((str(column), "eq", condition))
    else:
        triples = [(f.column, f.op, f.value) for f in filters]

    return {column: f"{op}.{_encode_value(op, value)}" for column, op, value in triples}


def _error_from_response(resp: httpx.Response) -> SupabaseError:
    body: Any = None
    try:
        body = resp.json()
    except ValueError:
        pass
    fields = body if isinstance(body, dict) else {}

    err_cls = _STATUS_ERRORS.get(resp.status_code, SupabaseError)
    # Built from the response body only; request headers carry the key.
    return err_cls(
        status_code=resp.status_code,
        message=fields.get("message") or resp.text,
        code=fields.get("code"),
        details=fields.get("details"),
        hint=fields.get("hint"),
    )


class SupabaseClient:
    """Service-role PostgREST client for ``file_system_items`` and its RPCs."""

    def __init__(
        self,
        *,
        supabase_url: str,
        service_role_key: str,
        default_schema: str = "public",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not service_role_key:
            raise ValueError("service_role_key is required")

        self._supabase_url = supabase_url.rstrip("/")
        self._service_role_key = service_role_key
        self._default_schema = default_schema or "public"
        self._timeout_seconds = float(timeout_seconds)
        self._client = http_client or _get_shared_async_client()

    @property
    def base_rest_url(self) -> str:
        return f"{self._supabase_url}/rest/v1"

    def _headers(self, schema: str, method: str, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        # Never log these headers.
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
        }
        if schema:
            headers["Accept-Profile"] = schema
            if method in _WRITE_METHODS:
                headers["Content-Profile"] = schema
        if extra:
            headers.update(extra)
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        resp = await self._client.request(
            method,
            url,
            params=params or None,
            json=json_body,
            headers=headers,
            timeout=self._timeout_seconds,
        )
        if resp.status_code >= 400:
            raise _error_from_response(resp)
        return resp

    async def _table(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        schema, name = _qualify(table, self._default_schema)
        extra = {"Prefer": prefer} if prefer else None
        resp = await self._send(
            method,
            f"{self.base_rest_url}/{name}",
            self._headers(schema, method, extra),
            params=params,
            json_body=json_body,
        )
        if not resp.content:
            return []
        rows = resp.json()
        if not isinstance(rows, list):
            raise SupabaseError(
                status_code=500,
                message=f"expected list response from {method} {name}",
            )
        return rows

    async def select(
        self,
        table: str,
        filters: Filters = None,
        *,
        columns: str = "*",
        limit: int | None = None,
        offset: int | None = None,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        params = _filters_to_params(filters)
        params["select"] = columns
        if limit is not None:
            params["limit"] = str(int(limit))
        if offset:
            params["offset"] = str(int(offset))
        if order:
            params["order"] = order
        return await self._table("GET", table, params=params)

    async def insert(
        self,
        table: str,
        data: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        upsert: bool = False,
        on_conflict: str | None = None,
    ) -> list[dict[str, Any]]:
        """Insert rows; with ``upsert=True`` rows matching ``on_conflict`` are merged."""
        prefer = "return=representation"
        if upsert:
            prefer += ",resolution=merge-duplicates"
        return await self._table(
            "POST",
            table,
            params={"on_conflict": on_conflict} if on_conflict else None,
            json_body=data,
            prefer=prefer,
        )

    async def update(
        self,
        table: str,
        filters: Filters,
        data: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        return await self._table(
            "PATCH",
            table,
            params=_filters_to_params(filters),
            json_body=data,
            prefer="return=representation",
        )

    async def delete(self, table: str, filters: Filters) -> list[dict[str, Any]]:
        """Delete matching rows and return them (empty when nothing matched)."""
        return await self._table(
            "DELETE",
            table,
            params=_filters_to_params(filters),
            prefer="return=representation",
        )

    async def rpc(
        self,
        function_name: str,
        params: Mapping[str, Any] | None = None,
        *,
        schema: str | None = None,
    ) -> Any:
        resp = await self._send(
            "POST",
            f"{self.base_rest_url}/rpc/{function_name}",
            self._headers(schema or self._default_schema, "POST"),
            json_body=dict(params or {}),
        )
        return resp.json()
