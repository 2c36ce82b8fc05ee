"""Unit tests for the PostgREST client wrapper.

Uses httpx.MockTransport to verify request shapes without a real Supabase.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from virtual_drive.db.errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)
from virtual_drive.db.supabase_client import (
    PostgrestFilter,
    SupabaseClient,
    _filters_to_params,
    _reset_shared_async_client_for_tests,
)


def _make_client(handler, **kwargs) -> SupabaseClient:
    transport = httpx.MockTransport(handler)
    return SupabaseClient(
        supabase_url="https://test.supabase.co/",
        service_role_key="svc-key",
        http_client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


# ── Test: filter encoding ──────────────────────────────────────────


def test_filters_mapping_defaults_to_eq():
    assert _filters_to_params({"tenant_id": "t1"}) == {"tenant_id": "eq.t1"}


def test_filters_in_quotes_strings():
    params = _filters_to_params({"id": ("not.in", ["a", 'b"c'])})
    assert params == {"id": 'not.in.("a","b\\"c")'}


def test_filters_sequence_and_is_null():
    params = _filters_to_params([
        PostgrestFilter("content", "is", None),
        PostgrestFilter("size", "gt", 10),
    ])
    assert params == {"content": "is.null", "size": "gt.10"}


def test_filters_reject_eq_none():
    with pytest.raises(ValueError):
        _filters_to_params({"content": ("eq", None)})


# ── Test: select ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_select_builds_postgrest_query():
    seen: dict[str, Any] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = dict(request.headers)
        return httpx.Response(200, json=[{"id": "1"}])

    client = _make_client(handler)
    rows = await client.select(
        "file_system_items",
        filters={"tenant_id": ("eq", "default"), "parent_path": ("eq", "Docs")},
        order="position.asc",
        limit=50,
        offset=100,
    )

    assert rows == [{"id": "1"}]
    assert seen["method"] == "GET"
    parsed = urlparse(seen["url"])
    assert parsed.path == "/rest/v1/file_system_items"
    qs = parse_qs(parsed.query)
    assert qs["tenant_id"] == ["eq.default"]
    assert qs["parent_path"] == ["eq.Docs"]
    assert qs["order"] == ["position.asc"]
    assert qs["limit"] == ["50"]
    assert qs["offset"] == ["100"]
    assert qs["select"] == ["*"]
    assert seen["headers"]["apikey"] == "svc-key"
    assert seen["headers"]["authorization"] == "Bearer svc-key"
    assert seen["headers"]["accept-profile"] == "public"
    assert "content-profile" not in seen["headers"]


@pytest.mark.asyncio
async def test_schema_prefix_sets_profile_headers():
    seen: dict[str, Any] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = dict(request.headers)
        return httpx.Response(200, json=[])

    client = _make_client(handler)
    await client.delete("drive.file_system_items", filters={"id": "x"})

    assert seen["path"] == "/rest/v1/file_system_items"
    assert seen["headers"]["accept-profile"] == "drive"
    assert seen["headers"]["content-profile"] == "drive"
    assert seen["headers"]["prefer"] == "return=representation"


# ── Test: insert / upsert ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_upsert_sets_prefer_and_on_conflict():
    seen: dict[str, Any] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = dict(request.headers)
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=seen["body"])

    client = _make_client(handler)
    rows = await client.insert(
        "file_system_items",
        [{"id": "1", "name": "a"}],
        upsert=True,
        on_conflict="tenant_id,parent_path,id",
    )

    assert rows == [{"id": "1", "name": "a"}]
    assert seen["method"] == "POST"
    assert parse_qs(urlparse(seen["url"]).query)["on_conflict"] == ["tenant_id,parent_path,id"]
    assert seen["headers"]["prefer"] == "return=representation,resolution=merge-duplicates"


@pytest.mark.asyncio
async def test_empty_response_body_is_empty_list():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    client = _make_client(handler)
    assert await client.update("file_system_items", {"id": "1"}, {"name": "b"}) == []


@pytest.mark.asyncio
async def test_non_list_payload_is_an_error():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "1"})

    client = _make_client(handler)
    with pytest.raises(SupabaseError):
        await client.select("file_system_items")


# ── Test: rpc ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_rpc_posts_params():
    seen: dict[str, Any] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=3)

    client = _make_client(handler)
    result = await client.rpc("recursive_delete", {"p_path": "Docs"})

    assert result == 3
    assert seen["path"] == "/rest/v1/rpc/recursive_delete"
    assert seen["body"] == {"p_path": "Docs"}


# ── Test: error mapping ────────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("status,err_cls", [
    (401, SupabaseAuthError),
    (403, SupabaseAuthError),
    (404, SupabaseNotFoundError),
    (409, SupabaseConflictError),
    (400, SupabaseError),
])
async def test_error_status_maps_to_exception(status, err_cls):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status,
            json={"message": "boom", "code": "23505", "details": "dup", "hint": None},
        )

    client = _make_client(handler)
    with pytest.raises(err_cls) as exc_info:
        await client.select("file_system_items")

    err = exc_info.value
    assert err.status_code == status
    assert err.message == "boom"
    assert err.code == "23505"
    assert "svc-key" not in str(err)


@pytest.mark.parametrize("status,transient", [
    (500, True),
    (503, True),
    (429, True),
    (408, True),
    (400, False),
    (409, False),
])
def test_is_transient(status, transient):
    assert SupabaseError(status_code=status, message="x").is_transient is transient


# ── Test: construction ─────────────────────────────────────────────


def test_requires_url_and_key():
    with pytest.raises(ValueError):
        SupabaseClient(supabase_url="", service_role_key="k")
    with pytest.raises(ValueError):
        SupabaseClient(supabase_url="https://x", service_role_key="")


def test_shared_client_is_reused_until_reset():
    _reset_shared_async_client_for_tests()
    a = SupabaseClient(supabase_url="https://x", service_role_key="k")
    b = SupabaseClient(supabase_url="https://x", service_role_key="k")
    assert a._client is b._client
    assert a.base_rest_url == "https://x/rest/v1"
    _reset_shared_async_client_for_tests()
