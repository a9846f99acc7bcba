"""Tests for the Figma document client."""

import httpx
import pytest

from pipeline.clients.figma_client import FigmaClient
from pipeline.core.exceptions import UpstreamFetchError

BASE_URL = "https://figma.example.com/v1"


def make_client(handler) -> FigmaClient:
    return FigmaClient(
        base_url=BASE_URL + "/",
        token="figd_test_token",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_document_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["token"] = request.headers.get("X-Figma-Token")
        return httpx.Response(
            200,
            json={"name": "App", "document": {"type": "DOCUMENT", "children": []}},
        )

    document = await make_client(handler).fetch_document("AbC123")

    assert document == {"type": "DOCUMENT", "children": []}
    assert seen["path"] == "/v1/files/AbC123"
    assert seen["token"] == "figd_test_token"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "file_key,encoded",
    [("abc?depth=1", "abc%3Fdepth%3D1"), ("../me", "..%2Fme"), ("a b#c", "a%20b%23c")],
)
async def test_file_key_is_escaped_into_one_path_segment(file_key, encoded):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["raw_path"] = request.url.raw_path.decode()
        return httpx.Response(200, json={"document": {"type": "DOCUMENT"}})

    await make_client(handler).fetch_document(file_key)

    assert seen["raw_path"] == f"/v1/files/{encoded}"


@pytest.mark.asyncio
async def test_non_success_status_carries_upstream_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status": 404, "err": "Not found"})

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("missing")

    error = exc_info.value
    assert error.upstream_status == 404
    assert error.http_status == 404
    assert "Not found" in error.message


@pytest.mark.asyncio
async def test_forbidden_with_plain_text_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="Invalid token")

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("key")

    assert exc_info.value.http_status == 403
    assert "Invalid token" in exc_info.value.message


@pytest.mark.asyncio
async def test_missing_document_is_500():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "App"})

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("key")

    assert exc_info.value.http_status == 500
    assert exc_info.value.error_type == "invalid_response"


@pytest.mark.asyncio
async def test_non_json_body_is_invalid_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("key")

    assert exc_info.value.http_status == 500


@pytest.mark.asyncio
async def test_connection_error_is_502():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("key")

    assert exc_info.value.http_status == 502
    assert exc_info.value.error_type == "unavailable"


@pytest.mark.asyncio
async def test_timeout_is_504():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamFetchError) as exc_info:
        await make_client(handler).fetch_document("key")

    assert exc_info.value.http_status == 504


def test_configured_flag():
    assert FigmaClient(BASE_URL, token="x").configured is True
    assert FigmaClient(BASE_URL, token="").configured is False
