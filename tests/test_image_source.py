from __future__ import annotations

import httpx
import pytest

from gallery.config import SourceSettings
from gallery.services.exceptions import NetworkError
from gallery.services.image_source import ImageSource


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _payload(count: int) -> list[dict]:
    return [
        {
            "id": str(index),
            "url": f"https://images.example/{index}.jpg",
            "title": f"Image {index}",
            "description": "A picture",
            "author": "ignored",
        }
        for index in range(count)
    ]


@pytest.mark.asyncio
async def test_fetch_page_sends_query_parameters():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_payload(3))

    async with _client(handler) as client:
        source = ImageSource(client, SourceSettings(base_url="http://gallery.test/api/images"))
        records = await source.fetch_page("cats", 2)

    assert [record.id for record in records] == ["0", "1", "2"]
    params = seen[0].url.params
    assert seen[0].url.path == "/api/images"
    assert params["query"] == "cats"
    assert params["page"] == "2"
    assert params["per_page"] == "8"


@pytest.mark.asyncio
async def test_empty_term_uses_fallback_query():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        source = ImageSource(client, SourceSettings(fallback_query="nature"))
        records = await source.fetch_page("", 1, per_page=4)

    assert records == ()
    assert seen[0].url.params["query"] == "nature"
    assert seen[0].url.params["per_page"] == "4"


@pytest.mark.asyncio
async def test_http_error_becomes_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    async with _client(handler) as client:
        source = ImageSource(client)
        with pytest.raises(NetworkError) as excinfo:
            await source.fetch_page("cats", 1)

    assert "503" in str(excinfo.value)
    assert "maintenance" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        source = ImageSource(client)
        with pytest.raises(NetworkError):
            await source.fetch_page("cats", 1)


@pytest.mark.asyncio
async def test_malformed_payload_becomes_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": []})

    async with _client(handler) as client:
        source = ImageSource(client)
        with pytest.raises(NetworkError, match="Malformed"):
            await source.fetch_page("cats", 1)
