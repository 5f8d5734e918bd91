"""Tests for the Strapi HTTP adapter."""

import asyncio
import json

import httpx
import pytest

from bakery_console.adapters.strapi_client import (
    HttpxStrapiClient,
    StrapiHTTPError,
    StrapiPayloadError,
    StrapiTransportError,
    encode_query,
)


def _client(handler) -> HttpxStrapiClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxStrapiClient(
        base_url="http://cms.test",
        http_client=httpx.AsyncClient(transport=transport),
        api_token="cms-token",
    )


def test_encode_query_uses_bracket_notation() -> None:
    params = {
        "pagination": {"page": 2, "pageSize": 10},
        "filters": {"status": {"$in": ["pending", "in-progress"]}},
        "populate": ["client", "orderItems.recipe"],
        "sort": ["orderDate:desc"],
        "publicationState": None,
        "withCount": True,
    }

    assert encode_query(params) == [
        ("pagination[page]", "2"),
        ("pagination[pageSize]", "10"),
        ("filters[status][$in][0]", "pending"),
        ("filters[status][$in][1]", "in-progress"),
        ("populate[0]", "client"),
        ("populate[1]", "orderItems.recipe"),
        ("sort[0]", "orderDate:desc"),
        ("withCount", "true"),
    ]


def test_list_records_sends_auth_and_pagination() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [], "meta": {}})

    client = _client(handler)
    payload = asyncio.run(
        client.list_records("orders", {"pagination": {"page": 2, "pageSize": 5}})
    )

    assert payload == {"data": [], "meta": {}}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/orders"
    assert request.url.params["pagination[page]"] == "2"
    assert request.url.params["pagination[pageSize]"] == "5"
    assert request.headers["Authorization"] == "Bearer cms-token"


def test_mutations_wrap_body_in_data() -> None:
    seen: list[tuple[str, str, dict[str, object] | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content.decode()) if request.content else None
        seen.append((request.method, request.url.path, body))
        return httpx.Response(200, json={"data": {"id": 5, "name": "Сахар"}})

    client = _client(handler)
    asyncio.run(client.create_record("ingredients", {"name": "Сахар"}))
    asyncio.run(client.update_record("ingredients", 5, {"inStock": False}))
    deleted = asyncio.run(client.delete_record("ingredients", 5))

    assert seen == [
        ("POST", "/api/ingredients", {"data": {"name": "Сахар"}}),
        ("PUT", "/api/ingredients/5", {"data": {"inStock": False}}),
        ("DELETE", "/api/ingredients/5", None),
    ]
    assert deleted["data"] == {"id": 5, "name": "Сахар"}


def test_error_body_is_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error": {
                    "status": 400,
                    "name": "ValidationError",
                    "message": "name must be defined",
                    "details": {"errors": [{"path": ["name"]}]},
                }
            },
        )

    client = _client(handler)

    with pytest.raises(StrapiHTTPError) as exc_info:
        asyncio.run(client.update_record("ingredients", 1, {"name": None}))

    error = exc_info.value
    assert error.status_code == 400
    assert error.is_validation_error
    assert error.message == "name must be defined"
    assert error.details == {"errors": [{"path": ["name"]}]}


def test_not_found_without_error_body() -> None:
    client = _client(lambda request: httpx.Response(404, text="missing"))

    with pytest.raises(StrapiHTTPError) as exc_info:
        asyncio.run(client.get_record("clients", 9))

    assert exc_info.value.is_not_found


def test_transport_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(StrapiTransportError):
        asyncio.run(client.list_records("recipes"))


def test_non_object_payload_is_rejected() -> None:
    client = _client(lambda request: httpx.Response(200, json=[1, 2, 3]))

    with pytest.raises(StrapiPayloadError):
        asyncio.run(client.get_json("popular-products"))


def test_base_url_accepts_api_suffix() -> None:
    client = HttpxStrapiClient(
        base_url="http://cms.test/api/",
        http_client=httpx.AsyncClient(),
    )

    assert client.base_url == "http://cms.test/api"
    assert "Authorization" not in client.headers
    asyncio.run(client.close())
