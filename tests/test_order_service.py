"""Tests for the order service."""

import asyncio
from datetime import UTC, datetime

import pytest

from bakery_console.adapters.strapi_client import (
    StrapiHTTPError,
    StrapiTransportError,
)
from bakery_console.domain.models import (
    InvalidStatusTransitionError,
    OrderStatus,
    ProductType,
    Recipe,
)
from bakery_console.domain.pricing import OrderDraft
from bakery_console.services.orders import OrderService
from bakery_console.services.resources import ResourceService
from tests.conftest import InMemoryStrapiClient


def _service(resource_service: ResourceService) -> OrderService:
    return OrderService(
        resource_service, clock=lambda: datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
    )


def _recipe(recipe_id: int, product_type: ProductType, price: float) -> Recipe:
    return Recipe(
        id=recipe_id,
        name=f"recipe-{recipe_id}",
        product_type=product_type,
        description=None,
        cost=price / 2,
        price=price,
    )


def test_create_order_posts_order_then_items(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    draft = OrderDraft(client_id=3, delivery_date="2026-10-20T12:00:00+00:00")
    draft.add_item(_recipe(1, ProductType.CAKE, 600), "1 кг", 1)
    draft.add_item(_recipe(2, ProductType.CUPCAKE, 225), "6 шт", 2)

    order = asyncio.run(_service(resource_service).create_order(draft))

    resource, payload = strapi_client.payloads[0]
    assert resource == "orders"
    assert payload["status"] == "pending"
    assert payload["total"] == pytest.approx(1050)
    assert payload["client"] == 3
    assert payload["orderDate"] == "2026-10-19T09:00:00+00:00"
    items = strapi_client.payloads[1:]
    assert [item_resource for item_resource, _ in items] == ["order-items"] * 2
    assert all(item["order"] == order.id for _, item in items)
    assert order.total == pytest.approx(1050)


def test_create_order_requires_items(resource_service: ResourceService) -> None:
    draft = OrderDraft(client_id=3, delivery_date="2026-10-20")

    with pytest.raises(ValueError):
        asyncio.run(_service(resource_service).create_order(draft))


def test_create_order_invalidates_client_queries(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    asyncio.run(resource_service.list_page("clients"))
    draft = OrderDraft(client_id=3, delivery_date="2026-10-20")
    draft.add_item(_recipe(1, ProductType.MOCHI, 400), "4 шт", 1)

    asyncio.run(_service(resource_service).create_order(draft))
    asyncio.run(resource_service.list_page("clients"))

    assert strapi_client.calls.count(("list", "clients")) == 2


def test_list_active_filters_and_sorts(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    asyncio.run(_service(resource_service).list_active())

    params = strapi_client.params[-1]
    assert params is not None
    assert params["filters"] == {"status": {"$in": ["pending", "in-progress"]}}
    assert params["sort"] == ["orderDate:desc"]
    assert params["populate"] == ["client", "orderItems.recipe"]
    assert params["pagination"] == {"page": 1, "pageSize": 5}


def test_update_status_follows_state_machine(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    strapi_client.add("orders", {"id": 9, "status": "pending", "total": 600})
    service = _service(resource_service)

    updated = asyncio.run(service.update_status(9, OrderStatus.IN_PROGRESS))
    assert updated.status is OrderStatus.IN_PROGRESS

    with pytest.raises(InvalidStatusTransitionError):
        asyncio.run(
            service.update_status(
                9, OrderStatus.PENDING, current=OrderStatus.COMPLETED
            )
        )
    assert strapi_client.calls.count(("update", "orders")) == 1


def test_update_status_of_missing_order(resource_service: ResourceService) -> None:
    with pytest.raises(LookupError):
        asyncio.run(_service(resource_service).update_status(1, OrderStatus.COMPLETED))


def test_delete_missing_order_raises(resource_service: ResourceService) -> None:
    with pytest.raises(StrapiHTTPError):
        asyncio.run(_service(resource_service).delete_order(404))


def test_update_order_rejects_illegal_status_change(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    strapi_client.add("orders", {"id": 9, "status": "completed", "total": 600})

    with pytest.raises(InvalidStatusTransitionError):
        asyncio.run(_service(resource_service).update_order(9, {"status": "pending"}))
    assert ("update", "orders") not in strapi_client.calls
    assert strapi_client.records["orders"][0]["status"] == "completed"


def test_update_order_with_allowed_status_change(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    strapi_client.add("orders", {"id": 9, "status": "pending", "total": 600})

    updated = asyncio.run(
        _service(resource_service).update_order(
            9, {"status": OrderStatus.IN_PROGRESS, "notes": "без орехов"}
        )
    )

    assert strapi_client.payloads[-1] == (
        "orders",
        {"status": "in-progress", "notes": "без орехов"},
    )
    assert updated.status is OrderStatus.IN_PROGRESS
    assert updated.notes == "без орехов"


def test_update_order_without_status_skips_lookup(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    strapi_client.add("orders", {"id": 9, "status": "completed", "total": 600})

    service = _service(resource_service)
    asyncio.run(service.update_order(9, {"address": "Тверская 1"}))

    assert ("get", "orders") not in strapi_client.calls


def test_update_status_during_outage_raises_backend_error(
    resource_service: ResourceService, strapi_client: InMemoryStrapiClient
) -> None:
    strapi_client.add("orders", {"id": 9, "status": "pending", "total": 600})
    strapi_client.fail_with = StrapiTransportError("down")

    with pytest.raises(StrapiTransportError):
        asyncio.run(
            _service(resource_service).update_status(9, OrderStatus.IN_PROGRESS)
        )
    assert ("update", "orders") not in strapi_client.calls
