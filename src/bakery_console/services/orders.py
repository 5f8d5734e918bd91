"""Order service."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from bakery_console.adapters.strapi_client import StrapiHTTPError
from bakery_console.domain.models import (
    ACTIVE_ORDER_STATUSES,
    InvalidStatusTransitionError,
    Order,
    OrderStatus,
    Pagination,
)
from bakery_console.domain.parsing import parse_order
from bakery_console.domain.pricing import OrderDraft
from bakery_console.domain.records import (
    is_missing,
    normalize_record,
    normalize_records,
)
from bakery_console.services.notifications import success
from bakery_console.services.resources import DEFAULT_PAGE_SIZE, ResourceService

ORDERS = "orders"
ORDER_ITEMS = "order-items"

# Order changes move client counters and financial aggregates on the backend.
_DEPENDENT_QUERIES = (
    "clients",
    "financial-stats",
    "financial-chart",
    "popular-products",
)

_POPULATE = {"populate": ["client", "orderItems.recipe"]}
_ACTIVE_STATUS_VALUES = [status.value for status in ACTIVE_ORDER_STATUSES]

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class OrderService:
    """Service for orders and their line items."""

    resources: ResourceService
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def list_orders(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, object] | None = None,
    ) -> tuple[list[Order], Pagination]:
        """Return a page of orders with client and items."""
        params = {**(filters or {}), **_POPULATE}
        result = await self.resources.list_page(ORDERS, page, page_size, params)
        records = normalize_records(result.data)
        return [parse_order(record) for record in records], result.pagination

    async def list_active(self, limit: int = 5) -> tuple[list[Order], Pagination]:
        """Return the most recent pending or in-progress orders."""
        return await self.list_orders(
            page=1,
            page_size=limit,
            filters={
                "filters": {"status": {"$in": _ACTIVE_STATUS_VALUES}},
                "sort": ["orderDate:desc"],
            },
        )

    async def list_by_status(
        self,
        status: OrderStatus,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Order], Pagination]:
        """Return orders in a given status."""
        return await self.list_orders(
            page=page,
            page_size=page_size,
            filters={"filters": {"status": {"$eq": status.value}}},
        )

    async def get_order(self, order_id: int | str | None) -> Order | None:
        """Return an order by id, if present."""
        raw = await self.resources.get_by_id(ORDERS, order_id, params=_POPULATE)
        record = normalize_record(raw) if raw is not None else None
        if is_missing(record):
            return None
        return parse_order(record)

    async def create_order(self, draft: OrderDraft) -> Order:
        """Create a pending order and then its line items."""
        if not draft.items:
            raise ValueError("Order must contain at least one item")
        created = await self.resources.create(
            ORDERS,
            {
                "orderDate": self.clock().isoformat(),
                "deliveryDate": draft.delivery_date,
                "status": OrderStatus.PENDING.value,
                "total": draft.total,
                "address": draft.address,
                "notes": draft.notes,
                "client": draft.client_id,
            },
            invalidates=_DEPENDENT_QUERIES,
        )
        order = parse_order(created)
        await asyncio.gather(
            *(
                self.resources.create(
                    ORDER_ITEMS,
                    {
                        "option": item.option,
                        "quantity": item.quantity,
                        "price": item.price,
                        "total": item.total,
                        "recipe": item.recipe_id,
                        "order": order.id,
                    },
                    invalidates=(ORDERS,),
                )
                for item in draft.items
            )
        )
        _logger.info("Created order %s with %s items", order.id, len(draft.items))
        self.resources.notify(success("Заказ успешно создан"))
        return order

    async def update_status(
        self,
        order_id: int | str,
        status: OrderStatus,
        current: OrderStatus | None = None,
    ) -> Order:
        """Move an order to a new status if the transition is allowed."""
        await self._check_transition(order_id, status, current)
        updated = await self.resources.update(
            ORDERS, order_id, {"status": status.value}, invalidates=_DEPENDENT_QUERIES
        )
        self.resources.notify(success("Статус заказа успешно обновлен"))
        return parse_order(updated)

    async def update_order(
        self, order_id: int | str, payload: Mapping[str, object]
    ) -> Order:
        """Update order fields; a status change must follow the state machine."""
        data = dict(payload)
        if "status" in data:
            target = OrderStatus(data["status"])
            await self._check_transition(order_id, target)
            data["status"] = target.value
        updated = await self.resources.update(
            ORDERS, order_id, data, invalidates=_DEPENDENT_QUERIES
        )
        self.resources.notify(success("Заказ успешно обновлен"))
        return parse_order(updated)

    async def delete_order(self, order_id: int | str) -> None:
        """Delete an order."""
        await self.resources.delete(ORDERS, order_id, invalidates=_DEPENDENT_QUERIES)
        self.resources.notify(success("Заказ успешно удален"))

    async def _check_transition(
        self,
        order_id: int | str,
        target: OrderStatus,
        current: OrderStatus | None = None,
    ) -> None:
        """Raise unless the order may move to ``target``.

        The current status is read straight from the backend, so an outage
        surfaces as ``StrapiError`` and a missing order as ``LookupError``.
        """
        if current is None:
            try:
                raw = await self.resources.get_required(ORDERS, order_id)
            except StrapiHTTPError as exc:
                if exc.is_not_found:
                    raise LookupError(f"Order {order_id} not found") from exc
                raise
            current = parse_order(raw).status
        if not current.can_transition_to(target):
            raise InvalidStatusTransitionError(current, target)
