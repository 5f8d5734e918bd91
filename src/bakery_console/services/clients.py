"""Client directory service."""

from collections.abc import Mapping
from dataclasses import dataclass

from bakery_console.domain.models import Client, Order, Pagination
from bakery_console.domain.parsing import parse_client, parse_order
from bakery_console.domain.records import (
    get_relation_array,
    is_missing,
    normalize_record,
    normalize_records,
)
from bakery_console.services.notifications import success
from bakery_console.services.resources import DEFAULT_PAGE_SIZE, ResourceService

CLIENTS = "clients"


@dataclass
class ClientService:
    """Service for client records."""

    resources: ResourceService

    async def list_clients(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, object] | None = None,
    ) -> tuple[list[Client], Pagination]:
        """Return a page of clients."""
        result = await self.resources.list_page(CLIENTS, page, page_size, filters)
        records = normalize_records(result.data)
        return [parse_client(record) for record in records], result.pagination

    async def get_client(
        self, client_id: int | str | None
    ) -> tuple[Client, list[Order]] | None:
        """Return a client together with their orders."""
        raw = await self.resources.get_by_id(
            CLIENTS, client_id, params={"populate": ["orders"]}
        )
        record = normalize_record(raw) if raw is not None else None
        if is_missing(record):
            return None
        orders = [
            parse_order(order) for order in get_relation_array(record.get("orders"))
        ]
        return parse_client(record), orders

    async def create_client(self, payload: Mapping[str, object]) -> Client:
        """Create a client."""
        created = await self.resources.create(CLIENTS, payload)
        self.resources.notify(success("Клиент успешно добавлен"))
        return parse_client(created)

    async def update_client(
        self, client_id: int | str, payload: Mapping[str, object]
    ) -> Client:
        """Update a client's contact details."""
        updated = await self.resources.update(CLIENTS, client_id, payload)
        self.resources.notify(success("Данные клиента успешно обновлены"))
        return parse_client(updated)

    async def delete_client(self, client_id: int | str) -> None:
        """Delete a client."""
        await self.resources.delete(CLIENTS, client_id)
        self.resources.notify(success("Клиент успешно удален"))
