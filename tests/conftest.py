"""Shared test fixtures."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from bakery_console.adapters.strapi_client import (
    StrapiClient,
    StrapiError,
    StrapiHTTPError,
)
from bakery_console.config import Settings
from bakery_console.containers import AppContainer, build_services
from bakery_console.services.cache import InMemoryQueryCache
from bakery_console.services.notifications import (
    Notification,
    NotificationLevel,
    Notifier,
)
from bakery_console.services.resources import ResourceService


@dataclass
class InMemoryStrapiClient(StrapiClient):
    """In-memory Strapi backend for tests; stores records in flat shape."""

    records: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    custom: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    params: list[Mapping[str, object] | None] = field(default_factory=list)
    payloads: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    fail_with: StrapiError | None = None
    next_id: int = 100
    closed: bool = False

    def add(self, resource: str, record: dict[str, object]) -> dict[str, object]:
        self.records.setdefault(resource, []).append(record)
        return record

    async def list_records(
        self, resource: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        self._record_call("list", resource, params)
        pagination = (params or {}).get("pagination") or {}
        page = int(pagination.get("page", 1))
        page_size = int(pagination.get("pageSize", 25))
        rows = self.records.get(resource, [])
        start = (page - 1) * page_size
        total = len(rows)
        return {
            "data": rows[start : start + page_size],
            "meta": {
                "pagination": {
                    "page": page,
                    "pageSize": page_size,
                    "pageCount": (total + page_size - 1) // page_size,
                    "total": total,
                }
            },
        }

    async def get_record(
        self,
        resource: str,
        record_id: int | str,
        params: Mapping[str, object] | None = None,
    ) -> dict[str, object]:
        self._record_call("get", resource, params)
        return {"data": dict(self._find(resource, record_id))}

    async def create_record(
        self, resource: str, data: Mapping[str, object]
    ) -> dict[str, object]:
        self._record_call("create", resource, None)
        self.payloads.append((resource, dict(data)))
        self.next_id += 1
        record = {"id": self.next_id, **data}
        self.add(resource, record)
        return {"data": record}

    async def update_record(
        self, resource: str, record_id: int | str, data: Mapping[str, object]
    ) -> dict[str, object]:
        self._record_call("update", resource, None)
        self.payloads.append((resource, dict(data)))
        record = self._find(resource, record_id)
        record.update(data)
        return {"data": record}

    async def delete_record(
        self, resource: str, record_id: int | str
    ) -> dict[str, object]:
        self._record_call("delete", resource, None)
        record = self._find(resource, record_id)
        self.records[resource].remove(record)
        return {"data": record}

    async def get_json(
        self, path: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        self._record_call("get_json", path, params)
        if path not in self.custom:
            raise StrapiHTTPError(404, "Not Found")
        return self.custom[path]

    async def close(self) -> None:
        self.closed = True

    def _record_call(
        self, action: str, resource: str, params: Mapping[str, object] | None
    ) -> None:
        self.calls.append((action, resource))
        self.params.append(params)
        if self.fail_with is not None:
            raise self.fail_with

    def _find(self, resource: str, record_id: int | str) -> dict[str, object]:
        for record in self.records.get(resource, []):
            if str(record.get("id")) == str(record_id):
                return record
        raise StrapiHTTPError(404, "Not Found")


@dataclass
class RecordingNotifier(Notifier):
    """Notifier that keeps every notification."""

    notifications: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level is NotificationLevel.ERROR]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        strapi_api_url="http://cms.test",
        strapi_api_token="cms-token",
    )


@pytest.fixture
def strapi_client() -> InMemoryStrapiClient:
    return InMemoryStrapiClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def resource_service(
    strapi_client: InMemoryStrapiClient, notifier: RecordingNotifier
) -> ResourceService:
    return ResourceService(
        client=strapi_client, cache=InMemoryQueryCache(), notifier=notifier
    )


@pytest.fixture
def container(
    settings: Settings,
    strapi_client: InMemoryStrapiClient,
    notifier: RecordingNotifier,
) -> AppContainer:
    return build_services(settings, strapi_client, notifier)


def ingredient_record(
    record_id: int, name: str, package_size: float, package_price: float
) -> dict[str, object]:
    """Ingredient in the enveloped v4 shape."""
    return {
        "id": record_id,
        "attributes": {
            "name": name,
            "packageSize": package_size,
            "packageUnit": "г",
            "packagePrice": package_price,
            "inStock": True,
        },
    }


def recipe_record(
    record_id: int, name: str, product_type: str, price: float
) -> dict[str, object]:
    """Recipe in the flat v5 shape."""
    return {
        "id": record_id,
        "name": name,
        "type": product_type,
        "cost": price / 2,
        "price": price,
    }
