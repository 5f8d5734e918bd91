"""Generic access to Strapi resource collections.

Reads are fail-soft: transport, server and payload errors are absorbed and the
caller gets empty data (or ``None``) so list and detail views always render.
Writes are fail-hard: errors are reported and re-raised so forms can stay open.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from bakery_console.adapters.strapi_client import (
    StrapiClient,
    StrapiError,
    StrapiHTTPError,
)
from bakery_console.domain.models import Pagination, ResourcePage
from bakery_console.services.cache import QueryCache, QueryKey, params_key
from bakery_console.services.notifications import Notification, Notifier, failure

_logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


@dataclass
class ResourceService:
    """List, fetch and mutate records of named resources."""

    client: StrapiClient
    cache: QueryCache
    notifier: Notifier
    stale_seconds: int = 60

    async def list_page(
        self,
        resource: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        params: Mapping[str, object] | None = None,
    ) -> ResourcePage:
        """Return one page of raw records, or an empty page on failure."""
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        cache_key: QueryKey = (resource, "list", page, page_size, params_key(params))
        cached = self.cache.get(cache_key)
        if isinstance(cached, ResourcePage):
            return cached

        query: dict[str, object] = {
            "pagination": {"page": page, "pageSize": page_size},
            **(params or {}),
        }
        try:
            payload = await self.client.list_records(resource, query)
        except StrapiError as exc:
            _logger.error("Error fetching %s: %s", resource, exc)
            self._report_read(exc)
            return _empty_page(page, page_size)

        data = payload.get("data")
        result = ResourcePage(
            data=data if isinstance(data, list) else [],
            pagination=_parse_pagination(payload.get("meta"), page, page_size),
        )
        self.cache.set(cache_key, result, ttl_seconds=self.stale_seconds)
        return result

    async def get_by_id(
        self,
        resource: str,
        record_id: int | str | None,
        params: Mapping[str, object] | None = None,
    ) -> dict[str, object] | None:
        """Return a raw record, or None when missing or unreachable."""
        if not record_id:
            _logger.warning("No ID provided for %s", resource)
            return None
        cache_key: QueryKey = (resource, "detail", str(record_id), params_key(params))
        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            return cached

        try:
            payload = await self.client.get_record(resource, record_id, params)
        except StrapiError as exc:
            _logger.error("Error fetching %s/%s: %s", resource, record_id, exc)
            self._report_read(exc)
            return None

        record = payload.get("data")
        if not isinstance(record, dict):
            return None
        self.cache.set(cache_key, record, ttl_seconds=self.stale_seconds)
        return record

    async def get_required(
        self,
        resource: str,
        record_id: int | str,
        params: Mapping[str, object] | None = None,
    ) -> dict[str, object]:
        """Uncached read for write paths; raises StrapiError on failure."""
        try:
            payload = await self.client.get_record(resource, record_id, params)
        except StrapiError as exc:
            _logger.error("Error fetching %s/%s: %s", resource, record_id, exc)
            self._report_read(exc)
            raise
        record = payload.get("data")
        if not isinstance(record, dict):
            raise StrapiHTTPError(404, f"{resource}/{record_id} not found")
        return record

    async def fetch_json(
        self, path: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object] | None:
        """Fail-soft read of a custom endpoint."""
        cache_key: QueryKey = (path, "custom", params_key(params))
        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            return cached
        try:
            payload = await self.client.get_json(path, params)
        except StrapiError as exc:
            _logger.error("Error fetching %s: %s", path, exc)
            self._report_read(exc)
            return None
        self.cache.set(cache_key, payload, ttl_seconds=self.stale_seconds)
        return payload

    async def create(
        self,
        resource: str,
        payload: Mapping[str, object],
        invalidates: Iterable[str] = (),
    ) -> dict[str, object]:
        """Create a record; raises StrapiError on failure."""
        try:
            response = await self.client.create_record(resource, payload)
        except StrapiError as exc:
            _logger.error("Create Error: %s: %s", resource, exc)
            self._report(exc)
            raise
        self.invalidate(resource, *invalidates)
        return _record_from(response)

    async def update(
        self,
        resource: str,
        record_id: int | str,
        payload: Mapping[str, object],
        invalidates: Iterable[str] = (),
    ) -> dict[str, object]:
        """Update a record; raises StrapiError on failure."""
        try:
            response = await self.client.update_record(resource, record_id, payload)
        except StrapiError as exc:
            _logger.error("Update Error: %s/%s: %s", resource, record_id, exc)
            self._report(exc)
            raise
        self.invalidate(resource, *invalidates)
        return _record_from(response)

    async def delete(
        self,
        resource: str,
        record_id: int | str,
        invalidates: Iterable[str] = (),
    ) -> dict[str, object]:
        """Delete a record; raises StrapiError on failure."""
        try:
            response = await self.client.delete_record(resource, record_id)
        except StrapiError as exc:
            _logger.error("Delete Error: %s/%s: %s", resource, record_id, exc)
            self._report(exc)
            raise
        self.invalidate(resource, *invalidates)
        return _record_from(response)

    def invalidate(self, *resources: str) -> int:
        """Drop cached queries belonging to any of ``resources``."""
        names = set(resources)
        dropped = sum(self.cache.invalidate_prefix(name) for name in names)
        _logger.debug("Invalidated %s cached queries for %s", dropped, sorted(names))
        return dropped

    def notify(self, notification: Notification) -> None:
        self.notifier.notify(notification)

    def _report_read(self, exc: StrapiError) -> None:
        if isinstance(exc, StrapiHTTPError) and exc.is_not_found:
            return
        self._report(exc)

    def _report(self, exc: StrapiError) -> None:
        if isinstance(exc, StrapiHTTPError):
            self.notifier.notify(failure(exc.message, exc.status_code))
            return
        self.notifier.notify(failure(str(exc) or exc.__class__.__name__))


def _empty_page(page: int, page_size: int) -> ResourcePage:
    return ResourcePage(
        data=[],
        pagination=Pagination(page=page, page_size=page_size, page_count=0, total=0),
    )


def _parse_pagination(meta: object, page: int, page_size: int) -> Pagination:
    """Read pagination facts from ``meta``, zeroed when absent."""
    raw = meta.get("pagination") if isinstance(meta, dict) else None
    if not isinstance(raw, dict):
        return Pagination(page=page, page_size=page_size, page_count=0, total=0)
    return Pagination(
        page=_as_int(raw.get("page"), page),
        page_size=_as_int(raw.get("pageSize"), page_size),
        page_count=_as_int(raw.get("pageCount"), 0),
        total=_as_int(raw.get("total"), 0),
    )


def _as_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return default


def _record_from(response: dict[str, object]) -> dict[str, object]:
    record = response.get("data")
    if isinstance(record, dict):
        return record
    return {}
