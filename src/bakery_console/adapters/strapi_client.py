"""Strapi REST API client."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from bakery_console.config import api_base_url

_logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_BAD_REQUEST = 400

_DEFAULT_ERROR_MESSAGE = "Произошла ошибка при выполнении запроса"


class StrapiError(Exception):
    """Base error for Strapi API failures."""


class StrapiTransportError(StrapiError):
    """The backend could not be reached."""


class StrapiPayloadError(StrapiError):
    """The backend returned a body that is not a JSON object."""


class StrapiHTTPError(StrapiError):
    """The backend answered with an error status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or {}

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HTTP_NOT_FOUND

    @property
    def is_validation_error(self) -> bool:
        return self.status_code == HTTP_BAD_REQUEST


class StrapiClient(Protocol):
    """Interface for Strapi REST interactions."""

    async def list_records(
        self, resource: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        """Return the raw list response for a collection."""

    async def get_record(
        self,
        resource: str,
        record_id: int | str,
        params: Mapping[str, object] | None = None,
    ) -> dict[str, object]:
        """Return the raw single-record response."""

    async def create_record(
        self, resource: str, data: Mapping[str, object]
    ) -> dict[str, object]:
        """Create a record and return the raw response."""

    async def update_record(
        self, resource: str, record_id: int | str, data: Mapping[str, object]
    ) -> dict[str, object]:
        """Update a record and return the raw response."""

    async def delete_record(
        self, resource: str, record_id: int | str
    ) -> dict[str, object]:
        """Delete a record and return the raw response."""

    async def get_json(
        self, path: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        """GET an arbitrary API path."""

    async def close(self) -> None:
        """Release network resources."""


def encode_query(params: Mapping[str, object] | None) -> list[tuple[str, str]]:
    """Flatten nested params into Strapi's bracket notation.

    ``{"pagination": {"page": 2}, "populate": ["client"]}`` becomes
    ``[("pagination[page]", "2"), ("populate[0]", "client")]``.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        _encode_value(str(key), value, pairs)
    return pairs


def _encode_value(prefix: str, value: object, pairs: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, nested in value.items():
            _encode_value(f"{prefix}[{key}]", nested, pairs)
        return
    if isinstance(value, list | tuple):
        for index, nested in enumerate(value):
            _encode_value(f"{prefix}[{index}]", nested, pairs)
        return
    if isinstance(value, bool):
        pairs.append((prefix, "true" if value else "false"))
        return
    pairs.append((prefix, str(value)))


@dataclass
class HttpxStrapiClient(StrapiClient):
    """HTTPX-backed Strapi client."""

    base_url: str
    http_client: httpx.AsyncClient
    api_token: str | None = None
    timeout: float = 15
    headers: dict[str, str] = field(init=False)

    def __post_init__(self) -> None:
        self.base_url = api_base_url(self.base_url)
        self.headers = {"Content-Type": "application/json"}
        if self.api_token:
            self.headers["Authorization"] = f"Bearer {self.api_token}"

    @classmethod
    def create(
        cls, base_url: str, api_token: str | None = None, timeout: float = 15
    ) -> "HttpxStrapiClient":
        """Create a Strapi client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            api_token=api_token,
            timeout=timeout,
        )

    async def list_records(
        self, resource: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        """List records of a collection."""
        return await self._request("GET", resource, params=params)

    async def get_record(
        self,
        resource: str,
        record_id: int | str,
        params: Mapping[str, object] | None = None,
    ) -> dict[str, object]:
        """Fetch a record by id."""
        return await self._request("GET", f"{resource}/{record_id}", params=params)

    async def create_record(
        self, resource: str, data: Mapping[str, object]
    ) -> dict[str, object]:
        """Create a record."""
        return await self._request("POST", resource, json={"data": dict(data)})

    async def update_record(
        self, resource: str, record_id: int | str, data: Mapping[str, object]
    ) -> dict[str, object]:
        """Update a record."""
        return await self._request(
            "PUT", f"{resource}/{record_id}", json={"data": dict(data)}
        )

    async def delete_record(
        self, resource: str, record_id: int | str
    ) -> dict[str, object]:
        """Delete a record."""
        return await self._request("DELETE", f"{resource}/{record_id}")

    async def get_json(
        self, path: str, params: Mapping[str, object] | None = None
    ) -> dict[str, object]:
        """GET a custom endpoint."""
        return await self._request("GET", path, params=params)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, object] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self.http_client.request(
                method,
                url,
                params=encode_query(params),
                json=json,
                headers=self.headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            _logger.error("API Error: %s %s: %s", method, url, exc)
            raise StrapiTransportError(str(exc)) from exc
        if response.is_error:
            error = _http_error(response)
            _logger.error("API Error: %s %s: %s", method, url, error)
            raise error
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise StrapiPayloadError(f"Invalid JSON from {method} {url}") from exc
        if not isinstance(payload, dict):
            raise StrapiPayloadError(f"Unexpected payload from {method} {url}")
        return payload


def _http_error(response: httpx.Response) -> StrapiHTTPError:
    """Build an error from a Strapi error body, if it has one."""
    message = _DEFAULT_ERROR_MESSAGE
    details: dict[str, object] = {}
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = str(error.get("message") or message)
            raw_details = error.get("details")
            if isinstance(raw_details, dict):
                details = raw_details
    return StrapiHTTPError(response.status_code, message, details)
