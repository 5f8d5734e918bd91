"""Ingredient catalogue service."""

from collections.abc import Mapping
from dataclasses import dataclass

from bakery_console.domain.models import Ingredient, Pagination
from bakery_console.domain.parsing import parse_ingredient
from bakery_console.domain.pricing import price_per_unit
from bakery_console.domain.records import (
    is_missing,
    normalize_record,
    normalize_records,
)
from bakery_console.services.notifications import success
from bakery_console.services.resources import DEFAULT_PAGE_SIZE, ResourceService

INGREDIENTS = "ingredients"
_PACKAGE_FIELDS = ("packageSize", "packagePrice")


@dataclass
class IngredientService:
    """Service for listing and editing ingredients."""

    resources: ResourceService

    async def list_ingredients(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, object] | None = None,
    ) -> tuple[list[Ingredient], Pagination]:
        """Return a page of ingredients."""
        result = await self.resources.list_page(INGREDIENTS, page, page_size, filters)
        records = normalize_records(result.data)
        return [parse_ingredient(record) for record in records], result.pagination

    async def get_ingredient(
        self, ingredient_id: int | str | None
    ) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        raw = await self.resources.get_by_id(INGREDIENTS, ingredient_id)
        record = normalize_record(raw) if raw is not None else None
        if is_missing(record):
            return None
        return parse_ingredient(record)

    async def create_ingredient(self, payload: Mapping[str, object]) -> Ingredient:
        """Create an ingredient with its unit price filled in."""
        created = await self.resources.create(INGREDIENTS, _with_unit_price(payload))
        self.resources.notify(success("Ингредиент успешно добавлен"))
        return parse_ingredient(created)

    async def update_ingredient(
        self, ingredient_id: int | str, payload: Mapping[str, object]
    ) -> Ingredient:
        """Update an ingredient, keeping its unit price in step with the package."""
        data = dict(payload)
        given = [key for key in _PACKAGE_FIELDS if key in data]
        if len(given) == 1:
            current = normalize_record(
                await self.resources.get_required(INGREDIENTS, ingredient_id)
            )
            for key in _PACKAGE_FIELDS:
                data.setdefault(key, current.get(key))
        updated = await self.resources.update(
            INGREDIENTS, ingredient_id, _with_unit_price(data)
        )
        self.resources.notify(success("Ингредиент успешно обновлен"))
        return parse_ingredient(updated)

    async def delete_ingredient(self, ingredient_id: int | str) -> None:
        """Delete an ingredient."""
        await self.resources.delete(INGREDIENTS, ingredient_id)
        self.resources.notify(success("Ингредиент успешно удален"))


def _with_unit_price(payload: Mapping[str, object]) -> dict[str, object]:
    """Recompute ``pricePerUnit`` whenever the package price or size is written."""
    data = dict(payload)
    if not any(key in data for key in _PACKAGE_FIELDS):
        return data
    data["pricePerUnit"] = price_per_unit(
        _as_number(data.get("packagePrice")), _as_number(data.get("packageSize"))
    )
    return data


def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)
