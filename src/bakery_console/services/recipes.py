"""Recipe service with ingredient costing."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from bakery_console.domain.models import Pagination, Recipe
from bakery_console.domain.parsing import parse_recipe
from bakery_console.domain.pricing import RecipeDraft
from bakery_console.domain.records import (
    is_missing,
    normalize_record,
    normalize_records,
)
from bakery_console.services.notifications import success
from bakery_console.services.resources import DEFAULT_PAGE_SIZE, ResourceService

RECIPES = "recipes"
RECIPE_INGREDIENTS = "recipe-ingredients"

_POPULATE = {"populate": ["recipeIngredients.ingredient"]}

_logger = logging.getLogger(__name__)


@dataclass
class RecipeService:
    """Service for recipes and their ingredient links."""

    resources: ResourceService

    async def list_recipes(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, object] | None = None,
    ) -> tuple[list[Recipe], Pagination]:
        """Return a page of recipes with their ingredients."""
        params = {**(filters or {}), **_POPULATE}
        result = await self.resources.list_page(RECIPES, page, page_size, params)
        records = normalize_records(result.data)
        return [parse_recipe(record) for record in records], result.pagination

    async def get_recipe(self, recipe_id: int | str | None) -> Recipe | None:
        """Return a recipe by id, if present."""
        raw = await self.resources.get_by_id(RECIPES, recipe_id, params=_POPULATE)
        record = normalize_record(raw) if raw is not None else None
        if is_missing(record):
            return None
        return parse_recipe(record)

    async def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Create a recipe and then one link per staged ingredient."""
        created = await self.resources.create(
            RECIPES,
            {
                "name": draft.name,
                "type": draft.product_type.value,
                "description": draft.description,
                "cost": draft.cost,
                "price": draft.selling_price,
            },
        )
        recipe = parse_recipe(created)
        await asyncio.gather(
            *(
                self.resources.create(
                    RECIPE_INGREDIENTS,
                    {
                        "amount": line.amount,
                        "ingredient": line.ingredient_id,
                        "recipe": recipe.id,
                    },
                    invalidates=(RECIPES,),
                )
                for line in draft.ingredients
            )
        )
        _logger.info(
            "Created recipe %s with %s ingredients", recipe.id, len(draft.ingredients)
        )
        self.resources.notify(success("Рецепт успешно создан"))
        return recipe

    async def update_recipe(
        self, recipe_id: int | str, payload: Mapping[str, object]
    ) -> Recipe:
        """Update recipe fields."""
        updated = await self.resources.update(RECIPES, recipe_id, payload)
        self.resources.notify(success("Рецепт успешно обновлен"))
        return parse_recipe(updated)

    async def delete_recipe(self, recipe_id: int | str) -> None:
        """Delete a recipe."""
        await self.resources.delete(RECIPES, recipe_id)
        self.resources.notify(success("Рецепт успешно удален"))
