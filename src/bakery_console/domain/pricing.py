"""Cost, price and total calculations for recipes and orders."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from bakery_console.domain.models import Ingredient, ProductType, Recipe

PRICE_MARKUP = 2

_PACKAGE_OPTIONS: dict[ProductType, tuple[str, ...]] = {
    ProductType.CAKE: ("1 кг", "1.5 кг", "2 кг"),
    ProductType.BENTO_CAKE: ("400г", "500г"),
    ProductType.CUPCAKE: ("6 шт", "9 шт", "12 шт"),
    ProductType.MOCHI: ("4 шт", "6 шт", "9 шт", "12 шт"),
}


def price_per_unit(
    package_price: float | None, package_size: float | None
) -> float | None:
    """Return the price of one unit, or None unless both values are positive."""
    if not package_price or not package_size:
        return None
    if package_price <= 0 or package_size <= 0:
        return None
    return package_price / package_size


def ingredient_cost(amount: float, unit_price: float | None) -> float:
    """Return the cost of ``amount`` units of an ingredient."""
    if unit_price is None:
        return 0.0
    return amount * unit_price


def recipe_cost(link_costs: Iterable[float]) -> float:
    """Sum the cost contributions of a recipe's ingredients."""
    return sum(link_costs, 0.0)


def default_price(cost: float) -> float:
    """Suggested selling price for a recipe."""
    return cost * PRICE_MARKUP


def effective_price(price: float | None, cost: float) -> float:
    """Seller price when set, otherwise the default markup."""
    if price and price > 0:
        return price
    return default_price(cost)


def profit(price: float, cost: float) -> float:
    return price - cost


def margin_percent(price: float, cost: float) -> float | None:
    """Margin as a percentage of price, undefined for non-positive prices."""
    if price <= 0:
        return None
    return (price - cost) / price * 100


def order_item_total(price: float, quantity: int) -> float:
    return price * quantity


def order_total(item_totals: Iterable[float]) -> float:
    """Sum the totals of an order's items."""
    return sum(item_totals, 0.0)


def package_options(product_type: ProductType | str | None) -> list[str]:
    """Return the package variants offered for a product type."""
    if isinstance(product_type, str):
        try:
            product_type = ProductType(product_type)
        except ValueError:
            return []
    if product_type is None:
        return []
    return list(_PACKAGE_OPTIONS.get(product_type, ()))


@dataclass(frozen=True)
class DraftIngredient:
    """Ingredient line staged in a recipe draft."""

    ingredient_id: int
    name: str
    amount: float
    unit: str
    cost: float


@dataclass
class RecipeDraft:
    """Recipe form buffer; cost and price are recomputed on every read."""

    name: str
    product_type: ProductType
    description: str | None = None
    price: float | None = None
    ingredients: list[DraftIngredient] = field(default_factory=list)

    def add_ingredient(self, ingredient: Ingredient, amount: float) -> DraftIngredient:
        """Stage an ingredient with the amount the recipe consumes."""
        if amount <= 0:
            raise ValueError("Ingredient amount must be positive")
        unit_price = ingredient.price_per_unit
        if unit_price is None:
            unit_price = price_per_unit(
                ingredient.package_price, ingredient.package_size
            )
        line = DraftIngredient(
            ingredient_id=ingredient.id,
            name=ingredient.name,
            amount=amount,
            unit=ingredient.package_unit.value if ingredient.package_unit else "",
            cost=ingredient_cost(amount, unit_price),
        )
        self.ingredients.append(line)
        return line

    def remove_ingredient(self, index: int) -> DraftIngredient:
        return self.ingredients.pop(index)

    @property
    def cost(self) -> float:
        return recipe_cost(line.cost for line in self.ingredients)

    @property
    def selling_price(self) -> float:
        return effective_price(self.price, self.cost)

    @property
    def margin_percent(self) -> float | None:
        return margin_percent(self.selling_price, self.cost)


@dataclass(frozen=True)
class DraftItem:
    """Product line staged in an order draft."""

    recipe_id: int
    name: str
    option: str
    price: float
    quantity: int
    total: float


@dataclass
class OrderDraft:
    """Order form buffer; the total is recomputed on every read."""

    client_id: int
    delivery_date: str
    address: str | None = None
    notes: str | None = None
    items: list[DraftItem] = field(default_factory=list)

    def add_item(self, recipe: Recipe, option: str, quantity: int) -> DraftItem:
        """Stage a recipe in one of its package variants."""
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        if option not in package_options(recipe.product_type):
            raise ValueError(f"Option {option!r} is not offered for {recipe.name}")
        item = DraftItem(
            recipe_id=recipe.id,
            name=recipe.name,
            option=option,
            price=recipe.price,
            quantity=quantity,
            total=order_item_total(recipe.price, quantity),
        )
        self.items.append(item)
        return item

    def remove_item(self, index: int) -> DraftItem:
        return self.items.pop(index)

    @property
    def total(self) -> float:
        return order_total(item.total for item in self.items)
