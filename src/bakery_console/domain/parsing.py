"""Mapping of normalized Strapi records onto domain models.

Missing or mistyped fields degrade to empty defaults instead of raising.
"""

from datetime import date, datetime

from bakery_console.domain.models import (
    Client,
    FinancialTransaction,
    Ingredient,
    Order,
    OrderItem,
    OrderStatus,
    PackageUnit,
    ProductType,
    Recipe,
    RecipeIngredient,
    TransactionType,
)
from bakery_console.domain.pricing import (
    ingredient_cost,
    order_item_total,
    order_total,
    price_per_unit,
    recipe_cost,
)
from bakery_console.domain.records import (
    get_relation,
    get_relation_array,
    normalize_record,
)

UNKNOWN_PRODUCT = "Неизвестный продукт"


def parse_ingredient(raw: object) -> Ingredient:
    """Build an ingredient from a raw or normalized record."""
    record = normalize_record(raw)
    package_size = _as_float(record.get("packageSize"))
    package_price = _as_float(record.get("packagePrice"))
    # Stored unit prices go stale when the package changes.
    if None in (record.get("packageSize"), record.get("packagePrice")):
        unit_price = _as_optional_float(record.get("pricePerUnit"))
    else:
        unit_price = price_per_unit(package_price, package_size)
    return Ingredient(
        id=_as_int(record.get("id")),
        name=_as_str(record.get("name")),
        package_size=package_size,
        package_unit=_as_enum(PackageUnit, record.get("packageUnit")),
        package_price=package_price,
        price_per_unit=unit_price,
        in_stock=bool(record.get("inStock", False)),
        description=_as_optional_str(record.get("description")),
        document_id=_as_optional_str(record.get("documentId")),
    )


def parse_recipe_ingredient(raw: object) -> RecipeIngredient:
    """Build a recipe-ingredient link; cost is derived when not stored."""
    record = normalize_record(raw)
    ingredient = get_relation(record.get("ingredient"))
    amount = _as_float(record.get("amount"))
    parsed = parse_ingredient(ingredient) if ingredient is not None else None
    cost = _as_optional_float(record.get("cost"))
    if cost is None:
        cost = ingredient_cost(amount, parsed.price_per_unit if parsed else None)
    unit = _as_str(record.get("unit"))
    if not unit and parsed and parsed.package_unit:
        unit = parsed.package_unit.value
    return RecipeIngredient(
        id=_as_int(record.get("id")),
        ingredient_id=parsed.id if parsed else _as_int(record.get("ingredientId")),
        name=parsed.name if parsed else _as_str(record.get("name")),
        amount=amount,
        unit=unit,
        cost=cost,
    )


def parse_recipe(raw: object) -> Recipe:
    """Build a recipe with its ingredient links."""
    record = normalize_record(raw)
    links = [
        parse_recipe_ingredient(link)
        for link in get_relation_array(record.get("recipeIngredients"))
    ]
    cost = _as_optional_float(record.get("cost"))
    if cost is None:
        cost = recipe_cost(link.cost for link in links)
    return Recipe(
        id=_as_int(record.get("id")),
        name=_as_str(record.get("name")),
        product_type=_as_enum(ProductType, record.get("type")),
        description=_as_optional_str(record.get("description")),
        cost=cost,
        price=_as_float(record.get("price")),
        ingredients=links,
    )


def parse_client(raw: object) -> Client:
    """Build a client; counters come from the backend as-is."""
    record = normalize_record(raw)
    orders = record.get("orders")
    if isinstance(orders, int | float) and not isinstance(orders, bool):
        orders_count = int(orders)
    else:
        orders_count = len(get_relation_array(orders))
    return Client(
        id=_as_int(record.get("id")),
        name=_as_str(record.get("name")),
        phone=_as_str(record.get("phone")),
        email=_as_optional_str(record.get("email")),
        address=_as_optional_str(record.get("address")),
        notes=_as_optional_str(record.get("notes")),
        orders_count=orders_count,
        total_spent=_as_float(record.get("totalSpent")),
    )


def parse_order_item(raw: object) -> OrderItem:
    """Build an order line from a record with an optional recipe relation."""
    record = normalize_record(raw)
    recipe = get_relation(record.get("recipe"))
    price = _as_float(record.get("price"))
    quantity = _as_int(record.get("quantity"))
    total = _as_optional_float(record.get("total"))
    return OrderItem(
        id=_as_int(record.get("id")),
        recipe_id=_as_int(recipe.get("id")) if recipe else 0,
        name=_as_str(recipe.get("name")) if recipe else UNKNOWN_PRODUCT,
        option=_as_str(record.get("option")),
        price=price,
        quantity=quantity,
        total=total if total is not None else order_item_total(price, quantity),
    )


def parse_order(raw: object) -> Order:
    """Build an order with its client reference and items."""
    record = normalize_record(raw)
    client = get_relation(record.get("client"))
    items = [
        parse_order_item(item) for item in get_relation_array(record.get("orderItems"))
    ]
    status = _as_enum(OrderStatus, record.get("status")) or OrderStatus.PENDING
    total = _as_optional_float(record.get("total"))
    if total is None:
        total = order_total(item.total for item in items)
    return Order(
        id=_as_int(record.get("id")),
        client_id=_as_int(client.get("id")) if client else None,
        client_name=_as_str(client.get("name")) if client else "",
        order_date=_as_datetime(record.get("orderDate")),
        delivery_date=_as_datetime(record.get("deliveryDate")),
        status=status,
        address=_as_optional_str(record.get("address")),
        notes=_as_optional_str(record.get("notes")),
        total=total,
        items=items,
    )


def parse_transaction(raw: object) -> FinancialTransaction:
    """Build a financial transaction."""
    record = normalize_record(raw)
    order = get_relation(record.get("order"))
    transaction_type = (
        _as_enum(TransactionType, record.get("type")) or TransactionType.EXPENSE
    )
    parsed_date = _as_datetime(record.get("date"))
    return FinancialTransaction(
        id=_as_int(record.get("id")),
        date=parsed_date.date() if parsed_date else None,
        description=_as_str(record.get("description")),
        category=_as_str(record.get("category")),
        amount=_as_float(record.get("amount")),
        transaction_type=transaction_type,
        order_id=_as_int(order.get("id")) if order else None,
    )


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _as_optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_float(value: object) -> float:
    parsed = _as_optional_float(value)
    return parsed if parsed is not None else 0.0


def _as_optional_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: object) -> int:
    parsed = _as_optional_float(value)
    return int(parsed) if parsed is not None else 0


def _as_enum(enum_type, value: object):  # type: ignore[no-untyped-def]
    try:
        return enum_type(value)
    except ValueError:
        return None


def _as_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

