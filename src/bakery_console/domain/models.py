"""Domain models for the bakery console."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class PackageUnit(Enum):
    """Unit an ingredient package is measured in."""

    GRAM = "г"
    MILLILITER = "мл"
    PIECE = "шт"


class ProductType(Enum):
    """Kinds of products the bakery sells."""

    CAKE = "cake"
    BENTO_CAKE = "bento-cake"
    CUPCAKE = "cupcake"
    MOCHI = "mochi"


class OrderStatus(Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Return True if the order may move from this status to ``target``."""
        if target is self:
            return True
        return target in _STATUS_TRANSITIONS[self]


_STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

ACTIVE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)


class TransactionType(Enum):
    """Direction of a financial transaction."""

    INCOME = "income"
    EXPENSE = "expense"


TRANSACTION_CATEGORIES = (
    "Торты",
    "Капкейки",
    "Моти",
    "Разное",
    "Ингредиенты",
    "Упаковка",
    "Аренда",
    "Коммунальные",
)


class InvalidStatusTransitionError(ValueError):
    """Raised when an order status change is not allowed."""

    def __init__(self, current: OrderStatus, target: OrderStatus) -> None:
        super().__init__(
            f"Cannot change order status from {current.value} to {target.value}"
        )
        self.current = current
        self.target = target


@dataclass(frozen=True)
class Pagination:
    """Pagination facts reported by the backend."""

    page: int
    page_size: int
    page_count: int
    total: int


@dataclass(frozen=True)
class ResourcePage:
    """A page of raw records with pagination metadata."""

    data: list[dict[str, object]]
    pagination: Pagination

    def to_payload(self) -> dict[str, object]:
        """Return the page in the backend's wire shape."""
        return {
            "data": self.data,
            "meta": {
                "pagination": {
                    "page": self.pagination.page,
                    "pageSize": self.pagination.page_size,
                    "pageCount": self.pagination.page_count,
                    "total": self.pagination.total,
                }
            },
        }


@dataclass(frozen=True)
class Ingredient:
    """An ingredient bought in packages."""

    id: int
    name: str
    package_size: float
    package_unit: PackageUnit | None
    package_price: float
    price_per_unit: float | None
    in_stock: bool
    description: str | None = None
    document_id: str | None = None


@dataclass(frozen=True)
class RecipeIngredient:
    """Amount of an ingredient consumed by a recipe."""

    id: int
    ingredient_id: int
    name: str
    amount: float
    unit: str
    cost: float


@dataclass(frozen=True)
class Recipe:
    """A sellable product with its ingredient breakdown."""

    id: int
    name: str
    product_type: ProductType | None
    description: str | None
    cost: float
    price: float
    ingredients: list[RecipeIngredient] = field(default_factory=list)


@dataclass(frozen=True)
class Client:
    """A bakery customer."""

    id: int
    name: str
    phone: str
    email: str | None = None
    address: str | None = None
    notes: str | None = None
    orders_count: int = 0
    total_spent: float = 0.0


@dataclass(frozen=True)
class OrderItem:
    """A line of an order."""

    id: int
    recipe_id: int
    name: str
    option: str
    price: float
    quantity: int
    total: float


@dataclass(frozen=True)
class Order:
    """A client order."""

    id: int
    client_id: int | None
    client_name: str
    order_date: datetime | None
    delivery_date: datetime | None
    status: OrderStatus
    address: str | None
    notes: str | None
    total: float
    items: list[OrderItem] = field(default_factory=list)


@dataclass(frozen=True)
class FinancialTransaction:
    """Income or expense entry."""

    id: int
    date: date | None
    description: str
    category: str
    amount: float
    transaction_type: TransactionType
    order_id: int | None = None


@dataclass(frozen=True)
class FinancialSummary:
    """Totals over a set of transactions."""

    income: float
    expenses: float
    profit: float
    margin_percent: float | None
