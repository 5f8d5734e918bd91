"""Dashboard overview assembled from several resources."""

import asyncio
from dataclasses import dataclass

from bakery_console.domain.models import Order
from bakery_console.services.clients import CLIENTS
from bakery_console.services.finances import FinanceService, StatsPeriod
from bakery_console.services.orders import OrderService
from bakery_console.services.recipes import RECIPES
from bakery_console.services.resources import ResourceService

POPULAR_PRODUCTS = "popular-products"


@dataclass(frozen=True)
class DashboardOverview:
    """Headline numbers for the console landing page."""

    recipes_count: int
    clients_count: int
    active_orders: list[Order]
    financial_stats: dict[str, object] | None
    popular_products: dict[str, object] | None


@dataclass
class DashboardService:
    """Builds the dashboard; each part degrades on its own."""

    resources: ResourceService
    order_service: OrderService
    finance_service: FinanceService
    active_orders_limit: int = 5

    async def overview(self) -> DashboardOverview:
        """Collect counts, active orders, stats and popular products."""
        recipes, clients, active, stats, popular = await asyncio.gather(
            self.resources.list_page(RECIPES, page=1, page_size=1),
            self.resources.list_page(CLIENTS, page=1, page_size=1),
            self.order_service.list_active(self.active_orders_limit),
            self.finance_service.get_stats(StatsPeriod.MONTH),
            self.resources.fetch_json(POPULAR_PRODUCTS),
        )
        active_orders, _ = active
        return DashboardOverview(
            recipes_count=recipes.pagination.total,
            clients_count=clients.pagination.total,
            active_orders=active_orders,
            financial_stats=stats,
            popular_products=popular,
        )
