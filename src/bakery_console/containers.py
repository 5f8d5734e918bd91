"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from bakery_console.adapters.strapi_client import HttpxStrapiClient, StrapiClient
from bakery_console.config import Settings
from bakery_console.services.cache import InMemoryQueryCache
from bakery_console.services.clients import ClientService
from bakery_console.services.dashboard import DashboardService
from bakery_console.services.finances import FinanceService
from bakery_console.services.ingredients import IngredientService
from bakery_console.services.notifications import LoggingNotifier, Notifier
from bakery_console.services.orders import OrderService
from bakery_console.services.recipes import RecipeService
from bakery_console.services.resources import ResourceService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    strapi_client: StrapiClient
    resource_service: ResourceService
    ingredient_service: IngredientService
    recipe_service: RecipeService
    client_service: ClientService
    order_service: OrderService
    finance_service: FinanceService
    dashboard_service: DashboardService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings, strapi_client: StrapiClient, notifier: Notifier
) -> AppContainer:
    """Wire services around an existing Strapi client."""
    resource_service = ResourceService(
        client=strapi_client,
        cache=InMemoryQueryCache(),
        notifier=notifier,
        stale_seconds=settings.query_stale_seconds,
    )
    order_service = OrderService(resource_service)
    finance_service = FinanceService(resource_service)

    async def close_resources() -> None:
        await strapi_client.close()

    return AppContainer(
        settings=settings,
        strapi_client=strapi_client,
        resource_service=resource_service,
        ingredient_service=IngredientService(resource_service),
        recipe_service=RecipeService(resource_service),
        client_service=ClientService(resource_service),
        order_service=order_service,
        finance_service=finance_service,
        dashboard_service=DashboardService(
            resources=resource_service,
            order_service=order_service,
            finance_service=finance_service,
        ),
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    strapi_client = HttpxStrapiClient.create(
        base_url=resolved_settings.strapi_api_url,
        api_token=resolved_settings.strapi_api_token,
        timeout=resolved_settings.request_timeout_seconds,
    )
    return build_services(resolved_settings, strapi_client, LoggingNotifier())
