"""Console API endpoints over the bakery services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder

from bakery_console.api.schemas import OrderCreate, StatusUpdate  # noqa: TC001
from bakery_console.domain.models import OrderStatus, TransactionType
from bakery_console.domain.pricing import OrderDraft

if TYPE_CHECKING:
    from bakery_console.containers import AppContainer
    from bakery_console.domain.models import Pagination

router = APIRouter()

Page = Annotated[int, Query(ge=1)]
PageSize = Annotated[int, Query(ge=1, le=100)]

HTTP_UNPROCESSABLE = 422


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _page(items: list[object], pagination: Pagination) -> dict[str, object]:
    return {
        "data": jsonable_encoder(items),
        "pagination": jsonable_encoder(pagination),
    }


def _found(item: object | None, name: str) -> dict[str, object]:
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{name} not found"
        )
    return jsonable_encoder(item)


@router.get("/ingredients", tags=["catalogue"])
async def list_ingredients(
    request: Request, page: Page = 1, page_size: PageSize = 25
) -> dict[str, object]:
    """Return a page of ingredients."""
    items, pagination = await _container(request).ingredient_service.list_ingredients(
        page, page_size
    )
    return _page(items, pagination)


@router.get("/ingredients/{ingredient_id}", tags=["catalogue"])
async def ingredient_detail(ingredient_id: int, request: Request) -> dict[str, object]:
    """Return one ingredient."""
    ingredient = await _container(request).ingredient_service.get_ingredient(
        ingredient_id
    )
    return _found(ingredient, "Ingredient")


@router.get("/recipes", tags=["catalogue"])
async def list_recipes(
    request: Request, page: Page = 1, page_size: PageSize = 25
) -> dict[str, object]:
    """Return a page of recipes with cost breakdown."""
    items, pagination = await _container(request).recipe_service.list_recipes(
        page, page_size
    )
    return _page(items, pagination)


@router.get("/recipes/{recipe_id}", tags=["catalogue"])
async def recipe_detail(recipe_id: int, request: Request) -> dict[str, object]:
    """Return one recipe."""
    recipe = await _container(request).recipe_service.get_recipe(recipe_id)
    return _found(recipe, "Recipe")


@router.get("/clients", tags=["clients"])
async def list_clients(
    request: Request, page: Page = 1, page_size: PageSize = 25
) -> dict[str, object]:
    """Return a page of clients."""
    items, pagination = await _container(request).client_service.list_clients(
        page, page_size
    )
    return _page(items, pagination)


@router.get("/clients/{client_id}", tags=["clients"])
async def client_detail(client_id: int, request: Request) -> dict[str, object]:
    """Return a client with their orders."""
    found = await _container(request).client_service.get_client(client_id)
    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Client not found"
        )
    client, orders = found
    return {"client": jsonable_encoder(client), "orders": jsonable_encoder(orders)}


@router.get("/orders", tags=["orders"])
async def list_orders(
    request: Request,
    page: Page = 1,
    page_size: PageSize = 25,
    order_status: OrderStatus | None = Query(default=None, alias="status"),
) -> dict[str, object]:
    """Return a page of orders, optionally in one status."""
    service = _container(request).order_service
    if order_status is None:
        items, pagination = await service.list_orders(page, page_size)
    else:
        items, pagination = await service.list_by_status(order_status, page, page_size)
    return _page(items, pagination)


@router.get("/orders/{order_id}", tags=["orders"])
async def order_detail(order_id: int, request: Request) -> dict[str, object]:
    """Return one order with its items."""
    order = await _container(request).order_service.get_order(order_id)
    return _found(order, "Order")


@router.post("/orders", tags=["orders"], status_code=status.HTTP_201_CREATED)
async def create_order(body: OrderCreate, request: Request) -> dict[str, object]:
    """Create an order from recipe ids and package options."""
    container = _container(request)
    draft = OrderDraft(
        client_id=body.client_id,
        delivery_date=body.delivery_date,
        address=body.address,
        notes=body.notes,
    )
    for item in body.items:
        recipe = await container.recipe_service.get_recipe(item.recipe_id)
        if recipe is None:
            raise HTTPException(
                status_code=HTTP_UNPROCESSABLE,
                detail=f"Recipe {item.recipe_id} not found",
            )
        try:
            draft.add_item(recipe, item.option, item.quantity)
        except ValueError as exc:
            raise HTTPException(
                status_code=HTTP_UNPROCESSABLE, detail=str(exc)
            ) from exc
    order = await container.order_service.create_order(draft)
    return jsonable_encoder(order)


@router.patch("/orders/{order_id}/status", tags=["orders"])
async def update_order_status(
    order_id: int, body: StatusUpdate, request: Request
) -> dict[str, object]:
    """Move an order through its lifecycle."""
    try:
        order = await _container(request).order_service.update_status(
            order_id, body.status
        )
    except LookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    return jsonable_encoder(order)


@router.get("/finances/transactions", tags=["finances"])
async def list_transactions(
    request: Request,
    page: Page = 1,
    page_size: PageSize = 25,
    transaction_type: TransactionType | None = Query(default=None, alias="type"),
) -> dict[str, object]:
    """Return a page of transactions, newest first."""
    service = _container(request).finance_service
    if transaction_type is None:
        items, pagination = await service.list_transactions(page, page_size)
    else:
        items, pagination = await service.list_by_type(
            transaction_type, page, page_size
        )
    return _page(items, pagination)


@router.get("/finances/categories", tags=["finances"])
async def transaction_categories(request: Request) -> dict[str, object]:
    """Return the category labels used for transactions."""
    return {"categories": _container(request).finance_service.categories()}


@router.get("/finances/summary", tags=["finances"])
async def finance_summary(
    request: Request, page: Page = 1, page_size: PageSize = 100
) -> dict[str, object]:
    """Return totals over a page of transactions."""
    summary = await _container(request).finance_service.summarize_page(page, page_size)
    return jsonable_encoder(summary)


@router.get("/dashboard", tags=["dashboard"])
async def dashboard(request: Request) -> dict[str, object]:
    """Return the console overview."""
    overview = await _container(request).dashboard_service.overview()
    return jsonable_encoder(overview)
