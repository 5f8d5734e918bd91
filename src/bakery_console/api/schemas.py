"""Pydantic models for console API request bodies."""

from pydantic import BaseModel, Field

from bakery_console.domain.models import OrderStatus


class StatusUpdate(BaseModel):
    """Requested order status change."""

    status: OrderStatus


class OrderItemIn(BaseModel):
    """Product line of a new order."""

    recipe_id: int
    option: str
    quantity: int = Field(default=1, ge=1)


class OrderCreate(BaseModel):
    """New order payload."""

    client_id: int
    delivery_date: str
    address: str | None = None
    notes: str | None = None
    items: list[OrderItemIn] = Field(min_length=1)
