"""Pydantic request/response models for the Ordering API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    name: str = Field(..., min_length=1, max_length=255)
    unit_price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image_ref: str | None = None


class ShippingAddressRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=500)
    address_details: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class PlaceOrderRequest(BaseModel):
    customer_id: str
    items: list[OrderItemRequest] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    payment_method: str = Field(..., examples=["card", "cash"])
    shipping_address: ShippingAddressRequest | None = None
    delivery_note: str | None = Field(None, max_length=1000)
    language: str | None = Field(None, examples=["tr", "en", "ru"])


class UpdateOrderStatusRequest(BaseModel):
    new_status: str = Field(..., examples=["preparing"])
    actor_role: str = Field(..., examples=["admin", "picker", "courier"])
    actor_id: str | None = None
    expected_status: str | None = None


class ConfigureWorkingHoursRequest(BaseModel):
    start: str = Field(..., pattern=r"^\d{2}:\d{2}(:\d{2})?$", examples=["09:00:00"])
    end: str = Field(..., pattern=r"^\d{2}:\d{2}(:\d{2})?$", examples=["22:00:00"])
    enabled: bool = True
    message_tr: str | None = None
    message_en: str | None = None
    message_ru: str | None = None


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class SettingsIdResponse(BaseModel):
    settings_id: str


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    image_ref: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: str
    total_amount: float
    payment_method: str
    delivery_note: str | None = None
    items: list[OrderItemResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderPageResponse(BaseModel):
    partition: str
    page: int
    page_size: int
    has_more: bool
    orders: list[OrderResponse]


class StatusChangeResponse(BaseModel):
    order_id: str
    old_status: str
    new_status: str
    updated_at: datetime | None = None


class WorkingHoursStatusResponse(BaseModel):
    within_hours: bool
    enabled: bool
    message: str
    start: str
    end: str
