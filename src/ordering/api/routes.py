"""FastAPI routes for the Ordering domain.

Thin adapters that translate HTTP requests into domain commands.
No business logic — just schema→command→response translation.
"""

import json
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from protean.exceptions import InvalidOperationError
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    ConfigureWorkingHoursRequest,
    OrderIdResponse,
    OrderItemResponse,
    OrderPageResponse,
    OrderResponse,
    PlaceOrderRequest,
    SettingsIdResponse,
    StatusChangeResponse,
    UpdateOrderStatusRequest,
    WorkingHoursStatusResponse,
)
from ordering.client.feed import DEFAULT_PAGE_SIZE
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from ordering.store.domain_store import query_order_page
from ordering.store.port import OrderPartition
from ordering.working_hours.policy import evaluate
from ordering.working_hours.settings import ConfigureWorkingHours, current_window

order_router = APIRouter(prefix="/orders", tags=["orders"])
settings_router = APIRouter(prefix="/settings", tags=["settings"])


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        delivery_note=order.delivery_note,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image_ref=item.image_ref,
            )
            for item in order.line_items()
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    """Place a new order. Rejected outside working hours."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        total_amount=body.total_amount,
        payment_method=body.payment_method,
        shipping_address=body.shipping_address.model_dump_json() if body.shipping_address else None,
        delivery_note=body.delivery_note,
        language=body.language,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


@order_router.get("", response_model=OrderPageResponse)
async def list_orders(
    partition: OrderPartition = OrderPartition.PENDING,
    page: int = Query(0, ge=0),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
) -> OrderPageResponse:
    """One page of pending (not delivered) or completed (delivered) orders, newest first."""
    orders = query_order_page(partition, page, page_size)
    return OrderPageResponse(
        partition=partition.value,
        page=page,
        page_size=page_size,
        has_more=len(orders) == page_size,
        orders=[_order_response(order) for order in orders],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    """Fetch a single order."""
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.put("/{order_id}/status", response_model=StatusChangeResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusChangeResponse:
    """Run the atomic status procedure. A stale ``expected_status`` is reported as 409."""
    command = UpdateOrderStatus(
        order_id=order_id,
        new_status=body.new_status,
        actor_role=body.actor_role,
        actor_id=body.actor_id,
        expected_status=body.expected_status,
    )
    try:
        result = current_domain.process(command, asynchronous=False)
    except InvalidOperationError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from None
    return StatusChangeResponse(**result)


# ---------------------------------------------------------------------------
# Working hours
# ---------------------------------------------------------------------------
@settings_router.put("/working-hours", response_model=SettingsIdResponse)
async def configure_working_hours(body: ConfigureWorkingHoursRequest) -> SettingsIdResponse:
    """Replace the active working-hours window."""
    command = ConfigureWorkingHours(
        start=body.start,
        end=body.end,
        enabled=body.enabled,
        message_tr=body.message_tr,
        message_en=body.message_en,
        message_ru=body.message_ru,
    )
    settings_id = current_domain.process(command, asynchronous=False)
    return SettingsIdResponse(settings_id=settings_id)


@settings_router.get("/working-hours/status", response_model=WorkingHoursStatusResponse)
async def working_hours_status(language: str | None = None) -> WorkingHoursStatusResponse:
    """Evaluate the active window right now."""
    status = evaluate(current_window(), datetime.now(), language)
    return WorkingHoursStatusResponse(
        within_hours=status.within_hours,
        enabled=status.enabled,
        message=status.message,
        start=status.start,
        end=status.end,
    )
