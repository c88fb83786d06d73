"""Order API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from shopdesk.api.dependencies import CallerInfo, DbSession
from shopdesk.api.schemas import (
    CascadeResponse,
    DataEnvelope,
    DeleteResponse,
    MessageResponse,
    OrderCreate,
    OrderPaymentResponse,
    OrderResponse,
    OrderWriteResponse,
    PaymentUpdate,
    StatusUpdate,
)
from shopdesk.services.order_service import AssignmentDraft, OrderDraft, OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=DataEnvelope[list[OrderResponse]])
async def list_orders(db: DbSession, caller: CallerInfo) -> DataEnvelope[list[OrderResponse]]:
    """List orders visible to the caller, newest first."""
    orders = await OrderService(db).list_orders(
        shop_name=caller.shop_name,
        user_role=caller.user_role,
        user_id=caller.user_id,
    )
    return DataEnvelope[list[OrderResponse]](
        data=[OrderResponse.model_validate(o) for o in orders]
    )


@router.post(
    "",
    response_model=OrderWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def create_order(db: DbSession, payload: OrderCreate) -> OrderWriteResponse:
    """Create an order, then derive its salary entries and client balance."""
    draft = OrderDraft(
        client_id=payload.client_id,
        order_name=payload.order_name,
        venue_place=payload.venue_place,
        description=payload.description,
        total_amount=payload.total_amount,
        received_payment=payload.received_payment,
        shop_name=payload.shop_name,
        order_date=payload.order_date,
        created_by=payload.created_by,
        client_name=payload.client_name,
        products=(
            [p.model_dump(mode="json") for p in payload.products] if payload.products else None
        ),
        workers=[AssignmentDraft(user_id=w.user_id, payment=w.payment) for w in payload.workers],
        transporters=[
            AssignmentDraft(user_id=t.user_id, payment=t.payment) for t in payload.transporters
        ],
    )
    order, cascade = await OrderService(db).create_order(draft)
    return OrderWriteResponse(
        message="Order created successfully",
        order=OrderResponse.model_validate(order),
        cascade=CascadeResponse.model_validate(cascade),
    )


@router.put(
    "/{order_id}/status",
    response_model=OrderWriteResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_order_status(
    db: DbSession,
    order_id: Annotated[UUID, Path()],
    payload: StatusUpdate,
) -> OrderWriteResponse:
    """Move an order toward completed; completion pays its salary entries."""
    order, cascade = await OrderService(db).update_status(order_id, payload.status)
    return OrderWriteResponse(
        message="Order status updated",
        order=OrderResponse.model_validate(order),
        cascade=CascadeResponse.model_validate(cascade),
    )


@router.put(
    "/{order_id}/payment",
    response_model=OrderPaymentResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_order_payment(
    db: DbSession,
    order_id: Annotated[UUID, Path()],
    payload: PaymentUpdate,
) -> OrderPaymentResponse:
    """Overwrite the amount received for an order."""
    order = await OrderService(db).update_payment(order_id, payload.received_payment)
    return OrderPaymentResponse(message="Payment updated", order=OrderResponse.model_validate(order))


@router.delete(
    "/{order_id}",
    response_model=DeleteResponse,
    responses={404: {"model": MessageResponse}},
)
async def delete_order(db: DbSession, order_id: Annotated[UUID, Path()]) -> DeleteResponse:
    """Delete an order and unwind its salary entries and client balance."""
    cascade = await OrderService(db).delete_order(order_id)
    return DeleteResponse(
        message="Order and related data deleted successfully",
        cascade=CascadeResponse.model_validate(cascade),
    )
