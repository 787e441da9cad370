from __future__ import annotations

from fastapi import APIRouter, status

from ..dependencies import CurrentUserIdDep, OptionalUserIdDep, SessionDep
from ..schemas import OrderCreate, OrderResponse
from ..services import orders as order_service

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(payload: OrderCreate, session: SessionDep, current_user_id: OptionalUserIdDep) -> OrderResponse:
    """Guests may order with manual payment; wallet payment needs a signed-in customer."""
    new_order = order_service.NewOrder(
        platform=payload.platform,
        service=payload.service,
        quantity=payload.quantity,
        total=payload.total,
        name=payload.name,
        email=str(payload.email),
        user_id=current_user_id,
        link=payload.link,
        message=payload.message,
        proof_image=payload.proof_image,
    )
    async with session.begin():
        order = await order_service.place_order(session, new_order, payload.payment_mode)
    await session.refresh(order)
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse])
async def list_my_orders(session: SessionDep, current_user_id: CurrentUserIdDep) -> list[OrderResponse]:
    orders = await order_service.list_user_orders(session, current_user_id)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def track_order(order_id: str, session: SessionDep) -> OrderResponse:
    """Public tracking lookup; the unguessable order id is the credential."""
    order = await order_service.get_order(session, order_id)
    return OrderResponse.model_validate(order)
