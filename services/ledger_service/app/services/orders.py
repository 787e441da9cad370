"""Order creation with optional wallet payment, admin status changes and refunds."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import AdminPrincipal
from ..errors import InvalidState, NotFound, ValidationError
from ..metrics import order_placed_total, order_refund_total, order_status_change_total, wallet_debit_total
from ..models import Order, OrderStatus, PaymentMode, TransactionType, WalletTransaction
from . import wallet as wallet_service


@dataclass
class NewOrder:
    platform: str
    service: str
    quantity: int
    total: Decimal
    name: str
    email: str
    user_id: int | None = None
    link: str | None = None
    message: str | None = None
    proof_image: str | None = None


async def place_order(session: AsyncSession, order: NewOrder, payment_mode: PaymentMode) -> Order:
    """Create an order; wallet orders are debited first and fail whole on a short balance."""
    total = wallet_service.normalize_amount(order.total)
    if order.quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")

    order_id = str(uuid4())
    if payment_mode is PaymentMode.wallet:
        if order.user_id is None:
            raise ValidationError("Sign in to pay from a wallet")
        # InsufficientFunds propagates before any row is written
        new_balance = await wallet_service.debit(session, order.user_id, total)

    row = Order(
        order_id=order_id,
        user_id=order.user_id,
        platform=order.platform,
        service=order.service,
        link=order.link,
        quantity=order.quantity,
        total=total,
        status=OrderStatus.pending,
        payment_mode=payment_mode,
        name=order.name,
        email=order.email.strip().lower(),
        message=order.message,
        proof_image=order.proof_image,
    )
    session.add(row)
    await session.flush()

    if payment_mode is PaymentMode.wallet:
        await wallet_service.record_transaction(
            session,
            order.user_id,
            TransactionType.purchase,
            total,
            f"Purchase of {order.service} on {order.platform}",
            order_id,
            new_balance,
        )
        wallet_debit_total.labels(type=TransactionType.purchase.value).inc()
        logger.bind(user_id=order.user_id, order_id=order_id).info(
            "Wallet order {} paid: {} USD, balance now {}", order_id, total, new_balance
        )
    else:
        logger.bind(order_id=order_id).info("Manual order {} awaiting payment review", order_id)

    order_placed_total.labels(payment_mode=payment_mode.value).inc()
    return row


async def get_order(session: AsyncSession, order_id: str, *, for_update: bool = False) -> Order:
    stmt = select(Order).where(Order.order_id == order_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    order = await session.scalar(stmt)
    if order is None:
        raise NotFound(f"Order {order_id} not found", order_id=order_id)
    return order


async def update_order_status(
    session: AsyncSession,
    admin: AdminPrincipal,
    order_id: str,
    status: OrderStatus,
) -> Order:
    order = await get_order(session, order_id, for_update=True)
    if not order.can_transition_to(status):
        raise InvalidState(
            f"Order {order_id} cannot move from {order.status.value} to {status.value}",
            order_id=order_id,
            status=order.status.value,
        )
    previous = order.status
    order.status = status
    await session.flush()
    order_status_change_total.labels(status=status.value).inc()
    logger.bind(order_id=order_id, admin=admin.subject).info(
        "Order {} moved {} -> {}", order_id, previous.value, status.value
    )
    return order


async def _find_refund(session: AsyncSession, order_id: str) -> WalletTransaction | None:
    stmt = select(WalletTransaction).where(
        WalletTransaction.type == TransactionType.refund,
        WalletTransaction.reference_id == order_id,
    )
    return await session.scalar(stmt)


async def refund_order(session: AsyncSession, admin: AdminPrincipal, order_id: str) -> WalletTransaction:
    """Return the total of a rejected wallet order to its owner's wallet, once."""
    order = await get_order(session, order_id, for_update=True)
    if order.payment_mode is not PaymentMode.wallet:
        raise InvalidState(f"Order {order_id} was not paid from a wallet", order_id=order_id)
    if order.status is not OrderStatus.rejected:
        raise InvalidState(
            f"Only rejected orders can be refunded; order {order_id} is {order.status.value}",
            order_id=order_id,
            status=order.status.value,
        )
    if order.user_id is None:
        raise InvalidState(f"Order {order_id} has no owner to refund", order_id=order_id)
    if await _find_refund(session, order_id) is not None:
        raise InvalidState(f"Order {order_id} has already been refunded", order_id=order_id)

    entry = await wallet_service.apply_credit(
        session,
        order.user_id,
        order.total,
        type=TransactionType.refund,
        description=f"Refund of {order.service} on {order.platform}",
        reference_id=order_id,
    )
    order_refund_total.inc()
    logger.bind(order_id=order_id, admin=admin.subject).info("Order {} refunded {}", order_id, order.total)
    return entry


async def list_user_orders(session: AsyncSession, user_id: int) -> list[Order]:
    stmt = select(Order).where(Order.user_id == user_id).order_by(Order.id.desc())
    return list(await session.scalars(stmt))


async def list_orders_by_email(session: AsyncSession, email: str) -> list[Order]:
    stmt = select(Order).where(Order.email == email.strip().lower()).order_by(Order.id.desc())
    return list(await session.scalars(stmt))


async def list_orders(session: AsyncSession, status: OrderStatus | None = None) -> list[Order]:
    stmt = select(Order).order_by(Order.id.desc())
    if status is not None:
        stmt = stmt.where(Order.status == status)
    return list(await session.scalars(stmt))
