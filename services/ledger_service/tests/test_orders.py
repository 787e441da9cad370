from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from services.ledger_service.app.errors import InsufficientFunds, InvalidState, NotFound, ValidationError
from services.ledger_service.app.models import (
    Order,
    OrderStatus,
    PaymentMode,
    TransactionType,
    WalletTransaction,
)
from services.ledger_service.app.services import orders as order_service
from services.ledger_service.app.services import wallet as wallet_service


def _new_order(user_id: int | None, total: str = "7.50") -> order_service.NewOrder:
    return order_service.NewOrder(
        platform="Instagram",
        service="Followers",
        quantity=1000,
        total=Decimal(total),
        name="Alice",
        email="Alice@Example.com",
        user_id=user_id,
        link="https://instagram.com/alice",
    )


async def _fund(session_factory, user_id: int, amount: str) -> None:
    async with session_factory() as session:
        async with session.begin():
            await wallet_service.apply_credit(
                session, user_id, Decimal(amount), type=TransactionType.deposit, description="seed", reference_id="1"
            )


async def _place(session_factory, user_id, mode: PaymentMode, total: str = "7.50") -> Order:
    async with session_factory() as session:
        async with session.begin():
            return await order_service.place_order(session, _new_order(user_id, total), mode)


async def _set_status(session_factory, admin, order_id: str, *statuses: OrderStatus) -> Order:
    order = None
    for status in statuses:
        async with session_factory() as session:
            async with session.begin():
                order = await order_service.update_order_status(session, admin, order_id, status)
    return order


@pytest.mark.asyncio
async def test_wallet_order_debits_and_records_purchase(session_factory, customer_id):
    await _fund(session_factory, customer_id, "10.00")
    order = await _place(session_factory, customer_id, PaymentMode.wallet)

    assert order.status is OrderStatus.pending
    assert order.email == "alice@example.com"
    async with session_factory() as session:
        assert await wallet_service.get_balance(session, customer_id) == Decimal("2.50")
        entries = await wallet_service.list_transactions(session, customer_id)
        purchase = entries[0]
        assert purchase.type is TransactionType.purchase
        assert purchase.reference_id == order.order_id
        assert purchase.amount == Decimal("7.50")
        assert purchase.balance_after == Decimal("2.50")


@pytest.mark.asyncio
async def test_short_balance_creates_neither_order_nor_record(session_factory, customer_id):
    await _fund(session_factory, customer_id, "2.50")

    with pytest.raises(InsufficientFunds):
        await _place(session_factory, customer_id, PaymentMode.wallet, "5.00")

    async with session_factory() as session:
        assert await session.scalar(select(func.count()).select_from(Order)) == 0
        purchases = await session.scalar(
            select(func.count()).select_from(WalletTransaction).where(WalletTransaction.type == TransactionType.purchase)
        )
        assert purchases == 0
        assert await wallet_service.get_balance(session, customer_id) == Decimal("2.50")


@pytest.mark.asyncio
async def test_manual_order_leaves_wallet_untouched(session_factory, customer_id):
    order = await _place(session_factory, customer_id, PaymentMode.manual)
    assert order.payment_mode is PaymentMode.manual
    async with session_factory() as session:
        assert await wallet_service.get_balance(session, customer_id) == Decimal("0.00")
        assert await wallet_service.list_transactions(session, customer_id) == []


@pytest.mark.asyncio
async def test_guest_orders_must_pay_manually(session_factory):
    guest = await _place(session_factory, None, PaymentMode.manual)
    assert guest.user_id is None
    with pytest.raises(ValidationError):
        await _place(session_factory, None, PaymentMode.wallet)


@pytest.mark.asyncio
async def test_order_moves_forward_to_completed(session_factory, customer_id, admin):
    order = await _place(session_factory, customer_id, PaymentMode.manual)
    done = await _set_status(
        session_factory,
        admin,
        order.order_id,
        OrderStatus.in_review,
        OrderStatus.processing,
        OrderStatus.completed,
    )
    assert done.status is OrderStatus.completed


@pytest.mark.parametrize(
    ("path", "target"),
    [
        ((), OrderStatus.processing),
        ((), OrderStatus.pending),
        ((OrderStatus.in_review,), OrderStatus.pending),
        ((OrderStatus.rejected,), OrderStatus.in_review),
        ((OrderStatus.in_review, OrderStatus.processing, OrderStatus.completed), OrderStatus.rejected),
    ],
)
@pytest.mark.asyncio
async def test_illegal_transitions_are_refused(session_factory, customer_id, admin, path, target):
    order = await _place(session_factory, customer_id, PaymentMode.manual)
    await _set_status(session_factory, admin, order.order_id, *path)

    with pytest.raises(InvalidState):
        await _set_status(session_factory, admin, order.order_id, target)


@pytest.mark.asyncio
async def test_unknown_order_is_not_found(session_factory, admin):
    with pytest.raises(NotFound):
        await _set_status(session_factory, admin, "missing", OrderStatus.rejected)


@pytest.mark.asyncio
async def test_rejected_wallet_order_is_refunded_once(session_factory, customer_id, admin):
    await _fund(session_factory, customer_id, "10.00")
    order = await _place(session_factory, customer_id, PaymentMode.wallet)
    await _set_status(session_factory, admin, order.order_id, OrderStatus.rejected)

    async with session_factory() as session:
        async with session.begin():
            refund = await order_service.refund_order(session, admin, order.order_id)
    assert refund.type is TransactionType.refund
    assert refund.balance_after == Decimal("10.00")

    with pytest.raises(InvalidState):
        async with session_factory() as session:
            async with session.begin():
                await order_service.refund_order(session, admin, order.order_id)

    async with session_factory() as session:
        assert await wallet_service.get_balance(session, customer_id) == Decimal("10.00")
        check = await wallet_service.verify_ledger(session, customer_id)
        assert check.consistent
        assert check.entries == 3


@pytest.mark.asyncio
async def test_refund_requires_rejected_wallet_order(session_factory, customer_id, admin):
    await _fund(session_factory, customer_id, "10.00")
    pending = await _place(session_factory, customer_id, PaymentMode.wallet)
    manual = await _place(session_factory, customer_id, PaymentMode.manual)
    await _set_status(session_factory, admin, manual.order_id, OrderStatus.rejected)

    for order_id in (pending.order_id, manual.order_id):
        with pytest.raises(InvalidState):
            async with session_factory() as session:
                async with session.begin():
                    await order_service.refund_order(session, admin, order_id)


@pytest.mark.asyncio
async def test_order_listings(session_factory, customer_id, admin):
    first = await _place(session_factory, customer_id, PaymentMode.manual)
    second = await _place(session_factory, None, PaymentMode.manual)
    await _set_status(session_factory, admin, first.order_id, OrderStatus.in_review)

    async with session_factory() as session:
        mine = await order_service.list_user_orders(session, customer_id)
        assert [order.order_id for order in mine] == [first.order_id]
        by_email = await order_service.list_orders_by_email(session, "ALICE@example.com")
        assert [order.order_id for order in by_email] == [second.order_id, first.order_id]
        in_review = await order_service.list_orders(session, OrderStatus.in_review)
        assert [order.order_id for order in in_review] == [first.order_id]
