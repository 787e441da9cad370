"""Deposit requests: Pending until an admin approves (credit) or rejects them."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_CEILING, Decimal

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..dependencies import AdminPrincipal
from ..errors import ConcurrentUpdate, InvalidState, NotFound, ValidationError
from ..metrics import deposit_decision_total, deposit_submitted_total
from ..models import Deposit, DepositStatus, PaymentMethod, TransactionType
from . import settings_store
from . import wallet as wallet_service


def local_amount(amount_usd: Decimal, rate: Decimal) -> Decimal:
    """Whole local-currency units the payer must send, rounded up."""
    return (amount_usd * rate).to_integral_value(rounding=ROUND_CEILING)


async def submit_deposit(
    session: AsyncSession,
    user_id: int,
    amount_usd: Decimal,
    method: PaymentMethod,
    proof_image: str | None = None,
    external_tx_id: str | None = None,
) -> Deposit:
    amount_usd = wallet_service.normalize_amount(amount_usd)
    minimum = await settings_store.minimum_deposit(session)
    if amount_usd < minimum:
        raise ValidationError(f"Minimum deposit amount is ${minimum}", minimum=str(minimum))
    if method is PaymentMethod.qr_upi and not proof_image:
        raise ValidationError("Upload a payment screenshot for QR/UPI deposits")
    if method is PaymentMethod.crypto and not external_tx_id:
        raise ValidationError("Enter the transaction ID for crypto deposits")

    # Deposits only make sense against an existing wallet
    await wallet_service.get_wallet(session, user_id)

    rate: Decimal | None = None
    amount_local: Decimal | None = None
    if method.shows_local_amount:
        # Rate is read once here and stored; approval never re-prices the request
        rate = await settings_store.exchange_rate(session)
        amount_local = local_amount(amount_usd, rate)

    deposit = Deposit(
        user_id=user_id,
        amount_usd=amount_usd,
        amount_local=amount_local,
        exchange_rate=rate,
        payment_method=method,
        status=DepositStatus.pending,
        proof_image=proof_image,
        external_tx_id=external_tx_id,
    )
    session.add(deposit)
    await session.flush()
    deposit_submitted_total.labels(method=method.value).inc()
    logger.bind(user_id=user_id, deposit_id=deposit.id).info(
        "Deposit {} submitted: {} USD via {}", deposit.id, amount_usd, method.value
    )
    return deposit


async def _lock_pending(session: AsyncSession, deposit_id: int, action: str) -> Deposit:
    stmt = (
        select(Deposit)
        .where(Deposit.id == deposit_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    deposit = await session.scalar(stmt)
    if deposit is None:
        raise NotFound(f"Deposit {deposit_id} not found", deposit_id=deposit_id)
    if deposit.is_terminal:
        deposit_decision_total.labels(outcome="invalid_state").inc()
        raise InvalidState(
            f"Cannot {action} deposit {deposit_id}: it is already {deposit.status.value}",
            deposit_id=deposit_id,
            status=deposit.status.value,
        )
    if deposit.user_id is None:
        raise InvalidState(f"Cannot {action} deposit {deposit_id}: its owner was deleted", deposit_id=deposit_id)
    return deposit


def _close(deposit: Deposit, status: DepositStatus, admin: AdminPrincipal, admin_note: str | None) -> None:
    deposit.status = status
    deposit.admin_note = admin_note
    deposit.reviewed_by = admin.subject
    deposit.reviewed_at = datetime.now(tz=timezone.utc)


async def _flush_decision(session: AsyncSession, deposit: Deposit) -> None:
    try:
        await session.flush()
    except StaleDataError as exc:
        deposit_decision_total.labels(outcome="concurrent_update").inc()
        logger.bind(deposit_id=deposit.id).warning("Deposit {} was decided by another reviewer", deposit.id)
        raise ConcurrentUpdate(
            f"Deposit {deposit.id} was modified by another operation; reload it",
            deposit_id=deposit.id,
        ) from exc


async def approve_deposit(
    session: AsyncSession,
    admin: AdminPrincipal,
    deposit_id: int,
    admin_note: str | None = None,
) -> Deposit:
    deposit = await _lock_pending(session, deposit_id, "approve")
    _close(deposit, DepositStatus.completed, admin, admin_note)
    await _flush_decision(session, deposit)
    await wallet_service.apply_credit(
        session,
        deposit.user_id,
        deposit.amount_usd,
        type=TransactionType.deposit,
        description=f"Deposit via {deposit.payment_method.value}",
        reference_id=str(deposit.id),
    )
    deposit_decision_total.labels(outcome="approved").inc()
    logger.bind(deposit_id=deposit.id, admin=admin.subject).info(
        "Deposit {} approved, credited {} USD to user {}", deposit.id, deposit.amount_usd, deposit.user_id
    )
    return deposit


async def reject_deposit(
    session: AsyncSession,
    admin: AdminPrincipal,
    deposit_id: int,
    admin_note: str | None = None,
) -> Deposit:
    deposit = await _lock_pending(session, deposit_id, "reject")
    _close(deposit, DepositStatus.rejected, admin, admin_note)
    await _flush_decision(session, deposit)
    deposit_decision_total.labels(outcome="rejected").inc()
    logger.bind(deposit_id=deposit.id, admin=admin.subject).info("Deposit {} rejected", deposit.id)
    return deposit


async def get_deposit(session: AsyncSession, deposit_id: int, *, user_id: int | None = None) -> Deposit:
    deposit = await session.get(Deposit, deposit_id)
    if deposit is None or (user_id is not None and deposit.user_id != user_id):
        raise NotFound(f"Deposit {deposit_id} not found", deposit_id=deposit_id)
    return deposit


async def list_user_deposits(session: AsyncSession, user_id: int) -> list[Deposit]:
    stmt = select(Deposit).where(Deposit.user_id == user_id).order_by(Deposit.id.desc())
    return list(await session.scalars(stmt))


async def list_deposits(session: AsyncSession, status: DepositStatus | None = None) -> list[Deposit]:
    stmt = select(Deposit).order_by(Deposit.id.desc())
    if status is not None:
        stmt = stmt.where(Deposit.status == status)
    return list(await session.scalars(stmt))
