"""Wallet balance and transaction log.

This module is the only writer of ``wallets.balance`` and the only producer of
``transactions`` rows. Functions here flush but never commit: the caller owns
the ``session.begin()`` block, so a balance change and the record describing
it are committed or rolled back together.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConcurrentUpdate, InsufficientFunds, NotFound, ValidationError
from ..metrics import (
    wallet_concurrent_update_total,
    wallet_credit_total,
    wallet_debit_total,
    wallet_insufficient_funds_total,
)
from ..models import TransactionType, Wallet, WalletTransaction

CENT = Decimal("0.01")
# Money columns are Numeric(18, 2): at most 16 digits before the point
MAX_INTEGER_DIGITS = 16


def normalize_amount(amount: Decimal | str | int) -> Decimal:
    """Return ``amount`` as a positive two-place Decimal or raise ValidationError."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValidationError(f"Amount {amount!r} is not a number") from exc
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Amount must be greater than zero, got {amount}")
    if value.adjusted() >= MAX_INTEGER_DIGITS:
        raise ValidationError(f"Amount {amount} is too large", max_integer_digits=MAX_INTEGER_DIGITS)
    if value != value.quantize(CENT):
        raise ValidationError(f"Amount {amount} has more than two decimal places")
    return value.quantize(CENT)


async def create_wallet(session: AsyncSession, user_id: int) -> Wallet:
    existing = await session.scalar(select(Wallet).where(Wallet.user_id == user_id))
    if existing is not None:
        return existing
    wallet = Wallet(user_id=user_id, balance=Decimal("0.00"))
    session.add(wallet)
    await session.flush()
    logger.bind(user_id=user_id).info("Wallet created for user {}", user_id)
    return wallet


async def get_wallet(session: AsyncSession, user_id: int) -> Wallet:
    wallet = await session.scalar(select(Wallet).where(Wallet.user_id == user_id))
    if wallet is None:
        raise NotFound(f"No wallet for user {user_id}", user_id=user_id)
    return wallet


async def get_balance(session: AsyncSession, user_id: int) -> Decimal:
    wallet = await get_wallet(session, user_id)
    return wallet.balance


async def _lock_wallet(session: AsyncSession, user_id: int) -> Wallet:
    # Row lock serializes read-modify-write per account; populate_existing
    # refreshes an instance already in the identity map with the locked read.
    stmt = (
        select(Wallet)
        .where(Wallet.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    wallet = await session.scalar(stmt)
    if wallet is None:
        raise NotFound(f"No wallet for user {user_id}", user_id=user_id)
    return wallet


async def _flush_balance(session: AsyncSession, wallet: Wallet) -> None:
    try:
        await session.flush()
    except StaleDataError as exc:
        wallet_concurrent_update_total.inc()
        logger.bind(user_id=wallet.user_id).warning("Concurrent balance update on wallet {}", wallet.id)
        raise ConcurrentUpdate(
            "Wallet was modified by another operation; retry the request",
            user_id=wallet.user_id,
        ) from exc


async def credit(session: AsyncSession, user_id: int, amount: Decimal) -> Decimal:
    """Increase the balance by ``amount`` and return the new balance."""
    amount = normalize_amount(amount)
    wallet = await _lock_wallet(session, user_id)
    wallet.balance = wallet.balance + amount
    await _flush_balance(session, wallet)
    return wallet.balance


async def debit(session: AsyncSession, user_id: int, amount: Decimal) -> Decimal:
    """Decrease the balance by ``amount``; never partially, never below zero."""
    amount = normalize_amount(amount)
    wallet = await _lock_wallet(session, user_id)
    if wallet.balance < amount:
        wallet_insufficient_funds_total.inc()
        logger.bind(user_id=user_id).info("Debit of {} refused, balance {}", amount, wallet.balance)
        raise InsufficientFunds(balance=wallet.balance, required=amount)
    wallet.balance = wallet.balance - amount
    await _flush_balance(session, wallet)
    return wallet.balance


async def record_transaction(
    session: AsyncSession,
    user_id: int,
    type: TransactionType,
    amount: Decimal,
    description: str,
    reference_id: str,
    balance_after: Decimal,
) -> WalletTransaction:
    entry = WalletTransaction(
        user_id=user_id,
        type=type,
        amount=normalize_amount(amount),
        description=description,
        reference_id=str(reference_id),
        balance_after=balance_after,
    )
    session.add(entry)
    await session.flush()
    return entry


async def apply_credit(
    session: AsyncSession,
    user_id: int,
    amount: Decimal,
    *,
    type: TransactionType,
    description: str,
    reference_id: str,
) -> WalletTransaction:
    new_balance = await credit(session, user_id, amount)
    entry = await record_transaction(session, user_id, type, amount, description, reference_id, new_balance)
    wallet_credit_total.labels(type=type.value).inc()
    logger.bind(user_id=user_id, reference_id=reference_id).info(
        "{} credit of {} applied, balance now {}", type.value, entry.amount, new_balance
    )
    return entry


async def apply_debit(
    session: AsyncSession,
    user_id: int,
    amount: Decimal,
    *,
    type: TransactionType,
    description: str,
    reference_id: str,
) -> WalletTransaction:
    new_balance = await debit(session, user_id, amount)
    entry = await record_transaction(session, user_id, type, amount, description, reference_id, new_balance)
    wallet_debit_total.labels(type=type.value).inc()
    logger.bind(user_id=user_id, reference_id=reference_id).info(
        "{} debit of {} applied, balance now {}", type.value, entry.amount, new_balance
    )
    return entry


async def list_transactions(session: AsyncSession, user_id: int, limit: int = 50) -> list[WalletTransaction]:
    stmt = (
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
        .order_by(WalletTransaction.id.desc())
        .limit(limit)
    )
    return list(await session.scalars(stmt))


@dataclass
class LedgerCheck:
    user_id: int
    balance: Decimal
    replayed_balance: Decimal
    entries: int
    consistent: bool
    first_mismatch_id: int | None = None


async def verify_ledger(session: AsyncSession, user_id: int) -> LedgerCheck:
    """Replay the user's records in creation order and compare with the stored balance."""
    wallet = await get_wallet(session, user_id)
    entries = await session.scalars(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
        .order_by(WalletTransaction.id)
    )

    running = Decimal("0.00")
    count = 0
    first_mismatch: int | None = None
    for entry in entries:
        count += 1
        running = running + entry.amount if entry.type.is_credit else running - entry.amount
        if first_mismatch is None and running != entry.balance_after:
            first_mismatch = entry.id

    consistent = first_mismatch is None and running == wallet.balance
    if not consistent:
        logger.bind(user_id=user_id).warning(
            "Ledger mismatch: stored {} replayed {} first bad entry {}", wallet.balance, running, first_mismatch
        )
    return LedgerCheck(
        user_id=user_id,
        balance=wallet.balance,
        replayed_balance=running,
        entries=count,
        consistent=consistent,
        first_mismatch_id=first_mismatch,
    )
