from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select

from services.ledger_service.app import settings as ledger_settings_module
from services.ledger_service.app.errors import ConcurrentUpdate, InvalidState, NotFound, ValidationError
from services.ledger_service.app.models import Deposit, DepositStatus, PaymentMethod, SettingKey, TransactionType
from services.ledger_service.app.services import deposits as deposit_service
from services.ledger_service.app.services import settings_store
from services.ledger_service.app.services import wallet as wallet_service


async def _submit_crypto(session, user_id: int, amount: str = "10.00"):
    async with session.begin():
        return await deposit_service.submit_deposit(
            session, user_id, Decimal(amount), PaymentMethod.crypto, external_tx_id="0xabc"
        )


@pytest.mark.parametrize(
    ("usd", "rate", "expected"),
    [
        ("10.00", "83.5", "835"),
        ("1.01", "83.5", "85"),
        ("2.00", "90", "180"),
    ],
)
def test_local_amount_rounds_up_to_whole_units(usd, rate, expected):
    assert deposit_service.local_amount(Decimal(usd), Decimal(rate)) == Decimal(expected)


@pytest.mark.asyncio
async def test_qr_deposit_snapshots_exchange_rate(session, customer_id):
    async with session.begin():
        deposit = await deposit_service.submit_deposit(
            session, customer_id, Decimal("10.00"), PaymentMethod.qr_upi, proof_image="proofs/1.png"
        )

    assert deposit.status is DepositStatus.pending
    assert deposit.exchange_rate == Decimal("83.5")
    assert deposit.amount_local == Decimal("835")
    # Submission alone never moves money
    assert await wallet_service.get_balance(session, customer_id) == Decimal("0.00")


@pytest.mark.asyncio
async def test_crypto_deposit_has_no_local_amount(session, customer_id):
    deposit = await _submit_crypto(session, customer_id)
    assert deposit.amount_local is None
    assert deposit.exchange_rate is None


@pytest.mark.asyncio
async def test_submission_rules(session, customer_id):
    with pytest.raises(ValidationError):
        await deposit_service.submit_deposit(session, customer_id, Decimal("0.50"), PaymentMethod.crypto, external_tx_id="0x1")
    with pytest.raises(ValidationError):
        await deposit_service.submit_deposit(session, customer_id, Decimal("5.00"), PaymentMethod.qr_upi)
    with pytest.raises(ValidationError):
        await deposit_service.submit_deposit(session, customer_id, Decimal("5.00"), PaymentMethod.crypto)
    with pytest.raises(NotFound):
        await deposit_service.submit_deposit(session, 9999, Decimal("5.00"), PaymentMethod.crypto, external_tx_id="0x1")


@pytest.mark.asyncio
async def test_minimum_follows_settings_table(session, customer_id):
    async with session.begin():
        await settings_store.update_setting(session, SettingKey.min_deposit_usd, "20")

    with pytest.raises(ValidationError) as excinfo:
        await deposit_service.submit_deposit(session, customer_id, Decimal("10.00"), PaymentMethod.crypto, external_tx_id="0x1")
    assert excinfo.value.context["minimum"] == "20"


@pytest.mark.asyncio
async def test_approve_credits_once_with_snapshot_amount(session, customer_id, admin):
    async with session.begin():
        deposit = await deposit_service.submit_deposit(
            session, customer_id, Decimal("10.00"), PaymentMethod.qr_upi, proof_image="proofs/1.png"
        )
        await settings_store.update_setting(session, SettingKey.usd_to_inr_rate, "100")

    async with session.begin():
        approved = await deposit_service.approve_deposit(session, admin, deposit.id, admin_note="checked")

    assert approved.status is DepositStatus.completed
    assert approved.reviewed_by == admin.subject
    assert approved.amount_local == Decimal("835")
    assert await wallet_service.get_balance(session, customer_id) == Decimal("10.00")

    entries = await wallet_service.list_transactions(session, customer_id)
    assert len(entries) == 1
    assert entries[0].type is TransactionType.deposit
    assert entries[0].reference_id == str(deposit.id)
    assert entries[0].description == "Deposit via QR/UPI"
    await session.commit()

    with pytest.raises(InvalidState):
        async with session.begin():
            await deposit_service.approve_deposit(session, admin, deposit.id)
    assert await wallet_service.get_balance(session, customer_id) == Decimal("10.00")


@pytest.mark.asyncio
async def test_reject_never_credits_and_is_final(session, customer_id, admin):
    deposit = await _submit_crypto(session, customer_id)

    async with session.begin():
        rejected = await deposit_service.reject_deposit(session, admin, deposit.id, admin_note="no such tx")
    assert rejected.status is DepositStatus.rejected
    assert await wallet_service.get_balance(session, customer_id) == Decimal("0.00")
    await session.commit()

    with pytest.raises(InvalidState):
        async with session.begin():
            await deposit_service.approve_deposit(session, admin, deposit.id)


@pytest.mark.asyncio
async def test_decision_on_unknown_deposit_is_not_found(session, admin):
    with pytest.raises(NotFound):
        async with session.begin():
            await deposit_service.approve_deposit(session, admin, 404)


@pytest.mark.asyncio
async def test_listing_filters_by_status_and_owner(session, customer_id, admin):
    first = await _submit_crypto(session, customer_id, "5.00")
    second = await _submit_crypto(session, customer_id, "6.00")
    async with session.begin():
        await deposit_service.reject_deposit(session, admin, first.id)

    pending = await deposit_service.list_deposits(session, DepositStatus.pending)
    assert [deposit.id for deposit in pending] == [second.id]
    mine = await deposit_service.list_user_deposits(session, customer_id)
    assert [deposit.id for deposit in mine] == [second.id, first.id]

    with pytest.raises(NotFound):
        await deposit_service.get_deposit(session, first.id, user_id=customer_id + 1)


@pytest.mark.asyncio
async def test_stored_rate_is_the_rate_used(session, customer_id, monkeypatch):
    monkeypatch.setenv("LEDGER_DEFAULT_EXCHANGE_RATE", "83.00001")
    ledger_settings_module.ledger_settings.cache_clear()

    async with session.begin():
        deposit = await deposit_service.submit_deposit(
            session, customer_id, Decimal("1.00"), PaymentMethod.qr_upi, proof_image="proofs/2.png"
        )

    stored = await session.scalar(select(Deposit.exchange_rate).where(Deposit.id == deposit.id))
    assert stored == Decimal("83.0000")
    assert deposit.amount_local == Decimal("83")
    assert deposit.amount_local == deposit_service.local_amount(Decimal("1.00"), stored)


@pytest.mark.asyncio
async def test_second_reviewer_cannot_close_a_decided_deposit(session_factory, customer_id, admin):
    async with session_factory() as session:
        deposit = await _submit_crypto(session, customer_id)

    async with session_factory() as first:
        pending = await deposit_service._lock_pending(first, deposit.id, "approve")
        await first.commit()

        async with session_factory() as second:
            async with second.begin():
                await deposit_service.approve_deposit(second, admin, deposit.id)

        deposit_service._close(pending, DepositStatus.completed, admin, None)
        with pytest.raises(ConcurrentUpdate):
            await deposit_service._flush_decision(first, pending)
        await first.rollback()

    async with session_factory() as session:
        assert await wallet_service.get_balance(session, customer_id) == Decimal("10.00")
        assert len(await wallet_service.list_transactions(session, customer_id)) == 1
