from __future__ import annotations

from fastapi import APIRouter

from ..dependencies import AdminDep, SessionDep
from ..models import DepositStatus, OrderStatus
from ..schemas import (
    AdminDepositResponse,
    AdminOrderResponse,
    DepositDecision,
    LedgerCheckResponse,
    OrderStatusUpdate,
    SettingResponse,
    SettingUpdate,
    TransactionResponse,
)
from ..services import deposits as deposit_service
from ..services import orders as order_service
from ..services import settings_store
from ..services import users as user_service
from ..services import wallet as wallet_service

router = APIRouter()


@router.get("/deposits", response_model=list[AdminDepositResponse])
async def list_deposits(
    session: SessionDep,
    admin: AdminDep,
    status: DepositStatus | None = None,
) -> list[AdminDepositResponse]:
    deposits = await deposit_service.list_deposits(session, status)
    return [AdminDepositResponse.from_model(deposit) for deposit in deposits]


@router.post("/deposits/{deposit_id}/approve", response_model=AdminDepositResponse)
async def approve_deposit(
    deposit_id: int,
    session: SessionDep,
    admin: AdminDep,
    payload: DepositDecision | None = None,
) -> AdminDepositResponse:
    note = payload.admin_note if payload else None
    async with session.begin():
        deposit = await deposit_service.approve_deposit(session, admin, deposit_id, admin_note=note)
    await session.refresh(deposit)
    return AdminDepositResponse.from_model(deposit)


@router.post("/deposits/{deposit_id}/reject", response_model=AdminDepositResponse)
async def reject_deposit(
    deposit_id: int,
    session: SessionDep,
    admin: AdminDep,
    payload: DepositDecision | None = None,
) -> AdminDepositResponse:
    note = payload.admin_note if payload else None
    async with session.begin():
        deposit = await deposit_service.reject_deposit(session, admin, deposit_id, admin_note=note)
    await session.refresh(deposit)
    return AdminDepositResponse.from_model(deposit)


@router.get("/orders", response_model=list[AdminOrderResponse])
async def list_orders(
    session: SessionDep,
    admin: AdminDep,
    status: OrderStatus | None = None,
    email: str | None = None,
) -> list[AdminOrderResponse]:
    if email:
        orders = await order_service.list_orders_by_email(session, email)
        if status is not None:
            orders = [order for order in orders if order.status is status]
    else:
        orders = await order_service.list_orders(session, status)
    return [AdminOrderResponse.model_validate(order) for order in orders]


@router.post("/orders/{order_id}/status", response_model=AdminOrderResponse)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    session: SessionDep,
    admin: AdminDep,
) -> AdminOrderResponse:
    async with session.begin():
        order = await order_service.update_order_status(session, admin, order_id, payload.status)
    await session.refresh(order)
    return AdminOrderResponse.model_validate(order)


@router.post("/orders/{order_id}/refund", response_model=TransactionResponse)
async def refund_order(order_id: str, session: SessionDep, admin: AdminDep) -> TransactionResponse:
    async with session.begin():
        entry = await order_service.refund_order(session, admin, order_id)
    await session.refresh(entry)
    return TransactionResponse.model_validate(entry)


@router.get("/users/{user_id}/ledger", response_model=LedgerCheckResponse)
async def audit_user_ledger(user_id: int, session: SessionDep, admin: AdminDep) -> LedgerCheckResponse:
    await user_service.get_user_by_id(session, user_id)
    check = await wallet_service.verify_ledger(session, user_id)
    return LedgerCheckResponse.model_validate(check)


@router.get("/settings", response_model=list[SettingResponse])
async def list_settings(session: SessionDep, admin: AdminDep) -> list[SettingResponse]:
    settings = await settings_store.list_settings(session)
    return [SettingResponse.model_validate(setting) for setting in settings]


@router.put("/settings/{key}", response_model=SettingResponse)
async def update_setting(key: str, payload: SettingUpdate, session: SessionDep, admin: AdminDep) -> SettingResponse:
    async with session.begin():
        setting = await settings_store.update_setting(session, key, payload.value)
    await session.refresh(setting)
    return SettingResponse.model_validate(setting)
