from __future__ import annotations

from fastapi import APIRouter, Query

from ..dependencies import CurrentUserIdDep, SessionDep
from ..schemas import (
    BalanceResponse,
    LedgerCheckResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)
from ..services import wallet as wallet_service
from ..settings import ledger_settings

router = APIRouter()


@router.get("", response_model=BalanceResponse)
async def get_balance(session: SessionDep, current_user_id: CurrentUserIdDep) -> BalanceResponse:
    balance = await wallet_service.get_balance(session, current_user_id)
    return BalanceResponse(user_id=current_user_id, balance=balance)


@router.get("/transactions", response_model=TransactionHistoryResponse)
async def list_transactions(
    session: SessionDep,
    current_user_id: CurrentUserIdDep,
    limit: int | None = Query(None, gt=0, le=500),
) -> TransactionHistoryResponse:
    balance = await wallet_service.get_balance(session, current_user_id)
    entries = await wallet_service.list_transactions(
        session, current_user_id, limit or ledger_settings().transaction_history_limit
    )
    return TransactionHistoryResponse(
        user_id=current_user_id,
        balance=balance,
        transactions=[TransactionResponse.model_validate(entry) for entry in entries],
    )


@router.get("/verify", response_model=LedgerCheckResponse)
async def verify_ledger(session: SessionDep, current_user_id: CurrentUserIdDep) -> LedgerCheckResponse:
    check = await wallet_service.verify_ledger(session, current_user_id)
    return LedgerCheckResponse.model_validate(check)
