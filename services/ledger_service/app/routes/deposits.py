from __future__ import annotations

from fastapi import APIRouter, status

from ..dependencies import CurrentUserIdDep, SessionDep
from ..schemas import DepositCreate, DepositResponse
from ..services import deposits as deposit_service

router = APIRouter()


@router.post("", response_model=DepositResponse, status_code=status.HTTP_201_CREATED)
async def submit_deposit(payload: DepositCreate, session: SessionDep, current_user_id: CurrentUserIdDep) -> DepositResponse:
    async with session.begin():
        deposit = await deposit_service.submit_deposit(
            session,
            current_user_id,
            payload.amount_usd,
            payload.payment_method,
            proof_image=payload.proof_image,
            external_tx_id=payload.external_tx_id,
        )
    await session.refresh(deposit)
    return DepositResponse.from_model(deposit)


@router.get("", response_model=list[DepositResponse])
async def list_my_deposits(session: SessionDep, current_user_id: CurrentUserIdDep) -> list[DepositResponse]:
    deposits = await deposit_service.list_user_deposits(session, current_user_id)
    return [DepositResponse.from_model(deposit) for deposit in deposits]


@router.get("/{deposit_id}", response_model=DepositResponse)
async def get_my_deposit(deposit_id: int, session: SessionDep, current_user_id: CurrentUserIdDep) -> DepositResponse:
    deposit = await deposit_service.get_deposit(session, deposit_id, user_id=current_user_id)
    return DepositResponse.from_model(deposit)
