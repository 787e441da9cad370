from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ..models import DepositStatus, PaymentMethod


class DepositCreate(BaseModel):
    amount_usd: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    payment_method: PaymentMethod
    # Opaque reference to the uploaded proof, e.g. a storage key or data URL
    proof_image: str | None = None
    external_tx_id: str | None = Field(None, max_length=255)


class DepositDecision(BaseModel):
    admin_note: str | None = Field(None, max_length=2000)


class DepositResponse(BaseModel):
    id: int
    user_id: int | None
    amount_usd: Decimal
    amount_local: Decimal | None
    exchange_rate: Decimal | None
    payment_method: PaymentMethod
    status: DepositStatus
    external_tx_id: str | None
    has_proof_image: bool = False
    admin_note: str | None
    reviewed_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, deposit) -> "DepositResponse":
        response = cls.model_validate(deposit)
        response.has_proof_image = bool(deposit.proof_image)
        return response


class AdminDepositResponse(DepositResponse):
    """Reviewer view: carries the proof reference the review is based on."""

    proof_image: str | None
    reviewed_by: str | None
