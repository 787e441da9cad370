from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from ..models import TransactionType


class BalanceResponse(BaseModel):
    user_id: int
    balance: Decimal
    currency: str = "USD"


class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    amount: Decimal
    description: str
    reference_id: str
    balance_after: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionHistoryResponse(BaseModel):
    user_id: int
    balance: Decimal
    transactions: list[TransactionResponse]


class LedgerCheckResponse(BaseModel):
    user_id: int
    balance: Decimal
    replayed_balance: Decimal
    entries: int
    consistent: bool
    first_mismatch_id: int | None = None

    model_config = ConfigDict(from_attributes=True)
