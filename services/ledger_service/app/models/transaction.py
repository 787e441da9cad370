from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from services.ledger_service.app.db.base import Base, enum_column


class TransactionType(str, Enum):
    deposit = "deposit"
    purchase = "purchase"
    refund = "refund"

    @property
    def is_credit(self) -> bool:
        return self is not TransactionType.purchase


class WalletTransaction(Base):
    """Append-only record of one balance change. Rows are never updated."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_id_id", "user_id", "id"),
        Index("ix_transactions_type_reference", "type", "reference_id"),
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint("balance_after >= 0", name="ck_transaction_balance_after_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type: Mapped[TransactionType] = mapped_column(enum_column(TransactionType, 16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Deposit id or public order id of the event that caused the change
    reference_id: Mapped[str] = mapped_column(String(64), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
