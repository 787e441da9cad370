from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from services.ledger_service.app.db.base import TimestampedModel, enum_column


class DepositStatus(str, Enum):
    pending = "Pending"
    completed = "Completed"
    rejected = "Rejected"


class PaymentMethod(str, Enum):
    qr_upi = "QR/UPI"
    crypto = "Crypto"

    @property
    def shows_local_amount(self) -> bool:
        # UPI payers are shown the INR figure they must send
        return self is PaymentMethod.qr_upi


class Deposit(TimestampedModel):
    __tablename__ = "deposits"
    __table_args__ = (
        Index("ix_deposits_status_created", "status", "created_at"),
        CheckConstraint("amount_usd > 0", name="ck_deposit_amount_positive"),
    )

    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )
    amount_usd: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    amount_local: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True, default=None)
    exchange_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True, default=None)
    payment_method: Mapped[PaymentMethod] = mapped_column(enum_column(PaymentMethod, 16), nullable=False)
    status: Mapped[DepositStatus] = mapped_column(
        enum_column(DepositStatus, 16), nullable=False, default=DepositStatus.pending
    )
    proof_image: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    external_tx_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    admin_note: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True, default=None)
    # Bumped on every UPDATE so two reviewers cannot both close the same request
    version: Mapped[int] = mapped_column(nullable=False, default=1, server_default="1")

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_terminal(self) -> bool:
        return self.status is not DepositStatus.pending
