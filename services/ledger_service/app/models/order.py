from __future__ import annotations

from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from services.ledger_service.app.db.base import TimestampedModel, enum_column


class OrderStatus(str, Enum):
    pending = "Pending"
    in_review = "In Review"
    processing = "Processing"
    completed = "Completed"
    rejected = "Rejected"


class PaymentMode(str, Enum):
    wallet = "wallet"
    manual = "manual"


# Forward path plus rejection from any open state; Completed and Rejected are terminal.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.in_review, OrderStatus.rejected}),
    OrderStatus.in_review: frozenset({OrderStatus.processing, OrderStatus.rejected}),
    OrderStatus.processing: frozenset({OrderStatus.completed, OrderStatus.rejected}),
    OrderStatus.completed: frozenset(),
    OrderStatus.rejected: frozenset(),
}


class Order(TimestampedModel):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
        CheckConstraint("quantity > 0", name="ck_order_quantity_positive"),
        CheckConstraint("total > 0", name="ck_order_total_positive"),
    )

    # Public identifier shown to customers for tracking
    order_id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, default=None
    )
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    service: Mapped[str] = mapped_column(String(100), nullable=False)
    link: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    quantity: Mapped[int] = mapped_column(nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        enum_column(OrderStatus, 16), nullable=False, default=OrderStatus.pending
    )
    payment_mode: Mapped[PaymentMode] = mapped_column(enum_column(PaymentMode, 8), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    proof_image: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ORDER_TRANSITIONS[self.status]
