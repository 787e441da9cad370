from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models import OrderStatus, PaymentMode


class OrderCreate(BaseModel):
    platform: str = Field(..., min_length=1, max_length=50)
    service: str = Field(..., min_length=1, max_length=100)
    link: str | None = None
    quantity: int = Field(..., gt=0)
    total: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    message: str | None = None
    proof_image: str | None = None
    payment_mode: PaymentMode = PaymentMode.manual


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    order_id: str
    user_id: int | None
    platform: str
    service: str
    link: str | None
    quantity: int
    total: Decimal
    status: OrderStatus
    payment_mode: PaymentMode
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminOrderResponse(OrderResponse):
    message: str | None
    proof_image: str | None
