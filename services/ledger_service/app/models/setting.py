from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from services.ledger_service.app.db.base import TimestampedModel


class SettingKey:
    min_deposit_usd = "min_deposit_usd"
    usd_to_inr_rate = "usd_to_inr_rate"


class Setting(TimestampedModel):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
