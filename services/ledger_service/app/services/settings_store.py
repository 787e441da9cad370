from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationError
from ..models import Setting, SettingKey
from ..settings import ledger_settings

# Keys whose values feed money calculations and must parse as positive decimals
NUMERIC_KEYS = frozenset({SettingKey.min_deposit_usd, SettingKey.usd_to_inr_rate})
# Deposits snapshot the rate into a Numeric(18, 4) column
RATE_PLACES = Decimal("0.0001")
RATE_INTEGER_DIGITS = 14


def _parse_positive(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


async def get_setting(session: AsyncSession, key: str) -> str | None:
    return await session.scalar(select(Setting.value).where(Setting.key == key))


async def list_settings(session: AsyncSession) -> list[Setting]:
    return list(await session.scalars(select(Setting).order_by(Setting.key)))


async def update_setting(session: AsyncSession, key: str, value: str) -> Setting:
    if key in NUMERIC_KEYS and _parse_positive(value) is None:
        raise ValidationError(f"Setting {key} must be a positive number, got {value!r}", key=key)
    if key == SettingKey.usd_to_inr_rate:
        rate = _parse_positive(value)
        if rate.adjusted() >= RATE_INTEGER_DIGITS or rate != rate.quantize(RATE_PLACES):
            raise ValidationError(
                f"Exchange rate {value!r} must fit 14 digits with at most 4 decimal places", key=key
            )
    setting = await session.scalar(select(Setting).where(Setting.key == key))
    if setting is None:
        setting = Setting(key=key, value=value)
        session.add(setting)
    else:
        setting.value = value
    await session.flush()
    logger.info("Setting {} updated to {}", key, value)
    return setting


async def _numeric_setting(session: AsyncSession, key: str, fallback: Decimal) -> Decimal:
    raw = await get_setting(session, key)
    if raw is None:
        return fallback
    value = _parse_positive(raw)
    if value is None:
        logger.warning("Ignoring malformed setting {}={!r}, using {}", key, raw, fallback)
        return fallback
    return value


async def minimum_deposit(session: AsyncSession) -> Decimal:
    return await _numeric_setting(session, SettingKey.min_deposit_usd, ledger_settings().min_deposit_usd)


async def exchange_rate(session: AsyncSession) -> Decimal:
    """Local-currency units per USD, at the precision deposits store it."""
    rate = await _numeric_setting(session, SettingKey.usd_to_inr_rate, ledger_settings().default_exchange_rate)
    return rate.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
