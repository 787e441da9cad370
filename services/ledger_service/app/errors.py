"""Domain errors raised by the ledger workflows.

Services raise these and never return error dicts; the app maps each class to
an HTTP status in ``register_error_handlers``. Every error raised inside a
``session.begin()`` block rolls the whole unit of work back.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import status


class LedgerError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "ledger_error"
    action: str | None = None

    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(detail)
        self.detail = detail
        self.context = context


class NotFound(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class InvalidState(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    error = "invalid_state"


class ValidationError(LedgerError):
    status_code = 422
    error = "validation_error"


class ConcurrentUpdate(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    error = "concurrent_update"
    action = "retry"


class InsufficientFunds(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    error = "insufficient_funds"
    action = "deposit_funds"

    def __init__(self, balance: Decimal, required: Decimal) -> None:
        super().__init__(
            f"Insufficient balance: {balance} available, {required} required. "
            "Deposit funds to your wallet or pay manually.",
            balance=str(balance),
            required=str(required),
            shortfall=str(required - balance),
        )
        self.balance = balance
        self.required = required
