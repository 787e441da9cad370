from .wallet import (
    BalanceResponse,
    TransactionResponse,
    TransactionHistoryResponse,
    LedgerCheckResponse,
)
from .deposit import AdminDepositResponse, DepositCreate, DepositDecision, DepositResponse
from .order import AdminOrderResponse, OrderCreate, OrderStatusUpdate, OrderResponse
from .user import UserCreate, UserResponse
from .setting import SettingUpdate, SettingResponse

__all__ = [
    "BalanceResponse",
    "TransactionResponse",
    "TransactionHistoryResponse",
    "LedgerCheckResponse",
    "DepositCreate",
    "DepositDecision",
    "DepositResponse",
    "AdminDepositResponse",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
    "AdminOrderResponse",
    "UserCreate",
    "UserResponse",
    "SettingUpdate",
    "SettingResponse",
]
