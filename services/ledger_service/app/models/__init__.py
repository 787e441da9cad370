from .user import User
from .wallet import Wallet
from .transaction import WalletTransaction, TransactionType
from .deposit import Deposit, DepositStatus, PaymentMethod
from .order import Order, OrderStatus, PaymentMode, ORDER_TRANSITIONS
from .setting import Setting, SettingKey

__all__ = [
    "User",
    "Wallet",
    "WalletTransaction",
    "TransactionType",
    "Deposit",
    "DepositStatus",
    "PaymentMethod",
    "Order",
    "OrderStatus",
    "PaymentMode",
    "ORDER_TRANSITIONS",
    "Setting",
    "SettingKey",
]
