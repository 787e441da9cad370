from . import deposits, orders, settings_store, users, wallet

__all__ = ["deposits", "orders", "settings_store", "users", "wallet"]
