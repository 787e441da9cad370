"""Prometheus metrics for wallet, deposit and order flows."""

from __future__ import annotations

from prometheus_client import Counter

wallet_credit_total = Counter(
    "ledger_wallet_credit_total",
    "Number of successful wallet credit operations",
    ["type"],
)
wallet_debit_total = Counter(
    "ledger_wallet_debit_total",
    "Number of successful wallet debit operations",
    ["type"],
)
wallet_insufficient_funds_total = Counter(
    "ledger_wallet_insufficient_funds_total",
    "Number of debit attempts failed due to insufficient funds",
)
wallet_concurrent_update_total = Counter(
    "ledger_wallet_concurrent_update_total",
    "Balance writes rejected because another writer changed the wallet first",
)

deposit_submitted_total = Counter(
    "ledger_deposit_submitted_total",
    "Deposit requests submitted grouped by payment method",
    ["method"],
)
deposit_decision_total = Counter(
    "ledger_deposit_decision_total",
    "Admin deposit decisions grouped by outcome",
    ["outcome"],
)

order_placed_total = Counter(
    "ledger_order_placed_total",
    "Orders created grouped by payment mode",
    ["payment_mode"],
)
order_status_change_total = Counter(
    "ledger_order_status_change_total",
    "Admin order status changes grouped by target status",
    ["status"],
)
order_refund_total = Counter(
    "ledger_order_refund_total",
    "Wallet refunds issued for rejected orders",
)
