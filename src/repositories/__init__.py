"""Database repository helpers."""

from repositories.schema import ensure_settlement_schema
from repositories.wallets import debit_if_sufficient, get_balance

__all__ = [
    "debit_if_sufficient",
    "ensure_settlement_schema",
    "get_balance",
]
