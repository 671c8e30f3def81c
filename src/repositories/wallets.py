"""Wallet primitives on the users table."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models import User


def debit_if_sufficient(session: Session, user_id: int, amount: Decimal) -> bool:
    """Atomically debit ``amount`` iff the balance covers it.

    The balance check and the decrement are a single conditional UPDATE, so two
    concurrent debits can never both pass a borderline balance.
    """
    if amount < 0:
        raise ValueError(f"debit amount must be >= 0, got {amount}")
    result = session.execute(
        update(User)
        .where(User.id == user_id, User.balance >= amount)
        .values(balance=User.balance - amount)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0) == 1


def get_balance(session: Session, user_id: int) -> Decimal | None:
    balance = session.scalar(select(User.balance).where(User.id == user_id))
    return None if balance is None else Decimal(balance)
