"""Schema bootstrap for settlement tables."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from models import Base


def ensure_settlement_schema(engine: Engine) -> None:
    """Create settlement tables and indexes if they do not exist."""
    with engine.begin() as connection:
        Base.metadata.create_all(bind=connection, checkfirst=True)
