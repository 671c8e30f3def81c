"""Helpers shared by settlement operations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import InternalError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


@contextmanager
def persistence_boundary(operation: str, **context: object) -> Iterator[None]:
    """Log unexpected persistence failures in full and re-raise them as opaque InternalError."""
    try:
        yield
    except SQLAlchemyError as exc:
        details = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        logger.exception("operation=%s failed %s", operation, details)
        raise InternalError() from exc


__all__ = ["Clock", "SessionFactory", "persistence_boundary", "utc_now"]
