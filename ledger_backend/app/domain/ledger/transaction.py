"""
Atomic unit of work for ledger mutations.

Wraps ``Database.unit_of_work`` so that raw SQLAlchemy errors leave as
typed application errors and every rollback is logged once.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.core.exceptions import AppException, classify_storage_error
from ledger_backend.app.db.session import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(database: Database, operation: str, **context) -> AsyncIterator[AsyncSession]:
    """
    Run a block as one all-or-nothing transaction.

    Usage:
        async with atomic(database, "record_payment", account_id=7) as session:
            ...

    Raises:
        AppException: raised inside the block, re-raised after rollback.
        ConstraintViolationError / StorageFailureError: classified from
            any SQLAlchemy error, including one raised at commit.
    """
    try:
        async with database.unit_of_work() as session:
            yield session
    except AppException as exc:
        logger.warning(
            "%s rolled back: %s",
            operation,
            exc.error_code,
            extra={"operation": operation, "error_code": exc.error_code, **context}
        )
        raise
    except SQLAlchemyError as exc:
        error = classify_storage_error(exc)
        logger.warning(
            "%s rolled back: %s (%s)",
            operation,
            error.error_code,
            error.details.get("reason"),
            extra={"operation": operation, "error_code": error.error_code, **context}
        )
        raise error from exc
