"""
Unit of work for multi-entity writes.

Every manager operation that touches a vehicle and a dependent record runs
its reads and writes through `with_transaction`, so the two either commit
together or not at all.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.exceptions import AppException, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_transaction(
    db: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]]
) -> T:
    """
    Run `work` and commit; roll back on any failure.

    Domain errors (validation, not found, conflict) propagate unchanged.
    Store failures are wrapped in StorageError. No retries are attempted.

    Args:
        db: Session the work operates on
        work: Coroutine function receiving the session

    Returns:
        Whatever `work` returned
    """
    try:
        result = await work(db)
        await db.commit()
    except AppException:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Transaction rolled back after storage failure")
        raise StorageError(details={"reason": type(exc).__name__}) from exc

    return result
