"""Bounded-retry transactions.

Every write path runs its body through :func:`run_in_transaction`. The body
is an async callable that performs all of its reads and writes on the given
session; it is re-run from scratch after a transient failure, so it must not
hold on to ORM objects created by a previous attempt.
"""

from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import config
from core.exceptions.base import TransientStorageException
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def run_in_transaction(
    db_session: AsyncSession,
    callback: Callable[[], Awaitable[T]],
    attempts: Optional[int] = None,
    description: str = "transaction",
) -> T:
    """Run ``callback`` and commit, retrying on transient storage conflicts.

    Args:
        db_session: Session the callback works on
        callback: Async body of the transaction
        attempts: Maximum number of tries (defaults to DB_TRANSACTION_ATTEMPTS)
        description: Short label used in log messages

    Returns:
        Whatever the callback returned on the successful attempt

    Raises:
        TransientStorageException: every attempt hit a transient failure
    """
    max_attempts = attempts or config.DB_TRANSACTION_ATTEMPTS
    last_error: Optional[OperationalError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            result = await callback()
            await db_session.commit()
            return result
        except OperationalError as e:
            await db_session.rollback()
            last_error = e
            logger.warning(
                f"Transient storage failure in {description} "
                f"(attempt {attempt}/{max_attempts}): {e.orig!r}"
            )
        except Exception:
            await db_session.rollback()
            raise

    logger.error(
        f"{description} failed after {max_attempts} attempts: {last_error!r}"
    )
    raise TransientStorageException() from last_error
