# app/utils/transactions.py
"""
Transaction runner with transparent optimistic retry.

Every mutation of shared per-business state (queue, appointments) goes
through TransactionRunner.run(). The unit of work receives a Session that is
already inside a transaction; it commits when the callable returns and rolls
back on any exception. Conflicts reported by the database are retried with a
fresh session; domain errors propagate untouched.
"""
import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from app.config.settings import get_settings
from app.core.exceptions import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE codes: serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}
SQLITE_CONFLICT_MARKERS = ("database is locked", "database is busy", "database table is locked")


def is_conflict_error(exc: BaseException) -> bool:
    """True when the database rejected the transaction because of a concurrent one."""
    if not isinstance(exc, DBAPIError):
        return False

    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True

    if isinstance(exc, OperationalError):
        message = str(orig or exc).lower()
        return any(marker in message for marker in SQLITE_CONFLICT_MARKERS)

    return False


class TransactionRunner:
    """Runs units of work in a transaction, retrying on conflicts"""

    def __init__(
            self,
            session_factory: sessionmaker,
            max_attempts: Optional[int] = None,
            backoff_seconds: Optional[float] = None
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.max_attempts = max_attempts or settings.TX_MAX_ATTEMPTS
        self.backoff_seconds = (
            settings.TX_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )

    def run(
            self,
            work: Callable[[Session], T],
            retry_on: Tuple[Type[BaseException], ...] = ()
    ) -> T:
        """
        Execute `work(session)` atomically.

        Args:
            work: callable receiving the transactional session
            retry_on: extra exception types treated as conflicts, e.g.
                IntegrityError for inserts keyed by a client-supplied id

        Raises:
            TransientError: every attempt hit a conflict
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            session = self.session_factory()
            try:
                with session.begin():
                    return work(session)
            except Exception as exc:
                if not (is_conflict_error(exc) or (retry_on and isinstance(exc, retry_on))):
                    raise
                last_error = exc
                logger.warning(
                    f"Transaction conflict (attempt {attempt}/{self.max_attempts}): "
                    f"{type(exc).__name__}"
                )
            finally:
                session.close()

            if attempt < self.max_attempts and self.backoff_seconds:
                time.sleep(self.backoff_seconds * attempt)

        logger.error(f"Transaction failed after {self.max_attempts} attempts: {last_error}")
        raise TransientError() from last_error
