import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.errors import ErrorReason, FriendshipError, TransientError
from app.database.database import SessionLocal

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
CONTENTION_SQLSTATES = {"40001", "40P01"}
UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE"}


def _sqlstate(exc: SQLAlchemyError):
    return getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == UNIQUE_VIOLATION:
        return True
    if getattr(exc.orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


def is_contention(exc: SQLAlchemyError) -> bool:
    """
    True when the failure comes from a concurrent writer rather than a broken backend
    or bad data: a duplicate key, a stale version row, a serialization failure or a
    deadlock. Foreign key and check violations are not contention.
    """
    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, IntegrityError):
        return is_unique_violation(exc)
    if isinstance(exc, OperationalError):
        return _sqlstate(exc) in CONTENTION_SQLSTATES
    return False


class TransactionalStore:
    """
    Point reads and all-or-nothing transactions over the friend graph tables.

    Each call opens its own session, so one store may be shared between threads.
    """

    def __init__(
            self,
            session_factory: sessionmaker = SessionLocal,
            max_attempts: int = settings.TRANSACTION_MAX_ATTEMPTS,
            retry_backoff: float = settings.TRANSACTION_RETRY_BACKOFF,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            raise TransientError(ErrorReason.STORE_UNAVAILABLE, str(exc)) from exc
        finally:
            db.close()

    def run_transaction(self, fn: Callable[[Session], T]) -> T:
        """
        Runs ``fn(tx)`` inside one transaction and commits it.

        Contention is retried with a fresh transaction, so ``fn`` must redo its reads
        on every attempt. Any other database failure is raised as TransientError.
        """
        for attempt in range(1, self.max_attempts + 1):
            db = self.session_factory()
            try:
                with db.begin():
                    return fn(db)
            except FriendshipError:
                raise
            except SQLAlchemyError as exc:
                if not is_contention(exc):
                    raise TransientError(ErrorReason.STORE_UNAVAILABLE, str(exc)) from exc
                if attempt == self.max_attempts:
                    logger.error(f"Transaction gave up after {attempt} contended attempts: {exc}")
                    raise TransientError(ErrorReason.CONTENTION_EXHAUSTED) from exc
                logger.warning(f"Transaction attempt {attempt} contended, retrying: {exc}")
                time.sleep(self.retry_backoff * attempt)
            finally:
                db.close()
        raise AssertionError("unreachable")


default_store = TransactionalStore()


def get_transactional_store() -> TransactionalStore:
    return default_store
