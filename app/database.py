# app/database.py
"""
Database connection, session management, table creation and the
transaction runner. Uses SQLAlchemy with PostgreSQL (SQLite for tests/dev).
All models are auto-imported here so create_tables() creates every table in one call.
"""

import random
import time

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings
from app.exceptions import ServiceError, TransactionError
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Raised when another transaction touched the same rows first
RETRYABLE_ERRORS = (StaleDataError, IntegrityError, OperationalError)

# PostgreSQL query_canceled (statement_timeout) and lock_not_available (lock_timeout)
TIMEOUT_PGCODES = {"57014", "55P03"}


def build_engine(url: str, lock_timeout: float = None):
    """
    Engine factory shared by the app and the test-suite.
    Every statement and lock wait is cut off by the driver after
    lock_timeout seconds (TRANSACTION_TIMEOUT_SECONDS by default).
    """
    seconds = settings.TRANSACTION_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": seconds},
            echo=False,
        )
    ms = int(seconds * 1000)
    return create_engine(
        url,
        connect_args={"options": f"-c statement_timeout={ms} -c lock_timeout={ms}"},
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.sequence_counter import SequenceCounter   # noqa
    from app.models.user import User                          # noqa
    from app.models.address import Address                    # noqa
    from app.models.rider_car import RiderCar                 # noqa
    from app.models.delivery import Delivery                  # noqa
    from app.models.assignment import DeliveryAssignment      # noqa
    from app.models.rider_location import RiderLocation       # noqa

    Base.metadata.create_all(bind=bind or engine)


def _is_timeout(error, elapsed: float, limit: float) -> bool:
    """A driver-side timeout, as opposed to a write conflict worth retrying."""
    if not isinstance(error, OperationalError):
        return False
    if getattr(error.orig, "pgcode", None) in TIMEOUT_PGCODES:
        return True
    # SQLite reports an expired busy timeout as a plain "database is locked"
    return elapsed >= limit


def _backoff(attempt: int) -> float:
    return random.uniform(0, min(0.01 * (2 ** attempt), 0.5))


def run_transaction(db, work, max_attempts: int = None, timeout: float = None):
    """
    Run work(db) as one atomic unit and commit it.

    Write conflicts (a versioned row changed underneath us, a unique key
    inserted concurrently, a busy database) roll the whole unit back and
    re-run it from scratch, so work() must do all of its reads inside the
    callable. A statement or lock wait cut off by the driver timeout is
    not retried and becomes TransactionError. Business errors roll back
    and propagate untouched.
    """
    attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS
    limit = settings.TRANSACTION_TIMEOUT_SECONDS if timeout is None else timeout
    last_error = None

    for attempt in range(1, attempts + 1):
        started = time.monotonic()
        # Reads inside work() must see committed state, not the identity map
        db.expire_all()
        try:
            result = work(db)
            elapsed = time.monotonic() - started
            # Backstop for time spent outside the driver, e.g. in Python code
            if elapsed > limit:
                raise TransactionError(f"transaction attempt exceeded {limit}s ({elapsed:.2f}s)")
            db.commit()
            return result
        except ServiceError:
            db.rollback()
            raise
        except RETRYABLE_ERRORS as e:
            db.rollback()
            elapsed = time.monotonic() - started
            if _is_timeout(e, elapsed, limit):
                logger.error(f"Transaction attempt {attempt} timed out after {elapsed:.2f}s: {e.orig}")
                raise TransactionError(f"transaction attempt exceeded {limit}s ({elapsed:.2f}s)") from e
            last_error = e
            logger.warning(f"Transaction conflict (attempt {attempt}/{attempts}): {type(e).__name__}")
            if attempt < attempts:
                time.sleep(_backoff(attempt))
        except Exception:
            db.rollback()
            raise

    logger.error(f"Transaction gave up after {attempts} attempts: {last_error}")
    raise TransactionError(f"transaction could not complete after {attempts} attempts")
