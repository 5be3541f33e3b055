# Overview: Service-layer operations for concurrency; encapsulates locking and retry policy.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class ConcurrencyConflictError(Exception):
    """Raised when a unit of work keeps losing to concurrent writers."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; use begin_write_transaction()
    to serialize writers there.
    """
    return query.with_for_update()


def begin_write_transaction() -> None:
    """
    Take the database write lock at the start of a unit of work.

    SQLite has no row locks, so BEGIN IMMEDIATE makes concurrent writers
    queue on the database lock instead of racing between read and write.
    Other dialects rely on lock_for_update().
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). The session is rolled back before every
    retry. Raises ConcurrencyConflictError once attempts are exhausted.
    """
    if attempts is None:
        attempts = current_app.config.get("ORDER_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("ORDER_RETRY_BACKOFF", 0.05)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            current_app.logger.warning(
                "Concurrent write conflict (attempt %d/%d): %s", attempt + 1, attempts, exc
            )
            if attempt >= attempts - 1:
                raise ConcurrencyConflictError(
                    "Could not complete the operation due to concurrent updates",
                    attempts=attempts,
                ) from exc
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
    raise ConcurrencyConflictError("No attempts were made", attempts=attempts)
