# Overview: Service-layer helpers for atomic commits and bounded read retries.

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..errors import PersistenceError, PosError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute an idempotent read with retry on transient store failures.

    Retries on OperationalError (locks, dropped connections) with exponential
    backoff, then raises PersistenceError. Never wrap a commit sequence in
    this: a retried write could double-decrement stock.
    """
    if attempts is None:
        attempts = current_app.config.get("LOOKUP_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("LOOKUP_RETRY_BACKOFF_SECONDS", 0.1)

    for attempt in range(attempts):
        try:
            return func()
        except OperationalError as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise PersistenceError("Store unavailable, please try again") from exc
            current_app.logger.warning(
                "Transient store error on read (attempt %s/%s): %s", attempt + 1, attempts, exc
            )
            time.sleep(backoff_base * (2 ** attempt))
    raise PersistenceError("Store unavailable, please try again")


@contextmanager
def unit_of_work():
    """
    Group persistence operations so they all commit or none do.

    Yields the session; commits when the block exits cleanly and rolls back
    on any exception. SQLAlchemy failures surface as PersistenceError.
    """
    try:
        yield db.session
        db.session.commit()
    except PosError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError("Store rejected the transaction") from exc
    except Exception:
        db.session.rollback()
        raise
