"""
Retry and row-locking helper tests.

Verifies:
- optimistic-lock and lock-timeout errors are retried after a rollback
- backoff doubles between attempts
- the last error is re-raised once attempts run out
- other errors are not retried
"""

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from stockroom.extensions import db
from stockroom.models import Cart
from stockroom.services import concurrency


@pytest.fixture
def rollbacks(app, monkeypatch):
    calls = []
    real_rollback = db.session.rollback

    def _rollback():
        calls.append(1)
        real_rollback()

    monkeypatch.setattr(db.session, "rollback", _rollback)
    return calls


@pytest.fixture
def sleeps(monkeypatch):
    delays = []
    monkeypatch.setattr(concurrency.time, "sleep", delays.append)
    return delays


def _failing(times: int, error: Exception):
    calls = []

    def _op():
        calls.append(1)
        if len(calls) <= times:
            raise error
        return "done"

    return _op, calls


def test_stale_write_retried_then_succeeds(rollbacks, sleeps):
    op, calls = _failing(1, StaleDataError("version mismatch"))

    assert concurrency.run_with_retry(op) == "done"
    assert len(calls) == 2
    assert len(rollbacks) == 1
    assert sleeps == [0.1]


def test_locked_database_retried(rollbacks, sleeps):
    op, calls = _failing(2, OperationalError("UPDATE carts", {}, Exception("database is locked")))

    assert concurrency.run_with_retry(op) == "done"
    assert len(calls) == 3
    assert len(rollbacks) == 2
    assert sleeps == [0.1, 0.2]


def test_gives_up_after_last_attempt(rollbacks, sleeps):
    error = StaleDataError("version mismatch")
    op, calls = _failing(10, error)

    with pytest.raises(StaleDataError) as exc:
        concurrency.run_with_retry(op, attempts=3)

    assert exc.value is error
    assert len(calls) == 3
    # Every failed attempt rolls back; no sleep after the last one
    assert len(rollbacks) == 3
    assert sleeps == [0.1, 0.2]


def test_other_errors_not_retried(rollbacks, sleeps):
    op, calls = _failing(1, ValueError("bad input"))

    with pytest.raises(ValueError):
        concurrency.run_with_retry(op)

    assert len(calls) == 1
    assert rollbacks == []
    assert sleeps == []


def test_lock_for_update_adds_for_update(app):
    query = concurrency.lock_for_update(db.session.query(Cart).filter(Cart.id == 1))
    sql = str(query.statement.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" in sql
