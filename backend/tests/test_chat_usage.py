"""
Tests for the per-user chat usage limiter.
"""

import pytest
import threading
from datetime import datetime, timedelta
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from insightstream.database import init_db
from insightstream.models.chat_usage import ChatUsage
from insightstream.services import chat_usage_service


@pytest.mark.unit
class TestCheckAndIncrement:
    """Test sequential limiter behaviour."""

    def test_first_message_creates_row(self, test_db: Session):
        decision = chat_usage_service.check_and_increment(test_db, "u1", limit=3)

        assert decision.allowed
        assert decision.messages_remaining == 2
        assert not decision.limit_reached
        assert decision.daily_limit == 3
        assert test_db.query(ChatUsage).filter(ChatUsage.user_id == "u1").one().message_count == 1

    def test_allows_exactly_limit(self, test_db: Session):
        decisions = [chat_usage_service.check_and_increment(test_db, "u1", limit=3) for _ in range(5)]

        assert [d.allowed for d in decisions] == [True, True, True, False, False]
        assert decisions[2].limit_reached
        assert decisions[2].messages_remaining == 0
        assert decisions[3].limit_reached
        assert decisions[3].messages_remaining == 0

        test_db.expire_all()
        assert test_db.query(ChatUsage).filter(ChatUsage.user_id == "u1").one().message_count == 3

    def test_expired_window_resets(self, test_db: Session):
        test_db.add(ChatUsage(
            user_id="u1",
            message_count=10,
            limit_start_date=datetime.utcnow() - timedelta(hours=25)
        ))
        test_db.commit()

        decision = chat_usage_service.check_and_increment(test_db, "u1", limit=10, window_hours=24)

        assert decision.allowed
        assert decision.messages_remaining == 9
        test_db.expire_all()
        usage = test_db.query(ChatUsage).filter(ChatUsage.user_id == "u1").one()
        assert usage.message_count == 1
        assert usage.limit_start_date > datetime.utcnow() - timedelta(minutes=1)

    def test_active_window_not_reset(self, test_db: Session):
        test_db.add(ChatUsage(
            user_id="u1",
            message_count=10,
            limit_start_date=datetime.utcnow() - timedelta(hours=23)
        ))
        test_db.commit()

        decision = chat_usage_service.check_and_increment(test_db, "u1", limit=10, window_hours=24)

        assert not decision.allowed
        assert decision.limit_reached

    def test_users_are_independent(self, test_db: Session):
        for _ in range(2):
            chat_usage_service.check_and_increment(test_db, "u1", limit=2)

        assert not chat_usage_service.check_and_increment(test_db, "u1", limit=2).allowed
        assert chat_usage_service.check_and_increment(test_db, "u2", limit=2).allowed

    def test_storage_error_denies(self, test_db: Session):
        with patch.object(test_db, "query", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
            decision = chat_usage_service.check_and_increment(test_db, "u1", limit=10)

        assert not decision.allowed
        assert decision.messages_remaining == 0
        assert decision.limit_reached
        assert decision.error


@pytest.mark.unit
class TestGetStatus:
    """Test usage status reads."""

    def test_missing_row_is_full_allowance(self, test_db: Session):
        status = chat_usage_service.get_status(test_db, "u1", limit=10)
        assert status.messages_remaining == 10
        assert status.daily_limit == 10

    def test_does_not_increment(self, test_db: Session):
        chat_usage_service.check_and_increment(test_db, "u1", limit=10)

        assert chat_usage_service.get_status(test_db, "u1", limit=10).messages_remaining == 9
        assert chat_usage_service.get_status(test_db, "u1", limit=10).messages_remaining == 9

    def test_expired_window_counts_as_zero(self, test_db: Session):
        test_db.add(ChatUsage(
            user_id="u1",
            message_count=7,
            limit_start_date=datetime.utcnow() - timedelta(days=2)
        ))
        test_db.commit()

        assert chat_usage_service.get_status(test_db, "u1", limit=10).messages_remaining == 10


@pytest.mark.integration
def test_concurrent_increments_never_exceed_limit(tmp_path):
    """Many threads racing on one user must not push the counter past the limit."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'chat_usage.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(bind=engine)
    SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    limit = 5
    results = []
    results_lock = threading.Lock()
    start = threading.Barrier(12)

    def worker():
        db = SessionFactory()
        try:
            start.wait()
            decision = chat_usage_service.check_and_increment(db, "racer", limit=limit)
            with results_lock:
                results.append(decision)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(12)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    allowed = sum(1 for decision in results if decision.allowed)

    db = SessionFactory()
    try:
        stored = db.query(ChatUsage).filter(ChatUsage.user_id == "racer").one().message_count
    finally:
        db.close()
        engine.dispose()

    assert len(results) == 12
    assert allowed <= limit
    assert stored == allowed
    assert stored <= limit
