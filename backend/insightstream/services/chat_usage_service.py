"""Per-user limit on AI chat messages within a rolling window."""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime, timedelta
from typing import Optional
import logging

from insightstream.config import settings
from insightstream.models.chat_usage import ChatUsage
from insightstream.models.ai_schemas import ChatUsageDecision, ChatUsageStatus

logger = logging.getLogger(__name__)


def _ensure_row(db: Session, user_id: str):
    """Create the usage row if missing. A concurrent insert wins harmlessly."""
    exists = db.query(ChatUsage.user_id).filter(ChatUsage.user_id == user_id).first()
    if exists is not None:
        return

    db.add(ChatUsage(user_id=user_id, message_count=0, limit_start_date=datetime.utcnow()))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()


def check_and_increment(
    db: Session,
    user_id: str,
    limit: Optional[int] = None,
    window_hours: Optional[int] = None
) -> ChatUsageDecision:
    """
    Count one chat message against the user's allowance if any is left.

    The window reset and the increment run in a single transaction. The
    increment is a conditional UPDATE, so concurrent callers can never push
    message_count past the limit.

    Returns:
        ChatUsageDecision; on storage errors the message is denied
    """
    limit = limit if limit is not None else settings.CHAT_DAILY_LIMIT
    window_hours = window_hours if window_hours is not None else settings.CHAT_WINDOW_HOURS

    try:
        _ensure_row(db, user_id)

        now = datetime.utcnow()
        window_cutoff = now - timedelta(hours=window_hours)

        db.query(ChatUsage).filter(
            ChatUsage.user_id == user_id,
            ChatUsage.limit_start_date < window_cutoff
        ).update(
            {ChatUsage.message_count: 0, ChatUsage.limit_start_date: now},
            synchronize_session=False
        )

        incremented = db.query(ChatUsage).filter(
            ChatUsage.user_id == user_id,
            ChatUsage.message_count < limit
        ).update(
            {ChatUsage.message_count: ChatUsage.message_count + 1},
            synchronize_session=False
        )

        count = db.query(ChatUsage.message_count).filter(ChatUsage.user_id == user_id).scalar() or 0
        db.commit()

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Chat usage check failed for user {user_id}: {e}")
        return ChatUsageDecision(
            allowed=False,
            messages_remaining=0,
            limit_reached=True,
            daily_limit=limit,
            error="Could not verify chat usage. Please try again later."
        )

    remaining = max(limit - count, 0)
    if incremented:
        return ChatUsageDecision(
            allowed=True,
            messages_remaining=remaining,
            limit_reached=remaining == 0,
            daily_limit=limit
        )

    logger.info(f"User {user_id} reached the chat limit of {limit}")
    return ChatUsageDecision(
        allowed=False,
        messages_remaining=0,
        limit_reached=True,
        daily_limit=limit
    )


def get_status(
    db: Session,
    user_id: str,
    limit: Optional[int] = None,
    window_hours: Optional[int] = None
) -> ChatUsageStatus:
    """Remaining allowance without counting a message."""
    limit = limit if limit is not None else settings.CHAT_DAILY_LIMIT
    window_hours = window_hours if window_hours is not None else settings.CHAT_WINDOW_HOURS

    try:
        usage = db.query(ChatUsage).filter(ChatUsage.user_id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Chat usage status failed for user {user_id}: {e}")
        return ChatUsageStatus(messages_remaining=0, daily_limit=limit, error="Could not load chat usage.")

    if usage is None:
        return ChatUsageStatus(messages_remaining=limit, daily_limit=limit)

    if usage.limit_start_date < datetime.utcnow() - timedelta(hours=window_hours):
        return ChatUsageStatus(messages_remaining=limit, daily_limit=limit)

    return ChatUsageStatus(messages_remaining=max(limit - usage.message_count, 0), daily_limit=limit)
