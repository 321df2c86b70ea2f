from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from auth import AccountError, get_user_by_id
from mailer import Mailer, MailerError
from models import AssignedTest, AuditLog, NoteReview, PaymentOrder, TeacherStudent, User

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 200


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(user: User, now: datetime | None = None) -> bool:
    """A lapsed paid plan, or a renewal date already behind us."""
    now = now or datetime.now(timezone.utc)
    if user.renewal_date is not None and _utc(user.renewal_date) < now:
        return True
    return user.subscription_model != "basic" and not user.is_subscribed


def expired_users(db: Session, now: datetime | None = None) -> list[User]:
    users = db.scalars(select(User).where(User.email.is_not(None)).order_by(User.created_at)).all()
    return [user for user in users if is_expired(user, now)]


def set_renewal_date(db: Session, user_id: str | uuid.UUID, renewal_date: datetime | None) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise AccountError("User not found.")
    user.renewal_date = renewal_date
    return user


def send_renewal_emails(mailer: Mailer, users: Iterable[User]) -> int:
    """Email every user a renewal reminder; returns how many were sent.

    A failed recipient is logged and skipped so one bad address does not
    stop the batch.
    """
    if not mailer.is_configured():
        raise MailerError("Email is not configured.")
    sent = 0
    for user in users:
        try:
            mailer.send_renewal(user.email, user.name or "", user.subscription_model)
        except MailerError:
            logger.warning("Renewal reminder to %s failed", user.email)
            continue
        sent += 1
    logger.info("Sent %s renewal reminders", sent)
    return sent


def delete_user(db: Session, user_id: str | uuid.UUID) -> None:
    """Remove an account and the rows that only make sense with it.

    Audit entries and note submissions are kept without the user link.
    """
    user = get_user_by_id(db, user_id)
    if user is None:
        raise AccountError("User not found.")
    db.execute(update(AuditLog).where(AuditLog.user_id == user.id).values(user_id=None))
    db.execute(update(NoteReview).where(NoteReview.teacher_id == user.id).values(teacher_id=None))
    db.execute(delete(AssignedTest).where(AssignedTest.teacher_id == user.id))
    db.execute(delete(TeacherStudent).where(TeacherStudent.teacher_id == user.id))
    db.execute(delete(PaymentOrder).where(PaymentOrder.user_id == user.id))
    db.delete(user)
    db.flush()
    logger.info("Deleted user %s", user_id)


def user_activity_logs(db: Session, user_id: str | uuid.UUID, limit: int = ACTIVITY_LIMIT) -> list[AuditLog]:
    query = (
        select(AuditLog)
        .where(AuditLog.user_id == uuid.UUID(str(user_id)))
        .order_by(AuditLog.created_at.desc())
        .limit(limit)
    )
    return list(db.scalars(query).all())
