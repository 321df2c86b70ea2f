from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from admin import delete_user, expired_users, is_expired, send_renewal_emails, set_renewal_date, user_activity_logs
from auth import AccountError, get_user_by_id, register_user, set_subscription
from mailer import MailerError
from models import AssignedTest, AuditLog, NoteReview, PaymentOrder, TeacherStudent
from teacher_notes import submit_note

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


class FakeMailer:
    def __init__(self, configured: bool = True, failing=()):
        self.configured = configured
        self.failing = set(failing)
        self.sent = []

    def is_configured(self) -> bool:
        return self.configured

    def send_renewal(self, email, name, plan):
        if email in self.failing:
            raise MailerError("mailbox unavailable")
        self.sent.append((email, name, plan))


def test_expired_by_renewal_date_or_lapsed_plan(db) -> None:
    basic = register_user(db, "Basic", "basic@example.com", "secret1")
    lapsed = register_user(db, "Lapsed", "lapsed@example.com", "secret1", role="parent")
    set_subscription(db, lapsed.id, "parent", is_subscribed=False)
    due = register_user(db, "Due", "due@example.com", "secret1", role="teacher")
    set_subscription(db, due.id, "teacher")
    set_renewal_date(db, due.id, NOW - timedelta(days=1))
    current = register_user(db, "Current", "current@example.com", "secret1")
    set_subscription(db, current.id, "student")
    set_renewal_date(db, current.id, NOW + timedelta(days=30))
    db.flush()

    assert {u.email for u in expired_users(db, NOW)} == {"lapsed@example.com", "due@example.com"}
    assert not is_expired(basic, NOW)

    current.renewal_date = datetime(2026, 2, 1)
    assert is_expired(current, NOW)

    with pytest.raises(AccountError):
        set_renewal_date(db, "00000000-0000-0000-0000-000000000000", None)


def test_renewal_emails_skip_failed_recipients(db) -> None:
    asha = register_user(db, "Asha", "asha@example.com", "secret1", role="parent")
    bo = register_user(db, "Bo", "bo@example.com", "secret1")
    mailer = FakeMailer(failing={"bo@example.com"})

    assert send_renewal_emails(mailer, [asha, bo]) == 1
    assert mailer.sent == [("asha@example.com", "Asha", "basic")]

    with pytest.raises(MailerError, match="not configured"):
        send_renewal_emails(FakeMailer(configured=False), [asha])


def test_delete_user_removes_owned_rows_and_keeps_history(db) -> None:
    teacher = register_user(db, "Tara", "tara@example.com", "secret1", role="teacher")
    other = register_user(db, "Omar", "omar@example.com", "secret1", role="teacher")
    db.add_all(
        [
            AuditLog(user_id=teacher.id, action="login", details_json={}),
            TeacherStudent(teacher_id=teacher.id, email="kid@example.com", name="Kid"),
            TeacherStudent(teacher_id=other.id, email="kid@example.com", name="Kid"),
            AssignedTest(
                teacher_id=teacher.id,
                student_email="kid@example.com",
                student_name="Kid",
                password="ABC123",
                questions=[],
                expires_at=NOW,
            ),
            PaymentOrder(order_id="order_1", user_id=teacher.id, plan="Teacher", amount=199),
        ]
    )
    path_data = {"path": "classes/class-8/subjects/science/chapters/cells/topics/cell", "class": "Class 8",
                 "subject": "Science", "chapter": "Cells", "topic": "Cell"}
    submit_note(db, teacher.id, teacher.email, path_data, "Cells", "https://notes.test/cells.pdf")
    db.flush()
    teacher_id = teacher.id

    delete_user(db, teacher_id)

    assert get_user_by_id(db, teacher_id) is None
    assert db.scalars(select(TeacherStudent.teacher_id)).all() == [other.id]
    assert db.scalars(select(AssignedTest.id)).all() == []
    assert db.scalars(select(PaymentOrder.order_id)).all() == []
    assert db.execute(select(AuditLog.action, AuditLog.user_id)).all() == [("login", None)]
    assert db.execute(select(NoteReview.teacher_email, NoteReview.teacher_id)).all() == [("tara@example.com", None)]

    with pytest.raises(AccountError):
        delete_user(db, teacher_id)


def test_activity_logs_are_newest_first_and_limited(db) -> None:
    user = register_user(db, "Neha", "neha@example.com", "secret1")
    other = register_user(db, "Omar", "omar@example.com", "secret1")
    for day in range(1, 5):
        db.add(
            AuditLog(
                user_id=user.id,
                action=f"event_{day}",
                details_json={},
                created_at=datetime(2026, 1, day, tzinfo=timezone.utc),
            )
        )
    db.add(AuditLog(user_id=other.id, action="other", details_json={}))
    db.flush()

    assert [e.action for e in user_activity_logs(db, user.id)] == ["event_4", "event_3", "event_2", "event_1"]
    assert [e.action for e in user_activity_logs(db, str(user.id), limit=2)] == ["event_4", "event_3"]
