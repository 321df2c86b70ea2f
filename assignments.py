"""Teacher-assigned aptitude tests.

A teacher creates a test for one student; the student unlocks it with a
six-character password. A test moves from ``pending`` to ``completed``
exactly once.
"""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models import AssignedTest, TeacherStudent
from quiz import QuizResult, round_half_up

logger = logging.getLogger(__name__)

PASSWORD_LENGTH = 6
PASSWORD_ALPHABET = string.ascii_uppercase + string.digits
TEST_LIFETIME = timedelta(days=1)

INVALID_PASSWORD = "Invalid test password. Please check and try again."
ALREADY_COMPLETED = "This test has already been completed."
TEST_EXPIRED = "This test has expired. Please ask your teacher for a new one."


class AssignmentError(Exception):
    pass


class AssignmentNotFound(AssignmentError):
    pass


class AssignmentCompleted(AssignmentError):
    pass


class AssignmentExpired(AssignmentError):
    pass


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_password() -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(PASSWORD_LENGTH))


def unique_password(db: Session, attempts: int = 20) -> str:
    for _ in range(attempts):
        candidate = generate_password()
        if db.scalar(select(AssignedTest.id).where(AssignedTest.password == candidate)) is None:
            return candidate
    raise AssignmentError("Could not allocate a unique test password")


def upsert_student(db: Session, teacher_id: uuid.UUID, email: str, name: str, class_level: str | None) -> TeacherStudent:
    student = db.get(TeacherStudent, (teacher_id, email))
    if student is None:
        student = TeacherStudent(teacher_id=teacher_id, email=email, name=name, class_level=class_level)
        db.add(student)
    else:
        student.name = name
        student.class_level = class_level
    return student


def create_test(
    db: Session,
    teacher_id: str | uuid.UUID,
    form: dict[str, Any],
    questions: list[dict[str, Any]],
    now: datetime | None = None,
) -> AssignedTest:
    if not questions:
        raise AssignmentError("Cannot create a test without questions")
    now = now or datetime.now(timezone.utc)
    teacher_uuid = uuid.UUID(str(teacher_id))
    email = str(form["email"]).strip().lower()
    test_type = form.get("test_type") or "General"

    upsert_student(db, teacher_uuid, email, form["name"], form.get("class_level"))
    test = AssignedTest(
        teacher_id=teacher_uuid,
        student_email=email,
        student_name=form["name"],
        student_class=form.get("class_level"),
        password=unique_password(db),
        status="pending",
        test_type=test_type,
        job_details=(
            {"sector": form.get("sector"), "job": form.get("job"), "specialization": form.get("specialization")}
            if test_type == "Specific"
            else None
        ),
        questions=questions,
        created_at=now,
        expires_at=now + TEST_LIFETIME,
    )
    db.add(test)
    db.flush()
    logger.info("Created %s test %s for %s", test_type, test.id, email)
    return test


def assignment_link(app_url: str, test_id: uuid.UUID | str) -> str:
    return f"{app_url.rstrip('/')}/?page=test&test_id={test_id}"


def invitation_email(
    student_name: str,
    teacher_name: str | None,
    test_type: str,
    link: str,
    password: str,
) -> tuple[str, str]:
    subject = f"New Test Assigned: {test_type} Aptitude Test"
    body = (
        f"Dear {student_name},\n\n"
        f"Your Teacher {teacher_name or 'User'} has created one {test_type} Aptitude Test for you.\n\n"
        f"Please click the link below to start the test:\n{link}\n\n"
        f"Password: {password}\n\n"
        f"Good luck!\nRegards,\n{teacher_name or 'Teacher'}"
    )
    return subject, body


def get_test(db: Session, test_id: str | uuid.UUID) -> Optional[AssignedTest]:
    try:
        return db.get(AssignedTest, uuid.UUID(str(test_id)))
    except ValueError:
        return None


def find_test_for_login(db: Session, password: str, now: datetime | None = None) -> AssignedTest:
    """Resolve a student's password to a pending test or raise with the message to show."""
    now = now or datetime.now(timezone.utc)
    test = db.scalar(select(AssignedTest).where(AssignedTest.password == (password or "").strip().upper()))
    if test is None:
        raise AssignmentNotFound(INVALID_PASSWORD)
    if test.status == "completed":
        raise AssignmentCompleted(ALREADY_COMPLETED)
    if _utc(test.expires_at) < now:
        raise AssignmentExpired(TEST_EXPIRED)
    return test


def _analysis_values(analysis: dict[str, Any] | None, empty_text: str) -> dict[str, Any]:
    analysis = analysis or {}
    return {
        "analysis": analysis.get("analysis") or empty_text,
        "verdict": analysis.get("verdict") or "N/A",
        "swot": analysis.get("swot") or None,
        "teaching_plan": analysis.get("teachingPlan") or None,
        "suggestions": analysis.get("suggestions") or None,
    }


def complete_test(
    db: Session,
    test_id: str | uuid.UUID,
    answers: list[Any],
    result: QuizResult,
    analysis: dict[str, Any] | None,
    now: datetime | None = None,
) -> AssignedTest:
    now = now or datetime.now(timezone.utc)
    test_uuid = uuid.UUID(str(test_id))
    values = {
        "status": "completed",
        "completed_at": now,
        "answers": list(answers),
        "score": result.score,
        "iq_score": result.iq,
        **_analysis_values(analysis, "Analysis not available."),
    }
    outcome = db.execute(
        update(AssignedTest)
        .where(AssignedTest.id == test_uuid, AssignedTest.status == "pending")
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if outcome.rowcount != 1:
        raise AssignmentCompleted(ALREADY_COMPLETED)

    test = db.get(AssignedTest, test_uuid)
    db.refresh(test)
    student = db.get(TeacherStudent, (test.teacher_id, test.student_email))
    if student is not None:
        student.iq = result.iq
        student.last_test_date = now
    else:
        logger.warning("No roster entry for %s under teacher %s", test.student_email, test.teacher_id)
    db.flush()
    logger.info("Test %s completed with IQ estimate %s", test.id, result.iq)
    return test


def store_analysis(db: Session, test_id: str | uuid.UUID, analysis: dict[str, Any]) -> AssignedTest:
    test = get_test(db, test_id)
    if test is None:
        raise AssignmentNotFound(INVALID_PASSWORD)
    for name, value in _analysis_values(analysis, "Analysis completed.").items():
        setattr(test, name, value)
    db.flush()
    return test


def roster(db: Session, teacher_id: str | uuid.UUID) -> list[TeacherStudent]:
    return list(
        db.scalars(
            select(TeacherStudent)
            .where(TeacherStudent.teacher_id == uuid.UUID(str(teacher_id)))
            .order_by(TeacherStudent.name)
        ).all()
    )


def assignments_for_teacher(db: Session, teacher_id: str | uuid.UUID) -> list[AssignedTest]:
    return list(
        db.scalars(
            select(AssignedTest)
            .where(AssignedTest.teacher_id == uuid.UUID(str(teacher_id)))
            .order_by(AssignedTest.created_at.desc())
        ).all()
    )


def latest_completed(tests: Iterable[AssignedTest], email: str) -> Optional[AssignedTest]:
    completed = [t for t in tests if t.student_email == email and t.status == "completed"]
    if not completed:
        return None
    return max(completed, key=lambda t: _utc(t.created_at))


def pending_for(tests: Iterable[AssignedTest], email: str) -> Optional[AssignedTest]:
    for test in tests:
        if test.student_email == email and test.status == "pending":
            return test
    return None


def average_iq(students: Iterable[TeacherStudent]) -> Optional[int]:
    scores = [s.iq for s in students if s.iq]
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores))
