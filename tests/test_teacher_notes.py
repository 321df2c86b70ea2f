from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from auth import register_user
from models import NotesNode
from notes import load_tree, notes_for
from seed import SAMPLE_CATALOGUE
from teacher_notes import (
    APPROVED,
    PENDING,
    REJECTED,
    NoteReviewError,
    approve_review,
    my_uploads,
    pending_reviews,
    reject_review,
    submit_note,
)

STORAGE_TOPIC = "classes/class-8/subjects/science/chapters/crop-production-and-management/topics/storage-of-harvest"
STORAGE = {
    "path": STORAGE_TOPIC,
    "class": "Class 8",
    "stream": "",
    "subject": "Science",
    "chapter": "Crop Production and Management",
    "topic": "Storage of Harvest",
}


def make_teacher(db, email="tara@example.com"):
    return register_user(db, "Tara", email, "secret1", role="teacher")


def test_submit_needs_a_topic_and_a_link(db) -> None:
    teacher = make_teacher(db)
    with pytest.raises(NoteReviewError, match="topic"):
        submit_note(db, teacher.id, teacher.email, {**STORAGE, "chapter": ""}, "Notes", "https://notes.test/a.pdf")
    with pytest.raises(NoteReviewError, match="link"):
        submit_note(db, teacher.id, teacher.email, STORAGE, "Notes", "notes.test/a.pdf")

    review = submit_note(db, teacher.id, teacher.email, STORAGE, "  ", " https://notes.test/files/storage.pdf ")
    assert review.status == PENDING
    assert review.file_name == "storage.pdf"
    assert review.file_url == "https://notes.test/files/storage.pdf"


def test_uploads_and_queue_ordering(db) -> None:
    teacher = make_teacher(db)
    other = make_teacher(db, "omar@example.com")
    first = submit_note(db, teacher.id, teacher.email, STORAGE, "First", "https://notes.test/1.pdf")
    second = submit_note(db, teacher.id, teacher.email, STORAGE, "Second", "https://notes.test/2.pdf")
    theirs = submit_note(db, other.id, other.email, STORAGE, "Theirs", "https://notes.test/3.pdf")
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    first.uploaded_at, second.uploaded_at, theirs.uploaded_at = base, base + timedelta(hours=1), base + timedelta(hours=2)
    db.flush()

    assert [r.file_name for r in my_uploads(db, teacher.id)] == ["Second", "First"]
    assert [r.file_name for r in pending_reviews(db)] == ["First", "Second", "Theirs"]

    reject_review(db, second.id)
    assert [r.file_name for r in pending_reviews(db)] == ["First", "Theirs"]
    assert [r.status for r in my_uploads(db, str(teacher.id))] == [REJECTED, PENDING]


def test_approval_publishes_the_link_once(db) -> None:
    load_tree(db, SAMPLE_CATALOGUE)
    teacher = make_teacher(db)
    review = submit_note(db, teacher.id, teacher.email, STORAGE, "Storage", "https://notes.test/storage.pdf")
    reviewed = datetime(2026, 2, 2, tzinfo=timezone.utc)

    node = approve_review(db, review.id, now=reviewed)
    assert node.path == STORAGE_TOPIC
    assert review.status == APPROVED
    assert review.reviewed_at == reviewed
    assert [n["url"] for n in notes_for(db, STORAGE_TOPIC)] == ["https://notes.test/storage.pdf"]

    with pytest.raises(NoteReviewError, match="already approved"):
        approve_review(db, review.id)
    with pytest.raises(NoteReviewError, match="already approved"):
        reject_review(db, review.id)

    again = submit_note(db, teacher.id, teacher.email, STORAGE, "Same file", "https://notes.test/storage.pdf")
    approve_review(db, again.id)
    assert len(notes_for(db, STORAGE_TOPIC)) == 1


def test_approval_creates_missing_catalogue_levels(db) -> None:
    teacher = make_teacher(db)
    path_data = {
        "path": "classes/class-11th/streams/science/subjects/physics/chapters/units-and-measurement/topics/errors",
        "class": "Class 11th",
        "stream": "Science",
        "subject": "Physics",
        "chapter": "Units and Measurement",
        "topic": "Errors",
    }
    review = submit_note(db, teacher.id, teacher.email, path_data, "Errors", "https://notes.test/errors.pdf")

    node = approve_review(db, review.id)
    assert node.path == path_data["path"]
    assert node.parent_path == "classes/class-11th/streams/science/subjects/physics/chapters/units-and-measurement"
    assert db.scalar(select(func.count()).select_from(NotesNode)) == 5


def test_unknown_review_is_an_error(db) -> None:
    with pytest.raises(NoteReviewError, match="not found"):
        reject_review(db, "00000000-0000-0000-0000-000000000000")
