"""Teacher-submitted study notes and the admin review queue.

A teacher submits a link to a notes file against a catalogue topic. The
submission waits as ``pending`` until an admin approves it, which publishes
the link on the topic, or rejects it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import NoteReview, NotesNode
from notes import add_node

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

# Catalogue levels in path order; the stream level is skipped when empty.
PATH_LEVELS = (("classes", "class"), ("streams", "stream"), ("subjects", "subject"), ("chapters", "chapter"), ("topics", "topic"))
REQUIRED_LEVELS = ("class", "subject", "chapter", "topic")


class NoteReviewError(Exception):
    pass


def _is_link(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def submit_note(
    db: Session,
    teacher_id: str | uuid.UUID,
    teacher_email: str,
    path_data: dict[str, Any],
    file_name: str,
    file_url: str,
) -> NoteReview:
    missing = [level for level in REQUIRED_LEVELS if not path_data.get(level)]
    if missing or not path_data.get("path"):
        raise NoteReviewError("Please select a class, subject, chapter and topic.")
    file_url = (file_url or "").strip()
    if not _is_link(file_url):
        raise NoteReviewError("Please enter a valid http(s) link to the notes file.")
    review = NoteReview(
        teacher_id=uuid.UUID(str(teacher_id)),
        teacher_email=teacher_email,
        file_name=(file_name or "").strip() or urlparse(file_url).path.rsplit("/", 1)[-1] or "notes",
        file_url=file_url,
        status=PENDING,
        path_data=dict(path_data),
        uploaded_at=datetime.now(timezone.utc),
    )
    db.add(review)
    db.flush()
    logger.info("Notes %s submitted by %s for %s", review.id, teacher_email, path_data["path"])
    return review


def my_uploads(db: Session, teacher_id: str | uuid.UUID) -> list[NoteReview]:
    query = (
        select(NoteReview)
        .where(NoteReview.teacher_id == uuid.UUID(str(teacher_id)))
        .order_by(NoteReview.uploaded_at.desc())
    )
    return list(db.scalars(query).all())


def pending_reviews(db: Session) -> list[NoteReview]:
    query = select(NoteReview).where(NoteReview.status == PENDING).order_by(NoteReview.uploaded_at)
    return list(db.scalars(query).all())


def _locked_pending(db: Session, review_id: str | uuid.UUID) -> NoteReview:
    review = db.scalar(select(NoteReview).where(NoteReview.id == uuid.UUID(str(review_id))).with_for_update())
    if review is None:
        raise NoteReviewError("Review not found.")
    if review.status != PENDING:
        raise NoteReviewError(f"This upload was already {review.status}.")
    return review


def _topic_node(db: Session, path_data: dict[str, Any]) -> NotesNode:
    """The topic for a submission, creating any missing catalogue level."""
    node: Optional[NotesNode] = None
    for level, key in PATH_LEVELS:
        name = path_data.get(key)
        if not name:
            continue
        node = add_node(db, node.path if node is not None else None, level, str(name))
    if node is None or node.level != "topics":
        raise NoteReviewError("The submission does not name a topic.")
    return node


def approve_review(db: Session, review_id: str | uuid.UUID, now: datetime | None = None) -> NotesNode:
    review = _locked_pending(db, review_id)
    node = _topic_node(db, review.path_data)
    urls = list(node.notes_urls or [])
    if review.file_url not in urls:
        # Reassign so the JSON column is flagged dirty.
        node.notes_urls = urls + [review.file_url]
    review.status = APPROVED
    review.reviewed_at = now or datetime.now(timezone.utc)
    db.flush()
    logger.info("Notes %s approved and published on %s", review.id, node.path)
    return node


def reject_review(db: Session, review_id: str | uuid.UUID, now: datetime | None = None) -> NoteReview:
    review = _locked_pending(db, review_id)
    review.status = REJECTED
    review.reviewed_at = now or datetime.now(timezone.utc)
    db.flush()
    logger.info("Notes %s rejected", review.id)
    return review
