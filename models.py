from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    PrimaryKeyConstraint,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")

ROLES = ("student", "teacher", "parent", "admin")
SUBSCRIPTION_MODELS = ("basic", "student", "teacher", "parent")


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student")  # student | teacher | parent | admin
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    profile_pic: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    subscription_model: Mapped[str] = mapped_column(String(20), nullable=False, default="basic")
    saved_academies: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONType, nullable=True)
    saved_business_ideas: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONType, nullable=True)
    renewal_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role in ('student', 'teacher', 'parent', 'admin')", name="ck_users_role"),
        CheckConstraint(
            "subscription_model in ('basic', 'student', 'teacher', 'parent')",
            name="ck_users_subscription_model",
        ),
    )


class TeacherStudent(Base):
    __tablename__ = "teacher_students"

    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_level: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    iq: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_test_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (PrimaryKeyConstraint("teacher_id", "email", name="pk_teacher_students"),)


class AssignedTest(Base):
    __tablename__ = "assigned_tests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    student_email: Mapped[str] = mapped_column(String(255), nullable=False)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_class: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    password: Mapped[str] = mapped_column(String(6), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")  # pending | completed
    test_type: Mapped[str] = mapped_column(String(20), nullable=False, default="General")  # General | Specific
    job_details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    answers: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    iq_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    analysis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verdict: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    swot: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    teaching_plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    suggestions: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    teacher = relationship("User")

    __table_args__ = (
        CheckConstraint("status in ('pending', 'completed')", name="ck_assigned_tests_status"),
        CheckConstraint("test_type in ('General', 'Specific')", name="ck_assigned_tests_type"),
        Index("ix_assigned_tests_teacher_id", "teacher_id"),
        Index("ix_assigned_tests_student_email", "student_email"),
    )


class PaymentOrder(Base):
    __tablename__ = "payment_orders"

    order_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    plan: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")  # ACTIVE | PAID | EXPIRED | FAILED
    payment_session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_payment_orders_user_id", "user_id"),)


class NotesNode(Base):
    __tablename__ = "notes_nodes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    parent_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    level: Mapped[str] = mapped_column(String(20), nullable=False)  # classes | streams | subjects | chapters | topics
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    notes_urls: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint(
            "level in ('classes', 'streams', 'subjects', 'chapters', 'topics')",
            name="ck_notes_nodes_level",
        ),
        Index("ix_notes_nodes_parent_path", "parent_path"),
    )


class NoteReview(Base):
    __tablename__ = "note_reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    teacher_email: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")  # pending | approved | rejected
    # Topic path plus the display names picked in the catalogue.
    path_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("status in ('pending', 'approved', 'rejected')", name="ck_note_reviews_status"),
        Index("ix_note_reviews_teacher_id", "teacher_id"),
        Index("ix_note_reviews_status", "status"),
    )


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    action: Mapped[str] = mapped_column(String(120), nullable=False)
    details_json: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_audit_logs_action", "action"),)
