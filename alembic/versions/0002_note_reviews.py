"""add teacher note reviews and subscription renewal date

Revision ID: 0002_note_reviews
Revises: 0001_initial
Create Date: 2026-10-19 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002_note_reviews"
down_revision: Union[str, Sequence[str], None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("users", sa.Column("renewal_date", sa.DateTime(timezone=True), nullable=True))

    op.create_table(
        "note_reviews",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("teacher_email", sa.String(length=255), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.String(length=1000), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("path_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status in ('pending', 'approved', 'rejected')", name="ck_note_reviews_status"),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_note_reviews_teacher_id", "note_reviews", ["teacher_id"])
    op.create_index("ix_note_reviews_status", "note_reviews", ["status"])


def downgrade() -> None:
    op.drop_index("ix_note_reviews_status", table_name="note_reviews")
    op.drop_index("ix_note_reviews_teacher_id", table_name="note_reviews")
    op.drop_table("note_reviews")
    op.drop_column("users", "renewal_date")
