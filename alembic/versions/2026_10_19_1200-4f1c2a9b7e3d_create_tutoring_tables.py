"""create tutoring tables

Revision ID: 4f1c2a9b7e3d
Create Date: 2026-10-19 12:00:41.207316
"""

from alembic import op

import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4f1c2a9b7e3d"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tutoring_tutors",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("subjects", sa.String(length=1024), nullable=False),
        sa.Column("modality", sa.String(length=32), nullable=False),
        sa.Column("location", sa.String(length=256), nullable=True),
        sa.Column("hourly_rate", sa.BigInteger(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum("PENDING", "APPROVED", "REJECTED", name="tutorstatus"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        sa.UniqueConstraint("email"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_table(
        "tutoring_students",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        sa.UniqueConstraint("email"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_table(
        "tutoring_availability_slots",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("tutor_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.SmallInteger(), nullable=False),
        sa.Column("end_time", sa.SmallInteger(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutoring_tutors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_table(
        "tutoring_sessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("tutor_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("scheduled_start", sa.DateTime(), nullable=True),
        sa.Column("scheduled_end", sa.DateTime(), nullable=True),
        sa.Column("duration_hours", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("subtotal", sa.BigInteger(), nullable=False),
        sa.Column("platform_fee", sa.BigInteger(), nullable=False),
        sa.Column("total", sa.BigInteger(), nullable=False),
        sa.Column("payment_reference_id", sa.String(length=255), nullable=False),
        sa.Column("meeting_link", sa.String(length=512), nullable=True),
        sa.Column("calendar_event_id", sa.String(length=256), nullable=True),
        sa.Column("notifications_sent", sa.Boolean(), nullable=False),
        sa.Column(
            "status", sa.Enum("PENDING", "COMPLETED", "CANCELLED", name="sessionstatus"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["tutoring_students.id"]),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutoring_tutors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        sa.UniqueConstraint("payment_reference_id"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_table(
        "tutoring_reviews",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=False),
        sa.Column("tutor_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["session_id"], ["tutoring_sessions.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["tutoring_students.id"]),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutoring_tutors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        sa.UniqueConstraint("session_id"),
        mysql_collate="utf8mb4_bin",
    )


def downgrade() -> None:
    op.drop_table("tutoring_reviews")
    op.drop_table("tutoring_sessions")
    op.drop_table("tutoring_availability_slots")
    op.drop_table("tutoring_students")
    op.drop_table("tutoring_tutors")
