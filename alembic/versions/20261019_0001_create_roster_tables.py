"""create colleges, users, profiles and bulk upload tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "colleges",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("domain"),
    )
    op.create_index("ix_colleges_is_active", "colleges", ["is_active"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("college_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("must_change_password", sa.Boolean(), nullable=False),
        sa.Column("account_status", sa.String(length=20), nullable=False),
        sa.Column("invitation_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["college_id"], ["colleges.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_college_id", "users", ["college_id"], unique=False)
    op.create_index("ix_users_account_status", "users", ["account_status"], unique=False)
    op.create_index("ix_users_college_role", "users", ["college_id", "role"], unique=False)

    op.create_table(
        "students",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("college_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("roll_number", sa.String(length=50), nullable=False),
        sa.Column("degree", sa.String(length=100), nullable=True),
        sa.Column("branch", sa.String(length=100), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["college_id"], ["colleges.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.UniqueConstraint("college_id", "roll_number", name="uq_students_college_roll_number"),
    )
    op.create_index("ix_students_college_id", "students", ["college_id"], unique=False)

    op.create_table(
        "trainers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("college_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("specialization", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["college_id"], ["colleges.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_index("ix_trainers_college_id", "trainers", ["college_id"], unique=False)

    op.create_table(
        "bulk_uploads",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("college_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("uploaded_by_user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("entity_type", sa.String(length=20), nullable=False, comment="STUDENT, TRAINER"),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("total_rows", sa.Integer(), nullable=False),
        sa.Column("successful_rows", sa.Integer(), nullable=False),
        sa.Column("failed_rows", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error_report", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["college_id"], ["colleges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["uploaded_by_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bulk_uploads_college_id", "bulk_uploads", ["college_id"], unique=False)
    op.create_index("ix_bulk_uploads_status", "bulk_uploads", ["status"], unique=False)
    op.create_index("ix_bulk_uploads_created_at", "bulk_uploads", ["created_at"], unique=False)
    op.create_index(
        "ix_bulk_uploads_college_entity_type",
        "bulk_uploads",
        ["college_id", "entity_type"],
        unique=False,
    )

    op.create_table(
        "bulk_upload_results",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("upload_batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("row_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["upload_batch_id"], ["bulk_uploads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("upload_batch_id", "row_number", name="uq_bulk_upload_results_row"),
    )
    op.create_index(
        "ix_bulk_upload_results_upload_id",
        "bulk_upload_results",
        ["upload_batch_id"],
        unique=False,
    )
    op.create_index("ix_bulk_upload_results_status", "bulk_upload_results", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_bulk_upload_results_status", table_name="bulk_upload_results")
    op.drop_index("ix_bulk_upload_results_upload_id", table_name="bulk_upload_results")
    op.drop_table("bulk_upload_results")
    op.drop_index("ix_bulk_uploads_college_entity_type", table_name="bulk_uploads")
    op.drop_index("ix_bulk_uploads_created_at", table_name="bulk_uploads")
    op.drop_index("ix_bulk_uploads_status", table_name="bulk_uploads")
    op.drop_index("ix_bulk_uploads_college_id", table_name="bulk_uploads")
    op.drop_table("bulk_uploads")
    op.drop_index("ix_trainers_college_id", table_name="trainers")
    op.drop_table("trainers")
    op.drop_index("ix_students_college_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_users_college_role", table_name="users")
    op.drop_index("ix_users_account_status", table_name="users")
    op.drop_index("ix_users_college_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_colleges_is_active", table_name="colleges")
    op.drop_table("colleges")
