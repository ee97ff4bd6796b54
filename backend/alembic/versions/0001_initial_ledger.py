"""initial ledger tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "company_holiday",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),
    )
    op.create_index("ix_company_holiday_company_id", "company_holiday", ["company_id"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("dates", sa.JSON(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="PENDING", nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("rejection_reason", sa.String(), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("approved_by", sa.Uuid(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_request_company_id", "leave_request", ["company_id"])
    op.create_index("ix_leave_request_worker_id", "leave_request", ["worker_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_company_status", "leave_request", ["company_id", "status"])

    op.create_table(
        "timesheet_week",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="DRAFT", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.Uuid(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.Uuid(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "worker_id", "week_start", name="uq_week_worker_start"),
    )
    op.create_index("ix_timesheet_week_company_id", "timesheet_week", ["company_id"])
    op.create_index("ix_timesheet_week_worker_id", "timesheet_week", ["worker_id"])
    op.create_index("ix_timesheet_week_status", "timesheet_week", ["status"])
    op.create_index("ix_week_company_status", "timesheet_week", ["company_id", "status"])

    op.create_table(
        "slot_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("period", sa.String(length=2), nullable=False),
        sa.Column("entry_type", sa.String(length=50), nullable=False),
        sa.Column("assignment_ref", sa.Uuid(), nullable=True),
        sa.Column(
            "leave_request_id",
            sa.Uuid(),
            sa.ForeignKey("leave_request.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "holiday_id",
            sa.Uuid(),
            sa.ForeignKey("company_holiday.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "worker_id", "date", "period", name="uq_slot_worker_date_period"),
    )
    op.create_index("ix_slot_entry_company_id", "slot_entry", ["company_id"])
    op.create_index("ix_slot_entry_worker_id", "slot_entry", ["worker_id"])
    op.create_index("ix_slot_entry_leave_request_id", "slot_entry", ["leave_request_id"])
    op.create_index("ix_slot_entry_holiday_id", "slot_entry", ["holiday_id"])
    op.create_index("ix_slot_worker_date", "slot_entry", ["company_id", "worker_id", "date"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_company_id", "audit_log", ["company_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_company_worker", "audit_log", ["company_id", "worker_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("slot_entry")
    op.drop_table("timesheet_week")
    op.drop_table("leave_request")
    op.drop_table("company_holiday")
