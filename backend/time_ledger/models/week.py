# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from time_ledger.models.base import TimestampMixin, UUIDBase
from time_ledger.models.enums import WeekStatus


class TimesheetWeek(UUIDBase, TimestampMixin, table=True):
    """Submission state of a worker's Monday-to-Sunday week.

    Rows are created on first submission; a missing row means DRAFT.
    """

    __tablename__ = "timesheet_week"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "worker_id", "week_start", name="uq_week_worker_start"),
        sa.Index("ix_week_company_status", "company_id", "status"),
    )

    company_id: uuid.UUID = Field(index=True)
    worker_id: uuid.UUID = Field(index=True)
    week_start: date
    status: str = Field(
        default=WeekStatus.DRAFT, max_length=50, index=True, sa_column_kwargs={"server_default": "DRAFT"}
    )
    submitted_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    approved_by: uuid.UUID | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    rejected_by: uuid.UUID | None = None
    rejected_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    rejection_reason: str | None = None
