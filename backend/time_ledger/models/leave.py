# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from time_ledger.models.base import TimestampMixin, UUIDBase
from time_ledger.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A worker's request for one or more (possibly non-contiguous) days of leave."""

    __tablename__ = "leave_request"
    __table_args__ = (sa.Index("ix_leave_company_status", "company_id", "status"),)

    company_id: uuid.UUID = Field(index=True)
    worker_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    # Sorted ISO dates.
    dates: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    total_days: int
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    notes: str | None = None
    rejection_reason: str | None = None
    cancellation_reason: str | None = None
    approved_by: uuid.UUID | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]

    def date_set(self) -> set[date]:
        return {date.fromisoformat(d) for d in self.dates}
