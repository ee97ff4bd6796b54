# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from time_ledger.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class SlotEntry(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """One half-day of a worker's calendar. At most one row per (worker, date, period)."""

    __tablename__ = "slot_entry"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "worker_id", "date", "period", name="uq_slot_worker_date_period"),
        sa.Index("ix_slot_worker_date", "company_id", "worker_id", "date"),
    )

    company_id: uuid.UUID = Field(index=True)
    worker_id: uuid.UUID = Field(index=True)
    date: datetime.date
    period: str = Field(max_length=2)
    entry_type: str = Field(max_length=50)
    assignment_ref: uuid.UUID | None = None
    leave_request_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="SET NULL"), nullable=True, index=True
        ),
    )
    holiday_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("company_holiday.id", ondelete="SET NULL"), nullable=True, index=True
        ),
    )
