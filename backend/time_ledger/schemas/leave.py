# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from time_ledger.models.enums import LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeavePayload(BaseModel):
    """Request body for a new leave request. Dates need not be contiguous."""

    worker_id: uuid.UUID
    leave_type: LeaveType
    dates: list[date] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("dates")
    @classmethod
    def _dedupe_dates(cls, value: list[date]) -> list[date]:
        return sorted(set(value))


class RejectLeavePayload(BaseModel):
    """Request body for rejecting a pending leave request."""

    reason: str = Field(min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason must not be blank"
            raise ValueError(msg)
        return value


class CancellationPayload(BaseModel):
    """Request body for asking to cancel approved leave."""

    reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    company_id: uuid.UUID
    worker_id: uuid.UUID
    leave_type: LeaveType
    dates: list[date]
    total_days: int
    status: LeaveStatus
    notes: str | None
    rejection_reason: str | None
    cancellation_reason: str | None
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    decided_by: uuid.UUID | None
    decided_at: datetime | None
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int
