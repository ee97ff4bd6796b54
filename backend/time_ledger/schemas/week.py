# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from time_ledger.models.enums import WeekStatus


class WeekReasonPayload(BaseModel):
    """Request body for rejecting or reopening a week. The reason is mandatory."""

    reason: str = Field(min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason must not be blank"
            raise ValueError(msg)
        return value


class WeekResponse(BaseModel):
    """Response schema for a timesheet week."""

    id: uuid.UUID
    company_id: uuid.UUID
    worker_id: uuid.UUID
    week_start: date
    status: WeekStatus
    submitted_at: datetime | None
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    rejected_by: uuid.UUID | None
    rejected_at: datetime | None
    rejection_reason: str | None
    created_at: datetime


class WeekListResponse(BaseModel):
    """Paginated list of timesheet weeks."""

    items: list[WeekResponse]
    total: int
