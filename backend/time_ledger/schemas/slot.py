# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, model_validator

from time_ledger.models.enums import EntryType, Period, WeekStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class UpsertSlotPayload(BaseModel):
    """Request body for writing a half-day slot."""

    entry_type: EntryType
    assignment_ref: uuid.UUID | None = None

    @model_validator(mode="after")
    def _validate_assignment_ref(self) -> Self:
        if self.entry_type == EntryType.ASSIGNMENT and self.assignment_ref is None:
            msg = "assignment_ref is required for ASSIGNMENT entries"
            raise ValueError(msg)
        if self.entry_type != EntryType.ASSIGNMENT and self.assignment_ref is not None:
            msg = "assignment_ref is only allowed on ASSIGNMENT entries"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SlotResponse(BaseModel):
    """Response schema for a single slot entry."""

    id: uuid.UUID
    worker_id: uuid.UUID
    date: date
    period: Period
    entry_type: EntryType
    assignment_ref: uuid.UUID | None
    leave_request_id: uuid.UUID | None
    holiday_id: uuid.UUID | None
    updated_at: datetime


class SlotListResponse(BaseModel):
    """Slots in a date range, ordered by date then period."""

    items: list[SlotResponse]
    total: int


class DaySlots(BaseModel):
    """Both halves of one calendar day; a missing half is None."""

    date: date
    is_weekend: bool
    am: SlotResponse | None
    pm: SlotResponse | None


class WeekSlotsResponse(BaseModel):
    """A worker's week as seven days of slot pairs plus its submission state."""

    worker_id: uuid.UUID
    week_start: date
    week_id: uuid.UUID | None
    status: WeekStatus
    is_locked: bool
    days: list[DaySlots]
