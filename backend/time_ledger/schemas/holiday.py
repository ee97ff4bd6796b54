# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field, field_validator


class CreateHolidayRequest(BaseModel):
    """Request body for declaring a company holiday on a weekday."""

    date: date
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class HolidayResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    date: date
    name: str
    created_by: uuid.UUID | None = None
    # Workers whose calendars received HOLIDAY slots; only set on creation.
    workers_applied: int = 0


class HolidayListResponse(BaseModel):
    items: list[HolidayResponse]
    total: int
