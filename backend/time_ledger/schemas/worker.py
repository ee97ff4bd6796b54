# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Self

from pydantic import BaseModel, Field, model_validator


class UpsertWorkerRequest(BaseModel):
    """Request body for upserting a worker in the stub directory."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    start_date: date | None = None
    end_date: date | None = None
    termination_date: date | None = None
    annual_leave_allowance: int | None = Field(default=None, ge=0, le=366)

    @model_validator(mode="after")
    def _validate_tenure(self) -> Self:
        if self.start_date is not None:
            for end in (self.end_date, self.termination_date):
                if end is not None and end < self.start_date:
                    msg = "end and termination dates must not precede start_date"
                    raise ValueError(msg)
        return self


class WorkerResponse(BaseModel):
    """Response schema for a worker."""

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    start_date: date | None
    end_date: date | None
    termination_date: date | None
    annual_leave_allowance: int


class WorkerListResponse(BaseModel):
    """List of workers."""

    items: list[WorkerResponse]
    total: int


class UpsertAssignmentRequest(BaseModel):
    """Request body for upserting an assignment in the stub directory."""

    worker_id: uuid.UUID
    display_name: str = Field(min_length=1, max_length=255)


class AssignmentResponse(BaseModel):
    """Response schema for an assignment."""

    id: uuid.UUID
    company_id: uuid.UUID
    worker_id: uuid.UUID
    display_name: str
