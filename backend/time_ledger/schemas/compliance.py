# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel


class LeaveBalanceResponse(BaseModel):
    """Annual-leave allowance usage for one worker and calendar year.

    ``remaining`` can go negative; ``is_overdrawn`` flags that case.
    """

    worker_id: uuid.UUID
    year: int
    allowance: int
    used: int
    pending: int
    remaining: int
    is_overdrawn: bool


class ComplianceResponse(BaseModel):
    """Whether a worker's timesheet is complete up to a week boundary."""

    worker_id: uuid.UUID
    as_of_week_start: date
    has_gap: bool
    first_gap_date: date | None


class WorkerGapSummary(BaseModel):
    """One row of the manager gap report."""

    worker_id: uuid.UUID
    first_name: str
    last_name: str
    has_gap: bool
    first_gap_date: date | None


class GapReportResponse(BaseModel):
    """Timesheet gap report across a company's workers."""

    as_of_week_start: date
    items: list[WorkerGapSummary]
    total: int
    with_gaps: int
