"""Read-only timesheet compliance scan and annual-leave balance.

Nothing here is cached: each call reads the slot ledger afresh, so results
are correct as of the read.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from time_ledger.exceptions import AppError
from time_ledger.models.enums import LeaveStatus, LeaveType, Period
from time_ledger.models.leave import LeaveRequest
from time_ledger.schemas.compliance import ComplianceResponse, LeaveBalanceResponse
from time_ledger.services.calendar import ensure_week_start, is_weekend, iter_days
from time_ledger.services.slot import list_range
from time_ledger.services.worker import get_worker_directory

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.services.worker import WorkerInfo

_USED_STATUSES = (LeaveStatus.APPROVED.value, LeaveStatus.CANCELLATION_PENDING.value)


async def _get_worker_or_404(company_id: uuid.UUID, worker_id: uuid.UUID) -> WorkerInfo:
    worker = await get_worker_directory().get_worker(company_id, worker_id)
    if worker is None:
        raise AppError("Worker not found", status_code=404)
    return worker


def scan_window(worker: WorkerInfo, as_of_week_start: date) -> tuple[date, date] | None:
    """Half-open ``[start, end)`` range of days the scan must cover.

    Returns None when the worker has no start date.
    """
    if worker.start_date is None:
        return None
    end = as_of_week_start
    if worker.tenure_end is not None:
        end = min(end, worker.tenure_end + timedelta(days=1))
    return worker.start_date, end


async def find_first_gap(
    session: AsyncSession,
    worker: WorkerInfo,
    as_of_week_start: date,
) -> tuple[bool, date | None]:
    """Return ``(has_gap, first_gap_date)`` for one worker.

    A worker with no start date is reported as having a gap with no date.
    """
    ensure_week_start(as_of_week_start)
    window = scan_window(worker, as_of_week_start)
    if window is None:
        return True, None
    start, end = window
    if start >= end:
        return False, None

    slots = await list_range(session, worker.company_id, worker.id, start, end - timedelta(days=1))
    filled = {(s.date, s.period) for s in slots}

    for day in iter_days(start, end):
        if is_weekend(day):
            continue
        if any((day, p.value) not in filled for p in Period):
            return True, day
    return False, None


async def has_gap(session: AsyncSession, worker: WorkerInfo, as_of_week_start: date) -> bool:
    """True when some required weekday before ``as_of_week_start`` lacks a slot pair."""
    gap, _ = await find_first_gap(session, worker, as_of_week_start)
    return gap


async def workers_with_gaps(
    session: AsyncSession,
    workers: list[WorkerInfo],
    as_of_week_start: date,
) -> list[WorkerInfo]:
    """The subset of ``workers`` whose timesheets have a gap, in input order."""
    return [w for w in workers if await has_gap(session, w, as_of_week_start)]


async def get_worker_compliance(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    as_of_week_start: date,
) -> ComplianceResponse:
    worker = await _get_worker_or_404(company_id, worker_id)
    gap, first_gap = await find_first_gap(session, worker, as_of_week_start)
    return ComplianceResponse(
        worker_id=worker_id,
        as_of_week_start=as_of_week_start,
        has_gap=gap,
        first_gap_date=first_gap,
    )


async def leave_balance(session: AsyncSession, worker: WorkerInfo, year: int) -> LeaveBalanceResponse:
    """Annual-leave days used and pending in ``year`` against the worker's allowance.

    A request counts toward the year if any of its dates falls in it; its
    full ``total_days`` is counted.
    """
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.company_id) == worker.company_id,
            col(LeaveRequest.worker_id) == worker.id,
            col(LeaveRequest.leave_type) == LeaveType.ANNUAL.value,
            col(LeaveRequest.status).in_([*_USED_STATUSES, LeaveStatus.PENDING.value]),
        )
    )

    used = 0
    pending = 0
    for request in result.scalars().all():
        if not any(d.year == year for d in request.date_set()):
            continue
        if request.status in _USED_STATUSES:
            used += request.total_days
        else:
            pending += request.total_days

    remaining = worker.annual_leave_allowance - used - pending
    return LeaveBalanceResponse(
        worker_id=worker.id,
        year=year,
        allowance=worker.annual_leave_allowance,
        used=used,
        pending=pending,
        remaining=remaining,
        is_overdrawn=remaining < 0,
    )


async def get_leave_balance(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    year: int,
) -> LeaveBalanceResponse:
    worker = await _get_worker_or_404(company_id, worker_id)
    return await leave_balance(session, worker, year)
