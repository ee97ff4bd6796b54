"""Reporting service: audit log queries and the timesheet gap report."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from time_ledger.models.audit import AuditLog
from time_ledger.schemas.compliance import GapReportResponse, WorkerGapSummary
from time_ledger.schemas.report import AuditLogEntryResponse, AuditLogListResponse
from time_ledger.services.calendar import ensure_week_start
from time_ledger.services.compliance import find_first_gap
from time_ledger.services.worker import get_worker_directory

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


async def query_audit_log(
    session: AsyncSession,
    company_id: uuid.UUID,
    *,
    entity_type: str | None = None,
    action: str | None = None,
    actor_id: uuid.UUID | None = None,
    worker_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """Query audit log entries with optional filters."""
    filters = [col(AuditLog.company_id) == company_id]

    if entity_type is not None:
        filters.append(col(AuditLog.entity_type) == entity_type)
    if action is not None:
        filters.append(col(AuditLog.action) == action)
    if actor_id is not None:
        filters.append(col(AuditLog.actor_id) == actor_id)
    if worker_id is not None:
        filters.append(col(AuditLog.worker_id) == worker_id)
    if start_date is not None:
        filters.append(col(AuditLog.created_at) >= _day_start(start_date))
    if end_date is not None:
        # Inclusive of the whole end day.
        filters.append(col(AuditLog.created_at) < _day_start(end_date + timedelta(days=1)))

    count_result = await session.execute(select(func.count()).select_from(AuditLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditLog).where(*filters).order_by(col(AuditLog.created_at).desc()).offset(offset).limit(limit)
    )
    entries = list(result.scalars().all())

    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in entries],
        total=total,
    )


async def get_gap_report(
    session: AsyncSession,
    company_id: uuid.UUID,
    as_of_week_start: date,
) -> GapReportResponse:
    """Scan every worker of the company for timesheet gaps before ``as_of_week_start``."""
    ensure_week_start(as_of_week_start)
    workers = await get_worker_directory().list_workers(company_id)

    items: list[WorkerGapSummary] = []
    for worker in workers:
        gap, first_gap = await find_first_gap(session, worker, as_of_week_start)
        items.append(
            WorkerGapSummary(
                worker_id=worker.id,
                first_name=worker.first_name,
                last_name=worker.last_name,
                has_gap=gap,
                first_gap_date=first_gap,
            )
        )

    return GapReportResponse(
        as_of_week_start=as_of_week_start,
        items=items,
        total=len(items),
        with_gaps=sum(1 for i in items if i.has_gap),
    )
