# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from time_ledger.api.deps import AdminDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.models.enums import AuditAction, AuditEntityType
from time_ledger.schemas.compliance import GapReportResponse
from time_ledger.schemas.report import AuditLogListResponse
from time_ledger.services import report as report_service
from time_ledger.services.calendar import week_start

reports_router = APIRouter(
    prefix="/companies/{company_id}",
    tags=["reports"],
    dependencies=[Depends(validate_company_scope)],
)


@reports_router.get("/audit-log", response_model=AuditLogListResponse)
async def query_audit_log(
    company_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    entity_type: AuditEntityType | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    worker_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query audit log entries with optional filters (admin only)."""
    return await report_service.query_audit_log(
        session,
        company_id,
        entity_type=entity_type.value if entity_type else None,
        action=action.value if action else None,
        actor_id=actor_id,
        worker_id=worker_id,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )


@reports_router.get("/reports/timesheet-gaps", response_model=GapReportResponse)
async def get_gap_report(
    company_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    as_of: date | None = Query(default=None),
) -> GapReportResponse:
    """Every worker's timesheet compliance as of a week start (admin only)."""
    if as_of is None:
        as_of = week_start(date.today())
    return await report_service.get_gap_report(session, company_id, as_of)
