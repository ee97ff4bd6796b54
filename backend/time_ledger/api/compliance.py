# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from time_ledger.api.deps import SelfOrAdminDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.schemas.compliance import ComplianceResponse, LeaveBalanceResponse
from time_ledger.services import compliance as compliance_service
from time_ledger.services.calendar import week_start

compliance_router = APIRouter(
    prefix="/companies/{company_id}/workers/{worker_id}",
    tags=["compliance"],
    dependencies=[Depends(validate_company_scope)],
)


@compliance_router.get("/leave-balance", response_model=LeaveBalanceResponse)
async def get_leave_balance(
    worker_id: uuid.UUID,
    session: SessionDep,
    auth: SelfOrAdminDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> LeaveBalanceResponse:
    """Annual-leave balance for a calendar year (defaults to the current year)."""
    if year is None:
        year = date.today().year
    return await compliance_service.get_leave_balance(session, auth.company_id, worker_id, year)


@compliance_router.get("/compliance", response_model=ComplianceResponse)
async def get_compliance(
    worker_id: uuid.UUID,
    session: SessionDep,
    auth: SelfOrAdminDep,
    as_of: date | None = Query(default=None),
) -> ComplianceResponse:
    """Whether the worker has any unfilled weekday slot before ``as_of`` (a Monday)."""
    if as_of is None:
        as_of = week_start(date.today())
    return await compliance_service.get_worker_compliance(session, auth.company_id, worker_id, as_of)
