# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from time_ledger.api.deps import AdminDep, AuthDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.exceptions import AppError
from time_ledger.models.enums import WeekStatus
from time_ledger.schemas.week import WeekListResponse, WeekReasonPayload, WeekResponse
from time_ledger.services import week as week_service

weeks_router = APIRouter(
    prefix="/companies/{company_id}/weeks",
    tags=["weeks"],
    dependencies=[Depends(validate_company_scope)],
)


@weeks_router.get("", response_model=WeekListResponse)
async def list_weeks(
    session: SessionDep,
    auth: AuthDep,
    status_filter: WeekStatus | None = Query(default=None, alias="status"),
    worker_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> WeekListResponse:
    """List submitted weeks. Workers only see their own."""
    if not auth.is_manager:
        worker_id = auth.user_id
    return await week_service.list_weeks(
        session,
        auth.company_id,
        status_filter.value if status_filter else None,
        worker_id,
        offset,
        limit,
    )


@weeks_router.get("/{week_id}", response_model=WeekResponse)
async def get_week(
    week_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> WeekResponse:
    """Get a single week."""
    week = await week_service.get_week(session, auth.company_id, week_id)
    if not auth.can_act_for(week.worker_id):
        raise AppError("Week not found", status_code=404)
    return week


@weeks_router.post("/{week_id}/approve", response_model=WeekResponse)
async def approve_week(
    week_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> WeekResponse:
    """Approve a submitted week (admin only)."""
    return await week_service.approve_week(session, auth, week_id)


@weeks_router.post("/{week_id}/reject", response_model=WeekResponse)
async def reject_week(
    week_id: uuid.UUID,
    payload: WeekReasonPayload,
    session: SessionDep,
    auth: AdminDep,
) -> WeekResponse:
    """Reject a submitted week with a reason (admin only)."""
    return await week_service.reject_week(session, auth, week_id, payload)


@weeks_router.post("/{week_id}/reopen", response_model=WeekResponse)
async def reopen_week(
    week_id: uuid.UUID,
    payload: WeekReasonPayload,
    session: SessionDep,
    auth: AdminDep,
) -> WeekResponse:
    """Reopen an approved week for correction (admin only)."""
    return await week_service.reopen_week(session, auth, week_id, payload)
