# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from time_ledger.api.deps import AuthDep, SelfOrAdminDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.models.enums import Period
from time_ledger.schemas.slot import SlotListResponse, SlotResponse, UpsertSlotPayload, WeekSlotsResponse
from time_ledger.schemas.week import WeekResponse
from time_ledger.services import slot as slot_service
from time_ledger.services import week as week_service
from time_ledger.services.calendar import coerce_date

slots_router = APIRouter(
    prefix="/companies/{company_id}/workers/{worker_id}",
    tags=["slots"],
    dependencies=[Depends(validate_company_scope)],
)


@slots_router.put("/slots/{day}/{period}", response_model=SlotResponse)
async def upsert_slot(
    worker_id: uuid.UUID,
    day: str,
    period: Period,
    payload: UpsertSlotPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SlotResponse:
    """Write an ASSIGNMENT or BENCH entry into a half-day slot."""
    return await slot_service.upsert_slot(session, auth, worker_id, coerce_date(day), period, payload)


@slots_router.delete("/slots/{day}/{period}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_slot(
    worker_id: uuid.UUID,
    day: str,
    period: Period,
    session: SessionDep,
    auth: AuthDep,
) -> Response:
    """Clear a half-day slot. Clearing an empty slot is a no-op."""
    await slot_service.clear_slot(session, auth, worker_id, coerce_date(day), period)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@slots_router.get("/slots", response_model=SlotListResponse)
async def list_slots(
    worker_id: uuid.UUID,
    session: SessionDep,
    auth: SelfOrAdminDep,
    start: date = Query(alias="from"),
    end: date = Query(alias="to"),
) -> SlotListResponse:
    """List a worker's slots between two dates (inclusive)."""
    return await slot_service.list_slots(session, auth.company_id, worker_id, start, end)


@slots_router.get("/weeks/{week_start}", response_model=WeekSlotsResponse)
async def get_week_slots(
    worker_id: uuid.UUID,
    week_start: str,
    session: SessionDep,
    auth: SelfOrAdminDep,
) -> WeekSlotsResponse:
    """Show a worker's week with its slots and submission status."""
    return await slot_service.get_week_slots(session, auth.company_id, worker_id, coerce_date(week_start))


@slots_router.post("/weeks/{week_start}/submit", response_model=WeekResponse)
async def submit_week(
    worker_id: uuid.UUID,
    week_start: str,
    session: SessionDep,
    auth: AuthDep,
) -> WeekResponse:
    """Submit a completed week for manager approval."""
    return await week_service.submit_week(session, auth, worker_id, coerce_date(week_start))
