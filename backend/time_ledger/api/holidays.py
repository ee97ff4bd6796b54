# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from time_ledger.api.deps import AdminDep, AuthDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.schemas.holiday import CreateHolidayRequest, HolidayListResponse, HolidayResponse
from time_ledger.services import holiday as holiday_service

holidays_router = APIRouter(
    prefix="/companies/{company_id}/holidays",
    tags=["holidays"],
    dependencies=[Depends(validate_company_scope)],
)


@holidays_router.post("", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    payload: CreateHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> HolidayResponse:
    """Declare a company holiday and book it into every active worker's calendar (admin only)."""
    return await holiday_service.create_holiday(session, auth, payload)


@holidays_router.get("", response_model=HolidayListResponse)
async def list_holidays(
    company_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> HolidayListResponse:
    return await holiday_service.list_holidays(session, company_id, year, offset, limit)


@holidays_router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> Response:
    """Remove a holiday and the slots it booked in open weeks (admin only)."""
    await holiday_service.delete_holiday(session, auth, holiday_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
