from __future__ import annotations

from fastapi import APIRouter, Path

from time_ledger.schemas.calendar import MonthGridResponse
from time_ledger.services.calendar import month_grid

calendar_router = APIRouter(prefix="/calendar", tags=["calendar"])


@calendar_router.get("/{year}/{month}", response_model=MonthGridResponse)
async def get_month_grid(
    year: int = Path(ge=1, le=9999),
    month: int = Path(),
) -> MonthGridResponse:
    """Monday-first grid of the month for calendar rendering."""
    return MonthGridResponse(year=year, month=month, weeks=month_grid(year, month))
