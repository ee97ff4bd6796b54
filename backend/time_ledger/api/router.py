from fastapi import APIRouter

from time_ledger.api.calendar import calendar_router
from time_ledger.api.compliance import compliance_router
from time_ledger.api.holidays import holidays_router
from time_ledger.api.leave import leave_router
from time_ledger.api.reports import reports_router
from time_ledger.api.slots import slots_router
from time_ledger.api.weeks import weeks_router
from time_ledger.api.workers import workers_router

api_router = APIRouter()
api_router.include_router(slots_router)
api_router.include_router(weeks_router)
api_router.include_router(leave_router)
api_router.include_router(compliance_router)
api_router.include_router(holidays_router)
api_router.include_router(workers_router)
api_router.include_router(reports_router)
api_router.include_router(calendar_router)
