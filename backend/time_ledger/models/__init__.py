from sqlmodel import SQLModel

from time_ledger.models.audit import AuditLog
from time_ledger.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from time_ledger.models.enums import (
    ACTIVE_LEAVE_STATUSES,
    AuditAction,
    AuditEntityType,
    EntryType,
    LeaveStatus,
    LeaveType,
    Period,
    WeekStatus,
)
from time_ledger.models.holiday import CompanyHoliday
from time_ledger.models.leave import LeaveRequest
from time_ledger.models.slot import SlotEntry
from time_ledger.models.week import TimesheetWeek

__all__ = [
    "ACTIVE_LEAVE_STATUSES",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CompanyHoliday",
    "EntryType",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Period",
    "SQLModel",
    "SlotEntry",
    "TimesheetWeek",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
    "WeekStatus",
]
