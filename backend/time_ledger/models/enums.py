from __future__ import annotations

import enum


class Period(enum.StrEnum):
    """Half-day slot of a calendar day."""

    AM = "AM"
    PM = "PM"


class EntryType(enum.StrEnum):
    """What a slot was spent on."""

    ASSIGNMENT = "ASSIGNMENT"
    BENCH = "BENCH"
    LEAVE = "LEAVE"
    HOLIDAY = "HOLIDAY"

    @property
    def is_system_managed(self) -> bool:
        return self in (EntryType.LEAVE, EntryType.HOLIDAY)


class WeekStatus(enum.StrEnum):
    """State machine for weekly timesheet submissions."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_locked(self) -> bool:
        return self in (WeekStatus.SUBMITTED, WeekStatus.APPROVED)


class LeaveType(enum.StrEnum):
    """Kind of leave being requested."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    UNPAID = "UNPAID"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLATION_PENDING = "CANCELLATION_PENDING"
    CANCELLED = "CANCELLED"


# A date may belong to at most one request in these states.
ACTIVE_LEAVE_STATUSES = (
    LeaveStatus.PENDING,
    LeaveStatus.APPROVED,
    LeaveStatus.CANCELLATION_PENDING,
)


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    SLOT = "SLOT"
    WEEK = "WEEK"
    LEAVE_REQUEST = "LEAVE_REQUEST"
    HOLIDAY = "HOLIDAY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REOPEN = "REOPEN"
    REQUEST_CANCELLATION = "REQUEST_CANCELLATION"
    APPROVE_CANCELLATION = "APPROVE_CANCELLATION"
    REJECT_CANCELLATION = "REJECT_CANCELLATION"
