# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from time_ledger.exceptions import AppError, DateConflict, InvalidTransition, LockConflict
from time_ledger.models.base import now_utc
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
from time_ledger.schemas.leave import LeaveRequestListResponse, LeaveRequestResponse
from time_ledger.services.audit import model_to_audit_dict, write_audit_log
from time_ledger.services.calendar import is_weekend, week_start
from time_ledger.services.week import lock_weeks

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.schemas.auth import AuthContext
    from time_ledger.schemas.leave import CancellationPayload, CreateLeavePayload, RejectLeavePayload

logger = logging.getLogger(__name__)

_CANCELLATION_BLOCKING = frozenset({WeekStatus.SUBMITTED, WeekStatus.APPROVED})


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a leave request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        company_id=request.company_id,
        worker_id=request.worker_id,
        leave_type=LeaveType(request.leave_type),
        dates=sorted(request.date_set()),
        total_days=request.total_days,
        status=LeaveStatus(request.status),
        notes=request.notes,
        rejection_reason=request.rejection_reason,
        cancellation_reason=request.cancellation_reason,
        approved_by=request.approved_by,
        approved_at=request.approved_at,
        decided_by=request.decided_by,
        decided_at=request.decided_at,
        created_at=request.created_at,
    )


async def _get_request_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a leave request by ID scoped to company. Raises 404 if not found."""
    query = select(LeaveRequest).where(
        col(LeaveRequest.id) == request_id,
        col(LeaveRequest.company_id) == company_id,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise AppError("Leave request not found", status_code=404)
    return request


def _require_status(request: LeaveRequest, expected: LeaveStatus, action: str) -> None:
    if request.status != expected.value:
        raise InvalidTransition(
            f"Cannot {action.replace('_', ' ')} a leave request that is {request.status}",
            current_status=request.status,
            action=action,
        )


async def _check_dates_available(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    dates: list[date],
) -> None:
    """Enforce the leave date invariants, raising DateConflict on the first rule broken.

    Dates must be weekdays, must not belong to another active request of the
    worker, and must not hold any non-leave slot the worker has not cleared.
    """
    weekend = [d for d in dates if is_weekend(d)]
    if weekend:
        raise DateConflict("Leave cannot be requested for weekend days", weekend)

    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.company_id) == company_id,
            col(LeaveRequest.worker_id) == worker_id,
            col(LeaveRequest.status).in_([s.value for s in ACTIVE_LEAVE_STATUSES]),
        )
    )
    taken: set[date] = set()
    for existing in result.scalars().all():
        taken |= existing.date_set()
    overlap = sorted(taken.intersection(dates))
    if overlap:
        raise DateConflict("Dates are already covered by another active leave request", overlap)

    slot_result = await session.execute(
        select(col(SlotEntry.date))
        .where(
            col(SlotEntry.company_id) == company_id,
            col(SlotEntry.worker_id) == worker_id,
            col(SlotEntry.date).in_(dates),
            col(SlotEntry.entry_type) != EntryType.LEAVE.value,
        )
        .distinct()
    )
    booked = sorted(row[0] for row in slot_result.all())
    if booked:
        raise DateConflict("Dates already have timesheet entries; clear them before requesting leave", booked)


async def _ensure_weeks_open(
    session: AsyncSession,
    request: LeaveRequest,
    blocking: frozenset[WeekStatus] = frozenset({WeekStatus.APPROVED}),
) -> None:
    """Raise LockConflict if any week the request touches is in a ``blocking`` status."""
    days = request.date_set()
    weeks = await lock_weeks(session, request.company_id, [request.worker_id], {week_start(d) for d in days})
    locked = sorted(ws for (_, ws), week in weeks.items() if WeekStatus(week.status) in blocking)
    if locked:
        raise LockConflict(locked)


async def _transition(
    session: AsyncSession,
    auth: AuthContext,
    request: LeaveRequest,
    before_dict: dict,
    action: AuditAction,
) -> LeaveRequestResponse:
    """Flush, audit and commit a status change that has been applied in memory."""
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=request.worker_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=action,
        before_json=before_dict,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    logger.info("Leave request %s for worker %s is now %s", request.id, request.worker_id, request.status)
    return _build_leave_response(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeavePayload,
) -> LeaveRequestResponse:
    """Create a PENDING leave request after checking its dates are free."""
    if not auth.can_act_for(payload.worker_id):
        raise AppError("Not authorized to request leave for this worker", status_code=403)

    dates = sorted(set(payload.dates))
    await _check_dates_available(session, auth.company_id, payload.worker_id, dates)

    leave_request = LeaveRequest(
        company_id=auth.company_id,
        worker_id=payload.worker_id,
        leave_type=payload.leave_type.value,
        dates=[d.isoformat() for d in dates],
        total_days=len(dates),
        status=LeaveStatus.PENDING.value,
        notes=payload.notes,
    )
    session.add(leave_request)
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=payload.worker_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info("Leave request %s created for worker %s (%d days)", leave_request.id, payload.worker_id, len(dates))
    return _build_leave_response(leave_request)


async def approve_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Approve a pending request and write LEAVE into both slots of every date.

    The slot writes bypass the worker edit lock but the whole approval fails
    with LockConflict if any affected week is already approved.
    """
    leave_request = await _get_request_or_404(session, auth.company_id, request_id, for_update=True)
    _require_status(leave_request, LeaveStatus.PENDING, "approve")
    await _ensure_weeks_open(session, leave_request)

    days = sorted(leave_request.date_set())
    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == leave_request.company_id,
            col(SlotEntry.worker_id) == leave_request.worker_id,
            col(SlotEntry.date).in_(days),
        )
        .with_for_update()
    )
    existing = {(s.date, s.period): s for s in result.scalars().all()}

    now = now_utc()
    for day in days:
        for period in Period:
            slot = existing.get((day, period.value))
            if slot is None:
                session.add(
                    SlotEntry(
                        company_id=leave_request.company_id,
                        worker_id=leave_request.worker_id,
                        date=day,
                        period=period.value,
                        entry_type=EntryType.LEAVE.value,
                        leave_request_id=leave_request.id,
                    )
                )
            else:
                slot.entry_type = EntryType.LEAVE.value
                slot.assignment_ref = None
                slot.holiday_id = None
                slot.leave_request_id = leave_request.id
                slot.touch()

    before_dict = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.APPROVED.value
    leave_request.approved_by = auth.user_id
    leave_request.approved_at = now
    leave_request.decided_by = auth.user_id
    leave_request.decided_at = now

    return await _transition(session, auth, leave_request, before_dict, AuditAction.APPROVE)


async def reject_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: RejectLeavePayload,
) -> LeaveRequestResponse:
    """Reject a pending request. No slots are touched."""
    leave_request = await _get_request_or_404(session, auth.company_id, request_id, for_update=True)
    _require_status(leave_request, LeaveStatus.PENDING, "reject")

    before_dict = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.REJECTED.value
    leave_request.rejection_reason = payload.reason
    leave_request.decided_by = auth.user_id
    leave_request.decided_at = now_utc()

    return await _transition(session, auth, leave_request, before_dict, AuditAction.REJECT)


async def request_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: CancellationPayload | None = None,
) -> LeaveRequestResponse:
    """Ask for approved leave to be cancelled. Slots stay until a manager agrees."""
    leave_request = await _get_request_or_404(session, auth.company_id, request_id, for_update=True)

    if not auth.can_act_for(leave_request.worker_id):
        raise AppError("Not authorized to cancel this leave request", status_code=403)
    _require_status(leave_request, LeaveStatus.APPROVED, "request_cancellation")

    before_dict = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.CANCELLATION_PENDING.value
    leave_request.cancellation_reason = payload.reason if payload else None

    return await _transition(session, auth, leave_request, before_dict, AuditAction.REQUEST_CANCELLATION)


async def approve_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel the leave and remove exactly the slots its approval wrote.

    Raises LockConflict while any affected week is submitted or approved.
    Dates that carry a company holiday get their HOLIDAY entries back
    instead of going empty.
    """
    leave_request = await _get_request_or_404(session, auth.company_id, request_id, for_update=True)
    _require_status(leave_request, LeaveStatus.CANCELLATION_PENDING, "approve_cancellation")
    await _ensure_weeks_open(session, leave_request, _CANCELLATION_BLOCKING)

    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == leave_request.company_id,
            col(SlotEntry.worker_id) == leave_request.worker_id,
            col(SlotEntry.leave_request_id) == leave_request.id,
            col(SlotEntry.entry_type) == EntryType.LEAVE.value,
        )
        .with_for_update()
    )
    slots = list(result.scalars().all())

    holiday_result = await session.execute(
        select(CompanyHoliday).where(
            col(CompanyHoliday.company_id) == leave_request.company_id,
            col(CompanyHoliday.date).in_(sorted(leave_request.date_set())),
        )
    )
    holidays = {h.date: h for h in holiday_result.scalars().all()}

    restored = 0
    for slot in slots:
        holiday = holidays.get(slot.date)
        if holiday is None:
            await session.delete(slot)
            continue
        slot.entry_type = EntryType.HOLIDAY.value
        slot.leave_request_id = None
        slot.holiday_id = holiday.id
        slot.touch()
        restored += 1

    before_dict = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.CANCELLED.value
    leave_request.decided_by = auth.user_id
    leave_request.decided_at = now_utc()

    logger.info(
        "Cancelled request %s: %d leave slot(s) removed, %d restored to HOLIDAY",
        leave_request.id,
        len(slots) - restored,
        restored,
    )
    return await _transition(session, auth, leave_request, before_dict, AuditAction.APPROVE_CANCELLATION)



async def reject_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Keep the leave: back to APPROVED with its slots untouched."""
    leave_request = await _get_request_or_404(session, auth.company_id, request_id, for_update=True)
    _require_status(leave_request, LeaveStatus.CANCELLATION_PENDING, "reject_cancellation")

    before_dict = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.APPROVED.value
    leave_request.decided_by = auth.user_id
    leave_request.decided_at = now_utc()

    return await _transition(session, auth, leave_request, before_dict, AuditAction.REJECT_CANCELLATION)


async def get_leave_request(
    session: AsyncSession,
    company_id: uuid.UUID,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single leave request by ID."""
    leave_request = await _get_request_or_404(session, company_id, request_id)
    return _build_leave_response(leave_request)


async def list_leave_requests(
    session: AsyncSession,
    company_id: uuid.UUID,
    status_filter: str | None = None,
    worker_id: uuid.UUID | None = None,
    leave_type: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List leave requests with optional filters, ordered by created_at DESC."""
    base_filters = [col(LeaveRequest.company_id) == company_id]

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter)
    if worker_id is not None:
        base_filters.append(col(LeaveRequest.worker_id) == worker_id)
    if leave_type is not None:
        base_filters.append(col(LeaveRequest.leave_type) == leave_type)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_leave_response(r) for r in requests],
        total=total,
    )
