# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from time_ledger.exceptions import AppError, InvalidPeriod, SlotLocked, SystemManagedType
from time_ledger.models.enums import AuditAction, AuditEntityType, EntryType, Period
from time_ledger.models.slot import SlotEntry
from time_ledger.schemas.slot import DaySlots, SlotListResponse, SlotResponse, WeekSlotsResponse
from time_ledger.services.assignment import get_assignment_directory
from time_ledger.services.audit import model_to_audit_dict, write_audit_log
from time_ledger.services.calendar import ensure_week_start, is_weekend, week_start
from time_ledger.services.week import effective_status, find_week, reopen_for_edit

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.models.week import TimesheetWeek
    from time_ledger.schemas.auth import AuthContext
    from time_ledger.schemas.slot import UpsertSlotPayload

logger = logging.getLogger(__name__)

SlotKey = tuple[date, Period]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_slot_response(slot: SlotEntry) -> SlotResponse:
    """Map a slot model to its response schema."""
    return SlotResponse(
        id=slot.id,
        worker_id=slot.worker_id,
        date=slot.date,
        period=Period(slot.period),
        entry_type=EntryType(slot.entry_type),
        assignment_ref=slot.assignment_ref,
        leave_request_id=slot.leave_request_id,
        holiday_id=slot.holiday_id,
        updated_at=slot.updated_at,
    )


async def _get_slot(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    day: date,
    period: Period,
) -> SlotEntry | None:
    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == company_id,
            col(SlotEntry.worker_id) == worker_id,
            col(SlotEntry.date) == day,
            col(SlotEntry.period) == period.value,
        )
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def _check_editable(
    session: AsyncSession,
    auth: AuthContext,
    worker_id: uuid.UUID,
    day: date,
) -> TimesheetWeek | None:
    """Run the checks shared by every worker edit and return the locked week row.

    Raises 403 for someone else's calendar, InvalidPeriod on weekends and
    SlotLocked while the week is submitted or approved.
    """
    if not auth.can_act_for(worker_id):
        raise AppError("Not authorized to edit this timesheet", status_code=403)
    if is_weekend(day):
        raise InvalidPeriod(f"{day.isoformat()} is a weekend day", day)

    monday = week_start(day)
    week = await find_week(session, auth.company_id, worker_id, monday, for_update=True)
    current = effective_status(week)
    if current.is_locked:
        raise SlotLocked(monday, current.value)
    return week


async def _verify_assignment(
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    assignment_id: uuid.UUID,
) -> None:
    """The referenced assignment must exist and staff this worker."""
    assignment = await get_assignment_directory().get_assignment(company_id, assignment_id)
    if assignment is None:
        raise AppError("Assignment not found", status_code=404)
    if assignment.worker_id != worker_id:
        raise AppError("Assignment belongs to another worker", status_code=400)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def upsert_slot(
    session: AsyncSession,
    auth: AuthContext,
    worker_id: uuid.UUID,
    day: date,
    period: Period,
    payload: UpsertSlotPayload,
) -> SlotResponse:
    """Create or overwrite a worker-editable slot.

    LEAVE and HOLIDAY entries are written only by the leave and holiday
    services; asking for them here, or overwriting a slot that already holds
    one, raises SystemManagedType.
    """
    if payload.entry_type.is_system_managed:
        raise SystemManagedType(payload.entry_type.value)

    week = await _check_editable(session, auth, worker_id, day)

    if payload.assignment_ref is not None:
        await _verify_assignment(auth.company_id, worker_id, payload.assignment_ref)

    slot = await _get_slot(session, auth.company_id, worker_id, day, period)
    before_dict: dict | None = None

    if slot is None:
        slot = SlotEntry(
            company_id=auth.company_id,
            worker_id=worker_id,
            date=day,
            period=period.value,
            entry_type=payload.entry_type.value,
            assignment_ref=payload.assignment_ref,
        )
        session.add(slot)
        action = AuditAction.CREATE
    else:
        if EntryType(slot.entry_type).is_system_managed:
            raise SystemManagedType(slot.entry_type)
        before_dict = model_to_audit_dict(slot)
        slot.entry_type = payload.entry_type.value
        slot.assignment_ref = payload.assignment_ref
        slot.touch()
        action = AuditAction.UPDATE

    reopen_for_edit(week)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError("Slot was modified concurrently, reload and retry", status_code=409) from None

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=worker_id,
        entity_type=AuditEntityType.SLOT,
        entity_id=slot.id,
        action=action,
        before_json=before_dict,
        after_json=model_to_audit_dict(slot),
    )

    await session.commit()
    await session.refresh(slot)
    return build_slot_response(slot)


async def clear_slot(
    session: AsyncSession,
    auth: AuthContext,
    worker_id: uuid.UUID,
    day: date,
    period: Period,
) -> None:
    """Remove a worker-editable slot. Clearing an empty slot does nothing."""
    week = await _check_editable(session, auth, worker_id, day)

    slot = await _get_slot(session, auth.company_id, worker_id, day, period)
    if slot is None:
        return
    if EntryType(slot.entry_type).is_system_managed:
        raise SystemManagedType(slot.entry_type)

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=worker_id,
        entity_type=AuditEntityType.SLOT,
        entity_id=slot.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(slot),
    )

    reopen_for_edit(week)
    await session.delete(slot)
    await session.commit()


async def list_range(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    start: date,
    end: date,
) -> list[SlotEntry]:
    """Slots in ``[start, end]`` ordered by date, AM before PM."""
    if end < start:
        raise InvalidPeriod(f"Range end {end.isoformat()} is before start {start.isoformat()}", end)
    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == company_id,
            col(SlotEntry.worker_id) == worker_id,
            col(SlotEntry.date) >= start,
            col(SlotEntry.date) <= end,
        )
        .order_by(col(SlotEntry.date), col(SlotEntry.period))
    )
    return list(result.scalars().all())


async def list_week(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    monday: date,
) -> dict[SlotKey, SlotEntry]:
    """Every slot of the Monday-to-Sunday week keyed by (date, period)."""
    ensure_week_start(monday)
    slots = await list_range(session, company_id, worker_id, monday, monday + timedelta(days=6))
    return {(s.date, Period(s.period)): s for s in slots}


async def list_slots(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    start: date,
    end: date,
) -> SlotListResponse:
    slots = await list_range(session, company_id, worker_id, start, end)
    return SlotListResponse(items=[build_slot_response(s) for s in slots], total=len(slots))


async def get_week_slots(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    monday: date,
) -> WeekSlotsResponse:
    """A worker's week laid out day by day, with its submission state."""
    slots = await list_week(session, company_id, worker_id, monday)
    week = await find_week(session, company_id, worker_id, monday)
    current = effective_status(week)

    days: list[DaySlots] = []
    for offset in range(7):
        day = monday + timedelta(days=offset)
        am = slots.get((day, Period.AM))
        pm = slots.get((day, Period.PM))
        days.append(
            DaySlots(
                date=day,
                is_weekend=is_weekend(day),
                am=build_slot_response(am) if am else None,
                pm=build_slot_response(pm) if pm else None,
            )
        )

    return WeekSlotsResponse(
        worker_id=worker_id,
        week_start=monday,
        week_id=week.id if week else None,
        status=current,
        is_locked=current.is_locked,
        days=days,
    )
