from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import extract, func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from time_ledger.exceptions import AppError, InvalidPeriod
from time_ledger.models.enums import AuditAction, AuditEntityType, EntryType, Period, WeekStatus
from time_ledger.models.holiday import CompanyHoliday
from time_ledger.models.slot import SlotEntry
from time_ledger.schemas.holiday import HolidayListResponse, HolidayResponse
from time_ledger.services.audit import model_to_audit_dict, write_audit_log
from time_ledger.services.calendar import is_weekend, week_start
from time_ledger.services.week import lock_weeks
from time_ledger.services.worker import get_worker_directory

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.schemas.auth import AuthContext
    from time_ledger.schemas.holiday import CreateHolidayRequest

logger = logging.getLogger(__name__)


def _build_holiday_response(holiday: CompanyHoliday, workers_applied: int = 0) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        company_id=holiday.company_id,
        date=holiday.date,
        name=holiday.name,
        created_by=holiday.created_by,
        workers_applied=workers_applied,
    )


async def _write_holiday_slots(session: AsyncSession, holiday: CompanyHoliday) -> int:
    """Write HOLIDAY into both slots for every worker employed on the holiday.

    Workers whose week is approved, or who already have leave that day, are
    skipped. Returns the number of workers written.
    """
    workers = await get_worker_directory().list_workers(holiday.company_id)
    active = [w for w in workers if w.is_active_on(holiday.date)]
    if not active:
        return 0

    monday = week_start(holiday.date)
    weeks = await lock_weeks(session, holiday.company_id, [w.id for w in active], [monday])

    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == holiday.company_id,
            col(SlotEntry.worker_id).in_([w.id for w in active]),
            col(SlotEntry.date) == holiday.date,
        )
        .with_for_update()
    )
    existing = {(s.worker_id, s.period): s for s in result.scalars().all()}

    applied = 0
    for worker in active:
        week = weeks.get((worker.id, monday))
        if week is not None and week.status == WeekStatus.APPROVED.value:
            logger.warning("Holiday %s not applied to worker %s: week already approved", holiday.date, worker.id)
            continue
        current = [existing.get((worker.id, p.value)) for p in Period]
        if any(s is not None and s.entry_type == EntryType.LEAVE.value for s in current):
            logger.warning("Holiday %s not applied to worker %s: leave already booked", holiday.date, worker.id)
            continue

        for period in Period:
            slot = existing.get((worker.id, period.value))
            if slot is None:
                session.add(
                    SlotEntry(
                        company_id=holiday.company_id,
                        worker_id=worker.id,
                        date=holiday.date,
                        period=period.value,
                        entry_type=EntryType.HOLIDAY.value,
                        holiday_id=holiday.id,
                    )
                )
            else:
                slot.entry_type = EntryType.HOLIDAY.value
                slot.assignment_ref = None
                slot.holiday_id = holiday.id
                slot.touch()
        applied += 1

    return applied


async def create_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Create a company holiday and stamp it into worker calendars."""
    if is_weekend(payload.date):
        raise InvalidPeriod(f"{payload.date.isoformat()} is a weekend day", payload.date)

    holiday = CompanyHoliday(
        company_id=auth.company_id,
        date=payload.date,
        name=payload.name,
        created_by=auth.user_id,
    )
    session.add(holiday)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError("Holiday already exists for this date", status_code=409) from None

    applied = await _write_holiday_slots(session, holiday)
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday, extra={"workers_applied": applied}),
    )

    await session.commit()
    await session.refresh(holiday)
    logger.info("Holiday %s (%s) applied to %d worker(s)", holiday.date, holiday.name, applied)
    return _build_holiday_response(holiday, applied)


async def list_holidays(
    session: AsyncSession,
    company_id: uuid.UUID,
    year: int | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    """List company holidays with optional year filter."""
    base_filter = [col(CompanyHoliday.company_id) == company_id]

    if year is not None:
        base_filter.append(extract("year", col(CompanyHoliday.date)) == year)

    count_result = await session.execute(select(func.count()).select_from(CompanyHoliday).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(CompanyHoliday).where(*base_filter).order_by(col(CompanyHoliday.date)).offset(offset).limit(limit)
    )
    holidays = list(result.scalars().all())

    return HolidayListResponse(
        items=[_build_holiday_response(h) for h in holidays],
        total=total,
    )


async def get_holiday(
    session: AsyncSession,
    company_id: uuid.UUID,
    holiday_id: uuid.UUID,
) -> CompanyHoliday:
    """Get a single holiday or raise 404."""
    result = await session.execute(
        select(CompanyHoliday).where(
            col(CompanyHoliday.id) == holiday_id,
            col(CompanyHoliday.company_id) == company_id,
        )
    )
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise AppError("Holiday not found", status_code=404)
    return holiday


async def delete_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    """Delete a holiday and its slots, except in weeks that are already approved."""
    holiday = await get_holiday(session, auth.company_id, holiday_id)

    result = await session.execute(
        select(SlotEntry)
        .where(
            col(SlotEntry.company_id) == auth.company_id,
            col(SlotEntry.holiday_id) == holiday.id,
        )
        .with_for_update()
    )
    slots = list(result.scalars().all())
    monday = week_start(holiday.date)
    weeks = await lock_weeks(session, auth.company_id, [s.worker_id for s in slots], [monday])

    for slot in slots:
        week = weeks.get((slot.worker_id, monday))
        if week is not None and week.status == WeekStatus.APPROVED.value:
            # Approved weeks are immutable; keep the entry but detach it.
            slot.holiday_id = None
        else:
            await session.delete(slot)

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    await session.flush()
    await session.delete(holiday)
    await session.commit()
