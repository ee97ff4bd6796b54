# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from time_ledger.exceptions import AppError, IncompleteWeek, InvalidTransition
from time_ledger.models.base import now_utc
from time_ledger.models.enums import AuditAction, AuditEntityType, Period, WeekStatus
from time_ledger.models.slot import SlotEntry
from time_ledger.models.week import TimesheetWeek
from time_ledger.schemas.week import WeekListResponse, WeekResponse
from time_ledger.services.audit import model_to_audit_dict, write_audit_log
from time_ledger.services.calendar import ensure_week_start, week_days

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.schemas.auth import AuthContext
    from time_ledger.schemas.week import WeekReasonPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookups shared with the slot and leave services
# ---------------------------------------------------------------------------


def build_week_response(week: TimesheetWeek) -> WeekResponse:
    """Map a week model to its response schema."""
    return WeekResponse(
        id=week.id,
        company_id=week.company_id,
        worker_id=week.worker_id,
        week_start=week.week_start,
        status=WeekStatus(week.status),
        submitted_at=week.submitted_at,
        approved_by=week.approved_by,
        approved_at=week.approved_at,
        rejected_by=week.rejected_by,
        rejected_at=week.rejected_at,
        rejection_reason=week.rejection_reason,
        created_at=week.created_at,
    )


def effective_status(week: TimesheetWeek | None) -> WeekStatus:
    """A week without a row has never been submitted and is implicitly DRAFT."""
    if week is None:
        return WeekStatus.DRAFT
    return WeekStatus(week.status)


async def find_week(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    week_start: date,
    *,
    for_update: bool = False,
) -> TimesheetWeek | None:
    """Fetch the week row for a worker, optionally locking it."""
    query = select(TimesheetWeek).where(
        col(TimesheetWeek.company_id) == company_id,
        col(TimesheetWeek.worker_id) == worker_id,
        col(TimesheetWeek.week_start) == week_start,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def lock_weeks(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_ids: Iterable[uuid.UUID],
    week_starts: Iterable[date],
) -> dict[tuple[uuid.UUID, date], TimesheetWeek]:
    """Lock every existing week row for the given workers and week starts.

    Missing keys are implicit DRAFT weeks.
    """
    worker_ids = list(set(worker_ids))
    week_starts = list(set(week_starts))
    if not worker_ids or not week_starts:
        return {}
    result = await session.execute(
        select(TimesheetWeek)
        .where(
            col(TimesheetWeek.company_id) == company_id,
            col(TimesheetWeek.worker_id).in_(worker_ids),
            col(TimesheetWeek.week_start).in_(week_starts),
        )
        .with_for_update()
    )
    return {(w.worker_id, w.week_start): w for w in result.scalars().all()}


def reopen_for_edit(week: TimesheetWeek | None) -> None:
    """A worker edit on a rejected week moves it back to DRAFT."""
    if week is not None and week.status == WeekStatus.REJECTED.value:
        week.status = WeekStatus.DRAFT.value
        logger.info("Week %s for worker %s reopened for editing", week.week_start, week.worker_id)


async def _get_week_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    week_id: uuid.UUID,
) -> TimesheetWeek:
    """Fetch and lock a week by ID scoped to company. Raises 404 if not found."""
    result = await session.execute(
        select(TimesheetWeek)
        .where(
            col(TimesheetWeek.id) == week_id,
            col(TimesheetWeek.company_id) == company_id,
        )
        .with_for_update()
    )
    week = result.scalar_one_or_none()
    if week is None:
        raise AppError("Week not found", status_code=404)
    return week


async def missing_slots(
    session: AsyncSession,
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    week_start: date,
) -> list[tuple[date, str]]:
    """Return the (date, period) pairs of Mon-Fri that have no entry, in calendar order."""
    days = week_days(week_start)
    result = await session.execute(
        select(col(SlotEntry.date), col(SlotEntry.period)).where(
            col(SlotEntry.company_id) == company_id,
            col(SlotEntry.worker_id) == worker_id,
            col(SlotEntry.date) >= days[0],
            col(SlotEntry.date) <= days[-1],
        )
    )
    present = {(row[0], row[1]) for row in result.all()}
    return [(d, p.value) for d in days for p in Period if (d, p.value) not in present]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_week(
    session: AsyncSession,
    auth: AuthContext,
    worker_id: uuid.UUID,
    week_start: date,
) -> WeekResponse:
    """Submit a worker's week for approval.

    Legal from DRAFT (explicit or implicit) and REJECTED. Every weekday must
    have both AM and PM entries; the week row is created on first submission.
    """
    if not auth.can_act_for(worker_id):
        raise AppError("Not authorized to submit this timesheet", status_code=403)
    ensure_week_start(week_start)

    week = await find_week(session, auth.company_id, worker_id, week_start, for_update=True)
    current = effective_status(week)
    if current.is_locked:
        raise InvalidTransition(
            f"Week of {week_start.isoformat()} is already {current.value}",
            current_status=current.value,
            action="submit",
        )

    missing = await missing_slots(session, auth.company_id, worker_id, week_start)
    if missing:
        raise IncompleteWeek(week_start, missing)

    now = now_utc()
    before_dict = model_to_audit_dict(week) if week is not None else None

    if week is None:
        week = TimesheetWeek(
            company_id=auth.company_id,
            worker_id=worker_id,
            week_start=week_start,
            status=WeekStatus.SUBMITTED.value,
            submitted_at=now,
        )
        session.add(week)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            raise InvalidTransition(
                "Week was submitted concurrently",
                current_status=WeekStatus.SUBMITTED.value,
                action="submit",
            ) from None
    else:
        week.status = WeekStatus.SUBMITTED.value
        week.submitted_at = now
        week.rejected_by = None
        week.rejected_at = None
        week.rejection_reason = None
        await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=worker_id,
        entity_type=AuditEntityType.WEEK,
        entity_id=week.id,
        action=AuditAction.SUBMIT,
        before_json=before_dict,
        after_json=model_to_audit_dict(week),
    )

    await session.commit()
    await session.refresh(week)
    logger.info("Week %s submitted for worker %s", week_start, worker_id)
    return build_week_response(week)


async def _decide(
    session: AsyncSession,
    auth: AuthContext,
    week_id: uuid.UUID,
    *,
    expected: WeekStatus,
    new_status: WeekStatus,
    action: AuditAction,
    reason: str | None = None,
) -> WeekResponse:
    """Shared logic for manager transitions on an existing week."""
    week = await _get_week_or_404(session, auth.company_id, week_id)

    if week.status != expected.value:
        raise InvalidTransition(
            f"Cannot {action.value.lower()} a week that is {week.status}",
            current_status=week.status,
            action=action.value.lower(),
        )

    before_dict = model_to_audit_dict(week)
    now = now_utc()

    week.status = new_status.value
    if new_status == WeekStatus.APPROVED:
        week.approved_by = auth.user_id
        week.approved_at = now
    else:
        week.approved_by = None
        week.approved_at = None
        week.rejected_by = auth.user_id
        week.rejected_at = now
        week.rejection_reason = reason

    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        worker_id=week.worker_id,
        entity_type=AuditEntityType.WEEK,
        entity_id=week.id,
        action=action,
        before_json=before_dict,
        after_json=model_to_audit_dict(week),
    )

    await session.commit()
    await session.refresh(week)
    logger.info("Week %s for worker %s moved to %s", week.week_start, week.worker_id, week.status)
    return build_week_response(week)


async def approve_week(
    session: AsyncSession,
    auth: AuthContext,
    week_id: uuid.UUID,
) -> WeekResponse:
    """Approve a submitted week. Its entries become immutable."""
    return await _decide(
        session,
        auth,
        week_id,
        expected=WeekStatus.SUBMITTED,
        new_status=WeekStatus.APPROVED,
        action=AuditAction.APPROVE,
    )


async def reject_week(
    session: AsyncSession,
    auth: AuthContext,
    week_id: uuid.UUID,
    payload: WeekReasonPayload,
) -> WeekResponse:
    """Reject a submitted week. Entries are kept and become editable again."""
    return await _decide(
        session,
        auth,
        week_id,
        expected=WeekStatus.SUBMITTED,
        new_status=WeekStatus.REJECTED,
        action=AuditAction.REJECT,
        reason=payload.reason,
    )


async def reopen_week(
    session: AsyncSession,
    auth: AuthContext,
    week_id: uuid.UUID,
    payload: WeekReasonPayload,
) -> WeekResponse:
    """Send an approved week back to REJECTED so it can be corrected or take leave."""
    return await _decide(
        session,
        auth,
        week_id,
        expected=WeekStatus.APPROVED,
        new_status=WeekStatus.REJECTED,
        action=AuditAction.REOPEN,
        reason=payload.reason,
    )


async def get_week(
    session: AsyncSession,
    company_id: uuid.UUID,
    week_id: uuid.UUID,
) -> WeekResponse:
    """Get a single week by ID."""
    result = await session.execute(
        select(TimesheetWeek).where(
            col(TimesheetWeek.id) == week_id,
            col(TimesheetWeek.company_id) == company_id,
        )
    )
    week = result.scalar_one_or_none()
    if week is None:
        raise AppError("Week not found", status_code=404)
    return build_week_response(week)


async def list_weeks(
    session: AsyncSession,
    company_id: uuid.UUID,
    status_filter: str | None = None,
    worker_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> WeekListResponse:
    """List weeks with optional filters, most recent week first."""
    base_filters = [col(TimesheetWeek.company_id) == company_id]

    if status_filter is not None:
        base_filters.append(col(TimesheetWeek.status) == status_filter)
    if worker_id is not None:
        base_filters.append(col(TimesheetWeek.worker_id) == worker_id)

    count_result = await session.execute(select(func.count()).select_from(TimesheetWeek).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(TimesheetWeek)
        .where(*base_filters)
        .order_by(col(TimesheetWeek.week_start).desc(), col(TimesheetWeek.worker_id))
        .offset(offset)
        .limit(limit)
    )
    weeks = list(result.scalars().all())

    return WeekListResponse(items=[build_week_response(w) for w in weeks], total=total)
