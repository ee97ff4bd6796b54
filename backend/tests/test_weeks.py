"""Tests for the weekly submission state machine."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from time_ledger.models.audit import AuditLog

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

COMPANY_ID = uuid.uuid4()
MANAGER_ID = uuid.uuid4()
WORKER_ID = uuid.uuid4()
OTHER_WORKER_ID = uuid.uuid4()

MANAGER_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(MANAGER_ID),
    "X-Role": "admin",
}
WORKER_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(WORKER_ID),
    "X-Role": "worker",
}
WORKER_URL = f"/companies/{COMPANY_ID}/workers/{WORKER_ID}"
WEEKS_URL = f"/companies/{COMPANY_ID}/weeks"
MONDAY = date(2024, 6, 3)


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _fill_week(
    client: AsyncClient,
    monday: date = MONDAY,
    *,
    skip: set[tuple[date, str]] | None = None,
) -> None:
    skip = skip or set()
    for offset in range(5):
        day = monday + timedelta(days=offset)
        for period in ("AM", "PM"):
            if (day, period) in skip:
                continue
            resp = await client.put(
                f"{WORKER_URL}/slots/{day.isoformat()}/{period}",
                json={"entry_type": "BENCH"},
                headers=WORKER_HEADERS,
            )
            assert resp.status_code == 200


async def _submit(client: AsyncClient, monday: date = MONDAY) -> dict:
    resp = await client.post(f"{WORKER_URL}/weeks/{monday.isoformat()}/submit", headers=WORKER_HEADERS)
    assert resp.status_code == 200, resp.text
    result: dict = resp.json()
    return result


async def _submitted_week(client: AsyncClient, monday: date = MONDAY) -> str:
    await _fill_week(client, monday)
    week = await _submit(client, monday)
    result: str = week["id"]
    return result


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------


async def test_submit_empty_week_lists_every_slot(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"{WORKER_URL}/weeks/2024-06-03/submit", headers=WORKER_HEADERS)
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "IncompleteWeek"
    missing = data["context"]["missing"]
    assert len(missing) == 10
    assert missing[0] == {"date": "2024-06-03", "period": "AM"}
    assert missing[1] == {"date": "2024-06-03", "period": "PM"}
    assert missing[-1] == {"date": "2024-06-07", "period": "PM"}


async def test_submit_lists_exactly_missing_slots(async_client: AsyncClient) -> None:
    wednesday = MONDAY + timedelta(days=2)
    friday = MONDAY + timedelta(days=4)
    await _fill_week(async_client, skip={(wednesday, "PM"), (friday, "AM")})

    resp = await async_client.post(f"{WORKER_URL}/weeks/2024-06-03/submit", headers=WORKER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["context"]["missing"] == [
        {"date": "2024-06-05", "period": "PM"},
        {"date": "2024-06-07", "period": "AM"},
    ]


async def test_submit_complete_week(async_client: AsyncClient) -> None:
    await _fill_week(async_client)
    week = await _submit(async_client)
    assert week["status"] == "SUBMITTED"
    assert week["worker_id"] == str(WORKER_ID)
    assert week["week_start"] == "2024-06-03"
    assert week["submitted_at"] is not None

    view = await async_client.get(f"{WORKER_URL}/weeks/2024-06-03", headers=WORKER_HEADERS)
    assert view.json()["status"] == "SUBMITTED"
    assert view.json()["is_locked"] is True
    assert view.json()["week_id"] == week["id"]


async def test_resubmit_is_invalid_transition(async_client: AsyncClient) -> None:
    await _submitted_week(async_client)
    resp = await async_client.post(f"{WORKER_URL}/weeks/2024-06-03/submit", headers=WORKER_HEADERS)
    assert resp.status_code == 409
    data = resp.json()
    assert data["error"] == "InvalidTransition"
    assert data["context"] == {"current_status": "SUBMITTED", "action": "submit"}


async def test_submit_requires_monday(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"{WORKER_URL}/weeks/2024-06-05/submit", headers=WORKER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidPeriod"


async def test_worker_cannot_submit_for_someone_else(async_client: AsyncClient) -> None:
    headers = {**WORKER_HEADERS, "X-User-Id": str(OTHER_WORKER_ID)}
    resp = await async_client.post(f"{WORKER_URL}/weeks/2024-06-03/submit", headers=headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# approve / reject / reopen
# ---------------------------------------------------------------------------


async def test_approve_week(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    resp = await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "APPROVED"
    assert data["approved_by"] == str(MANAGER_ID)
    assert data["approved_at"] is not None


async def test_approved_week_is_locked(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)

    resp = await async_client.put(
        f"{WORKER_URL}/slots/2024-06-03/AM", json={"entry_type": "BENCH"}, headers=WORKER_HEADERS
    )
    assert resp.status_code == 409
    assert resp.json()["context"]["status"] == "APPROVED"


async def test_worker_cannot_approve(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    resp = await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=WORKER_HEADERS)
    assert resp.status_code == 403


async def test_approve_twice_is_invalid_transition(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)
    resp = await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["context"]["current_status"] == "APPROVED"


async def test_approve_unknown_week(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"{WEEKS_URL}/{uuid.uuid4()}/approve", headers=MANAGER_HEADERS)
    assert resp.status_code == 404


async def test_reject_requires_reason(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    for body in ({}, {"reason": ""}, {"reason": "   "}):
        resp = await async_client.post(f"{WEEKS_URL}/{week_id}/reject", json=body, headers=MANAGER_HEADERS)
        assert resp.status_code == 422


async def test_reject_keeps_entries_and_allows_resubmission(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)

    rejected = await async_client.post(
        f"{WEEKS_URL}/{week_id}/reject", json={"reason": "needs detail"}, headers=MANAGER_HEADERS
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "REJECTED"
    assert rejected.json()["rejection_reason"] == "needs detail"

    view = await async_client.get(f"{WORKER_URL}/weeks/2024-06-03", headers=WORKER_HEADERS)
    data = view.json()
    assert data["status"] == "REJECTED"
    assert data["is_locked"] is False
    weekdays = data["days"][:5]
    assert all(d["am"]["entry_type"] == "BENCH" and d["pm"]["entry_type"] == "BENCH" for d in weekdays)

    edit = await async_client.put(
        f"{WORKER_URL}/slots/2024-06-04/AM", json={"entry_type": "BENCH"}, headers=WORKER_HEADERS
    )
    assert edit.status_code == 200

    view = await async_client.get(f"{WORKER_URL}/weeks/2024-06-03", headers=WORKER_HEADERS)
    assert view.json()["status"] == "DRAFT"

    resubmitted = await _submit(async_client)
    assert resubmitted["status"] == "SUBMITTED"
    assert resubmitted["id"] == week_id
    assert resubmitted["rejection_reason"] is None


async def test_rejected_week_can_be_resubmitted_without_edits(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/reject", json={"reason": "check"}, headers=MANAGER_HEADERS)
    week = await _submit(async_client)
    assert week["status"] == "SUBMITTED"


async def test_reject_twice_is_invalid_transition(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/reject", json={"reason": "no"}, headers=MANAGER_HEADERS)
    resp = await async_client.post(f"{WEEKS_URL}/{week_id}/reject", json={"reason": "no"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransition"


async def test_reopen_approved_week(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)

    resp = await async_client.post(
        f"{WEEKS_URL}/{week_id}/reopen", json={"reason": "wrong client"}, headers=MANAGER_HEADERS
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "REJECTED"
    assert data["approved_by"] is None
    assert data["approved_at"] is None
    assert data["rejection_reason"] == "wrong client"

    edit = await async_client.put(
        f"{WORKER_URL}/slots/2024-06-03/AM", json={"entry_type": "BENCH"}, headers=WORKER_HEADERS
    )
    assert edit.status_code == 200


async def test_reopen_requires_approved(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    resp = await async_client.post(f"{WEEKS_URL}/{week_id}/reopen", json={"reason": "x"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["context"] == {"current_status": "SUBMITTED", "action": "reopen"}


# ---------------------------------------------------------------------------
# Queries and audit
# ---------------------------------------------------------------------------


async def test_list_weeks_filters(async_client: AsyncClient) -> None:
    first = await _submitted_week(async_client)
    await _submitted_week(async_client, MONDAY + timedelta(days=7))
    await async_client.post(f"{WEEKS_URL}/{first}/approve", headers=MANAGER_HEADERS)

    resp = await async_client.get(WEEKS_URL, params={"status": "SUBMITTED"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["week_start"] == "2024-06-10"

    everything = await async_client.get(WEEKS_URL, headers=MANAGER_HEADERS)
    assert [w["week_start"] for w in everything.json()["items"]] == ["2024-06-10", "2024-06-03"]


async def test_worker_only_lists_own_weeks(async_client: AsyncClient) -> None:
    await _submitted_week(async_client)
    other_headers = {**WORKER_HEADERS, "X-User-Id": str(OTHER_WORKER_ID)}
    resp = await async_client.get(WEEKS_URL, params={"worker_id": str(WORKER_ID)}, headers=other_headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == 0


async def test_get_week(async_client: AsyncClient) -> None:
    week_id = await _submitted_week(async_client)
    resp = await async_client.get(f"{WEEKS_URL}/{week_id}", headers=WORKER_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["id"] == week_id

    other_headers = {**WORKER_HEADERS, "X-User-Id": str(OTHER_WORKER_ID)}
    hidden = await async_client.get(f"{WEEKS_URL}/{week_id}", headers=other_headers)
    assert hidden.status_code == 404


async def test_transitions_are_audited(async_client: AsyncClient, db_session: AsyncSession) -> None:
    week_id = await _submitted_week(async_client)
    await async_client.post(f"{WEEKS_URL}/{week_id}/approve", headers=MANAGER_HEADERS)

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_type) == "WEEK",
            col(AuditLog.entity_id) == uuid.UUID(week_id),
        )
    )
    entries = {e.action: e for e in result.scalars().all()}
    assert set(entries) == {"SUBMIT", "APPROVE"}
    assert entries["SUBMIT"].actor_id == WORKER_ID
    assert entries["SUBMIT"].before_json is None
    assert entries["APPROVE"].actor_id == MANAGER_ID
    assert entries["APPROVE"].before_json["status"] == "SUBMITTED"
    assert entries["APPROVE"].after_json["status"] == "APPROVED"
    assert entries["APPROVE"].worker_id == WORKER_ID
