"""Tests for the half-day slot ledger: writes, clears, locking and listing."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from time_ledger.models.audit import AuditLog
from time_ledger.services.assignment import AssignmentInfo
from time_ledger.services.worker import WorkerInfo

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from time_ledger.services.assignment import InMemoryAssignmentDirectory
    from time_ledger.services.worker import InMemoryWorkerDirectory

COMPANY_ID = uuid.uuid4()
MANAGER_ID = uuid.uuid4()
WORKER_ID = uuid.uuid4()
OTHER_WORKER_ID = uuid.uuid4()
ASSIGNMENT_ID = uuid.uuid4()
OTHER_ASSIGNMENT_ID = uuid.uuid4()

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
OTHER_WORKER_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(OTHER_WORKER_ID),
}
WORKER_URL = f"/companies/{COMPANY_ID}/workers/{WORKER_ID}"
MONDAY = date(2024, 6, 3)


@pytest.fixture(autouse=True)
def _seed_directories(
    worker_directory: InMemoryWorkerDirectory,
    assignment_directory: InMemoryAssignmentDirectory,
) -> None:
    for worker_id, name in ((WORKER_ID, "Durand"), (OTHER_WORKER_ID, "Martin")):
        worker_directory.seed(
            WorkerInfo(
                id=worker_id,
                company_id=COMPANY_ID,
                first_name="Test",
                last_name=name,
                email=f"{name.lower()}@example.com",
                start_date=date(2024, 1, 1),
            )
        )
    assignment_directory.seed(
        AssignmentInfo(id=ASSIGNMENT_ID, company_id=COMPANY_ID, worker_id=WORKER_ID, display_name="Acme")
    )
    assignment_directory.seed(
        AssignmentInfo(id=OTHER_ASSIGNMENT_ID, company_id=COMPANY_ID, worker_id=OTHER_WORKER_ID, display_name="Globex")
    )


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _slot_url(day: date | str, period: str = "AM") -> str:
    value = day.isoformat() if isinstance(day, date) else day
    return f"{WORKER_URL}/slots/{value}/{period}"


def _assignment() -> dict:
    return {"entry_type": "ASSIGNMENT", "assignment_ref": str(ASSIGNMENT_ID)}


async def _fill_week(client: AsyncClient, monday: date = MONDAY) -> None:
    for offset in range(5):
        for period in ("AM", "PM"):
            resp = await client.put(
                _slot_url(monday + timedelta(days=offset), period),
                json={"entry_type": "BENCH"},
                headers=WORKER_HEADERS,
            )
            assert resp.status_code == 200


# ---------------------------------------------------------------------------
# upsert_slot
# ---------------------------------------------------------------------------


async def test_upsert_assignment_slot(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json=_assignment(), headers=WORKER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["worker_id"] == str(WORKER_ID)
    assert data["date"] == "2024-06-03"
    assert data["period"] == "AM"
    assert data["entry_type"] == "ASSIGNMENT"
    assert data["assignment_ref"] == str(ASSIGNMENT_ID)
    assert data["leave_request_id"] is None


async def test_upsert_overwrites_existing_slot(async_client: AsyncClient, db_session: AsyncSession) -> None:
    first = await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    second = await async_client.put(_slot_url(MONDAY), json=_assignment(), headers=WORKER_HEADERS)
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["entry_type"] == "ASSIGNMENT"

    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_id) == uuid.UUID(first.json()["id"]))
    )
    actions = sorted(e.action for e in result.scalars().all())
    assert actions == ["CREATE", "UPDATE"]


@pytest.mark.parametrize("entry_type", ["LEAVE", "HOLIDAY"])
async def test_upsert_rejects_system_managed_types(async_client: AsyncClient, entry_type: str) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": entry_type}, headers=WORKER_HEADERS)
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "SystemManagedType"
    assert data["context"]["entry_type"] == entry_type


async def test_upsert_rejects_system_managed_types_for_managers(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": "LEAVE"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "SystemManagedType"


async def test_assignment_requires_ref(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": "ASSIGNMENT"}, headers=WORKER_HEADERS)
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_bench_rejects_ref(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        _slot_url(MONDAY),
        json={"entry_type": "BENCH", "assignment_ref": str(ASSIGNMENT_ID)},
        headers=WORKER_HEADERS,
    )
    assert resp.status_code == 422


async def test_unknown_period_is_validation_error(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY, "EVENING"), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    assert resp.status_code == 422


async def test_upsert_weekend_is_invalid_period(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(date(2024, 6, 8)), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidPeriod"


async def test_upsert_malformed_date_is_invalid_period(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url("2024-13-01"), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidPeriod"


async def test_upsert_unknown_assignment(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        _slot_url(MONDAY),
        json={"entry_type": "ASSIGNMENT", "assignment_ref": str(uuid.uuid4())},
        headers=WORKER_HEADERS,
    )
    assert resp.status_code == 404


async def test_upsert_assignment_of_another_worker(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        _slot_url(MONDAY),
        json={"entry_type": "ASSIGNMENT", "assignment_ref": str(OTHER_ASSIGNMENT_ID)},
        headers=WORKER_HEADERS,
    )
    assert resp.status_code == 400


async def test_worker_cannot_edit_another_calendar(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=OTHER_WORKER_HEADERS)
    assert resp.status_code == 403


async def test_manager_can_edit_worker_calendar(async_client: AsyncClient) -> None:
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 200


async def test_company_mismatch_is_forbidden(async_client: AsyncClient) -> None:
    headers = {**WORKER_HEADERS, "X-Company-Id": str(uuid.uuid4())}
    resp = await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# clear_slot
# ---------------------------------------------------------------------------


async def test_clear_empty_slot_twice_is_noop(async_client: AsyncClient, db_session: AsyncSession) -> None:
    for _ in range(2):
        resp = await async_client.delete(_slot_url(MONDAY), headers=WORKER_HEADERS)
        assert resp.status_code == 204

    result = await db_session.execute(select(AuditLog))
    assert result.scalars().all() == []


async def test_clear_slot_removes_entry(async_client: AsyncClient) -> None:
    await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    resp = await async_client.delete(_slot_url(MONDAY), headers=WORKER_HEADERS)
    assert resp.status_code == 204

    listing = await async_client.get(
        f"{WORKER_URL}/slots", params={"from": "2024-06-03", "to": "2024-06-09"}, headers=WORKER_HEADERS
    )
    assert listing.json()["total"] == 0

    again = await async_client.delete(_slot_url(MONDAY), headers=WORKER_HEADERS)
    assert again.status_code == 204


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------


async def test_submitted_week_locks_slots(async_client: AsyncClient) -> None:
    await _fill_week(async_client)
    submit = await async_client.post(f"{WORKER_URL}/weeks/{MONDAY.isoformat()}/submit", headers=WORKER_HEADERS)
    assert submit.status_code == 200

    resp = await async_client.put(_slot_url(MONDAY), json=_assignment(), headers=WORKER_HEADERS)
    assert resp.status_code == 409
    data = resp.json()
    assert data["error"] == "SlotLocked"
    assert data["context"] == {"week_start": "2024-06-03", "status": "SUBMITTED"}

    cleared = await async_client.delete(_slot_url(MONDAY, "PM"), headers=WORKER_HEADERS)
    assert cleared.status_code == 409
    assert cleared.json()["error"] == "SlotLocked"


async def test_lock_is_per_week(async_client: AsyncClient) -> None:
    await _fill_week(async_client)
    await async_client.post(f"{WORKER_URL}/weeks/{MONDAY.isoformat()}/submit", headers=WORKER_HEADERS)

    next_monday = MONDAY + timedelta(days=7)
    resp = await async_client.put(_slot_url(next_monday), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


async def test_list_range_orders_by_date_then_period(async_client: AsyncClient) -> None:
    tuesday = MONDAY + timedelta(days=1)
    for day, period in ((tuesday, "PM"), (tuesday, "AM"), (MONDAY, "PM"), (MONDAY, "AM")):
        await async_client.put(_slot_url(day, period), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)

    resp = await async_client.get(
        f"{WORKER_URL}/slots", params={"from": "2024-06-03", "to": "2024-06-04"}, headers=WORKER_HEADERS
    )
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [(i["date"], i["period"]) for i in items] == [
        ("2024-06-03", "AM"),
        ("2024-06-03", "PM"),
        ("2024-06-04", "AM"),
        ("2024-06-04", "PM"),
    ]


async def test_list_range_bounds_are_inclusive(async_client: AsyncClient) -> None:
    await async_client.put(_slot_url(MONDAY), json={"entry_type": "BENCH"}, headers=WORKER_HEADERS)
    resp = await async_client.get(
        f"{WORKER_URL}/slots", params={"from": "2024-06-03", "to": "2024-06-03"}, headers=WORKER_HEADERS
    )
    assert resp.json()["total"] == 1


async def test_list_range_end_before_start(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        f"{WORKER_URL}/slots", params={"from": "2024-06-05", "to": "2024-06-03"}, headers=WORKER_HEADERS
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidPeriod"


async def test_worker_cannot_read_another_calendar(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        f"{WORKER_URL}/slots", params={"from": "2024-06-03", "to": "2024-06-09"}, headers=OTHER_WORKER_HEADERS
    )
    assert resp.status_code == 403


async def test_week_view_of_untouched_week(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{WORKER_URL}/weeks/2024-06-03", headers=WORKER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "DRAFT"
    assert data["is_locked"] is False
    assert data["week_id"] is None
    assert len(data["days"]) == 7
    assert [d["is_weekend"] for d in data["days"]] == [False] * 5 + [True] * 2
    assert all(d["am"] is None and d["pm"] is None for d in data["days"])


async def test_week_view_shows_slots(async_client: AsyncClient) -> None:
    await async_client.put(_slot_url(MONDAY, "PM"), json=_assignment(), headers=WORKER_HEADERS)
    resp = await async_client.get(f"{WORKER_URL}/weeks/2024-06-03", headers=MANAGER_HEADERS)
    monday = resp.json()["days"][0]
    assert monday["am"] is None
    assert monday["pm"]["entry_type"] == "ASSIGNMENT"


async def test_week_view_requires_monday(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{WORKER_URL}/weeks/2024-06-04", headers=WORKER_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidPeriod"
