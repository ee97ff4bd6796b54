"""Tests for the worker and assignment directory stubs and their endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from time_ledger.config import get_settings
from time_ledger.services.assignment import AssignmentInfo, InMemoryAssignmentDirectory
from time_ledger.services.worker import InMemoryWorkerDirectory, WorkerInfo

if TYPE_CHECKING:
    from httpx import AsyncClient

COMPANY_A = uuid.uuid4()
COMPANY_B = uuid.uuid4()
MANAGER_ID = uuid.uuid4()

MANAGER_HEADERS = {
    "X-Company-Id": str(COMPANY_A),
    "X-User-Id": str(MANAGER_ID),
    "X-Role": "admin",
}
BASE_URL = f"/companies/{COMPANY_A}"


def _make_worker(company_id: uuid.UUID, last_name: str = "Doe", **kwargs: object) -> WorkerInfo:
    return WorkerInfo(
        id=uuid.uuid4(),
        company_id=company_id,
        first_name="Jane",
        last_name=last_name,
        email=f"{last_name.lower()}@example.com",
        **kwargs,
    )


# ---------------------------------------------------------------------------
# WorkerInfo
# ---------------------------------------------------------------------------


def test_worker_default_allowance_comes_from_settings() -> None:
    worker = _make_worker(COMPANY_A)
    assert worker.annual_leave_allowance == get_settings().default_annual_leave_days


def test_worker_tenure_end_is_earliest_end() -> None:
    worker = _make_worker(COMPANY_A, end_date=date(2024, 12, 31), termination_date=date(2024, 6, 30))
    assert worker.tenure_end == date(2024, 6, 30)
    assert _make_worker(COMPANY_A, end_date=date(2024, 12, 31)).tenure_end == date(2024, 12, 31)
    assert _make_worker(COMPANY_A).tenure_end is None


def test_worker_is_active_on() -> None:
    worker = _make_worker(COMPANY_A, start_date=date(2024, 1, 1), end_date=date(2024, 6, 30))
    assert not worker.is_active_on(date(2023, 12, 31))
    assert worker.is_active_on(date(2024, 1, 1))
    assert worker.is_active_on(date(2024, 6, 30))
    assert not worker.is_active_on(date(2024, 7, 1))
    assert not _make_worker(COMPANY_A).is_active_on(date(2024, 1, 1))


# ---------------------------------------------------------------------------
# In-memory directories
# ---------------------------------------------------------------------------


async def test_worker_directory_get_not_found() -> None:
    directory = InMemoryWorkerDirectory()
    assert await directory.get_worker(COMPANY_A, uuid.uuid4()) is None


async def test_worker_directory_is_company_scoped() -> None:
    directory = InMemoryWorkerDirectory()
    worker = _make_worker(COMPANY_A)
    directory.seed(worker)
    assert await directory.get_worker(COMPANY_A, worker.id) == worker
    assert await directory.get_worker(COMPANY_B, worker.id) is None
    assert await directory.list_workers(COMPANY_B) == []


async def test_worker_directory_lists_by_name() -> None:
    directory = InMemoryWorkerDirectory()
    for name in ("Petit", "Durand", "Martin"):
        directory.seed(_make_worker(COMPANY_A, name))
    workers = await directory.list_workers(COMPANY_A)
    assert [w.last_name for w in workers] == ["Durand", "Martin", "Petit"]


async def test_assignment_directory_lists_for_worker() -> None:
    directory = InMemoryAssignmentDirectory()
    worker_id = uuid.uuid4()
    mine = AssignmentInfo(id=uuid.uuid4(), company_id=COMPANY_A, worker_id=worker_id, display_name="Acme")
    other = AssignmentInfo(id=uuid.uuid4(), company_id=COMPANY_A, worker_id=uuid.uuid4(), display_name="Globex")
    directory.seed(mine)
    directory.seed(other)

    assert await directory.get_assignment(COMPANY_A, mine.id) == mine
    assert await directory.get_assignment(COMPANY_B, mine.id) is None
    assert await directory.list_for_worker(COMPANY_A, worker_id) == [mine]


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


async def test_upsert_and_get_worker(
    async_client: AsyncClient, worker_directory: InMemoryWorkerDirectory
) -> None:
    worker_id = uuid.uuid4()
    resp = await async_client.put(
        f"{BASE_URL}/workers/{worker_id}",
        json={
            "first_name": "Amelie",
            "last_name": "Durand",
            "email": "amelie@example.com",
            "start_date": "2024-01-01",
            "annual_leave_allowance": 30,
        },
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["annual_leave_allowance"] == 30

    fetched = await async_client.get(f"{BASE_URL}/workers/{worker_id}", headers=MANAGER_HEADERS)
    assert fetched.status_code == 200
    data = fetched.json()
    assert data["id"] == str(worker_id)
    assert data["start_date"] == "2024-01-01"
    assert data["end_date"] is None

    listing = await async_client.get(f"{BASE_URL}/workers", headers=MANAGER_HEADERS)
    assert listing.json()["total"] == 1


async def test_upsert_worker_uses_default_allowance(
    async_client: AsyncClient, worker_directory: InMemoryWorkerDirectory
) -> None:
    resp = await async_client.put(
        f"{BASE_URL}/workers/{uuid.uuid4()}",
        json={"first_name": "Bruno", "last_name": "Martin", "email": "bruno@example.com"},
        headers=MANAGER_HEADERS,
    )
    assert resp.json()["annual_leave_allowance"] == get_settings().default_annual_leave_days


async def test_upsert_worker_rejects_end_before_start(
    async_client: AsyncClient, worker_directory: InMemoryWorkerDirectory
) -> None:
    resp = await async_client.put(
        f"{BASE_URL}/workers/{uuid.uuid4()}",
        json={
            "first_name": "Bruno",
            "last_name": "Martin",
            "email": "bruno@example.com",
            "start_date": "2024-06-01",
            "end_date": "2024-05-31",
        },
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 422


async def test_get_unknown_worker(async_client: AsyncClient, worker_directory: InMemoryWorkerDirectory) -> None:
    resp = await async_client.get(f"{BASE_URL}/workers/{uuid.uuid4()}", headers=MANAGER_HEADERS)
    assert resp.status_code == 404


async def test_worker_cannot_upsert_workers(
    async_client: AsyncClient, worker_directory: InMemoryWorkerDirectory
) -> None:
    headers = {**MANAGER_HEADERS, "X-Role": "worker"}
    resp = await async_client.put(
        f"{BASE_URL}/workers/{uuid.uuid4()}",
        json={"first_name": "Bruno", "last_name": "Martin", "email": "bruno@example.com"},
        headers=headers,
    )
    assert resp.status_code == 403


async def test_upsert_assignment_and_book_against_it(
    async_client: AsyncClient,
    worker_directory: InMemoryWorkerDirectory,
    assignment_directory: InMemoryAssignmentDirectory,
) -> None:
    worker_id = uuid.uuid4()
    assignment_id = uuid.uuid4()
    resp = await async_client.put(
        f"{BASE_URL}/assignments/{assignment_id}",
        json={"worker_id": str(worker_id), "display_name": "Acme Bank"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Acme Bank"

    listing = await async_client.get(f"{BASE_URL}/workers/{worker_id}/assignments", headers=MANAGER_HEADERS)
    assert [a["id"] for a in listing.json()] == [str(assignment_id)]

    worker_headers = {**MANAGER_HEADERS, "X-User-Id": str(worker_id), "X-Role": "worker"}
    slot = await async_client.put(
        f"{BASE_URL}/workers/{worker_id}/slots/2024-06-03/AM",
        json={"entry_type": "ASSIGNMENT", "assignment_ref": str(assignment_id)},
        headers=worker_headers,
    )
    assert slot.status_code == 200
    assert slot.json()["assignment_ref"] == str(assignment_id)
