"""Seed script for development data.

Run with:  python -m time_ledger.seed
The API must already be running at BASE_URL.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
COMPANY_ID = "00000000-0000-0000-0000-000000000001"
MANAGER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-Company-Id": COMPANY_ID,
    "X-User-Id": MANAGER_ID,
    "X-Role": "admin",
}

# Well-known worker UUIDs
AMELIE_ID = "00000000-0000-0000-0000-000000000002"
BRUNO_ID = "00000000-0000-0000-0000-000000000003"
CHLOE_ID = "00000000-0000-0000-0000-000000000004"

WORKERS = [
    {
        "id": AMELIE_ID,
        "first_name": "Amelie",
        "last_name": "Durand",
        "email": "amelie.durand@example.com",
        "start_date": "2024-01-01",
        "annual_leave_allowance": 25,
    },
    {
        "id": BRUNO_ID,
        "first_name": "Bruno",
        "last_name": "Martin",
        "email": "bruno.martin@example.com",
        "start_date": "2024-09-02",
        "annual_leave_allowance": 25,
    },
    {
        "id": CHLOE_ID,
        "first_name": "Chloe",
        "last_name": "Petit",
        "email": "chloe.petit@example.com",
        "start_date": "2023-03-01",
        "end_date": "2026-12-31",
        "annual_leave_allowance": 20,
    },
]

# Assignments: (assignment_id, worker_id, display_name)
ASSIGNMENTS = [
    ("00000000-0000-0000-0000-00000000a001", AMELIE_ID, "Acme Bank - data platform"),
    ("00000000-0000-0000-0000-00000000a002", BRUNO_ID, "Globex - mobile app"),
    ("00000000-0000-0000-0000-00000000a003", CHLOE_ID, "Initech - migration"),
]

HOLIDAYS = [
    {"date": "2026-01-01", "name": "New Year's Day"},
    {"date": "2026-04-06", "name": "Easter Monday"},
    {"date": "2026-05-01", "name": "Labour Day"},
    {"date": "2026-07-14", "name": "Bastille Day"},
    {"date": "2026-12-25", "name": "Christmas Day"},
]


def _worker_headers(worker_id: str) -> dict[str, str]:
    return {**HEADERS, "X-User-Id": worker_id, "X-Role": "worker"}


async def _safe_post(
    client: httpx.AsyncClient,
    url: str,
    json: dict | None,
    label: str,
    headers: dict[str, str] | None = None,
) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=headers or HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} ({resp.json().get('error', 'conflict')})")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _safe_put(
    client: httpx.AsyncClient,
    url: str,
    json: dict,
    label: str,
    headers: dict[str, str] | None = None,
) -> dict | None:
    """PUT (upsert), naturally idempotent."""
    resp = await client.put(url, json=json, headers=headers or HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_workers(client: httpx.AsyncClient) -> None:
    """Seed workers in the stub directory."""
    print("\n--- Seeding workers ---")
    for worker in WORKERS:
        body = {k: v for k, v in worker.items() if k != "id"}
        await _safe_put(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/workers/{worker['id']}",
            body,
            f"Worker: {worker['first_name']} {worker['last_name']}",
        )


async def seed_assignments(client: httpx.AsyncClient) -> None:
    """Seed assignments in the stub directory."""
    print("\n--- Seeding assignments ---")
    for assignment_id, worker_id, name in ASSIGNMENTS:
        await _safe_put(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/assignments/{assignment_id}",
            {"worker_id": worker_id, "display_name": name},
            f"Assignment: {name}",
        )


async def seed_holidays(client: httpx.AsyncClient) -> None:
    """Seed company holidays. Each one is stamped into active workers' calendars."""
    print("\n--- Seeding holidays ---")
    for holiday in HOLIDAYS:
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/holidays",
            holiday,
            f"Holiday: {holiday['name']}",
        )


async def seed_timesheet(client: httpx.AsyncClient, monday: date) -> None:
    """Fill and submit Amelie's timesheet for the week of ``monday``, then approve it."""
    print(f"\n--- Seeding timesheet for week of {monday} ---")
    headers = _worker_headers(AMELIE_ID)
    assignment_id = ASSIGNMENTS[0][0]

    for offset in range(5):
        day = monday + timedelta(days=offset)
        for period in ("AM", "PM"):
            # Friday afternoon on the bench.
            if offset == 4 and period == "PM":
                body: dict = {"entry_type": "BENCH"}
            else:
                body = {"entry_type": "ASSIGNMENT", "assignment_ref": assignment_id}
            resp = await client.put(
                f"{BASE_URL}/companies/{COMPANY_ID}/workers/{AMELIE_ID}/slots/{day.isoformat()}/{period}",
                json=body,
                headers=headers,
            )
            if resp.status_code not in (200, 409):
                print(f"  [ERROR] Slot {day} {period}: {resp.status_code} {resp.text[:200]}")

    week = await _safe_post(
        client,
        f"{BASE_URL}/companies/{COMPANY_ID}/workers/{AMELIE_ID}/weeks/{monday.isoformat()}/submit",
        None,
        "Submit Amelie's week",
        headers=headers,
    )
    if week:
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/weeks/{week['id']}/approve",
            None,
            "Approve Amelie's week",
        )


async def seed_leave(client: httpx.AsyncClient, monday: date) -> None:
    """Seed one approved and one pending leave request."""
    print("\n--- Seeding leave requests ---")
    approved = await _safe_post(
        client,
        f"{BASE_URL}/companies/{COMPANY_ID}/leave-requests",
        {
            "worker_id": BRUNO_ID,
            "leave_type": "ANNUAL",
            "dates": [(monday + timedelta(days=d)).isoformat() for d in (1, 2)],
            "notes": "Family visit",
        },
        "Leave: Bruno 2 days annual",
        headers=_worker_headers(BRUNO_ID),
    )
    if approved:
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/leave-requests/{approved['id']}/approve",
            None,
            "Approve Bruno's leave",
        )

    await _safe_post(
        client,
        f"{BASE_URL}/companies/{COMPANY_ID}/leave-requests",
        {
            "worker_id": CHLOE_ID,
            "leave_type": "SICK",
            "dates": [(monday + timedelta(days=3)).isoformat()],
        },
        "Leave: Chloe 1 day sick (PENDING)",
        headers=_worker_headers(CHLOE_ID),
    )


async def main() -> None:
    print("=" * 60)
    print("  Time & Leave Ledger - Development Seed Script")
    print("=" * 60)

    today = date.today()
    this_monday = today - timedelta(days=today.weekday())
    last_monday = this_monday - timedelta(days=7)
    next_monday = this_monday + timedelta(days=7)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_workers(client)
        await seed_assignments(client)
        await seed_holidays(client)
        await seed_timesheet(client, last_monday)
        await seed_leave(client, next_monday)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
