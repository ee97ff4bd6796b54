# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from time_ledger.api.deps import AdminDep, AuthDep, validate_company_scope
from time_ledger.exceptions import AppError
from time_ledger.schemas.worker import (
    AssignmentResponse,
    UpsertAssignmentRequest,
    UpsertWorkerRequest,
    WorkerListResponse,
    WorkerResponse,
)
from time_ledger.services.assignment import AssignmentInfo, get_assignment_directory
from time_ledger.services.worker import WorkerInfo, get_worker_directory

workers_router = APIRouter(
    prefix="/companies/{company_id}",
    tags=["workers"],
    dependencies=[Depends(validate_company_scope)],
)


def _worker_response(worker: WorkerInfo) -> WorkerResponse:
    return WorkerResponse(**worker.model_dump())


@workers_router.put("/workers/{worker_id}", response_model=WorkerResponse)
async def upsert_worker(
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    payload: UpsertWorkerRequest,
    auth: AdminDep,
) -> WorkerResponse:
    """Create or update a worker in the stub directory (admin only)."""
    worker = WorkerInfo(
        id=worker_id,
        company_id=company_id,
        **payload.model_dump(exclude_none=True),
    )
    get_worker_directory().seed(worker)  # ty: ignore[unresolved-attribute]
    return _worker_response(worker)


@workers_router.get("/workers/{worker_id}", response_model=WorkerResponse)
async def get_worker(
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    auth: AuthDep,
) -> WorkerResponse:
    """Get worker info from the directory."""
    worker = await get_worker_directory().get_worker(company_id, worker_id)
    if worker is None:
        raise AppError("Worker not found", status_code=404)
    return _worker_response(worker)


@workers_router.get("/workers", response_model=WorkerListResponse)
async def list_workers(
    company_id: uuid.UUID,
    auth: AdminDep,
) -> WorkerListResponse:
    """List all workers of a company (admin only)."""
    workers = await get_worker_directory().list_workers(company_id)
    items = [_worker_response(w) for w in workers]
    return WorkerListResponse(items=items, total=len(items))


@workers_router.put("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def upsert_assignment(
    company_id: uuid.UUID,
    assignment_id: uuid.UUID,
    payload: UpsertAssignmentRequest,
    auth: AdminDep,
) -> AssignmentResponse:
    """Create or update an assignment in the stub directory (admin only)."""
    assignment = AssignmentInfo(
        id=assignment_id,
        company_id=company_id,
        worker_id=payload.worker_id,
        display_name=payload.display_name,
    )
    get_assignment_directory().seed(assignment)  # ty: ignore[unresolved-attribute]
    return AssignmentResponse(**assignment.model_dump())


@workers_router.get("/workers/{worker_id}/assignments", response_model=list[AssignmentResponse])
async def list_worker_assignments(
    company_id: uuid.UUID,
    worker_id: uuid.UUID,
    auth: AuthDep,
) -> list[AssignmentResponse]:
    """Assignments a worker can book slots against."""
    assignments = await get_assignment_directory().list_for_worker(company_id, worker_id)
    return [AssignmentResponse(**a.model_dump()) for a in assignments]
