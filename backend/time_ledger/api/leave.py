# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from time_ledger.api.deps import AdminDep, AuthDep, validate_company_scope
from time_ledger.db import SessionDep
from time_ledger.exceptions import AppError
from time_ledger.models.enums import LeaveStatus, LeaveType
from time_ledger.schemas.leave import (
    CancellationPayload,
    CreateLeavePayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    RejectLeavePayload,
)
from time_ledger.services import leave as leave_service

leave_router = APIRouter(
    prefix="/companies/{company_id}/leave-requests",
    tags=["leave"],
    dependencies=[Depends(validate_company_scope)],
)


@leave_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: CreateLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Request leave for a set of weekdays."""
    return await leave_service.create_leave_request(session, auth, payload)


@leave_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    worker_id: uuid.UUID | None = Query(default=None),
    leave_type: LeaveType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests. Workers only see their own."""
    if not auth.is_manager:
        worker_id = auth.user_id
    return await leave_service.list_leave_requests(
        session,
        auth.company_id,
        status_filter.value if status_filter else None,
        worker_id,
        leave_type.value if leave_type else None,
        offset,
        limit,
    )


@leave_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    leave_request = await leave_service.get_leave_request(session, auth.company_id, request_id)
    if not auth.can_act_for(leave_request.worker_id):
        raise AppError("Leave request not found", status_code=404)
    return leave_request


@leave_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Approve a pending request and book its slots (admin only)."""
    return await leave_service.approve_leave_request(session, auth, request_id)


@leave_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    payload: RejectLeavePayload,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Reject a pending request (admin only)."""
    return await leave_service.reject_leave_request(session, auth, request_id, payload)


@leave_router.post("/{request_id}/request-cancellation", response_model=LeaveRequestResponse)
async def request_cancellation(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: CancellationPayload | None = None,
) -> LeaveRequestResponse:
    """Ask for approved leave to be cancelled."""
    return await leave_service.request_cancellation(session, auth, request_id, payload)


@leave_router.post("/{request_id}/approve-cancellation", response_model=LeaveRequestResponse)
async def approve_cancellation(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Cancel approved leave and free its slots (admin only)."""
    return await leave_service.approve_cancellation(session, auth, request_id)


@leave_router.post("/{request_id}/reject-cancellation", response_model=LeaveRequestResponse)
async def reject_cancellation(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Keep the leave as approved (admin only)."""
    return await leave_service.reject_cancellation(session, auth, request_id)
