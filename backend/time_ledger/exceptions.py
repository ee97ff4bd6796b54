from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    context: dict[str, Any] | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.context = context
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Ledger business-rule violations
# ---------------------------------------------------------------------------


class InvalidPeriod(AppError):
    """A weekend, malformed date, or week start that is not a Monday."""

    def __init__(self, message: str, value: object | None = None) -> None:
        context = {"value": str(value)} if value is not None else None
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, context=context)


class SlotLocked(AppError):
    """Slot edit attempted while the owning week is submitted or approved."""

    def __init__(self, week_start: date, week_status: str) -> None:
        self.week_start = week_start
        self.week_status = week_status
        super().__init__(
            f"Week of {week_start.isoformat()} is {week_status} and cannot be edited",
            status_code=status.HTTP_409_CONFLICT,
            context={"week_start": week_start.isoformat(), "status": week_status},
        )


class SystemManagedType(AppError):
    """Direct write to a leave or holiday slot."""

    def __init__(self, entry_type: str) -> None:
        self.entry_type = entry_type
        super().__init__(
            f"{entry_type} entries are managed by the system and cannot be edited directly",
            status_code=status.HTTP_400_BAD_REQUEST,
            context={"entry_type": entry_type},
        )


class IncompleteWeek(AppError):
    """Week submitted with weekday slots still empty."""

    def __init__(self, week_start: date, missing: list[tuple[date, str]]) -> None:
        self.week_start = week_start
        self.missing = missing
        super().__init__(
            f"Week of {week_start.isoformat()} has {len(missing)} empty slot(s)",
            status_code=status.HTTP_400_BAD_REQUEST,
            context={
                "week_start": week_start.isoformat(),
                "missing": [{"date": d.isoformat(), "period": p} for d, p in missing],
            },
        )


class InvalidTransition(AppError):
    """State-machine precondition violated."""

    def __init__(self, message: str, current_status: str, action: str) -> None:
        self.current_status = current_status
        self.action = action
        super().__init__(
            message,
            status_code=status.HTTP_409_CONFLICT,
            context={"current_status": current_status, "action": action},
        )


class DateConflict(AppError):
    """Leave dates that fall on weekends, overlap active leave, or hold work entries."""

    def __init__(self, message: str, dates: list[date]) -> None:
        self.dates = dates
        super().__init__(
            message,
            status_code=status.HTTP_409_CONFLICT,
            context={"dates": [d.isoformat() for d in dates]},
        )


class LockConflict(AppError):
    """System write that would alter an already-approved week."""

    def __init__(self, week_starts: list[date]) -> None:
        self.week_starts = week_starts
        listed = ", ".join(w.isoformat() for w in week_starts)
        super().__init__(
            f"Approved week(s) must be reopened first: {listed}",
            status_code=status.HTTP_409_CONFLICT,
            context={"week_starts": [w.isoformat() for w in week_starts]},
        )


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            context=exc.context,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
