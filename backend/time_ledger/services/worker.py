# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from time_ledger.config import get_settings


def _default_allowance() -> int:
    return get_settings().default_annual_leave_days


class WorkerInfo(BaseModel):
    """Contractor record owned by the CRM side of the back office."""

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    start_date: date | None = None
    end_date: date | None = None
    termination_date: date | None = None
    annual_leave_allowance: int = Field(default_factory=_default_allowance)

    @property
    def tenure_end(self) -> date | None:
        """Last working day: the earlier of end and termination dates, if any."""
        ends = [d for d in (self.end_date, self.termination_date) if d is not None]
        return min(ends) if ends else None

    def is_active_on(self, day: date) -> bool:
        if self.start_date is None or day < self.start_date:
            return False
        tenure_end = self.tenure_end
        return tenure_end is None or day <= tenure_end


@runtime_checkable
class WorkerDirectory(Protocol):
    """Read access to worker records."""

    async def get_worker(self, company_id: uuid.UUID, worker_id: uuid.UUID) -> WorkerInfo | None:
        """Fetch a worker. Returns None if not found."""
        ...

    async def list_workers(self, company_id: uuid.UUID) -> list[WorkerInfo]:
        """List all workers for a company."""
        ...


class InMemoryWorkerDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._workers: dict[tuple[uuid.UUID, uuid.UUID], WorkerInfo] = {}

    def seed(self, worker: WorkerInfo) -> None:
        """Seed a worker for testing."""
        self._workers[(worker.company_id, worker.id)] = worker

    async def get_worker(self, company_id: uuid.UUID, worker_id: uuid.UUID) -> WorkerInfo | None:
        return self._workers.get((company_id, worker_id))

    async def list_workers(self, company_id: uuid.UUID) -> list[WorkerInfo]:
        workers = [w for w in self._workers.values() if w.company_id == company_id]
        return sorted(workers, key=lambda w: (w.last_name, w.first_name, str(w.id)))


_worker_directory: WorkerDirectory = InMemoryWorkerDirectory()


def get_worker_directory() -> WorkerDirectory:
    """FastAPI dependency for the worker directory."""
    return _worker_directory


def set_worker_directory(directory: WorkerDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _worker_directory
    _worker_directory = directory
