# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class AssignmentInfo(BaseModel):
    """A client mission a worker can book slots against."""

    id: uuid.UUID
    company_id: uuid.UUID
    worker_id: uuid.UUID
    display_name: str


@runtime_checkable
class AssignmentDirectory(Protocol):
    """Read access to work-assignment records."""

    async def get_assignment(self, company_id: uuid.UUID, assignment_id: uuid.UUID) -> AssignmentInfo | None:
        """Fetch an assignment. Returns None if not found."""
        ...

    async def list_for_worker(self, company_id: uuid.UUID, worker_id: uuid.UUID) -> list[AssignmentInfo]:
        """List the assignments a worker is staffed on."""
        ...


class InMemoryAssignmentDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._assignments: dict[tuple[uuid.UUID, uuid.UUID], AssignmentInfo] = {}

    def seed(self, assignment: AssignmentInfo) -> None:
        """Seed an assignment for testing."""
        self._assignments[(assignment.company_id, assignment.id)] = assignment

    async def get_assignment(self, company_id: uuid.UUID, assignment_id: uuid.UUID) -> AssignmentInfo | None:
        return self._assignments.get((company_id, assignment_id))

    async def list_for_worker(self, company_id: uuid.UUID, worker_id: uuid.UUID) -> list[AssignmentInfo]:
        return [a for a in self._assignments.values() if a.company_id == company_id and a.worker_id == worker_id]


_assignment_directory: AssignmentDirectory = InMemoryAssignmentDirectory()


def get_assignment_directory() -> AssignmentDirectory:
    """FastAPI dependency for the assignment directory."""
    return _assignment_directory


def set_assignment_directory(directory: AssignmentDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _assignment_directory
    _assignment_directory = directory
