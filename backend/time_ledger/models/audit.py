# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from time_ledger.models.base import UUIDBase, timestamp_field


class AuditLog(UUIDBase, table=True):
    """Immutable before/after record of a ledger mutation."""

    __tablename__ = "audit_log"
    __table_args__ = (
        sa.Index("ix_audit_entity", "entity_type", "entity_id"),
        sa.Index("ix_audit_company_worker", "company_id", "worker_id"),
    )

    company_id: uuid.UUID = Field(index=True)
    actor_id: uuid.UUID
    # Worker whose calendar the mutation touched; None for company-wide records.
    worker_id: uuid.UUID | None = None
    entity_type: str = Field(max_length=50)
    entity_id: uuid.UUID
    action: str = Field(max_length=50)
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = timestamp_field(index=True)
