"""Audit trail writes. Entries are added to the caller's transaction and never updated."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from time_ledger.models.audit import AuditLog

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from time_ledger.models.enums import AuditAction, AuditEntityType


def model_to_audit_dict(model: SQLModel, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Snapshot a row as JSON-safe data, optionally merged with derived values."""
    data = model.model_dump(mode="json")
    if extra:
        data.update(extra)
    return data


async def write_audit_log(
    session: AsyncSession,
    *,
    company_id: uuid.UUID,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    worker_id: uuid.UUID | None = None,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    entry = AuditLog(
        company_id=company_id,
        actor_id=actor_id,
        worker_id=worker_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry
