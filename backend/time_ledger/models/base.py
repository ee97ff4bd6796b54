from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    """Wall-clock UTC, used for audit and decision timestamps only."""
    return datetime.now(UTC)


def timestamp_field(**kwargs: Any) -> Any:
    """A timezone-aware column defaulting to now on both the client and the server."""
    return Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
        **kwargs,
    )


class UUIDBase(SQLModel):
    """Base model with a client-generated UUID v4 primary key."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    """Adds ``created_at``."""

    created_at: datetime = timestamp_field()


class UpdatedAtMixin(SQLModel):
    """Adds ``updated_at``. Never refreshed by the database; call :meth:`touch` on every write."""

    updated_at: datetime = timestamp_field()

    def touch(self) -> None:
        self.updated_at = now_utc()
