# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from time_ledger.models.base import TimestampMixin, UUIDBase


class CompanyHoliday(UUIDBase, TimestampMixin, table=True):
    """A company-wide holiday, written into worker calendars as HOLIDAY slots."""

    __tablename__ = "company_holiday"
    __table_args__ = (sa.UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),)

    company_id: uuid.UUID = Field(index=True)
    date: datetime.date
    name: str = Field(max_length=255)
    created_by: uuid.UUID | None = None
