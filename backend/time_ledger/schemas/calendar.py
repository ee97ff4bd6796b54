# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class MonthGridResponse(BaseModel):
    """Monday-first month grid; days outside the month are null."""

    year: int
    month: int
    weeks: list[list[date | None]]
