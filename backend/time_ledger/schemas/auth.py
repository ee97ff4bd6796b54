# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    role: str = "worker"

    @property
    def is_manager(self) -> bool:
        return self.role == "admin"

    def can_act_for(self, worker_id: uuid.UUID) -> bool:
        """Workers act on their own calendar; managers on anyone's."""
        return self.is_manager or self.user_id == worker_id
