"""Tests for settings parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from time_ledger.config import Settings


def test_cors_origins_from_comma_separated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://ops.example.com, https://hr.example.com")
    settings = Settings()
    assert settings.cors_origins == ["https://ops.example.com", "https://hr.example.com"]


def test_log_level_is_normalised() -> None:
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")
