# tests/test_config.py
from __future__ import annotations

import pytest

from lease_engine.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.transaction_max_wait_seconds == 10.0
    assert s.transaction_timeout_seconds == 15.0
    assert s.lease_term_months == 12


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TRANSACTION_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    s = Settings(_env_file=None)
    assert s.transaction_timeout_seconds == 3.0
    assert s.database_url == "sqlite:///./other.db"


def test_wildcard_cors_rejected_in_prod():
    with pytest.raises(ValueError):
        Settings(_env_file=None, app_env="prod", cors_allow_origins=["*"])
    Settings(_env_file=None, app_env="prod", cors_allow_origins=["https://app.example.com"])


def test_bounds_must_be_positive():
    with pytest.raises(ValueError):
        Settings(_env_file=None, transaction_timeout_seconds=0)
    with pytest.raises(ValueError):
        Settings(_env_file=None, lease_term_months=0)
