# lease_engine/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-19.v1"
    database_url: str = "sqlite:///./leasing.db"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Store / connection pool ----
    pool_timeout: int = 30  # seconds to wait for a pooled connection
    sql_echo: bool = False
    # create tables at startup (local sqlite); deployed stores run alembic instead
    db_auto_create: bool = True

    # ---- Lease issuance transaction bounds ----
    # max wait to obtain a connection + row locks for the unit of work
    transaction_max_wait_seconds: float = 10.0
    # max wall-clock duration of the unit of work body
    transaction_timeout_seconds: float = 15.0

    # ---- Lease terms ----
    lease_term_months: int = 12

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if self.transaction_max_wait_seconds <= 0 or self.transaction_timeout_seconds <= 0:
            raise ValueError("transaction bounds must be positive")

        if self.lease_term_months < 1:
            raise ValueError("lease_term_months must be >= 1")

        # Hard fail: wildcard CORS in prod
        if is_prod:
            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
