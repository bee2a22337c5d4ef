"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    POSTGRES_USER: str = "policyhub_user"
    POSTGRES_PASSWORD: str = "policyhub_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "policyhub_db"

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync URL for Alembic migrations (psycopg2)."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── Redis / Celery ────────────────────────
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # ── Uploads / Ingestion ───────────────────
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_UPLOAD_EXTENSIONS: list[str] = [".xlsx", ".xls", ".csv"]
    # Caller-side wait for the worker's result (matches celery task_time_limit)
    INGEST_RESULT_TIMEOUT_SECONDS: int = 1860

    # ── Scheduler ─────────────────────────────
    # Wall-clock date/time pairs are interpreted in this zone and stored per task
    SCHEDULER_TIMEZONE: str = "Asia/Kolkata"
    # 0 disables the periodic expiry sweep (startup sweep always runs)
    SCHEDULER_SWEEP_INTERVAL_SECONDS: int = 300

    # ── CPU monitor ───────────────────────────
    CPU_MONITOR_ENABLED: bool = True
    CPU_THRESHOLD_PERCENT: float = 70.0
    CPU_CHECK_INTERVAL_SECONDS: float = 5.0
    # Length of each usage sample
    CPU_SAMPLE_SECONDS: float = 1.0

    # ── Application ───────────────────────────
    APP_ENV: str = "development"

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
