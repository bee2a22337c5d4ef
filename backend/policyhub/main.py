"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from policyhub.core.config import settings
from policyhub.core.logging import get_logger, setup_logging
from policyhub.db.session import async_session
from policyhub.monitoring import CpuMonitor
from policyhub.scheduler import TaskScheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging("DEBUG" if settings.APP_ENV == "development" else "INFO")
    logger = get_logger("startup")
    logger.info("Application starting", env=settings.APP_ENV)

    scheduler = TaskScheduler(
        async_session,
        timezone=settings.SCHEDULER_TIMEZONE,
        sweep_interval_seconds=settings.SCHEDULER_SWEEP_INTERVAL_SECONDS,
    )
    scheduler.start()
    restored = await scheduler.restore_on_startup()
    logger.info("Scheduler ready", **restored)
    app.state.scheduler = scheduler

    monitor = CpuMonitor(
        threshold=settings.CPU_THRESHOLD_PERCENT,
        check_interval=settings.CPU_CHECK_INTERVAL_SECONDS,
        sample_seconds=settings.CPU_SAMPLE_SECONDS,
    )
    if settings.CPU_MONITOR_ENABLED:
        monitor.start()
    app.state.cpu_monitor = monitor

    yield

    await monitor.stop()
    scheduler.shutdown()
    logger.info("Application shutting down")


app = FastAPI(
    title="PolicyHub API",
    description="Insurance policy platform: bulk ingestion and scheduled messages",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """Public health-check endpoint with scheduler counters and host CPU info."""
    scheduler: TaskScheduler = app.state.scheduler
    monitor: CpuMonitor = app.state.cpu_monitor
    return {
        "status": "ok",
        "env": settings.APP_ENV,
        "scheduler_running": scheduler.running,
        "scheduler": await scheduler.get_statistics(),
        "cpu": await monitor.current_info(),
    }
